from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any

from app.application.exceptions import DuplicateRecordError
from app.application.ports.record_store import CLASS_INSTANCES, CLASS_TEMPLATES, RecordStorePort
from app.domain.entities.schedule import DayOfWeek

logger = logging.getLogger(__name__)

DEMO_TEMPLATES: dict[str, dict[str, Any]] = {
    "1": {
        "capacity": 20,
        "dayOfWeek": "Monday",
        "description": "Gentle morning flow to start the week.",
        "duration": 60,
        "pricePerClass": 10,
        "time": "09:00",
        "typeOfClass": "Flow Yoga",
    },
    "2": {
        "capacity": 15,
        "dayOfWeek": "Wednesday",
        "description": "Strong standing sequences and balances.",
        "duration": 75,
        "pricePerClass": 15,
        "time": "18:30",
        "typeOfClass": "Power Yoga",
    },
    "3": {
        "capacity": 12,
        "dayOfWeek": "Friday",
        "description": "Long-held floor poses for deep release.",
        "duration": 60,
        "pricePerClass": 12,
        "time": "19:00",
        "typeOfClass": "Yin Yoga",
    },
    "4": {
        "capacity": 25,
        "dayOfWeek": "Saturday",
        "description": "Weekend family class, all ages welcome.",
        "duration": 45,
        "pricePerClass": 8,
        "time": "10:00",
        "typeOfClass": "Family Yoga",
    },
}

DEMO_TEACHERS = {"1": "Anna", "2": "Ben", "3": "Chloe", "4": "Anna"}


def build_demo_instances(now: datetime, weeks: int = 2) -> dict[str, dict[str, Any]]:
    """Upcoming occurrences of every demo template for the next `weeks` weeks."""
    instances: dict[str, dict[str, Any]] = {}
    for template_id, template in DEMO_TEMPLATES.items():
        target = DayOfWeek.parse(template["dayOfWeek"]).day_number
        current = (now.weekday() + 1) % 7
        days_ahead = (target - current) % 7 or 7
        hour, minute = (int(part) for part in template["time"].split(":"))
        first = (now + timedelta(days=days_ahead)).replace(hour=hour, minute=minute, second=0, microsecond=0)
        for week in range(weeks):
            occurs = first + timedelta(weeks=week)
            instance_id = f"{template_id}-{occurs.strftime('%Y%m%d')}"
            instances[instance_id] = {
                "templateId": template_id,
                "date": occurs.isoformat(),
                "teacher": DEMO_TEACHERS[template_id],
                "comments": "",
            }
    return instances


async def seed_demo_data(store: RecordStorePort, now: datetime | None = None) -> int:
    """Seed demo templates and instances into an empty catalog. Returns records written."""
    if await store.read_all(CLASS_TEMPLATES):
        logger.info("Catalog already populated, skipping demo seed")
        return 0

    written = 0
    seed = [(CLASS_TEMPLATES, DEMO_TEMPLATES), (CLASS_INSTANCES, build_demo_instances(now or datetime.now()))]
    for collection, records in seed:
        for record_id, data in records.items():
            try:
                await store.insert(collection, record_id, data)
                written += 1
            except DuplicateRecordError:
                continue
    logger.info("Seeded demo catalog", extra={"records": written})
    return written
