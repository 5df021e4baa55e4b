from __future__ import annotations

from datetime import datetime
from typing import Any

import pytest

from app.application.exceptions import StoreUnavailableError, StoreWriteError
from app.application.ports.record_store import BOOKINGS, CLASS_INSTANCES, CLASS_TEMPLATES
from app.domain.entities.combined_class import CombinedClassInfo
from app.domain.entities.schedule import DayOfWeek
from app.infrastructure.store.memory_store import MemoryRecordStore

# 2024-01-01 is a Monday, 2024-01-03 a Wednesday.
MONDAY = datetime(2024, 1, 1, 9, 0)
WEDNESDAY = datetime(2024, 1, 3, 18, 30)


def template_doc(**overrides: Any) -> dict[str, Any]:
    doc = {
        "capacity": 20,
        "dayOfWeek": "Monday",
        "description": "Morning flow",
        "duration": 60,
        "pricePerClass": 10,
        "time": "09:00",
        "typeOfClass": "Flow Yoga",
    }
    doc.update(overrides)
    return doc


def instance_doc(template_id: str, date: datetime, **overrides: Any) -> dict[str, Any]:
    doc = {"templateId": template_id, "date": date.isoformat(), "teacher": "Anna", "comments": ""}
    doc.update(overrides)
    return doc


def combined(
    id: str,
    price: float = 10,
    date: datetime = MONDAY,
    time: str = "09:00",
    type_of_class: str = "Flow Yoga",
) -> CombinedClassInfo:
    return CombinedClassInfo(
        id=id,
        date=date,
        teacher="Anna",
        comments="",
        capacity=20,
        day_of_week=DayOfWeek.monday,
        description="",
        duration=60,
        price_per_class=price,
        time=time,
        type_of_class=type_of_class,
    )


class FlakyStore(MemoryRecordStore):
    """Memory store that can be told to fail specific operations."""

    def __init__(self, seed=None) -> None:
        super().__init__(seed)
        self.fail_reads: set[str] = set()
        self.fail_lookups: set[str] = set()
        self.fail_queries = False
        self.fail_inserts = False

    async def read_all(self, collection):
        if collection in self.fail_reads:
            raise StoreUnavailableError(f"{collection} unavailable")
        return await super().read_all(collection)

    async def read_one(self, collection, record_id):
        if record_id in self.fail_lookups:
            raise StoreUnavailableError(f"{collection}/{record_id} unavailable")
        return await super().read_one(collection, record_id)

    async def query(self, collection, field, value):
        if self.fail_queries:
            raise StoreUnavailableError(f"{collection} query unavailable")
        return await super().query(collection, field, value)

    async def insert(self, collection, record_id, data):
        if self.fail_inserts:
            raise StoreWriteError(f"{collection} write failed")
        return await super().insert(collection, record_id, data)


@pytest.fixture
def catalog_seed() -> dict[str, dict[str, dict[str, Any]]]:
    return {
        CLASS_TEMPLATES: {
            "1": template_doc(),
            "2": template_doc(dayOfWeek="Wednesday", time="18:30", pricePerClass=15, typeOfClass="Power Yoga"),
        },
        CLASS_INSTANCES: {
            "a": instance_doc("1", MONDAY),
            "b": instance_doc("2", WEDNESDAY, teacher="Ben"),
        },
        BOOKINGS: {},
    }


@pytest.fixture
def store(catalog_seed) -> FlakyStore:
    return FlakyStore(catalog_seed)
