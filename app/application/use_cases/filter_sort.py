from __future__ import annotations

from datetime import datetime, time
from typing import Iterable

from app.application.dto.records import normalize_time_text
from app.domain.entities.combined_class import CombinedClassInfo
from app.domain.entities.schedule import DayOfWeek, SortOrder


def day_of_week(value: datetime) -> DayOfWeek:
    """Day of the week an occurrence falls on (Sunday=0 .. Saturday=6)."""
    # date.weekday() is Monday=0 .. Sunday=6
    return DayOfWeek.from_day_number((value.weekday() + 1) % 7)


def format_time_of_day(value: time | datetime | str) -> str:
    """Zero-padded 24h "HH:MM" text used to compare against a template's time."""
    if isinstance(value, (time, datetime)):
        return f"{value.hour:02d}:{value.minute:02d}"
    return normalize_time_text(value)


def apply(
    records: Iterable[CombinedClassInfo],
    day_filter: DayOfWeek | str | None = None,
    time_filter: time | datetime | str | None = None,
    sort_order: SortOrder | str | None = None,
) -> list[CombinedClassInfo]:
    """
    Filter combined classes by day/time and order them by price.

    Pure: no I/O, the input is not modified. Both filters must match (AND).
    The price sort is stable, so equally priced classes keep their relative order.
    Without filters and sort order the input order is returned unchanged.
    """
    day = DayOfWeek.parse(day_filter) if day_filter else None
    time_text = format_time_of_day(time_filter) if time_filter else None

    result = [
        record
        for record in records
        if (day is None or day_of_week(record.date) == day)
        and (time_text is None or record.time == time_text)
    ]

    if sort_order:
        order = SortOrder(sort_order)
        result = sorted(result, key=lambda r: r.price_per_class, reverse=order is SortOrder.desc)

    return result
