from __future__ import annotations

from enum import Enum


class DayOfWeek(str, Enum):
    sunday = "Sunday"
    monday = "Monday"
    tuesday = "Tuesday"
    wednesday = "Wednesday"
    thursday = "Thursday"
    friday = "Friday"
    saturday = "Saturday"

    @property
    def day_number(self) -> int:
        """Sunday=0 .. Saturday=6."""
        return DAYS_OF_WEEK.index(self)

    @staticmethod
    def from_day_number(number: int) -> "DayOfWeek":
        return DAYS_OF_WEEK[number]

    @staticmethod
    def parse(value: "DayOfWeek | str") -> "DayOfWeek":
        if isinstance(value, DayOfWeek):
            return value
        normalized = str(value).strip().lower()
        for day in DAYS_OF_WEEK:
            if day.value.lower() == normalized:
                return day
        raise ValueError(f"Unknown day of week: {value!r}")


DAYS_OF_WEEK: tuple[DayOfWeek, ...] = (
    DayOfWeek.sunday,
    DayOfWeek.monday,
    DayOfWeek.tuesday,
    DayOfWeek.wednesday,
    DayOfWeek.thursday,
    DayOfWeek.friday,
    DayOfWeek.saturday,
)


class SortOrder(str, Enum):
    asc = "asc"
    desc = "desc"

    def toggled(self) -> "SortOrder":
        return SortOrder.desc if self is SortOrder.asc else SortOrder.asc
