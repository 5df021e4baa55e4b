from __future__ import annotations

from dataclasses import dataclass

from app.domain.entities.schedule import DayOfWeek


@dataclass(frozen=True)
class ClassTemplate:
    id: str
    capacity: int
    day_of_week: DayOfWeek
    description: str
    duration: int  # minutes
    price_per_class: float
    time: str  # "HH:MM", 24h
    type_of_class: str
