from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from app.domain.entities.class_instance import ClassInstance
from app.domain.entities.class_template import ClassTemplate
from app.domain.entities.schedule import DayOfWeek


@dataclass(frozen=True)
class CombinedClassInfo:
    """An instance joined with its resolved template. Never persisted."""

    id: str
    date: datetime
    teacher: str
    comments: str
    capacity: int
    day_of_week: DayOfWeek
    description: str
    duration: int
    price_per_class: float
    time: str
    type_of_class: str

    @staticmethod
    def combine(instance: ClassInstance, template: ClassTemplate) -> "CombinedClassInfo":
        return CombinedClassInfo(
            id=instance.id,
            date=instance.date,
            teacher=instance.teacher,
            comments=instance.comments,
            capacity=template.capacity,
            day_of_week=template.day_of_week,
            description=template.description,
            duration=template.duration,
            price_per_class=template.price_per_class,
            time=template.time,
            type_of_class=template.type_of_class,
        )
