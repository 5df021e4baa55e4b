from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


def booking_key(user_id: str, class_instance_id: str) -> str:
    """Record id of the one booking a user may hold for a class instance."""
    return f"{user_id}:{class_instance_id}"


@dataclass(frozen=True)
class Booking:
    user_id: str
    class_instance_id: str
    # Snapshot taken when the booking is made; never refreshed.
    class_name: str
    date: datetime
    teacher: str
    time: str
    duration: int
    price_per_class: float
    booked_at: datetime | None = None

    @property
    def id(self) -> str:
        return booking_key(self.user_id, self.class_instance_id)
