from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum, auto
from typing import Callable

from app.application.dto.records import booking_from_record, booking_to_document
from app.application.exceptions import DuplicateRecordError, RecordStoreError, RecordValidationError
from app.application.ports.record_store import BOOKINGS, RecordStorePort
from app.domain.entities.booking import Booking
from app.domain.entities.combined_class import CombinedClassInfo


class BookingAttemptState(str, Enum):
    idle = "idle"
    checking = "checking"
    blocked = "blocked"
    unauthenticated = "unauthenticated"
    committing = "committing"
    committed = "committed"
    failed = "failed"


class BookingError(Enum):
    UNAUTHENTICATED = auto()
    ALREADY_BOOKED = auto()
    STORE_UNAVAILABLE = auto()
    WRITE_FAILED = auto()


class BookingOutcome(str, Enum):
    already_booked = "already_booked"
    success = "success"
    failure = "failure"
    not_authenticated = "not_authenticated"


OUTCOME_MESSAGES = {
    BookingOutcome.not_authenticated: "You must be logged in to book a class.",
    BookingOutcome.already_booked: "You have already booked this class.",
    BookingOutcome.success: "Class booked successfully!",
    BookingOutcome.failure: "Failed to book class. Please try again.",
}


@dataclass(frozen=True)
class BookingResult:
    state: BookingAttemptState
    booking: Booking | None = None
    error: BookingError | None = None

    @property
    def outcome(self) -> BookingOutcome:
        if self.state is BookingAttemptState.committed:
            return BookingOutcome.success
        if self.error is BookingError.UNAUTHENTICATED:
            return BookingOutcome.not_authenticated
        if self.error is BookingError.ALREADY_BOOKED:
            return BookingOutcome.already_booked
        return BookingOutcome.failure

    @property
    def message(self) -> str:
        return OUTCOME_MESSAGES[self.outcome]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _date_sort_key(booking: Booking) -> datetime:
    # Stored dates may or may not carry an offset; naive ones are taken as UTC.
    if booking.date.tzinfo is None:
        return booking.date.replace(tzinfo=timezone.utc)
    return booking.date


class BookingManager:
    """
    Books class instances for users, at most once per (user, class instance).

    Keeps a per-user cache of booked class instance ids so views can flag booked
    classes without reloading. Bookings are never deleted, so the cache only grows.
    """

    def __init__(self, store: RecordStorePort, clock: Callable[[], datetime] = _utcnow) -> None:
        self._store = store
        self._clock = clock
        self._booked: dict[str, set[str]] = {}
        self._logger = logging.getLogger(__name__)

    async def list_bookings(self, user_id: str) -> set[str]:
        """Class instance ids the user has booked. Raises StoreUnavailableError."""
        records = await self._store.query(BOOKINGS, "userId", user_id)
        ids = {str(r.data["classInstanceId"]) for r in records if r.data.get("classInstanceId")}
        return set(self._remember(user_id, *ids))

    async def list_user_bookings(self, user_id: str) -> list[Booking]:
        """Full booking records for the user, ordered by class date."""
        records = await self._store.query(BOOKINGS, "userId", user_id)
        bookings: list[Booking] = []
        for record in records:
            try:
                bookings.append(booking_from_record(record))
            except RecordValidationError as e:
                self._logger.warning("Skipping malformed booking", extra={"user_id": user_id, "reason": str(e)})
        self._remember(user_id, *(b.class_instance_id for b in bookings))
        return sorted(bookings, key=_date_sort_key)

    def is_booked(self, user_id: str | None, class_instance_id: str) -> bool:
        if not user_id:
            return False
        return class_instance_id in self._booked.get(user_id, ())

    def booked_ids(self, user_id: str | None) -> frozenset[str]:
        if not user_id:
            return frozenset()
        return frozenset(self._booked.get(user_id, ()))

    async def book(self, user_id: str | None, record: CombinedClassInfo) -> BookingResult:
        if not user_id:
            self._logger.info("Booking refused, not authenticated", extra={"class_instance_id": record.id})
            return BookingResult(state=BookingAttemptState.unauthenticated, error=BookingError.UNAUTHENTICATED)

        # Duplicate check. The store's unique record id is what actually enforces it.
        if self.is_booked(user_id, record.id):
            return self._already_booked(user_id, record.id)
        try:
            booked = await self.list_bookings(user_id)
        except RecordStoreError as e:
            self._logger.error(
                "Could not check existing bookings",
                extra={"user_id": user_id, "class_instance_id": record.id, "error": str(e)},
            )
            return BookingResult(state=BookingAttemptState.failed, error=BookingError.STORE_UNAVAILABLE)
        if record.id in booked:
            return self._already_booked(user_id, record.id)

        booking = Booking(
            user_id=user_id,
            class_instance_id=record.id,
            class_name=record.type_of_class,
            date=record.date,
            teacher=record.teacher,
            time=record.time,
            duration=record.duration,
            price_per_class=record.price_per_class,
            booked_at=self._clock(),
        )
        try:
            await self._store.insert(BOOKINGS, booking.id, booking_to_document(booking))
        except DuplicateRecordError:
            # Another session won the race.
            return self._already_booked(user_id, record.id)
        except RecordStoreError as e:
            self._logger.error(
                "Error creating booking",
                extra={"user_id": user_id, "class_instance_id": record.id, "error": str(e)},
            )
            return BookingResult(state=BookingAttemptState.failed, error=BookingError.WRITE_FAILED)

        self._remember(user_id, record.id)
        self._logger.info("Class booked", extra={"user_id": user_id, "class_instance_id": record.id})
        return BookingResult(state=BookingAttemptState.committed, booking=booking)

    def _already_booked(self, user_id: str, class_instance_id: str) -> BookingResult:
        self._remember(user_id, class_instance_id)
        self._logger.info(
            "Booking blocked, already booked",
            extra={"user_id": user_id, "class_instance_id": class_instance_id},
        )
        return BookingResult(state=BookingAttemptState.blocked, error=BookingError.ALREADY_BOOKED)

    def _remember(self, user_id: str, *class_instance_ids: str) -> set[str]:
        booked = self._booked.setdefault(user_id, set())
        booked.update(class_instance_ids)
        return booked
