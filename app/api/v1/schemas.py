from datetime import datetime

from pydantic import BaseModel, Field

from app.application.use_cases.booking import BookingOutcome, BookingResult
from app.application.use_cases.view_state import ClassListing, ViewSnapshot, ViewStatus
from app.domain.entities.booking import Booking
from app.domain.entities.schedule import DayOfWeek, SortOrder


class ClassListingSchema(BaseModel):
    id: str
    type_of_class: str
    description: str
    date: datetime
    day_of_week: DayOfWeek
    time: str
    duration: int
    price_per_class: float
    capacity: int
    teacher: str
    comments: str
    booked: bool

    @staticmethod
    def from_listing(listing: ClassListing) -> "ClassListingSchema":
        info = listing.info
        return ClassListingSchema(
            id=info.id,
            type_of_class=info.type_of_class,
            description=info.description,
            date=info.date,
            day_of_week=info.day_of_week,
            time=info.time,
            duration=info.duration,
            price_per_class=info.price_per_class,
            capacity=info.capacity,
            teacher=info.teacher,
            comments=info.comments,
            booked=listing.booked,
        )


class ClassViewSchema(BaseModel):
    day: DayOfWeek | None = None
    time: str | None = None
    sort: SortOrder
    status: ViewStatus
    generation: int
    error: str | None = None
    items: list[ClassListingSchema] = Field(default_factory=list)

    @staticmethod
    def from_snapshot(snapshot: ViewSnapshot) -> "ClassViewSchema":
        return ClassViewSchema(
            day=snapshot.day_filter,
            time=snapshot.time_filter,
            sort=snapshot.sort_order,
            status=snapshot.status,
            generation=snapshot.generation,
            error=snapshot.error,
            items=[ClassListingSchema.from_listing(item) for item in snapshot.items],
        )


class BookingSchema(BaseModel):
    id: str
    user_id: str
    class_instance_id: str
    class_name: str
    date: datetime
    teacher: str
    time: str
    duration: int
    price_per_class: float
    booked_at: datetime | None = None

    @staticmethod
    def from_booking(booking: Booking) -> "BookingSchema":
        return BookingSchema(
            id=booking.id,
            user_id=booking.user_id,
            class_instance_id=booking.class_instance_id,
            class_name=booking.class_name,
            date=booking.date,
            teacher=booking.teacher,
            time=booking.time,
            duration=booking.duration,
            price_per_class=booking.price_per_class,
            booked_at=booking.booked_at,
        )


class BookingOutcomeSchema(BaseModel):
    outcome: BookingOutcome
    message: str
    booking: BookingSchema | None = None

    @staticmethod
    def from_result(result: BookingResult) -> "BookingOutcomeSchema":
        return BookingOutcomeSchema(
            outcome=result.outcome,
            message=result.message,
            booking=BookingSchema.from_booking(result.booking) if result.booking else None,
        )


class BookingListSchema(BaseModel):
    bookings: list[BookingSchema]
