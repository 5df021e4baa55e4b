from __future__ import annotations

import re
from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from app.application.exceptions import RecordValidationError
from app.application.ports.record_store import StoredRecord
from app.domain.entities.booking import Booking
from app.domain.entities.class_instance import ClassInstance
from app.domain.entities.class_template import ClassTemplate
from app.domain.entities.schedule import DayOfWeek

_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})$")


def normalize_time_text(value: Any) -> str:
    """Normalize "9:05" / "09:05" to zero-padded 24h "09:05"."""
    match = _TIME_RE.match(str(value).strip())
    if not match:
        raise ValueError(f"time must be HH:MM, got {value!r}")
    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        raise ValueError(f"time out of range: {value!r}")
    return f"{hour:02d}:{minute:02d}"


class _StoreDocument(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class ClassTemplateRecord(_StoreDocument):
    capacity: int = Field(gt=0)
    day_of_week: DayOfWeek = Field(alias="dayOfWeek")
    description: str = ""
    duration: int = Field(gt=0)
    price_per_class: float = Field(alias="pricePerClass", ge=0, allow_inf_nan=False)
    time: str
    type_of_class: str = Field(alias="typeOfClass", min_length=1)

    @field_validator("day_of_week", mode="before")
    @classmethod
    def _parse_day(cls, value: Any) -> DayOfWeek:
        return DayOfWeek.parse(value)

    @field_validator("time", mode="before")
    @classmethod
    def _parse_time(cls, value: Any) -> str:
        return normalize_time_text(value)


class ClassInstanceRecord(_StoreDocument):
    # Older documents reference their template as "courseId", often numeric.
    template_id: str = Field(validation_alias=AliasChoices("templateId", "template_id", "courseId"))
    date: datetime
    teacher: str
    comments: str = ""

    @field_validator("template_id", mode="before")
    @classmethod
    def _coerce_template_id(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("comments", mode="before")
    @classmethod
    def _none_comments(cls, value: Any) -> Any:
        return "" if value is None else value


class BookingRecord(_StoreDocument):
    user_id: str = Field(alias="userId", min_length=1)
    class_instance_id: str = Field(alias="classInstanceId", min_length=1)
    class_name: str = Field(alias="className")
    date: datetime
    teacher: str
    time: str
    duration: int
    price_per_class: float = Field(alias="pricePerClass", allow_inf_nan=False)
    booked_at: datetime | None = Field(default=None, alias="bookedAt")


def _invalid(kind: str, record: StoredRecord, error: ValidationError) -> RecordValidationError:
    fields = sorted({".".join(str(p) for p in err["loc"]) for err in error.errors()})
    return RecordValidationError(f"{kind} {record.id!r} has invalid field(s): {', '.join(fields)}")


def template_from_record(record: StoredRecord) -> ClassTemplate:
    try:
        parsed = ClassTemplateRecord.model_validate(record.data)
    except ValidationError as e:
        raise _invalid("class template", record, e) from e
    return ClassTemplate(
        id=record.id,
        capacity=parsed.capacity,
        day_of_week=parsed.day_of_week,
        description=parsed.description,
        duration=parsed.duration,
        price_per_class=parsed.price_per_class,
        time=parsed.time,
        type_of_class=parsed.type_of_class,
    )


def instance_from_record(record: StoredRecord) -> ClassInstance:
    try:
        parsed = ClassInstanceRecord.model_validate(record.data)
    except ValidationError as e:
        raise _invalid("class instance", record, e) from e
    return ClassInstance(
        id=record.id,
        template_id=parsed.template_id,
        date=parsed.date,
        teacher=parsed.teacher,
        comments=parsed.comments,
    )


def booking_from_record(record: StoredRecord) -> Booking:
    try:
        parsed = BookingRecord.model_validate(record.data)
    except ValidationError as e:
        raise _invalid("booking", record, e) from e
    return Booking(
        user_id=parsed.user_id,
        class_instance_id=parsed.class_instance_id,
        class_name=parsed.class_name,
        date=parsed.date,
        teacher=parsed.teacher,
        time=parsed.time,
        duration=parsed.duration,
        price_per_class=parsed.price_per_class,
        booked_at=parsed.booked_at,
    )


def booking_to_document(booking: Booking) -> dict[str, Any]:
    """Serialize a booking to a JSON-compatible store document (camelCase keys)."""
    record = BookingRecord(
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
    return record.model_dump(mode="json", by_alias=True)
