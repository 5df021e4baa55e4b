"""
Tests for validating store documents into domain records.
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from app.application.dto.records import (
    booking_from_record,
    booking_to_document,
    instance_from_record,
    template_from_record,
)
from app.application.exceptions import RecordValidationError
from app.application.ports.record_store import StoredRecord
from app.domain.entities.booking import Booking
from app.domain.entities.schedule import DayOfWeek

from conftest import MONDAY, instance_doc, template_doc


def test_template_maps_camel_case_fields():
    template = template_from_record(StoredRecord(id="1", data=template_doc(time="9:05")))

    assert template.id == "1"
    assert template.day_of_week is DayOfWeek.monday
    assert template.price_per_class == 10
    assert template.time == "09:05"
    assert template.type_of_class == "Flow Yoga"


@pytest.mark.parametrize(
    "overrides",
    [
        {"pricePerClass": None},
        {"pricePerClass": float("nan")},
        {"pricePerClass": -1},
        {"capacity": 0},
        {"duration": 0},
        {"dayOfWeek": "Someday"},
        {"time": "25:00"},
    ],
)
def test_malformed_template_is_rejected(overrides):
    with pytest.raises(RecordValidationError):
        template_from_record(StoredRecord(id="1", data=template_doc(**overrides)))


def test_template_missing_price_is_rejected():
    data = template_doc()
    del data["pricePerClass"]
    with pytest.raises(RecordValidationError, match="pricePerClass"):
        template_from_record(StoredRecord(id="1", data=data))


def test_instance_accepts_legacy_numeric_course_id():
    data = {"courseId": 7, "date": MONDAY.isoformat(), "teacher": "Anna", "comments": None}
    instance = instance_from_record(StoredRecord(id="a", data=data))

    assert instance.template_id == "7"
    assert instance.date == MONDAY
    assert instance.comments == ""


def test_instance_without_template_reference_is_rejected():
    data = instance_doc("1", MONDAY)
    del data["templateId"]
    with pytest.raises(RecordValidationError):
        instance_from_record(StoredRecord(id="a", data=data))


def test_booking_document_uses_store_field_names():
    booking = Booking(
        user_id="u1",
        class_instance_id="a",
        class_name="Flow Yoga",
        date=MONDAY,
        teacher="Anna",
        time="09:00",
        duration=60,
        price_per_class=10,
        booked_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )
    doc = booking_to_document(booking)

    assert doc["userId"] == "u1"
    assert doc["classInstanceId"] == "a"
    assert doc["className"] == "Flow Yoga"
    assert doc["date"] == "2024-01-01T09:00:00"
    assert booking_from_record(StoredRecord(id=booking.id, data=doc)) == booking
    assert booking.id == "u1:a"
