"""
Tests for the JSON file record store.
"""

from __future__ import annotations

import asyncio
import json
import tempfile
from datetime import datetime
from pathlib import Path

import pytest

from app.application.exceptions import DuplicateRecordError, StoreUnavailableError
from app.application.ports.record_store import BOOKINGS, CLASS_INSTANCES, CLASS_TEMPLATES
from app.application.use_cases.booking import BookingAttemptState, BookingManager
from app.application.use_cases.catalog import CatalogAggregator
from app.infrastructure.store.json_store import JsonRecordStore
from app.infrastructure.store.seed_data import DEMO_TEMPLATES, seed_demo_data


def test_json_store_persistence():
    """Test that records survive a new store instance on the same directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        store = JsonRecordStore(data_dir=tmpdir)
        asyncio.run(store.insert(CLASS_TEMPLATES, "1", {"typeOfClass": "Flow Yoga", "pricePerClass": 10}))

        reopened = JsonRecordStore(data_dir=tmpdir)
        record = asyncio.run(reopened.read_one(CLASS_TEMPLATES, "1"))

        assert record is not None
        assert record.data["typeOfClass"] == "Flow Yoga"
        assert asyncio.run(reopened.read_one(CLASS_TEMPLATES, "2")) is None
        assert asyncio.run(reopened.read_all(CLASS_INSTANCES)) == []
        assert not list(Path(tmpdir).glob("*.tmp"))


def test_duplicate_insert_is_rejected_and_original_kept():
    with tempfile.TemporaryDirectory() as tmpdir:
        store = JsonRecordStore(data_dir=tmpdir)
        asyncio.run(store.insert(BOOKINGS, "u1:a", {"userId": "u1", "classInstanceId": "a"}))

        with pytest.raises(DuplicateRecordError):
            asyncio.run(store.insert(BOOKINGS, "u1:a", {"userId": "u1", "classInstanceId": "other"}))

        records = asyncio.run(store.query(BOOKINGS, "userId", "u1"))
        assert [r.data["classInstanceId"] for r in records] == ["a"]


def test_concurrent_bookings_commit_once_on_disk():
    with tempfile.TemporaryDirectory() as tmpdir:
        store = JsonRecordStore(data_dir=tmpdir)

        async def scenario():
            await seed_demo_data(store, now=datetime(2024, 1, 1, 8, 0))
            record = (await CatalogAggregator(store).aggregate())[0]
            return await asyncio.gather(
                BookingManager(store).book("u1", record),
                BookingManager(store).book("u1", record),
            )

        results = asyncio.run(scenario())

        assert sorted(r.state.value for r in results) == ["blocked", "committed"]
        assert len(asyncio.run(store.query(BOOKINGS, "userId", "u1"))) == 1
        committed = next(r for r in results if r.state is BookingAttemptState.committed)
        saved = json.loads((Path(tmpdir) / "bookings.json").read_text(encoding="utf-8"))
        assert list(saved["records"]) == [committed.booking.id]


def test_corrupted_file_reports_store_unavailable():
    with tempfile.TemporaryDirectory() as tmpdir:
        (Path(tmpdir) / "class_instances.json").write_text("{not json", encoding="utf-8")
        store = JsonRecordStore(data_dir=tmpdir)

        with pytest.raises(StoreUnavailableError):
            asyncio.run(store.read_all(CLASS_INSTANCES))


def test_demo_seed_runs_once():
    with tempfile.TemporaryDirectory() as tmpdir:
        store = JsonRecordStore(data_dir=tmpdir)
        now = datetime(2024, 1, 1, 8, 0)

        written = asyncio.run(seed_demo_data(store, now=now))
        again = asyncio.run(seed_demo_data(store, now=now))
        combined = asyncio.run(CatalogAggregator(store).aggregate())

        assert written > len(DEMO_TEMPLATES)
        assert again == 0
        assert len(combined) == written - len(DEMO_TEMPLATES)
        assert all(r.date > now for r in combined)
        assert all(r.day_of_week.day_number == (r.date.weekday() + 1) % 7 for r in combined)


if __name__ == "__main__":
    test_json_store_persistence()
    test_duplicate_insert_is_rejected_and_original_kept()
    test_concurrent_bookings_commit_once_on_disk()
    test_corrupted_file_reports_store_unavailable()
    test_demo_seed_runs_once()
    print("All tests passed!")
