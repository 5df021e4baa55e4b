from __future__ import annotations

import asyncio
import json
import threading
from datetime import date, datetime
from pathlib import Path
from typing import Any

from app.application.exceptions import DuplicateRecordError, StoreUnavailableError, StoreWriteError
from app.application.ports.record_store import COLLECTIONS, RecordStorePort, StoredRecord


class JsonRecordStore(RecordStorePort):
    """One JSON file per collection. File I/O runs in a worker thread."""

    def __init__(self, data_dir: str = "./data/records") -> None:
        self._data_dir = Path(data_dir)
        self._data_dir.mkdir(parents=True, exist_ok=True)
        self._locks: dict[str, threading.Lock] = {}
        self._lock_lock = threading.Lock()  # Lock for managing locks dict

    def _get_lock(self, collection: str) -> threading.Lock:
        """Get or create a lock for a collection."""
        with self._lock_lock:
            if collection not in self._locks:
                self._locks[collection] = threading.Lock()
            return self._locks[collection]

    def _get_file_path(self, collection: str) -> Path:
        if collection not in COLLECTIONS:
            raise ValueError(f"Unknown collection: {collection!r}")
        return self._data_dir / f"{collection}.json"

    def _load_records(self, collection: str) -> dict[str, dict[str, Any]]:
        """Load a collection's records, empty if the file does not exist yet."""
        file_path = self._get_file_path(collection)
        if not file_path.exists():
            return {}

        try:
            with open(file_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            raise StoreUnavailableError(f"Could not read {file_path.name}: {e}") from e

        records = data.get("records") if isinstance(data, dict) else None
        if not isinstance(records, dict):
            raise StoreUnavailableError(f"Unexpected layout in {file_path.name}")
        return records

    def _save_records(self, collection: str, records: dict[str, dict[str, Any]]) -> None:
        """Save a collection atomically (temp file + rename)."""
        file_path = self._get_file_path(collection)
        temp_path = file_path.with_suffix(".json.tmp")

        try:
            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump({"version": 1, "records": records}, f, indent=2, ensure_ascii=False, default=_json_default)
            temp_path.replace(file_path)
        except (OSError, TypeError, ValueError) as e:
            temp_path.unlink(missing_ok=True)
            raise StoreWriteError(f"Could not write {file_path.name}: {e}") from e

    def _read_all(self, collection: str) -> list[StoredRecord]:
        with self._get_lock(collection):
            records = self._load_records(collection)
        return [StoredRecord(id=record_id, data=data) for record_id, data in records.items()]

    def _read_one(self, collection: str, record_id: str) -> StoredRecord | None:
        with self._get_lock(collection):
            data = self._load_records(collection).get(record_id)
        return StoredRecord(id=record_id, data=data) if data is not None else None

    def _query(self, collection: str, field: str, value: Any) -> list[StoredRecord]:
        return [r for r in self._read_all(collection) if r.data.get(field) == value]

    def _insert(self, collection: str, record_id: str, data: dict[str, Any]) -> StoredRecord:
        with self._get_lock(collection):
            try:
                records = self._load_records(collection)
            except StoreUnavailableError as e:
                raise StoreWriteError(str(e)) from e
            if record_id in records:
                raise DuplicateRecordError(f"{collection}/{record_id} already exists")
            records[record_id] = data
            self._save_records(collection, records)
        return StoredRecord(id=record_id, data=data)

    async def read_all(self, collection: str) -> list[StoredRecord]:
        return await asyncio.to_thread(self._read_all, collection)

    async def read_one(self, collection: str, record_id: str) -> StoredRecord | None:
        return await asyncio.to_thread(self._read_one, collection, record_id)

    async def query(self, collection: str, field: str, value: Any) -> list[StoredRecord]:
        return await asyncio.to_thread(self._query, collection, field, value)

    async def insert(self, collection: str, record_id: str, data: dict[str, Any]) -> StoredRecord:
        return await asyncio.to_thread(self._insert, collection, record_id, data)


def _json_default(value: Any) -> str:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")
