from __future__ import annotations

import asyncio
import copy
from typing import Any

from app.application.exceptions import DuplicateRecordError
from app.application.ports.record_store import COLLECTIONS, RecordStorePort, StoredRecord


class MemoryRecordStore(RecordStorePort):
    def __init__(self, seed: dict[str, dict[str, dict[str, Any]]] | None = None) -> None:
        self._collections: dict[str, dict[str, dict[str, Any]]] = {name: {} for name in COLLECTIONS}
        self.write_count = 0
        for collection, records in (seed or {}).items():
            for record_id, data in records.items():
                self._get(collection)[str(record_id)] = copy.deepcopy(data)

    async def read_all(self, collection: str) -> list[StoredRecord]:
        await asyncio.sleep(0)
        return [_record(record_id, data) for record_id, data in self._get(collection).items()]

    async def read_one(self, collection: str, record_id: str) -> StoredRecord | None:
        await asyncio.sleep(0)
        data = self._get(collection).get(record_id)
        return _record(record_id, data) if data is not None else None

    async def query(self, collection: str, field: str, value: Any) -> list[StoredRecord]:
        await asyncio.sleep(0)
        return [
            _record(record_id, data)
            for record_id, data in self._get(collection).items()
            if data.get(field) == value
        ]

    async def insert(self, collection: str, record_id: str, data: dict[str, Any]) -> StoredRecord:
        await asyncio.sleep(0)
        # No await between the check and the write: the insert is atomic on the event loop.
        records = self._get(collection)
        if record_id in records:
            raise DuplicateRecordError(f"{collection}/{record_id} already exists")
        records[record_id] = copy.deepcopy(data)
        self.write_count += 1
        return _record(record_id, data)

    def _get(self, collection: str) -> dict[str, dict[str, Any]]:
        try:
            return self._collections[collection]
        except KeyError:
            raise ValueError(f"Unknown collection: {collection!r}") from None


def _record(record_id: str, data: dict[str, Any]) -> StoredRecord:
    return StoredRecord(id=record_id, data=copy.deepcopy(data))
