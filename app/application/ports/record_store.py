from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

CLASS_TEMPLATES = "class_templates"
CLASS_INSTANCES = "class_instances"
BOOKINGS = "bookings"

COLLECTIONS = (CLASS_TEMPLATES, CLASS_INSTANCES, BOOKINGS)


@dataclass(frozen=True)
class StoredRecord:
    id: str
    data: dict[str, Any] = field(default_factory=dict)


class RecordStorePort(ABC):
    """
    Async document access to the class_templates, class_instances and bookings collections.

    Read methods raise StoreUnavailableError when the store cannot be read.
    """

    @abstractmethod
    async def read_all(self, collection: str) -> list[StoredRecord]:
        raise NotImplementedError

    @abstractmethod
    async def read_one(self, collection: str, record_id: str) -> StoredRecord | None:
        """Point lookup. Returns None if no record has this id."""
        raise NotImplementedError

    @abstractmethod
    async def query(self, collection: str, field: str, value: Any) -> list[StoredRecord]:
        """List records where `field == value`."""
        raise NotImplementedError

    @abstractmethod
    async def insert(self, collection: str, record_id: str, data: dict[str, Any]) -> StoredRecord:
        """
        Create a record under `record_id`.

        Must be atomic with respect to the id: if a record with the same id exists
        (including one written concurrently), raise DuplicateRecordError and leave the
        existing record untouched. Raise StoreWriteError if nothing could be written.
        """
        raise NotImplementedError
