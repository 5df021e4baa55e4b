from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx

from app.application.exceptions import DuplicateRecordError, StoreUnavailableError, StoreWriteError
from app.application.ports.record_store import RecordStorePort, StoredRecord


class HttpRecordStore(RecordStorePort):
    """
    Record store backed by a JSON document service.

    GET  /{collection}                 -> {"records": [{"id": ..., "data": {...}}, ...]}
    GET  /{collection}?{field}={value} -> same shape, filtered
    GET  /{collection}/{id}            -> {"id": ..., "data": {...}} or 404
    PUT  /{collection}/{id}            -> create only (If-None-Match: *); 409/412 if it exists
    """

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not base_url:
            raise ValueError("RECORD_STORE_BASE_URL is required for the HTTP record store")
        headers = {"Authorization": f"Bearer {api_key}"} if api_key else {}
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers=headers,
            timeout=timeout,
            transport=transport,
        )
        self._logger = logging.getLogger(__name__)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def read_all(self, collection: str) -> list[StoredRecord]:
        return await self._list(collection, params=None)

    async def read_one(self, collection: str, record_id: str) -> StoredRecord | None:
        try:
            response = await self._client.get(_record_path(collection, record_id))
            if response.status_code == 404:
                return None
            response.raise_for_status()
            return _parse_record(response.json(), default_id=record_id)
        except (httpx.HTTPError, ValueError) as e:
            self._logger.error("Record read failed", extra={"collection": collection, "error": str(e)})
            raise StoreUnavailableError(f"Could not read {collection}/{record_id}: {e}") from e

    async def query(self, collection: str, field: str, value: Any) -> list[StoredRecord]:
        return await self._list(collection, params={field: str(value)})

    async def insert(self, collection: str, record_id: str, data: dict[str, Any]) -> StoredRecord:
        try:
            response = await self._client.put(
                _record_path(collection, record_id),
                json=data,
                headers={"If-None-Match": "*"},
            )
        except httpx.HTTPError as e:
            self._logger.error("Record write failed", extra={"collection": collection, "error": str(e)})
            raise StoreWriteError(f"Could not write {collection}/{record_id}: {e}") from e

        if response.status_code in (409, 412):
            raise DuplicateRecordError(f"{collection}/{record_id} already exists")
        if response.status_code >= 400:
            self._logger.error(
                "Record write rejected",
                extra={"collection": collection, "status": response.status_code, "error": response.text},
            )
            raise StoreWriteError(f"Could not write {collection}/{record_id}: HTTP {response.status_code}")
        return StoredRecord(id=record_id, data=dict(data))

    async def _list(self, collection: str, params: dict[str, str] | None) -> list[StoredRecord]:
        try:
            response = await self._client.get(f"/{collection}", params=params)
            response.raise_for_status()
            payload = response.json()
            return [_parse_record(item) for item in payload.get("records", [])]
        except (httpx.HTTPError, ValueError, AttributeError) as e:
            self._logger.error("Collection read failed", extra={"collection": collection, "error": str(e)})
            raise StoreUnavailableError(f"Could not read {collection}: {e}") from e


def _record_path(collection: str, record_id: str) -> str:
    # Ids are opaque and may contain "/", "?" or ":".
    return f"/{collection}/{quote(record_id, safe='')}"


def _parse_record(item: Any, default_id: str | None = None) -> StoredRecord:
    if not isinstance(item, dict):
        raise ValueError("record must be a JSON object")
    record_id = item.get("id", default_id)
    data = item.get("data")
    if record_id is None or not isinstance(data, dict):
        raise ValueError("record needs an id and a data object")
    return StoredRecord(id=str(record_id), data=data)
