"""
Tests for the wiring container: session registry bounds and store shutdown.
"""

from __future__ import annotations

import asyncio

import httpx
import pytest
from fastapi.testclient import TestClient

from app.core.config import settings
from app.infrastructure.store.http_store import HttpRecordStore
from app.main import app
from app.wiring import dependencies


@pytest.fixture
def container(store, monkeypatch):
    dependencies.reset_container()
    monkeypatch.setattr(dependencies, "_record_store", store)
    yield dependencies
    dependencies.reset_container()


def test_view_sessions_are_capped_least_recently_used_first(container, monkeypatch):
    monkeypatch.setattr(settings, "MAX_VIEW_SESSIONS", 2)

    first = container.get_view_coordinator("s1", "u1")
    container.get_view_coordinator("s2", "u2")
    assert container.get_view_coordinator("s1", "u1") is first
    container.get_view_coordinator("s3", "u3")

    assert list(container._view_coordinators) == ["s1", "s3"]
    assert container.get_view_coordinator("s1", "u1") is first
    assert container.get_view_coordinator("s2", "u2") is not None
    assert "s3" not in container._view_coordinators


def test_same_session_with_new_user_gets_a_fresh_coordinator(container):
    anonymous = container.get_view_coordinator("s1", None)
    logged_in = container.get_view_coordinator("s1", "u1")

    assert logged_in is not anonymous
    assert logged_in.user_id == "u1"
    assert len(container._view_coordinators) == 1


def test_close_record_store_closes_http_client(monkeypatch):
    store = HttpRecordStore(
        "http://records.test/v1",
        transport=httpx.MockTransport(lambda request: httpx.Response(200, json={"records": []})),
    )
    dependencies.reset_container()
    monkeypatch.setattr(dependencies, "_record_store", store)

    asyncio.run(dependencies.close_record_store())

    assert store._client.is_closed
    assert dependencies._record_store is None


def test_app_shutdown_closes_record_store(monkeypatch):
    closed = []

    class ClosingStore(HttpRecordStore):
        async def aclose(self) -> None:
            closed.append(True)
            await super().aclose()

    store = ClosingStore(
        "http://records.test/v1",
        transport=httpx.MockTransport(lambda request: httpx.Response(200, json={"records": []})),
    )
    dependencies.reset_container()
    monkeypatch.setattr(dependencies, "_record_store", store)
    monkeypatch.setattr(settings, "SEED_DEMO_DATA", False)

    with TestClient(app) as client:
        assert client.get("/health").status_code == 200
        assert closed == []

    assert closed == [True]
    dependencies.reset_container()
