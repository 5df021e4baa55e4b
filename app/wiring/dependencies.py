from collections import OrderedDict
from functools import lru_cache
import logging

from app.core.config import settings
from app.application.ports.record_store import RecordStorePort
from app.application.use_cases.booking import BookingManager
from app.application.use_cases.catalog import CatalogAggregator
from app.application.use_cases.view_state import ViewStateCoordinator
from app.domain.entities.schedule import SortOrder
from app.infrastructure.store.http_store import HttpRecordStore
from app.infrastructure.store.json_store import JsonRecordStore
from app.infrastructure.store.memory_store import MemoryRecordStore


_record_store: RecordStorePort | None = None
_view_coordinators: OrderedDict[str, ViewStateCoordinator] = OrderedDict()


def get_record_store() -> RecordStorePort:
    global _record_store
    if _record_store is None:
        provider = settings.STORE_PROVIDER.lower()
        logger = logging.getLogger(__name__)
        if provider == "json":
            _record_store = JsonRecordStore(data_dir=settings.DATA_DIR)
        elif provider == "http":
            _record_store = HttpRecordStore(
                base_url=settings.RECORD_STORE_BASE_URL or "",
                api_key=settings.RECORD_STORE_API_KEY,
                timeout=settings.STORE_TIMEOUT_SECONDS,
            )
        elif provider == "memory":
            _record_store = MemoryRecordStore()
        else:
            raise ValueError(f"Unknown STORE_PROVIDER: {settings.STORE_PROVIDER!r}")
        logger.info("Using %s", type(_record_store).__name__)
    return _record_store


def get_catalog_aggregator() -> CatalogAggregator:
    return CatalogAggregator(store=get_record_store())


@lru_cache
def get_booking_manager() -> BookingManager:
    # Shared so every session sees the same booked-class cache.
    return BookingManager(store=get_record_store())


def get_view_coordinator(session_key: str, user_id: str | None) -> ViewStateCoordinator:
    coordinator = _view_coordinators.get(session_key)
    if coordinator is None or coordinator.user_id != user_id:
        coordinator = ViewStateCoordinator(
            aggregator=get_catalog_aggregator(),
            booking_manager=get_booking_manager(),
            user_id=user_id,
            sort_order=SortOrder(settings.DEFAULT_SORT_ORDER),
            load_timeout=settings.STORE_TIMEOUT_SECONDS,
        )
        _view_coordinators[session_key] = coordinator
    _view_coordinators.move_to_end(session_key)
    # Least recently used sessions go first.
    while len(_view_coordinators) > max(settings.MAX_VIEW_SESSIONS, 1):
        evicted, _ = _view_coordinators.popitem(last=False)
        logging.getLogger(__name__).info("Dropping idle view session %s", evicted)
    return coordinator


async def close_record_store() -> None:
    """Release the record store's connections, if it holds any."""
    global _record_store
    store, _record_store = _record_store, None
    aclose = getattr(store, "aclose", None)
    if aclose is not None:
        await aclose()
    get_booking_manager.cache_clear()
    _view_coordinators.clear()


def reset_container() -> None:
    """Drop cached singletons (used by tests and after settings changes)."""
    global _record_store
    _record_store = None
    _view_coordinators.clear()
    get_booking_manager.cache_clear()
