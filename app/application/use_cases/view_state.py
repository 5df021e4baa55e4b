from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, time
from enum import Enum

from app.application.exceptions import RecordStoreError
from app.application.use_cases import filter_sort
from app.application.use_cases.booking import BookingManager, BookingResult
from app.application.use_cases.catalog import CatalogAggregator
from app.domain.entities.combined_class import CombinedClassInfo
from app.domain.entities.schedule import DayOfWeek, SortOrder


class ViewStatus(str, Enum):
    idle = "idle"
    loading = "loading"
    ready = "ready"
    failed = "failed"


@dataclass(frozen=True)
class ClassListing:
    info: CombinedClassInfo
    booked: bool


@dataclass(frozen=True)
class ViewSnapshot:
    day_filter: DayOfWeek | None
    time_filter: str | None  # "HH:MM"
    sort_order: SortOrder
    status: ViewStatus
    generation: int
    items: tuple[ClassListing, ...]
    error: str | None = None


_UNSET = object()


class ViewStateCoordinator:
    """
    Browsing state for one session: filter/sort selections and the class list they produce.

    Every selection change reloads the catalog. Each load is tagged with a generation
    number; a load that finishes after a newer one was started is discarded, so the
    displayed list always comes from the latest request.
    """

    def __init__(
        self,
        aggregator: CatalogAggregator,
        booking_manager: BookingManager,
        user_id: str | None = None,
        sort_order: SortOrder = SortOrder.asc,
        load_timeout: float | None = 10.0,
    ) -> None:
        self._aggregator = aggregator
        self._booking_manager = booking_manager
        self._user_id = user_id
        self._load_timeout = load_timeout

        self._day_filter: DayOfWeek | None = None
        self._time_filter: str | None = None
        self._sort_order = SortOrder(sort_order)

        self._generation = 0
        self._records: list[CombinedClassInfo] = []
        self._status = ViewStatus.idle
        self._error: str | None = None
        self._logger = logging.getLogger(__name__)

    @property
    def user_id(self) -> str | None:
        return self._user_id

    @property
    def status(self) -> ViewStatus:
        return self._status

    @property
    def generation(self) -> int:
        return self._generation

    async def refresh(self) -> ViewSnapshot:
        self._generation += 1
        generation = self._generation
        day, time_text, order = self._day_filter, self._time_filter, self._sort_order
        self._status = ViewStatus.loading
        self._error = None

        try:
            records = await asyncio.wait_for(self._load(), timeout=self._load_timeout)
        except (RecordStoreError, asyncio.TimeoutError) as e:
            if generation != self._generation:
                self._logger.info("Discarding failed stale load", extra={"generation": generation})
                return self.snapshot()
            self._records = []
            self._status = ViewStatus.failed
            self._error = str(e) or "Timed out loading classes"
            self._logger.error(
                "Error loading classes",
                extra={"generation": generation, "error": self._error},
            )
            return self.snapshot()

        if generation != self._generation:
            self._logger.info("Discarding stale load", extra={"generation": generation})
            return self.snapshot()

        self._records = filter_sort.apply(records, day, time_text, order)
        self._status = ViewStatus.ready
        return self.snapshot()

    async def _load(self) -> list[CombinedClassInfo]:
        records = await self._aggregator.aggregate()
        if self._user_id:
            try:
                await self._booking_manager.list_bookings(self._user_id)
            except RecordStoreError as e:
                # Booked flags fall back to the cached set.
                self._logger.warning(
                    "Could not refresh booked classes",
                    extra={"user_id": self._user_id, "error": str(e)},
                )
        return records

    async def set_day_filter(self, day: DayOfWeek | str | None) -> ViewSnapshot:
        return await self.update_selections(day_filter=day)

    async def set_time_filter(self, value: time | datetime | str | None) -> ViewSnapshot:
        return await self.update_selections(time_filter=value)

    async def set_sort_order(self, order: SortOrder | str) -> ViewSnapshot:
        return await self.update_selections(sort_order=order)

    async def toggle_sort_order(self) -> ViewSnapshot:
        return await self.update_selections(sort_order=self._sort_order.toggled())

    async def update_selections(
        self,
        day_filter: DayOfWeek | str | None | object = _UNSET,
        time_filter: time | datetime | str | None | object = _UNSET,
        sort_order: SortOrder | str | object = _UNSET,
    ) -> ViewSnapshot:
        """Change any of the selections and reload. Invalid values raise ValueError and change nothing."""
        day = self._day_filter
        time_text = self._time_filter
        order = self._sort_order
        if day_filter is not _UNSET:
            day = DayOfWeek.parse(day_filter) if day_filter else None
        if time_filter is not _UNSET:
            time_text = filter_sort.format_time_of_day(time_filter) if time_filter else None
        if sort_order is not _UNSET:
            order = SortOrder(sort_order)

        self._day_filter, self._time_filter, self._sort_order = day, time_text, order
        return await self.refresh()

    def snapshot(self) -> ViewSnapshot:
        booked = self._booking_manager.booked_ids(self._user_id)
        return ViewSnapshot(
            day_filter=self._day_filter,
            time_filter=self._time_filter,
            sort_order=self._sort_order,
            status=self._status,
            generation=self._generation,
            items=tuple(ClassListing(info=r, booked=r.id in booked) for r in self._records),
            error=self._error,
        )

    def find_item(self, class_instance_id: str) -> CombinedClassInfo | None:
        for record in self._records:
            if record.id == class_instance_id:
                return record
        return None

    async def book(self, item: CombinedClassInfo) -> BookingResult:
        return await self._booking_manager.book(self._user_id, item)
