from __future__ import annotations

import logging

from fastapi import APIRouter, Header, HTTPException, Query
from fastapi.responses import JSONResponse

from app.api.v1.schemas import (
    BookingListSchema, BookingOutcomeSchema, BookingSchema, ClassViewSchema,
)
from app.application.exceptions import RecordStoreError
from app.application.use_cases.booking import BookingAttemptState, BookingError, BookingOutcome, BookingResult
from app.application.use_cases.view_state import ViewStateCoordinator, ViewStatus
from app.wiring.dependencies import get_booking_manager, get_view_coordinator

router = APIRouter()
logger = logging.getLogger(__name__)

OUTCOME_STATUS_CODES = {
    BookingOutcome.success: 201,
    BookingOutcome.already_booked: 409,
    BookingOutcome.not_authenticated: 401,
    BookingOutcome.failure: 503,
}


def _coordinator(user_id: str | None, session_id: str | None) -> ViewStateCoordinator:
    session_key = session_id or user_id or "anonymous"
    return get_view_coordinator(session_key, user_id or None)


@router.get("/classes", response_model=ClassViewSchema)
async def list_classes(
    day: str | None = Query(None, description="Day name, empty to clear"),
    time: str | None = Query(None, description="HH:MM, empty to clear"),
    sort: str | None = Query(None, description="asc or desc"),
    x_user_id: str | None = Header(None),
    x_session_id: str | None = Header(None),
):
    """Apply the given selections (omitted ones stay as they are) and reload the list."""
    coordinator = _coordinator(x_user_id, x_session_id)
    changes: dict[str, str | None] = {}
    if day is not None:
        changes["day_filter"] = day or None
    if time is not None:
        changes["time_filter"] = time or None
    if sort:
        changes["sort_order"] = sort
    try:
        snapshot = await coordinator.update_selections(**changes)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return ClassViewSchema.from_snapshot(snapshot)


@router.get("/classes/view", response_model=ClassViewSchema)
async def current_view(
    x_user_id: str | None = Header(None),
    x_session_id: str | None = Header(None),
):
    coordinator = _coordinator(x_user_id, x_session_id)
    return ClassViewSchema.from_snapshot(coordinator.snapshot())


@router.post("/classes/sort/toggle", response_model=ClassViewSchema)
async def toggle_sort(
    x_user_id: str | None = Header(None),
    x_session_id: str | None = Header(None),
):
    coordinator = _coordinator(x_user_id, x_session_id)
    return ClassViewSchema.from_snapshot(await coordinator.toggle_sort_order())


@router.post("/classes/{class_instance_id}/book", response_model=BookingOutcomeSchema)
async def book_class(
    class_instance_id: str,
    x_user_id: str | None = Header(None),
    x_session_id: str | None = Header(None),
):
    coordinator = _coordinator(x_user_id, x_session_id)
    item = coordinator.find_item(class_instance_id)
    if item is None:
        await coordinator.refresh()
        item = coordinator.find_item(class_instance_id)
        if item is None and coordinator.status is ViewStatus.failed:
            # The list could not be loaded, so the class may well exist.
            return _outcome_response(
                BookingResult(state=BookingAttemptState.failed, error=BookingError.STORE_UNAVAILABLE)
            )
    if item is None:
        raise HTTPException(status_code=404, detail="Class not found")

    return _outcome_response(await coordinator.book(item))


def _outcome_response(result: BookingResult) -> JSONResponse:
    body = BookingOutcomeSchema.from_result(result)
    return JSONResponse(status_code=OUTCOME_STATUS_CODES[result.outcome], content=body.model_dump(mode="json"))


@router.get("/bookings", response_model=BookingListSchema)
async def list_bookings(x_user_id: str | None = Header(None)):
    if not x_user_id:
        raise HTTPException(status_code=401, detail="You must be logged in to view booked classes.")
    try:
        bookings = await get_booking_manager().list_user_bookings(x_user_id)
    except RecordStoreError as e:
        logger.error("Error fetching booked classes", extra={"user_id": x_user_id, "error": str(e)})
        raise HTTPException(status_code=503, detail="Failed to fetch booked classes. Please try again.")
    return BookingListSchema(bookings=[BookingSchema.from_booking(b) for b in bookings])
