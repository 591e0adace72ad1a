from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from teabooking.api.dependencies import get_booking_repo
from teabooking.api.errors import store_error
from teabooking.core.exceptions import DatabaseError
from teabooking.core.logging import get_logger
from teabooking.models.booking import BookingCreate, BookingUpdate
from teabooking.repositories.bookings import BookingRepository

logger = get_logger(__name__)

router = APIRouter(prefix="/api/bookings", tags=["bookings"])


def _not_found() -> JSONResponse:
    return JSONResponse(
        status_code=404,
        content={"success": False, "message": "Booking not found"},
    )


@router.get("")
async def list_bookings(
    booking_repo: BookingRepository = Depends(get_booking_repo),
) -> JSONResponse:
    """Return every booking, newest first."""
    try:
        bookings = await booking_repo.list_all()
    except DatabaseError as exc:
        return store_error("Error fetching bookings", exc)
    return JSONResponse(content=[b.to_json() for b in bookings])


@router.post("")
async def create_booking(
    body: BookingCreate,
    booking_repo: BookingRepository = Depends(get_booking_repo),
) -> JSONResponse:
    try:
        booking = await booking_repo.add(body)
    except DatabaseError as exc:
        return store_error("Error creating booking", exc)
    logger.info("Booking created: id=%s location=%s", booking.id, booking.location)
    return JSONResponse(content={"success": True, "booking": booking.to_json()})


@router.put("/{booking_id}")
async def update_booking(
    booking_id: str,
    body: BookingUpdate,
    phone: Optional[str] = Query(None),
    booking_repo: BookingRepository = Depends(get_booking_repo),
) -> JSONResponse:
    """Update status and ETA.  A ``phone`` in the body or query must match."""
    try:
        booking = await booking_repo.update(
            booking_id, body.changes(), phone=body.phone or phone
        )
    except DatabaseError as exc:
        return store_error("Error updating booking", exc)
    if booking is None:
        return _not_found()
    logger.info("Booking updated: id=%s status=%s", booking.id, booking.status)
    return JSONResponse(content={"success": True, "booking": booking.to_json()})


@router.delete("/{booking_id}")
async def delete_booking(
    booking_id: str,
    booking_repo: BookingRepository = Depends(get_booking_repo),
) -> JSONResponse:
    try:
        removed = await booking_repo.delete(booking_id)
    except DatabaseError as exc:
        return store_error("Error deleting booking", exc)
    if not removed:
        return _not_found()
    logger.info("Booking deleted: id=%s", booking_id)
    return JSONResponse(content={"success": True})
