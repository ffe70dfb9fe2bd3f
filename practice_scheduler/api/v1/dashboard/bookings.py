# practice_scheduler/api/v1/dashboard/bookings.py
from fastapi import APIRouter, Depends, Path, Query
from uuid import UUID

from practice_scheduler.api.dependencies import get_booking_orchestrator
from practice_scheduler.schemas.bookings import BookingResult
from practice_scheduler.services.booking.booking_orchestrator import BookingOrchestrator

router = APIRouter(prefix="/bookings", tags=["dashboard-bookings"])


@router.post("/{booking_id}/confirm", response_model=BookingResult)
async def confirm_booking(
        booking_id: UUID = Path(..., description="The booking ID"),
        suppress_notifications: bool = Query(False, description="Do not email calendar invitations"),
        orchestrator: BookingOrchestrator = Depends(get_booking_orchestrator),
):
    """Confirm a pending booking and update its calendar event"""
    return await orchestrator.confirm_booking(booking_id, suppress_calendar_notifications=suppress_notifications)
