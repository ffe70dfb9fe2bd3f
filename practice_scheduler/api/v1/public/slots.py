# practice_scheduler/api/v1/public/slots.py
# Public booking page endpoints - thin HTTP layer
from fastapi import APIRouter, Depends, HTTPException, Query
from typing import Optional

from practice_scheduler.api.dependencies import get_availability_service, get_practitioner_repository
from practice_scheduler.config.settings import get_settings
from practice_scheduler.repositories.practitioner_repository import PractitionerRepository
from practice_scheduler.schemas.availability import AvailableSlotsResponse
from practice_scheduler.services.availability.availability_service import AvailabilityService

settings = get_settings()

router = APIRouter(tags=["public-slots"])


@router.get("/available-slots", response_model=AvailableSlotsResponse)
async def get_available_slots(
        username: str = Query(..., description="Practitioner username"),
        month: str = Query(..., description="YYYY-MM, YYYY-MM-DD or ISO datetime"),
        tz: Optional[str] = Query(None, description="IANA timezone; defaults to the practitioner's"),
        window: Optional[str] = Query(None, description="Fallback HH:MM-HH:MM when no weekly rules exist"),
        duration: Optional[int] = Query(None, ge=5, le=480, description="Slot length in minutes"),
        practitioners: PractitionerRepository = Depends(get_practitioner_repository),
        availability: AvailabilityService = Depends(get_availability_service),
):
    """
    Bookable slots of a practitioner for one month.
    Slots starting within the booking lead time are not offered.
    """
    practitioner = practitioners.get_by_username(username)
    if not practitioner:
        raise HTTPException(status_code=404, detail="Practitioner not found")

    duration_minutes = duration or settings.DEFAULT_SLOT_DURATION_MINUTES
    slots = await availability.compute_monthly_slots(
        practitioner.id,
        month,
        timezone=tz or practitioner.timezone,
        fallback_window=window or settings.DEFAULT_AVAILABILITY_WINDOW,
        duration_minutes=duration_minutes,
    )
    slots = AvailabilityService.filter_by_lead_time(slots, settings.BOOKING_LEAD_TIME_HOURS)

    return AvailableSlotsResponse(
        user_id=practitioner.id,
        month=month,
        timezone=slots.timezone,
        duration_minutes=duration_minutes,
        slots_by_day=slots.slots_by_day,
        days_with_slots=slots.days_with_slots,
        degraded=slots.degraded,
    )
