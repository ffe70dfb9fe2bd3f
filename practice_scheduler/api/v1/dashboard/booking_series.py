# practice_scheduler/api/v1/dashboard/booking_series.py
from fastapi import APIRouter, Depends, Path
from uuid import UUID

from practice_scheduler.api.dependencies import get_booking_series_service
from practice_scheduler.schemas.booking_series import (
    CancelSeriesRequest,
    CreateSeriesRequest,
    SeriesCancellationResult,
    SeriesCreationResult,
)
from practice_scheduler.services.booking_series.booking_series_service import BookingSeriesService

router = APIRouter(prefix="/booking-series", tags=["dashboard-booking-series"])


@router.post("", response_model=SeriesCreationResult, status_code=201)
async def create_booking_series(
        payload: CreateSeriesRequest,
        service: BookingSeriesService = Depends(get_booking_series_service),
):
    """Create a weekly or bi-weekly series and book its first occurrences"""
    return await service.create_series(payload)


@router.post("/{series_id}/cancel", response_model=SeriesCancellationResult)
async def cancel_booking_series(
        payload: CancelSeriesRequest,
        series_id: UUID = Path(..., description="The series ID"),
        service: BookingSeriesService = Depends(get_booking_series_service),
):
    return await service.cancel_series(series_id, payload)
