# practice_scheduler/api/v1/dashboard/availability.py
from fastapi import APIRouter, Depends, Query
from typing import List
from uuid import UUID

from practice_scheduler.api.dependencies import get_availability_repository
from practice_scheduler.repositories.availability_repository import AvailabilityRepository
from practice_scheduler.schemas.availability import AvailabilityRuleRecord, ReplaceAvailabilityRequest

router = APIRouter(prefix="/availability", tags=["dashboard-availability"])


@router.get("", response_model=List[AvailabilityRuleRecord])
async def get_weekly_availability(
        user_id: UUID = Query(..., description="Practitioner ID"),
        repository: AvailabilityRepository = Depends(get_availability_repository),
):
    """Weekly availability rules, ordered by weekday then start time"""
    return repository.get_weekly_availability(user_id)


@router.put("", response_model=List[AvailabilityRuleRecord])
async def replace_weekly_availability(
        payload: ReplaceAvailabilityRequest,
        user_id: UUID = Query(..., description="Practitioner ID"),
        repository: AvailabilityRepository = Depends(get_availability_repository),
):
    """
    Replace the whole weekly schedule.
    Windows on the same weekday must not overlap; an empty list removes all rules.
    """
    return repository.replace_weekly_availability(user_id, payload.rules)
