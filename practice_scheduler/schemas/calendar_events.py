# practice_scheduler/schemas/calendar_events.py
from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional
from datetime import datetime
from uuid import UUID


class ExternalBusyEvent(BaseModel):
    """Timed event read from the practitioner's Google calendar"""
    external_id: str = Field(..., description="Google event id")
    start: datetime = Field(..., description="Event start (tz-aware)")
    end: datetime = Field(..., description="Event end (tz-aware)")
    summary: Optional[str] = None

    @field_validator("end")
    @classmethod
    def end_after_start(cls, v: datetime, info) -> datetime:
        start = info.data.get("start")
        if start and v <= start:
            raise ValueError("End time must be after start time")
        return v


class CalendarEventResult(BaseModel):
    """Outcome of a create/update call against Google Calendar"""
    success: bool
    google_event_id: Optional[str] = None
    meet_link: Optional[str] = None
    error: Optional[str] = None


class CalendarEventRecord(BaseModel):
    """System-created Google event linked to a booking"""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    booking_id: UUID
    user_id: UUID
    google_event_id: str
    google_meet_link: Optional[str] = None
    event_type: str
    event_status: str
