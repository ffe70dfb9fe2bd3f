# practice_scheduler/schemas/booking_series.py
from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, Literal, List
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from practice_scheduler.schemas.availability import validate_timezone


class RecurrenceRule(BaseModel):
    """Weekly recurrence anchored at a local wall time"""
    dtstart_local: datetime = Field(..., description="First occurrence, naive local wall time")
    timezone: str = Field(..., description="IANA timezone of dtstart_local")
    duration_min: int = Field(..., gt=0)
    interval_weeks: Literal[1, 2] = 1
    by_weekday: int = Field(..., ge=0, le=6, description="0=Sunday, 6=Saturday")

    @field_validator("dtstart_local")
    @classmethod
    def require_naive(cls, v: datetime) -> datetime:
        if v.tzinfo is not None:
            raise ValueError("dtstart_local must be a naive local wall time")
        return v

    @field_validator("timezone")
    @classmethod
    def validate_tz(cls, v: str) -> str:
        return validate_timezone(v)


class Occurrence(BaseModel):
    series_id: Optional[UUID] = None
    occurrence_index: int = Field(..., ge=0)
    local_start: datetime
    local_end: datetime
    start_utc: datetime
    end_utc: datetime


class BookingSeriesRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    client_id: UUID
    timezone: str
    dtstart_local: datetime
    duration_min: int
    interval_weeks: int
    by_weekday: int
    status: Literal["active", "ended"] = "active"
    until_local: Optional[datetime] = None
    google_master_event_id: Optional[str] = None
    mode: Optional[str] = None
    location_text: Optional[str] = None
    consultation_type: Optional[str] = None

    def to_rule(self) -> RecurrenceRule:
        return RecurrenceRule(
            dtstart_local=self.dtstart_local,
            timezone=self.timezone,
            duration_min=self.duration_min,
            interval_weeks=self.interval_weeks,
            by_weekday=self.by_weekday,
        )


class CreateSeriesRequest(BaseModel):
    """Dashboard request to start a recurring booking series"""
    user_id: UUID
    client_id: UUID
    timezone: str = Field("Europe/Madrid", description="IANA timezone")
    dtstart_local: datetime = Field(..., description="First occurrence, naive local wall time")
    duration_min: int = Field(60, gt=0, le=24 * 60)
    interval_weeks: Literal[1, 2] = 1
    by_weekday: int = Field(..., ge=0, le=6, description="0=Sunday, 6=Saturday")
    billing_policy: Literal["monthly", "right_after", "24h_before"] = "24h_before"
    amount: Decimal = Field(..., ge=0)
    currency: str = Field("EUR", min_length=3, max_length=3)
    mode: Optional[str] = "online"
    location_text: Optional[str] = None
    consultation_type: Optional[str] = None
    initial_occurrences: Optional[int] = Field(None, ge=1, le=52)
    suppress_calendar_notifications: bool = False

    @field_validator("dtstart_local")
    @classmethod
    def require_naive(cls, v: datetime) -> datetime:
        if v.tzinfo is not None:
            raise ValueError("dtstart_local must not carry a UTC offset")
        return v

    @field_validator("timezone")
    @classmethod
    def validate_tz(cls, v: str) -> str:
        return validate_timezone(v)


class CancelSeriesRequest(BaseModel):
    until_local: Optional[datetime] = Field(None, description="Last local instant of the series; defaults to now")
    cancel_future_bookings: bool = False


class SeriesCreationResult(BaseModel):
    series: BookingSeriesRecord
    booking_ids: List[UUID] = Field(default_factory=list)
    skipped_indices: List[int] = Field(default_factory=list)
    google_master_event_id: Optional[str] = None


class SeriesCancellationResult(BaseModel):
    series: BookingSeriesRecord
    cancelled_booking_ids: List[UUID] = Field(default_factory=list)


class ExtensionOutcome(BaseModel):
    """Result of extending one series by one occurrence"""
    series_id: UUID
    status: Literal["created", "skipped"]
    occurrence_index: Optional[int] = None
    booking_id: Optional[UUID] = None
    reason: Optional[str] = None


class ExtensionSummary(BaseModel):
    processed: int = 0
    created: int = 0
    skipped: int = 0
    failed: int = 0
