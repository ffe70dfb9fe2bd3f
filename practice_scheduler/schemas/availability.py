# practice_scheduler/schemas/availability.py
from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing import Optional, Dict, List, Literal
from datetime import datetime, time
from uuid import UUID
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


def parse_hhmm(value: str) -> time:
    """Parse a strict HH:MM string into a time"""
    if not isinstance(value, str) or len(value) != 5 or value[2] != ":":
        raise ValueError(f"Expected HH:MM, got {value!r}")
    hours, minutes = value[:2], value[3:]
    if not (hours.isdigit() and minutes.isdigit()):
        raise ValueError(f"Expected HH:MM, got {value!r}")
    h, m = int(hours), int(minutes)
    if h > 23 or m > 59:
        raise ValueError(f"Time out of range: {value!r}")
    return time(h, m)


def validate_timezone(value: str) -> str:
    try:
        ZoneInfo(value)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValueError(f"Unknown timezone: {value!r}")
    return value


class TimeWindow(BaseModel):
    """Local wall-clock window within one day, e.g. 08:00-20:00"""
    start: time = Field(..., description="Window start (local)")
    end: time = Field(..., description="Window end (local), after start")

    @model_validator(mode="after")
    def end_after_start(self) -> "TimeWindow":
        if self.end <= self.start:
            raise ValueError("Window end must be after window start")
        return self

    @classmethod
    def parse(cls, value: str) -> "TimeWindow":
        """Parse "HH:MM-HH:MM" """
        parts = value.split("-") if isinstance(value, str) else []
        if len(parts) != 2:
            raise ValueError(f"Expected HH:MM-HH:MM, got {value!r}")
        return cls(start=parse_hhmm(parts[0].strip()), end=parse_hhmm(parts[1].strip()))

    def __str__(self) -> str:
        return f"{self.start.strftime('%H:%M')}-{self.end.strftime('%H:%M')}"


class AvailabilityRuleRecord(BaseModel):
    """Weekly availability row as returned by the repository"""
    model_config = ConfigDict(from_attributes=True)

    weekday: int = Field(..., ge=0, le=6, description="0=Sunday, 6=Saturday")
    start_time: time
    end_time: time
    timezone: str

    @property
    def window(self) -> TimeWindow:
        return TimeWindow(start=self.start_time, end=self.end_time)


class AvailabilityRuleIn(BaseModel):
    """Availability rule as submitted by the dashboard"""
    weekday: int = Field(..., ge=0, le=6, description="0=Sunday, 6=Saturday")
    start: str = Field(..., description="Window start HH:MM")
    end: str = Field(..., description="Window end HH:MM")
    timezone: str = Field("Europe/Madrid", description="IANA timezone")

    @field_validator("start", "end")
    @classmethod
    def validate_hhmm(cls, v: str) -> str:
        parse_hhmm(v)
        return v

    @field_validator("timezone")
    @classmethod
    def validate_tz(cls, v: str) -> str:
        return validate_timezone(v)

    @model_validator(mode="after")
    def start_before_end(self) -> "AvailabilityRuleIn":
        if parse_hhmm(self.start) >= parse_hhmm(self.end):
            raise ValueError("Start time must be before end time")
        return self

    @property
    def window(self) -> TimeWindow:
        return TimeWindow(start=parse_hhmm(self.start), end=parse_hhmm(self.end))


class ReplaceAvailabilityRequest(BaseModel):
    rules: List[AvailabilityRuleIn] = Field(default_factory=list)


class BusyInterval(BaseModel):
    """Time range during which a practitioner is unavailable"""
    start: datetime
    end: datetime
    source: Literal["booking", "external"]
    external_id: Optional[str] = None


class CandidateSlot(BaseModel):
    start: datetime
    end: datetime


class MonthlySlots(BaseModel):
    """Bookable slots of a month keyed by local calendar day (YYYY-MM-DD)"""
    slots_by_day: Dict[str, List[CandidateSlot]] = Field(default_factory=dict)
    days_with_slots: List[str] = Field(default_factory=list)
    timezone: Optional[str] = None
    # True when external busy time could not be loaded and only bookings were considered
    degraded: bool = False

    def starting_after(self, cutoff: datetime) -> "MonthlySlots":
        """Copy without slots starting before `cutoff`"""
        slots_by_day: Dict[str, List[CandidateSlot]] = {}
        for day, slots in self.slots_by_day.items():
            slots_by_day[day] = [slot for slot in slots if slot.start >= cutoff]
        return MonthlySlots(
            slots_by_day=slots_by_day,
            days_with_slots=[day for day in self.days_with_slots if slots_by_day.get(day)],
            degraded=self.degraded,
            timezone=self.timezone,
        )


class AvailableSlotsResponse(BaseModel):
    user_id: UUID
    month: str
    timezone: str
    duration_minutes: int
    slots_by_day: Dict[str, List[CandidateSlot]]
    days_with_slots: List[str]
    degraded: bool = False
