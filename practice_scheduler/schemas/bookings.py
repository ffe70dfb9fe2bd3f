# practice_scheduler/schemas/bookings.py
from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, Literal
from datetime import datetime
from decimal import Decimal
from uuid import UUID


class BookingRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    client_id: UUID
    start_time: datetime
    end_time: datetime
    status: str
    series_id: Optional[UUID] = None
    occurrence_index: Optional[int] = None
    mode: Optional[str] = None
    location_text: Optional[str] = None
    consultation_type: Optional[str] = None


class BillingPolicy(BaseModel):
    """How a single booking is billed"""
    type: Literal["monthly", "per_booking"] = Field(..., description="Billing cadence")
    amount: Decimal = Field(..., ge=0)
    currency: str = Field("EUR", min_length=3, max_length=3)
    # 24 = payment email one day before, -1 = right after the consultation
    payment_email_lead_hours: Optional[int] = Field(None, description="Per-booking email lead")

    @field_validator("payment_email_lead_hours")
    @classmethod
    def validate_lead(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v not in (-1, 24):
            raise ValueError("payment_email_lead_hours must be -1 or 24")
        return v

    @property
    def bill_type(self) -> str:
        """Billing type as stored on bills"""
        if self.type == "monthly":
            return "monthly"
        return "right-after" if self.payment_email_lead_hours == -1 else "in-advance"


class CreateBookingRequest(BaseModel):
    user_id: UUID
    client_id: UUID
    start_time: datetime = Field(..., description="Start (tz-aware)")
    end_time: datetime = Field(..., description="End (tz-aware)")
    mode: Optional[str] = Field("online", description="online or in_person")
    location_text: Optional[str] = None
    consultation_type: Optional[str] = None
    notes: Optional[str] = None
    suppress_calendar_notifications: bool = False

    @field_validator("start_time", "end_time")
    @classmethod
    def require_timezone(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            raise ValueError("Datetime must be timezone-aware")
        return v

    @field_validator("end_time")
    @classmethod
    def end_after_start(cls, v: datetime, info) -> datetime:
        start_time = info.data.get("start_time")
        if start_time and v <= start_time:
            raise ValueError("End time must be after start time")
        return v


class BookingResult(BaseModel):
    booking: BookingRecord
    bill_id: Optional[UUID] = None
    google_event_id: Optional[str] = None
    warnings: list[str] = Field(default_factory=list)


class BillingSettingsRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: UUID
    client_id: Optional[UUID] = None
    billing_type: str
    billing_amount: Decimal
    first_consultation_amount: Optional[Decimal] = None
    currency: str = "EUR"
    payment_email_lead_hours: Optional[int] = None


class ClientRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    name: str
    last_name: Optional[str] = None
    email: str

    @property
    def full_name(self) -> str:
        return f"{self.name} {self.last_name}".strip() if self.last_name else self.name


class PractitionerRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    username: str
    name: Optional[str] = None
    email: str
    timezone: str = "Europe/Madrid"

    @property
    def display_name(self) -> str:
        return self.name or self.username
