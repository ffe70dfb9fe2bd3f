# practice_scheduler/models/__init__.py
from .base import Base
from .practitioner import Practitioner, Client
from .availability import AvailabilityRule
from .booking_series import BookingSeries
from .booking import Booking
from .calendar_event import CalendarEvent
from .calendar_integration import CalendarIntegration
from .billing import BillingSettings, Bill

__all__ = [
    "Base",
    "Practitioner",
    "Client",
    "AvailabilityRule",
    "BookingSeries",
    "Booking",
    "CalendarEvent",
    "CalendarIntegration",
    "BillingSettings",
    "Bill",
]
