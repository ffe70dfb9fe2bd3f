# practice_scheduler/services/service_factory.py
"""Wires repositories and services around one database session"""
from sqlalchemy.orm import Session

from practice_scheduler.config.settings import get_settings
from practice_scheduler.repositories.availability_repository import AvailabilityRepository
from practice_scheduler.repositories.billing_repository import BillingRepository
from practice_scheduler.repositories.booking_repository import BookingRepository
from practice_scheduler.repositories.booking_series_repository import BookingSeriesRepository
from practice_scheduler.repositories.calendar_event_repository import CalendarEventRepository
from practice_scheduler.repositories.practitioner_repository import PractitionerRepository
from practice_scheduler.services.availability.availability_service import AvailabilityService
from practice_scheduler.services.booking.billing_policy import BillingPolicyResolver
from practice_scheduler.services.booking.booking_orchestrator import BookingOrchestrator
from practice_scheduler.services.booking_series.booking_series_service import BookingSeriesService
from practice_scheduler.services.booking_series.series_extension_service import SeriesExtensionService
from practice_scheduler.services.calendar.google_calendar_service import GoogleCalendarService

settings = get_settings()


def build_availability_service(db: Session) -> AvailabilityService:
    return AvailabilityService(
        availability_repository=AvailabilityRepository(db),
        booking_repository=BookingRepository(db),
        calendar_event_repository=CalendarEventRepository(db),
        calendar_service=GoogleCalendarService(db),
        default_timezone=settings.DEFAULT_TIMEZONE,
        default_duration_minutes=settings.DEFAULT_SLOT_DURATION_MINUTES,
    )


def build_booking_orchestrator(db: Session) -> BookingOrchestrator:
    return BookingOrchestrator(
        booking_repository=BookingRepository(db),
        billing_repository=BillingRepository(db),
        calendar_event_repository=CalendarEventRepository(db),
        practitioner_repository=PractitionerRepository(db),
        calendar_service=GoogleCalendarService(db),
    )


def build_booking_series_service(db: Session) -> BookingSeriesService:
    return BookingSeriesService(
        series_repository=BookingSeriesRepository(db),
        booking_repository=BookingRepository(db),
        calendar_event_repository=CalendarEventRepository(db),
        practitioner_repository=PractitionerRepository(db),
        booking_orchestrator=build_booking_orchestrator(db),
        calendar_service=GoogleCalendarService(db),
        initial_occurrences=settings.SERIES_INITIAL_OCCURRENCES,
    )


def build_series_extension_service(db: Session) -> SeriesExtensionService:
    return SeriesExtensionService(
        series_repository=BookingSeriesRepository(db),
        booking_repository=BookingRepository(db),
        booking_orchestrator=build_booking_orchestrator(db),
        billing_resolver=BillingPolicyResolver(BillingRepository(db), settings.DEFAULT_CURRENCY),
    )
