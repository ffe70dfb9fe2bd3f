# practice_scheduler/services/booking_series/booking_series_service.py
from datetime import datetime, timedelta, timezone as dt_timezone
from typing import List
from zoneinfo import ZoneInfo
import logging

from practice_scheduler.core.exceptions import BookingConflictError, CalendarProviderError, OccurrenceConflictError
from practice_scheduler.repositories.booking_repository import BookingRepository
from practice_scheduler.repositories.booking_series_repository import BookingSeriesRepository
from practice_scheduler.repositories.calendar_event_repository import CalendarEventRepository
from practice_scheduler.repositories.practitioner_repository import PractitionerRepository
from practice_scheduler.schemas.booking_series import (
    CancelSeriesRequest,
    CreateSeriesRequest,
    RecurrenceRule,
    SeriesCancellationResult,
    SeriesCreationResult,
)
from practice_scheduler.schemas.bookings import CreateBookingRequest
from practice_scheduler.services.booking.billing_policy import policy_from_choice
from practice_scheduler.services.booking.booking_orchestrator import BookingOrchestrator
from practice_scheduler.services.calendar.event_builders import build_master_recurring_event
from practice_scheduler.services.calendar.google_calendar_service import GoogleCalendarService
from practice_scheduler.services.recurrence.recurrence_service import generate_occurrences

logger = logging.getLogger(__name__)


class BookingSeriesService:
    """Creates and ends recurring series; the weekly job keeps them topped up"""

    def __init__(
            self,
            series_repository: BookingSeriesRepository,
            booking_repository: BookingRepository,
            calendar_event_repository: CalendarEventRepository,
            practitioner_repository: PractitionerRepository,
            booking_orchestrator: BookingOrchestrator,
            calendar_service: GoogleCalendarService,
            initial_occurrences: int = 2,
    ):
        self.series_repository = series_repository
        self.booking_repository = booking_repository
        self.calendar_event_repository = calendar_event_repository
        self.practitioner_repository = practitioner_repository
        self.booking_orchestrator = booking_orchestrator
        self.calendar_service = calendar_service
        self.initial_occurrences = initial_occurrences

    async def create_series(self, request: CreateSeriesRequest) -> SeriesCreationResult:
        """
        Store a series and book its first occurrences.

        All initial occurrences are checked for conflicts before anything is
        written, so a conflicting request leaves no partial series behind.
        The Google master recurring event is best-effort.
        """
        practitioner = self.practitioner_repository.get_practitioner(request.user_id)
        client = self.practitioner_repository.get_client(request.client_id)

        count = request.initial_occurrences or self.initial_occurrences
        window_start = request.dtstart_local
        window_end = window_start + timedelta(weeks=request.interval_weeks * count) + timedelta(days=7)

        # Preview with an unsaved rule to check conflicts up front
        rule = RecurrenceRule(
            dtstart_local=request.dtstart_local,
            timezone=request.timezone,
            duration_min=request.duration_min,
            interval_weeks=request.interval_weeks,
            by_weekday=request.by_weekday,
        )
        preview = generate_occurrences(rule, window_start, window_end, max_count=count)
        for occurrence in preview:
            conflicts = self.booking_repository.find_conflicting_booking_ids(
                request.user_id, occurrence.start_utc, occurrence.end_utc
            )
            if conflicts:
                raise BookingConflictError(
                    f"Occurrence {occurrence.occurrence_index} at {occurrence.local_start} conflicts with existing booking",
                    conflicting_ids=conflicts,
                )

        series = self.series_repository.create_series(request)
        policy = policy_from_choice(request.billing_policy, request.amount, request.currency)
        existing = self.booking_repository.get_existing_series_occurrence_indices(series.id)

        booking_ids = []
        skipped: List[int] = []
        for occurrence in generate_occurrences(series.to_rule(), window_start, window_end, max_count=count,
                                               series_id=series.id):
            if occurrence.occurrence_index in existing:
                skipped.append(occurrence.occurrence_index)
                continue
            booking_request = CreateBookingRequest(
                user_id=series.user_id,
                client_id=series.client_id,
                start_time=occurrence.start_utc,
                end_time=occurrence.end_utc,
                mode=series.mode,
                location_text=series.location_text,
                consultation_type=series.consultation_type,
                suppress_calendar_notifications=request.suppress_calendar_notifications,
            )
            try:
                result = await self.booking_orchestrator.create_booking(
                    booking_request, policy, series_id=series.id, occurrence_index=occurrence.occurrence_index
                )
            except OccurrenceConflictError:
                skipped.append(occurrence.occurrence_index)
                continue
            booking_ids.append(result.booking.id)

        logger.info(f"Series {series.id}: booked {len(booking_ids)} initial occurrences, skipped {skipped}")

        master_event_id = None
        first_start = preview[0].local_start if preview else series.dtstart_local
        try:
            event = await self.calendar_service.create_event(
                series.user_id,
                build_master_recurring_event(
                    client_name=client.full_name,
                    client_email=client.email,
                    practitioner_name=practitioner.display_name,
                    practitioner_email=practitioner.email,
                    dtstart_local=first_start,
                    dtend_local=first_start + timedelta(minutes=series.duration_min),
                    timezone=series.timezone,
                    interval_weeks=series.interval_weeks,
                    by_weekday=series.by_weekday,
                    mode=series.mode,
                    location_text=series.location_text,
                ),
                send_updates='none' if request.suppress_calendar_notifications else 'all',
            )
            if event.success and event.google_event_id:
                master_event_id = event.google_event_id
                self.series_repository.set_master_event_id(series.id, master_event_id)
        except CalendarProviderError as e:
            logger.warning(f"Master recurring event not created for series {series.id}: {e}")

        return SeriesCreationResult(
            series=self.series_repository.get_series(series.id),
            booking_ids=booking_ids,
            skipped_indices=skipped,
            google_master_event_id=master_event_id,
        )

    async def cancel_series(self, series_id, request: CancelSeriesRequest) -> SeriesCancellationResult:
        """End a series; an already ended series is returned unchanged"""
        series = self.series_repository.get_series(series_id)
        if series.status == "ended":
            return SeriesCancellationResult(series=series)

        zone = ZoneInfo(series.timezone)
        until_local = request.until_local or datetime.now(zone).replace(tzinfo=None)
        if until_local.tzinfo is not None:
            until_local = until_local.astimezone(zone).replace(tzinfo=None)

        series = self.series_repository.end_series(series_id, until_local)
        logger.info(f"Series {series_id} ended at {until_local} {series.timezone}")

        if series.google_master_event_id:
            try:
                await self.calendar_service.delete_event(series.user_id, series.google_master_event_id)
            except CalendarProviderError as e:
                logger.warning(f"Master event {series.google_master_event_id} of series {series_id} not deleted: {e}")
            self.series_repository.set_master_event_id(series_id, None)

        cancelled = []
        if request.cancel_future_bookings:
            cutoff = until_local.replace(tzinfo=zone).astimezone(dt_timezone.utc)
            cancelled = self.booking_repository.cancel_future_bookings_for_series(series_id, cutoff)
            for booking_id in cancelled:
                await self._delete_booking_event(series.user_id, booking_id)
            logger.info(f"Series {series_id}: cancelled {len(cancelled)} future bookings")

        return SeriesCancellationResult(
            series=self.series_repository.get_series(series_id),
            cancelled_booking_ids=cancelled,
        )

    async def _delete_booking_event(self, user_id, booking_id) -> None:
        event = self.calendar_event_repository.get_for_booking(booking_id)
        if not event:
            return
        try:
            await self.calendar_service.delete_event(user_id, event.google_event_id)
            self.calendar_event_repository.mark_cancelled(event.id)
        except CalendarProviderError as e:
            logger.warning(f"Calendar event {event.google_event_id} of booking {booking_id} not deleted: {e}")
