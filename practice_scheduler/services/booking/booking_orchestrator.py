# practice_scheduler/services/booking/booking_orchestrator.py
from typing import Optional
import logging

from practice_scheduler.core.exceptions import CalendarProviderError, InvalidStateError, OccurrenceConflictError
from practice_scheduler.repositories.billing_repository import BillingRepository
from practice_scheduler.repositories.booking_repository import BookingRepository
from practice_scheduler.repositories.calendar_event_repository import CalendarEventRepository
from practice_scheduler.repositories.practitioner_repository import PractitionerRepository
from practice_scheduler.schemas.bookings import BillingPolicy, BookingResult, CreateBookingRequest
from practice_scheduler.services.booking.billing_policy import payment_email_time
from practice_scheduler.services.calendar.event_builders import build_confirmed_patch, build_pending_event
from practice_scheduler.services.calendar.google_calendar_service import GoogleCalendarService

logger = logging.getLogger(__name__)


class BookingOrchestrator:
    """
    Creates and confirms bookings.

    A booking is inserted as `pending`, billed, and mirrored in Google Calendar
    as a placeholder event. The placeholder id is recorded as system-owned so
    that slot computation does not count the same time twice. Calendar
    failures never fail the booking; they are returned as warnings.
    """

    def __init__(
            self,
            booking_repository: BookingRepository,
            billing_repository: BillingRepository,
            calendar_event_repository: CalendarEventRepository,
            practitioner_repository: PractitionerRepository,
            calendar_service: GoogleCalendarService,
    ):
        self.booking_repository = booking_repository
        self.billing_repository = billing_repository
        self.calendar_event_repository = calendar_event_repository
        self.practitioner_repository = practitioner_repository
        self.calendar_service = calendar_service

    async def create_booking(
            self,
            request: CreateBookingRequest,
            billing_policy: BillingPolicy,
            series_id=None,
            occurrence_index: Optional[int] = None,
    ) -> BookingResult:
        """
        Create a pending booking with its bill and placeholder event.

        Raises BookingConflictError when the time overlaps an active booking,
        and OccurrenceConflictError when (series_id, occurrence_index) is
        already taken; in the latter case nothing is left behind.
        """
        practitioner = self.practitioner_repository.get_practitioner(request.user_id)
        client = self.practitioner_repository.get_client(request.client_id)

        booking = self.booking_repository.create_booking(request, status="pending")
        logger.info(f"Created booking {booking.id} for user {request.user_id} at {booking.start_time}")

        if series_id is not None:
            try:
                self.booking_repository.tag_booking_with_series(booking.id, series_id, occurrence_index)
            except OccurrenceConflictError:
                self.booking_repository.delete_booking(booking.id)
                raise
            booking = self.booking_repository.get_booking(booking.id)

        bill_id = self.billing_repository.create_bill(
            booking,
            client,
            billing_policy,
            payment_email_time(billing_policy, booking.start_time, booking.end_time),
        )

        result = BookingResult(booking=booking, bill_id=bill_id)

        try:
            event = await self.calendar_service.create_event(
                request.user_id,
                build_pending_event(
                    client_name=client.full_name,
                    practitioner_email=practitioner.email,
                    start_time=booking.start_time,
                    end_time=booking.end_time,
                    booking_id=str(booking.id),
                ),
                send_updates='none',
            )
        except CalendarProviderError as e:
            logger.warning(f"Pending calendar event not created for booking {booking.id}: {e}")
            result.warnings.append(f"Calendar event not created: {e}")
            return result

        if event.success and event.google_event_id:
            self.calendar_event_repository.record_event(
                booking.id,
                request.user_id,
                event.google_event_id,
                meet_link=event.meet_link,
                event_type="pending",
            )
            result.google_event_id = event.google_event_id
        elif event.error:
            result.warnings.append(event.error)

        return result

    async def confirm_booking(self, booking_id, suppress_calendar_notifications: bool = False) -> BookingResult:
        """Move a pending booking to scheduled and turn its placeholder into the real appointment"""
        booking = self.booking_repository.get_booking(booking_id)
        if booking.status == "cancelled":
            raise InvalidStateError(f"Booking {booking_id} is cancelled")
        if booking.status == "pending":
            booking = self.booking_repository.update_status(booking_id, "scheduled")
            logger.info(f"Booking {booking_id} confirmed")

        result = BookingResult(booking=booking)

        event = self.calendar_event_repository.get_for_booking(booking_id)
        if not event or event.event_type != "pending":
            return result

        practitioner = self.practitioner_repository.get_practitioner(booking.user_id)
        client = self.practitioner_repository.get_client(booking.client_id)
        try:
            updated = await self.calendar_service.patch_event(
                booking.user_id,
                event.google_event_id,
                build_confirmed_patch(
                    client_name=client.full_name,
                    client_email=client.email,
                    practitioner_name=practitioner.display_name,
                    practitioner_email=practitioner.email,
                    with_meet=booking.mode != "in_person",
                ),
                send_updates='none' if suppress_calendar_notifications else 'all',
            )
        except CalendarProviderError as e:
            logger.warning(f"Calendar event {event.google_event_id} not confirmed for booking {booking_id}: {e}")
            result.warnings.append(f"Calendar event not updated: {e}")
            return result

        if updated.success:
            self.calendar_event_repository.mark_confirmed(event.id, meet_link=updated.meet_link)
        result.google_event_id = event.google_event_id
        return result
