# practice_scheduler/services/booking_series/series_extension_service.py
"""
Weekly extension of active booking series.

Each run adds exactly one occurrence per active series: the one following
the highest index already booked. Running the job again before the next
occurrence exists is harmless because the (series_id, occurrence_index)
pair can only be booked once.
"""
from datetime import timedelta
import logging

from practice_scheduler.core.exceptions import OccurrenceConflictError
from practice_scheduler.repositories.booking_repository import BookingRepository
from practice_scheduler.repositories.booking_series_repository import BookingSeriesRepository
from practice_scheduler.schemas.booking_series import BookingSeriesRecord, ExtensionOutcome, ExtensionSummary
from practice_scheduler.schemas.bookings import CreateBookingRequest
from practice_scheduler.services.booking.billing_policy import BillingPolicyResolver
from practice_scheduler.services.booking.booking_orchestrator import BookingOrchestrator
from practice_scheduler.services.recurrence.recurrence_service import generate_occurrences

logger = logging.getLogger(__name__)


class SeriesExtensionService:
    def __init__(
            self,
            series_repository: BookingSeriesRepository,
            booking_repository: BookingRepository,
            booking_orchestrator: BookingOrchestrator,
            billing_resolver: BillingPolicyResolver,
    ):
        self.series_repository = series_repository
        self.booking_repository = booking_repository
        self.booking_orchestrator = booking_orchestrator
        self.billing_resolver = billing_resolver

    async def extend_series_by_one(self, series: BookingSeriesRecord) -> ExtensionOutcome:
        """Book the next occurrence of `series`, or report why it was skipped"""
        if series.status != "active":
            return ExtensionOutcome(series_id=series.id, status="skipped", reason="series ended")

        existing = self.booking_repository.get_existing_series_occurrence_indices(series.id)
        next_index = max(existing, default=-1) + 1

        window_start = series.dtstart_local + timedelta(weeks=series.interval_weeks * next_index)
        window_end = window_start + timedelta(days=7)
        occurrences = generate_occurrences(
            series.to_rule(), window_start, window_end, max_count=1, series_id=series.id
        )
        if not occurrences:
            logger.info(f"Series {series.id}: no occurrence between {window_start} and {window_end}")
            return ExtensionOutcome(
                series_id=series.id, status="skipped", occurrence_index=next_index, reason="no occurrence in window"
            )

        occurrence = occurrences[0]
        if series.until_local and occurrence.local_start > series.until_local:
            return ExtensionOutcome(
                series_id=series.id, status="skipped", occurrence_index=occurrence.occurrence_index,
                reason="past series end"
            )

        policy = self.billing_resolver.resolve(series.user_id, series.client_id, occurrence.occurrence_index)
        request = CreateBookingRequest(
            user_id=series.user_id,
            client_id=series.client_id,
            start_time=occurrence.start_utc,
            end_time=occurrence.end_utc,
            mode=series.mode,
            location_text=series.location_text,
            consultation_type=series.consultation_type,
        )

        try:
            result = await self.booking_orchestrator.create_booking(
                request, policy, series_id=series.id, occurrence_index=occurrence.occurrence_index
            )
        except OccurrenceConflictError:
            logger.info(f"Series {series.id}: occurrence {occurrence.occurrence_index} already booked")
            return ExtensionOutcome(
                series_id=series.id, status="skipped", occurrence_index=occurrence.occurrence_index,
                reason="already extended"
            )

        logger.info(
            f"Series {series.id}: booked occurrence {occurrence.occurrence_index} "
            f"at {occurrence.local_start} {series.timezone} (booking {result.booking.id})"
        )
        return ExtensionOutcome(
            series_id=series.id,
            status="created",
            occurrence_index=occurrence.occurrence_index,
            booking_id=result.booking.id,
        )

    async def extend_all_active_series(self) -> ExtensionSummary:
        """Extend every active series once; a failing series is logged and counted, never fatal"""
        summary = ExtensionSummary()
        series_list = self.series_repository.get_active_series()
        logger.info(f"Extending {len(series_list)} active booking series")

        for series in series_list:
            summary.processed += 1
            try:
                outcome = await self.extend_series_by_one(series)
            except Exception as e:
                summary.failed += 1
                logger.error(f"Failed to extend series {series.id}: {e}", exc_info=True)
                # The session is shared by the whole run
                self.booking_repository.rollback()
                continue

            if outcome.status == "created":
                summary.created += 1
            else:
                summary.skipped += 1

        logger.info(
            f"Series extension finished: processed={summary.processed} created={summary.created} "
            f"skipped={summary.skipped} failed={summary.failed}"
        )
        return summary
