# practice_scheduler/services/availability/busy_intervals.py
"""Merges persisted bookings and Google busy events into per-window busy lists"""
import logging
from collections import defaultdict
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Set

from practice_scheduler.schemas.availability import BusyInterval
from practice_scheduler.schemas.bookings import BookingRecord
from practice_scheduler.schemas.calendar_events import ExternalBusyEvent
from practice_scheduler.services.availability.intervals import overlaps
from practice_scheduler.services.availability.time_windows import local_date_of

logger = logging.getLogger(__name__)


def drop_system_owned(events: Iterable[ExternalBusyEvent], system_event_ids: Set[str]) -> List[ExternalBusyEvent]:
    """Remove Google mirrors of events this system created; their bookings already count as busy"""
    kept = []
    for event in events:
        if event.external_id in system_event_ids:
            logger.debug(f"Skipping system-owned external event {event.external_id}")
            continue
        kept.append(event)
    return kept


def bookings_as_busy(bookings: Iterable[BookingRecord]) -> List[BusyInterval]:
    return [
        BusyInterval(start=booking.start_time, end=booking.end_time, source="booking")
        for booking in bookings
    ]


def bucket_by_local_day(events: Iterable[ExternalBusyEvent], timezone: str) -> Dict[date, List[BusyInterval]]:
    """
    Group external events under every local calendar day they touch.

    An event crossing local midnight appears in both days; one ending exactly
    at midnight does not reach the next day.
    """
    buckets: Dict[date, List[BusyInterval]] = defaultdict(list)
    for event in events:
        interval = BusyInterval(
            start=event.start,
            end=event.end,
            source="external",
            external_id=event.external_id,
        )
        first_day = local_date_of(event.start, timezone)
        last_day = local_date_of(event.end - timedelta(microseconds=1), timezone)
        day = first_day
        while day <= last_day:
            buckets[day].append(interval)
            day += timedelta(days=1)
    return buckets


class BusyIntervalAggregator:
    """Busy intervals of one practitioner for one month, queried per (day, window)"""

    def __init__(
        self,
        bookings: Iterable[BookingRecord],
        external_events: Iterable[ExternalBusyEvent],
        system_event_ids: Set[str],
        timezone: str,
    ):
        self.booking_busy = bookings_as_busy(bookings)
        self.external_by_day = bucket_by_local_day(
            drop_system_owned(external_events, system_event_ids), timezone
        )

    def busy_for_window(self, day: date, window_start: datetime, window_end: datetime) -> List[BusyInterval]:
        """Bookings and external events of `day` overlapping [window_start, window_end)"""
        candidates = self.booking_busy + self.external_by_day.get(day, [])
        return [
            interval for interval in candidates
            if overlaps(interval.start, interval.end, window_start, window_end)
        ]
