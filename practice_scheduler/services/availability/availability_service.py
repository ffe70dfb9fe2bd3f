# practice_scheduler/services/availability/availability_service.py
from typing import Dict, List, Optional, Set, Union
from datetime import datetime, timedelta, timezone as dt_timezone
from sqlalchemy.exc import SQLAlchemyError
import logging

from practice_scheduler.core.exceptions import CalendarProviderError, ConfigurationError
from practice_scheduler.repositories.availability_repository import AvailabilityRepository
from practice_scheduler.repositories.booking_repository import BookingRepository
from practice_scheduler.repositories.calendar_event_repository import CalendarEventRepository
from practice_scheduler.schemas.availability import CandidateSlot, MonthlySlots, TimeWindow
from practice_scheduler.services.availability.busy_intervals import BusyIntervalAggregator
from practice_scheduler.services.availability.slot_generator import generate_slots
from practice_scheduler.services.availability.time_windows import (
    get_zone,
    local_day_bounds,
    month_days,
    parse_month,
    resolve_local_window,
    sunday_first_weekday,
)
from practice_scheduler.services.calendar.google_calendar_service import GoogleCalendarService

logger = logging.getLogger(__name__)


class AvailabilityService:
    """Monthly slot computation from weekly rules, bookings and Google busy time"""

    def __init__(
            self,
            availability_repository: AvailabilityRepository,
            booking_repository: BookingRepository,
            calendar_event_repository: CalendarEventRepository,
            calendar_service: GoogleCalendarService,
            default_timezone: str = "Europe/Madrid",
            default_duration_minutes: int = 60,
    ):
        self.availability_repository = availability_repository
        self.booking_repository = booking_repository
        self.calendar_event_repository = calendar_event_repository
        self.calendar_service = calendar_service
        self.default_timezone = default_timezone
        self.default_duration_minutes = default_duration_minutes

    async def compute_monthly_slots(
            self,
            user_id,
            month: str,
            timezone: Optional[str] = None,
            fallback_window: Optional[Union[TimeWindow, str]] = None,
            duration_minutes: Optional[int] = None,
    ) -> MonthlySlots:
        """
        Bookable slots for every local day of `month`.

        Rules drive the windows: several rules on one weekday are independent
        windows, a weekday without rules has no slots. With no rules at all
        `fallback_window` applies to every day, and without one the call fails
        with ConfigurationError. Bookings and Google events are each fetched
        once for the whole month. If Google cannot be reached the result is
        computed from bookings alone and flagged as degraded.
        """
        year, month_number = parse_month(month)
        duration = duration_minutes or self.default_duration_minutes
        if duration <= 0:
            raise ConfigurationError(f"Slot duration must be positive, got {duration}")

        rules = self.availability_repository.get_weekly_availability(user_id)
        rule_zones = {rule.timezone for rule in rules}
        if len(rule_zones) > 1:
            raise ConfigurationError(f"User {user_id} has availability rules in several timezones: {sorted(rule_zones)}")
        tz = timezone or (rules[0].timezone if rules else self.default_timezone)
        get_zone(tz)

        fallback = None
        if not rules:
            if fallback_window is None:
                raise ConfigurationError(f"User {user_id} has no availability rules and no fallback window")
            fallback = self._parse_window(fallback_window)

        windows_by_weekday: Dict[int, List[TimeWindow]] = {}
        for rule in rules:
            windows_by_weekday.setdefault(rule.weekday, []).append(rule.window)

        days = month_days(year, month_number)
        range_start, _ = local_day_bounds(days[0], tz)
        _, range_end = local_day_bounds(days[-1], tz)

        bookings = self.booking_repository.get_bookings_for_date_range(user_id, range_start, range_end)
        external_events, degraded = await self._fetch_external_events(user_id, range_start, range_end)
        system_event_ids = self._load_system_event_ids(user_id) if external_events else set()

        aggregator = BusyIntervalAggregator(bookings, external_events, system_event_ids, tz)

        slots_by_day: Dict[str, List[CandidateSlot]] = {}
        days_with_slots: List[str] = []
        for day in days:
            windows = [fallback] if fallback else windows_by_weekday.get(sunday_first_weekday(day), [])
            day_slots: List[CandidateSlot] = []
            for window in windows:
                window_start, window_end = resolve_local_window(day, tz, window)
                busy = aggregator.busy_for_window(day, window_start, window_end)
                day_slots.extend(generate_slots(window_start, window_end, duration, busy))

            day_slots.sort(key=lambda slot: slot.start)
            key = day.isoformat()
            slots_by_day[key] = day_slots
            if day_slots:
                days_with_slots.append(key)

        logger.info(
            f"Computed {sum(len(s) for s in slots_by_day.values())} slots over "
            f"{len(days_with_slots)} days for user {user_id} ({year}-{month_number:02d}, {tz})"
        )
        return MonthlySlots(
            slots_by_day=slots_by_day,
            days_with_slots=days_with_slots,
            degraded=degraded,
            timezone=tz,
        )

    @staticmethod
    def _parse_window(window: Union[TimeWindow, str]) -> TimeWindow:
        if isinstance(window, TimeWindow):
            return window
        try:
            return TimeWindow.parse(window)
        except ValueError as e:
            raise ConfigurationError(f"Invalid availability window {window!r}: {e}")

    async def _fetch_external_events(self, user_id, start: datetime, end: datetime):
        try:
            events = await self.calendar_service.get_busy_events_for_range(user_id, start, end)
            return events, False
        except CalendarProviderError as e:
            logger.warning(f"Google busy events unavailable for user {user_id}, using bookings only: {e}")
            return [], True

    def _load_system_event_ids(self, user_id) -> Set[str]:
        try:
            return self.calendar_event_repository.get_system_external_event_ids(user_id)
        except SQLAlchemyError as e:
            logger.warning(f"Could not load system-owned event ids for user {user_id}, not deduplicating: {e}")
            return set()

    @staticmethod
    def filter_by_lead_time(slots: MonthlySlots, lead_time_hours: int, now: Optional[datetime] = None) -> MonthlySlots:
        """Drop slots starting sooner than `lead_time_hours` from now"""
        now = now or datetime.now(dt_timezone.utc)
        return slots.starting_after(now + timedelta(hours=lead_time_hours))
