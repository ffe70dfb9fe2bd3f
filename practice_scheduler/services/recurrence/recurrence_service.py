# practice_scheduler/services/recurrence/recurrence_service.py
"""
Weekly / bi-weekly occurrence expansion.

Occurrences are computed on local wall-clock datetimes and converted to UTC
one by one, so a 10:00 series stays at 10:00 local across DST changes while
its UTC instant shifts. Indices are derived arithmetically from the anchor,
which makes the expansion pure: any window yields the same index for the same
occurrence, and the generator can be restarted at any point.
"""
import logging
from datetime import datetime, timedelta, timezone as dt_timezone
from typing import List, Optional
from zoneinfo import ZoneInfo

from practice_scheduler.schemas.booking_series import Occurrence, RecurrenceRule
from practice_scheduler.services.availability.time_windows import sunday_first_weekday

logger = logging.getLogger(__name__)


def aligned_anchor(rule: RecurrenceRule) -> datetime:
    """dtstart_local moved forward (0-6 days) onto by_weekday"""
    shift = (rule.by_weekday - sunday_first_weekday(rule.dtstart_local)) % 7
    return rule.dtstart_local + timedelta(days=shift)


def step_of(rule: RecurrenceRule) -> timedelta:
    return timedelta(weeks=rule.interval_weeks)


def anchor_for_index(rule: RecurrenceRule, occurrence_index: int) -> datetime:
    """Local wall time of occurrence `occurrence_index`"""
    if occurrence_index < 0:
        raise ValueError("occurrence_index must be >= 0")
    return aligned_anchor(rule) + step_of(rule) * occurrence_index


def to_utc(local: datetime, zone: ZoneInfo) -> datetime:
    return local.replace(tzinfo=zone).astimezone(dt_timezone.utc)


def _as_local_naive(value: datetime, zone: ZoneInfo) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(zone).replace(tzinfo=None)


def generate_occurrences(
        rule: RecurrenceRule,
        window_start_local: datetime,
        window_end_local: datetime,
        max_count: Optional[int] = None,
        series_id=None,
) -> List[Occurrence]:
    """
    Occurrences whose local start lies in [window_start_local, window_end_local).

    Window bounds are local wall times of the rule's timezone (aware values are
    converted). At most `max_count` occurrences are returned, earliest first.
    """
    zone = ZoneInfo(rule.timezone)
    window_start = _as_local_naive(window_start_local, zone)
    window_end = _as_local_naive(window_end_local, zone)

    if window_end <= window_start or (max_count is not None and max_count <= 0):
        return []

    anchor = aligned_anchor(rule)
    step = step_of(rule)
    duration = timedelta(minutes=rule.duration_min)

    if window_start <= anchor:
        index = 0
    else:
        index = (window_start - anchor) // step
        if anchor + step * index < window_start:
            index += 1

    occurrences: List[Occurrence] = []
    while max_count is None or len(occurrences) < max_count:
        local_start = anchor + step * index
        if local_start >= window_end:
            break
        local_end = local_start + duration
        occurrences.append(Occurrence(
            series_id=series_id,
            occurrence_index=index,
            local_start=local_start,
            local_end=local_end,
            start_utc=to_utc(local_start, zone),
            end_utc=to_utc(local_end, zone),
        ))
        index += 1

    return occurrences
