# practice_scheduler/services/availability/intervals.py
"""Half-open interval helpers: [start, end)"""
from datetime import datetime, timedelta
from typing import Iterable, Protocol


class _Interval(Protocol):
    start: datetime
    end: datetime


def overlaps(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    """True when [a_start, a_end) and [b_start, b_end) share any instant; touching ends do not count"""
    return a_start < b_end and a_end > b_start


def overlaps_any(start: datetime, end: datetime, intervals: Iterable[_Interval]) -> bool:
    return any(overlaps(start, end, interval.start, interval.end) for interval in intervals)


def add_minutes(instant: datetime, minutes: int) -> datetime:
    """Absolute-time addition; aware datetimes in UTC stay unaffected by DST"""
    return instant + timedelta(minutes=minutes)
