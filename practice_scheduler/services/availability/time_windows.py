# practice_scheduler/services/availability/time_windows.py
"""Local wall-clock windows resolved to UTC instants"""
import logging
from calendar import monthrange
from datetime import date, datetime, time, timezone as dt_timezone
from typing import List, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from practice_scheduler.core.exceptions import ConfigurationError
from practice_scheduler.schemas.availability import TimeWindow

logger = logging.getLogger(__name__)


def sunday_first_weekday(day: date) -> int:
    """Weekday numbering used by availability rules and series: 0=Sunday .. 6=Saturday"""
    return (day.weekday() + 1) % 7


def get_zone(timezone: str) -> ZoneInfo:
    try:
        return ZoneInfo(timezone)
    except (ZoneInfoNotFoundError, ValueError):
        raise ConfigurationError(f"Unknown timezone: {timezone}")


def local_to_utc(day: date, wall_time: time, timezone: str) -> datetime:
    """
    Convert a local wall time on `day` to a UTC instant using the zone rules of that date.

    Nonexistent wall times (spring-forward gap) resolve with fold=0, i.e. the
    pre-transition offset; ambiguous ones (fall-back) take the first occurrence.
    """
    local = datetime.combine(day, wall_time, tzinfo=get_zone(timezone))
    return local.astimezone(dt_timezone.utc)


def resolve_local_window(day: date, timezone: str, window: TimeWindow) -> Tuple[datetime, datetime]:
    """Resolve `window` on local `day` to (start_utc, end_utc)"""
    start_utc = local_to_utc(day, window.start, timezone)
    end_utc = local_to_utc(day, window.end, timezone)
    return start_utc, end_utc


def local_day_bounds(day: date, timezone: str) -> Tuple[datetime, datetime]:
    """UTC instants of local midnight at the start of `day` and of the following day"""
    zone = get_zone(timezone)
    start = datetime(day.year, day.month, day.day, tzinfo=zone)
    next_day = date.fromordinal(day.toordinal() + 1)
    end = datetime(next_day.year, next_day.month, next_day.day, tzinfo=zone)
    return start.astimezone(dt_timezone.utc), end.astimezone(dt_timezone.utc)


def parse_month(month: str) -> Tuple[int, int]:
    """
    Parse a month identifier into (year, month).

    Accepts YYYY-MM, YYYY-MM-DD or a full ISO datetime; the calendar month of
    the given value is used.
    """
    if not isinstance(month, str) or not month.strip():
        raise ConfigurationError(f"Invalid month identifier: {month!r}")

    value = month.strip()
    try:
        if len(value) == 7:
            parsed = datetime.strptime(value, "%Y-%m")
        elif len(value) == 10:
            parsed = datetime.strptime(value, "%Y-%m-%d")
        else:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        raise ConfigurationError(f"Invalid month identifier: {month!r}")

    return parsed.year, parsed.month


def month_days(year: int, month: int) -> List[date]:
    _, last_day = monthrange(year, month)
    return [date(year, month, d) for d in range(1, last_day + 1)]


def local_date_of(instant: datetime, timezone: str) -> date:
    return instant.astimezone(get_zone(timezone)).date()
