"""Local window resolution, month parsing and DST boundaries."""
from datetime import date, timedelta

import pytest

from practice_scheduler.core.exceptions import ConfigurationError
from practice_scheduler.schemas.availability import TimeWindow
from practice_scheduler.services.availability.time_windows import (
    local_day_bounds,
    month_days,
    parse_month,
    resolve_local_window,
)

from conftest import MADRID, utc


class TestParseMonth:

    @pytest.mark.parametrize("value", ["2025-03", "2025-03-15", "2025-03-31T23:30:00Z", "2025-03-01T10:00:00+02:00"])
    def test_accepted_forms(self, value):
        assert parse_month(value) == (2025, 3)

    @pytest.mark.parametrize("value", ["", "2025-13", "March 2025", "2025/03", "2025-02-30"])
    def test_invalid_month_is_configuration_error(self, value):
        with pytest.raises(ConfigurationError):
            parse_month(value)

    def test_month_days_handles_leap_years(self):
        assert len(month_days(2024, 2)) == 29
        assert len(month_days(2025, 2)) == 28
        assert month_days(2025, 4)[-1] == date(2025, 4, 30)


class TestResolveLocalWindow:

    def test_winter_offset(self):
        start, end = resolve_local_window(date(2025, 2, 10), MADRID, TimeWindow.parse("08:00-20:00"))
        assert start == utc(2025, 2, 10, 7, 0)
        assert end == utc(2025, 2, 10, 19, 0)

    def test_summer_offset(self):
        start, end = resolve_local_window(date(2025, 7, 1), MADRID, TimeWindow.parse("08:00-20:00"))
        assert start == utc(2025, 7, 1, 6, 0)
        assert end == utc(2025, 7, 1, 18, 0)

    def test_window_spanning_spring_forward_is_one_hour_shorter(self):
        # 2025-03-30: 02:00 local jumps to 03:00
        start, end = resolve_local_window(date(2025, 3, 30), MADRID, TimeWindow.parse("00:00-06:00"))
        assert start == utc(2025, 3, 29, 23, 0)
        assert end == utc(2025, 3, 30, 4, 0)
        assert end - start == timedelta(hours=5)

    def test_window_spanning_fall_back_is_one_hour_longer(self):
        # 2025-10-26: 03:00 local falls back to 02:00
        start, end = resolve_local_window(date(2025, 10, 26), MADRID, TimeWindow.parse("00:00-06:00"))
        assert end - start == timedelta(hours=7)

    def test_window_after_transition_keeps_its_length(self):
        start, end = resolve_local_window(date(2025, 3, 30), MADRID, TimeWindow.parse("08:00-20:00"))
        assert start == utc(2025, 3, 30, 6, 0)
        assert end - start == timedelta(hours=12)

    def test_consecutive_days_are_strictly_increasing(self):
        window = TimeWindow.parse("08:00-20:00")
        resolved = [resolve_local_window(day, MADRID, window) for day in month_days(2025, 3)]
        for (start, end), (next_start, _) in zip(resolved, resolved[1:]):
            assert start < end < next_start

    def test_day_bounds_on_transition_day(self):
        start, end = local_day_bounds(date(2025, 3, 30), MADRID)
        assert start == utc(2025, 3, 29, 23, 0)
        assert end == utc(2025, 3, 30, 22, 0)
        assert end - start == timedelta(hours=23)


class TestTimeWindow:

    def test_parse_and_format(self):
        window = TimeWindow.parse("09:30-13:00")
        assert str(window) == "09:30-13:00"

    @pytest.mark.parametrize("value", ["9:00-13:00", "13:00-09:00", "10:00-10:00", "25:00-26:00", "10:00"])
    def test_invalid_windows(self, value):
        with pytest.raises(ValueError):
            TimeWindow.parse(value)
