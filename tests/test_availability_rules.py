from datetime import time

import pytest
from pydantic import ValidationError

from practice_scheduler.core.exceptions import ConfigurationError
from practice_scheduler.repositories.availability_repository import validate_weekly_rules
from practice_scheduler.schemas.availability import AvailabilityRuleIn, parse_hhmm


def rule_in(weekday, start, end, tz="Europe/Madrid"):
    return AvailabilityRuleIn(weekday=weekday, start=start, end=end, timezone=tz)


class TestAvailabilityRuleIn:

    def test_valid_rule(self):
        rule = rule_in(0, "09:00", "13:30")
        assert rule.window.start == time(9, 0)
        assert str(rule.window) == "09:00-13:30"

    @pytest.mark.parametrize("start, end", [("9:00", "13:00"), ("09:00", "24:00"), ("09-00", "13:00")])
    def test_malformed_times(self, start, end):
        with pytest.raises(ValidationError):
            rule_in(0, start, end)

    def test_start_must_precede_end(self):
        with pytest.raises(ValidationError):
            rule_in(0, "13:00", "13:00")

    def test_weekday_range(self):
        with pytest.raises(ValidationError):
            rule_in(7, "09:00", "13:00")

    def test_unknown_timezone(self):
        with pytest.raises(ValidationError):
            rule_in(0, "09:00", "13:00", tz="Europe/Atlantis")


def test_parse_hhmm():
    assert parse_hhmm("00:00") == time(0, 0)
    assert parse_hhmm("23:59") == time(23, 59)
    with pytest.raises(ValueError):
        parse_hhmm("12:60")


class TestValidateWeeklyRules:

    def test_split_shifts_are_accepted(self):
        validate_weekly_rules([rule_in(0, "09:00", "13:00"), rule_in(0, "16:00", "20:00")])

    def test_touching_windows_are_accepted(self):
        validate_weekly_rules([rule_in(0, "09:00", "13:00"), rule_in(0, "13:00", "15:00")])

    def test_same_window_on_different_days_is_accepted(self):
        validate_weekly_rules([rule_in(0, "09:00", "13:00"), rule_in(1, "09:00", "13:00")])

    def test_overlap_on_the_same_day_is_rejected(self):
        with pytest.raises(ConfigurationError):
            validate_weekly_rules([rule_in(2, "12:00", "18:00"), rule_in(2, "09:00", "13:00")])

    def test_mixed_timezones_are_rejected(self):
        with pytest.raises(ConfigurationError):
            validate_weekly_rules([rule_in(1, "09:00", "13:00"), rule_in(2, "09:00", "13:00", tz="Europe/London")])
