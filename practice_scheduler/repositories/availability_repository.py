# practice_scheduler/repositories/availability_repository.py
import logging
from collections import defaultdict
from typing import List, Sequence

from sqlalchemy.orm import Session

from practice_scheduler.core.exceptions import ConfigurationError
from practice_scheduler.models import AvailabilityRule
from practice_scheduler.schemas.availability import AvailabilityRuleIn, AvailabilityRuleRecord
from practice_scheduler.services.availability.intervals import overlaps

logger = logging.getLogger(__name__)


def validate_weekly_rules(rules: Sequence[AvailabilityRuleIn]) -> None:
    """
    Reject rule sets mixing timezones or with overlapping windows on the same
    weekday (touching windows are fine).
    """
    timezones = sorted({rule.timezone for rule in rules})
    if len(timezones) > 1:
        raise ConfigurationError(f"Availability rules must share one timezone, got {', '.join(timezones)}")

    by_weekday = defaultdict(list)
    for rule in rules:
        by_weekday[rule.weekday].append(rule.window)

    for weekday, windows in by_weekday.items():
        windows.sort(key=lambda w: w.start)
        for previous, current in zip(windows, windows[1:]):
            if overlaps(previous.start, previous.end, current.start, current.end):
                raise ConfigurationError(
                    f"Overlapping availability windows on weekday {weekday}: {previous} and {current}"
                )


class AvailabilityRepository:
    """Weekly availability rules of practitioners"""

    def __init__(self, db: Session):
        self.db = db

    def get_weekly_availability(self, user_id) -> List[AvailabilityRuleRecord]:
        rows = self.db.query(AvailabilityRule).filter(
            AvailabilityRule.user_id == user_id
        ).order_by(AvailabilityRule.weekday, AvailabilityRule.start_time).all()
        return [AvailabilityRuleRecord.model_validate(row) for row in rows]

    def replace_weekly_availability(self, user_id, rules: Sequence[AvailabilityRuleIn]) -> List[AvailabilityRuleRecord]:
        """Validate and atomically swap the practitioner's whole rule set"""
        validate_weekly_rules(rules)

        try:
            self.db.query(AvailabilityRule).filter(
                AvailabilityRule.user_id == user_id
            ).delete(synchronize_session=False)

            for rule in rules:
                window = rule.window
                self.db.add(AvailabilityRule(
                    user_id=user_id,
                    weekday=rule.weekday,
                    start_time=window.start,
                    end_time=window.end,
                    timezone=rule.timezone,
                ))
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"Replaced weekly availability for user {user_id} with {len(rules)} rules")
        return self.get_weekly_availability(user_id)
