# practice_scheduler/services/booking/billing_policy.py
"""Billing policy resolution for individual bookings"""
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Optional

from practice_scheduler.repositories.billing_repository import BillingRepository
from practice_scheduler.schemas.bookings import BillingPolicy, BillingSettingsRecord

# payment_email_lead_hours values understood by the bill scheduler
LEAD_DAY_BEFORE = 24
LEAD_RIGHT_AFTER = -1


def clamp_lead_hours(value: Optional[int]) -> int:
    return LEAD_DAY_BEFORE if value == LEAD_DAY_BEFORE else LEAD_RIGHT_AFTER


def policy_from_settings(
        settings: Optional[BillingSettingsRecord],
        occurrence_index: Optional[int] = None,
        currency: str = "EUR",
) -> BillingPolicy:
    """
    Billing policy derived from stored billing settings.

    The first occurrence of a series uses first_consultation_amount when one
    is set. Missing settings bill nothing, right after the consultation.
    """
    amount = Decimal("0")
    if settings is not None:
        amount = Decimal(settings.billing_amount)
        if occurrence_index == 0 and settings.first_consultation_amount is not None:
            amount = Decimal(settings.first_consultation_amount)
        currency = settings.currency or currency

    if settings is not None and settings.billing_type == "monthly":
        return BillingPolicy(type="monthly", amount=amount, currency=currency)

    lead = clamp_lead_hours(settings.payment_email_lead_hours if settings else None)
    return BillingPolicy(type="per_booking", amount=amount, currency=currency, payment_email_lead_hours=lead)


def policy_from_choice(choice: str, amount: Decimal, currency: str = "EUR") -> BillingPolicy:
    """Map a dashboard choice (monthly, right_after, 24h_before) to a policy"""
    if choice == "monthly":
        return BillingPolicy(type="monthly", amount=amount, currency=currency)
    lead = LEAD_RIGHT_AFTER if choice == "right_after" else LEAD_DAY_BEFORE
    return BillingPolicy(type="per_booking", amount=amount, currency=currency, payment_email_lead_hours=lead)


def payment_email_time(policy: BillingPolicy, start_time: datetime, end_time: datetime) -> Optional[datetime]:
    """When the payment email for a per-booking bill goes out; monthly bills are batched elsewhere"""
    if policy.type == "monthly":
        return None
    if policy.payment_email_lead_hours == LEAD_DAY_BEFORE:
        return start_time - timedelta(hours=LEAD_DAY_BEFORE)
    return end_time


class BillingPolicyResolver:
    """Client-specific billing settings take precedence over the practitioner default"""

    def __init__(self, billing_repository: BillingRepository, default_currency: str = "EUR"):
        self.billing_repository = billing_repository
        self.default_currency = default_currency

    def resolve(self, user_id, client_id, occurrence_index: Optional[int] = None) -> BillingPolicy:
        settings = self.billing_repository.get_client_billing_settings(user_id, client_id)
        if settings is not None:
            return policy_from_settings(settings, occurrence_index, self.default_currency)
        # First-consultation pricing is agreed per client; the default never carries it
        default = self.billing_repository.get_default_billing_settings(user_id)
        return policy_from_settings(default, None, self.default_currency)
