import uuid
from datetime import timedelta
from decimal import Decimal

import pytest
from pydantic import ValidationError

from practice_scheduler.schemas.bookings import BillingPolicy, BillingSettingsRecord
from practice_scheduler.services.booking.billing_policy import (
    BillingPolicyResolver,
    clamp_lead_hours,
    payment_email_time,
    policy_from_choice,
    policy_from_settings,
)

from conftest import FakeBillingRepository, utc


def settings(billing_type="in-advance", amount="60", first=None, lead=24, client_id=None):
    return BillingSettingsRecord(
        user_id=uuid.uuid4(), client_id=client_id, billing_type=billing_type, billing_amount=Decimal(amount),
        first_consultation_amount=Decimal(first) if first else None, payment_email_lead_hours=lead,
    )


@pytest.mark.parametrize("value, expected", [(24, 24), (-1, -1), (None, -1), (12, -1), (48, -1)])
def test_clamp_lead_hours(value, expected):
    assert clamp_lead_hours(value) == expected


def test_policy_from_settings_per_booking():
    policy = policy_from_settings(settings(lead=24))
    assert policy.type == "per_booking"
    assert policy.amount == Decimal("60")
    assert policy.bill_type == "in-advance"


def test_unsupported_lead_falls_back_to_right_after():
    policy = policy_from_settings(settings(lead=6))
    assert policy.payment_email_lead_hours == -1
    assert policy.bill_type == "right-after"


def test_monthly_settings():
    policy = policy_from_settings(settings(billing_type="monthly", amount="240"))
    assert policy.type == "monthly"
    assert policy.bill_type == "monthly"
    assert policy.payment_email_lead_hours is None


def test_first_consultation_amount_only_applies_to_index_zero():
    stored = settings(amount="50", first="80")
    assert policy_from_settings(stored, occurrence_index=0).amount == Decimal("80")
    assert policy_from_settings(stored, occurrence_index=1).amount == Decimal("50")
    assert policy_from_settings(stored).amount == Decimal("50")


def test_missing_settings_bill_nothing_right_after():
    policy = policy_from_settings(None, currency="USD")
    assert policy.amount == Decimal("0")
    assert policy.currency == "USD"
    assert policy.bill_type == "right-after"


@pytest.mark.parametrize("choice, bill_type", [
    ("monthly", "monthly"),
    ("right_after", "right-after"),
    ("24h_before", "in-advance"),
])
def test_policy_from_choice(choice, bill_type):
    assert policy_from_choice(choice, Decimal("70")).bill_type == bill_type


def test_payment_email_time():
    start, end = utc(2025, 3, 10, 9), utc(2025, 3, 10, 10)
    assert payment_email_time(policy_from_choice("24h_before", Decimal("1")), start, end) == start - timedelta(hours=24)
    assert payment_email_time(policy_from_choice("right_after", Decimal("1")), start, end) == end
    assert payment_email_time(policy_from_choice("monthly", Decimal("1")), start, end) is None


def test_billing_policy_rejects_other_leads():
    with pytest.raises(ValidationError):
        BillingPolicy(type="per_booking", amount=Decimal("10"), payment_email_lead_hours=12)


def test_resolver_prefers_client_settings():
    client_id = uuid.uuid4()
    repository = FakeBillingRepository(
        client_settings={client_id: settings(billing_type="right-after", amount="35", lead=-1, client_id=client_id)},
        default_settings=settings(amount="60"),
    )
    resolver = BillingPolicyResolver(repository)

    assert resolver.resolve(uuid.uuid4(), client_id).amount == Decimal("35")
    assert resolver.resolve(uuid.uuid4(), uuid.uuid4()).amount == Decimal("60")


def test_resolver_ignores_first_consultation_amount_of_the_default():
    repository = FakeBillingRepository(default_settings=settings(amount="60", first="90"))
    resolver = BillingPolicyResolver(repository)

    assert resolver.resolve(uuid.uuid4(), uuid.uuid4(), occurrence_index=0).amount == Decimal("60")


def test_resolver_applies_first_consultation_amount_of_client_settings():
    client_id = uuid.uuid4()
    repository = FakeBillingRepository(
        client_settings={client_id: settings(amount="50", first="80", client_id=client_id)},
    )
    resolver = BillingPolicyResolver(repository)

    assert resolver.resolve(uuid.uuid4(), client_id, occurrence_index=0).amount == Decimal("80")
    assert resolver.resolve(uuid.uuid4(), client_id, occurrence_index=1).amount == Decimal("50")
