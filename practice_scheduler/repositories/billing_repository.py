# practice_scheduler/repositories/billing_repository.py
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy.orm import Session

from practice_scheduler.models import Bill, BillingSettings
from practice_scheduler.schemas.bookings import BillingPolicy, BillingSettingsRecord, BookingRecord, ClientRecord


class BillingRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_client_billing_settings(self, user_id, client_id) -> Optional[BillingSettingsRecord]:
        row = self.db.query(BillingSettings).filter(
            BillingSettings.user_id == user_id,
            BillingSettings.client_id == client_id,
        ).first()
        return BillingSettingsRecord.model_validate(row) if row else None

    def get_default_billing_settings(self, user_id) -> Optional[BillingSettingsRecord]:
        row = self.db.query(BillingSettings).filter(
            BillingSettings.user_id == user_id,
            BillingSettings.client_id.is_(None),
            BillingSettings.is_default.is_(True),
        ).first()
        return BillingSettingsRecord.model_validate(row) if row else None

    def create_bill(
            self,
            booking: BookingRecord,
            client: ClientRecord,
            policy: BillingPolicy,
            email_scheduled_at: Optional[datetime],
    ):
        bill = Bill(
            booking_id=booking.id,
            user_id=booking.user_id,
            client_id=booking.client_id,
            client_name=client.full_name,
            client_email=client.email,
            amount=Decimal(policy.amount),
            currency=policy.currency,
            billing_type=policy.bill_type,
            status="pending",
            email_scheduled_at=email_scheduled_at,
        )
        self.db.add(bill)
        self.db.commit()
        self.db.refresh(bill)
        return bill.id
