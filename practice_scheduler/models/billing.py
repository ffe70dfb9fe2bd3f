# practice_scheduler/models/billing.py
from sqlalchemy import Column, String, Integer, Boolean, Numeric, DateTime, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func
from practice_scheduler.models.base import Base
import uuid


class BillingSettings(Base):
    """Billing terms: one default row per practitioner plus optional per-client overrides"""
    __tablename__ = "billing_settings"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("practitioners.id", ondelete="CASCADE"), nullable=False, index=True)
    client_id = Column(UUID(as_uuid=True), ForeignKey("clients.id", ondelete="CASCADE"), nullable=True)
    is_default = Column(Boolean, nullable=False, default=False)

    billing_type = Column(String(20), nullable=False)  # in-advance, right-after, monthly
    billing_amount = Column(Numeric(10, 2), nullable=False, default=0)
    first_consultation_amount = Column(Numeric(10, 2), nullable=True)
    currency = Column(String(3), nullable=False, default="EUR")
    # 24 = email the payment link a day before, -1 = right after the consultation
    payment_email_lead_hours = Column(Integer, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class Bill(Base):
    __tablename__ = "bills"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    booking_id = Column(UUID(as_uuid=True), ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(UUID(as_uuid=True), ForeignKey("practitioners.id", ondelete="CASCADE"), nullable=False)
    client_id = Column(UUID(as_uuid=True), ForeignKey("clients.id", ondelete="RESTRICT"), nullable=False)

    # Client snapshot at billing time
    client_name = Column(String(400), nullable=False)
    client_email = Column(String(255), nullable=False)

    amount = Column(Numeric(10, 2), nullable=False)
    currency = Column(String(3), nullable=False, default="EUR")
    billing_type = Column(String(20), nullable=False)  # in-advance, right-after, monthly
    status = Column(String(20), nullable=False, default="pending")  # pending, sent, paid, canceled
    email_scheduled_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
