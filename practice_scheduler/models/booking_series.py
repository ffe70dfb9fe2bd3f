# practice_scheduler/models/booking_series.py
from sqlalchemy import Column, String, Integer, Text, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func
from practice_scheduler.models.base import Base
import uuid


class BookingSeries(Base):
    """Weekly or bi-weekly recurring booking; occurrences live in `bookings`"""
    __tablename__ = "booking_series"
    __table_args__ = (
        CheckConstraint("duration_min > 0", name="ck_booking_series_duration"),
        CheckConstraint("interval_weeks IN (1, 2)", name="ck_booking_series_interval"),
        CheckConstraint("by_weekday BETWEEN 0 AND 6", name="ck_booking_series_weekday"),
        CheckConstraint("recurrence_kind IN ('WEEKLY')", name="ck_booking_series_kind"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("practitioners.id", ondelete="CASCADE"), nullable=False, index=True)
    client_id = Column(UUID(as_uuid=True), ForeignKey("clients.id", ondelete="RESTRICT"), nullable=False)

    timezone = Column(String(50), nullable=False)
    # Wall time of the first occurrence, interpreted in `timezone`
    dtstart_local = Column(DateTime(timezone=False), nullable=False)
    duration_min = Column(Integer, nullable=False)
    recurrence_kind = Column(String(10), nullable=False, default="WEEKLY")
    interval_weeks = Column(Integer, nullable=False, default=1)
    by_weekday = Column(Integer, nullable=False)  # 0=Sunday, 6=Saturday

    # Booking metadata copied onto every occurrence
    mode = Column(String(20), nullable=True)
    location_text = Column(Text, nullable=True)
    consultation_type = Column(String(20), nullable=True)

    status = Column(String(10), nullable=False, default="active", index=True)  # active, ended
    until_local = Column(DateTime(timezone=False), nullable=True)
    google_master_event_id = Column(String, nullable=True, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
