# practice_scheduler/models/availability.py
from sqlalchemy import Column, String, SmallInteger, Time, DateTime, ForeignKey, UniqueConstraint, CheckConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func
from practice_scheduler.models.base import Base
import uuid


class AvailabilityRule(Base):
    """One bookable window on a weekday; several rows per weekday model split shifts"""
    __tablename__ = "weekly_availability"
    __table_args__ = (
        UniqueConstraint("user_id", "weekday", "start_time", "end_time", name="uq_weekly_availability_range"),
        CheckConstraint("weekday BETWEEN 0 AND 6", name="ck_weekly_availability_weekday"),
        CheckConstraint("end_time > start_time", name="ck_weekly_availability_order"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("practitioners.id", ondelete="CASCADE"), nullable=False, index=True)

    weekday = Column(SmallInteger, nullable=False)  # 0=Sunday, 6=Saturday
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    timezone = Column(String(50), nullable=False, default="Europe/Madrid")

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
