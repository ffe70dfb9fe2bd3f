# practice_scheduler/models/calendar_event.py
from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func
from practice_scheduler.models.base import Base
import uuid


class CalendarEvent(Base):
    """Google event created by this system for a booking (system-owned external event)"""
    __tablename__ = "calendar_events"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    booking_id = Column(UUID(as_uuid=True), ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(UUID(as_uuid=True), ForeignKey("practitioners.id", ondelete="CASCADE"), nullable=False, index=True)

    google_event_id = Column(String, nullable=False, index=True)
    google_meet_link = Column(String, nullable=True)
    event_type = Column(String(20), nullable=False, default="pending")  # pending, confirmed
    event_status = Column(String(20), nullable=False, default="created")  # created, updated, cancelled

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
