# practice_scheduler/models/booking.py
from sqlalchemy import Column, String, Integer, Boolean, Text, DateTime, ForeignKey, UniqueConstraint, CheckConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func
from practice_scheduler.models.base import Base
import uuid


class Booking(Base):
    __tablename__ = "bookings"
    __table_args__ = (
        # One booking per occurrence of a series; NULL series_id rows are not constrained
        UniqueConstraint("series_id", "occurrence_index", name="uq_bookings_series_occurrence"),
        CheckConstraint("occurrence_index >= 0", name="ck_bookings_occurrence_index"),
        CheckConstraint("end_time > start_time", name="ck_bookings_time_order"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # References
    user_id = Column(UUID(as_uuid=True), ForeignKey("practitioners.id", ondelete="CASCADE"), nullable=False, index=True)
    client_id = Column(UUID(as_uuid=True), ForeignKey("clients.id", ondelete="RESTRICT"), nullable=False)

    # Appointment details
    start_time = Column(DateTime(timezone=True), nullable=False, index=True)
    end_time = Column(DateTime(timezone=True), nullable=False)
    status = Column(String(20), nullable=False, default="pending")  # pending, scheduled, completed, cancelled
    consultation_type = Column(String(20), nullable=True)  # first, followup
    mode = Column(String(20), default="online")  # online, in_person
    location_text = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)

    # Recurring series linkage
    series_id = Column(UUID(as_uuid=True), ForeignKey("booking_series.id", ondelete="SET NULL"), nullable=True, index=True)
    occurrence_index = Column(Integer, nullable=True)
    is_conflicted = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    cancelled_at = Column(DateTime(timezone=True), nullable=True)

    def __repr__(self):
        return f"<Booking(id={self.id}, start_time={self.start_time}, status={self.status})>"
