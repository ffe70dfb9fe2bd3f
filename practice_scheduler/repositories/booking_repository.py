# practice_scheduler/repositories/booking_repository.py
import logging
from datetime import datetime, timezone
from typing import List, Set

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from practice_scheduler.core.exceptions import BookingConflictError, NotFoundError, OccurrenceConflictError
from practice_scheduler.models import Booking
from practice_scheduler.schemas.bookings import BookingRecord, CreateBookingRequest

logger = logging.getLogger(__name__)

# Statuses that hold their time slot
ACTIVE_STATUSES = ("pending", "scheduled", "completed")


class BookingRepository:
    """Bookings table access, including series tagging and overlap protection"""

    def __init__(self, db: Session):
        self.db = db

    def get_booking(self, booking_id) -> BookingRecord:
        row = self.db.query(Booking).filter(Booking.id == booking_id).first()
        if not row:
            raise NotFoundError(f"Booking {booking_id} not found")
        return BookingRecord.model_validate(row)

    def get_bookings_for_date_range(self, user_id, start: datetime, end: datetime) -> List[BookingRecord]:
        """Non-cancelled bookings overlapping [start, end), one query"""
        rows = self.db.query(Booking).filter(
            Booking.user_id == user_id,
            Booking.status.in_(ACTIVE_STATUSES),
            Booking.start_time < end,
            Booking.end_time > start,
        ).order_by(Booking.start_time).all()
        return [BookingRecord.model_validate(row) for row in rows]

    def find_conflicting_booking_ids(self, user_id, start: datetime, end: datetime, exclude_booking_id=None) -> List:
        query = self.db.query(Booking.id).filter(
            Booking.user_id == user_id,
            Booking.status.in_(ACTIVE_STATUSES),
            Booking.start_time < end,
            Booking.end_time > start,
        )
        if exclude_booking_id:
            query = query.filter(Booking.id != exclude_booking_id)
        return [row.id for row in query.all()]

    def create_booking(self, request: CreateBookingRequest, status: str = "pending") -> BookingRecord:
        """Insert a booking; raises BookingConflictError if it intersects an active booking"""
        conflicts = self.find_conflicting_booking_ids(request.user_id, request.start_time, request.end_time)
        if conflicts:
            logger.warning(f"Booking conflict for user {request.user_id} at {request.start_time}: {conflicts}")
            raise BookingConflictError(conflicting_ids=conflicts)

        booking = Booking(
            user_id=request.user_id,
            client_id=request.client_id,
            start_time=request.start_time,
            end_time=request.end_time,
            status=status,
            mode=request.mode,
            location_text=request.location_text,
            consultation_type=request.consultation_type,
            notes=request.notes,
        )
        self.db.add(booking)
        self.db.commit()
        self.db.refresh(booking)
        return BookingRecord.model_validate(booking)

    def update_status(self, booking_id, status: str) -> BookingRecord:
        booking = self.db.query(Booking).filter(Booking.id == booking_id).first()
        if not booking:
            raise NotFoundError(f"Booking {booking_id} not found")
        booking.status = status
        if status == "cancelled":
            booking.cancelled_at = datetime.now(timezone.utc)
        self.db.commit()
        self.db.refresh(booking)
        return BookingRecord.model_validate(booking)

    def delete_booking(self, booking_id) -> None:
        self.db.query(Booking).filter(Booking.id == booking_id).delete(synchronize_session=False)
        self.db.commit()

    # ------------------------------------------------------------------
    # Series
    # ------------------------------------------------------------------

    def rollback(self) -> None:
        """Discard a failed transaction so the session can serve the next unit of work"""
        self.db.rollback()

    def get_existing_series_occurrence_indices(self, series_id) -> Set[int]:
        rows = self.db.query(Booking.occurrence_index).filter(
            Booking.series_id == series_id,
            Booking.occurrence_index.isnot(None),
        ).all()
        return {row.occurrence_index for row in rows}

    def tag_booking_with_series(self, booking_id, series_id, occurrence_index: int) -> None:
        """Attach a booking to (series_id, occurrence_index); the pair is unique"""
        try:
            updated = self.db.query(Booking).filter(Booking.id == booking_id).update(
                {Booking.series_id: series_id, Booking.occurrence_index: occurrence_index},
                synchronize_session=False,
            )
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise OccurrenceConflictError(series_id, occurrence_index)

        if not updated:
            raise NotFoundError(f"Booking {booking_id} not found")

    def cancel_future_bookings_for_series(self, series_id, after: datetime) -> List:
        """Cancel active bookings of a series starting at or after `after`"""
        rows = self.db.query(Booking).filter(
            Booking.series_id == series_id,
            Booking.status.in_(("pending", "scheduled")),
            Booking.start_time >= after,
        ).all()
        now = datetime.now(timezone.utc)
        for row in rows:
            row.status = "cancelled"
            row.cancelled_at = now
        self.db.commit()
        return [row.id for row in rows]
