# practice_scheduler/repositories/booking_series_repository.py
import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from practice_scheduler.core.exceptions import NotFoundError
from practice_scheduler.models import BookingSeries
from practice_scheduler.schemas.booking_series import BookingSeriesRecord, CreateSeriesRequest

logger = logging.getLogger(__name__)


class BookingSeriesRepository:
    def __init__(self, db: Session):
        self.db = db

    def _get_row(self, series_id) -> BookingSeries:
        row = self.db.query(BookingSeries).filter(BookingSeries.id == series_id).first()
        if not row:
            raise NotFoundError(f"Booking series {series_id} not found")
        return row

    def get_series(self, series_id) -> BookingSeriesRecord:
        return BookingSeriesRecord.model_validate(self._get_row(series_id))

    def get_active_series(self) -> List[BookingSeriesRecord]:
        rows = self.db.query(BookingSeries).filter(
            BookingSeries.status == "active"
        ).order_by(BookingSeries.created_at).all()
        return [BookingSeriesRecord.model_validate(row) for row in rows]

    def create_series(self, request: CreateSeriesRequest) -> BookingSeriesRecord:
        series = BookingSeries(
            user_id=request.user_id,
            client_id=request.client_id,
            timezone=request.timezone,
            dtstart_local=request.dtstart_local,
            duration_min=request.duration_min,
            recurrence_kind="WEEKLY",
            interval_weeks=request.interval_weeks,
            by_weekday=request.by_weekday,
            mode=request.mode,
            location_text=request.location_text,
            consultation_type=request.consultation_type,
            status="active",
        )
        self.db.add(series)
        self.db.commit()
        self.db.refresh(series)
        logger.info(f"Created booking series {series.id} for user {request.user_id}")
        return BookingSeriesRecord.model_validate(series)

    def set_master_event_id(self, series_id, google_event_id: Optional[str]) -> None:
        row = self._get_row(series_id)
        row.google_master_event_id = google_event_id
        self.db.commit()

    def end_series(self, series_id, until_local: datetime) -> BookingSeriesRecord:
        row = self._get_row(series_id)
        row.status = "ended"
        row.until_local = until_local
        self.db.commit()
        self.db.refresh(row)
        return BookingSeriesRecord.model_validate(row)
