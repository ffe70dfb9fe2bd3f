# practice_scheduler/repositories/calendar_event_repository.py
from typing import Optional, Set

from sqlalchemy.orm import Session

from practice_scheduler.models import CalendarEvent
from practice_scheduler.schemas.calendar_events import CalendarEventRecord


class CalendarEventRepository:
    """Google events created by this system, used to recognise them when they come back as busy time"""

    def __init__(self, db: Session):
        self.db = db

    def get_system_external_event_ids(self, user_id) -> Set[str]:
        rows = self.db.query(CalendarEvent.google_event_id).filter(
            CalendarEvent.user_id == user_id
        ).all()
        return {row.google_event_id for row in rows}

    def record_event(self, booking_id, user_id, google_event_id: str, meet_link: Optional[str] = None,
                     event_type: str = "pending") -> CalendarEventRecord:
        event = CalendarEvent(
            booking_id=booking_id,
            user_id=user_id,
            google_event_id=google_event_id,
            google_meet_link=meet_link,
            event_type=event_type,
            event_status="created",
        )
        self.db.add(event)
        self.db.commit()
        self.db.refresh(event)
        return CalendarEventRecord.model_validate(event)

    def get_for_booking(self, booking_id) -> Optional[CalendarEventRecord]:
        row = self.db.query(CalendarEvent).filter(
            CalendarEvent.booking_id == booking_id,
            CalendarEvent.event_status != "cancelled",
        ).order_by(CalendarEvent.created_at.desc()).first()
        return CalendarEventRecord.model_validate(row) if row else None

    def mark_confirmed(self, event_id, meet_link: Optional[str] = None) -> None:
        event = self.db.query(CalendarEvent).filter(CalendarEvent.id == event_id).first()
        if event:
            event.event_type = "confirmed"
            event.event_status = "updated"
            if meet_link:
                event.google_meet_link = meet_link
            self.db.commit()

    def mark_cancelled(self, event_id) -> None:
        event = self.db.query(CalendarEvent).filter(CalendarEvent.id == event_id).first()
        if event:
            event.event_status = "cancelled"
            self.db.commit()
