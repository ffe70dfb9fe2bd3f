# practice_scheduler/services/calendar/event_builders.py
"""Google Calendar event bodies for pending, confirmed and recurring appointments"""
import uuid
from datetime import datetime
from typing import Dict, Optional

# Indexed by series by_weekday (0=Sunday)
RRULE_WEEKDAYS = ["SU", "MO", "TU", "WE", "TH", "FR", "SA"]

PENDING_COLOR_ID = "2"
CONFIRMED_COLOR_ID = "10"


def generate_conference_request_id(prefix: str = "booking") -> str:
    return f"{prefix}-{uuid.uuid4().hex}"


def build_weekly_rrule(interval_weeks: int, by_weekday: int) -> str:
    """RRULE string for a weekly series, e.g. RRULE:FREQ=WEEKLY;INTERVAL=2;BYDAY=TU"""
    if not 0 <= by_weekday <= 6:
        raise ValueError(f"by_weekday out of range: {by_weekday}")
    return f"RRULE:FREQ=WEEKLY;INTERVAL={interval_weeks};BYDAY={RRULE_WEEKDAYS[by_weekday]}"


def _restricted_guests(body: Dict) -> Dict:
    body.update({
        "guestsCanModify": False,
        "guestsCanInviteOthers": False,
        "guestsCanSeeOtherGuests": False,
    })
    return body


def build_pending_event(
        client_name: str,
        practitioner_email: str,
        start_time: datetime,
        end_time: datetime,
        booking_id: Optional[str] = None,
) -> Dict:
    """Placeholder holding the slot until the booking is confirmed; the client is not invited yet"""
    body = {
        "summary": f"{client_name} - Pending",
        "description": "Pending confirmation. This appointment is not yet confirmed.",
        "start": {"dateTime": start_time.isoformat(), "timeZone": "UTC"},
        "end": {"dateTime": end_time.isoformat(), "timeZone": "UTC"},
        "colorId": PENDING_COLOR_ID,
        "attendees": [{"email": practitioner_email, "responseStatus": "accepted"}],
    }
    if booking_id:
        body["extendedProperties"] = {"private": {"booking_id": booking_id, "status": "pending"}}
    return _restricted_guests(body)


def build_confirmed_patch(
        client_name: str,
        client_email: str,
        practitioner_name: str,
        practitioner_email: str,
        with_meet: bool = True,
) -> Dict:
    """Patch body turning a pending placeholder into the real appointment"""
    body = {
        "summary": f"{client_name} - {practitioner_name}",
        "description": "Consultation appointment confirmed.",
        "colorId": CONFIRMED_COLOR_ID,
        "attendees": [
            {"email": practitioner_email, "responseStatus": "accepted"},
            {"email": client_email, "responseStatus": "needsAction"},
        ],
        "extendedProperties": {"private": {"status": "confirmed"}},
    }
    if with_meet:
        body["conferenceData"] = {
            "createRequest": {
                "requestId": generate_conference_request_id(),
                "conferenceSolutionKey": {"type": "hangoutsMeet"},
            }
        }
    return _restricted_guests(body)


def build_master_recurring_event(
        client_name: str,
        client_email: str,
        practitioner_name: str,
        practitioner_email: str,
        dtstart_local: datetime,
        dtend_local: datetime,
        timezone: str,
        interval_weeks: int,
        by_weekday: int,
        mode: Optional[str] = None,
        location_text: Optional[str] = None,
) -> Dict:
    """
    Recurring event mirroring a booking series in the client's calendar.

    Start and end are naive local wall times; Google expands the RRULE in
    `timezone`, so the wall time is preserved across DST changes.
    """
    body = {
        "summary": f"{client_name} - {practitioner_name}",
        "description": "Recurring consultation.",
        "start": {"dateTime": dtstart_local.replace(tzinfo=None).isoformat(), "timeZone": timezone},
        "end": {"dateTime": dtend_local.replace(tzinfo=None).isoformat(), "timeZone": timezone},
        "recurrence": [build_weekly_rrule(interval_weeks, by_weekday)],
        "attendees": [
            {"email": practitioner_email, "responseStatus": "accepted"},
            {"email": client_email, "responseStatus": "needsAction"},
        ],
        "colorId": CONFIRMED_COLOR_ID,
    }
    if mode == "in_person":
        if location_text:
            body["location"] = location_text
    else:
        body["conferenceData"] = {
            "createRequest": {
                "requestId": generate_conference_request_id("series"),
                "conferenceSolutionKey": {"type": "hangoutsMeet"},
            }
        }
    return _restricted_guests(body)
