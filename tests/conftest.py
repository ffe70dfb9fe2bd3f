"""In-memory collaborators shared by the unit tests."""
import uuid
from datetime import datetime, time, timezone
from decimal import Decimal

import pytest
from sqlalchemy.exc import SQLAlchemyError

from practice_scheduler.core.exceptions import (
    BookingConflictError,
    CalendarProviderError,
    NotFoundError,
    OccurrenceConflictError,
)
from practice_scheduler.repositories.booking_repository import ACTIVE_STATUSES
from practice_scheduler.schemas.availability import AvailabilityRuleRecord
from practice_scheduler.schemas.booking_series import BookingSeriesRecord
from practice_scheduler.schemas.bookings import (
    BillingSettingsRecord,
    BookingRecord,
    ClientRecord,
    PractitionerRecord,
)
from practice_scheduler.schemas.calendar_events import CalendarEventRecord, CalendarEventResult
from practice_scheduler.services.booking.billing_policy import BillingPolicyResolver
from practice_scheduler.services.booking.booking_orchestrator import BookingOrchestrator

MADRID = "Europe/Madrid"


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


def rule(weekday: int, start: str, end: str, tz: str = MADRID) -> AvailabilityRuleRecord:
    sh, sm = (int(p) for p in start.split(":"))
    eh, em = (int(p) for p in end.split(":"))
    return AvailabilityRuleRecord(weekday=weekday, start_time=time(sh, sm), end_time=time(eh, em), timezone=tz)


class FakeAvailabilityRepository:
    def __init__(self, rules=None):
        self.rules = list(rules or [])

    def get_weekly_availability(self, user_id):
        return list(self.rules)


class FakeBookingRepository:
    def __init__(self):
        self.bookings = {}
        self.range_queries = []
        # (series_id, occurrence_index) pairs that collide on tagging, as if another run got there first
        self.tag_conflicts = set()
        self.rollbacks = 0

    def add(self, user_id, client_id, start, end, status="scheduled", series_id=None, occurrence_index=None):
        record = BookingRecord(
            id=uuid.uuid4(), user_id=user_id, client_id=client_id, start_time=start, end_time=end,
            status=status, series_id=series_id, occurrence_index=occurrence_index,
        )
        self.bookings[record.id] = record
        return record

    def get_booking(self, booking_id):
        if booking_id not in self.bookings:
            raise NotFoundError(f"Booking {booking_id} not found")
        return self.bookings[booking_id]

    def get_bookings_for_date_range(self, user_id, start, end):
        self.range_queries.append((user_id, start, end))
        return [
            b for b in self.bookings.values()
            if b.user_id == user_id and b.status in ACTIVE_STATUSES and b.start_time < end and b.end_time > start
        ]

    def find_conflicting_booking_ids(self, user_id, start, end, exclude_booking_id=None):
        return [
            b.id for b in self.bookings.values()
            if b.user_id == user_id and b.status in ACTIVE_STATUSES
            and b.start_time < end and b.end_time > start and b.id != exclude_booking_id
        ]

    def create_booking(self, request, status="pending"):
        conflicts = self.find_conflicting_booking_ids(request.user_id, request.start_time, request.end_time)
        if conflicts:
            raise BookingConflictError(conflicting_ids=conflicts)
        record = BookingRecord(
            id=uuid.uuid4(), user_id=request.user_id, client_id=request.client_id,
            start_time=request.start_time, end_time=request.end_time, status=status,
            mode=request.mode, location_text=request.location_text, consultation_type=request.consultation_type,
        )
        self.bookings[record.id] = record
        return record

    def update_status(self, booking_id, status):
        record = self.get_booking(booking_id).model_copy(update={"status": status})
        self.bookings[booking_id] = record
        return record

    def delete_booking(self, booking_id):
        self.bookings.pop(booking_id, None)

    def rollback(self):
        self.rollbacks += 1

    def get_existing_series_occurrence_indices(self, series_id):
        return {b.occurrence_index for b in self.bookings.values() if b.series_id == series_id}

    def tag_booking_with_series(self, booking_id, series_id, occurrence_index):
        taken = any(
            b.series_id == series_id and b.occurrence_index == occurrence_index
            for b in self.bookings.values() if b.id != booking_id
        )
        if taken or (series_id, occurrence_index) in self.tag_conflicts:
            raise OccurrenceConflictError(series_id, occurrence_index)
        record = self.get_booking(booking_id).model_copy(
            update={"series_id": series_id, "occurrence_index": occurrence_index}
        )
        self.bookings[booking_id] = record

    def cancel_future_bookings_for_series(self, series_id, after):
        cancelled = []
        for b in list(self.bookings.values()):
            if b.series_id == series_id and b.status in ("pending", "scheduled") and b.start_time >= after:
                self.bookings[b.id] = b.model_copy(update={"status": "cancelled"})
                cancelled.append(b.id)
        return cancelled

    def series_bookings(self, series_id):
        return sorted(
            (b for b in self.bookings.values() if b.series_id == series_id),
            key=lambda b: b.occurrence_index,
        )


class FakeCalendarEventRepository:
    def __init__(self, fail_loading_ids=False):
        self.events = {}
        self.extra_system_ids = set()
        self.fail_loading_ids = fail_loading_ids

    def get_system_external_event_ids(self, user_id):
        if self.fail_loading_ids:
            raise SQLAlchemyError("database unavailable")
        ids = {e.google_event_id for e in self.events.values() if e.user_id == user_id}
        return ids | self.extra_system_ids

    def record_event(self, booking_id, user_id, google_event_id, meet_link=None, event_type="pending"):
        record = CalendarEventRecord(
            id=uuid.uuid4(), booking_id=booking_id, user_id=user_id, google_event_id=google_event_id,
            google_meet_link=meet_link, event_type=event_type, event_status="created",
        )
        self.events[record.id] = record
        return record

    def get_for_booking(self, booking_id):
        for e in self.events.values():
            if e.booking_id == booking_id and e.event_status != "cancelled":
                return e
        return None

    def mark_confirmed(self, event_id, meet_link=None):
        self.events[event_id] = self.events[event_id].model_copy(
            update={"event_type": "confirmed", "event_status": "updated"}
        )

    def mark_cancelled(self, event_id):
        self.events[event_id] = self.events[event_id].model_copy(update={"event_status": "cancelled"})


class FakeCalendarService:
    def __init__(self, busy_events=None, fail_reads=False, fail_writes=False):
        self.busy_events = list(busy_events or [])
        self.fail_reads = fail_reads
        self.fail_writes = fail_writes
        self.read_calls = []
        self.created = {}
        self.send_updates = {}
        self.patched = []
        self.deleted = []

    async def get_busy_events_for_range(self, user_id, start, end):
        self.read_calls.append((user_id, start, end))
        if self.fail_reads:
            raise CalendarProviderError("Google Calendar unreachable")
        return [e for e in self.busy_events if e.start < end and e.end > start]

    async def create_event(self, user_id, body, send_updates="none"):
        if self.fail_writes:
            raise CalendarProviderError("Google Calendar API error 503")
        event_id = f"evt-{len(self.created) + 1}"
        self.created[event_id] = body
        self.send_updates[event_id] = send_updates
        return CalendarEventResult(success=True, google_event_id=event_id)

    async def patch_event(self, user_id, google_event_id, body, send_updates="all"):
        if self.fail_writes:
            raise CalendarProviderError("Google Calendar API error 503")
        self.patched.append((google_event_id, body))
        return CalendarEventResult(success=True, google_event_id=google_event_id, meet_link="https://meet.example/x")

    async def delete_event(self, user_id, google_event_id, send_updates="all"):
        if self.fail_writes:
            raise CalendarProviderError("Google Calendar API error 503")
        self.deleted.append(google_event_id)
        return True


class FakePractitionerRepository:
    def __init__(self, practitioner, clients):
        self.practitioner = practitioner
        self.clients = {c.id: c for c in clients}

    def get_by_username(self, username):
        return self.practitioner if username == self.practitioner.username else None

    def get_practitioner(self, user_id):
        if user_id != self.practitioner.id:
            raise NotFoundError(f"Practitioner {user_id} not found")
        return self.practitioner

    def get_client(self, client_id):
        if client_id not in self.clients:
            raise NotFoundError(f"Client {client_id} not found")
        return self.clients[client_id]


class FakeBillingRepository:
    def __init__(self, client_settings=None, default_settings=None):
        self.client_settings = dict(client_settings or {})
        self.default_settings = default_settings
        self.bills = []

    def get_client_billing_settings(self, user_id, client_id):
        return self.client_settings.get(client_id)

    def get_default_billing_settings(self, user_id):
        return self.default_settings

    def create_bill(self, booking, client, policy, email_scheduled_at):
        bill_id = uuid.uuid4()
        self.bills.append({
            "id": bill_id,
            "booking_id": booking.id,
            "amount": policy.amount,
            "currency": policy.currency,
            "billing_type": policy.bill_type,
            "email_scheduled_at": email_scheduled_at,
        })
        return bill_id


class FakeSeriesRepository:
    def __init__(self, series=None):
        self.series = {s.id: s for s in (series or [])}

    def get_series(self, series_id):
        if series_id not in self.series:
            raise NotFoundError(f"Booking series {series_id} not found")
        return self.series[series_id]

    def get_active_series(self):
        return [s for s in self.series.values() if s.status == "active"]

    def create_series(self, request):
        record = BookingSeriesRecord(
            id=uuid.uuid4(), user_id=request.user_id, client_id=request.client_id, timezone=request.timezone,
            dtstart_local=request.dtstart_local, duration_min=request.duration_min,
            interval_weeks=request.interval_weeks, by_weekday=request.by_weekday, status="active",
            mode=request.mode, location_text=request.location_text, consultation_type=request.consultation_type,
        )
        self.series[record.id] = record
        return record

    def set_master_event_id(self, series_id, google_event_id):
        self.series[series_id] = self.get_series(series_id).model_copy(
            update={"google_master_event_id": google_event_id}
        )

    def end_series(self, series_id, until_local):
        self.series[series_id] = self.get_series(series_id).model_copy(
            update={"status": "ended", "until_local": until_local}
        )
        return self.series[series_id]


@pytest.fixture
def user_id():
    return uuid.uuid4()


@pytest.fixture
def client_id():
    return uuid.uuid4()


@pytest.fixture
def practitioners(user_id, client_id):
    practitioner = PractitionerRecord(
        id=user_id, username="dra-lopez", name="Dra. López", email="lopez@example.com", timezone=MADRID
    )
    client = ClientRecord(id=client_id, user_id=user_id, name="Ana", last_name="García", email="ana@example.com")
    return FakePractitionerRepository(practitioner, [client])


@pytest.fixture
def bookings():
    return FakeBookingRepository()


@pytest.fixture
def calendar_events():
    return FakeCalendarEventRepository()


@pytest.fixture
def calendar():
    return FakeCalendarService()


@pytest.fixture
def billing():
    return FakeBillingRepository(
        default_settings=BillingSettingsRecord(
            user_id=uuid.uuid4(), billing_type="in-advance", billing_amount=Decimal("60"),
            currency="EUR", payment_email_lead_hours=24,
        )
    )


@pytest.fixture
def orchestrator(bookings, billing, calendar_events, practitioners, calendar):
    return BookingOrchestrator(
        booking_repository=bookings,
        billing_repository=billing,
        calendar_event_repository=calendar_events,
        practitioner_repository=practitioners,
        calendar_service=calendar,
    )


@pytest.fixture
def billing_resolver(billing):
    return BillingPolicyResolver(billing)


@pytest.fixture
def make_series(user_id, client_id):
    def _make(dtstart_local, by_weekday=1, interval_weeks=1, duration_min=30, status="active", **extra):
        return BookingSeriesRecord(
            id=uuid.uuid4(), user_id=user_id, client_id=client_id, timezone=MADRID,
            dtstart_local=dtstart_local, duration_min=duration_min, interval_weeks=interval_weeks,
            by_weekday=by_weekday, status=status, mode="online", **extra,
        )
    return _make
