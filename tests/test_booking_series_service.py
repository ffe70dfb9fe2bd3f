import asyncio
from datetime import datetime
from decimal import Decimal
from zoneinfo import ZoneInfo

import pytest

from practice_scheduler.core.exceptions import BookingConflictError
from practice_scheduler.schemas.booking_series import CancelSeriesRequest, CreateSeriesRequest
from practice_scheduler.services.booking_series.booking_series_service import BookingSeriesService

from conftest import MADRID, FakeSeriesRepository, utc


@pytest.fixture
def series_repository():
    return FakeSeriesRepository()


@pytest.fixture
def service(series_repository, bookings, calendar_events, practitioners, orchestrator, calendar):
    return BookingSeriesService(
        series_repository=series_repository,
        booking_repository=bookings,
        calendar_event_repository=calendar_events,
        practitioner_repository=practitioners,
        booking_orchestrator=orchestrator,
        calendar_service=calendar,
    )


@pytest.fixture
def make_request(user_id, client_id):
    def _make(dtstart_local=datetime(2025, 3, 24, 10, 0), **extra):
        fields = dict(
            user_id=user_id, client_id=client_id, timezone=MADRID, dtstart_local=dtstart_local,
            duration_min=30, by_weekday=1, amount=Decimal("60"),
        )
        fields.update(extra)
        return CreateSeriesRequest(**fields)
    return _make


class TestCreateSeries:

    def test_books_initial_occurrences_and_master_event(self, service, make_request, bookings, billing, calendar):
        result = asyncio.run(service.create_series(make_request()))

        booked = bookings.series_bookings(result.series.id)
        assert [b.occurrence_index for b in booked] == [0, 1]
        assert [b.start_time for b in booked] == [utc(2025, 3, 24, 9), utc(2025, 3, 31, 8)]
        assert result.booking_ids == [b.id for b in booked]
        assert len(billing.bills) == 2

        assert result.google_master_event_id == "evt-3"
        assert result.series.google_master_event_id == "evt-3"
        master = calendar.created["evt-3"]
        assert master["recurrence"] == ["RRULE:FREQ=WEEKLY;INTERVAL=1;BYDAY=MO"]
        assert master["start"] == {"dateTime": "2025-03-24T10:00:00", "timeZone": MADRID}
        assert calendar.send_updates["evt-3"] == "all"

    def test_biweekly_series_with_custom_count(self, service, make_request, bookings):
        result = asyncio.run(service.create_series(make_request(interval_weeks=2, initial_occurrences=3)))

        local = [b.start_time.astimezone(ZoneInfo(MADRID)) for b in bookings.series_bookings(result.series.id)]
        assert [d.strftime("%Y-%m-%d %H:%M") for d in local] == [
            "2025-03-24 10:00", "2025-04-07 10:00", "2025-04-21 10:00"
        ]

    def test_start_is_aligned_to_the_series_weekday(self, service, make_request, bookings, calendar):
        # Sunday start for a Monday series
        result = asyncio.run(service.create_series(make_request(dtstart_local=datetime(2025, 3, 23, 10, 0))))

        booked = bookings.series_bookings(result.series.id)
        assert booked[0].start_time == utc(2025, 3, 24, 9)
        assert calendar.created[result.google_master_event_id]["start"]["dateTime"] == "2025-03-24T10:00:00"

    def test_conflict_leaves_nothing_behind(self, service, make_request, bookings, series_repository, billing,
                                            user_id, client_id):
        existing = bookings.add(user_id, client_id, utc(2025, 3, 31, 8), utc(2025, 3, 31, 9))

        with pytest.raises(BookingConflictError) as exc_info:
            asyncio.run(service.create_series(make_request()))

        assert exc_info.value.conflicting_ids == [existing.id]
        assert series_repository.series == {}
        assert list(bookings.bookings) == [existing.id]
        assert billing.bills == []

    def test_master_event_failure_keeps_the_series(self, service, make_request, bookings, calendar):
        calendar.fail_writes = True

        result = asyncio.run(service.create_series(make_request()))

        assert result.google_master_event_id is None
        assert len(bookings.series_bookings(result.series.id)) == 2

    def test_silent_creation(self, service, make_request, calendar):
        result = asyncio.run(service.create_series(make_request(suppress_calendar_notifications=True)))
        assert calendar.send_updates[result.google_master_event_id] == "none"


class TestCancelSeries:

    def test_ends_series_and_cancels_future_bookings(self, service, make_request, bookings, calendar,
                                                     calendar_events):
        created = asyncio.run(service.create_series(make_request()))
        first, second = bookings.series_bookings(created.series.id)

        result = asyncio.run(service.cancel_series(
            created.series.id,
            CancelSeriesRequest(until_local=datetime(2025, 3, 25, 0, 0), cancel_future_bookings=True),
        ))

        assert result.series.status == "ended"
        assert result.series.until_local == datetime(2025, 3, 25, 0, 0)
        assert result.series.google_master_event_id is None
        assert result.cancelled_booking_ids == [second.id]
        assert bookings.get_booking(first.id).status == "pending"
        assert bookings.get_booking(second.id).status == "cancelled"
        assert calendar.deleted == ["evt-3", "evt-2"]
        assert calendar_events.get_for_booking(second.id) is None

    def test_keeps_bookings_unless_asked(self, service, make_request, bookings, calendar):
        created = asyncio.run(service.create_series(make_request()))

        result = asyncio.run(service.cancel_series(
            created.series.id, CancelSeriesRequest(until_local=datetime(2025, 3, 25, 0, 0))
        ))

        assert result.cancelled_booking_ids == []
        assert all(b.status == "pending" for b in bookings.series_bookings(created.series.id))
        assert calendar.deleted == ["evt-3"]

    def test_cancelling_twice_is_a_no_op(self, service, make_request, calendar):
        created = asyncio.run(service.create_series(make_request()))
        request = CancelSeriesRequest(until_local=datetime(2025, 3, 25, 0, 0))

        asyncio.run(service.cancel_series(created.series.id, request))
        again = asyncio.run(service.cancel_series(created.series.id, request))

        assert again.series.status == "ended"
        assert calendar.deleted == ["evt-3"]

    def test_master_event_id_is_cleared_even_if_delete_fails(self, service, make_request, calendar,
                                                              series_repository):
        created = asyncio.run(service.create_series(make_request()))
        calendar.fail_writes = True

        result = asyncio.run(service.cancel_series(
            created.series.id, CancelSeriesRequest(until_local=datetime(2025, 3, 25, 0, 0))
        ))

        assert result.series.status == "ended"
        assert series_repository.get_series(created.series.id).google_master_event_id is None

    def test_aware_until_is_converted_to_series_time(self, service, make_request):
        created = asyncio.run(service.create_series(make_request()))

        result = asyncio.run(service.cancel_series(
            created.series.id, CancelSeriesRequest(until_local=utc(2025, 4, 1, 10))
        ))
        assert result.series.until_local == datetime(2025, 4, 1, 12, 0)
