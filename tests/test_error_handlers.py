import uuid

import pytest

from practice_scheduler.core.error_handlers import status_for
from practice_scheduler.core.exceptions import (
    BookingConflictError,
    CalendarProviderError,
    ConfigurationError,
    InvalidStateError,
    NotFoundError,
    OccurrenceConflictError,
    SchedulingError,
)


@pytest.mark.parametrize("error, expected", [
    (ConfigurationError("bad window"), 400),
    (NotFoundError("no such booking"), 404),
    (BookingConflictError(), 409),
    (OccurrenceConflictError(uuid.uuid4(), 3), 409),
    (InvalidStateError("cancelled"), 409),
    (CalendarProviderError("Google down", status_code=503), 502),
    (SchedulingError("unexpected"), 500),
])
def test_status_for(error, expected):
    assert status_for(error) == expected


def test_occurrence_conflict_message_names_the_occurrence():
    series_id = uuid.uuid4()
    error = OccurrenceConflictError(series_id, 4)
    assert "Occurrence 4" in str(error)
    assert error.series_id == series_id
