# practice_scheduler/core/exceptions.py
"""Domain error taxonomy shared by services, tasks and the HTTP layer"""


class SchedulingError(Exception):
    """Base class for all scheduling domain errors"""


class ConfigurationError(SchedulingError):
    """Missing or invalid configuration; nothing to degrade to"""


class NotFoundError(SchedulingError):
    """Requested entity does not exist"""


class CalendarProviderError(SchedulingError):
    """The external calendar could not be reached or rejected the request"""

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.status_code = status_code


class BookingConflictError(SchedulingError):
    """A booking would intersect an existing booking of the same practitioner"""

    def __init__(self, message: str = "Time slot conflicts with existing booking", conflicting_ids=None):
        super().__init__(message)
        self.conflicting_ids = list(conflicting_ids or [])


class OccurrenceConflictError(SchedulingError):
    """The (series_id, occurrence_index) pair is already tagged on another booking"""

    def __init__(self, series_id, occurrence_index: int):
        super().__init__(f"Occurrence {occurrence_index} of series {series_id} already exists")
        self.series_id = series_id
        self.occurrence_index = occurrence_index


class InvalidStateError(SchedulingError):
    """The entity is in a state that does not allow the requested transition"""
