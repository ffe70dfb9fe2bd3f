# practice_scheduler/core/error_handlers.py
"""Maps domain exceptions to HTTP responses"""
import logging
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from practice_scheduler.core.exceptions import (
    BookingConflictError,
    CalendarProviderError,
    ConfigurationError,
    InvalidStateError,
    NotFoundError,
    OccurrenceConflictError,
    SchedulingError,
)

logger = logging.getLogger(__name__)

STATUS_BY_ERROR = [
    (ConfigurationError, 400),
    (NotFoundError, 404),
    (BookingConflictError, 409),
    (OccurrenceConflictError, 409),
    (InvalidStateError, 409),
    (CalendarProviderError, 502),
]


def status_for(exc: SchedulingError) -> int:
    for error_type, status_code in STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return 500


async def scheduling_error_handler(request: Request, exc: SchedulingError) -> JSONResponse:
    status_code = status_for(exc)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected ({status_code}): {exc}")

    body = {"detail": str(exc), "error": type(exc).__name__}
    if isinstance(exc, BookingConflictError) and exc.conflicting_ids:
        body["conflicting_booking_ids"] = [str(booking_id) for booking_id in exc.conflicting_ids]
    return JSONResponse(status_code=status_code, content=body)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(SchedulingError, scheduling_error_handler)
