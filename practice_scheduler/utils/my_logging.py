# practice_scheduler/utils/my_logging.py
"""Logging configuration shared by the API and the Celery worker"""
import logging
import sys
from contextvars import ContextVar

from practice_scheduler.config.settings import get_settings

# Set per request by correlation_id_middleware; "-" outside requests (worker, scripts)
correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="-")

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(correlation_id)s] %(message)s"

QUIET_LOGGERS = [
    "sqlalchemy.engine",
    "sqlalchemy.pool",
    "googleapiclient.discovery",
    "googleapiclient.discovery_cache",
    "google.auth.transport.requests",
    "uvicorn.access",
]


class CorrelationIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = correlation_id_var.get()
        return True


def setup_logging(verbose=True):
    """Configure root logging once; verbose=False keeps only warnings from our code and errors from libraries"""
    settings = get_settings()
    level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO) if verbose else logging.WARNING

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(CorrelationIdFilter())
    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=[handler], force=True)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING if verbose else logging.ERROR)
