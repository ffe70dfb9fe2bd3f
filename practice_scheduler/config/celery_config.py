"""Celery application factory and beat schedule"""
from celery import Celery
from celery.schedules import crontab

from practice_scheduler.config.settings import get_settings

settings = get_settings()


def create_celery_app() -> Celery:
    """Create the Celery app with the weekly series extension schedule"""
    app = Celery(
        "practice_scheduler",
        broker=settings.CELERY_BROKER_URL,
        backend=settings.CELERY_RESULT_BACKEND,
        include=["practice_scheduler.tasks.series_tasks"],
    )

    app.conf.update(
        task_serializer=settings.CELERY_TASK_SERIALIZER,
        result_serializer=settings.CELERY_TASK_SERIALIZER,
        accept_content=[settings.CELERY_TASK_SERIALIZER],
        timezone="UTC",
        enable_utc=True,
        task_acks_late=True,
        worker_prefetch_multiplier=1,
    )

    app.conf.beat_schedule = {
        "extend-booking-series-weekly": {
            "task": "practice_scheduler.tasks.series_tasks.extend_booking_series",
            "schedule": crontab(
                minute=0,
                hour=settings.SERIES_EXTENSION_HOUR,
                day_of_week=settings.SERIES_EXTENSION_DAY_OF_WEEK,
            ),
        },
    }

    return app


celery_app = create_celery_app()
