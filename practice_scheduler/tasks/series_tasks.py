# practice_scheduler/tasks/series_tasks.py
from datetime import datetime, timezone
from practice_scheduler.config.celery_config import celery_app
from practice_scheduler.config.database import session_scope
from practice_scheduler.config.redis import RedisKeys, create_standalone_redis
from practice_scheduler.config.settings import get_settings
from practice_scheduler.services.service_factory import build_series_extension_service
from redis.exceptions import LockError
import logging
import asyncio
import json

logger = logging.getLogger(__name__)
settings = get_settings()


async def _extend_with_lock() -> dict:
    """Run one extension pass unless another worker already holds the lock"""
    redis_client = create_standalone_redis()
    lock = redis_client.lock(
        RedisKeys.SERIES_EXTENSION_LOCK,
        timeout=settings.SERIES_EXTENSION_LOCK_TIMEOUT_SECONDS,
    )
    try:
        if not await lock.acquire(blocking=False):
            logger.warning("Series extension already running elsewhere, skipping this run")
            return {"status": "skipped", "reason": "locked"}

        try:
            with session_scope() as db:
                summary = await build_series_extension_service(db).extend_all_active_series()
        finally:
            try:
                await lock.release()
            except LockError:
                logger.warning("Series extension lock expired before release")

        result = {"status": "success", **summary.model_dump()}
        await redis_client.set(
            RedisKeys.SERIES_EXTENSION_LAST_RUN,
            json.dumps({**result, "finished_at": datetime.now(timezone.utc).isoformat()}),
        )
        return result
    finally:
        await redis_client.aclose()


@celery_app.task(bind=True, max_retries=3)
def extend_booking_series(self):
    """Weekly: book the next occurrence of every active booking series"""
    try:
        result = asyncio.run(_extend_with_lock())
        logger.info(f"Series extension task result: {result}")
        return result

    except Exception as exc:
        logger.error(f"Series extension task failed: {exc}")
        raise self.retry(countdown=60 * (self.request.retries + 1))
