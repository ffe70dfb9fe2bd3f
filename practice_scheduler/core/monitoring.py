"""Health checks"""
from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session

from practice_scheduler.config.database import get_db
from practice_scheduler.config.redis import get_redis, RedisKeys

health_router = APIRouter()


@health_router.get("")
async def health_check():
    """Basic health check"""
    return {"status": "healthy", "service": "practice-scheduler"}


@health_router.get("/detailed")
async def detailed_health_check(db: Session = Depends(get_db)):
    """Health of database and Redis plus the last series extension run"""
    checks = {
        "api": "healthy",
        "database": "unknown",
        "redis": "unknown",
        "overall": "unknown"
    }
    last_extension_run = None

    try:
        db.execute(text("SELECT 1"))
        checks["database"] = "healthy"
    except Exception as e:
        checks["database"] = f"unhealthy: {str(e)}"

    try:
        redis_client = await get_redis()
        await redis_client.ping()
        last_extension_run = await redis_client.get(RedisKeys.SERIES_EXTENSION_LAST_RUN)
        checks["redis"] = "healthy"
    except Exception as e:
        checks["redis"] = f"unhealthy: {str(e)}"

    if all(status == "healthy" for status in checks.values() if status != "unknown"):
        checks["overall"] = "healthy"
    else:
        checks["overall"] = "degraded"

    if last_extension_run:
        checks["last_series_extension"] = last_extension_run.decode() if isinstance(last_extension_run, bytes) else last_extension_run

    return checks
