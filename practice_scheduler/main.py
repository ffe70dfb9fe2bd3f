"""
FastAPI application for the practitioner booking backend

Slot computation and series management; the weekly series extension runs in Celery
"""
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging

from practice_scheduler.config.settings import get_settings
from practice_scheduler.core.error_handlers import register_exception_handlers
from practice_scheduler.core.middleware import correlation_id_middleware, request_logging_middleware
from practice_scheduler.core.monitoring import health_router
from practice_scheduler.api.v1.router import api_v1_router
from practice_scheduler.utils.my_logging import setup_logging

settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    setup_logging()
    logger.info(f"{settings.APP_NAME} API starting up")
    logger.info(f"Routes: {sorted(route.path for route in app.routes)}")

    yield

    logger.info(f"{settings.APP_NAME} API shutting down")


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""

    app = FastAPI(
        title=f"{settings.APP_NAME} API",
        description="Practitioner availability, bookings and recurring series",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT"],
        allow_headers=["*"],
    )

    # Last registered runs first: the correlation id is set before logging reads it
    app.middleware("http")(request_logging_middleware)
    app.middleware("http")(correlation_id_middleware)

    register_exception_handlers(app)

    app.include_router(health_router, prefix="/health", tags=["monitoring"])
    app.include_router(api_v1_router, prefix="/api/v1", tags=["api"])

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "practice_scheduler.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )
