"""
API v1 router setup
Organized into: public (booking page) and dashboard (practitioner) routes
"""
from fastapi import APIRouter

from practice_scheduler.api.v1.public import slots
from practice_scheduler.api.v1.dashboard import availability, booking_series, bookings

api_v1_router = APIRouter()

# ============================================================================
# PUBLIC ROUTES
# ============================================================================
api_v1_router.include_router(
    slots.router,
    prefix="/public",
    tags=["Public"]
)

# ============================================================================
# DASHBOARD ROUTES
# ============================================================================
api_v1_router.include_router(
    availability.router,
    prefix="/dashboard",
    tags=["Dashboard"]
)
api_v1_router.include_router(
    booking_series.router,
    prefix="/dashboard",
    tags=["Dashboard"]
)
api_v1_router.include_router(
    bookings.router,
    prefix="/dashboard",
    tags=["Dashboard"]
)


@api_v1_router.get("/", tags=["Info"])
async def api_info():
    """API information and available endpoints"""
    return {
        "version": "1.0",
        "sections": {
            "public": "Booking page: monthly available slots",
            "dashboard": "Practitioner: availability rules, booking series, booking confirmation",
        }
    }
