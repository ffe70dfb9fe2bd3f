# practice_scheduler/api/dependencies.py
"""FastAPI dependencies building request-scoped services"""
from fastapi import Depends
from sqlalchemy.orm import Session

from practice_scheduler.config.database import get_db
from practice_scheduler.repositories.availability_repository import AvailabilityRepository
from practice_scheduler.repositories.practitioner_repository import PractitionerRepository
from practice_scheduler.services.availability.availability_service import AvailabilityService
from practice_scheduler.services.booking.booking_orchestrator import BookingOrchestrator
from practice_scheduler.services.booking_series.booking_series_service import BookingSeriesService
from practice_scheduler.services import service_factory


def get_availability_service(db: Session = Depends(get_db)) -> AvailabilityService:
    return service_factory.build_availability_service(db)


def get_booking_orchestrator(db: Session = Depends(get_db)) -> BookingOrchestrator:
    return service_factory.build_booking_orchestrator(db)


def get_booking_series_service(db: Session = Depends(get_db)) -> BookingSeriesService:
    return service_factory.build_booking_series_service(db)


def get_availability_repository(db: Session = Depends(get_db)) -> AvailabilityRepository:
    return AvailabilityRepository(db)


def get_practitioner_repository(db: Session = Depends(get_db)) -> PractitionerRepository:
    return PractitionerRepository(db)
