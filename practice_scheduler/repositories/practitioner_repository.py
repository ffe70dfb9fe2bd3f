# practice_scheduler/repositories/practitioner_repository.py
from typing import Optional

from sqlalchemy.orm import Session

from practice_scheduler.core.exceptions import NotFoundError
from practice_scheduler.models import Practitioner, Client
from practice_scheduler.schemas.bookings import ClientRecord, PractitionerRecord


class PractitionerRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_by_username(self, username: str) -> Optional[PractitionerRecord]:
        row = self.db.query(Practitioner).filter(Practitioner.username == username).first()
        return PractitionerRecord.model_validate(row) if row else None

    def get_practitioner(self, user_id) -> PractitionerRecord:
        row = self.db.query(Practitioner).filter(Practitioner.id == user_id).first()
        if not row:
            raise NotFoundError(f"Practitioner {user_id} not found")
        return PractitionerRecord.model_validate(row)

    def get_client(self, client_id) -> ClientRecord:
        row = self.db.query(Client).filter(Client.id == client_id).first()
        if not row:
            raise NotFoundError(f"Client {client_id} not found")
        return ClientRecord.model_validate(row)
