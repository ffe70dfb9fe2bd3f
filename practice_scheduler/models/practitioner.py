# practice_scheduler/models/practitioner.py
from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func
import uuid
from practice_scheduler.models.base import Base


class Practitioner(Base):
    """Owner of a public booking page"""
    __tablename__ = "practitioners"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    username = Column(String(100), nullable=False, unique=True, index=True)
    name = Column(String(200), nullable=True)
    email = Column(String(255), nullable=False)
    timezone = Column(String(50), default="Europe/Madrid")

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<Practitioner(id={self.id}, username={self.username})>"


class Client(Base):
    __tablename__ = "clients"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("practitioners.id", ondelete="CASCADE"), nullable=False, index=True)

    name = Column(String(200), nullable=False)
    last_name = Column(String(200), nullable=True)
    email = Column(String(255), nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    @property
    def full_name(self) -> str:
        return f"{self.name} {self.last_name}".strip() if self.last_name else self.name
