"""
Tenant display metadata used by administrative reports.
"""
from sqlalchemy import Column, String, DateTime, Uuid
from sqlalchemy.sql import func
from app.database.database import Base
import uuid


class Tenant(Base):
    """Cuenta suscriptora (restaurante) con sus datos de contacto."""
    __tablename__ = "tenants"

    id = Column(Uuid(as_uuid=True), primary_key=True, index=True, default=uuid.uuid4)
    email = Column(String(255), nullable=False, unique=True, index=True)
    display_name = Column(String(255), nullable=True)
    slug = Column(String(100), nullable=True, unique=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __str__(self):
        return f"{self.display_name or self.email}"
