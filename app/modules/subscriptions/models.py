"""
Models for subscription management.
"""
from sqlalchemy import Column, String, DateTime, Integer, Index
from app.database.database import Base
from app.common.mixins import TenantMixin, TimestampMixin
from enum import Enum
import logging

logger = logging.getLogger(__name__)


class PlanType(str, Enum):
    """Tipos de planes."""
    TRIAL = "trial"
    MONTHLY = "monthly"
    SEMIANNUAL = "semiannual"
    ANNUAL = "annual"

    @classmethod
    def parse(cls, value) -> "PlanType":
        """
        Convertir un identificador externo a PlanType.

        Un identificador no reconocido cae al plan de prueba; nunca lanza error.
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            logger.warning(f"Unknown plan type {value!r}, falling back to trial")
            return cls.TRIAL


class SubscriptionStatus(str, Enum):
    """Estados de suscripción."""
    ACTIVE = "active"
    EXPIRED = "expired"
    CANCELLED = "cancelled"
    PAST_DUE = "past_due"

    @classmethod
    def parse(cls, value) -> "SubscriptionStatus":
        """
        Leer un estado almacenado. Un valor desconocido se lee como expirado,
        que nunca concede acceso.
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            logger.warning(f"Unknown subscription status {value!r}, reading as expired")
            return cls.EXPIRED


class Subscription(Base, TenantMixin, TimestampMixin):
    """
    Modelo para suscripciones de tenants.
    Un tenant puede tener múltiples suscripciones (historial); la actual es
    la creada más recientemente. Las filas nunca se eliminan.
    """
    __tablename__ = "subscriptions"
    __table_args__ = (
        Index("idx_subscriptions_tenant_created", "tenant_id", "created_at"),
    )

    # El id autoincremental también desempata suscripciones creadas en el mismo instante
    id = Column(Integer, primary_key=True, autoincrement=True)

    plan_type = Column(String(20), nullable=False, default=PlanType.TRIAL.value)
    status = Column(String(20), nullable=False, default=SubscriptionStatus.ACTIVE.value, index=True)

    # Período pagado actual
    current_period_start = Column(DateTime(timezone=True), nullable=False)
    current_period_end = Column(DateTime(timezone=True), nullable=False)

    # Referencias del procesador de pagos (opacas)
    external_subscription_id = Column(String(255), nullable=True)
    external_customer_id = Column(String(255), nullable=True)

    def __str__(self):
        return f"Subscription {self.plan_type} - {self.status}"
