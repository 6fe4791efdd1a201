"""
Pydantic schemas for subscription management.
"""
from typing import Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from .models import PlanType, SubscriptionStatus


# ===== PLAN SCHEMAS =====

class PlanFeatures(BaseModel):
    """Límites y capacidades de un plan. -1 significa ilimitado."""
    model_config = ConfigDict(frozen=True)

    max_customers: int
    max_branches: int
    advanced_analytics: bool = False
    priority_support: bool = False
    custom_branding: bool = False
    api_access: bool = False


class PlanOut(BaseModel):
    """Schema de salida para el catálogo de planes."""
    plan_type: PlanType
    duration_days: int
    price: Decimal
    features: PlanFeatures


# ===== SUBSCRIPTION SCHEMAS =====

class SubscriptionCreate(BaseModel):
    """Schema para crear suscripción."""
    plan_type: str = Field(..., description="Tipo de plan (trial, monthly, semiannual, annual)")
    external_subscription_id: Optional[str] = Field(None, description="ID de suscripción en el procesador de pagos")
    external_customer_id: Optional[str] = Field(None, description="ID de cliente en el procesador de pagos")


class SubscriptionStatusUpdate(BaseModel):
    """Schema para cambiar el estado de una suscripción."""
    status: SubscriptionStatus = Field(..., description="Nuevo estado")


class SubscriptionOut(BaseModel):
    """Schema de salida para suscripciones."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    tenant_id: UUID
    plan_type: PlanType
    status: SubscriptionStatus
    current_period_start: datetime
    current_period_end: datetime
    external_subscription_id: Optional[str] = None
    external_customer_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    # Filas heredadas pueden traer valores fuera del catálogo
    @field_validator("plan_type", mode="before")
    @classmethod
    def parse_plan_type(cls, v):
        return PlanType.parse(v)

    @field_validator("status", mode="before")
    @classmethod
    def parse_status(cls, v):
        return SubscriptionStatus.parse(v)


class SubscriptionListItem(SubscriptionOut):
    """Suscripción con los datos del tenant para revisión administrativa."""
    tenant_email: Optional[str] = None
    tenant_name: Optional[str] = None
    tenant_slug: Optional[str] = None


class SubscriptionList(BaseModel):
    """Schema para lista de suscripciones."""
    subscriptions: List[SubscriptionListItem]
    total: int
    limit: Optional[int]
    offset: int


# ===== ACCESS / STATS SCHEMAS =====

class AccessDecision(BaseModel):
    """Resultado de evaluar el acceso de un tenant. Nunca se persiste."""
    has_access: bool
    subscription: Optional[SubscriptionOut] = None
    features: PlanFeatures
    days_remaining: int = Field(0, ge=0, description="Días completos restantes del período")


class SubscriptionStats(BaseModel):
    """Estadísticas agregadas de la población de suscripciones."""
    total: int = 0
    active: int = 0
    trial: int = 0
    paid: int = 0
    estimated_revenue: Decimal = Decimal("0")
    estimated_monthly_revenue: Decimal = Decimal("0")
    churn_rate_percent: float = 0.0
    plan_distribution: Dict[str, int] = Field(
        default_factory=lambda: {plan.value: 0 for plan in PlanType}
    )


class ReminderQueued(BaseModel):
    """Respuesta al encolar un recordatorio."""
    subscription_id: int
    task_id: Optional[str] = None
    message: str
