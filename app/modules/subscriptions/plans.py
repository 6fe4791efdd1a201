"""
Catálogo estático de planes: duración, precio y features por tipo de plan.

Todas las funciones son totales y sin efectos: un identificador desconocido
resuelve al plan de prueba.
"""
from datetime import timedelta
from decimal import Decimal
from typing import Dict, Union

from .models import PlanType
from .schemas import PlanFeatures, PlanOut

UNLIMITED = -1

TRIAL_FEATURES = PlanFeatures(
    max_customers=100,
    max_branches=1,
)

_PAID_BASE = dict(
    max_customers=UNLIMITED,
    max_branches=UNLIMITED,
    advanced_analytics=True,
    priority_support=True,
)

PLAN_FEATURES: Dict[PlanType, PlanFeatures] = {
    PlanType.TRIAL: TRIAL_FEATURES,
    PlanType.MONTHLY: PlanFeatures(**_PAID_BASE),
    PlanType.SEMIANNUAL: PlanFeatures(**_PAID_BASE, custom_branding=True, api_access=True),
    PlanType.ANNUAL: PlanFeatures(**_PAID_BASE, custom_branding=True, api_access=True),
}

PLAN_DURATION_DAYS: Dict[PlanType, int] = {
    PlanType.TRIAL: 30,
    PlanType.MONTHLY: 30,
    PlanType.SEMIANNUAL: 180,
    PlanType.ANNUAL: 365,
}

# Precio plano por período; aproximación, no un libro contable
PLAN_PRICES: Dict[PlanType, Decimal] = {
    PlanType.TRIAL: Decimal("0"),
    PlanType.MONTHLY: Decimal("2.99"),
    PlanType.SEMIANNUAL: Decimal("9.99"),
    PlanType.ANNUAL: Decimal("19.99"),
}

PLAN_BILLING_MONTHS: Dict[PlanType, int] = {
    PlanType.TRIAL: 1,
    PlanType.MONTHLY: 1,
    PlanType.SEMIANNUAL: 6,
    PlanType.ANNUAL: 12,
}

for _table in (PLAN_FEATURES, PLAN_DURATION_DAYS, PLAN_PRICES, PLAN_BILLING_MONTHS):
    _missing = set(PlanType) - set(_table)
    if _missing:
        raise RuntimeError(f"Plan catalog incomplete, missing: {sorted(p.value for p in _missing)}")


def get_plan_features(plan_type: Union[PlanType, str]) -> PlanFeatures:
    """Features del plan; planes desconocidos reciben las de prueba."""
    return PLAN_FEATURES[PlanType.parse(plan_type)]


def get_plan_duration(plan_type: Union[PlanType, str]) -> timedelta:
    """Duración del período del plan; 30 días para planes desconocidos."""
    return timedelta(days=PLAN_DURATION_DAYS[PlanType.parse(plan_type)])


def get_plan_price(plan_type: Union[PlanType, str]) -> Decimal:
    return PLAN_PRICES[PlanType.parse(plan_type)]


def get_plan_monthly_price(plan_type: Union[PlanType, str]) -> Decimal:
    """Precio normalizado a un mes, sin redondear."""
    plan = PlanType.parse(plan_type)
    return PLAN_PRICES[plan] / PLAN_BILLING_MONTHS[plan]


def get_catalog() -> list:
    """Catálogo completo para mostrar en la página de planes."""
    return [
        PlanOut(
            plan_type=plan,
            duration_days=PLAN_DURATION_DAYS[plan],
            price=PLAN_PRICES[plan],
            features=PLAN_FEATURES[plan],
        )
        for plan in PlanType
    ]
