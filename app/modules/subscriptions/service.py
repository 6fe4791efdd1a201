"""
Servicio de ciclo de vida de suscripciones.

Implementa:
- Creación de suscripciones con el período calculado desde el catálogo de planes
- Resolución de la suscripción actual de un tenant
- Evaluación de acceso (activa, vencida, cancelada o en mora)
- Transiciones de estado validadas contra una máquina de estados explícita

Las escrituras propagan los errores del almacén. Las lecturas del camino
caliente (evaluate_access, current_subscription_for) registran el error y
devuelven el resultado sin acceso; check_access y lookup_current exponen el
error para quien prefiera fallar cerrado.
"""
import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, FrozenSet, Optional, Union
from uuid import UUID

from sqlalchemy.orm import Session

from . import crud
from .exceptions import InvalidStatusTransition, PersistenceError, SubscriptionNotFound
from .models import PlanType, Subscription, SubscriptionStatus
from .plans import TRIAL_FEATURES, get_plan_duration, get_plan_features
from .schemas import AccessDecision, SubscriptionOut

logger = logging.getLogger(__name__)

ONE_DAY = timedelta(days=1)

ALLOWED_TRANSITIONS: Dict[SubscriptionStatus, FrozenSet[SubscriptionStatus]] = {
    SubscriptionStatus.ACTIVE: frozenset({
        SubscriptionStatus.EXPIRED,
        SubscriptionStatus.CANCELLED,
        SubscriptionStatus.PAST_DUE,
    }),
    SubscriptionStatus.PAST_DUE: frozenset({SubscriptionStatus.ACTIVE}),
    SubscriptionStatus.EXPIRED: frozenset(),
    SubscriptionStatus.CANCELLED: frozenset(),
}


def is_transition_allowed(current: SubscriptionStatus, requested: SubscriptionStatus) -> bool:
    return requested in ALLOWED_TRANSITIONS.get(current, frozenset())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """SQLite devuelve fechas sin zona; se interpretan como UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


@dataclass(frozen=True)
class LookupResult:
    ok: bool
    subscription: Optional[Subscription] = None
    error: Optional[str] = None


@dataclass(frozen=True)
class AccessResult:
    ok: bool
    decision: Optional[AccessDecision] = None
    error: Optional[str] = None


class SubscriptionService:
    """Servicio principal para el ciclo de vida de suscripciones"""

    def __init__(self, db: Session, clock: Optional[Callable[[], datetime]] = None):
        self.db = db
        self._clock = clock or utcnow

    def now(self) -> datetime:
        return as_utc(self._clock())

    # ===== ESCRITURAS =====

    def create(
        self,
        tenant_id: UUID,
        plan_type: Union[PlanType, str],
        external_subscription_id: Optional[str] = None,
        external_customer_id: Optional[str] = None
    ) -> Subscription:
        """
        Crear una suscripción activa para el tenant.

        No reemplaza una suscripción activa existente; el tenant puede quedar
        con varias filas activas y la actual es siempre la más reciente.
        """
        plan = PlanType.parse(plan_type)
        now = self.now()
        try:
            subscription = crud.create_subscription(
                self.db,
                tenant_id=tenant_id,
                plan_type=plan.value,
                status=SubscriptionStatus.ACTIVE.value,
                current_period_start=now,
                current_period_end=now + get_plan_duration(plan),
                external_subscription_id=external_subscription_id,
                external_customer_id=external_customer_id,
                created_at=now,
                updated_at=now,
            )
        except PersistenceError as e:
            logger.error(f"Error creating subscription for tenant {tenant_id}: {e}")
            raise

        logger.info(f"Created {plan.value} subscription {subscription.id} for tenant {tenant_id}")
        return subscription

    def transition_status(
        self,
        subscription_id: int,
        new_status: Union[SubscriptionStatus, str]
    ) -> Subscription:
        """Cambiar el estado de una suscripción si la transición está permitida."""
        try:
            requested = SubscriptionStatus(new_status)
        except ValueError:
            raise InvalidStatusTransition(None, str(new_status))

        subscription = crud.get_subscription(self.db, subscription_id)
        if subscription is None:
            raise SubscriptionNotFound(subscription_id)

        try:
            current = SubscriptionStatus(subscription.status)
        except ValueError:
            logger.warning(
                f"Subscription {subscription_id} has unknown status {subscription.status!r}"
            )
            raise InvalidStatusTransition(subscription.status, requested.value)

        if not is_transition_allowed(current, requested):
            logger.warning(
                f"Rejected transition {current.value} -> {requested.value} "
                f"for subscription {subscription_id}"
            )
            raise InvalidStatusTransition(current.value, requested.value)

        try:
            subscription = crud.update_subscription_status(
                self.db, subscription, requested.value, self.now()
            )
        except PersistenceError as e:
            logger.error(f"Error updating subscription {subscription_id} status: {e}")
            raise

        logger.info(f"Subscription {subscription_id} moved {current.value} -> {requested.value}")
        return subscription

    # ===== LECTURAS =====

    def lookup_current(self, tenant_id: UUID) -> LookupResult:
        """Suscripción más reciente del tenant, con el error explícito si falla."""
        try:
            subscription = crud.get_latest_subscription(self.db, tenant_id)
        except PersistenceError as e:
            return LookupResult(ok=False, error=str(e))
        return LookupResult(ok=True, subscription=subscription)

    def current_subscription_for(self, tenant_id: UUID) -> Optional[Subscription]:
        result = self.lookup_current(tenant_id)
        if not result.ok:
            logger.error(f"Error fetching subscription for tenant {tenant_id}: {result.error}")
            return None
        return result.subscription

    def decide(self, subscription: Optional[Subscription]) -> AccessDecision:
        """Decisión de acceso para una suscripción ya resuelta. Pura, sin escrituras."""
        if subscription is None:
            return AccessDecision(has_access=False, subscription=None, features=TRIAL_FEATURES)

        now = self.now()
        period_end = as_utc(subscription.current_period_end)
        has_access = subscription.status == SubscriptionStatus.ACTIVE and period_end > now
        days_remaining = math.ceil((period_end - now) / ONE_DAY)

        return AccessDecision(
            has_access=has_access,
            subscription=SubscriptionOut.model_validate(subscription),
            features=get_plan_features(subscription.plan_type),
            days_remaining=max(days_remaining, 0),
        )

    def check_access(self, tenant_id: UUID) -> AccessResult:
        lookup = self.lookup_current(tenant_id)
        if not lookup.ok:
            return AccessResult(ok=False, error=lookup.error)
        return AccessResult(ok=True, decision=self.decide(lookup.subscription))

    def evaluate_access(self, tenant_id: UUID) -> AccessDecision:
        """
        Evaluar el acceso del tenant. Siempre devuelve una decisión.

        Un tenant sin suscripción ve las features de prueba pero no tiene
        acceso. Cualquier fallo se degrada a ese mismo resultado.
        """
        try:
            result = self.check_access(tenant_id)
            if result.ok:
                return result.decision
            logger.error(f"Error checking subscription access for tenant {tenant_id}: {result.error}")
        except Exception as e:
            logger.error(f"Unexpected error checking subscription access for tenant {tenant_id}: {e}")
        return self.decide(None)
