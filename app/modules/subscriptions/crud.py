"""
CRUD operations for subscription management.

"No rows" is reported as None; any database failure is raised as
PersistenceError so callers can tell the two apart.
"""
from typing import List, Optional, Tuple
from uuid import UUID
from datetime import datetime
import logging

from sqlalchemy import select, desc, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.modules.tenants.models import Tenant
from .exceptions import PersistenceError
from .models import Subscription

logger = logging.getLogger(__name__)


# ===== SUBSCRIPTION CRUD =====

def create_subscription(db: Session, **fields) -> Subscription:
    """Insertar una nueva suscripción y devolverla con su id generado."""
    subscription = Subscription(**fields)
    try:
        db.add(subscription)
        db.commit()
        db.refresh(subscription)
    except SQLAlchemyError as e:
        db.rollback()
        raise PersistenceError(f"Could not insert subscription: {e}") from e
    return subscription


def get_subscription(db: Session, subscription_id: int) -> Optional[Subscription]:
    """Obtener suscripción por ID."""
    try:
        result = db.execute(
            select(Subscription).where(Subscription.id == subscription_id)
        )
        return result.scalar_one_or_none()
    except SQLAlchemyError as e:
        raise PersistenceError(f"Could not read subscription {subscription_id}: {e}") from e


def get_latest_subscription(db: Session, tenant_id: UUID) -> Optional[Subscription]:
    """Obtener la suscripción creada más recientemente por un tenant."""
    try:
        result = db.execute(
            select(Subscription)
            .where(Subscription.tenant_id == tenant_id)
            .order_by(desc(Subscription.created_at), desc(Subscription.id))
            .limit(1)
        )
        return result.scalars().first()
    except SQLAlchemyError as e:
        raise PersistenceError(f"Could not read subscriptions for tenant {tenant_id}: {e}") from e


def update_subscription_status(
    db: Session,
    subscription: Subscription,
    status: str,
    updated_at: datetime
) -> Subscription:
    """Actualizar el estado de una suscripción."""
    try:
        subscription.status = status
        subscription.updated_at = updated_at
        db.commit()
        db.refresh(subscription)
    except SQLAlchemyError as e:
        db.rollback()
        raise PersistenceError(f"Could not update subscription {subscription.id}: {e}") from e
    return subscription


def get_plan_status_rows(db: Session) -> List[Tuple[str, str]]:
    """Leer (plan_type, status) de todas las suscripciones en una sola consulta."""
    try:
        result = db.execute(select(Subscription.plan_type, Subscription.status))
        return [tuple(row) for row in result.all()]
    except SQLAlchemyError as e:
        raise PersistenceError(f"Could not read subscription population: {e}") from e


def count_subscriptions(db: Session) -> int:
    """Número total de suscripciones, sin paginar."""
    try:
        return db.execute(select(func.count()).select_from(Subscription)).scalar_one()
    except SQLAlchemyError as e:
        raise PersistenceError(f"Could not count subscriptions: {e}") from e


def get_subscriptions_with_tenants(
    db: Session,
    skip: int = 0,
    limit: Optional[int] = None
) -> List[Tuple[Subscription, Optional[Tenant]]]:
    """Todas las suscripciones, más recientes primero, con los datos del tenant."""
    query = (
        select(Subscription, Tenant)
        .outerjoin(Tenant, Tenant.id == Subscription.tenant_id)
        .order_by(desc(Subscription.created_at), desc(Subscription.id))
        .offset(skip)
    )
    if limit is not None:
        query = query.limit(limit)
    try:
        result = db.execute(query)
        return [(row[0], row[1]) for row in result.all()]
    except SQLAlchemyError as e:
        raise PersistenceError(f"Could not list subscriptions: {e}") from e


# ===== TENANT =====

def get_tenant(db: Session, tenant_id: UUID) -> Optional[Tenant]:
    """Obtener tenant por ID."""
    try:
        result = db.execute(select(Tenant).where(Tenant.id == tenant_id))
        return result.scalar_one_or_none()
    except SQLAlchemyError as e:
        raise PersistenceError(f"Could not read tenant {tenant_id}: {e}") from e
