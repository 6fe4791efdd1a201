"""
API Router for subscription management.
"""
from typing import List, Optional
from fastapi import APIRouter, HTTPException, status, Query

from app.core.config import settings
from app.dependencies.dbDependecies import db_dependency
from app.dependencies.tenantDependencies import TenantId

from . import crud, schemas, tasks
from .exceptions import InvalidStatusTransition, PersistenceError, SubscriptionNotFound
from .plans import get_catalog
from .service import SubscriptionService
from .stats import SubscriptionStatsService

router = APIRouter(
    prefix="/subscriptions",
    tags=["Subscriptions"],
    responses={404: {"description": "Not found"}}
)


# ===== PLAN ENDPOINTS =====

@router.get("/plans", response_model=List[schemas.PlanOut])
def get_plans():
    """
    Obtener el catálogo de planes con duración, precio y features.

    Este endpoint es público y no requiere tenant.
    """
    return get_catalog()


# ===== TENANT ENDPOINTS =====

@router.get("/access", response_model=schemas.AccessDecision)
def get_access(tenant_id: TenantId, db: db_dependency):
    """
    Evaluar el acceso del tenant actual.

    Siempre responde con una decisión; si el almacén falla, la decisión es
    "sin acceso" con las features de prueba.
    """
    return SubscriptionService(db).evaluate_access(tenant_id)


@router.get("/current", response_model=schemas.SubscriptionOut)
def get_current_subscription(tenant_id: TenantId, db: db_dependency):
    """
    Obtener la suscripción actual (la más reciente) del tenant.
    """
    subscription = SubscriptionService(db).current_subscription_for(tenant_id)
    if not subscription:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No hay suscripción"
        )
    return subscription


@router.post("/", response_model=schemas.SubscriptionOut, status_code=status.HTTP_201_CREATED)
def create_subscription(
    subscription_data: schemas.SubscriptionCreate,
    tenant_id: TenantId,
    db: db_dependency
):
    """
    Crear nueva suscripción para el tenant.

    **Nota:** no desactiva una suscripción activa existente; la suscripción
    actual pasa a ser la recién creada.
    """
    try:
        return SubscriptionService(db).create(
            tenant_id=tenant_id,
            plan_type=subscription_data.plan_type,
            external_subscription_id=subscription_data.external_subscription_id,
            external_customer_id=subscription_data.external_customer_id
        )
    except PersistenceError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="No se pudo crear la suscripción"
        )


@router.post("/{subscription_id}/status", response_model=schemas.SubscriptionOut)
def update_subscription_status(
    subscription_id: int,
    status_data: schemas.SubscriptionStatusUpdate,
    tenant_id: TenantId,
    db: db_dependency
):
    """
    Cambiar el estado de una suscripción del tenant.

    Transiciones permitidas: active → expired / cancelled / past_due y
    past_due → active.
    """
    try:
        subscription = crud.get_subscription(db, subscription_id)
        if not subscription or subscription.tenant_id != tenant_id:
            raise SubscriptionNotFound(subscription_id)
        return SubscriptionService(db).transition_status(subscription_id, status_data.status)
    except SubscriptionNotFound:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Suscripción no encontrada"
        )
    except InvalidStatusTransition as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e)
        )
    except PersistenceError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="No se pudo actualizar la suscripción"
        )


# ===== ADMIN ENDPOINTS =====

@router.get("/admin/stats", response_model=schemas.SubscriptionStats)
def get_subscription_stats(db: db_dependency):
    """
    Estadísticas de toda la población de suscripciones.

    Los ingresos son estimados con precios fijos por plan.
    """
    return SubscriptionStatsService(db).compute_stats()


@router.get("/admin/list", response_model=schemas.SubscriptionList)
def list_subscriptions(
    db: db_dependency,
    skip: int = Query(0, ge=0, description="Número de registros a omitir"),
    limit: Optional[int] = Query(
        None, ge=1, le=settings.MAX_PAGE_SIZE, description="Número máximo de registros"
    )
):
    """
    Listar todas las suscripciones con los datos del tenant.
    """
    stats_service = SubscriptionStatsService(db)
    items = stats_service.list_all(skip=skip, limit=limit)
    return schemas.SubscriptionList(
        subscriptions=items,
        total=stats_service.count_all(),
        limit=limit,
        offset=skip
    )


@router.post(
    "/admin/{subscription_id}/reminder",
    response_model=schemas.ReminderQueued,
    status_code=status.HTTP_202_ACCEPTED
)
def send_subscription_reminder(subscription_id: int):
    """
    Encolar un recordatorio por email para el tenant de la suscripción.
    """
    result = tasks.send_subscription_reminder_task.delay(subscription_id)
    return schemas.ReminderQueued(
        subscription_id=subscription_id,
        task_id=getattr(result, "id", None),
        message="Recordatorio encolado"
    )
