"""
Fleet statistics for the subscription population.

Read-only and best-effort: a store failure yields zeroed stats or an empty
listing instead of an error. Revenue figures are flat per-plan estimates
that count every row, historical ones included.

Churn is defined as cancelled subscriptions over total subscriptions.
"""
import logging
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.orm import Session

from . import crud
from .exceptions import PersistenceError
from .models import PlanType, SubscriptionStatus
from .plans import get_plan_monthly_price, get_plan_price
from .schemas import SubscriptionListItem, SubscriptionOut, SubscriptionStats

logger = logging.getLogger(__name__)


class SubscriptionStatsService:
    """Aggregates over every subscription row, regardless of tenant"""

    def __init__(self, db: Session):
        self.db = db

    def compute_stats(self) -> SubscriptionStats:
        try:
            rows = crud.get_plan_status_rows(self.db)
        except PersistenceError as e:
            logger.error(f"Error fetching subscription stats: {e}")
            return SubscriptionStats()

        total = len(rows)
        active = trial = paid = cancelled = 0
        revenue = Decimal("0")
        monthly_revenue = Decimal("0")
        distribution = {plan.value: 0 for plan in PlanType}

        for plan_type, status in rows:
            if status == SubscriptionStatus.ACTIVE.value:
                active += 1
            if status == SubscriptionStatus.CANCELLED.value:
                cancelled += 1
            plan = PlanType.parse(plan_type)
            if plan == PlanType.TRIAL:
                trial += 1
            else:
                paid += 1
            distribution[plan.value] += 1
            revenue += get_plan_price(plan)
            monthly_revenue += get_plan_monthly_price(plan)

        churn_rate = 100.0 * cancelled / total if total > 0 else 0.0

        return SubscriptionStats(
            total=total,
            active=active,
            trial=trial,
            paid=paid,
            estimated_revenue=revenue,
            estimated_monthly_revenue=monthly_revenue.quantize(Decimal("0.01")),
            churn_rate_percent=churn_rate,
            plan_distribution=distribution,
        )

    def list_all(self, skip: int = 0, limit: Optional[int] = None) -> List[SubscriptionListItem]:
        """All subscriptions, newest first, joined with tenant metadata"""
        try:
            rows = crud.get_subscriptions_with_tenants(self.db, skip=skip, limit=limit)
        except PersistenceError as e:
            logger.error(f"Error fetching all subscriptions: {e}")
            return []

        items = []
        for subscription, tenant in rows:
            base = SubscriptionOut.model_validate(subscription).model_dump()
            items.append(SubscriptionListItem(
                **base,
                tenant_email=tenant.email if tenant else None,
                tenant_name=tenant.display_name if tenant else None,
                tenant_slug=tenant.slug if tenant else None,
            ))
        return items

    def count_all(self) -> int:
        """Total de suscripciones, independiente de la paginación"""
        try:
            return crud.count_subscriptions(self.db)
        except PersistenceError as e:
            logger.error(f"Error counting subscriptions: {e}")
            return 0

    def recent(self, limit: int = 10) -> List[SubscriptionListItem]:
        return self.list_all(skip=0, limit=limit)
