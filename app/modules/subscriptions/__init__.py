"""
Subscription management module.

Entitlement and lifecycle logic for the multi-tenant SaaS: plan catalog,
subscription lifecycle, access evaluation and fleet statistics.
"""

from .models import Subscription, SubscriptionStatus, PlanType
from .schemas import (
    PlanFeatures, PlanOut,
    SubscriptionOut, SubscriptionCreate, SubscriptionStatusUpdate,
    SubscriptionListItem, AccessDecision, SubscriptionStats
)
from .exceptions import (
    SubscriptionError, PersistenceError,
    SubscriptionNotFound, InvalidStatusTransition
)
from .plans import get_plan_features, get_plan_duration, get_plan_price, UNLIMITED
from .service import SubscriptionService, is_transition_allowed
from .stats import SubscriptionStatsService

__all__ = [
    # Models
    "Subscription",
    "SubscriptionStatus",
    "PlanType",

    # Schemas
    "PlanFeatures",
    "PlanOut",
    "SubscriptionOut",
    "SubscriptionCreate",
    "SubscriptionStatusUpdate",
    "SubscriptionListItem",
    "AccessDecision",
    "SubscriptionStats",

    # Errors
    "SubscriptionError",
    "PersistenceError",
    "SubscriptionNotFound",
    "InvalidStatusTransition",

    # Services
    "get_plan_features",
    "get_plan_duration",
    "get_plan_price",
    "UNLIMITED",
    "SubscriptionService",
    "SubscriptionStatsService",
    "is_transition_allowed",
]
