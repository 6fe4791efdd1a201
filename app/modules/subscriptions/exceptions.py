"""
Errores del módulo de suscripciones.
"""
from typing import Optional


class SubscriptionError(Exception):
    """Base para los errores de suscripciones."""


class PersistenceError(SubscriptionError):
    """El almacén de registros falló al leer o escribir."""


class SubscriptionNotFound(SubscriptionError):
    def __init__(self, subscription_id):
        self.subscription_id = subscription_id
        super().__init__(f"Subscription {subscription_id} not found")


class InvalidStatusTransition(SubscriptionError):
    """La transición de estado solicitada no está permitida."""

    def __init__(self, current: Optional[str], requested: str):
        self.current = current
        self.requested = requested
        super().__init__(f"Transition {current} -> {requested} is not allowed")
