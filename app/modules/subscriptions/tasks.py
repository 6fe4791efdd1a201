"""
Tareas asíncronas de Celery para recordatorios de suscripción.
"""
import logging

from app.core.celery import celery_app
from app.database.database import SessionLocal
from app.modules.email.service import email_service

from . import crud
from .service import SubscriptionService, as_utc

logger = logging.getLogger(__name__)

REMINDER_TEMPLATE = "subscription_reminder.html"


@celery_app.task(bind=True, max_retries=3)
def send_subscription_reminder_task(self, subscription_id: int):
    """
    Enviar al tenant un recordatorio sobre el estado de su suscripción.
    """
    db = SessionLocal()
    try:
        subscription = crud.get_subscription(db, subscription_id)
        if subscription is None:
            logger.warning(f"Reminder skipped, subscription {subscription_id} not found")
            return {"status": "skipped", "reason": "subscription_not_found"}

        tenant = crud.get_tenant(db, subscription.tenant_id)
        if tenant is None or not tenant.email:
            logger.warning(f"Reminder skipped, no email for tenant {subscription.tenant_id}")
            return {"status": "skipped", "reason": "tenant_email_missing"}

        decision = SubscriptionService(db).decide(subscription)
        context = {
            "tenant_name": tenant.display_name or tenant.email,
            "plan_type": subscription.plan_type,
            "status": subscription.status,
            "has_access": decision.has_access,
            "days_remaining": decision.days_remaining,
            "period_end": as_utc(subscription.current_period_end).strftime("%Y-%m-%d"),
        }

        success = email_service.send_template_email(
            to_emails=[tenant.email],
            subject="Your Voya subscription",
            template_name=REMINDER_TEMPLATE,
            context=context
        )
        if not success:
            raise RuntimeError("Failed to send subscription reminder")

        logger.info(f"Subscription reminder sent to {tenant.email} for subscription {subscription_id}")
        return {"status": "success", "recipient": tenant.email}

    except Exception as exc:
        logger.error(f"Subscription reminder failed for {subscription_id}: {str(exc)}")

        # Retry with exponential backoff
        if self.request.retries < self.max_retries:
            raise self.retry(exc=exc, countdown=60 * (2 ** self.request.retries))

        return {"status": "failed", "error": str(exc)}
    finally:
        db.close()
