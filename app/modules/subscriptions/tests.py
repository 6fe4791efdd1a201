"""
Tests para el módulo de Suscripciones

Cubren:
- Catálogo de planes (duraciones, features, fallback a prueba)
- Creación de suscripciones y cálculo de períodos
- Resolución de la suscripción actual y evaluación de acceso
- Máquina de estados de las transiciones
- Estadísticas de la población y listado administrativo
- Tarea de recordatorio y endpoints HTTP

El tiempo se controla inyectando un reloj fijo en SubscriptionService.
"""

import pytest
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from uuid import uuid4

from sqlalchemy.exc import SQLAlchemyError

from app.modules.email.service import email_service
from app.modules.subscriptions import crud, tasks
from app.modules.subscriptions.exceptions import (
    InvalidStatusTransition, PersistenceError, SubscriptionNotFound
)
from app.modules.subscriptions.models import PlanType, SubscriptionStatus
from app.modules.subscriptions.plans import (
    TRIAL_FEATURES, UNLIMITED, get_catalog, get_plan_duration, get_plan_features, get_plan_price
)
from app.modules.subscriptions.service import SubscriptionService, as_utc, is_transition_allowed
from app.modules.subscriptions.stats import SubscriptionStatsService
from app.modules.tenants.models import Tenant


NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def service_at(db, when):
    return SubscriptionService(db, clock=lambda: when)


def _boom(*args, **kwargs):
    raise PersistenceError("store unavailable")


def insert_row(db, tenant_id, plan_type, status, days=10):
    """Fila escrita directamente en el almacén, sin pasar por el servicio."""
    return crud.create_subscription(
        db,
        tenant_id=tenant_id,
        plan_type=plan_type,
        status=status,
        current_period_start=NOW,
        current_period_end=NOW + timedelta(days=days),
        created_at=NOW,
        updated_at=NOW,
    )


# ===== FIXTURES =====

@pytest.fixture
def tenant_id():
    return uuid4()


@pytest.fixture
def service(db_session):
    return service_at(db_session, NOW)


# ===== TESTS DEL CATÁLOGO =====

class TestPlanCatalog:
    """Tests para el catálogo estático de planes"""

    def test_durations(self):
        assert get_plan_duration(PlanType.TRIAL) == timedelta(days=30)
        assert get_plan_duration(PlanType.MONTHLY) == timedelta(days=30)
        assert get_plan_duration(PlanType.SEMIANNUAL) == timedelta(days=180)
        assert get_plan_duration(PlanType.ANNUAL) == timedelta(days=365)

    def test_unknown_plan_falls_back_to_trial(self):
        """Un plan desconocido nunca lanza error"""
        assert get_plan_duration("enterprise") == timedelta(days=30)
        assert get_plan_features("enterprise") == TRIAL_FEATURES
        assert get_plan_price("enterprise") == Decimal("0")
        assert PlanType.parse(None) == PlanType.TRIAL

    def test_parse_accepts_raw_strings(self):
        assert PlanType.parse(" Annual ") == PlanType.ANNUAL
        assert PlanType.parse("semiannual") == PlanType.SEMIANNUAL

    def test_trial_features(self):
        features = get_plan_features("trial")
        assert features.max_customers == 100
        assert features.max_branches == 1
        assert not features.advanced_analytics
        assert not features.priority_support
        assert not features.custom_branding
        assert not features.api_access

    def test_monthly_features(self):
        features = get_plan_features(PlanType.MONTHLY)
        assert features.max_customers == UNLIMITED
        assert features.max_branches == UNLIMITED
        assert features.advanced_analytics
        assert features.priority_support
        assert features.custom_branding is False
        assert features.api_access is False

    def test_long_plans_unlock_branding_and_api(self):
        for plan in (PlanType.SEMIANNUAL, PlanType.ANNUAL):
            features = get_plan_features(plan)
            assert features.custom_branding is True
            assert features.api_access is True
            assert features.max_customers == UNLIMITED

    def test_catalog_lists_every_plan(self):
        catalog = get_catalog()
        assert [entry.plan_type for entry in catalog] == list(PlanType)
        annual = catalog[-1]
        assert annual.duration_days == 365
        assert annual.price == Decimal("19.99")


# ===== TESTS DE CREACIÓN =====

class TestSubscriptionCreate:
    """Tests para SubscriptionService.create"""

    def test_period_matches_plan_duration(self, service, tenant_id):
        expected = {"trial": 30, "monthly": 30, "semiannual": 180, "annual": 365}
        for plan, days in expected.items():
            subscription = service.create(tenant_id, plan)
            period = subscription.current_period_end - subscription.current_period_start
            assert period == timedelta(days=days)
            assert as_utc(subscription.current_period_start) == NOW

    def test_new_subscription_is_active(self, service, tenant_id):
        subscription = service.create(tenant_id, PlanType.MONTHLY, "sub_123", "cus_456")

        assert subscription.id is not None
        assert subscription.tenant_id == tenant_id
        assert subscription.status == SubscriptionStatus.ACTIVE.value
        assert subscription.plan_type == PlanType.MONTHLY.value
        assert subscription.external_subscription_id == "sub_123"
        assert subscription.external_customer_id == "cus_456"
        assert as_utc(subscription.created_at) == NOW
        assert as_utc(subscription.updated_at) == NOW

    def test_unknown_plan_creates_trial_period(self, service, tenant_id):
        subscription = service.create(tenant_id, "platinum")

        assert subscription.plan_type == PlanType.TRIAL.value
        period = subscription.current_period_end - subscription.current_period_start
        assert period == timedelta(days=30)

    def test_second_active_subscription_is_allowed(self, service, tenant_id):
        """No se reemplaza la suscripción activa existente"""
        first = service.create(tenant_id, PlanType.TRIAL)
        second = service.create(tenant_id, PlanType.ANNUAL)

        db_first = crud.get_subscription(service.db, first.id)
        assert db_first.status == SubscriptionStatus.ACTIVE.value
        assert second.status == SubscriptionStatus.ACTIVE.value
        assert first.id != second.id

    def test_store_failure_propagates(self, service, db_session, tenant_id, monkeypatch):
        def failing_commit():
            raise SQLAlchemyError("disk full")

        monkeypatch.setattr(db_session, "commit", failing_commit)

        with pytest.raises(PersistenceError):
            service.create(tenant_id, PlanType.MONTHLY)


# ===== TESTS DE SUSCRIPCIÓN ACTUAL =====

class TestCurrentSubscription:
    """Tests para current_subscription_for y lookup_current"""

    def test_no_subscription(self, service, tenant_id):
        assert service.current_subscription_for(tenant_id) is None

    def test_most_recent_wins(self, db_session, tenant_id):
        service_at(db_session, NOW).create(tenant_id, PlanType.MONTHLY)
        newer = service_at(db_session, NOW + timedelta(hours=1)).create(tenant_id, PlanType.ANNUAL)

        current = service_at(db_session, NOW).current_subscription_for(tenant_id)
        assert current.id == newer.id

    def test_same_timestamp_uses_insertion_order(self, service, tenant_id):
        service.create(tenant_id, PlanType.MONTHLY)
        last = service.create(tenant_id, PlanType.SEMIANNUAL)

        assert service.current_subscription_for(tenant_id).id == last.id
        assert service.current_subscription_for(tenant_id).id == last.id

    def test_tenants_are_isolated(self, service, tenant_id):
        service.create(uuid4(), PlanType.ANNUAL)
        assert service.current_subscription_for(tenant_id) is None

    def test_store_failure_reads_as_no_subscription(self, service, tenant_id, monkeypatch):
        service.create(tenant_id, PlanType.ANNUAL)
        monkeypatch.setattr(crud, "get_latest_subscription", _boom)

        assert service.current_subscription_for(tenant_id) is None

        result = service.lookup_current(tenant_id)
        assert result.ok is False
        assert "store unavailable" in result.error

    def test_missing_row_is_not_an_error(self, db_session):
        assert crud.get_subscription(db_session, 9999) is None


# ===== TESTS DE ACCESO =====

class TestEvaluateAccess:
    """Tests para evaluate_access"""

    def test_no_subscription_gets_trial_visibility_without_access(self, service, tenant_id):
        decision = service.evaluate_access(tenant_id)

        assert decision.has_access is False
        assert decision.subscription is None
        assert decision.features == TRIAL_FEATURES
        assert decision.days_remaining == 0

    def test_active_with_one_day_left(self, db_session, tenant_id):
        service_at(db_session, NOW).create(tenant_id, PlanType.TRIAL)

        decision = service_at(db_session, NOW + timedelta(days=29)).evaluate_access(tenant_id)

        assert decision.has_access is True
        assert decision.days_remaining == 1
        assert decision.subscription.plan_type == PlanType.TRIAL

    def test_unrecognised_stored_plan_keeps_access(self, service, db_session, tenant_id):
        insert_row(db_session, tenant_id, "pro", "active")

        decision = service.evaluate_access(tenant_id)

        assert decision.has_access is True
        assert decision.subscription is not None
        assert decision.subscription.plan_type == PlanType.TRIAL
        assert decision.features == TRIAL_FEATURES
        assert decision.days_remaining == 10

    def test_unrecognised_stored_status_denies_access(self, service, db_session, tenant_id):
        insert_row(db_session, tenant_id, "monthly", "paused")

        decision = service.evaluate_access(tenant_id)

        assert decision.has_access is False
        assert decision.subscription.status == SubscriptionStatus.EXPIRED
        assert decision.features == get_plan_features(PlanType.MONTHLY)

    def test_partial_day_rounds_up(self, db_session, tenant_id):
        service_at(db_session, NOW).create(tenant_id, PlanType.MONTHLY)

        decision = service_at(db_session, NOW + timedelta(days=29, hours=12)).evaluate_access(tenant_id)

        assert decision.days_remaining == 1

    def test_active_but_period_elapsed(self, db_session, tenant_id):
        service_at(db_session, NOW).create(tenant_id, PlanType.MONTHLY)

        decision = service_at(db_session, NOW + timedelta(days=31)).evaluate_access(tenant_id)

        assert decision.has_access is False
        assert decision.subscription is not None

    def test_days_remaining_never_negative(self, db_session, tenant_id):
        service_at(db_session, NOW).create(tenant_id, PlanType.MONTHLY)

        decision = service_at(db_session, NOW + timedelta(days=40)).evaluate_access(tenant_id)

        assert decision.days_remaining == 0

    def test_cancelled_denies_access_before_period_end(self, service, tenant_id):
        subscription = service.create(tenant_id, PlanType.ANNUAL)
        service.transition_status(subscription.id, SubscriptionStatus.CANCELLED)

        decision = service.evaluate_access(tenant_id)

        assert decision.has_access is False
        assert decision.days_remaining == 365
        # Las features siguen el plan aunque no haya acceso
        assert decision.features.api_access is True

    def test_past_due_denies_access(self, service, tenant_id):
        subscription = service.create(tenant_id, PlanType.MONTHLY)
        service.transition_status(subscription.id, SubscriptionStatus.PAST_DUE)

        assert service.evaluate_access(tenant_id).has_access is False

    def test_evaluation_is_read_only_and_idempotent(self, db_session, tenant_id):
        subscription = service_at(db_session, NOW).create(tenant_id, PlanType.MONTHLY)
        later = service_at(db_session, NOW + timedelta(days=45))

        first = later.evaluate_access(tenant_id)
        second = later.evaluate_access(tenant_id)

        assert first == second
        stored = crud.get_subscription(db_session, subscription.id)
        assert stored.status == SubscriptionStatus.ACTIVE.value

    def test_store_failure_degrades_to_no_access(self, service, tenant_id, monkeypatch):
        service.create(tenant_id, PlanType.ANNUAL)
        monkeypatch.setattr(crud, "get_latest_subscription", _boom)

        decision = service.evaluate_access(tenant_id)
        assert decision.has_access is False
        assert decision.subscription is None
        assert decision.features == TRIAL_FEATURES

        result = service.check_access(tenant_id)
        assert result.ok is False
        assert result.decision is None

    def test_unexpected_failure_degrades_to_no_access(self, service, tenant_id, monkeypatch):
        def explode(*args, **kwargs):
            raise RuntimeError("unexpected")

        monkeypatch.setattr(crud, "get_latest_subscription", explode)

        decision = service.evaluate_access(tenant_id)
        assert decision.has_access is False
        assert decision.features == TRIAL_FEATURES


# ===== TESTS DE TRANSICIONES =====

class TestStatusTransitions:
    """Tests para la máquina de estados"""

    def test_transition_table(self):
        assert is_transition_allowed(SubscriptionStatus.ACTIVE, SubscriptionStatus.EXPIRED)
        assert is_transition_allowed(SubscriptionStatus.ACTIVE, SubscriptionStatus.CANCELLED)
        assert is_transition_allowed(SubscriptionStatus.ACTIVE, SubscriptionStatus.PAST_DUE)
        assert is_transition_allowed(SubscriptionStatus.PAST_DUE, SubscriptionStatus.ACTIVE)
        assert not is_transition_allowed(SubscriptionStatus.CANCELLED, SubscriptionStatus.ACTIVE)
        assert not is_transition_allowed(SubscriptionStatus.EXPIRED, SubscriptionStatus.ACTIVE)
        assert not is_transition_allowed(SubscriptionStatus.ACTIVE, SubscriptionStatus.ACTIVE)

    def test_cancel_refreshes_updated_at(self, db_session, tenant_id):
        subscription = service_at(db_session, NOW).create(tenant_id, PlanType.MONTHLY)
        later = NOW + timedelta(days=1)

        updated = service_at(db_session, later).transition_status(subscription.id, "cancelled")

        assert updated.status == SubscriptionStatus.CANCELLED.value
        assert as_utc(updated.updated_at) == later
        assert as_utc(updated.created_at) == NOW

    def test_payment_recovery(self, service, tenant_id):
        subscription = service.create(tenant_id, PlanType.MONTHLY)

        service.transition_status(subscription.id, SubscriptionStatus.PAST_DUE)
        recovered = service.transition_status(subscription.id, SubscriptionStatus.ACTIVE)

        assert recovered.status == SubscriptionStatus.ACTIVE.value
        assert service.evaluate_access(tenant_id).has_access is True

    def test_illegal_transition_is_rejected_without_writing(self, service, tenant_id):
        subscription = service.create(tenant_id, PlanType.MONTHLY)
        service.transition_status(subscription.id, SubscriptionStatus.CANCELLED)

        with pytest.raises(InvalidStatusTransition) as exc_info:
            service.transition_status(subscription.id, SubscriptionStatus.ACTIVE)

        assert exc_info.value.current == "cancelled"
        assert exc_info.value.requested == "active"
        stored = crud.get_subscription(service.db, subscription.id)
        assert stored.status == SubscriptionStatus.CANCELLED.value

    def test_unknown_requested_status_is_rejected(self, service, tenant_id):
        subscription = service.create(tenant_id, PlanType.MONTHLY)

        with pytest.raises(InvalidStatusTransition) as exc_info:
            service.transition_status(subscription.id, "paused")

        assert exc_info.value.current is None
        assert exc_info.value.requested == "paused"
        stored = crud.get_subscription(service.db, subscription.id)
        assert stored.status == SubscriptionStatus.ACTIVE.value

    def test_unknown_stored_status_is_rejected(self, service, db_session, tenant_id):
        subscription = insert_row(db_session, tenant_id, "monthly", "paused")

        with pytest.raises(InvalidStatusTransition) as exc_info:
            service.transition_status(subscription.id, SubscriptionStatus.CANCELLED)

        assert exc_info.value.current == "paused"
        assert exc_info.value.requested == "cancelled"
        assert crud.get_subscription(db_session, subscription.id).status == "paused"

    def test_unknown_subscription(self, service):
        with pytest.raises(SubscriptionNotFound):
            service.transition_status(12345, SubscriptionStatus.EXPIRED)

    def test_store_failure_propagates(self, service, db_session, tenant_id, monkeypatch):
        subscription = service.create(tenant_id, PlanType.MONTHLY)

        def failing_commit():
            raise SQLAlchemyError("connection lost")

        monkeypatch.setattr(db_session, "commit", failing_commit)

        with pytest.raises(PersistenceError):
            service.transition_status(subscription.id, SubscriptionStatus.EXPIRED)


# ===== TESTS DE ESTADÍSTICAS =====

class TestFleetStats:
    """Tests para SubscriptionStatsService"""

    def test_empty_population(self, db_session):
        stats = SubscriptionStatsService(db_session).compute_stats()

        assert stats.total == 0
        assert stats.active == 0
        assert stats.trial == 0
        assert stats.paid == 0
        assert stats.estimated_revenue == Decimal("0")
        assert stats.churn_rate_percent == 0.0

    def test_churn_is_cancelled_over_total(self, service):
        subscriptions = [service.create(uuid4(), PlanType.MONTHLY) for _ in range(10)]
        for subscription in subscriptions[:2]:
            service.transition_status(subscription.id, SubscriptionStatus.CANCELLED)

        stats = SubscriptionStatsService(service.db).compute_stats()

        assert stats.total == 10
        assert stats.active == 8
        assert stats.paid == 10
        assert stats.trial == 0
        assert stats.churn_rate_percent == 20.0
        assert stats.estimated_revenue == Decimal("29.90")

    def test_expired_does_not_count_as_churn(self, service):
        subscription = service.create(uuid4(), PlanType.MONTHLY)
        service.create(uuid4(), PlanType.MONTHLY)
        service.transition_status(subscription.id, SubscriptionStatus.EXPIRED)

        stats = SubscriptionStatsService(service.db).compute_stats()

        assert stats.churn_rate_percent == 0.0
        assert stats.active == 1

    def test_revenue_and_distribution(self, service):
        for plan in PlanType:
            service.create(uuid4(), plan)

        stats = SubscriptionStatsService(service.db).compute_stats()

        assert stats.trial == 1
        assert stats.paid == 3
        assert stats.estimated_revenue == Decimal("32.97")
        assert stats.estimated_monthly_revenue == Decimal("6.32")
        assert stats.plan_distribution == {
            "trial": 1, "monthly": 1, "semiannual": 1, "annual": 1
        }

    def test_unrecognised_plan_counts_as_trial(self, service, db_session):
        service.create(uuid4(), PlanType.MONTHLY)
        insert_row(db_session, uuid4(), "pro", "active")

        stats = SubscriptionStatsService(db_session).compute_stats()

        assert stats.total == 2
        assert stats.trial == 1
        assert stats.paid == 1
        assert stats.trial + stats.paid == stats.total
        assert stats.plan_distribution["trial"] == 1
        assert sum(stats.plan_distribution.values()) == stats.total
        assert stats.estimated_revenue == get_plan_price(PlanType.MONTHLY)

    def test_store_failure_returns_zeroed_stats(self, service, monkeypatch):
        service.create(uuid4(), PlanType.ANNUAL)
        monkeypatch.setattr(crud, "get_plan_status_rows", _boom)

        stats = SubscriptionStatsService(service.db).compute_stats()

        assert stats.total == 0
        assert stats.estimated_revenue == Decimal("0")
        assert stats.churn_rate_percent == 0.0


class TestListAll:
    """Tests para el listado administrativo"""

    def test_joins_tenant_metadata(self, db_session):
        tenant = Tenant(email="owner@bistro.com", display_name="Bistro", slug="bistro")
        db_session.add(tenant)
        db_session.commit()

        service_at(db_session, NOW).create(tenant.id, PlanType.MONTHLY)
        orphan = service_at(db_session, NOW + timedelta(minutes=5)).create(uuid4(), PlanType.TRIAL)

        items = SubscriptionStatsService(db_session).list_all()

        assert len(items) == 2
        assert items[0].id == orphan.id
        assert items[0].tenant_email is None
        assert items[1].tenant_email == "owner@bistro.com"
        assert items[1].tenant_name == "Bistro"
        assert items[1].tenant_slug == "bistro"

    def test_pagination(self, db_session):
        for hour in range(5):
            service_at(db_session, NOW + timedelta(hours=hour)).create(uuid4(), PlanType.MONTHLY)

        stats_service = SubscriptionStatsService(db_session)
        page = stats_service.list_all(skip=1, limit=2)

        assert len(page) == 2
        assert as_utc(page[0].created_at) == NOW + timedelta(hours=3)
        assert len(stats_service.recent(limit=3)) == 3

    def test_unrecognised_values_are_normalised(self, db_session):
        insert_row(db_session, uuid4(), "pro", "paused")

        items = SubscriptionStatsService(db_session).list_all()

        assert len(items) == 1
        assert items[0].plan_type == PlanType.TRIAL
        assert items[0].status == SubscriptionStatus.EXPIRED

    def test_count_ignores_pagination(self, db_session):
        for hour in range(3):
            service_at(db_session, NOW + timedelta(hours=hour)).create(uuid4(), PlanType.MONTHLY)

        stats_service = SubscriptionStatsService(db_session)

        assert len(stats_service.list_all(limit=1)) == 1
        assert stats_service.count_all() == 3

    def test_count_store_failure_returns_zero(self, db_session, monkeypatch):
        monkeypatch.setattr(crud, "count_subscriptions", _boom)

        assert SubscriptionStatsService(db_session).count_all() == 0

    def test_store_failure_returns_empty_list(self, db_session, monkeypatch):
        monkeypatch.setattr(crud, "get_subscriptions_with_tenants", _boom)

        assert SubscriptionStatsService(db_session).list_all() == []


# ===== TESTS DE RECORDATORIOS =====

class TestReminderTask:
    """Tests para send_subscription_reminder_task"""

    @pytest.fixture
    def sent(self, monkeypatch):
        calls = []

        def fake_send(to_emails, subject, template_name, context):
            calls.append({"to": to_emails, "template": template_name, "context": context})
            return True

        monkeypatch.setattr(email_service, "send_template_email", fake_send)
        return calls

    def test_sends_to_tenant_email(self, db_session, sent):
        tenant = Tenant(email="chef@trattoria.com", display_name="Trattoria")
        db_session.add(tenant)
        db_session.commit()
        subscription = SubscriptionService(db_session).create(tenant.id, PlanType.ANNUAL)

        result = tasks.send_subscription_reminder_task.apply(args=[subscription.id]).get()

        assert result == {"status": "success", "recipient": "chef@trattoria.com"}
        assert sent[0]["to"] == ["chef@trattoria.com"]
        assert sent[0]["context"]["plan_type"] == "annual"
        assert sent[0]["context"]["has_access"] is True

    def test_missing_subscription_is_skipped(self, db_session, sent):
        result = tasks.send_subscription_reminder_task.apply(args=[424242]).get()

        assert result["status"] == "skipped"
        assert sent == []

    def test_missing_tenant_is_skipped(self, db_session, sent):
        subscription = SubscriptionService(db_session).create(uuid4(), PlanType.MONTHLY)

        result = tasks.send_subscription_reminder_task.apply(args=[subscription.id]).get()

        assert result["reason"] == "tenant_email_missing"

    def test_template_renders_plan_details(self):
        html = email_service.render_template(
            tasks.REMINDER_TEMPLATE,
            {
                "tenant_name": "Bistro",
                "plan_type": "monthly",
                "status": "active",
                "has_access": True,
                "days_remaining": 3,
                "period_end": "2026-03-31",
            }
        )
        assert "Bistro" in html
        assert "monthly" in html
        assert "3 days remaining" in html


# ===== TESTS DE API =====

class TestSubscriptionAPI:
    """Tests de los endpoints HTTP"""

    @pytest.fixture
    def headers(self, tenant_id):
        return {"X-Tenant-ID": str(tenant_id)}

    def test_plans_are_public(self, client):
        response = client.get("/subscriptions/plans")

        assert response.status_code == 200
        assert [plan["plan_type"] for plan in response.json()] == [
            "trial", "monthly", "semiannual", "annual"
        ]

    def test_tenant_header_required(self, client):
        assert client.get("/subscriptions/access").status_code == 400
        invalid = client.get("/subscriptions/access", headers={"X-Tenant-ID": "not-a-uuid"})
        assert invalid.status_code == 400

    def test_access_without_subscription(self, client, headers):
        response = client.get("/subscriptions/access", headers=headers)

        assert response.status_code == 200
        body = response.json()
        assert body["has_access"] is False
        assert body["subscription"] is None
        assert body["features"]["max_customers"] == 100

    def test_create_then_access(self, client, headers, tenant_id):
        assert client.get("/subscriptions/current", headers=headers).status_code == 404

        created = client.post(
            "/subscriptions/",
            json={"plan_type": "annual", "external_customer_id": "cus_1"},
            headers=headers
        )
        assert created.status_code == 201
        assert created.json()["tenant_id"] == str(tenant_id)
        assert created.json()["external_customer_id"] == "cus_1"

        access = client.get("/subscriptions/access", headers=headers).json()
        assert access["has_access"] is True
        assert access["days_remaining"] == 365
        assert access["features"]["api_access"] is True

        current = client.get("/subscriptions/current", headers=headers)
        assert current.status_code == 200
        assert current.json()["id"] == created.json()["id"]

    def test_status_transitions(self, client, headers):
        subscription_id = client.post(
            "/subscriptions/", json={"plan_type": "monthly"}, headers=headers
        ).json()["id"]

        cancelled = client.post(
            f"/subscriptions/{subscription_id}/status",
            json={"status": "cancelled"},
            headers=headers
        )
        assert cancelled.status_code == 200
        assert cancelled.json()["status"] == "cancelled"

        reactivated = client.post(
            f"/subscriptions/{subscription_id}/status",
            json={"status": "active"},
            headers=headers
        )
        assert reactivated.status_code == 409

    def test_status_of_other_tenant_is_not_found(self, client, headers):
        subscription_id = client.post(
            "/subscriptions/", json={"plan_type": "monthly"}, headers=headers
        ).json()["id"]

        response = client.post(
            f"/subscriptions/{subscription_id}/status",
            json={"status": "cancelled"},
            headers={"X-Tenant-ID": str(uuid4())}
        )
        assert response.status_code == 404

    def test_admin_stats_and_list(self, client, headers):
        client.post("/subscriptions/", json={"plan_type": "monthly"}, headers=headers)
        client.post("/subscriptions/", json={"plan_type": "trial"}, headers=headers)

        stats = client.get("/subscriptions/admin/stats").json()
        assert stats["total"] == 2
        assert stats["paid"] == 1
        assert Decimal(stats["estimated_revenue"]) == Decimal("2.99")

        listing = client.get("/subscriptions/admin/list", params={"limit": 1}).json()
        assert listing["total"] == 2
        assert len(listing["subscriptions"]) == 1
        assert listing["limit"] == 1
        assert listing["subscriptions"][0]["plan_type"] == "trial"

    def test_reminder_is_queued(self, client, monkeypatch):
        queued = []

        class FakeResult:
            id = "task-1"

        class FakeTask:
            def delay(self, subscription_id):
                queued.append(subscription_id)
                return FakeResult()

        monkeypatch.setattr(tasks, "send_subscription_reminder_task", FakeTask())

        response = client.post("/subscriptions/admin/7/reminder")

        assert response.status_code == 202
        assert response.json()["task_id"] == "task-1"
        assert queued == [7]
