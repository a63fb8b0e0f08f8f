"""Unit tests for the plan migration service."""

from datetime import timedelta
from unittest.mock import AsyncMock, patch

import pytest

from focusprint.core.database.base import utc_now
from focusprint.core.database.entities.plans import Plan
from focusprint.core.errors import NotFoundError, ValidationFailedError
from focusprint.core.models.domain.enums import AuditAction, MigrationType, PlanType
from focusprint.core.models.io.plan_migrations import PlanMigrationRequest
from focusprint.server.services.plan_migrations import (
    DEFAULT_MIGRATION_REASON,
    PlanMigrationService,
    classify_migration,
    compare_features,
)

pytestmark = pytest.mark.asyncio


@pytest.fixture
def service(session, audit):
    return PlanMigrationService(session, audit)


class TestClassifyMigration:
    async def test_by_price(self, plans):
        assert classify_migration(plans["free"], plans["pro"]) is MigrationType.upgrade
        assert classify_migration(plans["business"], plans["pro"]) is MigrationType.downgrade
        assert classify_migration(plans["pro"], plans["pro"]) is MigrationType.lateral

    async def test_promotional_at_same_price(self, plans):
        promo = Plan(code="pro_promo", name="Pro promo", price=97.0, is_promotional=True)

        assert classify_migration(plans["pro"], promo) is MigrationType.promotional
        assert classify_migration(None, promo) is MigrationType.promotional

    async def test_compare_features(self, plans):
        changes = compare_features(plans["free"], plans["business"])

        assert sorted(changes.gained_features) == ["api_access", "reports"]
        assert changes.lost_features == []
        assert changes.limit_changes["max_users"].from_ == 5
        assert changes.limit_changes["max_users"].to == 50


class TestValidateMigration:
    async def test_upgrade_with_proration(self, service, plans, make_client):
        client = await make_client(PlanType.free)

        validation = await service.validate_migration(client.id, PlanMigrationRequest(target_plan_id=plans["pro"].id))

        assert validation.is_valid is True
        assert validation.migration_type == "upgrade"
        assert validation.proration_estimate == 48.5
        assert validation.current_plan == "free"
        assert validation.target_plan == "pro"
        assert validation.warnings == []

    async def test_downgrade_warns_about_usage(self, service, plans, make_client):
        client = await make_client(PlanType.business)

        validation = await service.validate_migration(client.id, PlanMigrationRequest(target_plan_id=plans["free"].id))

        assert validation.migration_type == "downgrade"
        assert validation.proration_estimate == 0.0
        assert validation.warnings == [
            "Current usage (50 users) exceeds target plan limit (5 users)",
            "Current usage (50 projects) exceeds target plan limit (3 projects)",
        ]
        assert validation.is_valid is True

    async def test_blockers(self, session, service, plans, make_client):
        client = await make_client(PlanType.free, status="suspended")
        plans["pro"].is_active = False
        session.add(plans["pro"])
        await session.commit()

        validation = await service.validate_migration(client.id, PlanMigrationRequest(target_plan_id=plans["pro"].id))

        assert validation.is_valid is False
        assert validation.blockers == ["Client account is not active", "Target plan is not active"]

    async def test_expired_promotion_is_blocked(self, session, service, plans, make_client):
        client = await make_client()
        promo = Plan(
            code="summer",
            name="Summer",
            price=49.0,
            is_promotional=True,
            promo_start_date=utc_now() - timedelta(days=60),
            promo_end_date=utc_now() - timedelta(days=1),
            limits={"max_users": 10, "max_projects": 5},
        )
        session.add(promo)
        await session.commit()

        validation = await service.validate_migration(client.id, PlanMigrationRequest(target_plan_id=promo.id))

        assert "Promotional plan has expired" in validation.blockers

    async def test_unknown_client_or_plan(self, service, plans, make_client):
        with pytest.raises(NotFoundError, match="Client not found"):
            await service.validate_migration("missing", PlanMigrationRequest(target_plan_id=plans["pro"].id))

        client = await make_client()
        with pytest.raises(NotFoundError, match="Target plan not found"):
            await service.validate_migration(client.id, PlanMigrationRequest(target_plan_id="missing"))


class TestExecuteMigration:
    async def test_execute_updates_client_and_records_migration(self, service, audit, super_admin, plans, make_client):
        client = await make_client(PlanType.free)

        execution = await service.execute_migration(
            super_admin, client.id, PlanMigrationRequest(target_plan_id=plans["business"].id)
        )

        assert execution.client.plan_type == "business"
        assert (execution.client.max_users, execution.client.max_projects) == (50, 50)
        assert execution.migration.status == "completed"
        assert execution.migration.completed_at is not None
        assert execution.migration.from_plan_id == plans["free"].id
        assert execution.migration.migration_reason == DEFAULT_MIGRATION_REASON
        assert execution.migration.proration_amount == 199.5

        logs = await audit.list_logs(action=AuditAction.client_plan_migrated.value)
        assert logs.logs[0].changes == [{"field": "plan_type", "old_value": "free", "new_value": "business"}]
        assert logs.logs[0].context["forced"] is False

        history = await service.get_client_migration_history(client.id)
        assert [m.id for m in history] == [execution.migration.id]

    async def test_blocked_migration_is_rejected(self, service, super_admin, plans, make_client):
        client = await make_client(status="suspended")

        with pytest.raises(ValidationFailedError, match="Client account is not active"):
            await service.execute_migration(super_admin, client.id, PlanMigrationRequest(target_plan_id=plans["pro"].id))

        assert await service.get_client_migration_history(client.id) == []

    async def test_forced_migration_runs_despite_blockers(self, service, audit, super_admin, plans, make_client):
        client = await make_client(status="suspended")

        execution = await service.execute_migration(
            super_admin,
            client.id,
            PlanMigrationRequest(target_plan_id=plans["pro"].id, force_migration=True, migration_reason="Courtesy"),
        )

        assert execution.migration.status == "completed"
        assert execution.migration.migration_reason == "Courtesy"
        logs = await audit.list_logs(action=AuditAction.client_plan_migrated.value)
        assert logs.logs[0].context["forced"] is True

    async def test_failed_client_update_marks_migration_failed(self, service, super_admin, plans, make_client):
        client = await make_client()
        client_id = client.id

        with patch.object(service.clients, "update", AsyncMock(side_effect=RuntimeError("deadlock"))):
            with pytest.raises(RuntimeError, match="deadlock"):
                await service.execute_migration(
                    super_admin, client_id, PlanMigrationRequest(target_plan_id=plans["pro"].id)
                )

        migrations = await service.list_migrations(status="failed")
        assert len(migrations) == 1
        assert migrations[0].error_message == "deadlock"
        assert (await service.clients.get_by_id(client_id)).plan_type == "free"

    async def test_pending_migrations(self, service):
        assert await service.get_pending_migrations() == []

    async def test_history_for_unknown_client(self, service):
        with pytest.raises(NotFoundError):
            await service.get_client_migration_history("missing")
