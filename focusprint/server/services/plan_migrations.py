"""
Plan migration service.

Moving a client to another plan is validated first: the migration is
classified (upgrade, downgrade, lateral or promotional), blockers stop it
unless forced, and warnings flag clients whose current limits exceed the
target plan. Executing a migration records it, rewrites the client's plan and
limits, and marks the record completed or failed.
"""

from __future__ import annotations

from typing import List, Optional

from sqlmodel.ext.asyncio.session import AsyncSession

from focusprint.core.database.base import utc_now
from focusprint.core.database.entities.admin_profiles import AdminProfile
from focusprint.core.database.entities.clients import Client
from focusprint.core.database.entities.plan_migrations import PlanMigration
from focusprint.core.database.entities.plans import Plan
from focusprint.core.database.repositories.clients import ClientRepository
from focusprint.core.database.repositories.plan_migrations import PlanMigrationRepository
from focusprint.core.database.repositories.plans import PlanRepository
from focusprint.core.errors import NotFoundError, ValidationFailedError
from focusprint.core.logging_config import get_logger
from focusprint.core.models.domain.enums import (
    AuditAction,
    ClientStatus,
    MigrationStatus,
    MigrationType,
    ResourceType,
)
from focusprint.core.models.io.clients import ClientRead
from focusprint.core.models.io.plan_migrations import (
    FeatureChanges,
    LimitChange,
    MigrationExecution,
    MigrationValidation,
    PlanMigrationRead,
    PlanMigrationRequest,
)

from .audit import AuditService

logger = get_logger(__name__)

DEFAULT_MIGRATION_REASON = "Plan migration via admin interface"
UNLIMITED = -1


def classify_migration(current: Optional[Plan], target: Plan) -> MigrationType:
    if current is not None and target.price > current.price:
        return MigrationType.upgrade
    if current is not None and target.price < current.price:
        return MigrationType.downgrade
    if target.is_promotional:
        return MigrationType.promotional
    return MigrationType.lateral


def _exceeds(current_limit: int, target_limit: Optional[int]) -> bool:
    if target_limit is None or target_limit == UNLIMITED:
        return False
    return current_limit == UNLIMITED or current_limit > target_limit


def compare_features(current: Plan, target: Plan) -> FeatureChanges:
    changes = FeatureChanges()
    current_features = current.features or {}
    for feature, enabled in (target.features or {}).items():
        if enabled and not current_features.get(feature):
            changes.gained_features.append(feature)
        elif not enabled and current_features.get(feature):
            changes.lost_features.append(feature)

    current_limits = current.limits or {}
    for limit, value in (target.limits or {}).items():
        if current_limits.get(limit) != value:
            changes.limit_changes[limit] = LimitChange(from_=current_limits.get(limit), to=value)
    return changes


class PlanMigrationService:
    def __init__(self, session: AsyncSession, audit: AuditService) -> None:
        self.repo = PlanMigrationRepository(session)
        self.clients = ClientRepository(session)
        self.plans = PlanRepository(session)
        self.audit = audit

    async def _load(self, client_id: str, target_plan_id: str) -> tuple[Client, Plan, Optional[Plan]]:
        client = await self.clients.get_by_id(client_id)
        if not client:
            raise NotFoundError("Client")
        target = await self.plans.get_by_id(target_plan_id)
        if not target:
            raise NotFoundError("Target plan")
        current = await self.plans.get_by_code(client.plan_type)
        return client, target, current

    async def validate_migration(self, client_id: str, request: PlanMigrationRequest) -> MigrationValidation:
        client, target, current = await self._load(client_id, request.target_plan_id)
        migration_type = classify_migration(current, target)
        blockers: List[str] = []
        warnings: List[str] = []

        if client.status != ClientStatus.active.value:
            blockers.append("Client account is not active")
        if not target.is_active:
            blockers.append("Target plan is not active")
        if target.is_promotional:
            now = utc_now()
            if target.promo_start_date and now < target.promo_start_date:
                blockers.append("Promotional plan has not started yet")
            if target.promo_end_date and now > target.promo_end_date:
                blockers.append("Promotional plan has expired")

        if migration_type is MigrationType.downgrade:
            target_limits = target.limits or {}
            if _exceeds(client.max_users, target_limits.get("max_users")):
                warnings.append(
                    f"Current usage ({client.max_users} users) exceeds target plan limit "
                    f"({target_limits['max_users']} users)"
                )
            if _exceeds(client.max_projects, target_limits.get("max_projects")):
                warnings.append(
                    f"Current usage ({client.max_projects} projects) exceeds target plan limit "
                    f"({target_limits['max_projects']} projects)"
                )

        proration = 0.0
        if current is not None and migration_type is MigrationType.upgrade:
            proration = round((target.price - current.price) * 15 / 30, 2)

        return MigrationValidation(
            is_valid=not blockers,
            migration_type=migration_type.value,
            blockers=blockers,
            warnings=warnings,
            feature_changes=compare_features(current, target) if current else FeatureChanges(),
            proration_estimate=proration,
            current_plan=client.plan_type,
            target_plan=target.code,
        )

    async def execute_migration(
        self, actor: AdminProfile, client_id: str, request: PlanMigrationRequest
    ) -> MigrationExecution:
        validation = await self.validate_migration(client_id, request)
        if not validation.is_valid and not request.force_migration:
            raise ValidationFailedError(
                f"Migration validation failed: {', '.join(validation.blockers)}",
                context={"blockers": validation.blockers},
            )

        client, target, current = await self._load(client_id, request.target_plan_id)
        migration = await self.repo.create(
            PlanMigration(
                client_id=client.id,
                from_plan_id=current.id if current else None,
                to_plan_id=target.id,
                from_plan_type=client.plan_type,
                to_plan_type=target.code,
                migration_type=validation.migration_type,
                migration_reason=request.migration_reason or DEFAULT_MIGRATION_REASON,
                effective_date=request.effective_date or utc_now(),
                proration_amount=validation.proration_estimate,
                proration_currency=target.currency,
                status=MigrationStatus.pending.value,
                created_by=actor.id,
            )
        )

        migration_id = migration.id
        previous_plan = client.plan_type
        target_limits = target.limits or {}
        try:
            client.plan_type = target.code
            client.max_users = target_limits.get("max_users") or 5
            client.max_projects = target_limits.get("max_projects") or 3
            client = await self.clients.update(client)
        except Exception as e:
            await self.clients.session.rollback()
            migration = await self.repo.get_by_id(migration_id)
            migration.status = MigrationStatus.failed.value
            migration.error_message = str(e)
            await self.repo.update(migration)
            logger.error(f"Plan migration {migration_id} failed for client {client_id}: {e}")
            raise

        migration.status = MigrationStatus.completed.value
        migration.completed_at = utc_now()
        migration = await self.repo.update(migration)
        logger.info(f"Plan migration completed: {client_id} {previous_plan} -> {target.code}")

        await self.audit.record(
            actor,
            AuditAction.client_plan_migrated,
            ResourceType.client,
            resource_id=client.id,
            resource_name=client.name,
            description=f"Migrated from {previous_plan} to {target.code} ({validation.migration_type})",
            changes=[{"field": "plan_type", "old_value": previous_plan, "new_value": target.code}],
            context={
                "migration_id": migration.id,
                "forced": request.force_migration and not validation.is_valid,
                "proration_amount": migration.proration_amount,
            },
        )
        return MigrationExecution(
            migration=PlanMigrationRead.model_validate(migration),
            client=ClientRead.model_validate(client),
            validation=validation,
        )

    async def get_client_migration_history(self, client_id: str) -> List[PlanMigration]:
        if not await self.clients.get_by_id(client_id):
            raise NotFoundError("Client")
        return await self.repo.list_by_client(client_id)

    async def get_pending_migrations(self) -> List[PlanMigration]:
        return await self.repo.list_pending()

    async def list_migrations(self, status: Optional[str] = None, limit: int = 100) -> List[PlanMigration]:
        return await self.repo.list(limit=limit, filters={"status": status})
