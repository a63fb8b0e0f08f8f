"""
API endpoints for migrating clients between plans.

``POST`` validates a migration without changing anything, ``PUT`` executes
it and ``GET`` returns the client's migration history.
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from focusprint.core.database.entities.admin_profiles import AdminProfile
from focusprint.core.models.domain.enums import AdminPermission
from focusprint.core.models.io.plan_migrations import (
    MigrationExecution,
    MigrationValidation,
    PlanMigrationRead,
    PlanMigrationRequest,
)
from focusprint.server.services.deps import PlanMigrationServiceDep, require_permission

router = APIRouter(tags=["plan-migrations"])


@router.get(
    "/clients/{client_id}/migrate-plan",
    response_model=List[PlanMigrationRead],
    summary="Client Migration History",
    description="Plan migrations of a client, newest first.",
    responses={200: {"description": "Migration history"}, 404: {"description": "Client not found"}},
)
async def get_migration_history(
    client_id: str,
    service: PlanMigrationServiceDep,
    _: AdminProfile = Depends(require_permission(AdminPermission.view_clients)),
) -> List[PlanMigrationRead]:
    return [PlanMigrationRead.model_validate(m) for m in await service.get_client_migration_history(client_id)]


@router.post(
    "/clients/{client_id}/migrate-plan",
    response_model=MigrationValidation,
    summary="Validate Plan Migration",
    description="Check whether a client can move to a plan and preview the consequences.",
    responses={
        200: {"description": "Validation report with blockers, warnings and feature changes"},
        404: {"description": "Client or target plan not found"},
    },
)
async def validate_migration(
    client_id: str,
    data: PlanMigrationRequest,
    service: PlanMigrationServiceDep,
    _: AdminProfile = Depends(require_permission(AdminPermission.view_clients)),
) -> MigrationValidation:
    """
    Validate a plan migration.

    - **migration_type**: upgrade or downgrade by price, promotional for
      promotional targets, lateral otherwise.
    - **blockers**: Reasons the migration cannot run.
    - **warnings**: Current limits the target plan would not cover.
    - **proration_estimate**: Half-month price difference for upgrades.
    """
    return await service.validate_migration(client_id, data)


@router.put(
    "/clients/{client_id}/migrate-plan",
    response_model=MigrationExecution,
    summary="Execute Plan Migration",
    description="Move a client to another plan. Blocked migrations run only with force_migration.",
    responses={
        200: {"description": "Migration completed"},
        400: {"description": "Migration validation failed"},
        404: {"description": "Client or target plan not found"},
    },
)
async def execute_migration(
    client_id: str,
    data: PlanMigrationRequest,
    service: PlanMigrationServiceDep,
    admin: AdminProfile = Depends(require_permission(AdminPermission.modify_plans)),
) -> MigrationExecution:
    return await service.execute_migration(admin, client_id, data)


@router.get(
    "/plan-migrations",
    response_model=List[PlanMigrationRead],
    summary="List Plan Migrations",
    description="Recent plan migrations, or only the pending ones oldest first.",
)
async def list_plan_migrations(
    service: PlanMigrationServiceDep,
    status_filter: Optional[str] = Query(None, alias="status"),
    pending_only: bool = Query(False, description="Return pending migrations, oldest first."),
    limit: int = Query(100, ge=1, le=500),
    _: AdminProfile = Depends(require_permission(AdminPermission.view_clients)),
) -> List[PlanMigrationRead]:
    if pending_only:
        migrations = await service.get_pending_migrations()
    else:
        migrations = await service.list_migrations(status=status_filter, limit=limit)
    return [PlanMigrationRead.model_validate(m) for m in migrations]
