"""
API endpoints for the subscription plan catalogue.
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from focusprint.core.database.entities.admin_profiles import AdminProfile
from focusprint.core.models.domain.enums import AdminPermission
from focusprint.core.models.io.plans import PlanCreate, PlanRead, PlanUpdate
from focusprint.server.services.deps import PlanServiceDep, require_permission

router = APIRouter(tags=["plans"])


@router.get(
    "",
    response_model=List[PlanRead],
    summary="List Plans",
    description="List every plan, optionally only active or inactive ones.",
)
async def list_plans(
    service: PlanServiceDep,
    is_active: Optional[bool] = Query(None, description="Filter by active state."),
    _: AdminProfile = Depends(require_permission(AdminPermission.view_licenses)),
) -> List[PlanRead]:
    return [PlanRead.model_validate(p) for p in await service.list_plans(is_active)]


@router.post(
    "",
    response_model=PlanRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create Plan",
    description="Add a plan to the catalogue. Plan codes are unique.",
    responses={
        201: {"description": "Plan created"},
        400: {"description": "Invalid plan data"},
        409: {"description": "Plan code already exists"},
    },
)
async def create_plan(
    data: PlanCreate,
    service: PlanServiceDep,
    admin: AdminProfile = Depends(require_permission(AdminPermission.modify_plans)),
) -> PlanRead:
    """
    Create a plan.

    - **code**: Lowercase letters and underscores, e.g. `pro_annual`.
    - **price** / **currency** / **interval**: Billing terms.
    - **features**: Feature name to enabled flag.
    - **limits**: `max_users` and `max_projects`, -1 meaning unlimited.
    - **is_promotional**: Requires a valid promotional window.
    """
    return PlanRead.model_validate(await service.create_plan(admin, data))


@router.get(
    "/{plan_id}",
    response_model=PlanRead,
    summary="Get Plan",
    responses={200: {"description": "Plan found"}, 404: {"description": "Plan not found"}},
)
async def get_plan(
    plan_id: str,
    service: PlanServiceDep,
    _: AdminProfile = Depends(require_permission(AdminPermission.view_licenses)),
) -> PlanRead:
    return PlanRead.model_validate(await service.get_plan(plan_id))


@router.patch(
    "/{plan_id}",
    response_model=PlanRead,
    summary="Update Plan",
    description="Partially update a plan. Every successful update bumps the plan version.",
    responses={200: {"description": "Plan updated"}, 404: {"description": "Plan not found"}},
)
async def update_plan(
    plan_id: str,
    data: PlanUpdate,
    service: PlanServiceDep,
    admin: AdminProfile = Depends(require_permission(AdminPermission.modify_plans)),
) -> PlanRead:
    return PlanRead.model_validate(await service.update_plan(admin, plan_id, data))


@router.post("/{plan_id}/activate", response_model=PlanRead, summary="Activate Plan")
async def activate_plan(
    plan_id: str,
    service: PlanServiceDep,
    admin: AdminProfile = Depends(require_permission(AdminPermission.modify_plans)),
) -> PlanRead:
    return PlanRead.model_validate(await service.set_active(admin, plan_id, True))


@router.post("/{plan_id}/deactivate", response_model=PlanRead, summary="Deactivate Plan")
async def deactivate_plan(
    plan_id: str,
    service: PlanServiceDep,
    admin: AdminProfile = Depends(require_permission(AdminPermission.modify_plans)),
) -> PlanRead:
    return PlanRead.model_validate(await service.set_active(admin, plan_id, False))


@router.delete(
    "/{plan_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Plan",
    responses={
        204: {"description": "Plan deleted"},
        400: {"description": "Plan is referenced by licenses"},
        404: {"description": "Plan not found"},
    },
)
async def delete_plan(
    plan_id: str,
    service: PlanServiceDep,
    admin: AdminProfile = Depends(require_permission(AdminPermission.modify_plans)),
) -> None:
    await service.delete_plan(admin, plan_id)
