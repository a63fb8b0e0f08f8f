"""
API endpoints for client licenses.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from focusprint.core.database.entities.admin_profiles import AdminProfile
from focusprint.core.models.domain.enums import AdminPermission
from focusprint.core.models.io.licenses import (
    LicenseChangePlan,
    LicenseCreate,
    LicenseExtendTrial,
    LicenseListResponse,
    LicenseRead,
    LicenseStats,
    LicenseSuspend,
    LicenseUpdate,
)
from focusprint.server.services.deps import LicenseServiceDep, require_permission

router = APIRouter(tags=["licenses"])

view_licenses = require_permission(AdminPermission.view_licenses)
manage_licenses = require_permission(AdminPermission.manage_licenses)


@router.get(
    "",
    response_model=LicenseListResponse,
    summary="List Licenses",
    description="Paginated license listing filtered by status, client and plan type.",
)
async def list_licenses(
    service: LicenseServiceDep,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    status_filter: Optional[str] = Query(None, alias="status"),
    client_id: Optional[str] = Query(None),
    plan_type: Optional[str] = Query(None),
    _: AdminProfile = Depends(view_licenses),
) -> LicenseListResponse:
    return await service.list_licenses(
        page=page, limit=limit, status=status_filter, client_id=client_id, plan_type=plan_type
    )


@router.get(
    "/stats",
    response_model=LicenseStats,
    summary="License Statistics",
    description="Count licenses by status and by plan type.",
)
async def license_stats(service: LicenseServiceDep, _: AdminProfile = Depends(view_licenses)) -> LicenseStats:
    return await service.stats()


@router.post(
    "",
    response_model=LicenseRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create License",
    description="Bind a client to a plan. Trial licenses get a trial end from the plan's trial days.",
    responses={
        201: {"description": "License created"},
        400: {"description": "Invalid dates"},
        404: {"description": "Client or plan not found"},
    },
)
async def create_license(
    data: LicenseCreate,
    service: LicenseServiceDep,
    admin: AdminProfile = Depends(manage_licenses),
) -> LicenseRead:
    """
    Create a license.

    - **client_id**: The licensed client.
    - **plan_code**: Plan whose limits are copied onto the license.
    - **status**: Defaults to `trial`.
    - **start_date**: Defaults to now.
    """
    return LicenseRead.model_validate(await service.create_license(admin, data))


@router.get(
    "/{license_id}",
    response_model=LicenseRead,
    summary="Get License",
    responses={200: {"description": "License found"}, 404: {"description": "License not found"}},
)
async def get_license(
    license_id: str, service: LicenseServiceDep, _: AdminProfile = Depends(view_licenses)
) -> LicenseRead:
    return LicenseRead.model_validate(await service.get_license(license_id))


@router.patch("/{license_id}", response_model=LicenseRead, summary="Update License")
async def update_license(
    license_id: str,
    data: LicenseUpdate,
    service: LicenseServiceDep,
    admin: AdminProfile = Depends(manage_licenses),
) -> LicenseRead:
    return LicenseRead.model_validate(await service.update_license(admin, license_id, data))


@router.delete("/{license_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete License")
async def delete_license(
    license_id: str, service: LicenseServiceDep, admin: AdminProfile = Depends(manage_licenses)
) -> None:
    await service.delete_license(admin, license_id)


@router.post(
    "/{license_id}/suspend",
    response_model=LicenseRead,
    summary="Suspend License",
    responses={200: {"description": "License suspended"}, 400: {"description": "License is already suspended"}},
)
async def suspend_license(
    license_id: str,
    data: LicenseSuspend,
    service: LicenseServiceDep,
    admin: AdminProfile = Depends(manage_licenses),
) -> LicenseRead:
    return LicenseRead.model_validate(await service.suspend_license(admin, license_id, data.reason))


@router.post(
    "/{license_id}/activate",
    response_model=LicenseRead,
    summary="Activate License",
    responses={200: {"description": "License activated"}, 400: {"description": "License is already active"}},
)
async def activate_license(
    license_id: str, service: LicenseServiceDep, admin: AdminProfile = Depends(manage_licenses)
) -> LicenseRead:
    return LicenseRead.model_validate(await service.activate_license(admin, license_id))


@router.post(
    "/{license_id}/extend-trial",
    response_model=LicenseRead,
    summary="Extend Trial",
    description="Push the trial end forward from the later of now and the current trial end.",
    responses={200: {"description": "Trial extended"}, 400: {"description": "Only trial licenses can be extended"}},
)
async def extend_trial(
    license_id: str,
    service: LicenseServiceDep,
    data: Optional[LicenseExtendTrial] = None,
    admin: AdminProfile = Depends(manage_licenses),
) -> LicenseRead:
    days = data.days if data else 30
    return LicenseRead.model_validate(await service.extend_trial(admin, license_id, days))


@router.post(
    "/{license_id}/change-plan",
    response_model=LicenseRead,
    summary="Change License Plan",
    description="Move a license to another active plan and copy that plan's limits.",
)
async def change_license_plan(
    license_id: str,
    data: LicenseChangePlan,
    service: LicenseServiceDep,
    admin: AdminProfile = Depends(manage_licenses),
) -> LicenseRead:
    return LicenseRead.model_validate(await service.change_plan(admin, license_id, data.plan_code))
