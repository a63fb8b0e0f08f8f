"""
API endpoints for platform administrators.

Exposes the caller's own admin context and the management of other admin
profiles and their permissions.
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from focusprint.core.database.entities.admin_profiles import AdminProfile
from focusprint.core.models.domain.enums import AdminPermission
from focusprint.core.models.io.admins import (
    AdminContextRead,
    AdminPermissionsUpdate,
    AdminProfileCreate,
    AdminProfileRead,
)
from focusprint.server.services.deps import AdminServiceDep, CurrentAdmin, require_permission
from focusprint.server.services.rbac import get_admin_context

router = APIRouter(tags=["admins"])


@router.get(
    "/me",
    response_model=AdminContextRead,
    summary="Get Current Admin",
    description="Return the authenticated admin together with the effective permissions of the session.",
    responses={
        200: {"description": "Admin context"},
        401: {"description": "Missing or unknown admin"},
        403: {"description": "Admin account is inactive"},
    },
)
async def get_me(admin: CurrentAdmin) -> AdminContextRead:
    """
    Get the current admin context.

    The permission list is the union of the role's permission set and the
    explicit grants stored on the profile.
    """
    context = get_admin_context(admin)
    return AdminContextRead(
        admin=AdminProfileRead.model_validate(context.admin),
        role=context.role.value,
        permissions=sorted(p.value for p in context.permissions),
        department=context.department,
        session_expires_at=context.session_expires_at,
    )


@router.get(
    "/admins",
    response_model=List[AdminProfileRead],
    summary="List Admins",
    description="List admin profiles, optionally filtered by role and active state.",
    responses={200: {"description": "Admin profiles"}, 403: {"description": "Missing view_admins permission"}},
)
async def list_admins(
    service: AdminServiceDep,
    role: Optional[str] = Query(None, description="Filter by admin role."),
    is_active: Optional[bool] = Query(None, description="Filter by active state."),
    _: AdminProfile = Depends(require_permission(AdminPermission.view_admins)),
) -> List[AdminProfileRead]:
    admins = await service.list_admins(role=role, is_active=is_active)
    return [AdminProfileRead.model_validate(a) for a in admins]


@router.post(
    "/admins",
    response_model=AdminProfileRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create Admin",
    description="Create a new admin profile. The caller must rank at least as high as the new admin's role.",
    responses={
        201: {"description": "Admin created"},
        403: {"description": "Missing manage_admins permission or role too high"},
        409: {"description": "Admin with this email already exists"},
    },
)
async def create_admin(
    data: AdminProfileCreate,
    service: AdminServiceDep,
    admin: AdminProfile = Depends(require_permission(AdminPermission.manage_admins)),
) -> AdminProfileRead:
    """
    Create an admin profile.

    - **email**: Unique sign-in email.
    - **role**: Selects the base permission set.
    - **permissions**: Extra grants on top of the role.
    - **department**: Defaults to the role's department.
    """
    return AdminProfileRead.model_validate(await service.create_admin(admin, data))


@router.get(
    "/admins/{target_admin_id}",
    response_model=AdminProfileRead,
    summary="Get Admin",
    description="Retrieve a single admin profile.",
    responses={200: {"description": "Admin profile"}, 404: {"description": "Admin not found"}},
)
async def get_admin(
    target_admin_id: str,
    service: AdminServiceDep,
    _: AdminProfile = Depends(require_permission(AdminPermission.view_admins)),
) -> AdminProfileRead:
    return AdminProfileRead.model_validate(await service.get_admin(target_admin_id))


@router.patch(
    "/admins/{target_admin_id}/permissions",
    response_model=AdminProfileRead,
    summary="Update Admin Permissions",
    description="Change the role and/or explicit permissions of an admin.",
    responses={
        200: {"description": "Permissions updated"},
        403: {"description": "Not allowed to manage this admin"},
        404: {"description": "Admin not found"},
    },
)
async def update_admin_permissions(
    target_admin_id: str,
    data: AdminPermissionsUpdate,
    service: AdminServiceDep,
    admin: CurrentAdmin,
) -> AdminProfileRead:
    """
    Update an admin's role or permissions.

    Role changes require manage_admins; permission-only changes also accept
    assign_permissions. The service enforces both.
    """
    return AdminProfileRead.model_validate(await service.update_admin_permissions(admin, target_admin_id, data))
