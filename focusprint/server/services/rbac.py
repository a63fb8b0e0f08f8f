"""
Role-based access control for platform administrators.

Each admin role maps to a fixed permission set; an admin profile can carry
extra explicit grants on top of it. Every admin request is checked against the
union of both sets. Roles are also ranked so an admin can only create or
promote admins up to their own level.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Iterable, List, Optional, Set

from sqlmodel.ext.asyncio.session import AsyncSession

from focusprint.core.database.base import utc_now
from focusprint.core.database.entities.admin_profiles import AdminProfile
from focusprint.core.database.repositories.admin_profiles import AdminProfileRepository
from focusprint.core.errors import AuthorizationError, ConflictError, NotFoundError, validate_email
from focusprint.core.logging_config import get_logger
from focusprint.core.models.domain.enums import AdminPermission, AdminRole, AuditAction, ResourceType
from focusprint.core.models.io.admins import AdminPermissionsUpdate, AdminProfileCreate
from focusprint.server.core.config import settings

from .audit import AuditService, diff_changes

logger = get_logger(__name__)

P = AdminPermission

ROLE_PERMISSIONS: dict[AdminRole, frozenset[AdminPermission]] = {
    AdminRole.super_admin: frozenset(AdminPermission),
    AdminRole.operations_admin: frozenset(
        {
            P.manage_clients,
            P.view_clients,
            P.suspend_clients,
            P.manage_licenses,
            P.view_licenses,
            P.client_impersonation,
            P.view_support_tickets,
            P.manage_support_tickets,
            P.view_metrics,
            P.audit_access,
        }
    ),
    AdminRole.financial_admin: frozenset(
        {
            P.view_clients,
            P.view_licenses,
            P.view_financials,
            P.manage_billing,
            P.export_financial_data,
            P.manage_stripe,
            P.view_metrics,
            P.export_metrics,
            P.custom_reports,
        }
    ),
    AdminRole.technical_admin: frozenset(
        {
            P.view_clients,
            P.view_licenses,
            P.system_config,
            P.feature_flags,
            P.maintenance_mode,
            P.audit_access,
            P.security_monitoring,
            P.view_metrics,
        }
    ),
    AdminRole.support_admin: frozenset(
        {
            P.view_clients,
            P.view_licenses,
            P.client_impersonation,
            P.view_support_tickets,
            P.manage_support_tickets,
            P.view_metrics,
        }
    ),
}

ROLE_HIERARCHY: dict[AdminRole, int] = {
    AdminRole.super_admin: 5,
    AdminRole.operations_admin: 4,
    AdminRole.financial_admin: 3,
    AdminRole.technical_admin: 3,
    AdminRole.support_admin: 1,
}

ROLE_DEPARTMENTS: dict[AdminRole, str] = {
    AdminRole.super_admin: "Leadership",
    AdminRole.operations_admin: "Operations",
    AdminRole.financial_admin: "Finance",
    AdminRole.technical_admin: "Engineering",
    AdminRole.support_admin: "Customer Support",
}


@dataclass
class PermissionCheck:
    allowed: bool
    reason: Optional[str] = None
    required_permission: Optional[AdminPermission] = None


@dataclass
class AdminContext:
    """Effective permissions of an admin for the current session."""

    admin: AdminProfile
    role: AdminRole
    permissions: Set[AdminPermission] = field(default_factory=set)
    department: Optional[str] = None
    session_expires_at: Optional[datetime] = None


def _role(value: AdminRole | str) -> Optional[AdminRole]:
    try:
        return AdminRole(value)
    except ValueError:
        return None


def role_level(role: AdminRole | str) -> int:
    resolved = _role(role)
    return ROLE_HIERARCHY.get(resolved, 0) if resolved else 0


def effective_permissions(profile: AdminProfile) -> Set[AdminPermission]:
    """Union of the role's permissions and the profile's explicit grants.

    Unknown permission names stored on the profile are ignored.
    """
    role = _role(profile.role)
    permissions: Set[AdminPermission] = set(ROLE_PERMISSIONS.get(role, frozenset())) if role else set()
    for name in profile.permissions or []:
        try:
            permissions.add(AdminPermission(name))
        except ValueError:
            logger.warning(f"Ignoring unknown permission '{name}' on admin {profile.id}")
    return permissions


def has_permission(profile: AdminProfile, permission: AdminPermission) -> PermissionCheck:
    if not profile.is_active:
        return PermissionCheck(allowed=False, reason="Admin account is inactive", required_permission=permission)
    if permission in effective_permissions(profile):
        return PermissionCheck(allowed=True, required_permission=permission)
    return PermissionCheck(
        allowed=False,
        reason=f"Missing required permission: {permission.value}",
        required_permission=permission,
    )


def has_any_permission(profile: AdminProfile, permissions: Iterable[AdminPermission]) -> PermissionCheck:
    permissions = list(permissions)
    for permission in permissions:
        check = has_permission(profile, permission)
        if check.allowed or not profile.is_active:
            return check
    names = ", ".join(p.value for p in permissions)
    return PermissionCheck(allowed=False, reason=f"Requires any of: {names}")


def has_all_permissions(profile: AdminProfile, permissions: Iterable[AdminPermission]) -> PermissionCheck:
    for permission in permissions:
        check = has_permission(profile, permission)
        if not check.allowed:
            return check
    return PermissionCheck(allowed=True)


def has_role(profile: AdminProfile, role: AdminRole) -> bool:
    """Whether the profile's role ranks at least as high as ``role``."""
    return role_level(profile.role) >= role_level(role)


def can_manage_role(manager_role: AdminRole | str, target_role: AdminRole | str) -> bool:
    return role_level(manager_role) >= role_level(target_role)


def get_admin_context(profile: AdminProfile, session_hours: Optional[int] = None) -> AdminContext:
    hours = session_hours if session_hours is not None else settings.admin_session.session_hours
    role = AdminRole(profile.role)
    return AdminContext(
        admin=profile,
        role=role,
        permissions=effective_permissions(profile),
        department=profile.department or ROLE_DEPARTMENTS.get(role),
        session_expires_at=utc_now() + timedelta(hours=hours),
    )


class AdminService:
    """Admin profile management with role-level guards."""

    def __init__(self, session: AsyncSession, audit: AuditService) -> None:
        self.repo = AdminProfileRepository(session)
        self.audit = audit

    async def list_admins(self, role: Optional[str] = None, is_active: Optional[bool] = None) -> List[AdminProfile]:
        return await self.repo.list(filters={"role": role, "is_active": is_active})

    async def get_admin(self, admin_id: str) -> AdminProfile:
        admin = await self.repo.get_by_id(admin_id)
        if not admin:
            raise NotFoundError("Admin")
        return admin

    async def create_admin(self, actor: AdminProfile, data: AdminProfileCreate) -> AdminProfile:
        if not has_permission(actor, P.manage_admins).allowed:
            raise AuthorizationError("Insufficient permissions to create admins")
        if not can_manage_role(actor.role, data.role):
            raise AuthorizationError(f"Insufficient permissions to create {data.role.value} admins")

        email = validate_email(data.email)
        if await self.repo.get_by_email(email):
            raise ConflictError("Admin with this email already exists")

        admin = AdminProfile(
            email=email,
            first_name=data.first_name,
            last_name=data.last_name,
            role=data.role.value,
            permissions=sorted({p.value for p in data.permissions}),
            department=data.department or ROLE_DEPARTMENTS[data.role],
            created_by=actor.id,
        )
        admin = await self.repo.create(admin)
        logger.info(f"Admin {admin.email} created with role {admin.role} by {actor.email}")

        await self.audit.record(
            actor,
            AuditAction.admin_created,
            ResourceType.admin,
            resource_id=admin.id,
            resource_name=admin.full_name,
            description=f"Created {admin.role} admin {admin.email}",
            context={"role": admin.role, "permissions": admin.permissions},
        )
        return admin

    async def update_admin_permissions(
        self, actor: AdminProfile, admin_id: str, data: AdminPermissionsUpdate
    ) -> AdminProfile:
        """Change an admin's role and/or explicit permissions.

        Role changes need ``manage_admins`` and cannot exceed the actor's own
        level; permission-only changes also accept ``assign_permissions``.
        """
        if data.role is not None:
            allowed = has_permission(actor, P.manage_admins).allowed
        else:
            allowed = has_any_permission(actor, [P.manage_admins, P.assign_permissions]).allowed
        if not allowed:
            raise AuthorizationError("Insufficient permissions to change admin permissions")

        target = await self.get_admin(admin_id)
        if not can_manage_role(actor.role, target.role):
            raise AuthorizationError("Cannot manage an admin with a higher role")
        if data.role is not None and not can_manage_role(actor.role, data.role):
            raise AuthorizationError(f"Cannot assign role {data.role.value} above your own level")

        before = {"role": target.role, "permissions": list(target.permissions)}
        if data.role is not None:
            target.role = data.role.value
            target.department = ROLE_DEPARTMENTS[data.role]
        if data.permissions is not None:
            target.permissions = sorted({p.value for p in data.permissions})
        changes = diff_changes(before, {"role": target.role, "permissions": target.permissions})
        if not changes:
            return target

        target = await self.repo.update(target)
        role_changed = any(change["field"] == "role" for change in changes)
        await self.audit.record(
            actor,
            AuditAction.admin_role_changed if role_changed else AuditAction.admin_permissions_changed,
            ResourceType.admin,
            resource_id=target.id,
            resource_name=target.full_name,
            description=data.reason or f"Updated access for {target.email}",
            changes=changes,
        )
        return target
