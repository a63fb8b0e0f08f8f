"""
Unit tests for role-based access control.

Tests cover:
- Role permission sets and explicit grants
- Permission checks for active and inactive admins
- Role hierarchy and admin management guards
- Admin session context
"""

from datetime import timedelta

import pytest

from focusprint.core.database.base import utc_now
from focusprint.core.database.entities.admin_profiles import AdminProfile
from focusprint.core.errors import AuthorizationError, ConflictError, NotFoundError, ValidationFailedError
from focusprint.core.models.domain.enums import AdminPermission, AdminRole, AuditAction
from focusprint.core.models.io.admins import AdminPermissionsUpdate, AdminProfileCreate
from focusprint.server.services.rbac import (
    ROLE_PERMISSIONS,
    AdminService,
    can_manage_role,
    effective_permissions,
    get_admin_context,
    has_all_permissions,
    has_any_permission,
    has_permission,
    has_role,
    role_level,
)

P = AdminPermission


def _profile(role: AdminRole, permissions=None, is_active: bool = True) -> AdminProfile:
    return AdminProfile(
        email=f"{role.value}@focusprint.test",
        first_name="Test",
        last_name="Admin",
        role=role.value,
        permissions=permissions or [],
        is_active=is_active,
    )


class TestRolePermissions:
    def test_super_admin_has_every_permission(self):
        assert effective_permissions(_profile(AdminRole.super_admin)) == set(AdminPermission)

    def test_support_admin_permissions(self):
        assert ROLE_PERMISSIONS[AdminRole.support_admin] == {
            P.view_clients,
            P.view_licenses,
            P.client_impersonation,
            P.view_support_tickets,
            P.manage_support_tickets,
            P.view_metrics,
        }

    def test_technical_admin_cannot_manage_clients(self):
        profile = _profile(AdminRole.technical_admin)

        assert has_permission(profile, P.system_config).allowed
        assert has_permission(profile, P.feature_flags).allowed
        assert not has_permission(profile, P.manage_clients).allowed

    def test_explicit_grants_extend_role(self):
        profile = _profile(AdminRole.support_admin, permissions=["manage_licenses"])

        assert has_permission(profile, P.manage_licenses).allowed

    def test_unknown_grants_are_ignored(self):
        profile = _profile(AdminRole.support_admin, permissions=["launch_rockets"])

        assert effective_permissions(profile) == set(ROLE_PERMISSIONS[AdminRole.support_admin])


class TestPermissionChecks:
    def test_missing_permission_reason(self):
        check = has_permission(_profile(AdminRole.support_admin), P.manage_clients)

        assert check.allowed is False
        assert check.reason == "Missing required permission: manage_clients"
        assert check.required_permission is P.manage_clients

    def test_inactive_admin_is_denied_everything(self):
        check = has_permission(_profile(AdminRole.super_admin, is_active=False), P.view_clients)

        assert check.allowed is False
        assert check.reason == "Admin account is inactive"

    def test_has_any_permission(self):
        profile = _profile(AdminRole.financial_admin)

        assert has_any_permission(profile, [P.manage_clients, P.manage_billing]).allowed
        denied = has_any_permission(profile, [P.manage_clients, P.system_config])
        assert denied.allowed is False
        assert denied.reason == "Requires any of: manage_clients, system_config"

    def test_has_all_permissions_reports_first_missing(self):
        profile = _profile(AdminRole.operations_admin)

        assert has_all_permissions(profile, [P.manage_clients, P.suspend_clients]).allowed
        check = has_all_permissions(profile, [P.manage_clients, P.delete_clients])
        assert check.reason == "Missing required permission: delete_clients"


class TestRoleHierarchy:
    def test_levels(self):
        assert role_level(AdminRole.super_admin) == 5
        assert role_level("operations_admin") == 4
        assert role_level(AdminRole.financial_admin) == role_level(AdminRole.technical_admin) == 3
        assert role_level(AdminRole.support_admin) == 1
        assert role_level("intern") == 0

    def test_has_role_is_at_least(self):
        assert has_role(_profile(AdminRole.operations_admin), AdminRole.financial_admin)
        assert not has_role(_profile(AdminRole.support_admin), AdminRole.technical_admin)

    def test_can_manage_role(self):
        assert can_manage_role(AdminRole.super_admin, AdminRole.super_admin)
        assert can_manage_role(AdminRole.financial_admin, AdminRole.technical_admin)
        assert not can_manage_role(AdminRole.support_admin, AdminRole.operations_admin)


class TestAdminContext:
    def test_context(self):
        profile = _profile(AdminRole.technical_admin)
        before = utc_now()

        context = get_admin_context(profile, session_hours=2)

        assert context.role is AdminRole.technical_admin
        assert context.department == "Engineering"
        assert P.system_config in context.permissions
        assert before + timedelta(hours=2) <= context.session_expires_at <= utc_now() + timedelta(hours=2)

    def test_profile_department_wins(self):
        profile = _profile(AdminRole.support_admin)
        profile.department = "Night shift"

        assert get_admin_context(profile).department == "Night shift"


@pytest.mark.asyncio
class TestAdminService:
    async def test_create_admin(self, session, audit, super_admin):
        service = AdminService(session, audit)

        admin = await service.create_admin(
            super_admin,
            AdminProfileCreate(
                email="New.Support@FocuSprint.test",
                first_name="Ana",
                last_name="Costa",
                role=AdminRole.support_admin,
                permissions=[P.view_financials],
            ),
        )

        assert admin.email == "new.support@focusprint.test"
        assert admin.department == "Customer Support"
        assert admin.permissions == ["view_financials"]
        assert admin.created_by == super_admin.id

        logs = await audit.list_logs(action=AuditAction.admin_created.value)
        assert logs.pagination.total == 1
        assert logs.logs[0].resource_id == admin.id

    async def test_create_admin_requires_manage_admins(self, session, audit, technical_admin):
        service = AdminService(session, audit)
        data = AdminProfileCreate(email="x@y.io", first_name="X", last_name="Y", role=AdminRole.support_admin)

        with pytest.raises(AuthorizationError, match="Insufficient permissions to create admins"):
            await service.create_admin(technical_admin, data)

    async def test_create_admin_above_own_level(self, session, audit, make_admin):
        ops = await make_admin(AdminRole.operations_admin, permissions=["manage_admins"])
        service = AdminService(session, audit)
        data = AdminProfileCreate(email="boss@y.io", first_name="B", last_name="S", role=AdminRole.super_admin)

        with pytest.raises(AuthorizationError, match="super_admin"):
            await service.create_admin(ops, data)

    async def test_create_admin_duplicate_email(self, session, audit, super_admin):
        service = AdminService(session, audit)
        data = AdminProfileCreate(
            email=super_admin.email.upper(), first_name="Dup", last_name="Admin", role=AdminRole.support_admin
        )

        with pytest.raises(ConflictError, match="Admin with this email already exists"):
            await service.create_admin(super_admin, data)

    async def test_create_admin_invalid_email(self, session, audit, super_admin):
        data = AdminProfileCreate(email="not-an-email", first_name="A", last_name="B", role=AdminRole.support_admin)

        with pytest.raises(ValidationFailedError, match="Invalid email format"):
            await AdminService(session, audit).create_admin(super_admin, data)

    async def test_get_admin_not_found(self, session, audit):
        with pytest.raises(NotFoundError, match="Admin not found"):
            await AdminService(session, audit).get_admin("missing")

    async def test_change_role_is_audited_as_role_change(self, session, audit, super_admin, support_admin):
        service = AdminService(session, audit)

        updated = await service.update_admin_permissions(
            super_admin, support_admin.id, AdminPermissionsUpdate(role=AdminRole.technical_admin, reason="Moved team")
        )

        assert updated.role == "technical_admin"
        assert updated.department == "Engineering"
        logs = await audit.list_logs(action=AuditAction.admin_role_changed.value)
        assert logs.logs[0].severity == "high"
        assert logs.logs[0].description == "Moved team"

    async def test_permission_only_change(self, session, audit, make_admin, support_admin):
        granter = await make_admin(AdminRole.operations_admin, permissions=["assign_permissions"])
        service = AdminService(session, audit)

        updated = await service.update_admin_permissions(
            granter, support_admin.id, AdminPermissionsUpdate(permissions=[P.view_financials])
        )

        assert updated.permissions == ["view_financials"]
        logs = await audit.list_logs(action=AuditAction.admin_permissions_changed.value)
        assert logs.pagination.total == 1

    async def test_cannot_manage_higher_role(self, session, audit, make_admin, super_admin):
        ops = await make_admin(AdminRole.operations_admin, permissions=["manage_admins"])

        with pytest.raises(AuthorizationError, match="higher role"):
            await AdminService(session, audit).update_admin_permissions(
                ops, super_admin.id, AdminPermissionsUpdate(permissions=[])
            )

    async def test_no_changes_skips_audit(self, session, audit, super_admin, support_admin):
        service = AdminService(session, audit)

        await service.update_admin_permissions(
            super_admin, support_admin.id, AdminPermissionsUpdate(role=AdminRole.support_admin)
        )

        assert (await audit.list_logs()).pagination.total == 0

    async def test_list_admins_filters(self, session, audit, super_admin, support_admin, technical_admin):
        service = AdminService(session, audit)

        assert len(await service.list_admins()) == 3
        assert [a.id for a in await service.list_admins(role="support_admin")] == [support_admin.id]
