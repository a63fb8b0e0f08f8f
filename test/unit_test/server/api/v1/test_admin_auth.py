"""
API tests for admin authentication, the admin directory and the audit log.
"""

import pytest
from httpx import AsyncClient

from focusprint.core.models.domain.enums import AdminPermission, AdminRole

pytestmark = pytest.mark.asyncio


def _headers(admin):
    return {"X-Admin-Id": admin.id}


class TestAuthentication:
    async def test_missing_header(self, client: AsyncClient):
        response = await client.get("/api/admin/me")

        assert response.status_code == 401
        body = response.json()
        assert body["error"] == "Authentication required"
        assert body["details"] == {"type": "authentication", "code": "UNAUTHORIZED"}

    async def test_unknown_admin(self, client: AsyncClient):
        response = await client.get("/api/admin/me", headers={"X-Admin-Id": "missing"})

        assert response.status_code == 401
        assert response.json()["error"] == "Invalid admin credentials"

    async def test_inactive_admin(self, client: AsyncClient, make_admin):
        admin = await make_admin(is_active=False)

        response = await client.get("/api/admin/me", headers=_headers(admin))

        assert response.status_code == 403
        assert response.json()["error"] == "Admin account is inactive"

    async def test_client_user_header_is_not_an_admin(self, client: AsyncClient, make_client, make_user):
        user = await make_user(await make_client())

        response = await client.get("/api/admin/me", headers={"X-User-Id": user.id})

        assert response.status_code == 401


class TestMe:
    async def test_super_admin_context(self, client: AsyncClient, super_admin):
        response = await client.get("/api/admin/me", headers=_headers(super_admin))

        assert response.status_code == 200
        data = response.json()
        assert data["admin"]["id"] == super_admin.id
        assert data["role"] == "super_admin"
        assert data["department"] == "Leadership"
        assert sorted(data["permissions"]) == sorted(p.value for p in AdminPermission)
        assert data["session_expires_at"]

    async def test_explicit_grants_are_merged(self, client: AsyncClient, make_admin):
        admin = await make_admin(AdminRole.support_admin, permissions=["feature_flags"])

        data = (await client.get("/api/admin/me", headers=_headers(admin))).json()

        assert "feature_flags" in data["permissions"]
        assert "view_support_tickets" in data["permissions"]
        assert "manage_admins" not in data["permissions"]


class TestAdmins:
    async def test_create_and_list(self, client: AsyncClient, super_admin):
        response = await client.post(
            "/api/admin/admins",
            headers=_headers(super_admin),
            json={"email": "ana@focusprint.test", "first_name": "Ana", "last_name": "Souza", "role": "support_admin"},
        )

        assert response.status_code == 201
        created = response.json()
        assert created["department"] == "Customer Support"
        assert created["created_by"] == super_admin.id

        listed = await client.get("/api/admin/admins", headers=_headers(super_admin), params={"role": "support_admin"})
        assert [a["id"] for a in listed.json()] == [created["id"]]

        duplicate = await client.post(
            "/api/admin/admins",
            headers=_headers(super_admin),
            json={"email": "ana@focusprint.test", "first_name": "Ana", "last_name": "Souza", "role": "support_admin"},
        )
        assert duplicate.status_code == 409

    async def test_missing_permission_is_denied_and_audited(self, client: AsyncClient, super_admin, support_admin):
        response = await client.get("/api/admin/admins", headers=_headers(support_admin))

        assert response.status_code == 403
        assert response.json()["error"] == "Missing required permission: view_admins"

        logs = await client.get(
            "/api/admin/audit/logs", headers=_headers(super_admin), params={"action": "permission_denied"}
        )
        assert logs.status_code == 200
        entry = logs.json()["logs"][0]
        assert entry["admin_id"] == support_admin.id
        assert entry["status"] == "failure"
        assert entry["context"]["path"] == "/api/admin/admins"

    async def test_invalid_body(self, client: AsyncClient, super_admin):
        response = await client.post(
            "/api/admin/admins", headers=_headers(super_admin), json={"email": "x@y.test", "role": "owner"}
        )

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "Validation failed"
        assert {d["field"] for d in body["details"]} >= {"first_name", "last_name", "role"}

    async def test_unknown_admin(self, client: AsyncClient, super_admin):
        response = await client.get("/api/admin/admins/missing", headers=_headers(super_admin))

        assert response.status_code == 404
        assert response.json()["error"] == "Admin not found"

    async def test_get_admin_identifies_caller_by_header(self, client: AsyncClient, super_admin, support_admin):
        response = await client.get(f"/api/admin/admins/{support_admin.id}", headers=_headers(super_admin))

        assert response.status_code == 200
        assert response.json()["id"] == support_admin.id

        denied = await client.get(f"/api/admin/admins/{super_admin.id}", headers=_headers(support_admin))
        assert denied.status_code == 403

        anonymous = await client.get(f"/api/admin/admins/{super_admin.id}")
        assert anonymous.status_code == 401

    async def test_update_permissions(self, client: AsyncClient, super_admin, support_admin):
        response = await client.patch(
            f"/api/admin/admins/{support_admin.id}/permissions",
            headers=_headers(super_admin),
            json={"role": "operations_admin", "permissions": ["view_metrics"], "reason": "Promotion"},
        )

        assert response.status_code == 200
        updated = response.json()
        assert updated["role"] == "operations_admin"
        assert updated["department"] == "Operations"
        assert updated["permissions"] == ["view_metrics"]

        logs = await client.get(
            "/api/admin/audit/logs", headers=_headers(super_admin), params={"action": "admin_role_changed"}
        )
        assert logs.json()["logs"][0]["resource_id"] == support_admin.id

    async def test_update_permissions_of_higher_role_is_denied(self, client: AsyncClient, make_admin, super_admin):
        operations = await make_admin(AdminRole.operations_admin, permissions=["manage_admins"])

        response = await client.patch(
            f"/api/admin/admins/{super_admin.id}/permissions",
            headers=_headers(operations),
            json={"permissions": []},
        )

        assert response.status_code == 403
        assert response.json()["error"] == "Cannot manage an admin with a higher role"


class TestAuditLog:
    async def test_statistics(self, client: AsyncClient, super_admin, technical_admin):
        await client.post(
            "/api/admin/admins",
            headers=_headers(super_admin),
            json={"email": "bia@focusprint.test", "first_name": "Bia", "last_name": "Lima", "role": "financial_admin"},
        )

        response = await client.get("/api/admin/audit/statistics", headers=_headers(technical_admin))

        assert response.status_code == 200
        assert response.json()["total_events"] >= 1

    async def test_requires_audit_access(self, client: AsyncClient, support_admin):
        response = await client.get("/api/admin/audit/logs", headers=_headers(support_admin))

        assert response.status_code == 403
