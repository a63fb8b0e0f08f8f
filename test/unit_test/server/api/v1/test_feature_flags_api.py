import pytest
from httpx import AsyncClient

# Mark all tests in this module as async
pytestmark = pytest.mark.asyncio

BASE = "/api/admin/feature-flags"


@pytest.fixture
def headers(technical_admin):
    return {"X-Admin-Id": technical_admin.id}


async def _create(client: AsyncClient, headers, key="new_board", **values):
    body = {"key": key, "name": key.replace("_", " ").title(), "is_enabled": True}
    body.update(values)
    response = await client.post(BASE, headers=headers, json=body)
    assert response.status_code == 201
    return response.json()


async def test_create_get_and_history(client: AsyncClient, headers, technical_admin):
    flag = await _create(client, headers, category="analytics", tags=["kanban"])

    assert flag["created_by"] == technical_admin.id
    assert flag["category"] == "analytics"

    detail = (await client.get(f"{BASE}/{flag['id']}", headers=headers)).json()
    assert detail["flag"]["key"] == "new_board"
    assert detail["overrides"] == []
    assert [h["action"] for h in detail["history"]] == ["created"]


async def test_invalid_key(client: AsyncClient, headers):
    response = await client.post(BASE, headers=headers, json={"key": "New Board", "name": "New board"})

    assert response.status_code == 400
    assert response.json()["details"][0]["field"] == "key"


async def test_duplicate_key(client: AsyncClient, headers):
    await _create(client, headers)

    response = await client.post(BASE, headers=headers, json={"key": "new_board", "name": "Again"})

    assert response.status_code == 409


async def test_support_admin_is_denied(client: AsyncClient, support_admin):
    response = await client.get(BASE, headers={"X-Admin-Id": support_admin.id})

    assert response.status_code == 403
    assert response.json()["error"] == "Missing required permission: feature_flags"


async def test_evaluate_with_override(client: AsyncClient, headers):
    flag = await _create(client, headers, current_value="v2")

    override = await client.post(
        f"{BASE}/{flag['id']}/overrides", headers=headers, json={"client_id": "c-1", "value": "beta"}
    )
    assert override.status_code == 201

    overridden = await client.post(
        f"{BASE}/evaluate", headers=headers, json={"key": "new_board", "context": {"client_id": "c-1"}}
    )
    assert overridden.json()["reason"] == "client_override"
    assert overridden.json()["value"] == "beta"

    default = await client.post(f"{BASE}/evaluate", headers=headers, json={"key": "new_board"})
    assert default.json()["reason"] == "default_value"
    assert default.json()["value"] == "v2"

    removed = await client.delete(f"{BASE}/{flag['id']}/overrides/c-1", headers=headers)
    assert removed.status_code == 204
    missing = await client.delete(f"{BASE}/{flag['id']}/overrides/c-1", headers=headers)
    assert missing.status_code == 404


async def test_evaluate_unknown_flag(client: AsyncClient, headers):
    response = await client.post(f"{BASE}/evaluate", headers=headers, json={"key": "missing"})

    assert response.status_code == 200
    assert response.json()["reason"] == "flag_not_found"
    assert response.json()["is_enabled"] is False


async def test_toggle_update_and_archive(client: AsyncClient, headers):
    flag = await _create(client, headers, is_enabled=False)

    toggled = await client.post(f"{BASE}/{flag['id']}/toggle", headers=headers)
    assert toggled.json()["is_enabled"] is True

    updated = await client.patch(f"{BASE}/{flag['id']}", headers=headers, json={"rollout_percentage": 10})
    assert updated.json()["rollout_percentage"] == 10

    archived = await client.post(f"{BASE}/{flag['id']}/archive", headers=headers, params={"reason": "Shipped"})
    assert archived.json()["status"] == "archived"

    history = (await client.get(f"{BASE}/{flag['id']}/history", headers=headers)).json()
    assert {"created", "enabled", "updated", "archived"} <= {h["action"] for h in history}


async def test_list_summary_and_bulk(client: AsyncClient, headers):
    first = await _create(client, headers, "dark_mode")
    second = await _create(client, headers, "new_board", environment="production")

    listed = (await client.get(BASE, headers=headers, params={"environment": "production"})).json()
    assert [f["key"] for f in listed["flags"]] == ["new_board"]
    assert listed["pagination"]["total"] == 1

    bulk = await client.post(
        f"{BASE}/bulk", headers=headers, json={"action": "disable", "flag_ids": [first["id"], second["id"], "nope"]}
    )
    assert bulk.status_code == 200
    assert bulk.json()["successful"] == [first["id"], second["id"]]
    assert bulk.json()["failed"] == [{"flag_id": "nope", "error": "Feature flag not found"}]

    summary = (await client.get(f"{BASE}/summary", headers=headers)).json()
    assert summary["total"] == 2
    assert summary["enabled"] == 0


async def test_delete(client: AsyncClient, headers):
    flag = await _create(client, headers)

    response = await client.delete(f"{BASE}/{flag['id']}", headers=headers, params={"reason": "Cleanup"})

    assert response.status_code == 204
    assert (await client.get(f"{BASE}/{flag['id']}", headers=headers)).status_code == 404


async def test_update_rejects_null_conditions(client: AsyncClient, headers):
    flag = await _create(client, headers, conditions=[{"field": "plan_type", "operator": "equals", "value": "pro"}])

    response = await client.patch(f"{BASE}/{flag['id']}", headers=headers, json={"conditions": None})

    assert response.status_code == 400
    assert response.json()["details"][0]["field"] == "conditions"

    cleared = await client.patch(f"{BASE}/{flag['id']}", headers=headers, json={"conditions": [], "description": None})
    assert cleared.status_code == 200
    assert cleared.json()["conditions"] == []

    detail = await client.get(f"{BASE}/{flag['id']}", headers=headers)
    assert detail.status_code == 200
