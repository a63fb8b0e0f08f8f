import pytest
from httpx import AsyncClient

# Mark all tests in this module as async
pytestmark = pytest.mark.asyncio

BASE = "/api/admin/bulk-operations"


@pytest.fixture
def headers(super_admin):
    return {"X-Admin-Id": super_admin.id}


async def test_suspend_clients(client: AsyncClient, headers, make_client):
    client_ids = [(await make_client()).id, (await make_client()).id]

    response = await client.post(
        BASE,
        headers=headers,
        json={"operation_type": "suspend_clients", "target_type": "clients", "target_ids": client_ids},
    )

    assert response.status_code == 201
    operation = response.json()["operation"]
    assert operation["status"] == "completed"
    assert operation["progress"]["successful_items"] == 2

    fetched = await client.get(f"{BASE}/{operation['id']}", headers=headers)
    assert fetched.json()["results"][0]["target_id"] == client_ids[0]

    suspended = await client.get(f"/api/admin/clients/{client_ids[1]}", headers=headers)
    assert suspended.json()["status"] == "suspended"


async def test_operation_permissions_are_checked(client: AsyncClient, technical_admin, make_client):
    client_id = (await make_client()).id

    response = await client.post(
        BASE,
        headers={"X-Admin-Id": technical_admin.id},
        json={"operation_type": "suspend_clients", "target_type": "clients", "target_ids": [client_id]},
    )

    assert response.status_code == 403
    assert response.json()["error"] == "Missing required permission: suspend_clients"


async def test_invalid_targets(client: AsyncClient, headers):
    response = await client.post(
        BASE,
        headers=headers,
        json={"operation_type": "update_license_plans", "target_type": "licenses", "target_ids": ["l-1"]},
    )

    assert response.status_code == 400
    assert response.json()["error"].startswith("Bulk operation validation failed")


async def test_unknown_operation_type(client: AsyncClient, headers):
    response = await client.post(
        BASE, headers=headers, json={"operation_type": "wipe_everything", "target_type": "clients", "target_ids": ["x"]}
    )

    assert response.status_code == 400
    assert response.json()["details"][0]["field"] == "operation_type"


async def test_dry_run_then_cancel(client: AsyncClient, headers, make_client):
    client_id = (await make_client()).id

    created = await client.post(
        BASE,
        headers=headers,
        json={
            "operation_type": "suspend_clients",
            "target_type": "clients",
            "target_ids": [client_id],
            "dry_run": True,
        },
    )
    operation_id = created.json()["operation"]["id"]
    assert created.json()["operation"]["status"] == "pending"

    cancelled = await client.delete(f"{BASE}/{operation_id}", headers=headers, params={"reason": "Not today"})
    assert cancelled.status_code == 200
    assert cancelled.json()["status"] == "cancelled"

    again = await client.delete(f"{BASE}/{operation_id}", headers=headers)
    assert again.status_code == 400
    assert again.json()["error"] == "Operation cannot be cancelled in current status"

    listed = (await client.get(BASE, headers=headers, params={"status": "cancelled"})).json()
    assert [o["id"] for o in listed["operations"]] == [operation_id]


async def test_capabilities(client: AsyncClient, headers):
    response = await client.get(f"{BASE}/capabilities", headers=headers)

    assert response.status_code == 200
    data = response.json()
    types = {op["operation_type"] for op in data["operations"]}
    assert {"suspend_clients", "update_license_plans", "feature_flag_sync"} <= types
    assert data["max_targets_per_operation"] >= 1


async def test_unknown_operation(client: AsyncClient, headers):
    response = await client.get(f"{BASE}/missing", headers=headers)

    assert response.status_code == 404
    assert response.json()["error"] == "Bulk operation not found"


async def test_mismatched_target_type(client: AsyncClient, headers, make_client):
    client_id = (await make_client()).id

    response = await client.post(
        BASE,
        headers=headers,
        json={"operation_type": "suspend_clients", "target_type": "tickets", "target_ids": [client_id]},
    )

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid target type tickets for suspend_clients: expected clients"

    listed = (await client.get(BASE, headers=headers)).json()
    assert listed["operations"] == []
