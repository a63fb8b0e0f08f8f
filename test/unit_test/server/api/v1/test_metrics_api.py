import pytest
from httpx import AsyncClient

from focusprint.core.models.domain.enums import PlanType

# Mark all tests in this module as async
pytestmark = pytest.mark.asyncio


@pytest.fixture
def headers(support_admin):
    return {"X-Admin-Id": support_admin.id}


async def test_platform_metrics(client: AsyncClient, headers, plans, make_client):
    await make_client(PlanType.pro)
    await make_client(PlanType.business)

    response = await client.get("/api/admin/metrics", headers=headers)

    assert response.status_code == 200
    body = response.json()
    assert body["overview"]["total_clients"] == 2
    assert body["overview"]["mrr"] == 496.0
    assert body["overview"]["arr"] == 5952.0
    assert {b["key"] for b in body["clients_by_plan"]} == {"pro", "business"}


async def test_dashboard(client: AsyncClient, headers, make_client):
    await make_client()

    response = await client.get("/api/admin/dashboard", headers=headers)

    assert response.status_code == 200
    body = response.json()
    assert body["kpis"]["total_clients"] == 1
    assert body["support"] == {"open_tickets": 0, "unassigned_tickets": 0, "sla_breached": 0}
    assert body["health_indicators"]["support_health"] == "excellent"
    assert body["generated_at"]


async def test_client_metrics(client: AsyncClient, headers, make_client, make_user):
    owner = await make_client(PlanType.pro)
    await make_user(owner)

    response = await client.get(f"/api/admin/clients/{owner.id}/metrics", headers=headers)

    assert response.status_code == 200
    assert response.json()["total_users"] == 1
    assert response.json()["max_users"] == 15


async def test_client_metrics_unknown_client(client: AsyncClient, headers):
    response = await client.get("/api/admin/clients/missing/metrics", headers=headers)

    assert response.status_code == 404
    assert response.json()["error"] == "Client not found"


async def test_metrics_require_an_admin(client: AsyncClient):
    assert (await client.get("/api/admin/metrics")).status_code == 401
    assert (await client.get("/api/admin/dashboard")).status_code == 401
