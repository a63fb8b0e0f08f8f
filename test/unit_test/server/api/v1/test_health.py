import pytest
from httpx import AsyncClient

from focusprint.server.core import constant

# Mark all tests in this module as async
pytestmark = pytest.mark.asyncio


async def test_health_check(client: AsyncClient):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


async def test_version(client: AsyncClient):
    response = await client.get("/version")
    assert response.status_code == 200
    assert response.json() == {"version": constant.API_VERSION, "schema_version": constant.SCHEMA_VERSION}


async def test_health_does_not_require_credentials(client: AsyncClient):
    response = await client.get("/health", headers={"X-Admin-Id": "nobody"})
    assert response.status_code == 200
