"""
API tests for the client workspace: authentication of client users, teams,
projects, the kanban board and project chat.
"""

import pytest
from httpx import AsyncClient

from focusprint.core.models.domain.enums import PlanType

pytestmark = pytest.mark.asyncio

API = "/api/client"


@pytest.fixture
async def owner(make_client):
    return await make_client(PlanType.free)


@pytest.fixture
async def headers(owner, make_user):
    user = await make_user(owner)
    return {"X-User-Id": user.id}


@pytest.fixture
async def project(client: AsyncClient, headers):
    team = await client.post(f"{API}/teams", headers=headers, json={"name": "Engineering"})
    assert team.status_code == 201
    response = await client.post(f"{API}/projects", headers=headers, json={"team_id": team.json()["id"], "name": "App"})
    assert response.status_code == 201
    return response.json()


class TestClientAuthentication:
    async def test_missing_header(self, client: AsyncClient):
        response = await client.get(f"{API}/teams")

        assert response.status_code == 401
        assert response.json()["error"] == "Authentication required"

    async def test_unknown_user(self, client: AsyncClient):
        response = await client.get(f"{API}/teams", headers={"X-User-Id": "missing"})

        assert response.status_code == 401
        assert response.json()["error"] == "Invalid user credentials"

    async def test_suspended_client(self, client: AsyncClient, make_client, make_user):
        user = await make_user(await make_client(status="suspended"))

        response = await client.get(f"{API}/teams", headers={"X-User-Id": user.id})

        assert response.status_code == 403
        assert response.json()["error"] == "Client account is suspended"

    async def test_admin_header_is_not_a_user(self, client: AsyncClient, super_admin):
        response = await client.get(f"{API}/teams", headers={"X-Admin-Id": super_admin.id})

        assert response.status_code == 401


class TestTeams:
    async def test_create_list_and_conflict(self, client: AsyncClient, headers):
        created = await client.post(f"{API}/teams", headers=headers, json={"name": "Design", "color": "#EC4899"})
        assert created.status_code == 201

        duplicate = await client.post(f"{API}/teams", headers=headers, json={"name": "design"})
        assert duplicate.status_code == 409

        teams = (await client.get(f"{API}/teams", headers=headers)).json()
        assert [t["name"] for t in teams] == ["Design"]

    async def test_delete_team_with_projects(self, client: AsyncClient, headers, project):
        response = await client.delete(f"{API}/teams/{project['team_id']}", headers=headers)

        assert response.status_code == 400
        assert response.json()["error"] == "Cannot delete a team with active projects"


class TestProjects:
    async def test_default_board(self, client: AsyncClient, headers, project):
        columns = (await client.get(f"{API}/projects/{project['id']}/columns", headers=headers)).json()

        assert [c["name"] for c in columns] == ["To Do", "In Progress", "Review", "Done"]

    async def test_project_limit(self, client: AsyncClient, headers, project):
        for name in ("Two", "Three"):
            await client.post(f"{API}/projects", headers=headers, json={"team_id": project["team_id"], "name": name})

        response = await client.post(
            f"{API}/projects", headers=headers, json={"team_id": project["team_id"], "name": "Four"}
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Project limit reached: the free plan allows up to 3 projects"
        assert response.json()["details"]["code"] == "LIMIT_EXCEEDED"

    async def test_archive_delete_and_restore(self, client: AsyncClient, headers, project):
        archived = await client.post(
            f"{API}/projects/{project['id']}/archive",
            headers=headers,
            json={"reason": "Done", "archive_category": "completed"},
        )
        assert archived.json()["archive_category"] == "completed"
        assert (await client.get(f"{API}/projects", headers=headers)).json() == []

        restored = await client.post(f"{API}/projects/{project['id']}/restore", headers=headers)
        assert restored.json()["archived_at"] is None

        deleted = await client.delete(f"{API}/projects/{project['id']}", headers=headers)
        assert deleted.status_code == 200
        assert deleted.json()["deleted_at"] is not None
        assert (await client.get(f"{API}/projects/{project['id']}", headers=headers)).status_code == 404

        trash = (await client.get(f"{API}/projects/deleted", headers=headers)).json()
        assert [p["id"] for p in trash] == [project["id"]]

    async def test_bulk_archive(self, client: AsyncClient, headers, project):
        response = await client.post(
            f"{API}/projects/bulk-archive",
            headers=headers,
            json={"project_ids": [project["id"], "missing"], "reason": "Cleanup"},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Some projects not found or already archived"

    async def test_other_client_cannot_see_project(self, client: AsyncClient, project, make_client, make_user):
        stranger = await make_user(await make_client(PlanType.pro))

        response = await client.get(f"{API}/projects/{project['id']}", headers={"X-User-Id": stranger.id})

        assert response.status_code == 404
        assert response.json()["error"] == "Project not found"


class TestBoard:
    async def test_task_lifecycle(self, client: AsyncClient, headers, project):
        columns = (await client.get(f"{API}/projects/{project['id']}/columns", headers=headers)).json()

        created = await client.post(
            f"{API}/tasks",
            headers=headers,
            json={"project_id": project["id"], "column_id": columns[0]["id"], "title": "Login screen"},
        )
        assert created.status_code == 201
        task = created.json()
        assert task["position"] == 1

        moved = await client.put(f"{API}/tasks/{task['id']}/move", headers=headers, json={"column_id": columns[1]["id"]})
        assert moved.json()["column_id"] == columns[1]["id"]

        found = await client.get(f"{API}/projects/{project['id']}/tasks/search", headers=headers, params={"q": "login"})
        assert [t["id"] for t in found.json()] == [task["id"]]

        blocked = await client.delete(f"{API}/columns/{columns[1]['id']}", headers=headers)
        assert blocked.status_code == 400

        assert (await client.delete(f"{API}/tasks/{task['id']}", headers=headers)).status_code == 204

    async def test_task_missing_fields(self, client: AsyncClient, headers, project):
        response = await client.post(f"{API}/tasks", headers=headers, json={"project_id": project["id"]})

        assert response.status_code == 400
        assert response.json()["error"] == "Missing required fields: project_id, column_id, and title are required"
        assert response.json()["details"]["code"] == "MISSING_REQUIRED_FIELD"

    async def test_update_rejects_null_for_required_fields(self, client: AsyncClient, headers, project):
        renamed = await client.patch(f"{API}/projects/{project['id']}", headers=headers, json={"name": None})
        assert renamed.status_code == 400
        assert renamed.json()["details"][0]["field"] == "name"

        cleared = await client.patch(f"{API}/projects/{project['id']}", headers=headers, json={"description": None})
        assert cleared.status_code == 200
        assert cleared.json()["name"] == "App"

    async def test_reorder_columns(self, client: AsyncClient, headers, project):
        columns = (await client.get(f"{API}/projects/{project['id']}/columns", headers=headers)).json()
        order = [c["id"] for c in columns][::-1]

        response = await client.put(
            f"{API}/projects/{project['id']}/columns/reorder", headers=headers, json={"column_ids": order}
        )

        assert response.status_code == 200
        assert [c["id"] for c in response.json()] == order


class TestMessages:
    async def test_post_edit_and_ownership(self, client: AsyncClient, headers, owner, make_user, project):
        posted = await client.post(
            f"{API}/projects/{project['id']}/messages", headers=headers, json={"content": "Standup moved to 10h"}
        )
        assert posted.status_code == 201
        message_id = posted.json()["id"]

        colleague = await make_user(owner)
        forbidden = await client.patch(
            f"{API}/messages/{message_id}", headers={"X-User-Id": colleague.id}, json={"content": "Cancelled"}
        )
        assert forbidden.status_code == 403
        assert forbidden.json()["error"] == "You can only modify your own messages"

        edited = await client.patch(f"{API}/messages/{message_id}", headers=headers, json={"content": "Standup at 11h"})
        assert edited.json()["edited_at"] is not None

        listed = (await client.get(f"{API}/projects/{project['id']}/messages", headers=headers)).json()
        assert [m["content"] for m in listed] == ["Standup at 11h"]
