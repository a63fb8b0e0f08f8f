"""
Unit tests for the repository layer.

Covers the shared CRUD repository (create, get, update, delete, list, count,
page) and the query helpers of the domain repositories against an in-memory
SQLite database.
"""

from datetime import timedelta

import pytest

from focusprint.core.database.base import utc_now
from focusprint.core.database.entities.clients import Client
from focusprint.core.database.entities.feature_flags import FeatureFlag
from focusprint.core.database.entities.licenses import License
from focusprint.core.database.entities.plans import Plan
from focusprint.core.database.entities.workspace import KanbanColumn, Project, Team
from focusprint.core.database.repositories.base import AsyncQueryBuilder
from focusprint.core.database.repositories.clients import ClientRepository
from focusprint.core.database.repositories.feature_flags import FeatureFlagRepository
from focusprint.core.database.repositories.licenses import LicenseRepository
from focusprint.core.database.repositories.plans import PlanRepository
from focusprint.core.database.repositories.tickets import TicketRepository
from focusprint.core.database.repositories.workspace import KanbanColumnRepository, ProjectRepository, TeamRepository

pytestmark = pytest.mark.asyncio


class TestAsyncCrudRepository:
    async def test_create_and_get(self, session):
        repo = ClientRepository(session)
        client = await repo.create(Client(name="Acme", email="ops@acme.test"))

        fetched = await repo.get_by_id(client.id)
        assert fetched is not None
        assert fetched.name == "Acme"
        assert fetched.plan_type == "free"

    async def test_get_missing_returns_none(self, session):
        assert await ClientRepository(session).get_by_id("missing") is None

    async def test_update_touches_updated_at(self, session):
        repo = ClientRepository(session)
        client = await repo.create(Client(name="Acme", email="ops@acme.test"))
        before = client.updated_at

        client.name = "Acme Ltda"
        updated = await repo.update(client)

        assert updated.name == "Acme Ltda"
        assert updated.updated_at >= before

    async def test_delete(self, session):
        repo = ClientRepository(session)
        client = await repo.create(Client(name="Acme", email="ops@acme.test"))

        assert await repo.delete(client.id) is True
        assert await repo.delete(client.id) is False
        assert await repo.get_by_id(client.id) is None

    async def test_list_filters_ignore_none_and_unknown_fields(self, session):
        repo = ClientRepository(session)
        await repo.create(Client(name="A", email="a@a.test", plan_type="free"))
        await repo.create(Client(name="B", email="b@b.test", plan_type="pro"))

        assert len(await repo.list(filters={"plan_type": None, "nonexistent": "x"})) == 2
        pro = await repo.list(filters={"plan_type": "pro"})
        assert [c.name for c in pro] == ["B"]

    async def test_list_filter_with_list_uses_in(self, session):
        repo = ClientRepository(session)
        for i, plan in enumerate(["free", "pro", "business"]):
            await repo.create(Client(name=f"C{i}", email=f"c{i}@c.test", plan_type=plan))

        rows = await repo.list(filters={"plan_type": ["pro", "business"]})
        assert sorted(c.plan_type for c in rows) == ["business", "pro"]

    async def test_count_and_page(self, session):
        repo = ClientRepository(session)
        for i in range(5):
            await repo.create(Client(name=f"Client {i}", email=f"c{i}@c.test"))

        assert await repo.count() == 5
        rows, total = await repo.page(2, 2)
        assert total == 5
        assert len(rows) == 2
        rows, total = await repo.page(3, 2)
        assert len(rows) == 1

    async def test_search_conditions(self, session):
        repo = ClientRepository(session)
        await repo.create(Client(name="Padaria Central", email="contato@padaria.test"))
        await repo.create(Client(name="Oficina", email="oficina@mail.test"))

        rows, total = await repo.page(1, 10, conditions=ClientRepository.search_conditions("padaria"))
        assert total == 1
        assert rows[0].name == "Padaria Central"
        assert ClientRepository.search_conditions(None) == []

    async def test_get_by_email_is_case_insensitive_on_input(self, session):
        repo = ClientRepository(session)
        await repo.create(Client(name="Acme", email="ops@acme.test"))

        assert await repo.get_by_email("OPS@ACME.TEST") is not None


class TestAsyncQueryBuilder:
    def test_apply_pagination_without_values_is_noop(self):
        from sqlmodel import select

        stmt = select(Client)
        assert AsyncQueryBuilder.apply_pagination(stmt, None, None) is stmt


class TestLicenseRepository:
    async def test_trial_windows(self, session, make_client):
        client = await make_client()
        repo = LicenseRepository(session)
        now = utc_now()
        overdue = await repo.create(
            License(client_id=client.id, plan_type="pro", status="trial", trial_ends_at=now - timedelta(days=1))
        )
        soon = await repo.create(
            License(client_id=client.id, plan_type="pro", status="trial", trial_ends_at=now + timedelta(days=2))
        )
        await repo.create(
            License(client_id=client.id, plan_type="pro", status="active", trial_ends_at=now - timedelta(days=5))
        )

        assert [lic.id for lic in await repo.list_trials_ending_before(now)] == [overdue.id]
        assert [lic.id for lic in await repo.list_trials_ending_between(now, now + timedelta(days=3))] == [soon.id]

    async def test_count_by(self, session, make_client):
        client = await make_client()
        repo = LicenseRepository(session)
        await repo.create(License(client_id=client.id, plan_type="pro", status="active"))
        await repo.create(License(client_id=client.id, plan_type="pro", status="trial"))
        await repo.create(License(client_id=client.id, plan_type="free", status="active"))

        assert await repo.count_by("status") == {"active": 2, "trial": 1}
        assert await repo.count_by("plan_type") == {"pro": 2, "free": 1}
        assert await repo.count_by("plan_type", conditions=[License.status == "active"]) == {"pro": 1, "free": 1}


class TestFeatureFlagRepository:
    async def test_find_for_evaluation_falls_back_to_all(self, session):
        repo = FeatureFlagRepository(session)
        shared = await repo.create(FeatureFlag(key="new_board", name="New board", environment="all"))

        assert (await repo.find_for_evaluation("new_board", "production")).id == shared.id

        specific = await repo.create(FeatureFlag(key="new_board", name="New board", environment="production"))
        assert (await repo.find_for_evaluation("new_board", "production")).id == specific.id
        assert await repo.find_for_evaluation("missing", "production") is None


class TestTicketRepository:
    async def test_next_sequence_starts_at_one(self, session):
        assert await TicketRepository(session).next_sequence() == 1


class TestProjectRepository:
    async def test_list_for_client_states(self, session, make_client):
        client = await make_client()
        team = await TeamRepository(session).create(Team(client_id=client.id, name="Core"))
        repo = ProjectRepository(session)
        live = await repo.create(Project(client_id=client.id, team_id=team.id, name="Live"))
        archived = await repo.create(
            Project(client_id=client.id, team_id=team.id, name="Archived", archived_at=utc_now())
        )
        deleted = await repo.create(Project(client_id=client.id, team_id=team.id, name="Gone", deleted_at=utc_now()))

        assert [p.id for p in await repo.list_for_client(client.id)] == [live.id]
        assert {p.id for p in await repo.list_for_client(client.id, include_archived=True)} == {live.id, archived.id}
        assert [p.id for p in await repo.list_for_client(client.id, archived_only=True)] == [archived.id]
        assert [p.id for p in await repo.list_for_client(client.id, deleted_only=True)] == [deleted.id]
        assert await repo.count_live(client.id) == 1


class TestDefaultOrder:
    async def test_plans_are_listed_by_price(self, session):
        repo = PlanRepository(session)
        await repo.create(Plan(code="business", name="Business", price=399.0))
        await repo.create(Plan(code="free", name="Free", price=0.0))
        await repo.create(Plan(code="pro", name="Pro", price=97.0))

        assert [p.code for p in await repo.list()] == ["free", "pro", "business"]
        rows, total = await repo.page(1, 2)
        assert [p.code for p in rows] == ["free", "pro"]
        assert total == 3

    async def test_ascending_order_applies_to_list_where(self, session, make_client):
        client = await make_client()
        team = await TeamRepository(session).create(Team(client_id=client.id, name="Core"))
        project = await ProjectRepository(session).create(Project(client_id=client.id, team_id=team.id, name="App"))
        repo = KanbanColumnRepository(session)
        for name, position in (("Done", 3), ("To Do", 1), ("Doing", 2)):
            await repo.create(KanbanColumn(project_id=project.id, name=name, position=position))

        columns = await repo.list_where([KanbanColumn.project_id == project.id])
        assert [c.name for c in columns] == ["To Do", "Doing", "Done"]
        assert [t.name for t in await TeamRepository(session).list()] == ["Core"]
