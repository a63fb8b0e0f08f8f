"""
Unit tests for the client workspace service.

Tests cover:
- Team naming and deletion rules
- Project limits, default columns, archiving and soft deletion
- Column ordering and task placement
- Message ownership
- Isolation between clients
"""

import pytest

from focusprint.core.errors import (
    AuthorizationError,
    ConflictError,
    ErrorCode,
    LimitExceededError,
    NotFoundError,
    OperationNotAllowedError,
    ValidationFailedError,
)
from focusprint.core.models.domain.enums import ArchiveCategory, PlanType, TaskPriority
from focusprint.core.models.io.workspace import (
    ColumnCreate,
    ColumnUpdate,
    MessageCreate,
    MessageUpdate,
    ProjectArchive,
    ProjectBulkArchive,
    ProjectCreate,
    ProjectUpdate,
    TaskCreate,
    TaskMove,
    TaskUpdate,
    TeamCreate,
    TeamUpdate,
)
from focusprint.server.services.workspace import DEFAULT_COLUMNS, WorkspaceService

pytestmark = pytest.mark.asyncio


@pytest.fixture
async def client(make_client):
    return await make_client(PlanType.free)


@pytest.fixture
async def user(make_user, client):
    return await make_user(client)


@pytest.fixture
def service(session, user):
    return WorkspaceService(session, user)


@pytest.fixture
async def team(service):
    return await service.create_team(TeamCreate(name="Engineering"))


@pytest.fixture
async def project(service, team):
    return await service.create_project(ProjectCreate(team_id=team.id, name="Website"))


@pytest.fixture
async def outsider(session, make_client, make_user):
    other = await make_client(PlanType.business)
    return WorkspaceService(session, await make_user(other))


class TestTeams:
    async def test_create_and_list(self, service, user, team):
        assert team.created_by == user.id
        assert team.color == "#3B82F6"
        assert [t.id for t in await service.list_teams()] == [team.id]

    async def test_name_is_unique_per_client(self, service, outsider, team):
        with pytest.raises(ConflictError, match="A team with this name already exists"):
            await service.create_team(TeamCreate(name="  engineering "))

        other_team = await outsider.create_team(TeamCreate(name="Engineering"))
        assert other_team.client_id != team.client_id

    async def test_rename_to_taken_name(self, service, team):
        design = await service.create_team(TeamCreate(name="Design"))

        with pytest.raises(ConflictError):
            await service.update_team(design.id, TeamUpdate(name="Engineering"))

        renamed = await service.update_team(design.id, TeamUpdate(name="Design "))
        assert renamed.name == "Design"

    async def test_archived_teams_are_hidden_by_default(self, service, team):
        await service.update_team(team.id, TeamUpdate(is_archived=True))

        assert await service.list_teams() == []
        assert len(await service.list_teams(include_archived=True)) == 1

    async def test_update_requires_a_field(self, service, team):
        with pytest.raises(ValidationFailedError, match="At least one field"):
            await service.update_team(team.id, TeamUpdate())

    async def test_delete_blocked_by_projects(self, service, team, project):
        with pytest.raises(OperationNotAllowedError, match="Cannot delete a team with active projects"):
            await service.delete_team(team.id)

    async def test_delete_empty_team(self, service, team):
        await service.delete_team(team.id)

        with pytest.raises(NotFoundError, match="Team not found"):
            await service.get_team(team.id)


class TestProjects:
    async def test_create_adds_default_columns(self, service, project):
        columns = await service.list_columns(project.id)

        assert [(c.name, c.color) for c in columns] == list(DEFAULT_COLUMNS)
        assert [c.position for c in columns] == [1, 2, 3, 4]
        assert project.status == "planning"
        assert project.priority == "medium"

    async def test_unknown_team(self, service):
        with pytest.raises(NotFoundError, match="Team not found"):
            await service.create_project(ProjectCreate(team_id="missing", name="Website"))

    async def test_project_limit(self, service, team):
        for name in ("One", "Two", "Three"):
            await service.create_project(ProjectCreate(team_id=team.id, name=name))

        with pytest.raises(LimitExceededError) as exc_info:
            await service.create_project(ProjectCreate(team_id=team.id, name="Four"))

        assert str(exc_info.value) == "Project limit reached: the free plan allows up to 3 projects"
        assert exc_info.value.context == {"max_projects": 3, "current_projects": 3}

    async def test_archived_projects_free_the_limit(self, service, team):
        created = [await service.create_project(ProjectCreate(team_id=team.id, name=n)) for n in ("A", "B", "C")]
        await service.archive_project(created[0].id, ProjectArchive(reason="Done"))

        await service.create_project(ProjectCreate(team_id=team.id, name="D"))

        with pytest.raises(LimitExceededError):
            await service.restore_project(created[0].id)

    async def test_update(self, service, project):
        updated = await service.update_project(project.id, ProjectUpdate(name="Site", priority=TaskPriority.high))

        assert updated.name == "Site"
        assert updated.priority == "high"

    async def test_archive_and_restore(self, service, user, project):
        archived = await service.archive_project(
            project.id, ProjectArchive(reason="Shipped", archive_category=ArchiveCategory.completed)
        )

        assert archived.archived_by == user.id
        assert archived.archive_category == "completed"
        assert await service.list_projects() == []
        assert [p.id for p in await service.list_projects(archived_only=True)] == [project.id]
        with pytest.raises(OperationNotAllowedError, match="Project is already archived"):
            await service.archive_project(project.id, ProjectArchive())

        restored = await service.restore_project(project.id)
        assert restored.archived_at is None
        assert restored.archive_reason is None
        with pytest.raises(OperationNotAllowedError, match="Project is not archived"):
            await service.restore_project(project.id)

    async def test_bulk_archive(self, service, team, project):
        second = await service.create_project(ProjectCreate(team_id=team.id, name="Mobile"))

        result = await service.bulk_archive_projects(
            ProjectBulkArchive(project_ids=[project.id, second.id, project.id], reason="Quarter closed")
        )

        assert {p.id for p in result.archived_projects} == {project.id, second.id}
        assert result.summary["total_projects"] == 2
        assert result.summary["archived_count"] == 2
        assert result.summary["success_rate"] == 100
        assert result.summary["category"] == "bulk"

    async def test_bulk_archive_reports_missing(self, service, project):
        with pytest.raises(ValidationFailedError, match="Some projects not found or already archived") as exc_info:
            await service.bulk_archive_projects(ProjectBulkArchive(project_ids=[project.id, "missing"], reason="x"))

        assert exc_info.value.context["missing_projects"] == ["missing"]
        assert exc_info.value.context["found_projects"] == [project.id]
        assert (await service.get_project(project.id)).archived_at is None

    async def test_soft_delete(self, service, project):
        deleted = await service.delete_project(project.id)

        assert deleted.deleted_at is not None
        with pytest.raises(NotFoundError, match="Project not found"):
            await service.get_project(project.id)
        assert [p.id for p in await service.list_projects(deleted_only=True)] == [project.id]

        restored = await service.restore_project(project.id)
        assert restored.deleted_at is None


class TestColumns:
    async def test_create_appends(self, service, project):
        column = await service.create_column(project.id, ColumnCreate(name=" Blocked ", wip_limit=3))

        assert column.position == 5
        assert column.name == "Blocked"
        assert column.wip_limit == 3

    async def test_update(self, service, project):
        column = (await service.list_columns(project.id))[0]

        updated = await service.update_column(column.id, ColumnUpdate(name="Backlog"))

        assert updated.name == "Backlog"

    async def test_delete_blocked_by_tasks(self, service, project):
        column = (await service.list_columns(project.id))[0]
        await service.create_task(TaskCreate(project_id=project.id, column_id=column.id, title="Write copy"))

        with pytest.raises(OperationNotAllowedError, match="Cannot delete a column that still has tasks"):
            await service.delete_column(column.id)

    async def test_delete_empty_column(self, service, project):
        column = (await service.list_columns(project.id))[-1]

        await service.delete_column(column.id)

        assert len(await service.list_columns(project.id)) == 3

    async def test_reorder(self, service, project):
        columns = await service.list_columns(project.id)
        new_order = [c.id for c in reversed(columns)]

        reordered = await service.reorder_columns(project.id, new_order)

        assert [c.id for c in reordered] == new_order
        assert [c.position for c in reordered] == [1, 2, 3, 4]

    async def test_reorder_must_list_every_column(self, service, project):
        columns = await service.list_columns(project.id)

        with pytest.raises(ValidationFailedError, match="Invalid column order"):
            await service.reorder_columns(project.id, [c.id for c in columns[:3]])
        with pytest.raises(ValidationFailedError):
            await service.reorder_columns(project.id, [columns[0].id] * 4)


class TestTasks:
    @pytest.fixture
    async def columns(self, service, project):
        return await service.list_columns(project.id)

    @pytest.mark.parametrize(
        "values",
        [{"column_id": "c"}, {"project_id": "p", "title": "Task"}, {"project_id": "p", "column_id": "c", "title": " "}],
    )
    async def test_required_fields(self, service, values):
        with pytest.raises(ValidationFailedError) as exc_info:
            await service.create_task(TaskCreate(**values))

        assert str(exc_info.value) == "Missing required fields: project_id, column_id, and title are required"
        assert exc_info.value.code is ErrorCode.MISSING_REQUIRED_FIELD

    async def test_create_positions(self, service, user, project, columns):
        first = await service.create_task(TaskCreate(project_id=project.id, column_id=columns[0].id, title="A"))
        second = await service.create_task(TaskCreate(project_id=project.id, column_id=columns[0].id, title="B"))
        other = await service.create_task(TaskCreate(project_id=project.id, column_id=columns[1].id, title="C"))

        assert (first.position, second.position, other.position) == (1, 2, 1)
        assert first.created_by == user.id
        assert [t.title for t in await service.list_tasks(project.id, column_id=columns[0].id)] == ["A", "B"]

    async def test_column_must_belong_to_project(self, service, team, project):
        other_project = await service.create_project(ProjectCreate(team_id=team.id, name="Other"))
        foreign_column = (await service.list_columns(other_project.id))[0]

        with pytest.raises(NotFoundError, match="Column not found"):
            await service.create_task(TaskCreate(project_id=project.id, column_id=foreign_column.id, title="A"))

    async def test_move_to_another_column_appends(self, service, project, columns):
        task = await service.create_task(TaskCreate(project_id=project.id, column_id=columns[0].id, title="A"))
        await service.create_task(TaskCreate(project_id=project.id, column_id=columns[1].id, title="B"))

        moved = await service.move_task(task.id, TaskMove(column_id=columns[1].id))

        assert moved.column_id == columns[1].id
        assert moved.position == 2

    async def test_move_within_column(self, service, project, columns):
        task = await service.create_task(TaskCreate(project_id=project.id, column_id=columns[0].id, title="A"))

        moved = await service.move_task(task.id, TaskMove(position=4))

        assert moved.column_id == columns[0].id
        assert moved.position == 4
        with pytest.raises(ValidationFailedError, match="Either column_id or position is required"):
            await service.move_task(task.id, TaskMove())

    async def test_update_and_delete(self, service, project, columns):
        task = await service.create_task(TaskCreate(project_id=project.id, column_id=columns[0].id, title="A"))

        updated = await service.update_task(task.id, TaskUpdate(priority=TaskPriority.urgent, actual_hours=2))
        assert updated.priority == "urgent"
        assert updated.actual_hours == 2

        await service.delete_task(task.id)
        with pytest.raises(NotFoundError, match="Task not found"):
            await service.get_task(task.id)

    async def test_search(self, service, project, columns):
        await service.create_task(
            TaskCreate(project_id=project.id, column_id=columns[0].id, title="Fix login", description="OAuth flow")
        )
        await service.create_task(TaskCreate(project_id=project.id, column_id=columns[0].id, title="Landing page"))

        assert [t.title for t in await service.search_tasks(project.id, "oauth")] == ["Fix login"]
        assert len(await service.search_tasks(project.id, "  ")) == 2


class TestMessages:
    async def test_post_and_list(self, service, user, project):
        message = await service.post_message(project.id, MessageCreate(content=" Kickoff at 10 "))

        assert message.content == "Kickoff at 10"
        assert message.user_name == user.full_name
        assert [m.id for m in await service.list_messages(project.id)] == [message.id]

    async def test_blank_content(self, service, project):
        with pytest.raises(ValidationFailedError, match="content is required"):
            await service.post_message(project.id, MessageCreate(content="   "))

    async def test_blank_edit_keeps_content(self, service, project):
        message = await service.post_message(project.id, MessageCreate(content="Kickoff"))
        message_id = message.id

        with pytest.raises(ValidationFailedError, match="content is required"):
            await service.edit_message(message_id, MessageUpdate(content="  \n "))

        assert [m.content for m in await service.list_messages(project.id)] == ["Kickoff"]

    async def test_only_the_author_can_edit(self, session, service, client, make_user, project):
        message = await service.post_message(project.id, MessageCreate(content="Draft"))
        colleague = WorkspaceService(session, await make_user(client))

        with pytest.raises(AuthorizationError, match="You can only modify your own messages"):
            await colleague.edit_message(message.id, MessageUpdate(content="Hijacked"))
        with pytest.raises(AuthorizationError):
            await colleague.delete_message(message.id)

        edited = await service.edit_message(message.id, MessageUpdate(content="Final"))
        assert edited.content == "Final"
        assert edited.edited_at is not None

        await service.delete_message(message.id)
        assert await service.list_messages(project.id) == []


class TestClientIsolation:
    async def test_other_clients_resources_are_not_found(self, service, outsider, team, project):
        column = (await service.list_columns(project.id))[0]
        task = await service.create_task(TaskCreate(project_id=project.id, column_id=column.id, title="A"))
        message = await service.post_message(project.id, MessageCreate(content="Hi"))

        with pytest.raises(NotFoundError, match="Team not found"):
            await outsider.get_team(team.id)
        with pytest.raises(NotFoundError, match="Project not found"):
            await outsider.get_project(project.id)
        with pytest.raises(NotFoundError, match="Column not found"):
            await outsider.get_column(column.id)
        with pytest.raises(NotFoundError, match="Task not found"):
            await outsider.get_task(task.id)
        with pytest.raises(NotFoundError, match="Message not found"):
            await outsider.edit_message(message.id, MessageUpdate(content="x"))
        assert await outsider.list_projects() == []
