"""
Client workspace service.

Everything here is scoped to the caller's client: a team, project, column,
task or message that belongs to another client is reported as not found.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from sqlmodel.ext.asyncio.session import AsyncSession

from focusprint.core.database.base import utc_now
from focusprint.core.database.entities.clients import ClientUser
from focusprint.core.database.entities.workspace import KanbanColumn, Project, ProjectMessage, Task, Team
from focusprint.core.database.repositories.clients import ClientRepository
from focusprint.core.database.repositories.workspace import (
    KanbanColumnRepository,
    ProjectMessageRepository,
    ProjectRepository,
    TaskRepository,
    TeamRepository,
)
from focusprint.core.errors import (
    AuthorizationError,
    ConflictError,
    ErrorCode,
    LimitExceededError,
    NotFoundError,
    OperationNotAllowedError,
    ValidationFailedError,
)
from focusprint.core.logging_config import get_logger
from focusprint.core.models.io.workspace import (
    ColumnCreate,
    ColumnUpdate,
    MessageCreate,
    MessageUpdate,
    ProjectArchive,
    ProjectBulkArchive,
    ProjectBulkArchiveResult,
    ProjectCreate,
    ProjectRead,
    ProjectUpdate,
    TaskCreate,
    TaskMove,
    TaskUpdate,
    TeamCreate,
    TeamUpdate,
)

logger = get_logger(__name__)

# (name, color)
DEFAULT_COLUMNS = (
    ("To Do", "#6B7280"),
    ("In Progress", "#3B82F6"),
    ("Review", "#F59E0B"),
    ("Done", "#10B981"),
)


class WorkspaceService:
    """Teams, projects, kanban boards and project chat of one client user."""

    def __init__(self, session: AsyncSession, user: ClientUser) -> None:
        self.user = user
        self.client_id = user.client_id
        self.clients = ClientRepository(session)
        self.teams = TeamRepository(session)
        self.projects = ProjectRepository(session)
        self.columns = KanbanColumnRepository(session)
        self.tasks = TaskRepository(session)
        self.messages = ProjectMessageRepository(session)

    # =====================================================================
    # Teams
    # =====================================================================

    async def list_teams(self, include_archived: bool = False) -> List[Team]:
        filters: Dict[str, Any] = {"client_id": self.client_id}
        if not include_archived:
            filters["is_archived"] = False
        return await self.teams.list(filters=filters)

    async def get_team(self, team_id: str) -> Team:
        team = await self.teams.get_by_id(team_id)
        if not team or team.client_id != self.client_id:
            raise NotFoundError("Team")
        return team

    async def _ensure_unique_team_name(self, name: str, exclude_id: Optional[str] = None) -> None:
        for team in await self.teams.list(filters={"client_id": self.client_id}):
            if team.id != exclude_id and team.name.lower() == name.lower():
                raise ConflictError("A team with this name already exists")

    async def create_team(self, data: TeamCreate) -> Team:
        name = data.name.strip()
        await self._ensure_unique_team_name(name)
        team = await self.teams.create(
            Team(
                client_id=self.client_id,
                name=name,
                description=data.description,
                color=data.color,
                created_by=self.user.id,
            )
        )
        logger.info(f"Team {team.id} created for client {self.client_id}")
        return team

    async def update_team(self, team_id: str, data: TeamUpdate) -> Team:
        team = await self.get_team(team_id)
        updates = data.model_dump(exclude_unset=True)
        if not updates:
            raise ValidationFailedError("At least one field must be provided for update")
        if updates.get("name"):
            updates["name"] = updates["name"].strip()
            await self._ensure_unique_team_name(updates["name"], exclude_id=team.id)
        for key, value in updates.items():
            setattr(team, key, value)
        return await self.teams.update(team)

    async def delete_team(self, team_id: str) -> None:
        team = await self.get_team(team_id)
        if await self.projects.list_for_client(self.client_id, team_id=team.id, include_archived=True):
            raise OperationNotAllowedError("Cannot delete a team with active projects")
        await self.teams.delete(team.id)
        logger.info(f"Team {team_id} deleted by user {self.user.id}")

    # =====================================================================
    # Projects
    # =====================================================================

    async def list_projects(
        self,
        team_id: Optional[str] = None,
        include_archived: bool = False,
        archived_only: bool = False,
        deleted_only: bool = False,
    ) -> List[Project]:
        return await self.projects.list_for_client(
            self.client_id,
            team_id=team_id,
            include_archived=include_archived,
            archived_only=archived_only,
            deleted_only=deleted_only,
        )

    async def get_project(self, project_id: str, include_deleted: bool = False) -> Project:
        project = await self.projects.get_by_id(project_id)
        if not project or project.client_id != self.client_id:
            raise NotFoundError("Project")
        if project.deleted_at is not None and not include_deleted:
            raise NotFoundError("Project")
        return project

    async def _check_project_limit(self) -> None:
        client = await self.clients.get_by_id(self.client_id)
        if not client or client.max_projects == -1:
            return
        current = await self.projects.count_live(self.client_id)
        if current >= client.max_projects:
            raise LimitExceededError(
                f"Project limit reached: the {client.plan_type} plan allows up to {client.max_projects} projects",
                context={"max_projects": client.max_projects, "current_projects": current},
            )

    async def create_project(self, data: ProjectCreate) -> Project:
        """Create a project with the default kanban columns."""
        await self.get_team(data.team_id)
        await self._check_project_limit()

        project = await self.projects.create(
            Project(
                client_id=self.client_id,
                team_id=data.team_id,
                name=data.name.strip(),
                description=data.description,
                status=data.status.value,
                priority=data.priority.value,
                start_date=data.start_date,
                end_date=data.end_date,
                created_by=self.user.id,
            )
        )
        for position, (name, color) in enumerate(DEFAULT_COLUMNS, start=1):
            await self.columns.create(KanbanColumn(project_id=project.id, name=name, color=color, position=position))
        logger.info(f"Project {project.id} created for client {self.client_id}")
        return project

    async def update_project(self, project_id: str, data: ProjectUpdate) -> Project:
        project = await self.get_project(project_id)
        updates = data.model_dump(exclude_unset=True)
        if not updates:
            raise ValidationFailedError("At least one field must be provided for update")
        if updates.get("team_id"):
            await self.get_team(updates["team_id"])
        for key, value in updates.items():
            setattr(project, key, value.value if hasattr(value, "value") else value)
        return await self.projects.update(project)

    async def archive_project(self, project_id: str, data: ProjectArchive) -> Project:
        project = await self.get_project(project_id)
        if project.archived_at is not None:
            raise OperationNotAllowedError("Project is already archived")
        project.archived_at = utc_now()
        project.archived_by = self.user.id
        project.archive_reason = data.reason
        project.archive_category = data.archive_category.value
        project = await self.projects.update(project)
        logger.info(f"Project {project_id} archived ({project.archive_category})")
        return project

    async def restore_project(self, project_id: str) -> Project:
        """Bring back an archived or soft-deleted project."""
        project = await self.get_project(project_id, include_deleted=True)
        if project.archived_at is None and project.deleted_at is None:
            raise OperationNotAllowedError("Project is not archived")
        await self._check_project_limit()
        project.archived_at = None
        project.archived_by = None
        project.archive_reason = None
        project.archive_category = None
        project.deleted_at = None
        project = await self.projects.update(project)
        logger.info(f"Project {project_id} restored")
        return project

    async def bulk_archive_projects(self, data: ProjectBulkArchive) -> ProjectBulkArchiveResult:
        requested = list(dict.fromkeys(data.project_ids))
        found = await self.projects.list_active_by_ids(self.client_id, requested)
        found_ids = {project.id for project in found}
        missing = [pid for pid in requested if pid not in found_ids]
        if missing:
            raise ValidationFailedError(
                "Some projects not found or already archived",
                context={"missing_projects": missing, "found_projects": sorted(found_ids)},
            )

        now = utc_now()
        archived: List[Project] = []
        for project in found:
            project.archived_at = now
            project.archived_by = self.user.id
            project.archive_reason = data.reason
            project.archive_category = data.archive_category.value
            archived.append(await self.projects.update(project))
        logger.info(f"Bulk archived {len(archived)} projects for client {self.client_id}")

        return ProjectBulkArchiveResult(
            archived_projects=[ProjectRead.model_validate(project) for project in archived],
            summary={
                "total_projects": len(requested),
                "archived_count": len(archived),
                "failed_count": len(requested) - len(archived),
                "success_rate": round(len(archived) / len(requested) * 100) if requested else 0,
                "reason": data.reason,
                "category": data.archive_category.value,
            },
        )

    async def delete_project(self, project_id: str) -> Project:
        """Soft delete; the project can be restored later."""
        project = await self.get_project(project_id)
        project.deleted_at = utc_now()
        project = await self.projects.update(project)
        logger.info(f"Project {project_id} soft deleted by user {self.user.id}")
        return project

    # =====================================================================
    # Kanban columns
    # =====================================================================

    async def list_columns(self, project_id: str) -> List[KanbanColumn]:
        await self.get_project(project_id)
        return await self.columns.list_by_project(project_id)

    async def get_column(self, column_id: str) -> KanbanColumn:
        column = await self.columns.get_by_id(column_id)
        if not column:
            raise NotFoundError("Column")
        await self._project_or_missing(column.project_id, "Column")
        return column

    async def _project_or_missing(self, project_id: str, resource: str) -> Project:
        try:
            return await self.get_project(project_id)
        except NotFoundError:
            raise NotFoundError(resource) from None

    async def create_column(self, project_id: str, data: ColumnCreate) -> KanbanColumn:
        await self.get_project(project_id)
        position = await self.columns.max_position(project_id) + 1
        return await self.columns.create(
            KanbanColumn(
                project_id=project_id,
                name=data.name.strip(),
                color=data.color,
                position=position,
                wip_limit=data.wip_limit,
            )
        )

    async def update_column(self, column_id: str, data: ColumnUpdate) -> KanbanColumn:
        column = await self.get_column(column_id)
        updates = data.model_dump(exclude_unset=True)
        if not updates:
            raise ValidationFailedError("At least one field must be provided for update")
        for key, value in updates.items():
            setattr(column, key, value)
        return await self.columns.update(column)

    async def delete_column(self, column_id: str) -> None:
        column = await self.get_column(column_id)
        if await self.tasks.list_by_project(column.project_id, column_id=column.id):
            raise OperationNotAllowedError("Cannot delete a column that still has tasks")
        await self.columns.delete(column.id)

    async def reorder_columns(self, project_id: str, column_ids: List[str]) -> List[KanbanColumn]:
        columns = await self.list_columns(project_id)
        by_id = {column.id: column for column in columns}
        if len(column_ids) != len(set(column_ids)) or set(column_ids) != set(by_id):
            raise ValidationFailedError("Invalid column order: every column of the project must be listed once")
        for position, column_id in enumerate(column_ids, start=1):
            column = by_id[column_id]
            if column.position != position:
                column.position = position
                await self.columns.update(column)
        return await self.columns.list_by_project(project_id)

    # =====================================================================
    # Tasks
    # =====================================================================

    async def list_tasks(self, project_id: str, column_id: Optional[str] = None) -> List[Task]:
        await self.get_project(project_id)
        return await self.tasks.list_by_project(project_id, column_id)

    async def search_tasks(self, project_id: str, query: str) -> List[Task]:
        await self.get_project(project_id)
        query = (query or "").strip()
        if not query:
            return await self.tasks.list_by_project(project_id)
        return await self.tasks.search(project_id, query)

    async def get_task(self, task_id: str) -> Task:
        task = await self.tasks.get_by_id(task_id)
        if not task:
            raise NotFoundError("Task")
        await self._project_or_missing(task.project_id, "Task")
        return task

    async def _column_in_project(self, column_id: str, project_id: str) -> KanbanColumn:
        column = await self.columns.get_by_id(column_id)
        if not column or column.project_id != project_id:
            raise NotFoundError("Column")
        return column

    async def create_task(self, data: TaskCreate) -> Task:
        if not data.project_id or not data.column_id or not (data.title or "").strip():
            raise ValidationFailedError(
                "Missing required fields: project_id, column_id, and title are required",
                code=ErrorCode.MISSING_REQUIRED_FIELD,
            )
        await self.get_project(data.project_id)
        await self._column_in_project(data.column_id, data.project_id)

        position = data.position or await self.tasks.max_position(data.column_id) + 1
        task = await self.tasks.create(
            Task(
                project_id=data.project_id,
                column_id=data.column_id,
                title=data.title.strip(),
                description=data.description,
                priority=data.priority.value,
                due_date=data.due_date,
                estimated_hours=data.estimated_hours,
                assigned_to=data.assigned_to,
                position=position,
                created_by=self.user.id,
            )
        )
        logger.debug(f"Task {task.id} created in column {task.column_id} at position {task.position}")
        return task

    async def update_task(self, task_id: str, data: TaskUpdate) -> Task:
        task = await self.get_task(task_id)
        updates = data.model_dump(exclude_unset=True)
        if not updates:
            raise ValidationFailedError("At least one field must be provided for update")
        for key, value in updates.items():
            setattr(task, key, value.value if hasattr(value, "value") else value)
        return await self.tasks.update(task)

    async def move_task(self, task_id: str, data: TaskMove) -> Task:
        """Move a task to another column or position.

        Moving to a different column without a position appends the task.
        """
        task = await self.get_task(task_id)
        if data.column_id and data.column_id != task.column_id:
            await self._column_in_project(data.column_id, task.project_id)
            task.column_id = data.column_id
            task.position = data.position or await self.tasks.max_position(data.column_id) + 1
        elif data.position:
            task.position = data.position
        else:
            raise ValidationFailedError("Either column_id or position is required")
        return await self.tasks.update(task)

    async def delete_task(self, task_id: str) -> None:
        task = await self.get_task(task_id)
        await self.tasks.delete(task.id)

    # =====================================================================
    # Project messages
    # =====================================================================

    async def list_messages(self, project_id: str, limit: int = 100, offset: int = 0) -> List[ProjectMessage]:
        await self.get_project(project_id)
        return await self.messages.list_by_project(project_id, limit=limit, offset=offset)

    async def post_message(self, project_id: str, data: MessageCreate) -> ProjectMessage:
        await self.get_project(project_id)
        content = data.content.strip()
        if not content:
            raise ValidationFailedError("Missing required field: content is required")
        return await self.messages.create(
            ProjectMessage(
                project_id=project_id,
                user_id=self.user.id,
                user_name=self.user.full_name,
                content=content,
            )
        )

    async def _own_message(self, message_id: str) -> ProjectMessage:
        message = await self.messages.get_by_id(message_id)
        if not message:
            raise NotFoundError("Message")
        await self._project_or_missing(message.project_id, "Message")
        if message.user_id != self.user.id:
            raise AuthorizationError("You can only modify your own messages", code=ErrorCode.FORBIDDEN)
        return message

    async def edit_message(self, message_id: str, data: MessageUpdate) -> ProjectMessage:
        message = await self._own_message(message_id)
        content = data.content.strip()
        if not content:
            raise ValidationFailedError("Missing required field: content is required")
        message.content = content
        message.edited_at = utc_now()
        return await self.messages.update(message)

    async def delete_message(self, message_id: str) -> None:
        message = await self._own_message(message_id)
        await self.messages.delete(message.id)
