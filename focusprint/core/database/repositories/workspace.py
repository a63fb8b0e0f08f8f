"""Repositories for the client workspace: teams, projects, columns, tasks and messages."""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import func, or_
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from ..entities.workspace import KanbanColumn, Project, ProjectMessage, Task, Team
from .base import AsyncCrudRepository


class TeamRepository(AsyncCrudRepository[Team]):
    default_order = Team.created_at.asc()

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Team)


class ProjectRepository(AsyncCrudRepository[Project]):
    default_order = Project.created_at.desc()

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Project)

    async def list_for_client(
        self,
        client_id: str,
        team_id: Optional[str] = None,
        include_archived: bool = False,
        archived_only: bool = False,
        deleted_only: bool = False,
    ) -> List[Project]:
        stmt = select(Project).where(Project.client_id == client_id)
        if team_id:
            stmt = stmt.where(Project.team_id == team_id)
        if deleted_only:
            stmt = stmt.where(Project.deleted_at.is_not(None))
        else:
            stmt = stmt.where(Project.deleted_at.is_(None))
            if archived_only:
                stmt = stmt.where(Project.archived_at.is_not(None))
            elif not include_archived:
                stmt = stmt.where(Project.archived_at.is_(None))
        result = await self.session.exec(stmt.order_by(Project.created_at.desc()))
        return list(result)

    async def count_live(self, client_id: str) -> int:
        """Projects counted against the client's project limit."""
        return await self.count(
            filters={"client_id": client_id},
            conditions=[Project.deleted_at.is_(None), Project.archived_at.is_(None)],
        )

    async def list_active_by_ids(self, client_id: str, project_ids: List[str]) -> List[Project]:
        stmt = (
            select(Project)
            .where(Project.client_id == client_id)
            .where(Project.id.in_(project_ids))
            .where(Project.archived_at.is_(None))
            .where(Project.deleted_at.is_(None))
        )
        result = await self.session.exec(stmt)
        return list(result)


class KanbanColumnRepository(AsyncCrudRepository[KanbanColumn]):
    default_order = KanbanColumn.position.asc()

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, KanbanColumn)

    async def list_by_project(self, project_id: str) -> List[KanbanColumn]:
        return await self.list(filters={"project_id": project_id})

    async def max_position(self, project_id: str) -> int:
        stmt = select(func.max(KanbanColumn.position)).where(KanbanColumn.project_id == project_id)
        result = await self.session.exec(stmt)
        return int(result.one() or 0)


class TaskRepository(AsyncCrudRepository[Task]):
    default_order = Task.position.asc()

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Task)

    async def max_position(self, column_id: str) -> int:
        stmt = select(func.max(Task.position)).where(Task.column_id == column_id)
        result = await self.session.exec(stmt)
        return int(result.one() or 0)

    async def list_by_project(self, project_id: str, column_id: Optional[str] = None) -> List[Task]:
        return await self.list(filters={"project_id": project_id, "column_id": column_id})

    async def search(self, project_id: str, query: str) -> List[Task]:
        pattern = f"%{query}%"
        stmt = (
            select(Task)
            .where(Task.project_id == project_id)
            .where(or_(Task.title.ilike(pattern), Task.description.ilike(pattern)))
            .order_by(Task.position)
        )
        result = await self.session.exec(stmt)
        return list(result)


class ProjectMessageRepository(AsyncCrudRepository[ProjectMessage]):
    default_order = ProjectMessage.created_at.asc()

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, ProjectMessage)

    async def list_by_project(self, project_id: str, limit: int = 100, offset: int = 0) -> List[ProjectMessage]:
        return await self.list(limit=limit, offset=offset, filters={"project_id": project_id})
