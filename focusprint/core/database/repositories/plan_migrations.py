"""Plan migration repository."""

from __future__ import annotations

from typing import List

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from ..entities.plan_migrations import PlanMigration
from .base import AsyncCrudRepository


class PlanMigrationRepository(AsyncCrudRepository[PlanMigration]):
    """Repository for plan migration data access operations using SQLModel."""

    default_order = PlanMigration.created_at.desc()

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, PlanMigration)

    async def list_by_client(self, client_id: str) -> List[PlanMigration]:
        """Migration history of a client, newest first."""
        return await self.list(filters={"client_id": client_id})

    async def list_pending(self) -> List[PlanMigration]:
        """Pending migrations, oldest first."""
        stmt = select(PlanMigration).where(PlanMigration.status == "pending").order_by(PlanMigration.created_at)
        result = await self.session.exec(stmt)
        return list(result)
