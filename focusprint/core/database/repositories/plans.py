"""Plan repository."""

from __future__ import annotations

from typing import Optional

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from ..entities.plans import Plan
from .base import AsyncCrudRepository


class PlanRepository(AsyncCrudRepository[Plan]):
    """Repository for plan data access operations using SQLModel."""

    default_order = Plan.price.asc()

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Plan)

    async def get_by_code(self, code: str) -> Optional[Plan]:
        stmt = select(Plan).where(Plan.code == code.lower())
        result = await self.session.exec(stmt)
        return result.first()
