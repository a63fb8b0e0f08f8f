"""License repository."""

from __future__ import annotations

from datetime import datetime
from typing import List

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from ..entities.licenses import License
from .base import AsyncCrudRepository


class LicenseRepository(AsyncCrudRepository[License]):
    """Repository for license data access operations using SQLModel."""

    default_order = License.created_at.desc()

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, License)

    async def list_trials_ending_before(self, moment: datetime) -> List[License]:
        """Trial licenses whose trial ended before ``moment``."""
        stmt = (
            select(License)
            .where(License.status == "trial")
            .where(License.trial_ends_at.is_not(None))
            .where(License.trial_ends_at < moment)
            .order_by(License.trial_ends_at)
        )
        result = await self.session.exec(stmt)
        return list(result)

    async def list_trials_ending_between(self, start: datetime, end: datetime) -> List[License]:
        stmt = (
            select(License)
            .where(License.status == "trial")
            .where(License.trial_ends_at >= start)
            .where(License.trial_ends_at <= end)
            .order_by(License.trial_ends_at)
        )
        result = await self.session.exec(stmt)
        return list(result)
