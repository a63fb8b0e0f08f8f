"""Bulk operation repository."""

from __future__ import annotations

from sqlmodel.ext.asyncio.session import AsyncSession

from ..entities.bulk_operations import BulkOperation
from .base import AsyncCrudRepository


class BulkOperationRepository(AsyncCrudRepository[BulkOperation]):
    """Repository for bulk operation data access operations using SQLModel."""

    default_order = BulkOperation.created_at.desc()

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, BulkOperation)

    async def count_running(self) -> int:
        return await self.count(filters={"status": "running"})
