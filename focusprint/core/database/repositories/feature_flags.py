"""Feature flag, override and history repositories."""

from __future__ import annotations

from typing import List, Optional

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from ..entities.feature_flags import FeatureFlag, FeatureFlagHistory, FeatureFlagOverride
from .base import AsyncCrudRepository


class FeatureFlagRepository(AsyncCrudRepository[FeatureFlag]):
    """Repository for feature flag data access operations using SQLModel."""

    default_order = FeatureFlag.key.asc()

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, FeatureFlag)

    async def get_by_key(self, key: str, environment: str) -> Optional[FeatureFlag]:
        stmt = select(FeatureFlag).where(FeatureFlag.key == key).where(FeatureFlag.environment == environment)
        result = await self.session.exec(stmt)
        return result.first()

    async def find_for_evaluation(self, key: str, environment: str) -> Optional[FeatureFlag]:
        """Flag defined for ``environment``, falling back to the one defined for all environments."""
        flag = await self.get_by_key(key, environment)
        if flag is None and environment != "all":
            flag = await self.get_by_key(key, "all")
        return flag

    async def get_many(self, flag_ids: List[str]) -> List[FeatureFlag]:
        return await self.list(filters={"id": flag_ids})


class FeatureFlagOverrideRepository(AsyncCrudRepository[FeatureFlagOverride]):
    """Repository for per-client feature flag overrides."""

    default_order = FeatureFlagOverride.created_at.asc()

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, FeatureFlagOverride)

    async def get_for_client(self, flag_id: str, client_id: str) -> Optional[FeatureFlagOverride]:
        stmt = (
            select(FeatureFlagOverride)
            .where(FeatureFlagOverride.flag_id == flag_id)
            .where(FeatureFlagOverride.client_id == client_id)
        )
        result = await self.session.exec(stmt)
        return result.first()

    async def list_by_flag(self, flag_id: str) -> List[FeatureFlagOverride]:
        return await self.list(filters={"flag_id": flag_id})


class FeatureFlagHistoryRepository(AsyncCrudRepository[FeatureFlagHistory]):
    """Repository for the feature flag change history."""

    default_order = FeatureFlagHistory.created_at.desc()

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, FeatureFlagHistory)

    async def add(self, entry: FeatureFlagHistory) -> FeatureFlagHistory:
        self.session.add(entry)
        await self.session.flush()
        return entry

    async def list_by_flag(self, flag_id: str, limit: int = 50) -> List[FeatureFlagHistory]:
        return await self.list(limit=limit, filters={"flag_id": flag_id})
