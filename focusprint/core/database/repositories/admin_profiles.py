"""Admin profile repository."""

from __future__ import annotations

from typing import Optional

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from ..entities.admin_profiles import AdminProfile
from .base import AsyncCrudRepository


class AdminProfileRepository(AsyncCrudRepository[AdminProfile]):
    """Repository for admin profile data access operations using SQLModel."""

    default_order = AdminProfile.created_at.asc()

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, AdminProfile)

    async def get_by_email(self, email: str) -> Optional[AdminProfile]:
        stmt = select(AdminProfile).where(AdminProfile.email == email.lower())
        result = await self.session.exec(stmt)
        return result.first()
