"""Client impersonation session repository."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from ..entities.impersonation import ImpersonationSession
from .base import AsyncCrudRepository


class ImpersonationSessionRepository(AsyncCrudRepository[ImpersonationSession]):
    """Repository for impersonation sessions, newest first."""

    default_order = ImpersonationSession.started_at.desc()

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, ImpersonationSession)

    async def get_by_token(self, token: str) -> Optional[ImpersonationSession]:
        result = await self.session.exec(select(ImpersonationSession).where(ImpersonationSession.session_token == token))
        return result.first()

    async def list_active_by_admin(self, admin_id: str, now: datetime) -> List[ImpersonationSession]:
        return await self.list_where(
            [
                ImpersonationSession.admin_id == admin_id,
                ImpersonationSession.status == "active",
                ImpersonationSession.expires_at > now,
            ]
        )

    async def list_overdue(self, now: datetime) -> List[ImpersonationSession]:
        """Sessions still marked active whose expiry time has passed."""
        return await self.list_where(
            [ImpersonationSession.status == "active", ImpersonationSession.expires_at <= now],
            order_by=ImpersonationSession.expires_at.asc(),
        )
