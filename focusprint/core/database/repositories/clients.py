"""Client and client user repositories."""

from __future__ import annotations

from typing import Any, List, Optional

from sqlalchemy import or_
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from ..entities.clients import Client, ClientUser
from .base import AsyncCrudRepository


class ClientRepository(AsyncCrudRepository[Client]):
    """Repository for client data access operations using SQLModel."""

    default_order = Client.created_at.desc()

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Client)

    async def get_by_email(self, email: str) -> Optional[Client]:
        stmt = select(Client).where(Client.email == email.lower())
        result = await self.session.exec(stmt)
        return result.first()

    @staticmethod
    def search_conditions(search: Optional[str]) -> List[Any]:
        if not search:
            return []
        pattern = f"%{search}%"
        return [or_(Client.name.ilike(pattern), Client.email.ilike(pattern))]


class ClientUserRepository(AsyncCrudRepository[ClientUser]):
    """Repository for client user data access operations using SQLModel."""

    default_order = ClientUser.created_at.asc()

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, ClientUser)

    async def get_by_email(self, email: str) -> Optional[ClientUser]:
        stmt = select(ClientUser).where(ClientUser.email == email.lower())
        result = await self.session.exec(stmt)
        return result.first()

    async def list_by_client(self, client_id: str) -> List[ClientUser]:
        return await self.list(filters={"client_id": client_id})
