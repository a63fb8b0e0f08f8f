"""Ticket and ticket comment repositories."""

from __future__ import annotations

from typing import List

from sqlalchemy import func
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from ..entities.tickets import Ticket, TicketComment
from .base import AsyncCrudRepository


class TicketRepository(AsyncCrudRepository[Ticket]):
    """Repository for support ticket data access operations using SQLModel."""

    default_order = Ticket.created_at.desc()

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Ticket)

    async def next_sequence(self) -> int:
        result = await self.session.exec(select(func.max(Ticket.sequence)))
        current = result.one()
        return int(current or 0) + 1


class TicketCommentRepository(AsyncCrudRepository[TicketComment]):
    """Repository for ticket comments."""

    default_order = TicketComment.created_at.asc()

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, TicketComment)

    async def list_by_ticket(self, ticket_id: str, include_internal: bool = True) -> List[TicketComment]:
        stmt = select(TicketComment).where(TicketComment.ticket_id == ticket_id)
        if not include_internal:
            stmt = stmt.where(TicketComment.is_internal == False)  # noqa: E712
        result = await self.session.exec(stmt.order_by(TicketComment.created_at))
        return list(result)

    async def count_admin_comments(self, ticket_id: str) -> int:
        return await self.count(filters={"ticket_id": ticket_id, "author_type": "admin"})
