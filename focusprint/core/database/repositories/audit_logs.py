"""Audit log repository. Entries are append-only."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import or_
from sqlmodel.ext.asyncio.session import AsyncSession

from ..entities.audit_logs import AuditLog
from .base import AsyncCrudRepository


class AuditLogRepository(AsyncCrudRepository[AuditLog]):
    """Repository for audit log data access operations using SQLModel."""

    default_order = AuditLog.created_at.desc()

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, AuditLog)

    @staticmethod
    def search_conditions(
        date_from: Optional[datetime] = None, date_to: Optional[datetime] = None, search: Optional[str] = None
    ) -> List[Any]:
        conditions: List[Any] = []
        if date_from is not None:
            conditions.append(AuditLog.created_at >= date_from)
        if date_to is not None:
            conditions.append(AuditLog.created_at <= date_to)
        if search:
            pattern = f"%{search}%"
            conditions.append(
                or_(
                    AuditLog.resource_name.ilike(pattern),
                    AuditLog.admin_email.ilike(pattern),
                    AuditLog.description.ilike(pattern),
                )
            )
        return conditions

    async def count_since(self, column_name: str, since: Optional[datetime] = None) -> Dict[str, int]:
        """Group entries created since ``since`` by ``column_name`` and count them."""
        conditions = [AuditLog.created_at >= since] if since is not None else []
        return await self.count_by(column_name, conditions)
