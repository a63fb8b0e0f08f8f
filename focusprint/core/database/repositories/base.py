"""
Base repository interfaces and utilities.

This module provides the foundational repository patterns and interfaces
used across all repository implementations in the centralized database layer.
Built with async SQLAlchemy and SQLModel sessions.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Generic, List, Optional, Sequence, Type, TypeVar

from sqlalchemy import func
from sqlmodel import SQLModel, select
from sqlmodel.ext.asyncio.session import AsyncSession

from ..base import utc_now

# Generic type for SQLModel entities
EntityType = TypeVar("EntityType", bound=SQLModel)


class AsyncBaseRepository(ABC, Generic[EntityType]):
    """Base async repository interface with common CRUD operations using SQLModel."""

    def __init__(self, session: AsyncSession, model: Type[EntityType]) -> None:
        """Initialize repository with async database session and SQLModel entity class.

        Args:
            session: Async SQLModel Session for database operations
            model: SQLModel entity class for this repository
        """
        self.session = session
        self.model = model

    @abstractmethod
    async def create(self, entity: EntityType) -> EntityType:
        """Create a new entity record.

        Args:
            entity: SQLModel instance to persist

        Returns:
            Persisted entity with generated fields populated
        """

    @abstractmethod
    async def get_by_id(self, entity_id: str | int) -> Optional[EntityType]:
        """Get entity by its primary identifier.

        Args:
            entity_id: Primary key value

        Returns:
            Entity instance or None if not found
        """

    @abstractmethod
    async def update(self, entity: EntityType) -> EntityType:
        """Update an existing entity record.

        Args:
            entity: SQLModel instance with updated fields

        Returns:
            Updated entity instance
        """

    @abstractmethod
    async def delete(self, entity_id: str | int) -> bool:
        """Delete entity by its primary identifier.

        Args:
            entity_id: Primary key value

        Returns:
            True if deleted, False if not found
        """

    @abstractmethod
    async def list(
        self, limit: Optional[int] = None, offset: Optional[int] = None, filters: Optional[Dict[str, Any]] = None
    ) -> List[EntityType]:
        """List entities with optional pagination and filtering.

        Args:
            limit: Maximum number of records to return
            offset: Number of records to skip
            filters: Dictionary of field filters

        Returns:
            List of entity instances
        """


class AsyncQueryBuilder:
    """Utility class for building async SQLModel-based database queries."""

    @staticmethod
    def apply_filters(stmt, model: Type[EntityType], filters: Dict[str, Any]):
        """Apply filters to a SQLModel select statement.

        Scalar values become equality filters; lists and tuples become
        ``IN`` filters. ``None`` values and unknown fields are ignored.

        Args:
            stmt: SQLModel select statement
            model: SQLModel entity class
            filters: Dictionary of field filters

        Returns:
            Modified select statement with filters applied
        """
        for key, value in filters.items():
            if value is None or not hasattr(model, key):
                continue
            column = getattr(model, key)
            if isinstance(value, (list, tuple, set)):
                stmt = stmt.where(column.in_(list(value)))
            else:
                stmt = stmt.where(column == value)
        return stmt

    @staticmethod
    def apply_pagination(stmt, limit: Optional[int], offset: Optional[int]):
        """Apply pagination to a SQLModel select statement.

        Args:
            stmt: SQLModel select statement
            limit: Maximum number of records
            offset: Number of records to skip

        Returns:
            Modified select statement with pagination applied
        """
        if limit is not None:
            stmt = stmt.limit(limit)
        if offset is not None:
            stmt = stmt.offset(offset)
        return stmt


class AsyncCrudRepository(AsyncBaseRepository[EntityType]):
    """SQLModel CRUD implementation shared by the domain repositories.

    Subclasses pass their entity class and may set ``default_order`` to the
    column expression used by ``list``.
    """

    default_order: Any = None

    async def create(self, entity: EntityType) -> EntityType:
        self.session.add(entity)
        await self.session.commit()
        await self.session.refresh(entity)
        return entity

    async def get_by_id(self, entity_id: str | int) -> Optional[EntityType]:
        return await self.session.get(self.model, entity_id)

    async def update(self, entity: EntityType) -> EntityType:
        if hasattr(entity, "updated_at"):
            entity.updated_at = utc_now()
        self.session.add(entity)
        await self.session.commit()
        await self.session.refresh(entity)
        return entity

    async def delete(self, entity_id: str | int) -> bool:
        entity = await self.get_by_id(entity_id)
        if entity:
            await self.session.delete(entity)
            await self.session.commit()
            return True
        return False

    async def list(
        self, limit: Optional[int] = None, offset: Optional[int] = None, filters: Optional[Dict[str, Any]] = None
    ) -> List[EntityType]:
        stmt = select(self.model)
        if filters:
            stmt = AsyncQueryBuilder.apply_filters(stmt, self.model, filters)
        if self.default_order is not None:
            stmt = stmt.order_by(self.default_order)
        stmt = AsyncQueryBuilder.apply_pagination(stmt, limit, offset)
        result = await self.session.exec(stmt)
        return list(result)

    async def list_where(self, conditions: Sequence[Any] = (), order_by: Any = None) -> List[EntityType]:
        """List rows matching every SQL expression in ``conditions``."""
        stmt = select(self.model)
        for condition in conditions:
            stmt = stmt.where(condition)
        order = order_by if order_by is not None else self.default_order
        if order is not None:
            stmt = stmt.order_by(order)
        result = await self.session.exec(stmt)
        return list(result)

    async def count(self, filters: Optional[Dict[str, Any]] = None, conditions: Sequence[Any] = ()) -> int:
        """Count rows matching equality ``filters`` and extra SQL ``conditions``."""
        stmt = select(func.count()).select_from(self.model)
        if filters:
            stmt = AsyncQueryBuilder.apply_filters(stmt, self.model, filters)
        for condition in conditions:
            stmt = stmt.where(condition)
        result = await self.session.exec(stmt)
        return int(result.one())

    async def count_by(self, column_name: str, conditions: Sequence[Any] = ()) -> Dict[str, int]:
        """Count rows per distinct value of ``column_name``; NULL values are left out."""
        column = getattr(self.model, column_name)
        stmt = select(column, func.count()).group_by(column)
        for condition in conditions:
            stmt = stmt.where(condition)
        result = await self.session.exec(stmt)
        return {str(key): int(count) for key, count in result.all() if key is not None}

    async def page(
        self,
        page: int,
        limit: int,
        filters: Optional[Dict[str, Any]] = None,
        conditions: Sequence[Any] = (),
        order_by: Any = None,
    ) -> tuple[List[EntityType], int]:
        """Return one page of rows plus the total number of matching rows.

        Args:
            page: 1-based page number
            limit: Page size
            filters: Equality / IN filters
            conditions: Additional SQL expressions combined with AND
            order_by: Column expression, defaults to ``default_order``

        Returns:
            Tuple of (rows, total)
        """
        stmt = select(self.model)
        if filters:
            stmt = AsyncQueryBuilder.apply_filters(stmt, self.model, filters)
        for condition in conditions:
            stmt = stmt.where(condition)
        order = order_by if order_by is not None else self.default_order
        if order is not None:
            stmt = stmt.order_by(order)
        stmt = AsyncQueryBuilder.apply_pagination(stmt, limit, (page - 1) * limit)
        result = await self.session.exec(stmt)
        total = await self.count(filters, conditions)
        return list(result), total
