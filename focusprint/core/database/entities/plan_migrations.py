"""Plan migration entity models."""

from datetime import datetime
from typing import Optional

from sqlmodel import Field

from ..base import Base, new_id, utc_now


class PlanMigration(Base, table=True):
    """Record of a client moving from one plan to another.

    Table: plan_migrations
    """

    __tablename__ = "plan_migrations"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    client_id: str = Field(foreign_key="clients.id", max_length=64, index=True)
    from_plan_id: Optional[str] = Field(default=None, max_length=64)
    to_plan_id: str = Field(max_length=64)
    from_plan_type: Optional[str] = Field(default=None, max_length=32)
    to_plan_type: str = Field(max_length=32)
    migration_type: str = Field(max_length=16)
    migration_reason: Optional[str] = Field(default=None)
    effective_date: datetime = Field(default_factory=utc_now)
    proration_amount: float = Field(default=0.0)
    proration_currency: str = Field(default="BRL", max_length=3)
    status: str = Field(default="pending", max_length=16, index=True)
    error_message: Optional[str] = Field(default=None)

    created_by: Optional[str] = Field(default=None, max_length=64)
    created_at: datetime = Field(default_factory=utc_now, index=True)
    completed_at: Optional[datetime] = Field(default=None)
