"""
License entity models.

A license binds a client to a plan and tracks its billing state. Usage limits
are copied from the plan when the license is created or changes plan.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from sqlmodel import JSON, Field

from ..base import Base, new_id, utc_now


class License(Base, table=True):
    """Entity for client licenses.

    Table: licenses
    """

    __tablename__ = "licenses"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    client_id: str = Field(foreign_key="clients.id", max_length=64, index=True)
    plan_id: Optional[str] = Field(default=None, foreign_key="plans.id", max_length=64)
    plan_type: str = Field(max_length=32, index=True)
    status: str = Field(default="active", max_length=16, index=True)

    start_date: datetime = Field(default_factory=utc_now)
    end_date: Optional[datetime] = Field(default=None)
    trial_ends_at: Optional[datetime] = Field(default=None, index=True)

    max_users: int = Field(default=5)
    max_projects: int = Field(default=3)
    license_metadata: Dict[str, Any] = Field(default_factory=dict, sa_type=JSON)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    def __repr__(self) -> str:
        return f"License(id={self.id}, client_id={self.client_id}, status={self.status})"
