"""
Admin profile entity models.

This module contains the database entity for platform administrators. The
role selects a predefined permission set; ``permissions`` holds extra grants
on top of it.
"""

from datetime import datetime
from typing import List, Optional

from sqlmodel import JSON, Field

from ..base import Base, new_id, utc_now


class AdminProfileBase(Base):
    """Base fields for admin profiles."""

    email: str = Field(max_length=255, unique=True, index=True)
    first_name: str = Field(max_length=100)
    last_name: str = Field(max_length=100)
    role: str = Field(max_length=32, index=True)
    permissions: List[str] = Field(default_factory=list, sa_type=JSON)
    department: Optional[str] = Field(default=None, max_length=64)
    is_active: bool = Field(default=True)


class AdminProfile(AdminProfileBase, table=True):
    """Entity for platform administrators.

    Table: admin_profiles
    """

    __tablename__ = "admin_profiles"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    created_by: Optional[str] = Field(default=None, max_length=64)
    last_login_at: Optional[datetime] = Field(default=None)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def __repr__(self) -> str:
        return f"AdminProfile(id={self.id}, email={self.email}, role={self.role})"
