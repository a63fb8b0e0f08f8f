"""
Client entity models.

A client is a tenant organisation subscribing to the platform. Client users
are the members of that organisation who sign in to the dashboard.
"""

from datetime import datetime
from typing import Optional

from sqlmodel import Field

from ..base import Base, new_id, utc_now


class ClientBase(Base):
    """Base fields for clients."""

    name: str = Field(max_length=100)
    email: str = Field(max_length=255, unique=True, index=True)
    plan_type: str = Field(default="free", max_length=32, index=True)
    status: str = Field(default="active", max_length=16, index=True)
    cnpj: Optional[str] = Field(default=None, max_length=32)
    phone: Optional[str] = Field(default=None, max_length=32)
    address: Optional[str] = Field(default=None, max_length=500)


class Client(ClientBase, table=True):
    """Entity for tenant organisations.

    Table: clients
    """

    __tablename__ = "clients"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    max_users: int = Field(default=5)
    max_projects: int = Field(default=3)
    stripe_customer_id: Optional[str] = Field(default=None, max_length=128)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    def __repr__(self) -> str:
        return f"Client(id={self.id}, name={self.name}, plan_type={self.plan_type})"


class ClientUser(Base, table=True):
    """Entity for members of a client organisation.

    Table: client_users
    """

    __tablename__ = "client_users"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    client_id: str = Field(foreign_key="clients.id", max_length=64, index=True)
    email: str = Field(max_length=255, unique=True, index=True)
    first_name: str = Field(max_length=50)
    last_name: str = Field(max_length=50)
    role: str = Field(default="member", max_length=16)
    is_active: bool = Field(default=True)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
