"""
Client I/O models for API requests and responses.

This module contains the schemas for tenant organisations and their users.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..domain.enums import ClientStatus, ClientUserRole, PlanType
from .common import Pagination, reject_null


class ClientRead(BaseModel):
    """Schema for reading a client from API."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str
    plan_type: str
    status: str
    cnpj: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    max_users: int = Field(description="Maximum active users allowed by the plan")
    max_projects: int = Field(description="Maximum live projects allowed by the plan")
    created_at: datetime
    updated_at: datetime


class ClientCreate(BaseModel):
    """Schema for creating a client via API."""

    name: str = Field(min_length=2, max_length=100, description="Organisation name")
    email: str = Field(max_length=255, description="Unique contact email")
    plan_type: PlanType = Field(default=PlanType.free, description="Plan selecting the usage limits")
    status: ClientStatus = ClientStatus.active
    cnpj: Optional[str] = Field(default=None, max_length=32)
    phone: Optional[str] = Field(default=None, max_length=32)
    address: Optional[str] = Field(default=None, max_length=500)


class ClientUpdate(BaseModel):
    """Schema for updating a client via API. At least one field is required."""

    name: Optional[str] = Field(default=None, min_length=2, max_length=100)
    email: Optional[str] = Field(default=None, max_length=255)
    plan_type: Optional[PlanType] = None
    status: Optional[ClientStatus] = None
    cnpj: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None

    @field_validator("name", "email", "plan_type", "status")
    @classmethod
    def not_null(cls, value):
        return reject_null(value)


class ClientStatusChange(BaseModel):
    reason: Optional[str] = Field(default=None, max_length=500)


class ClientListResponse(BaseModel):
    clients: List[ClientRead]
    pagination: Pagination


class ClientUserRead(BaseModel):
    """Schema for reading a client user from API."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    client_id: str
    email: str
    first_name: str
    last_name: str
    role: str
    is_active: bool
    created_at: datetime
    updated_at: datetime


class ClientUserCreate(BaseModel):
    email: str = Field(max_length=255)
    first_name: str = Field(min_length=1, max_length=50)
    last_name: str = Field(min_length=1, max_length=50)
    role: ClientUserRole = ClientUserRole.member
