"""
Admin profile I/O models for API requests and responses.

This module contains the schemas for reading and managing platform
administrators and the effective permission context of the caller.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..domain.enums import AdminPermission, AdminRole


class AdminProfileRead(BaseModel):
    """Schema for reading an admin profile from API."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    first_name: str
    last_name: str
    role: str = Field(description="Admin role selecting the base permission set")
    permissions: List[str] = Field(description="Explicit grants on top of the role's permissions")
    department: Optional[str] = None
    is_active: bool
    created_by: Optional[str] = None
    last_login_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class AdminProfileCreate(BaseModel):
    """Schema for creating an admin profile via API."""

    email: str = Field(description="Unique sign-in email")
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    role: AdminRole = Field(description="Admin role")
    permissions: List[AdminPermission] = Field(default_factory=list, description="Extra permission grants")
    department: Optional[str] = Field(default=None, description="Defaults to the role's department")


class AdminPermissionsUpdate(BaseModel):
    """Schema for changing an admin's role and/or explicit permissions."""

    role: Optional[AdminRole] = None
    permissions: Optional[List[AdminPermission]] = None
    reason: Optional[str] = Field(default=None, max_length=500)


class AdminContextRead(BaseModel):
    """Effective permission context of the calling admin."""

    admin: AdminProfileRead
    role: str
    permissions: List[str] = Field(description="Union of role and explicit permissions")
    department: Optional[str] = None
    session_expires_at: datetime
