"""
Client impersonation I/O models for API requests and responses.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..domain.enums import ImpersonationPermission
from .common import Pagination


class ImpersonationStart(BaseModel):
    """Schema for starting an impersonation session via API."""

    client_id: str = Field(min_length=1)
    user_id: str = Field(min_length=1, description="Client user to act as")
    reason: str = Field(min_length=1, max_length=500)
    duration_minutes: Optional[int] = Field(default=None, ge=1, le=480, description="Defaults to 60 minutes")
    permissions: List[ImpersonationPermission] = Field(min_length=1)


class ImpersonationEnd(BaseModel):
    reason: Optional[str] = Field(default=None, max_length=500)


class ImpersonationSessionRead(BaseModel):
    """Schema for reading an impersonation session from API.

    The session token is only returned once, when the session starts.
    """

    model_config = ConfigDict(from_attributes=True)

    id: str
    admin_id: str
    admin_email: str
    admin_name: str
    client_id: str
    client_name: str
    client_email: str
    impersonated_user_id: str
    impersonated_user_email: str
    impersonated_user_name: str
    reason: str
    permissions: List[str]
    status: str
    duration_minutes: int
    termination_reason: Optional[str] = None
    ip_address: Optional[str] = None
    started_at: datetime
    expires_at: datetime
    ended_at: Optional[datetime] = None


class ImpersonationStartResponse(BaseModel):
    session: ImpersonationSessionRead
    access_token: str
    expires_at: datetime
    permissions: List[str]
    warnings: List[str] = Field(default_factory=list)


class ImpersonationStatusRead(BaseModel):
    """Whether a token belongs to a live session, and how long it has left."""

    is_impersonating: bool
    session: Optional[ImpersonationSessionRead] = None
    time_remaining_minutes: int = 0


class ImpersonationHistorySummary(BaseModel):
    total_sessions: int
    active_sessions: int
    expired_sessions: int
    terminated_sessions: int
    unique_admins: int
    unique_clients: int
    average_duration_minutes: int = Field(description="Mean length of sessions that have ended")


class ImpersonationHistory(BaseModel):
    sessions: List[ImpersonationSessionRead]
    pagination: Pagination
    summary: ImpersonationHistorySummary


class ImpersonationCleanupResult(BaseModel):
    expired_count: int
