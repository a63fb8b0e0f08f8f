"""
Client impersonation session entity models.

A session lets a platform admin act as one client user for a limited time.
Sessions keep copies of the admin, client and user names so the history stays
readable after any of them is deleted.
"""

from datetime import datetime
from typing import List, Optional

from sqlmodel import JSON, Field

from ..base import Base, new_id, utc_now


class ImpersonationSession(Base, table=True):
    """Entity for client impersonation sessions.

    Table: impersonation_sessions
    """

    __tablename__ = "impersonation_sessions"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    session_token: str = Field(max_length=128, unique=True, index=True)

    # Impersonating admin
    admin_id: str = Field(max_length=64, index=True)
    admin_email: str = Field(max_length=255)
    admin_name: str = Field(max_length=255)

    # Impersonated client user
    client_id: str = Field(max_length=64, index=True)
    client_name: str = Field(max_length=100)
    client_email: str = Field(max_length=255)
    impersonated_user_id: str = Field(max_length=64, index=True)
    impersonated_user_email: str = Field(max_length=255)
    impersonated_user_name: str = Field(max_length=255)

    reason: str = Field(max_length=500)
    permissions: List[str] = Field(default_factory=list, sa_type=JSON)
    status: str = Field(default="active", max_length=16, index=True)
    duration_minutes: int = Field(default=60)
    termination_reason: Optional[str] = Field(default=None, max_length=500)

    ip_address: Optional[str] = Field(default=None, max_length=64)
    user_agent: Optional[str] = Field(default=None, max_length=500)

    started_at: datetime = Field(default_factory=utc_now, index=True)
    expires_at: datetime
    ended_at: Optional[datetime] = Field(default=None)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    def __repr__(self) -> str:
        return (
            f"ImpersonationSession(admin={self.admin_email}, user={self.impersonated_user_email}, status={self.status})"
        )
