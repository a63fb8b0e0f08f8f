"""
Audit log entity models.

Audit entries are append-only: services insert them after every mutation and
nothing updates or deletes them.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlmodel import JSON, Field

from ..base import Base, new_id, utc_now


class AuditLog(Base, table=True):
    """Entity for audit log entries.

    Table: audit_logs
    """

    __tablename__ = "audit_logs"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)

    # Actor
    admin_id: Optional[str] = Field(default=None, max_length=64, index=True)
    admin_email: Optional[str] = Field(default=None, max_length=255)
    admin_name: Optional[str] = Field(default=None, max_length=255)

    # What happened
    action: str = Field(max_length=64, index=True)
    resource_type: str = Field(max_length=32, index=True)
    resource_id: Optional[str] = Field(default=None, max_length=64, index=True)
    resource_name: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = Field(default=None)
    changes: List[Dict[str, Any]] = Field(default_factory=list, sa_type=JSON)
    context: Dict[str, Any] = Field(default_factory=dict, sa_type=JSON)
    severity: str = Field(default="low", max_length=16, index=True)
    status: str = Field(default="success", max_length=16)

    # Request information
    ip_address: Optional[str] = Field(default=None, max_length=64)
    user_agent: Optional[str] = Field(default=None, max_length=512)

    created_at: datetime = Field(default_factory=utc_now, index=True)

    def __repr__(self) -> str:
        return f"AuditLog(id={self.id}, action={self.action}, resource={self.resource_type}:{self.resource_id})"
