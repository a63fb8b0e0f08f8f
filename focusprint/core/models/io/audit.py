"""Audit log I/O models."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .common import Pagination


class AuditLogRead(BaseModel):
    """Schema for reading an audit log entry from API."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    admin_id: Optional[str] = None
    admin_email: Optional[str] = None
    admin_name: Optional[str] = None
    action: str
    resource_type: str
    resource_id: Optional[str] = None
    resource_name: Optional[str] = None
    description: Optional[str] = None
    changes: List[Dict[str, Any]] = Field(default_factory=list)
    context: Dict[str, Any] = Field(default_factory=dict)
    severity: str
    status: str
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    created_at: datetime


class AuditLogPage(BaseModel):
    logs: List[AuditLogRead]
    pagination: Pagination


class AuditStatistics(BaseModel):
    """Audit activity totals over the last ``period_days`` days."""

    period_days: int
    total_events: int
    by_action: Dict[str, int]
    by_severity: Dict[str, int]
    by_resource_type: Dict[str, int]
    by_admin: Dict[str, int]
