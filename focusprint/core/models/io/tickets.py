"""
Support ticket I/O models for API requests and responses.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..domain.enums import TicketCategory, TicketPriority, TicketStatus
from .common import reject_null


class TicketRead(BaseModel):
    """Schema for reading a support ticket from API."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    ticket_number: str
    client_id: str
    client_name: Optional[str] = None
    client_plan: str
    requester_email: Optional[str] = None
    requester_name: Optional[str] = None
    subject: str
    description: str
    category: str
    priority: str
    status: str
    tags: List[str] = Field(default_factory=list)
    assigned_to: Optional[str] = None
    assigned_to_name: Optional[str] = None
    assigned_at: Optional[datetime] = None
    sla_due_at: Optional[datetime] = None
    first_response_at: Optional[datetime] = None
    first_response_time_minutes: Optional[int] = None
    resolved_at: Optional[datetime] = None
    resolution_summary: Optional[str] = None
    resolution_time_minutes: Optional[int] = None
    closed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class TicketCreate(BaseModel):
    """Schema for opening a ticket on behalf of a client."""

    client_id: str
    subject: str = Field(min_length=5, max_length=200)
    description: str = Field(min_length=10)
    category: TicketCategory = TicketCategory.general
    priority: Optional[TicketPriority] = Field(default=None, description="Derived from the content when omitted")
    requester_email: Optional[str] = None
    requester_name: Optional[str] = None
    tags: List[str] = Field(default_factory=list)


class TicketUpdate(BaseModel):
    subject: Optional[str] = Field(default=None, min_length=5, max_length=200)
    description: Optional[str] = None
    category: Optional[TicketCategory] = None
    priority: Optional[TicketPriority] = None
    tags: Optional[List[str]] = None

    @field_validator("subject", "description", "category", "priority", "tags")
    @classmethod
    def not_null(cls, value):
        return reject_null(value)


class TicketAssign(BaseModel):
    admin_id: str


class TicketStatusChange(BaseModel):
    status: TicketStatus
    resolution_summary: Optional[str] = Field(default=None, max_length=2000)


class TicketCommentCreate(BaseModel):
    content: str = Field(min_length=1)
    is_internal: bool = False


class TicketCommentRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    ticket_id: str
    author_id: Optional[str] = None
    author_name: Optional[str] = None
    author_type: str
    content: str
    is_internal: bool
    created_at: datetime


class TicketDetail(BaseModel):
    ticket: TicketRead
    comments: List[TicketCommentRead]


class TicketPagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class TicketSummary(BaseModel):
    """Aggregate view of a set of tickets."""

    total: int
    by_status: Dict[str, int]
    by_priority: Dict[str, int]
    by_category: Dict[str, int]
    overdue: int
    unassigned: int
    avg_first_response_minutes: Optional[float] = None
    avg_resolution_minutes: Optional[float] = None


class TicketListResponse(BaseModel):
    items: List[TicketRead]
    pagination: TicketPagination
    filters: Dict[str, Any]
    summary: TicketSummary
