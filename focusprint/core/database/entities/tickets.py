"""
Support ticket entity models.

Tickets carry their SLA deadline and the response and resolution timings
computed by the ticket service. Comments are stored in their own table.
"""

from datetime import datetime
from typing import List, Optional

from sqlmodel import JSON, Field

from ..base import Base, new_id, utc_now


class Ticket(Base, table=True):
    """Entity for support tickets.

    Table: tickets
    """

    __tablename__ = "tickets"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    sequence: int = Field(unique=True, index=True)
    ticket_number: str = Field(max_length=16, unique=True, index=True)

    # Requester
    client_id: str = Field(foreign_key="clients.id", max_length=64, index=True)
    client_name: Optional[str] = Field(default=None, max_length=100)
    client_plan: str = Field(default="free", max_length=32, index=True)
    requester_email: Optional[str] = Field(default=None, max_length=255)
    requester_name: Optional[str] = Field(default=None, max_length=255)

    # Content
    subject: str = Field(max_length=200)
    description: str
    category: str = Field(default="general", max_length=32, index=True)
    priority: str = Field(default="medium", max_length=16, index=True)
    status: str = Field(default="open", max_length=32, index=True)
    tags: List[str] = Field(default_factory=list, sa_type=JSON)

    # Assignment
    assigned_to: Optional[str] = Field(default=None, max_length=64, index=True)
    assigned_to_name: Optional[str] = Field(default=None, max_length=255)
    assigned_at: Optional[datetime] = Field(default=None)

    # SLA tracking
    sla_due_at: Optional[datetime] = Field(default=None)
    first_response_at: Optional[datetime] = Field(default=None)
    first_response_time_minutes: Optional[int] = Field(default=None)
    resolved_at: Optional[datetime] = Field(default=None)
    resolution_summary: Optional[str] = Field(default=None)
    resolution_time_minutes: Optional[int] = Field(default=None)
    closed_at: Optional[datetime] = Field(default=None)

    created_at: datetime = Field(default_factory=utc_now, index=True)
    updated_at: datetime = Field(default_factory=utc_now)

    def __repr__(self) -> str:
        return f"Ticket(number={self.ticket_number}, status={self.status}, priority={self.priority})"


class TicketComment(Base, table=True):
    """Entity for ticket comments.

    Table: ticket_comments
    """

    __tablename__ = "ticket_comments"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    ticket_id: str = Field(foreign_key="tickets.id", max_length=64, index=True)
    author_id: Optional[str] = Field(default=None, max_length=64)
    author_name: Optional[str] = Field(default=None, max_length=255)
    author_type: str = Field(default="admin", max_length=16)
    content: str
    is_internal: bool = Field(default=False)
    created_at: datetime = Field(default_factory=utc_now)
