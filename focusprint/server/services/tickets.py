"""
Support ticket service.

Tickets are numbered from a monotonically increasing sequence and get an SLA
deadline from the client's plan and the ticket priority. The service also
tracks the first response and resolution timings reported by the summary.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy import or_
from sqlmodel.ext.asyncio.session import AsyncSession

from focusprint.core.database.base import utc_now
from focusprint.core.database.entities.admin_profiles import AdminProfile
from focusprint.core.database.entities.tickets import Ticket, TicketComment
from focusprint.core.database.repositories.admin_profiles import AdminProfileRepository
from focusprint.core.database.repositories.clients import ClientRepository
from focusprint.core.database.repositories.tickets import TicketCommentRepository, TicketRepository
from focusprint.core.errors import NotFoundError, OperationNotAllowedError, ValidationFailedError
from focusprint.core.logging_config import get_logger
from focusprint.core.models.domain.enums import (
    AuditAction,
    ResourceType,
    TicketAuthorType,
    TicketCategory,
    TicketPriority,
    TicketStatus,
)
from focusprint.core.models.io.tickets import (
    TicketCommentCreate,
    TicketCreate,
    TicketListResponse,
    TicketPagination,
    TicketRead,
    TicketStatusChange,
    TicketSummary,
    TicketUpdate,
)

from .audit import AuditService, diff_changes

logger = get_logger(__name__)


@dataclass(frozen=True)
class SLAConfig:
    plan_type: str
    first_response_hours: int
    resolution_hours: Dict[TicketPriority, int]
    business_hours_only: bool
    escalation_hours: int

    def due_at(self, priority: TicketPriority | str, opened_at: datetime) -> datetime:
        return opened_at + timedelta(hours=self.resolution_hours[TicketPriority(priority)])


def _hours(low: int, medium: int, high: int, urgent: int, critical: int) -> Dict[TicketPriority, int]:
    return {
        TicketPriority.low: low,
        TicketPriority.medium: medium,
        TicketPriority.high: high,
        TicketPriority.urgent: urgent,
        TicketPriority.critical: critical,
    }


SLA_CONFIGS: Dict[str, SLAConfig] = {
    "FREE": SLAConfig("FREE", 48, _hours(120, 72, 48, 24, 12), business_hours_only=True, escalation_hours=72),
    "PRO": SLAConfig("PRO", 8, _hours(48, 24, 8, 4, 2), business_hours_only=False, escalation_hours=24),
    "BUSINESS": SLAConfig("BUSINESS", 2, _hours(24, 8, 4, 2, 1), business_hours_only=False, escalation_hours=8),
}

CLOSED_STATUSES = {TicketStatus.resolved.value, TicketStatus.closed.value, TicketStatus.cancelled.value}

CRITICAL_KEYWORDS = ("critical", "urgent", "down", "outage")
HIGH_KEYWORDS = ("cannot", "unable", "error", "broken")

CATEGORY_PRIORITY = {
    TicketCategory.security: TicketPriority.high,
    TicketCategory.billing: TicketPriority.medium,
    TicketCategory.technical: TicketPriority.medium,
    TicketCategory.feature_request: TicketPriority.low,
}


def sla_config_for(plan_type: Optional[str]) -> SLAConfig:
    """SLA of a plan; unknown plans get the FREE SLA."""
    return SLA_CONFIGS.get((plan_type or "").upper(), SLA_CONFIGS["FREE"])


def determine_priority(category: TicketCategory | str, subject: str, description: str) -> TicketPriority:
    text = f"{subject} {description}".lower()
    if any(keyword in text for keyword in CRITICAL_KEYWORDS):
        return TicketPriority.critical
    if any(keyword in text for keyword in HIGH_KEYWORDS):
        return TicketPriority.high
    try:
        return CATEGORY_PRIORITY.get(TicketCategory(category), TicketPriority.medium)
    except ValueError:
        return TicketPriority.medium


def format_ticket_number(sequence: int) -> str:
    return f"TKT-{sequence:06d}"


def _minutes_between(start: datetime, end: datetime) -> int:
    return int((end - start).total_seconds() // 60)


def _average(values: List[int]) -> Optional[float]:
    return round(sum(values) / len(values), 1) if values else None


def summarize(tickets: List[Ticket], now: Optional[datetime] = None) -> TicketSummary:
    now = now or utc_now()
    summary = TicketSummary(
        total=len(tickets),
        by_status={},
        by_priority={},
        by_category={},
        overdue=0,
        unassigned=0,
    )
    for ticket in tickets:
        summary.by_status[ticket.status] = summary.by_status.get(ticket.status, 0) + 1
        summary.by_priority[ticket.priority] = summary.by_priority.get(ticket.priority, 0) + 1
        summary.by_category[ticket.category] = summary.by_category.get(ticket.category, 0) + 1
        if ticket.sla_due_at and ticket.sla_due_at < now and ticket.status not in CLOSED_STATUSES:
            summary.overdue += 1
        if not ticket.assigned_to:
            summary.unassigned += 1
    summary.avg_first_response_minutes = _average(
        [t.first_response_time_minutes for t in tickets if t.first_response_time_minutes is not None]
    )
    summary.avg_resolution_minutes = _average(
        [t.resolution_time_minutes for t in tickets if t.resolution_time_minutes is not None]
    )
    return summary


class TicketService:
    def __init__(self, session: AsyncSession, audit: AuditService) -> None:
        self.repo = TicketRepository(session)
        self.comments = TicketCommentRepository(session)
        self.clients = ClientRepository(session)
        self.admins = AdminProfileRepository(session)
        self.audit = audit

    async def get_ticket(self, ticket_id: str) -> Ticket:
        ticket = await self.repo.get_by_id(ticket_id)
        if not ticket:
            raise NotFoundError("Ticket")
        return ticket

    async def list_comments(self, ticket_id: str) -> List[TicketComment]:
        await self.get_ticket(ticket_id)
        return await self.comments.list_by_ticket(ticket_id)

    async def create_ticket(self, actor: AdminProfile, data: TicketCreate) -> Ticket:
        client = await self.clients.get_by_id(data.client_id)
        if not client:
            raise NotFoundError("Client")

        priority = data.priority or determine_priority(data.category, data.subject, data.description)
        now = utc_now()
        sequence = await self.repo.next_sequence()
        ticket = await self.repo.create(
            Ticket(
                sequence=sequence,
                ticket_number=format_ticket_number(sequence),
                client_id=client.id,
                client_name=client.name,
                client_plan=client.plan_type,
                requester_email=data.requester_email or client.email,
                requester_name=data.requester_name,
                subject=data.subject,
                description=data.description,
                category=data.category.value,
                priority=TicketPriority(priority).value,
                tags=list(data.tags),
                sla_due_at=sla_config_for(client.plan_type).due_at(priority, now),
                created_at=now,
                updated_at=now,
            )
        )
        logger.info(f"Ticket {ticket.ticket_number} opened for client {client.id} with priority {ticket.priority}")
        await self.audit.record(
            actor,
            AuditAction.ticket_created,
            ResourceType.ticket,
            resource_id=ticket.id,
            resource_name=ticket.ticket_number,
            description=ticket.subject,
            context={"client_id": client.id, "priority": ticket.priority, "category": ticket.category},
        )
        return ticket

    async def list_tickets(
        self,
        page: int = 1,
        limit: int = 20,
        status: Optional[List[str]] = None,
        category: Optional[List[str]] = None,
        priority: Optional[List[str]] = None,
        assigned_to: Optional[str] = None,
        client_id: Optional[str] = None,
        plan_type: Optional[str] = None,
        unassigned: bool = False,
        sla_overdue: bool = False,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
        tags: Optional[List[str]] = None,
        search: Optional[str] = None,
    ) -> TicketListResponse:
        """Filtered, paginated ticket listing with a summary of every matching ticket."""
        now = utc_now()
        conditions: List[Any] = []
        if status:
            conditions.append(Ticket.status.in_(status))
        if category:
            conditions.append(Ticket.category.in_(category))
        if priority:
            conditions.append(Ticket.priority.in_(priority))
        if assigned_to:
            conditions.append(Ticket.assigned_to == assigned_to)
        if client_id:
            conditions.append(Ticket.client_id == client_id)
        if plan_type:
            conditions.append(Ticket.client_plan == plan_type)
        if unassigned:
            conditions.append(Ticket.assigned_to.is_(None))
        if sla_overdue:
            conditions.append(Ticket.sla_due_at < now)
            conditions.append(Ticket.status.not_in(CLOSED_STATUSES))
        if date_from:
            conditions.append(Ticket.created_at >= date_from)
        if date_to:
            conditions.append(Ticket.created_at <= date_to)
        if search:
            pattern = f"%{search}%"
            conditions.append(
                or_(
                    Ticket.subject.ilike(pattern),
                    Ticket.description.ilike(pattern),
                    Ticket.ticket_number.ilike(pattern),
                )
            )

        matches = await self.repo.list_where(conditions)
        if tags:
            wanted = set(tags)
            matches = [ticket for ticket in matches if wanted.intersection(ticket.tags or [])]

        total = len(matches)
        start = (page - 1) * limit
        filters = {
            "status": status,
            "category": category,
            "priority": priority,
            "assigned_to": assigned_to,
            "client_id": client_id,
            "plan_type": plan_type,
            "unassigned": unassigned,
            "sla_overdue": sla_overdue,
            "date_from": date_from.isoformat() if date_from else None,
            "date_to": date_to.isoformat() if date_to else None,
            "tags": tags,
            "search": search,
        }
        return TicketListResponse(
            items=[TicketRead.model_validate(ticket) for ticket in matches[start : start + limit]],
            pagination=TicketPagination(page=page, limit=limit, total=total, pages=-(-total // limit)),
            filters={key: value for key, value in filters.items() if value not in (None, False, [])},
            summary=summarize(matches, now),
        )

    async def update_ticket(self, actor: AdminProfile, ticket_id: str, data: TicketUpdate) -> Ticket:
        ticket = await self.get_ticket(ticket_id)
        updates = data.model_dump(mode="json", exclude_unset=True)
        if not updates:
            raise ValidationFailedError("At least one field must be provided for update")
        changes = diff_changes(ticket.model_dump(mode="json"), updates)
        for key, value in updates.items():
            setattr(ticket, key, value)
        if "priority" in updates and ticket.status not in CLOSED_STATUSES:
            ticket.sla_due_at = sla_config_for(ticket.client_plan).due_at(ticket.priority, ticket.created_at)
        ticket = await self.repo.update(ticket)
        await self.audit.record(
            actor,
            AuditAction.ticket_updated,
            ResourceType.ticket,
            resource_id=ticket.id,
            resource_name=ticket.ticket_number,
            changes=changes,
        )
        return ticket

    async def assign_ticket(self, actor: AdminProfile, ticket_id: str, admin_id: str) -> Ticket:
        ticket = await self.get_ticket(ticket_id)
        assignee = await self.admins.get_by_id(admin_id)
        if not assignee or not assignee.is_active:
            raise NotFoundError("Assignee")
        if ticket.status in CLOSED_STATUSES:
            raise OperationNotAllowedError(f"Cannot assign a {ticket.status} ticket")

        previous = ticket.assigned_to
        ticket.assigned_to = assignee.id
        ticket.assigned_to_name = assignee.full_name
        ticket.assigned_at = utc_now()
        if ticket.status == TicketStatus.open.value:
            ticket.status = TicketStatus.in_progress.value
        ticket = await self.repo.update(ticket)
        await self.audit.record(
            actor,
            AuditAction.ticket_assigned,
            ResourceType.ticket,
            resource_id=ticket.id,
            resource_name=ticket.ticket_number,
            changes=[{"field": "assigned_to", "old_value": previous, "new_value": assignee.id}],
        )
        return ticket

    async def change_status(self, actor: AdminProfile, ticket_id: str, data: TicketStatusChange) -> Ticket:
        ticket = await self.get_ticket(ticket_id)
        previous = ticket.status
        if previous == data.status.value:
            return ticket

        now = utc_now()
        ticket.status = data.status.value
        if data.status is TicketStatus.resolved:
            ticket.resolved_at = now
            ticket.resolution_summary = data.resolution_summary or ticket.resolution_summary
            ticket.resolution_time_minutes = _minutes_between(ticket.created_at, now)
        elif data.status is TicketStatus.closed:
            ticket.closed_at = now
            if ticket.resolved_at is None:
                ticket.resolved_at = now
                ticket.resolution_time_minutes = _minutes_between(ticket.created_at, now)
            if data.resolution_summary:
                ticket.resolution_summary = data.resolution_summary
        ticket = await self.repo.update(ticket)

        action = {
            TicketStatus.resolved: AuditAction.ticket_resolved,
            TicketStatus.closed: AuditAction.ticket_closed,
        }.get(data.status, AuditAction.ticket_status_changed)
        await self.audit.record(
            actor,
            action,
            ResourceType.ticket,
            resource_id=ticket.id,
            resource_name=ticket.ticket_number,
            description=data.resolution_summary,
            changes=[{"field": "status", "old_value": previous, "new_value": ticket.status}],
        )
        return ticket

    async def add_comment(self, actor: AdminProfile, ticket_id: str, data: TicketCommentCreate) -> TicketComment:
        """Add an admin comment. The first public admin comment counts as the first response."""
        ticket = await self.get_ticket(ticket_id)
        now = utc_now()
        comment = TicketComment(
            ticket_id=ticket.id,
            author_id=actor.id,
            author_name=actor.full_name,
            author_type=TicketAuthorType.admin.value,
            content=data.content,
            is_internal=data.is_internal,
            created_at=now,
        )
        if not data.is_internal and ticket.first_response_at is None:
            ticket.first_response_at = now
            ticket.first_response_time_minutes = _minutes_between(ticket.created_at, now)
        ticket.updated_at = now
        self.repo.session.add(ticket)
        comment = await self.comments.create(comment)

        await self.audit.record(
            actor,
            AuditAction.ticket_commented,
            ResourceType.ticket,
            resource_id=ticket.id,
            resource_name=ticket.ticket_number,
            context={"comment_id": comment.id, "is_internal": comment.is_internal},
        )
        return comment

    async def summary(self) -> TicketSummary:
        return summarize(await self.repo.list())
