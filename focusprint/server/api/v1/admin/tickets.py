"""
API endpoints for support tickets.

Reading tickets requires view_support_tickets; every change requires
manage_support_tickets.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from focusprint.core.database.entities.admin_profiles import AdminProfile
from focusprint.core.models.domain.enums import AdminPermission
from focusprint.core.models.io.tickets import (
    TicketAssign,
    TicketCommentCreate,
    TicketCommentRead,
    TicketCreate,
    TicketDetail,
    TicketListResponse,
    TicketRead,
    TicketStatusChange,
    TicketSummary,
    TicketUpdate,
)
from focusprint.server.services.deps import TicketServiceDep, require_permission

router = APIRouter(tags=["tickets"])

view_tickets = require_permission(AdminPermission.view_support_tickets)
manage_tickets = require_permission(AdminPermission.manage_support_tickets)


@router.get(
    "",
    response_model=TicketListResponse,
    summary="List Tickets",
    description="Filtered, paginated ticket listing with a summary of every matching ticket.",
)
async def list_tickets(
    service: TicketServiceDep,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    status_filter: Optional[List[str]] = Query(None, alias="status", description="Repeat to match several."),
    category: Optional[List[str]] = Query(None),
    priority: Optional[List[str]] = Query(None),
    assigned_to: Optional[str] = Query(None),
    client_id: Optional[str] = Query(None),
    plan_type: Optional[str] = Query(None),
    unassigned: bool = Query(False),
    sla_overdue: bool = Query(False, description="Open tickets past their SLA due time."),
    date_from: Optional[datetime] = Query(None),
    date_to: Optional[datetime] = Query(None),
    tags: Optional[List[str]] = Query(None, description="Tickets carrying any of these tags."),
    search: Optional[str] = Query(None, description="Matches ticket number, subject, description and requester."),
    _: AdminProfile = Depends(view_tickets),
) -> TicketListResponse:
    return await service.list_tickets(
        page=page,
        limit=limit,
        status=status_filter,
        category=category,
        priority=priority,
        assigned_to=assigned_to,
        client_id=client_id,
        plan_type=plan_type,
        unassigned=unassigned,
        sla_overdue=sla_overdue,
        date_from=date_from,
        date_to=date_to,
        tags=tags,
        search=search,
    )


@router.get("/summary", response_model=TicketSummary, summary="Ticket Summary")
async def ticket_summary(service: TicketServiceDep, _: AdminProfile = Depends(view_tickets)) -> TicketSummary:
    return await service.summary()


@router.post(
    "",
    response_model=TicketRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create Ticket",
    description="Open a ticket for a client. The SLA due time follows the client's plan.",
    responses={201: {"description": "Ticket created"}, 404: {"description": "Client not found"}},
)
async def create_ticket(
    data: TicketCreate,
    service: TicketServiceDep,
    admin: AdminProfile = Depends(manage_tickets),
) -> TicketRead:
    """
    Create a support ticket.

    - **subject**: 5 to 200 characters.
    - **description**: At least 10 characters.
    - **priority**: Derived from category and wording when omitted.
    """
    return TicketRead.model_validate(await service.create_ticket(admin, data))


@router.get(
    "/{ticket_id}",
    response_model=TicketDetail,
    summary="Get Ticket",
    description="A ticket with its comments, internal notes included.",
    responses={200: {"description": "Ticket found"}, 404: {"description": "Ticket not found"}},
)
async def get_ticket(ticket_id: str, service: TicketServiceDep, _: AdminProfile = Depends(view_tickets)) -> TicketDetail:
    ticket = await service.get_ticket(ticket_id)
    comments = await service.list_comments(ticket_id)
    return TicketDetail(
        ticket=TicketRead.model_validate(ticket),
        comments=[TicketCommentRead.model_validate(c) for c in comments],
    )


@router.patch("/{ticket_id}", response_model=TicketRead, summary="Update Ticket")
async def update_ticket(
    ticket_id: str,
    data: TicketUpdate,
    service: TicketServiceDep,
    admin: AdminProfile = Depends(manage_tickets),
) -> TicketRead:
    return TicketRead.model_validate(await service.update_ticket(admin, ticket_id, data))


@router.post(
    "/{ticket_id}/assign",
    response_model=TicketRead,
    summary="Assign Ticket",
    description="Assign a ticket to an active admin. Open tickets move to in_progress.",
)
async def assign_ticket(
    ticket_id: str,
    data: TicketAssign,
    service: TicketServiceDep,
    admin: AdminProfile = Depends(manage_tickets),
) -> TicketRead:
    return TicketRead.model_validate(await service.assign_ticket(admin, ticket_id, data.admin_id))


@router.post(
    "/{ticket_id}/status",
    response_model=TicketRead,
    summary="Change Ticket Status",
    description="Resolving records the resolution time; closing also fills the resolution time when missing.",
)
async def change_ticket_status(
    ticket_id: str,
    data: TicketStatusChange,
    service: TicketServiceDep,
    admin: AdminProfile = Depends(manage_tickets),
) -> TicketRead:
    return TicketRead.model_validate(await service.change_status(admin, ticket_id, data))


@router.post(
    "/{ticket_id}/comments",
    response_model=TicketCommentRead,
    status_code=status.HTTP_201_CREATED,
    summary="Add Ticket Comment",
    description="Reply to the client or add an internal note. The first reply sets the first response time.",
)
async def add_ticket_comment(
    ticket_id: str,
    data: TicketCommentCreate,
    service: TicketServiceDep,
    admin: AdminProfile = Depends(manage_tickets),
) -> TicketCommentRead:
    return TicketCommentRead.model_validate(await service.add_comment(admin, ticket_id, data))
