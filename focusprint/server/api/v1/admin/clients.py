"""
API endpoints for managing client organisations and their users.
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from focusprint.core.database.entities.admin_profiles import AdminProfile
from focusprint.core.models.domain.enums import AdminPermission
from focusprint.core.models.io.clients import (
    ClientCreate,
    ClientListResponse,
    ClientRead,
    ClientStatusChange,
    ClientUpdate,
    ClientUserCreate,
    ClientUserRead,
)
from focusprint.server.services.deps import ClientServiceDep, require_permission

router = APIRouter(tags=["clients"])


@router.get(
    "",
    response_model=ClientListResponse,
    summary="List Clients",
    description="Paginated client listing with status, plan and free-text filters.",
    responses={200: {"description": "One page of clients"}, 403: {"description": "Missing view_clients"}},
)
async def list_clients(
    service: ClientServiceDep,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status_filter: Optional[str] = Query(None, alias="status", description="active, inactive or suspended."),
    plan_type: Optional[str] = Query(None, description="free, pro or business."),
    search: Optional[str] = Query(None, description="Matches client name or email."),
    _: AdminProfile = Depends(require_permission(AdminPermission.view_clients)),
) -> ClientListResponse:
    return await service.list_clients(page=page, limit=limit, status=status_filter, plan_type=plan_type, search=search)


@router.post(
    "",
    response_model=ClientRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create Client",
    description="Create a client organisation. Usage limits are taken from the plan type.",
    responses={
        201: {"description": "Client created"},
        400: {"description": "Invalid client data"},
        409: {"description": "Email already exists"},
    },
)
async def create_client(
    data: ClientCreate,
    service: ClientServiceDep,
    admin: AdminProfile = Depends(require_permission(AdminPermission.manage_clients)),
) -> ClientRead:
    """
    Create a client.

    - **name**: Organisation name.
    - **email**: Unique contact email.
    - **plan_type**: free (5 users / 3 projects), pro (15 / 10) or business (50 / 50).
    """
    return ClientRead.model_validate(await service.create_client(admin, data))


@router.get(
    "/{client_id}",
    response_model=ClientRead,
    summary="Get Client",
    responses={200: {"description": "Client found"}, 404: {"description": "Client not found"}},
)
async def get_client(
    client_id: str,
    service: ClientServiceDep,
    _: AdminProfile = Depends(require_permission(AdminPermission.view_clients)),
) -> ClientRead:
    return ClientRead.model_validate(await service.get_client(client_id))


@router.patch(
    "/{client_id}",
    response_model=ClientRead,
    summary="Update Client",
    description="Partially update a client. Changing the plan type re-applies the plan's limits.",
    responses={
        200: {"description": "Client updated"},
        400: {"description": "No field provided"},
        404: {"description": "Client not found"},
        409: {"description": "Email already exists"},
    },
)
async def update_client(
    client_id: str,
    data: ClientUpdate,
    service: ClientServiceDep,
    admin: AdminProfile = Depends(require_permission(AdminPermission.manage_clients)),
) -> ClientRead:
    return ClientRead.model_validate(await service.update_client(admin, client_id, data))


@router.delete(
    "/{client_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Client",
    description="Delete a client with its users and inactive licenses.",
    responses={
        204: {"description": "Client deleted"},
        400: {"description": "Client still has active licenses"},
        404: {"description": "Client not found"},
    },
)
async def delete_client(
    client_id: str,
    service: ClientServiceDep,
    admin: AdminProfile = Depends(require_permission(AdminPermission.delete_clients)),
) -> None:
    await service.delete_client(admin, client_id)


@router.post(
    "/{client_id}/suspend",
    response_model=ClientRead,
    summary="Suspend Client",
    responses={200: {"description": "Client suspended"}, 400: {"description": "Client is already suspended"}},
)
async def suspend_client(
    client_id: str,
    service: ClientServiceDep,
    data: Optional[ClientStatusChange] = None,
    admin: AdminProfile = Depends(require_permission(AdminPermission.suspend_clients)),
) -> ClientRead:
    reason = data.reason if data else None
    return ClientRead.model_validate(await service.suspend_client(admin, client_id, reason))


@router.post(
    "/{client_id}/reactivate",
    response_model=ClientRead,
    summary="Reactivate Client",
    responses={200: {"description": "Client reactivated"}, 400: {"description": "Client is already active"}},
)
async def reactivate_client(
    client_id: str,
    service: ClientServiceDep,
    data: Optional[ClientStatusChange] = None,
    admin: AdminProfile = Depends(require_permission(AdminPermission.suspend_clients)),
) -> ClientRead:
    reason = data.reason if data else None
    return ClientRead.model_validate(await service.reactivate_client(admin, client_id, reason))


@router.get(
    "/{client_id}/users",
    response_model=List[ClientUserRead],
    summary="List Client Users",
    responses={200: {"description": "Users of the client"}, 404: {"description": "Client not found"}},
)
async def list_client_users(
    client_id: str,
    service: ClientServiceDep,
    _: AdminProfile = Depends(require_permission(AdminPermission.view_clients)),
) -> List[ClientUserRead]:
    return [ClientUserRead.model_validate(u) for u in await service.list_users(client_id)]


@router.post(
    "/{client_id}/users",
    response_model=ClientUserRead,
    status_code=status.HTTP_201_CREATED,
    summary="Add Client User",
    description="Add a user to a client, within the client's user limit.",
    responses={
        201: {"description": "User created"},
        400: {"description": "User limit reached"},
        404: {"description": "Client not found"},
        409: {"description": "Email already exists"},
    },
)
async def create_client_user(
    client_id: str,
    data: ClientUserCreate,
    service: ClientServiceDep,
    admin: AdminProfile = Depends(require_permission(AdminPermission.manage_clients)),
) -> ClientUserRead:
    return ClientUserRead.model_validate(await service.create_user(admin, client_id, data))
