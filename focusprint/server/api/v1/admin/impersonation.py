"""
API endpoints for client impersonation sessions.

Starting, ending and checking sessions requires client_impersonation; reading
the full session history requires audit_access.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from focusprint.core.database.entities.admin_profiles import AdminProfile
from focusprint.core.models.domain.enums import AdminPermission
from focusprint.core.models.io.impersonation import (
    ImpersonationCleanupResult,
    ImpersonationEnd,
    ImpersonationHistory,
    ImpersonationSessionRead,
    ImpersonationStart,
    ImpersonationStartResponse,
    ImpersonationStatusRead,
)
from focusprint.server.services.deps import ImpersonationServiceDep, require_permission

router = APIRouter(tags=["impersonation"])

impersonate = require_permission(AdminPermission.client_impersonation)


@router.post(
    "/start",
    response_model=ImpersonationStartResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Start Impersonation",
    responses={
        201: {"description": "Session started; the access token is only returned here"},
        400: {"description": "Client or user inactive, or too many live sessions"},
        404: {"description": "Client or user not found"},
    },
)
async def start_impersonation(
    data: ImpersonationStart,
    service: ImpersonationServiceDep,
    admin: AdminProfile = Depends(impersonate),
) -> ImpersonationStartResponse:
    """
    Act as a client user for a limited time.

    - **reason**: Why the admin needs access; kept in the audit log.
    - **duration_minutes**: 1 to 480, defaults to 60.
    - **permissions**: At least one; full_access adds a warning to the response.
    """
    return await service.start(admin, data)


@router.get("/active", response_model=List[ImpersonationSessionRead], summary="My Active Sessions")
async def list_active_sessions(
    service: ImpersonationServiceDep,
    admin: AdminProfile = Depends(impersonate),
) -> List[ImpersonationSessionRead]:
    return [ImpersonationSessionRead.model_validate(s) for s in await service.list_active(admin)]


@router.get(
    "/status",
    response_model=ImpersonationStatusRead,
    summary="Session Status",
    description="Check whether an access token belongs to a live session.",
)
async def impersonation_status(
    service: ImpersonationServiceDep,
    token: str = Query(..., min_length=1),
    _: AdminProfile = Depends(impersonate),
) -> ImpersonationStatusRead:
    return await service.get_status(token)


@router.get(
    "/history",
    response_model=ImpersonationHistory,
    summary="Impersonation History",
    description="Every session, newest first, with a summary of all matching sessions.",
)
async def impersonation_history(
    service: ImpersonationServiceDep,
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=100),
    admin_id: Optional[str] = Query(None),
    client_id: Optional[str] = Query(None),
    user_id: Optional[str] = Query(None),
    status_filter: Optional[List[str]] = Query(None, alias="status", description="active, expired or terminated."),
    date_from: Optional[datetime] = Query(None),
    date_to: Optional[datetime] = Query(None),
    search: Optional[str] = Query(None, description="Matches admin email, client name, user email and reason."),
    _: AdminProfile = Depends(require_permission(AdminPermission.audit_access)),
) -> ImpersonationHistory:
    return await service.history(
        page=page,
        limit=limit,
        admin_id=admin_id,
        client_id=client_id,
        user_id=user_id,
        status=status_filter,
        date_from=date_from,
        date_to=date_to,
        search=search,
    )


@router.post("/cleanup", response_model=ImpersonationCleanupResult, summary="Expire Overdue Sessions")
async def cleanup_sessions(
    service: ImpersonationServiceDep,
    _: AdminProfile = Depends(impersonate),
) -> ImpersonationCleanupResult:
    return ImpersonationCleanupResult(expired_count=await service.cleanup_expired_sessions())


@router.get(
    "/{session_id}",
    response_model=ImpersonationSessionRead,
    summary="Get Session",
    responses={404: {"description": "Session not found"}},
)
async def get_session(
    session_id: str,
    service: ImpersonationServiceDep,
    _: AdminProfile = Depends(impersonate),
) -> ImpersonationSessionRead:
    return ImpersonationSessionRead.model_validate(await service.get_session(session_id))


@router.post(
    "/{session_id}/end",
    response_model=ImpersonationSessionRead,
    summary="End Impersonation",
    responses={
        200: {"description": "Session terminated"},
        400: {"description": "Session is not active"},
        403: {"description": "Session belongs to another admin"},
        404: {"description": "Session not found"},
    },
)
async def end_impersonation(
    session_id: str,
    service: ImpersonationServiceDep,
    data: Optional[ImpersonationEnd] = None,
    admin: AdminProfile = Depends(impersonate),
) -> ImpersonationSessionRead:
    reason = data.reason if data else None
    return ImpersonationSessionRead.model_validate(await service.end(admin, session_id, reason))
