"""
API endpoints for the audit log.

Audit entries are append-only; these endpoints only read them.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query

from focusprint.core.database.entities.admin_profiles import AdminProfile
from focusprint.core.models.domain.enums import AdminPermission
from focusprint.core.models.io.audit import AuditLogPage, AuditStatistics
from focusprint.server.services.deps import AuditDep, require_permission

router = APIRouter(tags=["audit"])


@router.get(
    "/logs",
    response_model=AuditLogPage,
    summary="List Audit Logs",
    description="Search the audit log, newest entries first.",
    responses={200: {"description": "One page of audit entries"}, 403: {"description": "Missing audit_access"}},
)
async def list_audit_logs(
    audit: AuditDep,
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
    admin_id: Optional[str] = Query(None, description="Entries written by this admin."),
    action: Optional[str] = Query(None),
    resource_type: Optional[str] = Query(None),
    resource_id: Optional[str] = Query(None),
    severity: Optional[str] = Query(None),
    date_from: Optional[datetime] = Query(None, description="Inclusive lower bound on the entry time."),
    date_to: Optional[datetime] = Query(None, description="Inclusive upper bound on the entry time."),
    search: Optional[str] = Query(None, description="Matches description, resource name and admin email."),
    _: AdminProfile = Depends(require_permission(AdminPermission.audit_access)),
) -> AuditLogPage:
    return await audit.list_logs(
        page=page,
        limit=limit,
        admin_id=admin_id,
        action=action,
        resource_type=resource_type,
        resource_id=resource_id,
        severity=severity,
        date_from=date_from,
        date_to=date_to,
        search=search,
    )


@router.get(
    "/statistics",
    response_model=AuditStatistics,
    summary="Audit Statistics",
    description="Count audit entries by action, severity, resource type and admin over the last days.",
)
async def audit_statistics(
    audit: AuditDep,
    days: int = Query(30, ge=1, le=365),
    _: AdminProfile = Depends(require_permission(AdminPermission.audit_access)),
) -> AuditStatistics:
    return await audit.statistics(days)
