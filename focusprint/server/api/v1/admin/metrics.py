"""
API endpoints for platform metrics and the admin dashboard.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from focusprint.core.database.entities.admin_profiles import AdminProfile
from focusprint.core.models.domain.enums import AdminPermission
from focusprint.core.models.io.metrics import AdminDashboard, ClientMetrics, PlatformMetrics
from focusprint.server.services.deps import MetricsServiceDep, require_permission

router = APIRouter(tags=["metrics"])

view_metrics = require_permission(AdminPermission.view_metrics)


@router.get(
    "/metrics",
    response_model=PlatformMetrics,
    summary="Platform Metrics",
    description="Client, license and recurring revenue totals with their distributions and monthly growth.",
)
async def platform_metrics(service: MetricsServiceDep, _: AdminProfile = Depends(view_metrics)) -> PlatformMetrics:
    return await service.platform_metrics()


@router.get(
    "/dashboard",
    response_model=AdminDashboard,
    summary="Admin Dashboard",
    description="KPIs, recent activity, support load and health indicators.",
)
async def dashboard(service: MetricsServiceDep, _: AdminProfile = Depends(view_metrics)) -> AdminDashboard:
    return await service.dashboard()


@router.get(
    "/clients/{client_id}/metrics",
    response_model=ClientMetrics,
    summary="Client Metrics",
    description="Workspace usage of one client against its plan limits.",
    responses={404: {"description": "Client not found"}},
)
async def client_metrics(
    client_id: str,
    service: MetricsServiceDep,
    _: AdminProfile = Depends(require_permission(AdminPermission.view_clients)),
) -> ClientMetrics:
    return await service.client_metrics(client_id)
