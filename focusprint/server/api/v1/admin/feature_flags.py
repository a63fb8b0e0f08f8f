"""
API endpoints for feature flags.

Flags are managed per environment; every route requires the feature_flags
permission.
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from focusprint.core.database.entities.admin_profiles import AdminProfile
from focusprint.core.models.domain.enums import AdminPermission
from focusprint.core.models.io.feature_flags import (
    FeatureFlagBulkRequest,
    FeatureFlagBulkResult,
    FeatureFlagCreate,
    FeatureFlagDetail,
    FeatureFlagEvaluateRequest,
    FeatureFlagEvaluation,
    FeatureFlagHistoryRead,
    FeatureFlagListResponse,
    FeatureFlagOverrideCreate,
    FeatureFlagOverrideRead,
    FeatureFlagRead,
    FeatureFlagSummary,
    FeatureFlagToggle,
    FeatureFlagUpdate,
)
from focusprint.server.services.deps import FeatureFlagServiceDep, require_permission

router = APIRouter(tags=["feature-flags"])

flag_admin = require_permission(AdminPermission.feature_flags)


@router.get(
    "",
    response_model=FeatureFlagListResponse,
    summary="List Feature Flags",
    description="Paginated flag listing filtered by environment, status, category, enabled state or text.",
)
async def list_flags(
    service: FeatureFlagServiceDep,
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
    environment: Optional[str] = Query(None),
    status_filter: Optional[str] = Query(None, alias="status"),
    category: Optional[str] = Query(None),
    is_enabled: Optional[bool] = Query(None),
    search: Optional[str] = Query(None, description="Matches key, name and description."),
    _: AdminProfile = Depends(flag_admin),
) -> FeatureFlagListResponse:
    return await service.list_flags(
        page=page,
        limit=limit,
        environment=environment,
        status=status_filter,
        category=category,
        is_enabled=is_enabled,
        search=search,
    )


@router.post(
    "",
    response_model=FeatureFlagRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create Feature Flag",
    responses={
        201: {"description": "Flag created"},
        409: {"description": "Key already exists in this environment"},
    },
)
async def create_flag(
    data: FeatureFlagCreate,
    service: FeatureFlagServiceDep,
    admin: AdminProfile = Depends(flag_admin),
) -> FeatureFlagRead:
    """
    Create a feature flag.

    - **key**: Lowercase identifier, unique per environment.
    - **flag_type**: boolean, string, number, json or percentage.
    - **conditions**: Targeting rules checked in order during evaluation.
    - **rollout_percentage**: Share of clients that get the current value.
    """
    return FeatureFlagRead.model_validate(await service.create_flag(admin, data))


@router.get("/summary", response_model=FeatureFlagSummary, summary="Feature Flag Summary")
async def flag_summary(service: FeatureFlagServiceDep, _: AdminProfile = Depends(flag_admin)) -> FeatureFlagSummary:
    return await service.summary()


@router.post(
    "/evaluate",
    response_model=FeatureFlagEvaluation,
    summary="Evaluate Feature Flag",
    description="Resolve a flag's value for a client context and report why that value was chosen.",
)
async def evaluate_flag(
    data: FeatureFlagEvaluateRequest,
    service: FeatureFlagServiceDep,
    _: AdminProfile = Depends(flag_admin),
) -> FeatureFlagEvaluation:
    return await service.evaluate(data.key, data.environment.value, data.context)


@router.post(
    "/bulk",
    response_model=FeatureFlagBulkResult,
    summary="Bulk Flag Action",
    description="Enable, disable, archive or delete several flags. Unknown flags are reported as failures.",
)
async def bulk_flag_action(
    data: FeatureFlagBulkRequest,
    service: FeatureFlagServiceDep,
    admin: AdminProfile = Depends(flag_admin),
) -> FeatureFlagBulkResult:
    return await service.bulk_action(admin, data.action, data.flag_ids, data.reason)


@router.get(
    "/{flag_id}",
    response_model=FeatureFlagDetail,
    summary="Get Feature Flag",
    description="A flag with its client overrides and recent history.",
    responses={200: {"description": "Flag found"}, 404: {"description": "Feature flag not found"}},
)
async def get_flag(
    flag_id: str, service: FeatureFlagServiceDep, _: AdminProfile = Depends(flag_admin)
) -> FeatureFlagDetail:
    flag = await service.get_flag(flag_id)
    return FeatureFlagDetail(
        flag=FeatureFlagRead.model_validate(flag),
        overrides=[FeatureFlagOverrideRead.model_validate(o) for o in await service.list_overrides(flag_id)],
        history=[FeatureFlagHistoryRead.model_validate(h) for h in await service.get_history(flag_id, limit=20)],
    )


@router.patch("/{flag_id}", response_model=FeatureFlagRead, summary="Update Feature Flag")
async def update_flag(
    flag_id: str,
    data: FeatureFlagUpdate,
    service: FeatureFlagServiceDep,
    admin: AdminProfile = Depends(flag_admin),
) -> FeatureFlagRead:
    return FeatureFlagRead.model_validate(await service.update_flag(admin, flag_id, data))


@router.delete("/{flag_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete Feature Flag")
async def delete_flag(
    flag_id: str,
    service: FeatureFlagServiceDep,
    reason: Optional[str] = Query(None, max_length=500),
    admin: AdminProfile = Depends(flag_admin),
) -> None:
    await service.delete_flag(admin, flag_id, reason)


@router.post(
    "/{flag_id}/toggle",
    response_model=FeatureFlagRead,
    summary="Toggle Feature Flag",
    description="Set the enabled state, or flip it when `enabled` is omitted.",
)
async def toggle_flag(
    flag_id: str,
    service: FeatureFlagServiceDep,
    data: Optional[FeatureFlagToggle] = None,
    admin: AdminProfile = Depends(flag_admin),
) -> FeatureFlagRead:
    data = data or FeatureFlagToggle()
    return FeatureFlagRead.model_validate(await service.toggle_flag(admin, flag_id, data.enabled, data.reason))


@router.post("/{flag_id}/archive", response_model=FeatureFlagRead, summary="Archive Feature Flag")
async def archive_flag(
    flag_id: str,
    service: FeatureFlagServiceDep,
    reason: Optional[str] = Query(None, max_length=500),
    admin: AdminProfile = Depends(flag_admin),
) -> FeatureFlagRead:
    return FeatureFlagRead.model_validate(await service.archive_flag(admin, flag_id, reason))


@router.get("/{flag_id}/overrides", response_model=List[FeatureFlagOverrideRead], summary="List Overrides")
async def list_overrides(
    flag_id: str, service: FeatureFlagServiceDep, _: AdminProfile = Depends(flag_admin)
) -> List[FeatureFlagOverrideRead]:
    return [FeatureFlagOverrideRead.model_validate(o) for o in await service.list_overrides(flag_id)]


@router.post(
    "/{flag_id}/overrides",
    response_model=FeatureFlagOverrideRead,
    status_code=status.HTTP_201_CREATED,
    summary="Set Client Override",
    description="Force a flag value for one client, replacing any existing override.",
)
async def add_override(
    flag_id: str,
    data: FeatureFlagOverrideCreate,
    service: FeatureFlagServiceDep,
    admin: AdminProfile = Depends(flag_admin),
) -> FeatureFlagOverrideRead:
    return FeatureFlagOverrideRead.model_validate(await service.add_override(admin, flag_id, data))


@router.delete(
    "/{flag_id}/overrides/{client_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove Client Override",
)
async def remove_override(
    flag_id: str,
    client_id: str,
    service: FeatureFlagServiceDep,
    admin: AdminProfile = Depends(flag_admin),
) -> None:
    await service.remove_override(admin, flag_id, client_id)


@router.get("/{flag_id}/history", response_model=List[FeatureFlagHistoryRead], summary="Feature Flag History")
async def flag_history(
    flag_id: str,
    service: FeatureFlagServiceDep,
    limit: int = Query(50, ge=1, le=500),
    _: AdminProfile = Depends(flag_admin),
) -> List[FeatureFlagHistoryRead]:
    return [FeatureFlagHistoryRead.model_validate(h) for h in await service.get_history(flag_id, limit)]
