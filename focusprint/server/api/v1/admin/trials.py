"""
API endpoints for trial licenses.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from focusprint.core.database.entities.admin_profiles import AdminProfile
from focusprint.core.models.domain.enums import AdminPermission
from focusprint.core.models.io.licenses import LicenseRead, TrialExpirationResult, TrialOverview
from focusprint.server.services.deps import TrialServiceDep, require_permission

router = APIRouter(tags=["trials"])


@router.get(
    "",
    response_model=TrialOverview,
    summary="Trial Overview",
    description="Trial statistics and the trials ending within the next days.",
)
async def trial_overview(
    service: TrialServiceDep,
    days: Optional[int] = Query(None, ge=1, le=90, description="Window for expiring trials, defaults to 3 days."),
    _: AdminProfile = Depends(require_permission(AdminPermission.view_licenses)),
) -> TrialOverview:
    expiring = await service.get_trials_expiring_soon(days)
    return TrialOverview(
        stats=await service.get_trial_stats(),
        expiring_soon=[LicenseRead.model_validate(lic) for lic in expiring],
    )


@router.post(
    "/expire",
    response_model=TrialExpirationResult,
    summary="Expire Overdue Trials",
    description="Mark every trial license whose trial has ended as expired.",
    responses={200: {"description": "Expiration run finished; per-license failures are listed in errors"}},
)
async def expire_trials(
    service: TrialServiceDep,
    admin: AdminProfile = Depends(require_permission(AdminPermission.manage_licenses)),
) -> TrialExpirationResult:
    """
    Expire overdue trials.

    Failures on individual licenses do not stop the run; they are reported
    in `errors` while the other licenses are still expired.
    """
    return await service.expire_overdue_trials(admin)
