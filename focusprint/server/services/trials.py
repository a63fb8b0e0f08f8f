"""
Trial lifecycle service.

Trials end automatically: a sweep marks every trial license whose end date has
passed as expired and records why in the license metadata. One failing license
never stops the sweep.
"""

from __future__ import annotations

from datetime import timedelta
from typing import List, Optional

from sqlmodel.ext.asyncio.session import AsyncSession

from focusprint.core.database.base import utc_now
from focusprint.core.database.entities.admin_profiles import AdminProfile
from focusprint.core.database.entities.licenses import License
from focusprint.core.database.repositories.licenses import LicenseRepository
from focusprint.core.logging_config import get_logger
from focusprint.core.models.domain.enums import AuditAction, LicenseStatus, ResourceType
from focusprint.core.models.io.licenses import (
    ExpiredTrial,
    TrialExpirationFailure,
    TrialExpirationResult,
    TrialStats,
)
from focusprint.server.core.config import settings

from .audit import AuditService

logger = get_logger(__name__)


class TrialService:
    def __init__(self, session: AsyncSession, audit: AuditService) -> None:
        self.session = session
        self.repo = LicenseRepository(session)
        self.audit = audit

    async def expire_overdue_trials(self, actor: Optional[AdminProfile] = None) -> TrialExpirationResult:
        now = utc_now()
        overdue = await self.repo.list_trials_ending_before(now)
        expired: List[ExpiredTrial] = []
        errors: List[TrialExpirationFailure] = []

        snapshot = [(lic.id, lic.client_id, lic.trial_ends_at) for lic in overdue]
        for license_id, client_id, trial_end in snapshot:
            try:
                license_ = await self.repo.get_by_id(license_id)
                license_.status = LicenseStatus.expired.value
                license_.license_metadata = {
                    **license_.license_metadata,
                    "trial_expired_at": now.isoformat(),
                    "trial_expired_by": "system",
                    "trial_expiration_reason": "Trial period ended",
                    "trial_expiration_type": "automatic",
                    "original_trial_end": trial_end.isoformat() if trial_end else None,
                }
                await self.repo.update(license_)
            except Exception as e:
                await self.session.rollback()
                if actor is not None:
                    await self.session.refresh(actor)
                logger.error(f"Failed to expire trial license {license_id}: {e}")
                errors.append(TrialExpirationFailure(license_id=license_id, error=str(e)))
                continue
            expired.append(ExpiredTrial(license_id=license_id, client_id=client_id, trial_ends_at=trial_end))

        logger.info(f"Trial expiration sweep: {len(expired)} expired, {len(errors)} failed")
        if expired or errors:
            await self.audit.record(
                actor,
                AuditAction.license_status_changed,
                ResourceType.license,
                description=f"Expired {len(expired)} overdue trial licenses",
                context={
                    "expired_license_ids": [item.license_id for item in expired],
                    "failed_license_ids": [item.license_id for item in errors],
                },
                status="success" if not errors else "partial",
            )
        return TrialExpirationResult(expired_count=len(expired), expired_licenses=expired, errors=errors)

    async def get_trials_expiring_soon(self, days: Optional[int] = None) -> List[License]:
        days = days if days is not None else settings.trials.expiring_soon_days
        now = utc_now()
        return await self.repo.list_trials_ending_between(now, now + timedelta(days=days))

    async def get_trial_stats(self) -> TrialStats:
        """Trial counts and the trial-to-paid conversion rate.

        A license counts as an ever-trial license when it is on trial now or
        carries a trial end date.
        """
        active = await self.repo.count(filters={"status": LicenseStatus.trial.value})
        expired = await self.repo.count(filters={"status": LicenseStatus.expired.value})
        overdue = await self.repo.count(
            filters={"status": LicenseStatus.trial.value}, conditions=[License.trial_ends_at <= utc_now()]
        )
        total = await self.repo.count(conditions=[License.trial_ends_at.is_not(None)])
        converted = await self.repo.count(
            filters={"status": LicenseStatus.active.value}, conditions=[License.trial_ends_at.is_not(None)]
        )
        expiring_soon = len(await self.get_trials_expiring_soon())
        conversion_rate = round(converted / total * 100, 2) if total else 0.0
        return TrialStats(
            total=total,
            active=active,
            expired=expired,
            overdue=overdue,
            expiring_soon=expiring_soon,
            conversion_rate=conversion_rate,
        )
