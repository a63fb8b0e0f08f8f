"""
License management service.

A license binds a client to a plan. Limits are copied from the plan when the
license is created or moved to another plan, so later plan edits do not
change existing licenses.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Optional

from sqlmodel.ext.asyncio.session import AsyncSession

from focusprint.core.database.base import utc_now
from focusprint.core.database.entities.admin_profiles import AdminProfile
from focusprint.core.database.entities.licenses import License
from focusprint.core.database.entities.plans import Plan
from focusprint.core.database.repositories.clients import ClientRepository
from focusprint.core.database.repositories.licenses import LicenseRepository
from focusprint.core.database.repositories.plans import PlanRepository
from focusprint.core.errors import NotFoundError, OperationNotAllowedError, ValidationFailedError
from focusprint.core.logging_config import get_logger
from focusprint.core.models.domain.enums import AuditAction, AuditSeverity, LicenseStatus, ResourceType
from focusprint.core.models.io.common import Pagination
from focusprint.core.models.io.licenses import (
    LicenseCreate,
    LicenseListResponse,
    LicenseRead,
    LicenseStats,
    LicenseUpdate,
)
from focusprint.server.core.config import settings

from .audit import AuditService, diff_changes

logger = get_logger(__name__)


def _plan_limits(plan: Plan) -> tuple[int, int]:
    limits = plan.limits or {}
    return int(limits.get("max_users", 5)), int(limits.get("max_projects", 3))


class LicenseService:
    def __init__(self, session: AsyncSession, audit: AuditService) -> None:
        self.repo = LicenseRepository(session)
        self.plans = PlanRepository(session)
        self.clients = ClientRepository(session)
        self.audit = audit

    async def get_license(self, license_id: str) -> License:
        license_ = await self.repo.get_by_id(license_id)
        if not license_:
            raise NotFoundError("License")
        return license_

    async def _get_plan(self, code: str) -> Plan:
        plan = await self.plans.get_by_code(code)
        if not plan:
            raise NotFoundError("Plan")
        return plan

    async def list_licenses(
        self,
        page: int = 1,
        limit: int = 20,
        status: Optional[str] = None,
        client_id: Optional[str] = None,
        plan_type: Optional[str] = None,
    ) -> LicenseListResponse:
        rows, total = await self.repo.page(
            page, limit, filters={"status": status, "client_id": client_id, "plan_type": plan_type}
        )
        return LicenseListResponse(
            licenses=[LicenseRead.model_validate(row) for row in rows],
            pagination=Pagination.build(page, limit, total),
        )

    async def create_license(self, actor: AdminProfile, data: LicenseCreate) -> License:
        if not await self.clients.get_by_id(data.client_id):
            raise NotFoundError("Client")
        plan = await self._get_plan(data.plan_code)
        max_users, max_projects = _plan_limits(plan)

        start = data.start_date or utc_now()
        trial_ends_at = None
        if data.status is LicenseStatus.trial:
            trial_days = plan.trial_days or settings.trials.default_trial_days
            trial_ends_at = start + timedelta(days=trial_days)
        if data.end_date and data.end_date <= start:
            raise ValidationFailedError("Invalid end date: must be after start date")

        license_ = await self.repo.create(
            License(
                client_id=data.client_id,
                plan_id=plan.id,
                plan_type=plan.code,
                status=data.status.value,
                start_date=start,
                end_date=data.end_date,
                trial_ends_at=trial_ends_at,
                max_users=max_users,
                max_projects=max_projects,
                license_metadata=dict(data.metadata),
            )
        )
        logger.info(f"License {license_.id} created for client {license_.client_id} on plan {plan.code}")
        await self.audit.record(
            actor,
            AuditAction.license_created,
            ResourceType.license,
            resource_id=license_.id,
            description=f"Created {license_.status} license on plan {plan.code}",
            context={"client_id": license_.client_id, "plan_type": license_.plan_type},
        )
        return license_

    async def update_license(self, actor: AdminProfile, license_id: str, data: LicenseUpdate) -> License:
        license_ = await self.get_license(license_id)
        updates = data.model_dump(exclude_unset=True)
        if not updates:
            raise ValidationFailedError("At least one field must be provided for update")
        if "metadata" in updates:
            updates["license_metadata"] = {**license_.license_metadata, **(updates.pop("metadata") or {})}

        before = license_.model_dump()
        changes = diff_changes(before, updates)
        for key, value in updates.items():
            setattr(license_, key, value.value if hasattr(value, "value") else value)
        license_ = await self.repo.update(license_)

        status_changed = before["status"] != license_.status
        await self.audit.record(
            actor,
            AuditAction.license_status_changed if status_changed else AuditAction.license_updated,
            ResourceType.license,
            resource_id=license_.id,
            changes=changes,
        )
        return license_

    async def delete_license(self, actor: AdminProfile, license_id: str) -> None:
        license_ = await self.get_license(license_id)
        await self.repo.delete(license_.id)
        await self.audit.record(
            actor,
            AuditAction.license_deleted,
            ResourceType.license,
            resource_id=license_id,
            context={"client_id": license_.client_id, "status": license_.status},
        )

    async def _change_status(
        self,
        actor: Optional[AdminProfile],
        license_: License,
        status: LicenseStatus,
        metadata: Optional[dict] = None,
        description: Optional[str] = None,
    ) -> License:
        previous = license_.status
        license_.status = status.value
        if metadata:
            license_.license_metadata = {**license_.license_metadata, **metadata}
        license_ = await self.repo.update(license_)
        await self.audit.record(
            actor,
            AuditAction.license_status_changed,
            ResourceType.license,
            resource_id=license_.id,
            description=description,
            changes=[{"field": "status", "old_value": previous, "new_value": status.value}],
            severity=AuditSeverity.high if status is LicenseStatus.suspended else None,
        )
        return license_

    async def suspend_license(self, actor: AdminProfile, license_id: str, reason: str) -> License:
        license_ = await self.get_license(license_id)
        if license_.status == LicenseStatus.suspended.value:
            raise OperationNotAllowedError("License is already suspended")
        metadata = {"suspended_at": utc_now().isoformat(), "suspended_by": actor.id, "suspension_reason": reason}
        return await self._change_status(actor, license_, LicenseStatus.suspended, metadata, reason)

    async def activate_license(self, actor: AdminProfile, license_id: str) -> License:
        license_ = await self.get_license(license_id)
        if license_.status == LicenseStatus.active.value:
            raise OperationNotAllowedError("License is already active")
        metadata = {"activated_at": utc_now().isoformat(), "activated_by": actor.id}
        return await self._change_status(actor, license_, LicenseStatus.active, metadata)

    async def extend_trial(self, actor: AdminProfile, license_id: str, days: int = 30) -> License:
        """Push the trial end ``days`` forward from the later of now and the current end."""
        license_ = await self.get_license(license_id)
        if license_.status != LicenseStatus.trial.value:
            raise OperationNotAllowedError("Only trial licenses can be extended")

        now = utc_now()
        previous = license_.trial_ends_at
        base = previous if previous and previous > now else now
        license_.trial_ends_at = base + timedelta(days=days)
        license_.license_metadata = {
            **license_.license_metadata,
            "trial_extended_at": now.isoformat(),
            "trial_extended_by": actor.id,
            "trial_extension_days": days,
        }
        license_ = await self.repo.update(license_)
        await self.audit.record(
            actor,
            AuditAction.license_updated,
            ResourceType.license,
            resource_id=license_.id,
            description=f"Trial extended by {days} days",
            changes=diff_changes({"trial_ends_at": previous}, {"trial_ends_at": license_.trial_ends_at}),
        )
        return license_

    async def change_plan(self, actor: AdminProfile, license_id: str, plan_code: str) -> License:
        license_ = await self.get_license(license_id)
        plan = await self._get_plan(plan_code)
        if not plan.is_active:
            raise OperationNotAllowedError("Cannot move a license to an inactive plan")

        before = {"plan_type": license_.plan_type, "max_users": license_.max_users, "max_projects": license_.max_projects}
        license_.plan_id = plan.id
        license_.plan_type = plan.code
        license_.max_users, license_.max_projects = _plan_limits(plan)
        license_ = await self.repo.update(license_)
        await self.audit.record(
            actor,
            AuditAction.license_plan_changed,
            ResourceType.license,
            resource_id=license_.id,
            changes=diff_changes(
                before,
                {"plan_type": license_.plan_type, "max_users": license_.max_users, "max_projects": license_.max_projects},
            ),
        )
        return license_

    async def stats(self) -> LicenseStats:
        by_status = await self.repo.count_by("status")
        return LicenseStats(
            total=sum(by_status.values()),
            by_status=by_status,
            by_plan_type=await self.repo.count_by("plan_type"),
        )
