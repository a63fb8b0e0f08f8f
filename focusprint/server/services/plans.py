"""Subscription plan management service."""

from __future__ import annotations

from typing import List, Optional

from sqlmodel.ext.asyncio.session import AsyncSession

from focusprint.core.database.entities.admin_profiles import AdminProfile
from focusprint.core.database.entities.plans import Plan
from focusprint.core.database.repositories.licenses import LicenseRepository
from focusprint.core.database.repositories.plans import PlanRepository
from focusprint.core.errors import ConflictError, NotFoundError, OperationNotAllowedError, ValidationFailedError
from focusprint.core.logging_config import get_logger
from focusprint.core.models.domain.enums import AuditAction, ResourceType
from focusprint.core.models.io.plans import PlanCreate, PlanUpdate

from .audit import AuditService, diff_changes

logger = get_logger(__name__)


def _check_promo_window(plan_data: dict) -> None:
    start, end = plan_data.get("promo_start_date"), plan_data.get("promo_end_date")
    if start and end and end <= start:
        raise ValidationFailedError("Invalid promotional window: end date must be after start date")


class PlanService:
    def __init__(self, session: AsyncSession, audit: AuditService) -> None:
        self.repo = PlanRepository(session)
        self.licenses = LicenseRepository(session)
        self.audit = audit

    async def list_plans(self, is_active: Optional[bool] = None) -> List[Plan]:
        return await self.repo.list(filters={"is_active": is_active})

    async def get_plan(self, plan_id: str) -> Plan:
        plan = await self.repo.get_by_id(plan_id)
        if not plan:
            raise NotFoundError("Plan")
        return plan

    async def get_plan_by_code(self, code: str) -> Plan:
        plan = await self.repo.get_by_code(code)
        if not plan:
            raise NotFoundError("Plan")
        return plan

    async def create_plan(self, actor: AdminProfile, data: PlanCreate) -> Plan:
        if await self.repo.get_by_code(data.code):
            raise ConflictError(f"Plan with code '{data.code}' already exists")
        values = data.model_dump(mode="python")
        _check_promo_window(values)
        values["interval"] = data.interval.value
        plan = await self.repo.create(Plan(**values))
        logger.info(f"Plan {plan.code} created")

        await self.audit.record(
            actor,
            AuditAction.plan_created,
            ResourceType.plan,
            resource_id=plan.id,
            resource_name=plan.name,
            description=f"Created plan {plan.code}",
            context={"price": plan.price, "currency": plan.currency},
        )
        return plan

    async def update_plan(self, actor: AdminProfile, plan_id: str, data: PlanUpdate) -> Plan:
        plan = await self.get_plan(plan_id)
        updates = data.model_dump(exclude_unset=True)
        if not updates:
            raise ValidationFailedError("At least one field must be provided for update")
        if updates.get("interval") is not None:
            updates["interval"] = data.interval.value
        _check_promo_window({**plan.model_dump(), **updates})

        changes = diff_changes(plan.model_dump(), updates)
        if not changes:
            return plan
        for key, value in updates.items():
            setattr(plan, key, value)
        plan.version += 1
        plan = await self.repo.update(plan)

        await self.audit.record(
            actor,
            AuditAction.plan_updated,
            ResourceType.plan,
            resource_id=plan.id,
            resource_name=plan.name,
            description=f"Updated plan {plan.code} to version {plan.version}",
            changes=changes,
        )
        return plan

    async def set_active(self, actor: AdminProfile, plan_id: str, is_active: bool) -> Plan:
        plan = await self.get_plan(plan_id)
        if plan.is_active == is_active:
            return plan
        plan.is_active = is_active
        plan.version += 1
        plan = await self.repo.update(plan)
        await self.audit.record(
            actor,
            AuditAction.plan_activated if is_active else AuditAction.plan_deactivated,
            ResourceType.plan,
            resource_id=plan.id,
            resource_name=plan.name,
            changes=[{"field": "is_active", "old_value": not is_active, "new_value": is_active}],
        )
        return plan

    async def delete_plan(self, actor: AdminProfile, plan_id: str) -> None:
        plan = await self.get_plan(plan_id)
        if await self.licenses.count(filters={"plan_id": plan_id}):
            raise OperationNotAllowedError("Cannot delete a plan that is referenced by licenses; deactivate it instead")
        await self.repo.delete(plan.id)
        await self.audit.record(
            actor,
            AuditAction.plan_deleted,
            ResourceType.plan,
            resource_id=plan.id,
            resource_name=plan.name,
            description=f"Deleted plan {plan.code}",
        )
