"""
Feature flag service.

Flags are managed per environment and evaluated against a client context.
Every change is recorded in the flag's history alongside the audit log.

Evaluation order:
1. Unknown flag -> ``flag_not_found``.
2. Disabled or not active flag -> ``flag_disabled`` with the default value.
3. Unexpired client override -> ``client_override`` with the override value.
4. First matching condition -> ``condition_match`` with the current value.
5. Rollout below 100% and the context's bucket above it -> ``rollout_percentage``
   with the default value.
6. Otherwise ``default_value`` with the current value.
"""

from __future__ import annotations

import zlib
from typing import Any, Dict, List, Optional

from sqlmodel.ext.asyncio.session import AsyncSession

from focusprint.core.database.base import utc_now
from focusprint.core.database.entities.admin_profiles import AdminProfile
from focusprint.core.database.entities.feature_flags import FeatureFlag, FeatureFlagHistory, FeatureFlagOverride
from focusprint.core.database.repositories.feature_flags import (
    FeatureFlagHistoryRepository,
    FeatureFlagOverrideRepository,
    FeatureFlagRepository,
)
from focusprint.core.errors import ConflictError, NotFoundError
from focusprint.core.logging_config import get_logger
from focusprint.core.models.domain.enums import (
    AuditAction,
    ConditionOperator,
    EvaluationReason,
    FeatureFlagBulkAction,
    FeatureFlagStatus,
    ResourceType,
)
from focusprint.core.models.io.common import Pagination
from focusprint.core.models.io.feature_flags import (
    EvaluationContext,
    FeatureFlagBulkFailure,
    FeatureFlagBulkResult,
    FeatureFlagCreate,
    FeatureFlagEvaluation,
    FeatureFlagListResponse,
    FeatureFlagOverrideCreate,
    FeatureFlagRead,
    FeatureFlagSummary,
    FeatureFlagUpdate,
)

from .audit import AuditService, diff_changes

logger = get_logger(__name__)


def rollout_bucket(flag_key: str, identifier: str) -> int:
    """Stable bucket in [0, 100] for a flag and a client or user."""
    return zlib.crc32(f"{flag_key}{identifier}".encode("utf-8")) % 101


def _context_value(context: EvaluationContext, field: str) -> Any:
    if field in ("client_id", "user_id", "plan_type"):
        return getattr(context, field)
    return context.attributes.get(field)


def _lower(value: Any) -> Any:
    return value.lower() if isinstance(value, str) else value


def condition_matches(condition: Dict[str, Any], context: EvaluationContext) -> bool:
    """Compare one context field with a condition. String comparisons ignore case."""
    try:
        operator = ConditionOperator(condition.get("operator"))
    except ValueError:
        return False
    actual = _lower(_context_value(context, condition.get("field", "")))
    expected = condition.get("value")
    if actual is None:
        return operator in (ConditionOperator.not_equals, ConditionOperator.not_contains, ConditionOperator.not_in)

    if isinstance(expected, list):
        expected = [_lower(item) for item in expected]
    else:
        expected = _lower(expected)

    if operator is ConditionOperator.equals:
        return actual == expected
    if operator is ConditionOperator.not_equals:
        return actual != expected
    if operator is ConditionOperator.contains:
        return str(expected) in str(actual)
    if operator is ConditionOperator.not_contains:
        return str(expected) not in str(actual)
    if operator in (ConditionOperator.in_, ConditionOperator.not_in):
        members = expected if isinstance(expected, list) else [expected]
        return (actual in members) == (operator is ConditionOperator.in_)
    try:
        if operator is ConditionOperator.greater_than:
            return float(actual) > float(expected)
        return float(actual) < float(expected)
    except (TypeError, ValueError):
        return False


class FeatureFlagService:
    def __init__(self, session: AsyncSession, audit: AuditService) -> None:
        self.repo = FeatureFlagRepository(session)
        self.overrides = FeatureFlagOverrideRepository(session)
        self.history = FeatureFlagHistoryRepository(session)
        self.audit = audit

    async def get_flag(self, flag_id: str) -> FeatureFlag:
        flag = await self.repo.get_by_id(flag_id)
        if not flag:
            raise NotFoundError("Feature flag")
        return flag

    async def list_flags(
        self,
        page: int = 1,
        limit: int = 50,
        environment: Optional[str] = None,
        status: Optional[str] = None,
        category: Optional[str] = None,
        is_enabled: Optional[bool] = None,
        search: Optional[str] = None,
    ) -> FeatureFlagListResponse:
        conditions = []
        if search:
            pattern = f"%{search}%"
            conditions.append(FeatureFlag.key.ilike(pattern) | FeatureFlag.name.ilike(pattern))
        rows, total = await self.repo.page(
            page,
            limit,
            filters={"environment": environment, "status": status, "category": category, "is_enabled": is_enabled},
            conditions=conditions,
        )
        return FeatureFlagListResponse(
            flags=[FeatureFlagRead.model_validate(row) for row in rows],
            pagination=Pagination.build(page, limit, total),
        )

    async def _record_history(
        self, flag: FeatureFlag, action: str, changes: Dict[str, Any], actor: AdminProfile, reason: Optional[str]
    ) -> None:
        await self.history.add(
            FeatureFlagHistory(flag_id=flag.id, action=action, changes=changes, changed_by=actor.id, reason=reason)
        )

    async def create_flag(self, actor: AdminProfile, data: FeatureFlagCreate) -> FeatureFlag:
        if await self.repo.get_by_key(data.key, data.environment.value):
            raise ConflictError(f"Feature flag '{data.key}' already exists in {data.environment.value}")

        values = data.model_dump(mode="json")
        flag = FeatureFlag(**values, created_by=actor.id, updated_by=actor.id)
        flag = await self.repo.create(flag)
        await self._record_history(flag, "created", values, actor, None)
        await self.repo.session.commit()
        logger.info(f"Feature flag {flag.key} created in {flag.environment}")

        await self.audit.record(
            actor,
            AuditAction.feature_flag_created,
            ResourceType.feature_flag,
            resource_id=flag.id,
            resource_name=flag.key,
            context={"environment": flag.environment, "is_enabled": flag.is_enabled},
        )
        return flag

    async def update_flag(self, actor: AdminProfile, flag_id: str, data: FeatureFlagUpdate) -> FeatureFlag:
        flag = await self.get_flag(flag_id)
        updates = data.model_dump(mode="json", exclude_unset=True)
        reason = updates.pop("reason", None)
        changes = diff_changes(flag.model_dump(mode="json"), updates)
        if not changes:
            return flag

        for key, value in updates.items():
            setattr(flag, key, value)
        flag.updated_by = actor.id
        await self._record_history(flag, "updated", {c["field"]: c["new_value"] for c in changes}, actor, reason)
        flag = await self.repo.update(flag)

        await self.audit.record(
            actor,
            AuditAction.feature_flag_updated,
            ResourceType.feature_flag,
            resource_id=flag.id,
            resource_name=flag.key,
            description=reason,
            changes=changes,
        )
        return flag

    async def toggle_flag(
        self, actor: AdminProfile, flag_id: str, enabled: Optional[bool] = None, reason: Optional[str] = None
    ) -> FeatureFlag:
        flag = await self.get_flag(flag_id)
        target = (not flag.is_enabled) if enabled is None else enabled
        if flag.is_enabled == target:
            return flag
        flag.is_enabled = target
        flag.updated_by = actor.id
        await self._record_history(flag, "enabled" if target else "disabled", {"is_enabled": target}, actor, reason)
        flag = await self.repo.update(flag)

        await self.audit.record(
            actor,
            AuditAction.feature_flag_enabled if target else AuditAction.feature_flag_disabled,
            ResourceType.feature_flag,
            resource_id=flag.id,
            resource_name=flag.key,
            description=reason,
            changes=[{"field": "is_enabled", "old_value": not target, "new_value": target}],
        )
        return flag

    async def archive_flag(self, actor: AdminProfile, flag_id: str, reason: Optional[str] = None) -> FeatureFlag:
        flag = await self.get_flag(flag_id)
        flag.status = FeatureFlagStatus.archived.value
        flag.is_enabled = False
        flag.updated_by = actor.id
        await self._record_history(flag, "archived", {"status": flag.status, "is_enabled": False}, actor, reason)
        flag = await self.repo.update(flag)
        await self.audit.record(
            actor,
            AuditAction.feature_flag_archived,
            ResourceType.feature_flag,
            resource_id=flag.id,
            resource_name=flag.key,
            description=reason,
        )
        return flag

    async def delete_flag(self, actor: AdminProfile, flag_id: str, reason: Optional[str] = None) -> None:
        flag = await self.get_flag(flag_id)
        for override in await self.overrides.list_by_flag(flag.id):
            await self.overrides.delete(override.id)
        await self.repo.delete(flag.id)
        await self.audit.record(
            actor,
            AuditAction.feature_flag_deleted,
            ResourceType.feature_flag,
            resource_id=flag_id,
            resource_name=flag.key,
            description=reason,
            context={"environment": flag.environment},
        )

    async def bulk_action(
        self, actor: AdminProfile, action: FeatureFlagBulkAction, flag_ids: List[str], reason: Optional[str] = None
    ) -> FeatureFlagBulkResult:
        successful: List[str] = []
        failed: List[FeatureFlagBulkFailure] = []
        for flag_id in flag_ids:
            try:
                if action is FeatureFlagBulkAction.enable:
                    await self.toggle_flag(actor, flag_id, True, reason)
                elif action is FeatureFlagBulkAction.disable:
                    await self.toggle_flag(actor, flag_id, False, reason)
                elif action is FeatureFlagBulkAction.archive:
                    await self.archive_flag(actor, flag_id, reason)
                else:
                    await self.delete_flag(actor, flag_id, reason)
            except NotFoundError as e:
                failed.append(FeatureFlagBulkFailure(flag_id=flag_id, error=e.message))
                continue
            successful.append(flag_id)
        return FeatureFlagBulkResult(
            action=action.value, processed=len(flag_ids), successful=successful, failed=failed
        )

    # Overrides

    async def list_overrides(self, flag_id: str) -> List[FeatureFlagOverride]:
        await self.get_flag(flag_id)
        return await self.overrides.list_by_flag(flag_id)

    async def add_override(
        self, actor: AdminProfile, flag_id: str, data: FeatureFlagOverrideCreate
    ) -> FeatureFlagOverride:
        """Create or replace the override of one client."""
        flag = await self.get_flag(flag_id)
        override = await self.overrides.get_for_client(flag_id, data.client_id)
        if override is None:
            override = FeatureFlagOverride(flag_id=flag_id, client_id=data.client_id, created_by=actor.id)
        override.value = data.value
        override.reason = data.reason
        override.expires_at = data.expires_at
        await self._record_history(
            flag, "override_set", {"client_id": data.client_id, "value": data.value}, actor, data.reason
        )
        override = await self.overrides.create(override)
        await self.audit.record(
            actor,
            AuditAction.feature_flag_updated,
            ResourceType.feature_flag,
            resource_id=flag.id,
            resource_name=flag.key,
            description=f"Override set for client {data.client_id}",
            context={"client_id": data.client_id, "value": data.value},
        )
        return override

    async def remove_override(self, actor: AdminProfile, flag_id: str, client_id: str) -> None:
        flag = await self.get_flag(flag_id)
        override = await self.overrides.get_for_client(flag_id, client_id)
        if not override:
            raise NotFoundError("Override")
        await self._record_history(flag, "override_removed", {"client_id": client_id}, actor, None)
        await self.overrides.delete(override.id)
        await self.audit.record(
            actor,
            AuditAction.feature_flag_updated,
            ResourceType.feature_flag,
            resource_id=flag.id,
            resource_name=flag.key,
            description=f"Override removed for client {client_id}",
        )

    async def get_history(self, flag_id: str, limit: int = 50) -> List[FeatureFlagHistory]:
        return await self.history.list_by_flag(flag_id, limit)

    # Evaluation

    async def evaluate(self, key: str, environment: str, context: EvaluationContext) -> FeatureFlagEvaluation:
        now = utc_now()
        flag = await self.repo.find_for_evaluation(key, environment)
        if flag is None:
            return FeatureFlagEvaluation(
                flag_key=key, value=None, is_enabled=False, reason=EvaluationReason.flag_not_found, evaluated_at=now
            )

        if not flag.is_enabled or flag.status != FeatureFlagStatus.active.value:
            return FeatureFlagEvaluation(
                flag_key=key,
                value=flag.default_value,
                is_enabled=False,
                reason=EvaluationReason.flag_disabled,
                evaluated_at=now,
            )

        if context.client_id:
            override = await self.overrides.get_for_client(flag.id, context.client_id)
            if override and (override.expires_at is None or override.expires_at > now):
                return FeatureFlagEvaluation(
                    flag_key=key,
                    value=override.value,
                    is_enabled=True,
                    reason=EvaluationReason.client_override,
                    evaluated_at=now,
                )

        for condition in flag.conditions or []:
            if condition_matches(condition, context):
                return FeatureFlagEvaluation(
                    flag_key=key,
                    value=flag.current_value,
                    is_enabled=True,
                    reason=EvaluationReason.condition_match,
                    matched_condition=condition,
                    evaluated_at=now,
                )

        if flag.rollout_percentage < 100:
            bucket = rollout_bucket(key, context.client_id or context.user_id or "anonymous")
            if bucket > flag.rollout_percentage:
                return FeatureFlagEvaluation(
                    flag_key=key,
                    value=flag.default_value,
                    is_enabled=False,
                    reason=EvaluationReason.rollout_percentage,
                    rollout_bucket=bucket,
                    evaluated_at=now,
                )

        return FeatureFlagEvaluation(
            flag_key=key,
            value=flag.current_value,
            is_enabled=True,
            reason=EvaluationReason.default_value,
            evaluated_at=now,
        )

    async def summary(self) -> FeatureFlagSummary:
        flags = await self.repo.list()
        result = FeatureFlagSummary(
            total=len(flags),
            enabled=sum(1 for flag in flags if flag.is_enabled),
            by_status={},
            by_type={},
            by_environment={},
            by_category={},
        )
        for flag in flags:
            for bucket, value in (
                (result.by_status, flag.status),
                (result.by_type, flag.flag_type),
                (result.by_environment, flag.environment),
                (result.by_category, flag.category),
            ):
                bucket[value] = bucket.get(value, 0) + 1
        return result
