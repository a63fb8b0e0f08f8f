"""
Bulk operation service.

A bulk operation applies one action to a list of target IDs:

1. ``validate`` checks the request and every target before anything runs.
2. ``create`` stores a pending operation and, unless it is a dry run, processes
   it inline.
3. ``process`` walks the targets in batches, dispatching each one to the
   handler registered for the operation type. A failing target is recorded in
   the results and does not stop the batch.

The final status is ``completed`` when nothing failed, ``failed`` when nothing
succeeded and ``partial_success`` otherwise.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any, Awaitable, Callable, Dict, List, Optional

from sqlmodel.ext.asyncio.session import AsyncSession

from focusprint.core.database.base import utc_now
from focusprint.core.database.entities.admin_profiles import AdminProfile
from focusprint.core.database.entities.bulk_operations import BulkOperation
from focusprint.core.database.entities.feature_flags import FeatureFlag
from focusprint.core.database.repositories.bulk_operations import BulkOperationRepository
from focusprint.core.database.repositories.clients import ClientRepository, ClientUserRepository
from focusprint.core.database.repositories.feature_flags import FeatureFlagRepository
from focusprint.core.database.repositories.licenses import LicenseRepository
from focusprint.core.database.repositories.plans import PlanRepository
from focusprint.core.errors import (
    NotFoundError,
    OperationNotAllowedError,
    RateLimitError,
    ValidationFailedError,
)
from focusprint.core.logging_config import get_logger
from focusprint.core.models.domain.enums import (
    AdminPermission,
    AuditAction,
    AuditSeverity,
    BulkOperationStage,
    BulkOperationStatus,
    BulkOperationType,
    BulkTargetType,
    ClientStatus,
    ClientUserRole,
    FeatureFlagEnvironment,
    LicenseStatus,
    PlanType,
    ResourceType,
)
from focusprint.core.models.io.bulk_operations import (
    BulkOperationCapabilities,
    BulkOperationCapability,
    BulkOperationCreated,
    BulkOperationListResponse,
    BulkOperationRead,
    BulkOperationRequest,
    BulkOperationSummary,
    TargetValidation,
)
from focusprint.core.models.io.common import Pagination
from focusprint.core.models.io.plan_migrations import PlanMigrationRequest
from focusprint.core.monitoring import log_bulk_operation
from focusprint.server.core.config import settings

from .audit import AuditService
from .clients import plan_limits
from .plan_migrations import PlanMigrationService

logger = get_logger(__name__)

SECONDS_PER_ITEM = 0.5

COMPLEXITY_MULTIPLIERS: Dict[BulkOperationType, float] = {
    BulkOperationType.enable_users: 1,
    BulkOperationType.disable_users: 1,
    BulkOperationType.update_user_roles: 1.5,
    BulkOperationType.reset_passwords: 2,
    BulkOperationType.delete_users: 3,
    BulkOperationType.activate_licenses: 1,
    BulkOperationType.deactivate_licenses: 1,
    BulkOperationType.update_license_plans: 2,
    BulkOperationType.extend_license_expiration: 1.5,
    BulkOperationType.transfer_licenses: 3,
    BulkOperationType.update_client_plans: 2.5,
    BulkOperationType.suspend_clients: 2,
    BulkOperationType.reactivate_clients: 2,
    BulkOperationType.billing_adjustments: 3,
    BulkOperationType.delete_clients: 5,
    BulkOperationType.client_migration: 10,
    BulkOperationType.audit_export: 5,
    BulkOperationType.compliance_report: 8,
    BulkOperationType.feature_flag_sync: 2,
    BulkOperationType.bulk_notifications: 1.5,
    BulkOperationType.system_maintenance: 15,
}

# operation type -> (target type, description, permissions, required parameters)
CAPABILITIES: Dict[BulkOperationType, tuple[BulkTargetType, str, List[AdminPermission], List[str]]] = {
    BulkOperationType.enable_users: (
        BulkTargetType.users, "Enable client user accounts", [AdminPermission.manage_clients], []
    ),
    BulkOperationType.disable_users: (
        BulkTargetType.users, "Disable client user accounts", [AdminPermission.manage_clients], []
    ),
    BulkOperationType.update_user_roles: (
        BulkTargetType.users, "Change the role of client users", [AdminPermission.manage_clients], ["new_role"]
    ),
    BulkOperationType.reset_passwords: (
        BulkTargetType.users, "Send password reset emails", [AdminPermission.manage_clients], []
    ),
    BulkOperationType.delete_users: (
        BulkTargetType.users, "Delete client users", [AdminPermission.delete_clients], []
    ),
    BulkOperationType.activate_licenses: (
        BulkTargetType.licenses, "Activate licenses", [AdminPermission.manage_licenses], []
    ),
    BulkOperationType.deactivate_licenses: (
        BulkTargetType.licenses, "Suspend licenses", [AdminPermission.manage_licenses], []
    ),
    BulkOperationType.update_license_plans: (
        BulkTargetType.licenses, "Move licenses to another plan", [AdminPermission.modify_plans], ["new_plan"]
    ),
    BulkOperationType.extend_license_expiration: (
        BulkTargetType.licenses,
        "Extend license or trial expiration",
        [AdminPermission.manage_licenses],
        ["extension_days"],
    ),
    BulkOperationType.transfer_licenses: (
        BulkTargetType.licenses, "Transfer licenses between clients", [AdminPermission.manage_licenses], []
    ),
    BulkOperationType.update_client_plans: (
        BulkTargetType.clients, "Change the plan type of clients", [AdminPermission.manage_clients], ["new_plan"]
    ),
    BulkOperationType.suspend_clients: (
        BulkTargetType.clients, "Suspend clients", [AdminPermission.suspend_clients], []
    ),
    BulkOperationType.reactivate_clients: (
        BulkTargetType.clients, "Reactivate suspended clients", [AdminPermission.suspend_clients], []
    ),
    BulkOperationType.billing_adjustments: (
        BulkTargetType.clients,
        "Apply credits or charges",
        [AdminPermission.manage_billing],
        ["adjustment_type", "adjustment_amount"],
    ),
    BulkOperationType.delete_clients: (
        BulkTargetType.clients, "Delete clients", [AdminPermission.delete_clients], []
    ),
    BulkOperationType.client_migration: (
        BulkTargetType.clients, "Migrate clients to a plan", [AdminPermission.modify_plans], ["target_plan"]
    ),
    BulkOperationType.audit_export: (
        BulkTargetType.audit_logs, "Export audit logs", [AdminPermission.export_audit_logs], ["export_format"]
    ),
    BulkOperationType.compliance_report: (
        BulkTargetType.mixed, "Generate compliance reports", [AdminPermission.export_audit_logs], []
    ),
    BulkOperationType.feature_flag_sync: (
        BulkTargetType.feature_flags,
        "Copy feature flags to another environment",
        [AdminPermission.feature_flags],
        ["target_environment"],
    ),
    BulkOperationType.bulk_notifications: (
        BulkTargetType.clients, "Send notifications to clients", [AdminPermission.manage_clients], []
    ),
    BulkOperationType.system_maintenance: (
        BulkTargetType.mixed, "Run maintenance tasks", [AdminPermission.maintenance_mode], []
    ),
}

FINISHED_STATUSES = {
    BulkOperationStatus.completed.value,
    BulkOperationStatus.failed.value,
    BulkOperationStatus.partial_success.value,
}

Handler = Callable[[str, Dict[str, Any]], Awaitable[Dict[str, Any]]]


def estimate_duration(operation_type: BulkOperationType | str, target_count: int) -> int:
    """Estimated processing time in seconds."""
    multiplier = COMPLEXITY_MULTIPLIERS.get(BulkOperationType(operation_type), 1)
    return round(target_count * SECONDS_PER_ITEM * multiplier)


def required_permissions(operation_type: BulkOperationType | str) -> List[AdminPermission]:
    return CAPABILITIES[BulkOperationType(operation_type)][2]


def validate_target(target_id: str, operation_type: BulkOperationType, parameters: Dict[str, Any]) -> TargetValidation:
    """Check a single target ID and the parameters its operation needs."""
    errors: List[str] = []
    warnings: List[str] = []

    if not target_id or not target_id.strip():
        errors.append("Target ID cannot be empty")

    if operation_type is BulkOperationType.update_user_roles and not parameters.get("new_role"):
        errors.append("new_role parameter is required")
    elif operation_type in (BulkOperationType.update_license_plans, BulkOperationType.update_client_plans):
        if not parameters.get("new_plan"):
            errors.append("new_plan parameter is required")
    elif operation_type is BulkOperationType.extend_license_expiration:
        if not parameters.get("extension_days") and not parameters.get("new_expiration_date"):
            errors.append("Either extension_days or new_expiration_date is required")
    elif operation_type is BulkOperationType.billing_adjustments:
        if not parameters.get("adjustment_type") or parameters.get("adjustment_amount") is None:
            errors.append("adjustment_type and adjustment_amount are required")
    elif operation_type is BulkOperationType.client_migration and not parameters.get("target_plan"):
        errors.append("target_plan parameter is required")
    elif operation_type is BulkOperationType.feature_flag_sync and not parameters.get("target_environment"):
        errors.append("target_environment parameter is required")

    if "delete" in operation_type.value:
        warnings.append("This operation cannot be undone")

    return TargetValidation(
        target_id=target_id, is_valid=not errors, can_proceed=not errors, errors=errors, warnings=warnings
    )


def _initial_progress(total: int) -> Dict[str, Any]:
    return {
        "total_items": total,
        "processed_items": 0,
        "successful_items": 0,
        "failed_items": 0,
        "percentage_complete": 0,
        "current_item": None,
        "stage": BulkOperationStage.initializing.value,
    }


def _parse_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    try:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        raise ValidationFailedError(f"Invalid new_expiration_date: {value}") from None
    if parsed.tzinfo is not None:
        parsed = parsed.replace(tzinfo=None) - (parsed.utcoffset() or timedelta())
    return parsed


class BulkOperationService:
    def __init__(self, session: AsyncSession, audit: AuditService) -> None:
        self.session = session
        self.repo = BulkOperationRepository(session)
        self.users = ClientUserRepository(session)
        self.clients = ClientRepository(session)
        self.licenses = LicenseRepository(session)
        self.plans = PlanRepository(session)
        self.flags = FeatureFlagRepository(session)
        self.migrations = PlanMigrationService(session, audit)
        self.audit = audit
        self._actor: Optional[AdminProfile] = None
        self.handlers: Dict[BulkOperationType, Handler] = {
            BulkOperationType.enable_users: self._enable_user,
            BulkOperationType.disable_users: self._disable_user,
            BulkOperationType.update_user_roles: self._update_user_role,
            BulkOperationType.activate_licenses: self._activate_license,
            BulkOperationType.deactivate_licenses: self._deactivate_license,
            BulkOperationType.update_license_plans: self._update_license_plan,
            BulkOperationType.extend_license_expiration: self._extend_license,
            BulkOperationType.update_client_plans: self._update_client_plan,
            BulkOperationType.suspend_clients: self._suspend_client,
            BulkOperationType.reactivate_clients: self._reactivate_client,
            BulkOperationType.client_migration: self._migrate_client,
            BulkOperationType.feature_flag_sync: self._sync_feature_flag,
        }

    # =====================================================================
    # Lifecycle
    # =====================================================================

    def validate(self, request: BulkOperationRequest) -> List[TargetValidation]:
        """Validate the request and each of its targets.

        Raises:
            ValidationFailedError: the target list is empty or too long
        """
        max_targets = settings.bulk_operations.max_targets_per_operation
        if not request.target_ids:
            raise ValidationFailedError("At least one target ID is required")
        if len(request.target_ids) > max_targets:
            raise ValidationFailedError(f"Cannot process more than {max_targets} targets in a single operation")
        operation_type = BulkOperationType(request.operation_type)
        expected = CAPABILITIES[operation_type][0]
        if expected != BulkTargetType.mixed and BulkTargetType(request.target_type) != expected:
            raise ValidationFailedError(
                f"Invalid target type {BulkTargetType(request.target_type).value} for {operation_type.value}: "
                f"expected {expected.value}"
            )
        return [validate_target(tid, request.operation_type, request.parameters) for tid in request.target_ids]

    async def create(self, actor: AdminProfile, request: BulkOperationRequest) -> BulkOperationCreated:
        validation = self.validate(request)
        if any(not item.can_proceed for item in validation):
            raise ValidationFailedError(
                "Bulk operation validation failed",
                context={"validation_results": [item.model_dump() for item in validation if not item.can_proceed]},
            )

        max_running = settings.bulk_operations.max_concurrent_operations
        if await self.repo.count_running() >= max_running:
            raise RateLimitError(f"Maximum concurrent operations reached ({max_running})")

        operation = await self.repo.create(
            BulkOperation(
                operation_type=request.operation_type.value,
                target_type=request.target_type.value,
                target_ids=list(request.target_ids),
                parameters=dict(request.parameters),
                reason=request.reason,
                dry_run=request.dry_run,
                progress=_initial_progress(len(request.target_ids)),
                created_by=actor.id,
                created_by_name=actor.full_name,
            )
        )
        logger.info(
            f"Bulk operation {operation.id} created: {operation.operation_type} on {len(operation.target_ids)} targets"
        )
        log_bulk_operation(operation.id, operation.operation_type, operation.status, total=len(operation.target_ids))
        await self._audit(actor, operation, "created")

        warnings = sorted({w for item in validation for w in item.warnings})
        estimate = estimate_duration(request.operation_type, len(request.target_ids))
        if not request.dry_run:
            operation = await self.process(operation.id, request.batch_size, actor=actor)
        else:
            warnings.append("Dry run: the operation was validated but not processed")

        return BulkOperationCreated(
            operation=BulkOperationRead.model_validate(operation),
            validation_results=validation,
            estimated_duration_seconds=estimate,
            warnings=warnings,
        )

    async def process(
        self, operation_id: str, batch_size: Optional[int] = None, actor: Optional[AdminProfile] = None
    ) -> BulkOperation:
        """Run every target of a stored operation through its handler."""
        operation = await self.get_operation(operation_id)
        self._actor = actor
        operation_type = BulkOperationType(operation.operation_type)
        target_ids = list(operation.target_ids)
        parameters = dict(operation.parameters)
        batch_size = batch_size or settings.bulk_operations.default_batch_size
        total = len(target_ids)

        operation.status = BulkOperationStatus.running.value
        operation.started_at = utc_now()
        operation.progress = {**_initial_progress(total), "stage": BulkOperationStage.validating.value}
        operation = await self.repo.update(operation)
        log_bulk_operation(operation_id, operation_type.value, operation.status, total=total)

        results: List[Dict[str, Any]] = []
        for start in range(0, total, batch_size):
            batch = target_ids[start : start + batch_size]
            operation = await self.get_operation(operation_id)
            operation.progress = {
                **operation.progress,
                "processed_items": start,
                "percentage_complete": round(start / total * 100),
                "current_item": batch[0],
                "stage": BulkOperationStage.processing.value,
            }
            await self.repo.update(operation)

            for target_id in batch:
                results.append(await self._process_target(operation_type, target_id, parameters))

        successful = sum(1 for item in results if item["success"])
        failed = total - successful
        if failed == 0:
            status = BulkOperationStatus.completed
        elif successful == 0:
            status = BulkOperationStatus.failed
        else:
            status = BulkOperationStatus.partial_success

        operation = await self.get_operation(operation_id)
        operation.status = status.value
        operation.completed_at = utc_now()
        operation.results = results
        operation.progress = {
            "total_items": total,
            "processed_items": total,
            "successful_items": successful,
            "failed_items": failed,
            "percentage_complete": 100,
            "current_item": None,
            "stage": BulkOperationStage.completed.value,
        }
        if status is BulkOperationStatus.failed:
            operation.error_message = f"All {total} targets failed"
        operation = await self.repo.update(operation)

        logger.info(f"Bulk operation {operation_id} finished with {status.value}: {successful}/{total} succeeded")
        log_bulk_operation(
            operation_id, operation_type.value, status.value, total=total, successful=successful, failed=failed
        )
        await self._audit(None, operation, "completed")
        return operation

    async def _process_target(
        self, operation_type: BulkOperationType, target_id: str, parameters: Dict[str, Any]
    ) -> Dict[str, Any]:
        result: Dict[str, Any] = {"target_id": target_id, "target_name": None}
        handler = self.handlers.get(operation_type)
        try:
            if handler is None:
                raise OperationNotAllowedError(f"Unsupported operation type: {operation_type.value}")
            data = await handler(target_id, parameters)
        except Exception as e:
            await self.session.rollback()
            if self._actor is not None:
                await self.session.refresh(self._actor)
            logger.warning(f"Bulk {operation_type.value} failed for target {target_id}: {e}")
            result.update(success=False, status="failed", error_message=str(e))
        else:
            result.update(
                success=True,
                status="success",
                target_name=data.pop("target_name", None),
                result_data=data,
            )
        result["processed_at"] = utc_now().isoformat()
        return result

    async def cancel(self, operation_id: str, actor: AdminProfile, reason: Optional[str] = None) -> BulkOperation:
        operation = await self.get_operation(operation_id)
        if operation.status not in (BulkOperationStatus.pending.value, BulkOperationStatus.running.value):
            raise OperationNotAllowedError("Operation cannot be cancelled in current status")

        operation.status = BulkOperationStatus.cancelled.value
        operation.completed_at = utc_now()
        operation.error_message = reason or "Operation cancelled by admin"
        operation = await self.repo.update(operation)
        log_bulk_operation(operation.id, operation.operation_type, operation.status)
        await self._audit(actor, operation, "cancelled")
        return operation

    async def _audit(self, actor: Optional[AdminProfile], operation: BulkOperation, event: str) -> None:
        failed = operation.status == BulkOperationStatus.failed.value
        high = failed or "delete" in operation.operation_type
        await self.audit.record(
            actor,
            AuditAction.bulk_operation,
            ResourceType.system,
            resource_id=operation.id,
            resource_name=f"Bulk {operation.operation_type}",
            description=f"Bulk operation {event}: {operation.operation_type} on {len(operation.target_ids)} targets",
            context={
                "event": event,
                "operation_type": operation.operation_type,
                "target_type": operation.target_type,
                "target_count": len(operation.target_ids),
                "status": operation.status,
                "progress": operation.progress,
                "reason": operation.reason,
                "performed_by": actor.id if actor else "system",
            },
            severity=AuditSeverity.high if high else AuditSeverity.medium,
            status="error" if failed else "success",
        )

    # =====================================================================
    # Queries
    # =====================================================================

    async def get_operation(self, operation_id: str) -> BulkOperation:
        operation = await self.repo.get_by_id(operation_id)
        if not operation:
            raise NotFoundError("Bulk operation")
        return operation

    async def list_operations(
        self,
        page: int = 1,
        limit: int = 20,
        status: Optional[str] = None,
        operation_type: Optional[str] = None,
        target_type: Optional[str] = None,
        created_by: Optional[str] = None,
    ) -> BulkOperationListResponse:
        filters = {
            "status": status,
            "operation_type": operation_type,
            "target_type": target_type,
            "created_by": created_by,
        }
        rows, total = await self.repo.page(page, limit, filters=filters)
        return BulkOperationListResponse(
            operations=[BulkOperationRead.model_validate(row) for row in rows],
            pagination=Pagination.build(page, limit, total),
            summary=await self.statistics(filters),
        )

    async def statistics(self, filters: Optional[Dict[str, Any]] = None) -> BulkOperationSummary:
        operations = await self.repo.list(filters=filters)
        by_status: Dict[str, int] = {}
        by_type: Dict[str, int] = {}
        by_target_type: Dict[str, int] = {}
        durations: List[float] = []
        for op in operations:
            by_status[op.status] = by_status.get(op.status, 0) + 1
            by_type[op.operation_type] = by_type.get(op.operation_type, 0) + 1
            by_target_type[op.target_type] = by_target_type.get(op.target_type, 0) + 1
            if op.started_at and op.completed_at and op.status in FINISHED_STATUSES:
                durations.append((op.completed_at - op.started_at).total_seconds() / 60)

        finished = sum(by_status.get(status, 0) for status in FINISHED_STATUSES)
        completed = by_status.get(BulkOperationStatus.completed.value, 0)
        return BulkOperationSummary(
            total_operations=len(operations),
            by_status=by_status,
            by_type=by_type,
            by_target_type=by_target_type,
            average_completion_minutes=round(sum(durations) / len(durations), 2) if durations else None,
            success_rate=round(completed / finished * 100) if finished else 0,
        )

    def supported_operations(self) -> BulkOperationCapabilities:
        operations = [
            BulkOperationCapability(
                operation_type=operation_type.value,
                target_type=target_type.value,
                description=description,
                required_permissions=[p.value for p in permissions],
                required_parameters=parameters,
                supported=operation_type in self.handlers,
                estimated_seconds_per_item=SECONDS_PER_ITEM * COMPLEXITY_MULTIPLIERS[operation_type],
            )
            for operation_type, (target_type, description, permissions, parameters) in CAPABILITIES.items()
        ]
        bulk = settings.bulk_operations
        return BulkOperationCapabilities(
            operations=operations,
            max_targets_per_operation=bulk.max_targets_per_operation,
            max_concurrent_operations=bulk.max_concurrent_operations,
            default_batch_size=bulk.default_batch_size,
        )

    # =====================================================================
    # Handlers
    # =====================================================================

    async def _set_user_active(self, user_id: str, active: bool) -> Dict[str, Any]:
        user = await self.users.get_by_id(user_id)
        if not user:
            raise NotFoundError("User")
        previous = user.is_active
        user.is_active = active
        await self.users.update(user)
        return {"target_name": user.email, "previous_is_active": previous, "is_active": active}

    async def _enable_user(self, user_id: str, parameters: Dict[str, Any]) -> Dict[str, Any]:
        return await self._set_user_active(user_id, bool(parameters.get("enabled", True)))

    async def _disable_user(self, user_id: str, parameters: Dict[str, Any]) -> Dict[str, Any]:
        return await self._set_user_active(user_id, bool(parameters.get("enabled", False)))

    async def _update_user_role(self, user_id: str, parameters: Dict[str, Any]) -> Dict[str, Any]:
        try:
            role = ClientUserRole(parameters["new_role"])
        except ValueError:
            raise ValidationFailedError(f"Invalid role: {parameters['new_role']}") from None
        user = await self.users.get_by_id(user_id)
        if not user:
            raise NotFoundError("User")
        previous = user.role
        user.role = role.value
        await self.users.update(user)
        return {"target_name": user.email, "previous_role": previous, "role": role.value}

    async def _set_license_status(self, license_id: str, status: LicenseStatus) -> Dict[str, Any]:
        license_ = await self.licenses.get_by_id(license_id)
        if not license_:
            raise NotFoundError("License")
        if license_.status == status.value:
            raise OperationNotAllowedError(f"License is already {status.value}")
        previous = license_.status
        license_.status = status.value
        license_.license_metadata = {
            **license_.license_metadata,
            f"bulk_{status.value}_at": utc_now().isoformat(),
        }
        await self.licenses.update(license_)
        return {"target_name": license_.plan_type, "previous_status": previous, "status": status.value}

    async def _activate_license(self, license_id: str, parameters: Dict[str, Any]) -> Dict[str, Any]:
        return await self._set_license_status(license_id, LicenseStatus.active)

    async def _deactivate_license(self, license_id: str, parameters: Dict[str, Any]) -> Dict[str, Any]:
        return await self._set_license_status(license_id, LicenseStatus.suspended)

    async def _update_license_plan(self, license_id: str, parameters: Dict[str, Any]) -> Dict[str, Any]:
        license_ = await self.licenses.get_by_id(license_id)
        if not license_:
            raise NotFoundError("License")
        plan = await self.plans.get_by_code(parameters["new_plan"])
        if not plan:
            raise NotFoundError("Plan")
        if not plan.is_active:
            raise OperationNotAllowedError("Cannot move a license to an inactive plan")
        limits = plan.limits or {}
        previous = license_.plan_type
        license_.plan_id = plan.id
        license_.plan_type = plan.code
        license_.max_users = int(limits.get("max_users", 5))
        license_.max_projects = int(limits.get("max_projects", 3))
        await self.licenses.update(license_)
        return {"target_name": license_.client_id, "previous_plan": previous, "plan": plan.code}

    async def _extend_license(self, license_id: str, parameters: Dict[str, Any]) -> Dict[str, Any]:
        """Extend the trial end of trial licenses, the end date of the others."""
        license_ = await self.licenses.get_by_id(license_id)
        if not license_:
            raise NotFoundError("License")
        field = "trial_ends_at" if license_.status == LicenseStatus.trial.value else "end_date"
        previous: Optional[datetime] = getattr(license_, field)

        if parameters.get("new_expiration_date"):
            new_value = _parse_datetime(parameters["new_expiration_date"])
        else:
            now = utc_now()
            base = previous if previous and previous > now else now
            new_value = base + timedelta(days=int(parameters["extension_days"]))
        if previous and new_value <= previous:
            raise ValidationFailedError("Invalid expiration date: must be after the current one")

        setattr(license_, field, new_value)
        await self.licenses.update(license_)
        return {
            "target_name": license_.client_id,
            "field": field,
            "previous_expiration": previous.isoformat() if previous else None,
            "new_expiration": new_value.isoformat(),
        }

    async def _update_client_plan(self, client_id: str, parameters: Dict[str, Any]) -> Dict[str, Any]:
        try:
            plan_type = PlanType(parameters["new_plan"])
        except ValueError:
            raise ValidationFailedError(f"Invalid plan type: {parameters['new_plan']}") from None
        client = await self.clients.get_by_id(client_id)
        if not client:
            raise NotFoundError("Client")
        previous = client.plan_type
        client.plan_type = plan_type.value
        client.max_users, client.max_projects = plan_limits(plan_type)
        await self.clients.update(client)
        return {"target_name": client.name, "previous_plan": previous, "plan": plan_type.value}

    async def _set_client_status(self, client_id: str, status: ClientStatus) -> Dict[str, Any]:
        client = await self.clients.get_by_id(client_id)
        if not client:
            raise NotFoundError("Client")
        if client.status == status.value:
            raise OperationNotAllowedError(f"Client is already {status.value}")
        previous = client.status
        client.status = status.value
        await self.clients.update(client)
        return {"target_name": client.name, "previous_status": previous, "status": status.value}

    async def _suspend_client(self, client_id: str, parameters: Dict[str, Any]) -> Dict[str, Any]:
        return await self._set_client_status(client_id, ClientStatus.suspended)

    async def _reactivate_client(self, client_id: str, parameters: Dict[str, Any]) -> Dict[str, Any]:
        return await self._set_client_status(client_id, ClientStatus.active)

    async def _migrate_client(self, client_id: str, parameters: Dict[str, Any]) -> Dict[str, Any]:
        if self._actor is None:
            raise OperationNotAllowedError("Client migration requires an admin actor")
        request = PlanMigrationRequest(
            target_plan_id=parameters["target_plan"],
            migration_reason=parameters.get("migration_reason") or "Bulk client migration",
            force_migration=bool(parameters.get("force_migration", False)),
        )
        execution = await self.migrations.execute_migration(self._actor, client_id, request)
        return {
            "target_name": execution.client.name,
            "migration_id": execution.migration.id,
            "migration_type": execution.validation.migration_type,
        }

    async def _sync_feature_flag(self, flag_id: str, parameters: Dict[str, Any]) -> Dict[str, Any]:
        """Copy a flag's value and targeting into ``target_environment``."""
        try:
            environment = FeatureFlagEnvironment(parameters["target_environment"])
        except ValueError:
            raise ValidationFailedError(f"Invalid environment: {parameters['target_environment']}") from None
        source = await self.flags.get_by_id(flag_id)
        if not source:
            raise NotFoundError("Feature flag")
        if source.environment == environment.value:
            raise OperationNotAllowedError(f"Feature flag is already in {environment.value}")

        synced = {
            "is_enabled": source.is_enabled,
            "default_value": source.default_value,
            "current_value": source.current_value,
            "rollout_percentage": source.rollout_percentage,
            "conditions": list(source.conditions),
            "tags": list(source.tags),
        }
        actor_id = self._actor.id if self._actor else None
        target = await self.flags.get_by_key(source.key, environment.value)
        if target:
            for key, value in synced.items():
                setattr(target, key, value)
            target.updated_by = actor_id
            target = await self.flags.update(target)
            action = "updated"
        else:
            target = await self.flags.create(
                FeatureFlag(
                    key=source.key,
                    name=source.name,
                    description=source.description,
                    flag_type=source.flag_type,
                    environment=environment.value,
                    category=source.category,
                    target_audience=source.target_audience,
                    created_by=actor_id,
                    updated_by=actor_id,
                    **synced,
                )
            )
            action = "created"
        return {
            "target_name": source.key,
            "environment": environment.value,
            "synced_flag_id": target.id,
            "action": action,
        }
