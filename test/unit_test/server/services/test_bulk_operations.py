"""
Unit tests for the bulk operation service.

Tests cover:
- Request and per-target validation
- Inline processing and final status resolution
- Every registered handler
- Cancellation, listing and capabilities
"""

from datetime import timedelta
from unittest.mock import patch

import pytest

from focusprint.core.database.base import utc_now
from focusprint.core.database.entities.bulk_operations import BulkOperation
from focusprint.core.database.entities.feature_flags import FeatureFlag
from focusprint.core.database.entities.licenses import License
from focusprint.core.database.repositories.feature_flags import FeatureFlagRepository
from focusprint.core.database.repositories.licenses import LicenseRepository
from focusprint.core.errors import OperationNotAllowedError, RateLimitError, ValidationFailedError
from focusprint.core.models.domain.enums import AdminPermission, AuditAction, BulkOperationType, PlanType
from focusprint.core.models.io.bulk_operations import BulkOperationRequest
from focusprint.server.core.config import settings
from focusprint.server.services.bulk_operations import (
    BulkOperationService,
    estimate_duration,
    required_permissions,
    validate_target,
)

pytestmark = pytest.mark.asyncio

T = BulkOperationType


@pytest.fixture
def service(session, audit):
    return BulkOperationService(session, audit)


def _request(operation_type, target_type, target_ids, **kwargs):
    return BulkOperationRequest(
        operation_type=operation_type, target_type=target_type, target_ids=target_ids, **kwargs
    )


async def _license(session, client, status="active", **values):
    return await LicenseRepository(session).create(
        License(client_id=client.id, plan_type=client.plan_type, status=status, **values)
    )


class TestValidation:
    @pytest.mark.parametrize(
        "operation_type, parameters, error",
        [
            (T.update_user_roles, {}, "new_role parameter is required"),
            (T.update_license_plans, {}, "new_plan parameter is required"),
            (T.update_client_plans, {"new_plan": ""}, "new_plan parameter is required"),
            (T.extend_license_expiration, {}, "Either extension_days or new_expiration_date is required"),
            (T.billing_adjustments, {"adjustment_type": "credit"}, "adjustment_type and adjustment_amount are required"),
            (T.client_migration, {}, "target_plan parameter is required"),
            (T.feature_flag_sync, {}, "target_environment parameter is required"),
        ],
    )
    async def test_missing_parameters(self, operation_type, parameters, error):
        result = validate_target("t-1", operation_type, parameters)

        assert result.is_valid is False
        assert result.can_proceed is False
        assert result.errors == [error]

    async def test_empty_target_id(self):
        assert validate_target("  ", T.enable_users, {}).errors == ["Target ID cannot be empty"]

    async def test_delete_operations_warn(self):
        result = validate_target("c-1", T.delete_clients, {})

        assert result.is_valid is True
        assert result.warnings == ["This operation cannot be undone"]

    async def test_request_limits(self, service):
        with pytest.raises(ValidationFailedError, match="At least one target ID is required"):
            service.validate(_request(T.enable_users, "users", []))

        too_many = [f"u-{i}" for i in range(settings.bulk_operations.max_targets_per_operation + 1)]
        with pytest.raises(ValidationFailedError, match="Cannot process more than"):
            service.validate(_request(T.enable_users, "users", too_many))

    async def test_target_type_must_match_operation(self, service):
        with pytest.raises(ValidationFailedError, match="Invalid target type tickets for suspend_clients"):
            service.validate(_request(T.suspend_clients, "tickets", ["c-1"]))

        assert service.validate(_request(T.system_maintenance, "clients", ["c-1"]))[0].target_id == "c-1"

    async def test_estimate_and_permissions(self):
        assert estimate_duration(T.enable_users, 10) == 5
        assert estimate_duration("client_migration", 3) == 15
        assert required_permissions(T.suspend_clients) == [AdminPermission.suspend_clients]
        assert required_permissions("update_license_plans") == [AdminPermission.modify_plans]


class TestCreate:
    async def test_invalid_targets_reject_the_request(self, service, super_admin):
        with pytest.raises(ValidationFailedError, match="Bulk operation validation failed") as exc_info:
            await service.create(super_admin, _request(T.update_user_roles, "users", ["u-1"]))

        assert exc_info.value.context["validation_results"][0]["target_id"] == "u-1"

    async def test_concurrency_limit(self, session, service, super_admin):
        for _ in range(settings.bulk_operations.max_concurrent_operations):
            session.add(
                BulkOperation(operation_type="enable_users", target_type="users", status="running", created_by="x")
            )
        await session.commit()

        with pytest.raises(RateLimitError, match="Maximum concurrent operations reached"):
            await service.create(super_admin, _request(T.enable_users, "users", ["u-1"]))

    async def test_dry_run_is_not_processed(self, service, audit, super_admin, make_client):
        client = await make_client()

        created = await service.create(
            super_admin, _request(T.suspend_clients, "clients", [client.id], dry_run=True, reason="Test")
        )

        assert created.operation.status == "pending"
        assert created.operation.dry_run is True
        assert created.operation.progress.stage == "initializing"
        assert "Dry run: the operation was validated but not processed" in created.warnings
        assert created.estimated_duration_seconds == 1
        assert (await service.clients.get_by_id(client.id)).status == "active"
        logs = await audit.list_logs(action=AuditAction.bulk_operation.value)
        assert logs.logs[0].context["event"] == "created"

    async def test_suspend_clients_completes(self, service, audit, super_admin, make_client):
        first = await make_client()
        second = await make_client()

        created = await service.create(super_admin, _request(T.suspend_clients, "clients", [first.id, second.id]))

        operation = created.operation
        assert operation.status == "completed"
        assert operation.started_at is not None
        assert operation.completed_at is not None
        assert operation.progress.successful_items == 2
        assert operation.progress.percentage_complete == 100
        assert operation.progress.stage == "completed"
        assert [r["success"] for r in operation.results] == [True, True]
        assert operation.results[0]["result_data"] == {"previous_status": "active", "status": "suspended"}
        assert operation.results[0]["target_name"] == first.name
        assert (await service.clients.get_by_id(second.id)).status == "suspended"

        logs = await audit.list_logs(action=AuditAction.bulk_operation.value)
        completed = next(log for log in logs.logs if log.context["event"] == "completed")
        assert completed.admin_id is None
        assert completed.context["performed_by"] == "system"

    async def test_partial_success(self, service, super_admin, make_client):
        active = await make_client()
        already = await make_client(status="suspended")

        created = await service.create(
            super_admin, _request(T.suspend_clients, "clients", [active.id, already.id, "missing"], batch_size=2)
        )

        operation = created.operation
        assert operation.status == "partial_success"
        assert operation.progress.failed_items == 2
        assert operation.results[1]["error_message"] == "Client is already suspended"
        assert operation.results[2]["error_message"] == "Client not found"

    async def test_all_failed(self, service, super_admin):
        created = await service.create(super_admin, _request(T.reactivate_clients, "clients", ["a", "b"]))

        assert created.operation.status == "failed"
        assert created.operation.error_message == "All 2 targets failed"

    async def test_unsupported_type_fails_every_target(self, service, super_admin):
        created = await service.create(super_admin, _request(T.reset_passwords, "users", ["u-1"]))

        assert created.operation.status == "failed"
        assert created.operation.results[0]["error_message"] == "Unsupported operation type: reset_passwords"


class TestHandlers:
    async def test_user_handlers(self, service, super_admin, make_client, make_user):
        client = await make_client()
        user = await make_user(client)

        await service.create(super_admin, _request(T.disable_users, "users", [user.id]))
        assert (await service.users.get_by_id(user.id)).is_active is False

        await service.create(super_admin, _request(T.enable_users, "users", [user.id]))
        assert (await service.users.get_by_id(user.id)).is_active is True

        created = await service.create(
            super_admin, _request(T.update_user_roles, "users", [user.id], parameters={"new_role": "admin"})
        )
        assert created.operation.results[0]["result_data"] == {"previous_role": "member", "role": "admin"}

        invalid = await service.create(
            super_admin, _request(T.update_user_roles, "users", [user.id], parameters={"new_role": "boss"})
        )
        assert invalid.operation.results[0]["error_message"] == "Invalid role: boss"

    async def test_license_status_handlers(self, session, service, super_admin, make_client):
        client = await make_client()
        license_id = (await _license(session, client)).id

        created = await service.create(super_admin, _request(T.deactivate_licenses, "licenses", [license_id]))
        assert created.operation.results[0]["result_data"]["status"] == "suspended"

        again = await service.create(super_admin, _request(T.deactivate_licenses, "licenses", [license_id]))
        assert again.operation.results[0]["error_message"] == "License is already suspended"

        await service.create(super_admin, _request(T.activate_licenses, "licenses", [license_id]))
        reloaded = await service.licenses.get_by_id(license_id)
        assert reloaded.status == "active"
        assert "bulk_active_at" in reloaded.license_metadata

    async def test_update_license_plans(self, session, service, super_admin, plans, make_client):
        client = await make_client()
        license_ = await _license(session, client)

        created = await service.create(
            super_admin, _request(T.update_license_plans, "licenses", [license_.id], parameters={"new_plan": "business"})
        )

        assert created.operation.status == "completed"
        reloaded = await service.licenses.get_by_id(license_.id)
        assert (reloaded.plan_type, reloaded.max_users, reloaded.max_projects) == ("business", 50, 50)

    async def test_extend_trial_license(self, session, service, super_admin, make_client):
        client = await make_client()
        ends = utc_now() + timedelta(days=3)
        trial = await _license(session, client, status="trial", trial_ends_at=ends)

        created = await service.create(
            super_admin,
            _request(T.extend_license_expiration, "licenses", [trial.id], parameters={"extension_days": 10}),
        )

        assert created.operation.results[0]["result_data"]["field"] == "trial_ends_at"
        assert (await service.licenses.get_by_id(trial.id)).trial_ends_at == ends + timedelta(days=10)

    async def test_extend_to_explicit_date(self, session, service, super_admin, make_client):
        client = await make_client()
        license_ = await _license(session, client, end_date=utc_now() + timedelta(days=30))

        created = await service.create(
            super_admin,
            _request(
                T.extend_license_expiration,
                "licenses",
                [license_.id],
                parameters={"new_expiration_date": "2099-01-01T00:00:00Z"},
            ),
        )

        assert created.operation.results[0]["result_data"]["new_expiration"] == "2099-01-01T00:00:00"

        earlier = await service.create(
            super_admin,
            _request(
                T.extend_license_expiration,
                "licenses",
                [license_.id],
                parameters={"new_expiration_date": "2030-01-01"},
            ),
        )
        assert earlier.operation.results[0]["error_message"] == "Invalid expiration date: must be after the current one"

    async def test_update_client_plans(self, service, super_admin, make_client):
        client = await make_client(PlanType.free)

        await service.create(
            super_admin, _request(T.update_client_plans, "clients", [client.id], parameters={"new_plan": "pro"})
        )

        reloaded = await service.clients.get_by_id(client.id)
        assert (reloaded.plan_type, reloaded.max_users, reloaded.max_projects) == ("pro", 15, 10)

    async def test_client_migration(self, service, super_admin, plans, make_client):
        client = await make_client(PlanType.free)

        created = await service.create(
            super_admin,
            _request(T.client_migration, "clients", [client.id], parameters={"target_plan": plans["pro"].id}),
        )

        result = created.operation.results[0]
        assert result["success"] is True
        assert result["result_data"]["migration_type"] == "upgrade"
        assert (await service.clients.get_by_id(client.id)).plan_type == "pro"

    async def test_failed_target_keeps_actor_usable(self, service, super_admin, plans, make_client):
        blocked = await make_client(status="suspended")
        ready = await make_client()

        created = await service.create(
            super_admin,
            _request(
                T.client_migration, "clients", [blocked.id, ready.id], parameters={"target_plan": plans["pro"].id}
            ),
        )

        assert created.operation.status == "partial_success"
        assert "Client account is not active" in created.operation.results[0]["error_message"]
        assert created.operation.results[1]["success"] is True

    async def test_feature_flag_sync(self, session, service, super_admin):
        flags = FeatureFlagRepository(session)
        source = await flags.create(
            FeatureFlag(key="new_board", name="New board", environment="staging", is_enabled=True, rollout_percentage=30)
        )

        created = await service.create(
            super_admin,
            _request(T.feature_flag_sync, "feature_flags", [source.id], parameters={"target_environment": "production"}),
        )
        assert created.operation.results[0]["result_data"]["action"] == "created"
        synced = await flags.get_by_key("new_board", "production")
        assert synced.is_enabled is True
        assert synced.rollout_percentage == 30
        assert synced.created_by == super_admin.id

        same = await service.create(
            super_admin,
            _request(T.feature_flag_sync, "feature_flags", [source.id], parameters={"target_environment": "staging"}),
        )
        assert same.operation.results[0]["error_message"] == "Feature flag is already in staging"


class TestCancelAndQueries:
    async def test_cancel_pending(self, service, super_admin, make_client):
        client = await make_client()
        created = await service.create(
            super_admin, _request(T.suspend_clients, "clients", [client.id], dry_run=True)
        )

        cancelled = await service.cancel(created.operation.id, super_admin)

        assert cancelled.status == "cancelled"
        assert cancelled.error_message == "Operation cancelled by admin"
        assert cancelled.completed_at is not None

    async def test_cannot_cancel_finished(self, service, super_admin, make_client):
        client = await make_client()
        created = await service.create(super_admin, _request(T.suspend_clients, "clients", [client.id]))

        with pytest.raises(OperationNotAllowedError, match="Operation cannot be cancelled in current status"):
            await service.cancel(created.operation.id, super_admin, "Too late")

    async def test_list_and_statistics(self, service, super_admin, make_client):
        client_id = (await make_client()).id
        await service.create(super_admin, _request(T.suspend_clients, "clients", [client_id]))
        await service.create(super_admin, _request(T.suspend_clients, "clients", [client_id]))
        await service.create(super_admin, _request(T.reactivate_clients, "clients", [client_id], dry_run=True))

        listed = await service.list_operations(operation_type="suspend_clients")
        assert listed.pagination.total == 2
        assert listed.summary.by_status == {"completed": 1, "failed": 1}
        assert listed.summary.success_rate == 50

        everything = await service.statistics()
        assert everything.total_operations == 3
        assert everything.by_target_type == {"clients": 3}
        assert everything.average_completion_minutes is not None

    async def test_supported_operations(self, service):
        capabilities = service.supported_operations()
        by_type = {item.operation_type: item for item in capabilities.operations}

        assert len(by_type) == len(BulkOperationType)
        assert by_type["suspend_clients"].supported is True
        assert by_type["reset_passwords"].supported is False
        assert by_type["client_migration"].estimated_seconds_per_item == 5.0
        assert by_type["update_user_roles"].required_parameters == ["new_role"]
        assert capabilities.max_targets_per_operation == settings.bulk_operations.max_targets_per_operation


async def test_process_logs_bulk_metrics(service, super_admin, make_client):
    client = await make_client()

    with patch("focusprint.server.services.bulk_operations.log_bulk_operation") as mock_log:
        await service.create(super_admin, _request(T.suspend_clients, "clients", [client.id]))

    statuses = [call.args[2] for call in mock_log.call_args_list]
    assert statuses == ["pending", "running", "completed"]
    assert mock_log.call_args_list[-1].kwargs == {"total": 1, "successful": 1, "failed": 0}
