"""
API endpoints for bulk operations.

Every route requires system_config. Starting an operation additionally
requires the permissions of the operation type itself.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from focusprint.core.database.entities.admin_profiles import AdminProfile
from focusprint.core.errors import AuthorizationError
from focusprint.core.models.domain.enums import AdminPermission
from focusprint.core.models.io.bulk_operations import (
    BulkOperationCapabilities,
    BulkOperationCreated,
    BulkOperationListResponse,
    BulkOperationRead,
    BulkOperationRequest,
)
from focusprint.server.services.bulk_operations import required_permissions
from focusprint.server.services.deps import BulkOperationServiceDep, require_permission
from focusprint.server.services.rbac import has_all_permissions

router = APIRouter(tags=["bulk-operations"])

system_config = require_permission(AdminPermission.system_config)


@router.get(
    "",
    response_model=BulkOperationListResponse,
    summary="List Bulk Operations",
    description="Paginated bulk operations, newest first, with a summary of the matching operations.",
)
async def list_bulk_operations(
    service: BulkOperationServiceDep,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    status_filter: Optional[str] = Query(None, alias="status"),
    operation_type: Optional[str] = Query(None),
    target_type: Optional[str] = Query(None),
    created_by: Optional[str] = Query(None),
    _: AdminProfile = Depends(system_config),
) -> BulkOperationListResponse:
    return await service.list_operations(
        page=page,
        limit=limit,
        status=status_filter,
        operation_type=operation_type,
        target_type=target_type,
        created_by=created_by,
    )


@router.post(
    "",
    response_model=BulkOperationCreated,
    status_code=status.HTTP_201_CREATED,
    summary="Start Bulk Operation",
    description="Validate every target, then process the operation unless it is a dry run.",
    responses={
        201: {"description": "Operation stored, and processed unless dry_run"},
        400: {"description": "Bulk operation validation failed"},
        403: {"description": "Missing a permission required by the operation type"},
        429: {"description": "Maximum concurrent operations reached"},
    },
)
async def create_bulk_operation(
    data: BulkOperationRequest,
    service: BulkOperationServiceDep,
    admin: AdminProfile = Depends(system_config),
) -> BulkOperationCreated:
    """
    Start a bulk operation.

    - **operation_type**: One of the types listed by `/capabilities`.
    - **target_ids**: 1 to 1000 IDs of the target type.
    - **parameters**: Operation-specific values such as `new_plan` or `extension_days`.
    - **dry_run**: Validate and store the operation without processing it.
    - **batch_size**: Targets per progress update, defaults to 50.
    """
    check = has_all_permissions(admin, required_permissions(data.operation_type))
    if not check.allowed:
        raise AuthorizationError(check.reason or "Insufficient permissions")
    return await service.create(admin, data)


@router.get(
    "/capabilities",
    response_model=BulkOperationCapabilities,
    summary="Bulk Operation Capabilities",
    description="Every operation type with its target type, permissions, parameters and processing estimate.",
)
async def bulk_capabilities(
    service: BulkOperationServiceDep, _: AdminProfile = Depends(system_config)
) -> BulkOperationCapabilities:
    return service.supported_operations()


@router.get(
    "/{operation_id}",
    response_model=BulkOperationRead,
    summary="Get Bulk Operation",
    description="An operation with its progress and per-target results.",
    responses={200: {"description": "Operation found"}, 404: {"description": "Bulk operation not found"}},
)
async def get_bulk_operation(
    operation_id: str, service: BulkOperationServiceDep, _: AdminProfile = Depends(system_config)
) -> BulkOperationRead:
    return BulkOperationRead.model_validate(await service.get_operation(operation_id))


@router.delete(
    "/{operation_id}",
    response_model=BulkOperationRead,
    summary="Cancel Bulk Operation",
    description="Cancel a pending or running operation.",
    responses={
        200: {"description": "Operation cancelled"},
        400: {"description": "Operation cannot be cancelled in current status"},
        404: {"description": "Bulk operation not found"},
    },
)
async def cancel_bulk_operation(
    operation_id: str,
    service: BulkOperationServiceDep,
    reason: Optional[str] = Query(None, max_length=500),
    admin: AdminProfile = Depends(system_config),
) -> BulkOperationRead:
    return BulkOperationRead.model_validate(await service.cancel(operation_id, admin, reason))
