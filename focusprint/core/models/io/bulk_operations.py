"""
Bulk operation I/O models for API requests and responses.

A bulk operation applies one action to a list of target IDs. The request is
validated per target before anything runs; progress and per-target results
are reported on the operation itself.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..domain.enums import BulkOperationType, BulkTargetType
from .common import Pagination


class BulkOperationRequest(BaseModel):
    """Schema for starting a bulk operation via API."""

    operation_type: BulkOperationType
    target_type: BulkTargetType
    target_ids: List[str] = Field(default_factory=list)
    parameters: Dict[str, Any] = Field(default_factory=dict, description="Operation-specific parameters")
    reason: Optional[str] = Field(default=None, max_length=1000)
    dry_run: bool = Field(default=False, description="Validate and record without processing")
    batch_size: Optional[int] = Field(default=None, ge=1, le=500)


class BulkOperationProgress(BaseModel):
    total_items: int = 0
    processed_items: int = 0
    successful_items: int = 0
    failed_items: int = 0
    percentage_complete: float = 0.0
    current_item: Optional[str] = None
    stage: str = "initializing"


class TargetValidation(BaseModel):
    target_id: str
    is_valid: bool
    can_proceed: bool
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)


class BulkOperationRead(BaseModel):
    """Schema for reading a bulk operation from API."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    operation_type: str
    target_type: str
    target_ids: List[str]
    parameters: Dict[str, Any]
    reason: Optional[str] = None
    dry_run: bool
    status: str
    progress: BulkOperationProgress
    results: List[Dict[str, Any]]
    error_message: Optional[str] = None
    created_by: str
    created_by_name: Optional[str] = None
    created_at: datetime
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None


class BulkOperationCreated(BaseModel):
    operation: BulkOperationRead
    validation_results: List[TargetValidation]
    estimated_duration_seconds: int
    warnings: List[str] = Field(default_factory=list)


class BulkOperationSummary(BaseModel):
    total_operations: int
    by_status: Dict[str, int]
    by_type: Dict[str, int]
    by_target_type: Dict[str, int]
    average_completion_minutes: Optional[float] = None
    success_rate: float = Field(description="Percentage of finished operations that completed")


class BulkOperationListResponse(BaseModel):
    operations: List[BulkOperationRead]
    pagination: Pagination
    summary: BulkOperationSummary


class BulkOperationCapability(BaseModel):
    operation_type: str
    target_type: str
    description: str
    required_permissions: List[str]
    required_parameters: List[str] = Field(default_factory=list)
    supported: bool = Field(description="Whether a handler processes this type")
    estimated_seconds_per_item: float


class BulkOperationCapabilities(BaseModel):
    operations: List[BulkOperationCapability]
    max_targets_per_operation: int
    max_concurrent_operations: int
    default_batch_size: int
