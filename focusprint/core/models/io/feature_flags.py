"""
Feature flag I/O models for API requests and responses.

This module contains the schemas for managing feature flags, their per-client
overrides and change history, and for evaluating a flag against a context.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..domain.enums import (
    ConditionOperator,
    EvaluationReason,
    FeatureFlagBulkAction,
    FeatureFlagCategory,
    FeatureFlagEnvironment,
    FeatureFlagStatus,
    FeatureFlagTargetAudience,
    FeatureFlagType,
)
from .common import Pagination, reject_null


class FlagCondition(BaseModel):
    """Targeting rule compared against one field of the evaluation context."""

    field: str = Field(description="Context field, e.g. 'plan_type', or a key of 'attributes'")
    operator: ConditionOperator
    value: Any = None
    description: Optional[str] = None


class FeatureFlagRead(BaseModel):
    """Schema for reading a feature flag from API."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    key: str
    name: str
    description: Optional[str] = None
    flag_type: str
    environment: str
    status: str
    category: str
    target_audience: str
    is_enabled: bool
    default_value: Any = None
    current_value: Any = None
    rollout_percentage: int
    conditions: List[Dict[str, Any]] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    created_by: Optional[str] = None
    updated_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class FeatureFlagCreate(BaseModel):
    """Schema for creating a feature flag via API."""

    key: str = Field(pattern=r"^[a-z0-9_.-]+$", min_length=1, max_length=100, description="Unique per environment")
    name: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None
    flag_type: FeatureFlagType = FeatureFlagType.boolean
    environment: FeatureFlagEnvironment = FeatureFlagEnvironment.all
    status: FeatureFlagStatus = FeatureFlagStatus.active
    category: FeatureFlagCategory = FeatureFlagCategory.experimental
    target_audience: FeatureFlagTargetAudience = FeatureFlagTargetAudience.all_users
    is_enabled: bool = False
    default_value: Any = False
    current_value: Any = True
    rollout_percentage: int = Field(default=100, ge=0, le=100)
    conditions: List[FlagCondition] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)


class FeatureFlagUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    status: Optional[FeatureFlagStatus] = None
    category: Optional[FeatureFlagCategory] = None
    target_audience: Optional[FeatureFlagTargetAudience] = None
    is_enabled: Optional[bool] = None
    default_value: Any = None
    current_value: Any = None
    rollout_percentage: Optional[int] = Field(default=None, ge=0, le=100)
    conditions: Optional[List[FlagCondition]] = None
    tags: Optional[List[str]] = None
    reason: Optional[str] = Field(default=None, max_length=500)

    @field_validator(
        "name", "status", "category", "target_audience", "is_enabled", "rollout_percentage", "conditions", "tags"
    )
    @classmethod
    def not_null(cls, value):
        return reject_null(value)


class FeatureFlagToggle(BaseModel):
    enabled: Optional[bool] = Field(default=None, description="Target state; flips the flag when omitted")
    reason: Optional[str] = Field(default=None, max_length=500)


class FeatureFlagBulkRequest(BaseModel):
    action: FeatureFlagBulkAction
    flag_ids: List[str] = Field(min_length=1)
    reason: Optional[str] = Field(default=None, max_length=500)


class FeatureFlagBulkFailure(BaseModel):
    flag_id: str
    error: str


class FeatureFlagBulkResult(BaseModel):
    action: str
    processed: int
    successful: List[str]
    failed: List[FeatureFlagBulkFailure]


class FeatureFlagListResponse(BaseModel):
    flags: List[FeatureFlagRead]
    pagination: Pagination


class EvaluationContext(BaseModel):
    """Who a flag is evaluated for."""

    client_id: Optional[str] = None
    user_id: Optional[str] = None
    plan_type: Optional[str] = None
    attributes: Dict[str, Any] = Field(default_factory=dict)


class FeatureFlagEvaluateRequest(BaseModel):
    key: str
    environment: FeatureFlagEnvironment = FeatureFlagEnvironment.production
    context: EvaluationContext = Field(default_factory=EvaluationContext)


class FeatureFlagEvaluation(BaseModel):
    flag_key: str
    value: Any = None
    is_enabled: bool
    reason: EvaluationReason
    matched_condition: Optional[Dict[str, Any]] = None
    rollout_bucket: Optional[int] = None
    evaluated_at: datetime


class FeatureFlagOverrideRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    flag_id: str
    client_id: str
    value: Any = None
    reason: Optional[str] = None
    expires_at: Optional[datetime] = None
    created_by: Optional[str] = None
    created_at: datetime


class FeatureFlagOverrideCreate(BaseModel):
    client_id: str
    value: Any = True
    reason: Optional[str] = Field(default=None, max_length=500)
    expires_at: Optional[datetime] = None


class FeatureFlagHistoryRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    flag_id: str
    action: str
    changes: Dict[str, Any]
    changed_by: Optional[str] = None
    reason: Optional[str] = None
    created_at: datetime


class FeatureFlagDetail(BaseModel):
    flag: FeatureFlagRead
    overrides: List[FeatureFlagOverrideRead]
    history: List[FeatureFlagHistoryRead]


class FeatureFlagSummary(BaseModel):
    total: int
    enabled: int
    by_status: Dict[str, int]
    by_type: Dict[str, int]
    by_environment: Dict[str, int]
    by_category: Dict[str, int]
