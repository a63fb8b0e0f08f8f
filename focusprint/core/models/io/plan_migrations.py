"""Plan migration I/O models."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .clients import ClientRead


class PlanMigrationRequest(BaseModel):
    """Schema for validating or executing a client plan migration."""

    target_plan_id: str
    migration_reason: Optional[str] = Field(default=None, max_length=500)
    effective_date: Optional[datetime] = None
    force_migration: bool = Field(default=False, description="Execute even when blockers are reported")


class LimitChange(BaseModel):
    from_: Any = Field(default=None, serialization_alias="from")
    to: Any = None


class FeatureChanges(BaseModel):
    gained_features: List[str] = Field(default_factory=list)
    lost_features: List[str] = Field(default_factory=list)
    limit_changes: Dict[str, LimitChange] = Field(default_factory=dict)


class MigrationValidation(BaseModel):
    """Result of checking whether a client can move to a target plan."""

    is_valid: bool
    migration_type: str
    blockers: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    feature_changes: FeatureChanges = Field(default_factory=FeatureChanges)
    proration_estimate: float = 0.0
    current_plan: Optional[str] = None
    target_plan: str


class PlanMigrationRead(BaseModel):
    """Schema for reading a plan migration record from API."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    client_id: str
    from_plan_id: Optional[str] = None
    to_plan_id: str
    from_plan_type: Optional[str] = None
    to_plan_type: str
    migration_type: str
    migration_reason: Optional[str] = None
    effective_date: datetime
    proration_amount: float
    proration_currency: str
    status: str
    error_message: Optional[str] = None
    created_by: Optional[str] = None
    created_at: datetime
    completed_at: Optional[datetime] = None


class MigrationExecution(BaseModel):
    migration: PlanMigrationRead
    client: ClientRead
    validation: MigrationValidation
