"""
License and trial I/O models for API requests and responses.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..domain.enums import LicenseStatus
from .common import Pagination, reject_null


class LicenseRead(BaseModel):
    """Schema for reading a license from API."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    client_id: str
    plan_id: Optional[str] = None
    plan_type: str
    status: str
    start_date: datetime
    end_date: Optional[datetime] = None
    trial_ends_at: Optional[datetime] = None
    max_users: int
    max_projects: int
    metadata: Dict[str, Any] = Field(default_factory=dict, validation_alias="license_metadata")
    created_at: datetime
    updated_at: datetime


class LicenseCreate(BaseModel):
    """Schema for creating a license via API."""

    client_id: str
    plan_code: str = Field(description="Code of the plan whose limits the license copies")
    status: LicenseStatus = LicenseStatus.trial
    start_date: Optional[datetime] = Field(default=None, description="Defaults to now")
    end_date: Optional[datetime] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)


class LicenseUpdate(BaseModel):
    status: Optional[LicenseStatus] = None
    end_date: Optional[datetime] = None
    trial_ends_at: Optional[datetime] = None
    max_users: Optional[int] = Field(default=None, ge=-1)
    max_projects: Optional[int] = Field(default=None, ge=-1)
    metadata: Optional[Dict[str, Any]] = None

    @field_validator("status", "max_users", "max_projects", "metadata")
    @classmethod
    def not_null(cls, value):
        return reject_null(value)


class LicenseSuspend(BaseModel):
    reason: str = Field(min_length=1, max_length=500)


class LicenseExtendTrial(BaseModel):
    days: int = Field(default=30, ge=1, le=365)


class LicenseChangePlan(BaseModel):
    plan_code: str


class LicenseListResponse(BaseModel):
    licenses: List[LicenseRead]
    pagination: Pagination


class LicenseStats(BaseModel):
    total: int
    by_status: Dict[str, int]
    by_plan_type: Dict[str, int]


# Trials


class ExpiredTrial(BaseModel):
    license_id: str
    client_id: str
    trial_ends_at: Optional[datetime] = None


class TrialExpirationFailure(BaseModel):
    license_id: str
    error: str


class TrialExpirationResult(BaseModel):
    """Outcome of one automatic trial expiration sweep."""

    expired_count: int
    expired_licenses: List[ExpiredTrial]
    errors: List[TrialExpirationFailure]


class TrialStats(BaseModel):
    total: int = Field(description="Licenses that are or were on trial")
    active: int = Field(description="Licenses currently on trial")
    expired: int = Field(description="Licenses whose trial was expired")
    overdue: int = Field(description="Licenses still on trial past their end date, awaiting expiration")
    expiring_soon: int
    conversion_rate: float = Field(description="Percentage of trial licenses now active")


class TrialOverview(BaseModel):
    stats: TrialStats
    expiring_soon: List[LicenseRead]
