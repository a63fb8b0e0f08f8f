"""Plan I/O models."""

from __future__ import annotations

from datetime import datetime
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..domain.enums import BillingInterval
from .common import reject_null


class PlanLimits(BaseModel):
    """Usage limits of a plan. ``-1`` means unlimited."""

    max_users: int = Field(default=5, ge=-1)
    max_projects: int = Field(default=3, ge=-1)


class PlanRead(BaseModel):
    """Schema for reading a plan from API."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    code: str
    name: str
    description: str
    price: float
    currency: str
    interval: str
    trial_days: int
    features: Dict[str, bool]
    limits: Dict[str, int]
    is_active: bool
    is_promotional: bool
    promo_start_date: Optional[datetime] = None
    promo_end_date: Optional[datetime] = None
    version: int
    created_at: datetime
    updated_at: datetime


class PlanCreate(BaseModel):
    """Schema for creating a plan via API."""

    code: str = Field(pattern=r"^[a-z_]+$", min_length=1, max_length=20, description="Lowercase letters and underscores")
    name: str = Field(min_length=1, max_length=100)
    description: str = Field(default="", max_length=500)
    price: float = Field(default=0.0, ge=0)
    currency: str = Field(default="BRL", min_length=3, max_length=3)
    interval: BillingInterval = BillingInterval.month
    trial_days: int = Field(default=0, ge=0, le=365)
    features: Dict[str, bool] = Field(default_factory=dict)
    limits: PlanLimits = Field(default_factory=PlanLimits)
    is_active: bool = True
    is_promotional: bool = False
    promo_start_date: Optional[datetime] = None
    promo_end_date: Optional[datetime] = None


class PlanUpdate(BaseModel):
    """Schema for updating a plan via API. Every accepted change bumps ``version``."""

    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    price: Optional[float] = Field(default=None, ge=0)
    currency: Optional[str] = Field(default=None, min_length=3, max_length=3)
    interval: Optional[BillingInterval] = None
    trial_days: Optional[int] = Field(default=None, ge=0, le=365)
    features: Optional[Dict[str, bool]] = None
    limits: Optional[PlanLimits] = None
    is_promotional: Optional[bool] = None
    promo_start_date: Optional[datetime] = None
    promo_end_date: Optional[datetime] = None

    @field_validator(
        "name", "description", "price", "currency", "interval", "trial_days", "features", "limits", "is_promotional"
    )
    @classmethod
    def not_null(cls, value):
        return reject_null(value)
