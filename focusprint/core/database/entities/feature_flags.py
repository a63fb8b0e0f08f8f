"""
Feature flag entity models.

This module contains the feature flag itself, per-client overrides and the
append-only change history of each flag.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import JSON, Field

from ..base import Base, new_id, utc_now


class FeatureFlag(Base, table=True):
    """Entity for feature flags.

    A key is unique within an environment.

    Table: feature_flags
    """

    __tablename__ = "feature_flags"
    __table_args__ = (UniqueConstraint("key", "environment", name="uq_feature_flags_key_environment"),)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    key: str = Field(max_length=100, index=True)
    name: str = Field(max_length=200)
    description: Optional[str] = Field(default=None)
    flag_type: str = Field(default="boolean", max_length=16)
    environment: str = Field(default="all", max_length=16, index=True)
    status: str = Field(default="active", max_length=16, index=True)
    category: str = Field(default="experimental", max_length=32)
    target_audience: str = Field(default="all_users", max_length=32)

    is_enabled: bool = Field(default=False)
    default_value: Any = Field(default=None, sa_type=JSON)
    current_value: Any = Field(default=None, sa_type=JSON)
    rollout_percentage: int = Field(default=100)
    conditions: List[Dict[str, Any]] = Field(default_factory=list, sa_type=JSON)
    tags: List[str] = Field(default_factory=list, sa_type=JSON)

    created_by: Optional[str] = Field(default=None, max_length=64)
    updated_by: Optional[str] = Field(default=None, max_length=64)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    def __repr__(self) -> str:
        return f"FeatureFlag(key={self.key}, environment={self.environment}, enabled={self.is_enabled})"


class FeatureFlagOverride(Base, table=True):
    """Per-client value that wins over conditions and rollout until it expires.

    Table: feature_flag_overrides
    """

    __tablename__ = "feature_flag_overrides"
    __table_args__ = (UniqueConstraint("flag_id", "client_id", name="uq_feature_flag_overrides_flag_client"),)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    flag_id: str = Field(foreign_key="feature_flags.id", max_length=64, index=True)
    client_id: str = Field(max_length=64, index=True)
    value: Any = Field(default=None, sa_type=JSON)
    reason: Optional[str] = Field(default=None)
    expires_at: Optional[datetime] = Field(default=None)
    created_by: Optional[str] = Field(default=None, max_length=64)
    created_at: datetime = Field(default_factory=utc_now)


class FeatureFlagHistory(Base, table=True):
    """Change history of a feature flag.

    Table: feature_flag_history
    """

    __tablename__ = "feature_flag_history"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    flag_id: str = Field(max_length=64, index=True)
    action: str = Field(max_length=32)
    changes: Dict[str, Any] = Field(default_factory=dict, sa_type=JSON)
    changed_by: Optional[str] = Field(default=None, max_length=64)
    reason: Optional[str] = Field(default=None)
    created_at: datetime = Field(default_factory=utc_now)
