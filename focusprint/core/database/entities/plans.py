"""
Plan entity models.

Plans define the price, features and usage limits that licenses copy when a
client subscribes.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from sqlmodel import JSON, Field

from ..base import Base, new_id, utc_now


class Plan(Base, table=True):
    """Entity for subscription plans.

    ``limits`` holds ``max_users`` and ``max_projects``; ``-1`` means unlimited.

    Table: plans
    """

    __tablename__ = "plans"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    code: str = Field(max_length=20, unique=True, index=True)
    name: str = Field(max_length=100)
    description: str = Field(default="", max_length=500)
    price: float = Field(default=0.0)
    currency: str = Field(default="BRL", max_length=3)
    interval: str = Field(default="month", max_length=8)
    trial_days: int = Field(default=0)
    features: Dict[str, bool] = Field(default_factory=dict, sa_type=JSON)
    limits: Dict[str, Any] = Field(default_factory=dict, sa_type=JSON)
    is_active: bool = Field(default=True)

    # Promotions
    is_promotional: bool = Field(default=False)
    promo_start_date: Optional[datetime] = Field(default=None)
    promo_end_date: Optional[datetime] = Field(default=None)

    version: int = Field(default=1)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    def __repr__(self) -> str:
        return f"Plan(id={self.id}, code={self.code}, price={self.price})"
