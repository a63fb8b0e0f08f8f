"""
Bulk operation entity models.

The progress record and per-target results are stored as JSON on the
operation row and rewritten after every processed batch.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlmodel import JSON, Field

from ..base import Base, new_id, utc_now


class BulkOperation(Base, table=True):
    """Entity for admin batch actions.

    Table: bulk_operations
    """

    __tablename__ = "bulk_operations"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    operation_type: str = Field(max_length=64, index=True)
    target_type: str = Field(max_length=32, index=True)
    target_ids: List[str] = Field(default_factory=list, sa_type=JSON)
    parameters: Dict[str, Any] = Field(default_factory=dict, sa_type=JSON)
    reason: Optional[str] = Field(default=None)
    dry_run: bool = Field(default=False)

    status: str = Field(default="pending", max_length=32, index=True)
    progress: Dict[str, Any] = Field(default_factory=dict, sa_type=JSON)
    results: List[Dict[str, Any]] = Field(default_factory=list, sa_type=JSON)
    error_message: Optional[str] = Field(default=None)
    operation_metadata: Dict[str, Any] = Field(default_factory=dict, sa_type=JSON)

    created_by: str = Field(max_length=64, index=True)
    created_by_name: Optional[str] = Field(default=None, max_length=255)
    created_at: datetime = Field(default_factory=utc_now, index=True)
    started_at: Optional[datetime] = Field(default=None)
    completed_at: Optional[datetime] = Field(default=None)

    def __repr__(self) -> str:
        return f"BulkOperation(id={self.id}, type={self.operation_type}, status={self.status})"
