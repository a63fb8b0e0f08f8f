"""Shared I/O models."""

from __future__ import annotations

import math
from typing import Any

from pydantic import BaseModel, Field


class Pagination(BaseModel):
    """Page metadata returned by list endpoints."""

    page: int = Field(description="1-based page number")
    limit: int = Field(description="Page size")
    total: int = Field(description="Total number of matching records")
    totalPages: int = Field(description="Number of pages for the given limit")

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        return cls(page=page, limit=limit, total=total, totalPages=math.ceil(total / limit) if limit else 0)


def reject_null(value: Any) -> Any:
    """Field validator body for partial updates of columns that cannot be cleared."""
    if value is None:
        raise ValueError("Field cannot be null")
    return value
