"""
Client workspace I/O models: teams, projects, kanban columns, tasks and
project chat messages.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..domain.enums import ArchiveCategory, ProjectStatus, TaskPriority
from .common import reject_null


class TeamRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    client_id: str
    name: str
    description: Optional[str] = None
    color: str
    is_archived: bool
    created_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class TeamCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    color: str = Field(default="#3B82F6", max_length=16)


class TeamUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    color: Optional[str] = Field(default=None, max_length=16)
    is_archived: Optional[bool] = None

    @field_validator("name", "color", "is_archived")
    @classmethod
    def not_null(cls, value):
        return reject_null(value)


class ProjectRead(BaseModel):
    """Schema for reading a project from API."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    client_id: str
    team_id: str
    name: str
    description: Optional[str] = None
    status: str
    priority: str
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    created_by: Optional[str] = None
    archived_at: Optional[datetime] = None
    archived_by: Optional[str] = None
    archive_reason: Optional[str] = None
    archive_category: Optional[str] = None
    deleted_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class ProjectCreate(BaseModel):
    team_id: str
    name: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None
    status: ProjectStatus = ProjectStatus.planning
    priority: TaskPriority = TaskPriority.medium
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


class ProjectUpdate(BaseModel):
    team_id: Optional[str] = None
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    status: Optional[ProjectStatus] = None
    priority: Optional[TaskPriority] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

    @field_validator("team_id", "name", "status", "priority")
    @classmethod
    def not_null(cls, value):
        return reject_null(value)


class ProjectArchive(BaseModel):
    reason: Optional[str] = Field(default=None, max_length=500)
    archive_category: ArchiveCategory = ArchiveCategory.general


class ProjectBulkArchive(BaseModel):
    project_ids: List[str] = Field(min_length=1, max_length=50)
    reason: str = Field(min_length=1, max_length=500)
    archive_category: ArchiveCategory = ArchiveCategory.bulk


class ProjectBulkArchiveResult(BaseModel):
    archived_projects: List[ProjectRead]
    summary: Dict[str, Any]


class ColumnRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    project_id: str
    name: str
    color: str
    position: int
    wip_limit: Optional[int] = None
    created_at: datetime
    updated_at: datetime


class ColumnCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    color: str = Field(default="#6B7280", max_length=16)
    wip_limit: Optional[int] = Field(default=None, ge=1)


class ColumnUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    color: Optional[str] = Field(default=None, max_length=16)
    wip_limit: Optional[int] = Field(default=None, ge=1)

    @field_validator("name", "color")
    @classmethod
    def not_null(cls, value):
        return reject_null(value)


class ColumnReorder(BaseModel):
    column_ids: List[str] = Field(min_length=1, description="Every column of the project in the new order")


class TaskRead(BaseModel):
    """Schema for reading a task from API."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    project_id: str
    column_id: str
    title: str
    description: str
    priority: str
    due_date: Optional[datetime] = None
    estimated_hours: Optional[float] = None
    actual_hours: Optional[float] = None
    assigned_to: Optional[str] = None
    position: int
    created_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class TaskCreate(BaseModel):
    """Schema for creating a task.

    ``project_id``, ``column_id`` and ``title`` are checked by the service so a
    missing one yields the documented error message.
    """

    project_id: Optional[str] = None
    column_id: Optional[str] = None
    title: Optional[str] = Field(default=None, max_length=200)
    description: str = ""
    priority: TaskPriority = TaskPriority.medium
    due_date: Optional[datetime] = None
    estimated_hours: Optional[float] = Field(default=None, ge=0)
    assigned_to: Optional[str] = None
    position: Optional[int] = Field(default=None, ge=1)


class TaskUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    priority: Optional[TaskPriority] = None
    due_date: Optional[datetime] = None
    estimated_hours: Optional[float] = Field(default=None, ge=0)
    actual_hours: Optional[float] = Field(default=None, ge=0)
    assigned_to: Optional[str] = None

    @field_validator("title", "description", "priority")
    @classmethod
    def not_null(cls, value):
        return reject_null(value)


class TaskMove(BaseModel):
    column_id: Optional[str] = None
    position: Optional[int] = Field(default=None, ge=1)


class MessageRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    project_id: str
    user_id: str
    user_name: Optional[str] = None
    content: str
    edited_at: Optional[datetime] = None
    created_at: datetime


class MessageCreate(BaseModel):
    content: str = Field(min_length=1, max_length=5000)


class MessageUpdate(BaseModel):
    content: str = Field(min_length=1, max_length=5000)
