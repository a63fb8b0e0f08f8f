"""
Client workspace entity models.

Teams group projects inside a client organisation. Each project owns its
kanban columns, tasks and chat messages.
"""

from datetime import datetime
from typing import Optional

from sqlmodel import Field

from ..base import Base, new_id, utc_now


class Team(Base, table=True):
    """Table: teams"""

    __tablename__ = "teams"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    client_id: str = Field(foreign_key="clients.id", max_length=64, index=True)
    name: str = Field(max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    color: str = Field(default="#3B82F6", max_length=16)
    is_archived: bool = Field(default=False)
    created_by: Optional[str] = Field(default=None, max_length=64)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class Project(Base, table=True):
    """Table: projects"""

    __tablename__ = "projects"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    client_id: str = Field(foreign_key="clients.id", max_length=64, index=True)
    team_id: str = Field(foreign_key="teams.id", max_length=64, index=True)
    name: str = Field(max_length=200)
    description: Optional[str] = Field(default=None)
    status: str = Field(default="planning", max_length=16, index=True)
    priority: str = Field(default="medium", max_length=16)
    start_date: Optional[datetime] = Field(default=None)
    end_date: Optional[datetime] = Field(default=None)
    created_by: Optional[str] = Field(default=None, max_length=64)

    # Archiving and soft deletion
    archived_at: Optional[datetime] = Field(default=None)
    archived_by: Optional[str] = Field(default=None, max_length=64)
    archive_reason: Optional[str] = Field(default=None, max_length=500)
    archive_category: Optional[str] = Field(default=None, max_length=16)
    deleted_at: Optional[datetime] = Field(default=None)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class KanbanColumn(Base, table=True):
    """Table: kanban_columns"""

    __tablename__ = "kanban_columns"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    project_id: str = Field(foreign_key="projects.id", max_length=64, index=True)
    name: str = Field(max_length=100)
    color: str = Field(default="#6B7280", max_length=16)
    position: int = Field(default=1)
    wip_limit: Optional[int] = Field(default=None)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class Task(Base, table=True):
    """Table: tasks"""

    __tablename__ = "tasks"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    project_id: str = Field(foreign_key="projects.id", max_length=64, index=True)
    column_id: str = Field(foreign_key="kanban_columns.id", max_length=64, index=True)
    title: str = Field(max_length=200)
    description: str = Field(default="")
    priority: str = Field(default="medium", max_length=16)
    due_date: Optional[datetime] = Field(default=None)
    estimated_hours: Optional[float] = Field(default=None)
    actual_hours: Optional[float] = Field(default=None)
    assigned_to: Optional[str] = Field(default=None, max_length=64)
    position: int = Field(default=1)
    created_by: Optional[str] = Field(default=None, max_length=64)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class ProjectMessage(Base, table=True):
    """Table: project_messages"""

    __tablename__ = "project_messages"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    project_id: str = Field(foreign_key="projects.id", max_length=64, index=True)
    user_id: str = Field(max_length=64)
    user_name: Optional[str] = Field(default=None, max_length=255)
    content: str
    edited_at: Optional[datetime] = Field(default=None)
    created_at: datetime = Field(default_factory=utc_now, index=True)
