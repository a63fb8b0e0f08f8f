"""
Client API endpoints for projects and their boards.

Routes nested under a project cover its kanban columns, its tasks and its
chat messages. Archived and soft-deleted projects can be restored.
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Query, status

from focusprint.core.models.io.workspace import (
    ColumnCreate,
    ColumnRead,
    ColumnReorder,
    MessageCreate,
    MessageRead,
    ProjectArchive,
    ProjectBulkArchive,
    ProjectBulkArchiveResult,
    ProjectCreate,
    ProjectRead,
    ProjectUpdate,
    TaskRead,
)
from focusprint.server.services.deps import WorkspaceServiceDep

router = APIRouter(tags=["projects"])


@router.get(
    "",
    response_model=List[ProjectRead],
    summary="List Projects",
    description="Live projects of the client. Archived projects are included or returned alone on request.",
)
async def list_projects(
    workspace: WorkspaceServiceDep,
    team_id: Optional[str] = Query(None),
    include_archived: bool = Query(False),
    archived_only: bool = Query(False),
) -> List[ProjectRead]:
    projects = await workspace.list_projects(
        team_id=team_id,
        include_archived=include_archived,
        archived_only=archived_only,
    )
    return [ProjectRead.model_validate(p) for p in projects]


@router.get("/deleted", response_model=List[ProjectRead], summary="List Deleted Projects")
async def list_deleted_projects(workspace: WorkspaceServiceDep) -> List[ProjectRead]:
    return [ProjectRead.model_validate(p) for p in await workspace.list_projects(deleted_only=True)]


@router.post(
    "",
    response_model=ProjectRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create Project",
    responses={
        201: {"description": "Project created with the default board columns"},
        400: {"description": "Project limit reached"},
        404: {"description": "Team not found"},
    },
)
async def create_project(data: ProjectCreate, workspace: WorkspaceServiceDep) -> ProjectRead:
    """
    Create a project.

    - **team_id**: Team of the same client owning the project.
    - **name**: 1 to 200 characters.

    The board starts with To Do, In Progress, Review and Done columns.
    """
    return ProjectRead.model_validate(await workspace.create_project(data))


@router.post(
    "/bulk-archive",
    response_model=ProjectBulkArchiveResult,
    summary="Archive Projects",
    description="Archive up to 50 projects at once. Nothing is archived if any project is missing or archived.",
)
async def bulk_archive_projects(data: ProjectBulkArchive, workspace: WorkspaceServiceDep) -> ProjectBulkArchiveResult:
    return await workspace.bulk_archive_projects(data)


@router.get(
    "/{project_id}",
    response_model=ProjectRead,
    summary="Get Project",
    responses={200: {"description": "Project found"}, 404: {"description": "Project not found"}},
)
async def get_project(project_id: str, workspace: WorkspaceServiceDep) -> ProjectRead:
    return ProjectRead.model_validate(await workspace.get_project(project_id))


@router.patch("/{project_id}", response_model=ProjectRead, summary="Update Project")
async def update_project(project_id: str, data: ProjectUpdate, workspace: WorkspaceServiceDep) -> ProjectRead:
    return ProjectRead.model_validate(await workspace.update_project(project_id, data))


@router.delete(
    "/{project_id}",
    response_model=ProjectRead,
    summary="Delete Project",
    description="Soft delete a project. It stays restorable from the deleted list.",
)
async def delete_project(project_id: str, workspace: WorkspaceServiceDep) -> ProjectRead:
    return ProjectRead.model_validate(await workspace.delete_project(project_id))


@router.post("/{project_id}/archive", response_model=ProjectRead, summary="Archive Project")
async def archive_project(
    project_id: str,
    workspace: WorkspaceServiceDep,
    data: Optional[ProjectArchive] = None,
) -> ProjectRead:
    return ProjectRead.model_validate(await workspace.archive_project(project_id, data or ProjectArchive()))


@router.post(
    "/{project_id}/restore",
    response_model=ProjectRead,
    summary="Restore Project",
    description="Bring back an archived or deleted project, subject to the plan's project limit.",
)
async def restore_project(project_id: str, workspace: WorkspaceServiceDep) -> ProjectRead:
    return ProjectRead.model_validate(await workspace.restore_project(project_id))


# Board


@router.get("/{project_id}/columns", response_model=List[ColumnRead], summary="List Columns")
async def list_columns(project_id: str, workspace: WorkspaceServiceDep) -> List[ColumnRead]:
    return [ColumnRead.model_validate(c) for c in await workspace.list_columns(project_id)]


@router.post(
    "/{project_id}/columns",
    response_model=ColumnRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create Column",
)
async def create_column(project_id: str, data: ColumnCreate, workspace: WorkspaceServiceDep) -> ColumnRead:
    return ColumnRead.model_validate(await workspace.create_column(project_id, data))


@router.put("/{project_id}/columns/reorder", response_model=List[ColumnRead], summary="Reorder Columns")
async def reorder_columns(project_id: str, data: ColumnReorder, workspace: WorkspaceServiceDep) -> List[ColumnRead]:
    return [ColumnRead.model_validate(c) for c in await workspace.reorder_columns(project_id, data.column_ids)]


@router.get("/{project_id}/tasks", response_model=List[TaskRead], summary="List Tasks")
async def list_tasks(
    project_id: str,
    workspace: WorkspaceServiceDep,
    column_id: Optional[str] = Query(None),
) -> List[TaskRead]:
    return [TaskRead.model_validate(t) for t in await workspace.list_tasks(project_id, column_id)]


@router.get("/{project_id}/tasks/search", response_model=List[TaskRead], summary="Search Tasks")
async def search_tasks(
    project_id: str,
    workspace: WorkspaceServiceDep,
    q: str = Query("", max_length=200, description="Matches task title and description."),
) -> List[TaskRead]:
    return [TaskRead.model_validate(t) for t in await workspace.search_tasks(project_id, q)]


# Chat


@router.get("/{project_id}/messages", response_model=List[MessageRead], summary="List Messages")
async def list_messages(
    project_id: str,
    workspace: WorkspaceServiceDep,
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
) -> List[MessageRead]:
    return [MessageRead.model_validate(m) for m in await workspace.list_messages(project_id, limit, offset)]


@router.post(
    "/{project_id}/messages",
    response_model=MessageRead,
    status_code=status.HTTP_201_CREATED,
    summary="Post Message",
)
async def post_message(project_id: str, data: MessageCreate, workspace: WorkspaceServiceDep) -> MessageRead:
    return MessageRead.model_validate(await workspace.post_message(project_id, data))
