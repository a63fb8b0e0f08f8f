"""
Client API endpoints for kanban tasks.
"""

from __future__ import annotations

from fastapi import APIRouter, status

from focusprint.core.models.io.workspace import TaskCreate, TaskMove, TaskRead, TaskUpdate
from focusprint.server.services.deps import WorkspaceServiceDep

router = APIRouter(tags=["tasks"])


@router.post(
    "",
    response_model=TaskRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create Task",
    responses={
        201: {"description": "Task created"},
        400: {"description": "Missing required fields"},
        404: {"description": "Project or column not found"},
    },
)
async def create_task(data: TaskCreate, workspace: WorkspaceServiceDep) -> TaskRead:
    """
    Create a task on a project board.

    - **project_id**, **column_id**, **title**: Required.
    - **position**: Defaults to the end of the column.
    """
    return TaskRead.model_validate(await workspace.create_task(data))


@router.get(
    "/{task_id}",
    response_model=TaskRead,
    summary="Get Task",
    responses={200: {"description": "Task found"}, 404: {"description": "Task not found"}},
)
async def get_task(task_id: str, workspace: WorkspaceServiceDep) -> TaskRead:
    return TaskRead.model_validate(await workspace.get_task(task_id))


@router.patch("/{task_id}", response_model=TaskRead, summary="Update Task")
async def update_task(task_id: str, data: TaskUpdate, workspace: WorkspaceServiceDep) -> TaskRead:
    return TaskRead.model_validate(await workspace.update_task(task_id, data))


@router.put(
    "/{task_id}/move",
    response_model=TaskRead,
    summary="Move Task",
    description="Move a task to another column or position. A new column without a position appends the task.",
)
async def move_task(task_id: str, data: TaskMove, workspace: WorkspaceServiceDep) -> TaskRead:
    return TaskRead.model_validate(await workspace.move_task(task_id, data))


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete Task")
async def delete_task(task_id: str, workspace: WorkspaceServiceDep) -> None:
    await workspace.delete_task(task_id)
