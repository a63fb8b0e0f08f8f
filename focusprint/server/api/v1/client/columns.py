"""
Client API endpoints for a single kanban column.

Listing, creating and reordering columns live under the project routes.
"""

from __future__ import annotations

from fastapi import APIRouter, status

from focusprint.core.models.io.workspace import ColumnRead, ColumnUpdate
from focusprint.server.services.deps import WorkspaceServiceDep

router = APIRouter(tags=["columns"])


@router.patch("/{column_id}", response_model=ColumnRead, summary="Update Column")
async def update_column(column_id: str, data: ColumnUpdate, workspace: WorkspaceServiceDep) -> ColumnRead:
    return ColumnRead.model_validate(await workspace.update_column(column_id, data))


@router.delete(
    "/{column_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Column",
    responses={
        204: {"description": "Column deleted"},
        400: {"description": "Cannot delete a column that still has tasks"},
        404: {"description": "Column not found"},
    },
)
async def delete_column(column_id: str, workspace: WorkspaceServiceDep) -> None:
    await workspace.delete_column(column_id)
