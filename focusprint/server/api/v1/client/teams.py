"""
Client API endpoints for teams.
"""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Query, status

from focusprint.core.models.io.workspace import TeamCreate, TeamRead, TeamUpdate
from focusprint.server.services.deps import WorkspaceServiceDep

router = APIRouter(tags=["teams"])


@router.get("", response_model=List[TeamRead], summary="List Teams")
async def list_teams(
    workspace: WorkspaceServiceDep,
    include_archived: bool = Query(False),
) -> List[TeamRead]:
    return [TeamRead.model_validate(t) for t in await workspace.list_teams(include_archived)]


@router.post(
    "",
    response_model=TeamRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create Team",
    responses={201: {"description": "Team created"}, 409: {"description": "A team with this name already exists"}},
)
async def create_team(data: TeamCreate, workspace: WorkspaceServiceDep) -> TeamRead:
    return TeamRead.model_validate(await workspace.create_team(data))


@router.get(
    "/{team_id}",
    response_model=TeamRead,
    summary="Get Team",
    responses={200: {"description": "Team found"}, 404: {"description": "Team not found"}},
)
async def get_team(team_id: str, workspace: WorkspaceServiceDep) -> TeamRead:
    return TeamRead.model_validate(await workspace.get_team(team_id))


@router.patch("/{team_id}", response_model=TeamRead, summary="Update Team")
async def update_team(team_id: str, data: TeamUpdate, workspace: WorkspaceServiceDep) -> TeamRead:
    return TeamRead.model_validate(await workspace.update_team(team_id, data))


@router.delete(
    "/{team_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Team",
    description="Delete a team that has no remaining projects.",
    responses={
        204: {"description": "Team deleted"},
        400: {"description": "Cannot delete a team with active projects"},
        404: {"description": "Team not found"},
    },
)
async def delete_team(team_id: str, workspace: WorkspaceServiceDep) -> None:
    await workspace.delete_team(team_id)
