"""
Client API endpoints for editing project chat messages.

Only the author of a message may edit or delete it.
"""

from __future__ import annotations

from fastapi import APIRouter, status

from focusprint.core.models.io.workspace import MessageRead, MessageUpdate
from focusprint.server.services.deps import WorkspaceServiceDep

router = APIRouter(tags=["messages"])


@router.patch(
    "/{message_id}",
    response_model=MessageRead,
    summary="Edit Message",
    responses={
        200: {"description": "Message edited"},
        403: {"description": "You can only modify your own messages"},
        404: {"description": "Message not found"},
    },
)
async def edit_message(message_id: str, data: MessageUpdate, workspace: WorkspaceServiceDep) -> MessageRead:
    return MessageRead.model_validate(await workspace.edit_message(message_id, data))


@router.delete("/{message_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete Message")
async def delete_message(message_id: str, workspace: WorkspaceServiceDep) -> None:
    await workspace.delete_message(message_id)
