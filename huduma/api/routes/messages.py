from fastapi import APIRouter, Depends

from huduma.api.dependencies import get_chat_service
from huduma.core.messages.models import (
    MarkReadDTO,
    MarkReadResult,
    Message,
    MessageCreateDTO,
    MessageWithParties,
)
from huduma.core.messages.service import ChatService
from huduma.shared.models.common import ErrorResponse

router = APIRouter(prefix="/api/messages", tags=["Messages"])

_errors = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
}


@router.post("", response_model=Message, responses=_errors)
async def send_message(
    request: MessageCreateDTO,
    service: ChatService = Depends(get_chat_service),
):
    return await service.send_message(request)


@router.get("/{job_id}", response_model=list[MessageWithParties], responses=_errors)
async def get_history(
    job_id: str,
    service: ChatService = Depends(get_chat_service),
):
    return await service.fetch_history(job_id)


@router.patch("/{job_id}/read", response_model=MarkReadResult, responses=_errors)
async def mark_read(
    job_id: str,
    request: MarkReadDTO,
    service: ChatService = Depends(get_chat_service),
):
    updated = await service.mark_read(job_id, request.user_id)
    return MarkReadResult(success=True, updated=updated)
