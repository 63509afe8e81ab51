"""
Chat service: persist, then push to the receiver.
"""

from __future__ import annotations

from huduma.common.constants import TypeMsg
from huduma.common.logger import log_info
from huduma.core.messages.models import Message, MessageCreateDTO, MessageWithParties
from huduma.core.messages.store import MessageStore
from huduma.realtime.dispatcher import Dispatcher
from huduma.realtime.events import NewMessageEvent


class ChatService:
    """Send, read and acknowledge job conversations."""

    def __init__(self, store: MessageStore, dispatcher: Dispatcher) -> None:
        self._store = store
        self._dispatcher = dispatcher

    async def send_message(self, dto: MessageCreateDTO) -> Message:
        """
        Stores the message and pushes it to the receiver only.
        The push outcome does not affect the result: history is authoritative.
        """
        message = await self._store.append(
            job_id=dto.job_id,
            sender_id=dto.sender_id,
            receiver_id=dto.receiver_id,
            content=dto.content,
            message_type=dto.message_type,
            image_url=dto.image_url,
        )

        delivered = await self._dispatcher.deliver(
            message.receiver_id,
            NewMessageEvent(message=message),
        )

        await log_info(
            f"Message {message.id} in job {message.job_id} stored (pushed={delivered})",
            type_msg=TypeMsg.DEBUG,
        )
        return message

    async def fetch_history(self, job_id: str) -> list[MessageWithParties]:
        return await self._store.history(job_id)

    async def mark_read(self, job_id: str, user_id: str) -> int:
        return await self._store.mark_read(job_id, user_id)
