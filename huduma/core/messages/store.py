"""
Message store: the durable, validated record of every job conversation.
"""

from __future__ import annotations

from typing import Optional

from huduma.common.constants import MessageType
from huduma.common.errors import NotFoundError, ValidationError
from huduma.core.jobs.models import Job
from huduma.core.jobs.repository import JobRepository
from huduma.core.messages.models import Message, MessageWithParties
from huduma.core.messages.repository import MessageRepository


class MessageStore:
    """Participant checks on top of MessageRepository."""

    def __init__(self, repository: MessageRepository, jobs: JobRepository) -> None:
        self._repo = repository
        self._jobs = jobs

    async def append(
        self,
        job_id: str,
        sender_id: str,
        receiver_id: str,
        content: str,
        message_type: MessageType | str = MessageType.TEXT,
        image_url: Optional[str] = None,
    ) -> Message:
        """
        Validates and persists a message.

        Args:
            job_id: Job the conversation belongs to
            sender_id: Author, one of the job's two parties
            receiver_id: The other party
            content: Non-empty text (caption for attachments)
            message_type: text, image or file
            image_url: Attachment reference

        Returns:
            The stored message with id and server timestamp

        Raises:
            NotFoundError: job does not exist
            ValidationError: blank content, unknown type, bad participants
        """
        if not content or not content.strip():
            raise ValidationError("Message content must not be empty")

        try:
            message_type = MessageType(message_type)
        except ValueError:
            raise ValidationError(
                f"Unknown message type: {message_type}",
                {"allowed": [t.value for t in MessageType]},
            ) from None

        if sender_id == receiver_id:
            raise ValidationError("Sender and receiver must differ", {"user_id": sender_id})

        job = await self._get_job(job_id)
        if job.provider_id is None:
            raise ValidationError(
                "Job has no provider yet, nobody to talk to",
                {"job_id": job_id},
            )
        if {sender_id, receiver_id} != {job.customer_id, job.provider_id}:
            raise ValidationError(
                "Sender and receiver must be the job's customer and provider",
                {"job_id": job_id, "sender_id": sender_id, "receiver_id": receiver_id},
            )

        return await self._repo.insert(
            job_id=job_id,
            sender_id=sender_id,
            receiver_id=receiver_id,
            content=content,
            message_type=message_type,
            image_url=image_url,
        )

    async def history(self, job_id: str) -> list[MessageWithParties]:
        """Every message of the job, oldest first."""
        await self._get_job(job_id)
        return await self._repo.list_for_job(job_id)

    async def mark_read(self, job_id: str, user_id: str) -> int:
        """
        Marks everything addressed to user_id in this job as read.

        Returns:
            Number of messages that changed; a repeated call returns 0

        Raises:
            NotFoundError: job does not exist
            ValidationError: user_id is not a participant
        """
        job = await self._get_job(job_id)
        if not job.has_participant(user_id):
            raise ValidationError(
                "Only a participant can mark messages as read",
                {"job_id": job_id, "user_id": user_id},
            )
        return await self._repo.mark_read(job_id, user_id)

    async def _get_job(self, job_id: str) -> Job:
        job = await self._jobs.get_by_id(job_id)
        if job is None:
            raise NotFoundError.for_entity("Job", job_id)
        return job
