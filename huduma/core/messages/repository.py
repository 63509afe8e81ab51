"""
Message repository.
"""

from __future__ import annotations

from typing import Any, Optional
from uuid import uuid4

from huduma.common.constants import MessageType, UserType
from huduma.core.messages.models import Message, MessageWithParties
from huduma.core.users.models import UserSummary
from huduma.infra.database import DatabaseManager, affected_rows

MESSAGE_COLUMNS = """
    id, job_id, sender_id, receiver_id, content, message_type,
    image_url, is_read, created_at
"""


class MessageRepository:
    """
    Messages table access.

    Ordering within a job is (created_at, seq): created_at is clamped so it
    never goes below the newest message of the same job, seq breaks ties.
    """

    def __init__(self, db: DatabaseManager) -> None:
        """
        Args:
            db: Database manager (dependency injection)
        """
        self._db = db

    async def insert(
        self,
        job_id: str,
        sender_id: str,
        receiver_id: str,
        content: str,
        message_type: MessageType = MessageType.TEXT,
        image_url: Optional[str] = None,
    ) -> Message:
        """
        Persists a message; id and timestamp are assigned here.

        Returns:
            The stored message
        """
        row = await self._db.fetchrow(
            f"""
            INSERT INTO messages (
                id, job_id, sender_id, receiver_id, content, message_type,
                image_url, is_read, created_at
            )
            VALUES (
                $1, $2, $3, $4, $5, $6, $7, FALSE,
                GREATEST(
                    clock_timestamp(),
                    (SELECT MAX(created_at) FROM messages WHERE job_id = $2)
                )
            )
            RETURNING {MESSAGE_COLUMNS}
            """,
            str(uuid4()),
            job_id,
            sender_id,
            receiver_id,
            content,
            message_type.value,
            image_url,
        )
        return self._row_to_message(row)

    async def list_for_job(self, job_id: str) -> list[MessageWithParties]:
        """
        Full history of a job in creation order.
        Sender and receiver are joined through separate aliases.
        """
        rows = await self._db.fetch(
            """
            SELECT m.id, m.job_id, m.sender_id, m.receiver_id, m.content,
                   m.message_type, m.image_url, m.is_read, m.created_at,
                   s.first_name AS sender_first_name,
                   s.last_name AS sender_last_name,
                   s.profile_image_url AS sender_profile_image_url,
                   s.user_type AS sender_user_type,
                   r.first_name AS receiver_first_name,
                   r.last_name AS receiver_last_name,
                   r.profile_image_url AS receiver_profile_image_url,
                   r.user_type AS receiver_user_type
            FROM messages m
            JOIN users s ON s.id = m.sender_id
            JOIN users r ON r.id = m.receiver_id
            WHERE m.job_id = $1
            ORDER BY m.created_at ASC, m.seq ASC
            """,
            job_id,
        )
        return [self._row_to_message_with_parties(row) for row in rows]

    async def mark_read(self, job_id: str, receiver_id: str) -> int:
        """
        Flips unread messages addressed to receiver_id.

        Returns:
            Number of messages changed (0 when nothing was unread)
        """
        status = await self._db.execute(
            """
            UPDATE messages
            SET is_read = TRUE
            WHERE job_id = $1 AND receiver_id = $2 AND is_read = FALSE
            """,
            job_id,
            receiver_id,
        )
        return affected_rows(status)

    @staticmethod
    def _row_to_message(row: Any) -> Message:
        return Message(
            id=row["id"],
            job_id=row["job_id"],
            sender_id=row["sender_id"],
            receiver_id=row["receiver_id"],
            content=row["content"],
            message_type=MessageType(row["message_type"]),
            image_url=row["image_url"],
            is_read=row["is_read"],
            created_at=row["created_at"],
        )

    @classmethod
    def _row_to_message_with_parties(cls, row: Any) -> MessageWithParties:
        message = cls._row_to_message(row)
        return MessageWithParties(
            **message.model_dump(),
            sender=_party(row, "sender"),
            receiver=_party(row, "receiver"),
        )


def _party(row: Any, prefix: str) -> UserSummary:
    return UserSummary(
        id=row[f"{prefix}_id"],
        first_name=row[f"{prefix}_first_name"],
        last_name=row[f"{prefix}_last_name"],
        profile_image_url=row[f"{prefix}_profile_image_url"],
        user_type=UserType(row[f"{prefix}_user_type"]),
    )
