"""
Chat message models.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from huduma.common.constants import MessageType
from huduma.core.users.models import UserSummary


class Message(BaseModel):
    """
    A chat message inside a job channel.

    created_at is assigned by the store and never decreases within a job.
    Only is_read ever changes after the insert.
    """

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: str
    job_id: str = Field(..., alias="jobId")
    sender_id: str = Field(..., alias="senderId")
    receiver_id: str = Field(..., alias="receiverId")
    content: str
    message_type: MessageType = Field(MessageType.TEXT, alias="messageType")
    image_url: Optional[str] = Field(None, alias="imageUrl")
    is_read: bool = Field(False, alias="isRead")
    created_at: datetime = Field(..., alias="createdAt")


class MessageWithParties(Message):
    """History row with both identities resolved."""

    sender: UserSummary
    receiver: UserSummary


class MessageCreateDTO(BaseModel):
    """sendMessage payload."""

    model_config = ConfigDict(populate_by_name=True)

    job_id: str = Field(..., alias="jobId")
    sender_id: str = Field(..., alias="senderId")
    receiver_id: str = Field(..., alias="receiverId")
    content: str
    message_type: MessageType = Field(MessageType.TEXT, alias="messageType")
    image_url: Optional[str] = Field(None, alias="imageUrl")

    @field_validator("content")
    @classmethod
    def content_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("content must not be empty")
        return v


class MarkReadDTO(BaseModel):
    """Body of the mark-read request."""

    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., alias="userId")


class MarkReadResult(BaseModel):
    success: bool = True
    updated: int
