"""
Messages domain.
Durable job conversations with read state.
"""

from huduma.core.messages.models import (
    MarkReadDTO,
    MarkReadResult,
    Message,
    MessageCreateDTO,
    MessageWithParties,
)
from huduma.core.messages.repository import MessageRepository
from huduma.core.messages.store import MessageStore

__all__ = [
    "MarkReadDTO",
    "MarkReadResult",
    "Message",
    "MessageCreateDTO",
    "MessageWithParties",
    "MessageRepository",
    "MessageStore",
]
