"""
Chat client: REST access and the live session protocol.
"""

from huduma.client.api_client import ChatApiClient
from huduma.client.session import ChatSession, SessionState

__all__ = [
    "ChatApiClient",
    "ChatSession",
    "SessionState",
]
