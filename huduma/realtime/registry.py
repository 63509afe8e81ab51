"""
Connection registry.
Maps a user id onto its single live push channel inside this process.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional, Protocol, runtime_checkable


@runtime_checkable
class PushChannel(Protocol):
    """Anything that can carry serialized events to one client."""

    @property
    def is_writable(self) -> bool: ...

    async def send_text(self, data: str) -> None: ...

    async def close(self, code: int = 1000, reason: str = "") -> None: ...


@dataclass
class ConnectionInfo:
    """Registry entry."""
    channel: PushChannel
    user_id: str
    connected_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class ConnectionRegistry:
    """
    At most one channel per user; a newer registration replaces the older.

    Methods never await, so each call is atomic on the event loop.
    """

    def __init__(self) -> None:
        # user_id -> ConnectionInfo
        self._connections: dict[str, ConnectionInfo] = {}

        self._total_connections: int = 0
        self._total_replaced: int = 0

    @property
    def active_connections(self) -> int:
        return len(self._connections)

    def register(self, user_id: str, channel: PushChannel) -> Optional[PushChannel]:
        """
        Binds the channel to the user.

        Returns:
            The channel it replaced (the caller closes it) or None
        """
        previous = self._connections.get(user_id)
        self._connections[user_id] = ConnectionInfo(channel=channel, user_id=user_id)
        self._total_connections += 1

        if previous is None or previous.channel is channel:
            return None
        self._total_replaced += 1
        return previous.channel

    def unregister(self, user_id: str, channel: Optional[PushChannel] = None) -> bool:
        """
        Removes the user's entry.

        If channel is given, the entry is removed only while it still points
        at that channel, so a late close of a replaced connection is a no-op.

        Returns:
            True if an entry was removed
        """
        current = self._connections.get(user_id)
        if current is None:
            return False
        if channel is not None and current.channel is not channel:
            return False
        del self._connections[user_id]
        return True

    def lookup(self, user_id: str) -> Optional[PushChannel]:
        info = self._connections.get(user_id)
        return info.channel if info else None

    def is_online(self, user_id: str) -> bool:
        return user_id in self._connections

    def clear(self) -> None:
        self._connections.clear()

    def get_stats(self) -> dict[str, Any]:
        """Counters for /stats."""
        return {
            "active_connections": len(self._connections),
            "total_connections_ever": self._total_connections,
            "total_replaced": self._total_replaced,
        }


# Process-wide instance
registry = ConnectionRegistry()
