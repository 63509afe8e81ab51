"""
Dispatcher: best-effort delivery of push events.

A failed push is logged as DeliveryFailure and reported as False; it never
raises into the caller, whose write has already been persisted.
"""

from __future__ import annotations

import asyncio
from typing import Optional, Protocol

from huduma.common.constants import PUSH_FAILED_CLOSE_CODE
from huduma.common.errors import DeliveryFailure
from huduma.common.logger import log_debug, log_warning
from huduma.realtime.events import PushEvent
from huduma.realtime.registry import ConnectionRegistry, PushChannel


class EventPublisher(Protocol):
    """Cross-process transport (see RedisRelay)."""

    async def publish(self, user_id: str, payload: str) -> bool: ...


class Dispatcher:
    """Routes an event to the user's live channel, if any."""

    def __init__(
        self,
        registry: ConnectionRegistry,
        publisher: Optional[EventPublisher] = None,
        send_timeout: Optional[float] = None,
    ) -> None:
        """
        Args:
            registry: Local connection registry
            publisher: When set, events go through it instead of the local registry
            send_timeout: Per-push send timeout (seconds), settings by default
        """
        if send_timeout is None:
            from huduma.config import settings
            send_timeout = settings.realtime.PUSH_SEND_TIMEOUT

        self._registry = registry
        self._publisher = publisher
        self._send_timeout = send_timeout

        self._total_sent: int = 0
        self._total_failed: int = 0
        self._closing: set[asyncio.Task] = set()

    @property
    def registry(self) -> ConnectionRegistry:
        return self._registry

    async def deliver(self, user_id: str, event: PushEvent) -> bool:
        """
        Pushes an event to one user.

        Returns:
            True if the payload was handed to a live channel (or the relay)
        """
        try:
            payload = event.to_json()
        except Exception as e:
            return await self._failed(DeliveryFailure(user_id, f"serialization error: {e}"))

        if self._publisher is not None:
            if await self._publisher.publish(user_id, payload):
                return True
            return await self._failed(DeliveryFailure(user_id, "relay publish failed"))

        return await self.deliver_local(user_id, payload)

    async def deliver_local(self, user_id: str, payload: str) -> bool:
        """
        Sends an already serialized payload through this process' registry.
        """
        channel = self._registry.lookup(user_id)
        if channel is None:
            return await self._failed(DeliveryFailure(user_id, "no live channel"))

        if not channel.is_writable:
            self._registry.unregister(user_id, channel)
            return await self._failed(DeliveryFailure(user_id, "channel closed"))

        try:
            await asyncio.wait_for(channel.send_text(payload), timeout=self._send_timeout)
        except asyncio.TimeoutError:
            self._registry.unregister(user_id, channel)
            self._close_later(user_id, channel, "send timed out")
            return await self._failed(DeliveryFailure(user_id, "send timed out"))
        except Exception as e:
            self._registry.unregister(user_id, channel)
            self._close_later(user_id, channel, "send error")
            return await self._failed(DeliveryFailure(user_id, f"send error: {e}"))

        self._total_sent += 1
        return True

    def get_stats(self) -> dict[str, int]:
        return {
            "total_messages_sent": self._total_sent,
            "total_delivery_failures": self._total_failed,
        }

    def _close_later(self, user_id: str, channel: PushChannel, reason: str) -> None:
        """
        Closes a channel whose push failed without waiting for it, so the
        client notices, re-attaches and re-seeds from history.
        """
        task = asyncio.create_task(self._close_quietly(user_id, channel, reason))
        self._closing.add(task)
        task.add_done_callback(self._closing.discard)

    async def _close_quietly(self, user_id: str, channel: PushChannel, reason: str) -> None:
        try:
            await asyncio.wait_for(
                channel.close(code=PUSH_FAILED_CLOSE_CODE, reason=reason),
                timeout=self._send_timeout,
            )
        except Exception as e:
            await log_debug(f"Failed channel of user {user_id} did not close cleanly: {e}")

    async def _failed(self, failure: DeliveryFailure) -> bool:
        self._total_failed += 1
        # An offline receiver is the normal case, not worth a warning
        if failure.reason == "no live channel":
            await log_debug(str(failure), extra={"user_id": failure.user_id})
        else:
            await log_warning(str(failure), extra={"user_id": failure.user_id, "reason": failure.reason})
        return False
