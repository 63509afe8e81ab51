"""
Redis Pub/Sub relay for multi-process deployments.

Every API process publishes push events on {namespace}:{prefix}:{user_id}
and subscribes to the whole pattern; whichever process holds the user's
channel performs the actual send.
"""

from __future__ import annotations

import asyncio
from typing import Any, Optional

from redis.asyncio.client import PubSub

from huduma.common.constants import TypeMsg
from huduma.common.logger import log_error, log_info
from huduma.infra.redis_client import RedisClient
from huduma.realtime.dispatcher import Dispatcher
from huduma.realtime.registry import ConnectionRegistry


class RedisRelay:
    """
    Publisher and subscriber in one.

    Plugs into Dispatcher as its publisher; incoming messages are handed
    to a local-only Dispatcher over the same registry.
    """

    def __init__(
        self,
        redis_client: RedisClient,
        registry: ConnectionRegistry,
        channel_prefix: str = "push:user",
        send_timeout: Optional[float] = None,
    ) -> None:
        """
        Args:
            redis_client: Connected RedisClient
            registry: This process' connection registry
            channel_prefix: Channel prefix before the user id
            send_timeout: Local send timeout
        """
        self._redis = redis_client
        self._registry = registry
        self._local = Dispatcher(registry, send_timeout=send_timeout)
        self._prefix = channel_prefix
        self._pubsub: Optional[PubSub] = None
        self._task: Optional[asyncio.Task] = None
        self._running = False

    @property
    def pattern(self) -> str:
        return self._redis.make_key(f"{self._prefix}:*")

    @property
    def is_running(self) -> bool:
        return self._running

    def channel_for(self, user_id: str) -> str:
        """Channel name without the namespace (RedisClient adds it)."""
        return f"{self._prefix}:{user_id}"

    async def publish(self, user_id: str, payload: str) -> bool:
        """
        Publishes a serialized event for user_id.

        Returns:
            False if Redis rejected the publish
        """
        try:
            await self._redis.publish(self.channel_for(user_id), payload)
            return True
        except Exception as e:
            await log_error(f"Redis publish for user {user_id} failed: {e}")
            return False

    async def start(self) -> None:
        if self._running:
            return

        self._pubsub = self._redis.pubsub()
        await self._pubsub.psubscribe(self.pattern)
        self._running = True
        self._task = asyncio.create_task(self._listen())

        await log_info(f"Redis relay subscribed to {self.pattern}", type_msg=TypeMsg.INFO)

    async def stop(self) -> None:
        self._running = False

        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        if self._pubsub:
            await self._pubsub.punsubscribe()
            await self._pubsub.aclose()
            self._pubsub = None

    async def _listen(self) -> None:
        while self._running:
            try:
                message = await self._pubsub.get_message(
                    ignore_subscribe_messages=True,
                    timeout=1.0,
                )
                if message is None:
                    continue
                await self.handle_message(message)
            except asyncio.CancelledError:
                break
            except Exception as e:
                await log_error(f"Redis relay error: {e}")
                await asyncio.sleep(1)

    async def handle_message(self, message: dict[str, Any]) -> bool:
        """
        Delivers one Pub/Sub message to the local registry.

        Returns:
            True if a local channel received it
        """
        if message.get("type") not in ("message", "pmessage"):
            return False

        channel = _as_text(message.get("channel", ""))
        data = _as_text(message.get("data", ""))

        prefix = self._redis.make_key(f"{self._prefix}:")
        if not channel.startswith(prefix):
            return False
        user_id = channel[len(prefix):]

        # Every process sees every publish; only the holder of the channel sends
        if self._registry.lookup(user_id) is None:
            return False

        return await self._local.deliver_local(user_id, data)


def _as_text(value: Any) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return str(value)
