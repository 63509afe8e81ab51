"""
Redis client.
Carries push events between API processes over Pub/Sub.
"""

from __future__ import annotations

import redis.asyncio as redis
from redis.asyncio.client import PubSub

from huduma.common.logger import get_logger, log_error, log_info
from huduma.common.constants import TypeMsg

logger = get_logger("redis")


class RedisClient:
    """
    Asynchronous Redis client (singleton).
    Namespaces every key and channel with REDIS_NAMESPACE.
    """

    _instance: RedisClient | None = None
    _client: redis.Redis | None = None

    def __new__(cls) -> RedisClient:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self) -> None:
        if hasattr(self, "_initialized"):
            return
        self._initialized = True
        self._client = None
        self._namespace = "huduma"

    @property
    def client(self) -> redis.Redis:
        """Returns the underlying client."""
        if self._client is None:
            raise RuntimeError("Redis client is not initialized. Call connect() first.")
        return self._client

    @property
    def is_connected(self) -> bool:
        return self._client is not None

    def make_key(self, key: str) -> str:
        """Prefixes a key or channel with the namespace."""
        return f"{self._namespace}:{key}"

    async def connect(
        self,
        url: str | None = None,
        max_connections: int = 50,
        namespace: str | None = None,
    ) -> None:
        """
        Connects to Redis.

        Args:
            url: Redis URL (taken from settings when None)
            max_connections: Pool size
            namespace: Key prefix
        """
        if self._client is not None:
            return

        if url is None:
            from huduma.config import settings
            url = settings.redis.url
            max_connections = settings.redis.REDIS_MAX_CONNECTIONS
            namespace = settings.redis.REDIS_NAMESPACE

        if namespace:
            self._namespace = namespace

        await log_info("Connecting to Redis...", type_msg=TypeMsg.INFO)

        self._client = redis.from_url(
            url,
            max_connections=max_connections,
            decode_responses=True,
        )
        await self._client.ping()

        await log_info("Redis connection established", type_msg=TypeMsg.INFO)

    async def disconnect(self) -> None:
        """Closes the connection."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            await log_info("Redis connection closed", type_msg=TypeMsg.INFO)

    # =========================================================================
    # PUB/SUB
    # =========================================================================

    async def publish(self, channel: str, message: str) -> int:
        """
        Publishes a message on a namespaced channel.

        Returns:
            Number of subscribers that received it
        """
        return await self.client.publish(self.make_key(channel), message)

    def pubsub(self) -> PubSub:
        """Creates a Pub/Sub handle."""
        return self.client.pubsub()

    async def health_check(self) -> bool:
        """Checks that Redis answers PING."""
        try:
            return bool(await self.client.ping())
        except Exception as e:
            await log_error(f"Redis health check failed: {e}")
            return False


_redis_client: RedisClient | None = None


def get_redis() -> RedisClient:
    """Returns the global RedisClient."""
    global _redis_client
    if _redis_client is None:
        _redis_client = RedisClient()
    return _redis_client


async def init_redis() -> None:
    """Connects to Redis using the settings."""
    from huduma.config import settings

    client = get_redis()
    await client.connect(
        url=settings.redis.url,
        max_connections=settings.redis.REDIS_MAX_CONNECTIONS,
        namespace=settings.redis.REDIS_NAMESPACE,
    )


async def close_redis() -> None:
    """Closes the Redis connection."""
    await get_redis().disconnect()
