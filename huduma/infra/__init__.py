"""
Infrastructure layer: PostgreSQL and Redis.
"""

from huduma.infra.database import DatabaseManager, get_db
from huduma.infra.redis_client import RedisClient, get_redis

__all__ = [
    "DatabaseManager",
    "get_db",
    "RedisClient",
    "get_redis",
]
