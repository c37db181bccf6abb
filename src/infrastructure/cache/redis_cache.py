"""Redis-backed cache for resolved permission sets"""
from __future__ import annotations

import json
import logging
from typing import Any

import redis.asyncio as redis

from src.infrastructure.config.settings import get_settings

logger = logging.getLogger(__name__)


def permissions_key(tenant_id: str, user_id: str) -> str:
    return f"permissions:{tenant_id}:{user_id}"


class CacheService:
    """
    Async Redis cache with TTL support.

    Used to hold each user's resolved permission names per tenant so that
    route-level capability checks do not join four tables on every request.
    The cache is optional: when Redis is down every method degrades to a
    miss and callers fall back to the database.
    """

    def __init__(self, redis_client: redis.Redis | None = None):
        """
        Args:
            redis_client: Optional Redis client (for testing/DI)
        """
        self.redis = redis_client
        self.settings = get_settings()
        self._connected = redis_client is not None

    async def connect(self):
        """Establish Redis connection (call on app startup)"""
        if self.redis is not None:
            return
        try:
            self.redis = redis.Redis(
                host=self.settings.redis_host,
                port=self.settings.redis_port,
                db=self.settings.redis_db,
                password=self.settings.redis_password or None,
                decode_responses=True,
                socket_connect_timeout=5,
                socket_keepalive=True,
            )
            await self.redis.ping()
            self._connected = True
            logger.info(
                "Redis cache connected: %s:%s", self.settings.redis_host, self.settings.redis_port
            )
        except (redis.ConnectionError, redis.TimeoutError) as e:
            logger.warning("Redis connection failed: %s. Permission cache disabled.", e)
            self._connected = False
            self.redis = None

    async def disconnect(self):
        """Close Redis connection (call on app shutdown)"""
        if self.redis:
            await self.redis.close()
            self._connected = False
            logger.info("Redis cache disconnected")

    def is_available(self) -> bool:
        """Check if Redis is connected and available"""
        return self._connected and self.redis is not None

    async def get(self, key: str) -> Any | None:
        """Cached value (deserialized from JSON), or None on miss or when unavailable"""
        if not self.is_available() or self.redis is None:
            return None

        try:
            value = await self.redis.get(key)
        except redis.RedisError as e:
            logger.error("Cache get error for key %s: %s", key, e)
            return None
        if value is None:
            logger.debug("Cache MISS: %s", key)
            return None
        logger.debug("Cache HIT: %s", key)
        try:
            return json.loads(value)
        except ValueError:
            logger.warning("Discarding undecodable cache entry %s", key)
            return None

    async def set(self, key: str, value: Any, ttl: int = 300) -> bool:
        """Store a JSON-serializable value with a TTL in seconds"""
        if not self.is_available() or self.redis is None:
            return False

        try:
            await self.redis.setex(key, ttl, json.dumps(value))
        except redis.RedisError as e:
            logger.error("Cache set error for key %s: %s", key, e)
            return False
        logger.debug("Cache SET: %s (TTL: %ss)", key, ttl)
        return True

    async def delete(self, key: str) -> bool:
        if not self.is_available() or self.redis is None:
            return False

        try:
            await self.redis.delete(key)
        except redis.RedisError as e:
            logger.error("Cache delete error for key %s: %s", key, e)
            return False
        logger.debug("Cache DELETE: %s", key)
        return True

    async def delete_pattern(self, pattern: str) -> int:
        """
        Delete all keys matching a Redis glob pattern
        (e.g. "permissions:tenant-123:*"). Returns the number deleted.
        """
        if not self.is_available() or self.redis is None:
            return 0

        deleted = 0
        try:
            async for key in self.redis.scan_iter(match=pattern):
                await self.redis.delete(key)
                deleted += 1
        except redis.RedisError as e:
            logger.error("Cache delete pattern error for %s: %s", pattern, e)
            return deleted

        if deleted > 0:
            logger.info("Cache INVALIDATE: %s (%d keys deleted)", pattern, deleted)
        return deleted

    # Permission-set helpers

    async def get_user_permissions(self, tenant_id: str, user_id: str) -> set[str] | None:
        cached = await self.get(permissions_key(tenant_id, user_id))
        return set(cached) if cached is not None else None

    async def set_user_permissions(
        self, tenant_id: str, user_id: str, permissions: set[str]
    ) -> bool:
        return await self.set(
            permissions_key(tenant_id, user_id),
            sorted(permissions),
            ttl=self.settings.cache_ttl_permissions,
        )

    async def invalidate_user_permissions(self, tenant_id: str, user_id: str) -> bool:
        """Call after a user's role assignment changes"""
        return await self.delete(permissions_key(tenant_id, user_id))

    async def invalidate_tenant_permissions(self, tenant_id: str) -> int:
        """Call after a role's permission set or active flag changes"""
        return await self.delete_pattern(permissions_key(tenant_id, "*"))
