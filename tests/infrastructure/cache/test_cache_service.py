"""Tests for the Redis permission cache"""

import json
from unittest.mock import AsyncMock, patch

import pytest
import redis.asyncio as redis

from src.infrastructure.cache.redis_cache import CacheService, permissions_key


@pytest.fixture
async def cache_service():
    """Create cache service with mock Redis client"""
    service = CacheService()
    service.redis = AsyncMock()
    service._connected = True
    return service


@pytest.fixture
async def disconnected_cache():
    """Create disconnected cache service"""
    service = CacheService()
    service.redis = None
    service._connected = False
    return service


def test_permissions_key_is_tenant_scoped():
    assert permissions_key("tenant-1", "user-1") == "permissions:tenant-1:user-1"


@pytest.mark.asyncio
async def test_get_user_permissions_hit(cache_service):
    cache_service.redis.get = AsyncMock(return_value='["roles.read", "users.update"]')

    result = await cache_service.get_user_permissions("tenant-1", "user-1")

    assert result == {"roles.read", "users.update"}
    cache_service.redis.get.assert_called_once_with("permissions:tenant-1:user-1")


@pytest.mark.asyncio
async def test_get_user_permissions_miss(cache_service):
    cache_service.redis.get = AsyncMock(return_value=None)

    assert await cache_service.get_user_permissions("tenant-1", "user-1") is None


@pytest.mark.asyncio
async def test_empty_permission_set_is_a_hit(cache_service):
    """A user without permissions is cached too"""
    cache_service.redis.get = AsyncMock(return_value="[]")

    assert await cache_service.get_user_permissions("tenant-1", "user-1") == set()


@pytest.mark.asyncio
async def test_set_user_permissions_uses_configured_ttl(cache_service):
    cache_service.redis.setex = AsyncMock()

    result = await cache_service.set_user_permissions("tenant-1", "user-1", {"users.update", "roles.read"})

    assert result is True
    key, ttl, payload = cache_service.redis.setex.call_args[0]
    assert key == "permissions:tenant-1:user-1"
    assert ttl == cache_service.settings.cache_ttl_permissions
    assert json.loads(payload) == ["roles.read", "users.update"]


@pytest.mark.asyncio
async def test_invalidate_user_permissions(cache_service):
    cache_service.redis.delete = AsyncMock()

    assert await cache_service.invalidate_user_permissions("tenant-1", "user-1") is True
    cache_service.redis.delete.assert_called_once_with("permissions:tenant-1:user-1")


@pytest.mark.asyncio
async def test_invalidate_tenant_permissions(cache_service):
    """Every cached user of the tenant is dropped"""

    async def mock_scan_iter(match=None):
        assert match == "permissions:tenant-1:*"
        for key in ["permissions:tenant-1:user-1", "permissions:tenant-1:user-2"]:
            yield key

    cache_service.redis.scan_iter = mock_scan_iter
    cache_service.redis.delete = AsyncMock()

    deleted_count = await cache_service.invalidate_tenant_permissions("tenant-1")

    assert deleted_count == 2
    assert cache_service.redis.delete.call_count == 2


@pytest.mark.asyncio
async def test_undecodable_entry_is_a_miss(cache_service):
    cache_service.redis.get = AsyncMock(return_value="{not json")

    assert await cache_service.get("permissions:tenant-1:user-1") is None


@pytest.mark.asyncio
async def test_cache_unavailable_returns_none(disconnected_cache):
    """Test that unavailable cache returns None for get"""
    assert await disconnected_cache.get_user_permissions("tenant-1", "user-1") is None


@pytest.mark.asyncio
async def test_cache_unavailable_set_returns_false(disconnected_cache):
    """Test that unavailable cache returns False for set"""
    assert await disconnected_cache.set_user_permissions("tenant-1", "user-1", {"roles.read"}) is False
    assert await disconnected_cache.invalidate_tenant_permissions("tenant-1") == 0


@pytest.mark.asyncio
async def test_cache_connect_success():
    """Test successful cache connection"""
    with patch("redis.asyncio.Redis") as mock_redis_class:
        mock_client = AsyncMock()
        mock_client.ping = AsyncMock()
        mock_redis_class.return_value = mock_client

        cache = CacheService()
        await cache.connect()

        assert cache.is_available() is True
        mock_client.ping.assert_called_once()


@pytest.mark.asyncio
async def test_cache_connect_failure():
    """Test cache connection failure"""
    with patch("redis.asyncio.Redis") as mock_redis_class:
        mock_client = AsyncMock()
        mock_client.ping = AsyncMock(side_effect=redis.ConnectionError("Connection refused"))
        mock_redis_class.return_value = mock_client

        cache = CacheService()
        await cache.connect()

        # Should gracefully handle failure
        assert cache.is_available() is False
        assert cache.redis is None


@pytest.mark.asyncio
async def test_cache_disconnect(cache_service):
    """Test cache disconnection"""
    cache_service.redis.close = AsyncMock()

    await cache_service.disconnect()

    cache_service.redis.close.assert_called_once()
    assert cache_service.is_available() is False


@pytest.mark.asyncio
async def test_redis_errors_degrade_to_miss(cache_service):
    cache_service.redis.get = AsyncMock(side_effect=redis.RedisError("Redis error"))
    cache_service.redis.setex = AsyncMock(side_effect=redis.RedisError("Redis error"))

    assert await cache_service.get_user_permissions("tenant-1", "user-1") is None
    assert await cache_service.set_user_permissions("tenant-1", "user-1", {"roles.read"}) is False
