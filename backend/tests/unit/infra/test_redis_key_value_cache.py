# tests/unit/infra/test_redis_key_value_cache.py
"""
Unit tests for RedisKeyValueCache using fakeredis.

They run entirely in-memory; expiry is checked through the server-side TTL.
"""

from __future__ import annotations

from datetime import UTC, datetime

import fakeredis
import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from tokenauth.infra.redis.key_value_cache import RedisKeyValueCache
from tokenauth.services.revocation import RevocationCache


@pytest.fixture
def fake_redis():
    """Provide a fresh FakeRedis instance for each test."""
    r = fakeredis.FakeRedis(decode_responses=True)
    r.flushall()
    return r


@pytest.fixture
def cache(fake_redis) -> RedisKeyValueCache:
    return RedisKeyValueCache(fake_redis)


def test_set_and_get_with_server_side_ttl(cache, fake_redis):
    cache.set("k", "v", ttl_seconds=30)

    assert cache.get("k") == "v"
    assert 0 < fake_redis.ttl("k") <= 30


def test_missing_key_returns_none(cache):
    assert cache.get("nope") is None


def test_bytes_values_are_decoded():
    cache = RedisKeyValueCache(fakeredis.FakeRedis())
    cache.set("k", "v", ttl_seconds=5)
    assert cache.get("k") == "v"


def test_non_positive_ttl_is_rejected(cache):
    with pytest.raises(ValueError):
        cache.set("k", "v", ttl_seconds=0)


def test_ping(cache):
    assert cache.ping() is True


def test_ping_reports_connection_errors(monkeypatch, cache, fake_redis):
    def _down():
        raise RedisConnectionError("down")

    monkeypatch.setattr(fake_redis, "ping", _down)
    assert cache.ping() is False


def test_revocation_cache_over_redis(cache, fake_redis):
    now = datetime(2024, 1, 1, tzinfo=UTC)
    revocations = RevocationCache(cache, clock=lambda: now)

    revocations.blacklist("user-1", "tok-1", int(now.timestamp()) + 120)

    assert revocations.is_blacklisted("user-1", "tok-1")
    assert fake_redis.ttl("blacklist:user-1:tok-1") == 120
