from __future__ import annotations

import redis
from redis.exceptions import RedisError


class RedisKeyValueCache:
    """
    :class:`~tokenauth.services._shared.ports.KeyValueCache` over Redis.

    Values are written with ``SET key value EX ttl`` so expiry is enforced by
    the server, and each write is atomic per key.
    """

    def __init__(self, r: redis.Redis):
        self.r = r

    def get(self, key: str) -> str | None:
        value = self.r.get(key)
        if value is None:
            return None
        return value.decode() if isinstance(value, bytes) else str(value)

    def set(self, key: str, value: str, *, ttl_seconds: int) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self.r.set(key, value, ex=ttl_seconds)

    def ping(self) -> bool:
        try:
            return bool(self.r.ping())
        except RedisError:
            return False
