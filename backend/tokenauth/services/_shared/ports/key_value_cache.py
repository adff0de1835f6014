from __future__ import annotations

import threading
from typing import Protocol

from tokenauth.services._shared.clock import Clock, epoch, utcnow


class KeyValueCache(Protocol):
    """
    Shared key-value store with per-entry time-to-live.

    ``set`` and ``get`` are expected to be atomic per key.
    """

    def get(self, key: str) -> str | None: ...
    def set(self, key: str, value: str, *, ttl_seconds: int) -> None: ...
    def ping(self) -> bool: ...


class InMemoryKeyValueCache(KeyValueCache):
    """
    Process-local cache used when no Redis URL is configured and in unit tests.

    Entries expire lazily on read, against the injected clock.
    """

    def __init__(self, *, clock: Clock = utcnow) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._data: dict[str, tuple[str, int]] = {}

    def get(self, key: str) -> str | None:
        with self._lock:
            entry = self._data.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if epoch(self._clock) >= expires_at:
                del self._data[key]
                return None
            return value

    def set(self, key: str, value: str, *, ttl_seconds: int) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        with self._lock:
            self._data[key] = (value, epoch(self._clock) + ttl_seconds)

    def ping(self) -> bool:
        return True

    def __len__(self) -> int:
        return len(self._data)
