"""Time source shared by services so tests can pin "now"."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    """Return a timezone-aware UTC ``datetime``."""
    return datetime.now(UTC)


def epoch(clock: Clock) -> int:
    """Return the clock's current instant as whole POSIX seconds."""
    return int(clock().timestamp())
