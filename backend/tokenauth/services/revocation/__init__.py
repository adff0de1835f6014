"""Refresh-session revocation (logout blacklist)."""

from __future__ import annotations

from .cache import RevocationCache

__all__ = ["RevocationCache"]
