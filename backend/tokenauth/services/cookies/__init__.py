"""Refresh-token cookie packaging, independent of the web framework."""

from __future__ import annotations

from .transport import CookieAttributes, CookieJar, InMemoryCookieJar, RefreshCookieTransport

__all__ = ["CookieAttributes", "CookieJar", "InMemoryCookieJar", "RefreshCookieTransport"]
