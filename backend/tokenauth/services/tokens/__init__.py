"""Signed token generation and verification for the four token kinds."""

from __future__ import annotations

from .codec import TokenCodec
from .types import (
    AccessClaims,
    EmailClaims,
    RefreshClaims,
    TokenClaims,
    TokenKind,
    TokenProfile,
    TokenSettings,
    TokenSubject,
)

__all__ = [
    "AccessClaims",
    "EmailClaims",
    "RefreshClaims",
    "TokenClaims",
    "TokenCodec",
    "TokenKind",
    "TokenProfile",
    "TokenSettings",
    "TokenSubject",
]
