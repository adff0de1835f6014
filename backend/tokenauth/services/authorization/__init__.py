"""Route access policies and the per-request authorization gate."""

from __future__ import annotations

from .gate import (
    ADMIN_ONLY,
    AUTHENTICATED,
    PUBLIC,
    AccessPolicy,
    AuthorizationGate,
    GateDecision,
    GateState,
    extract_bearer,
)

__all__ = [
    "ADMIN_ONLY",
    "AUTHENTICATED",
    "PUBLIC",
    "AccessPolicy",
    "AuthorizationGate",
    "GateDecision",
    "GateState",
    "extract_bearer",
]
