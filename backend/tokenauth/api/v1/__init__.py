"""API v1 blueprint package bundling versioned routes."""

from __future__ import annotations

from collections.abc import Mapping

from flask import Blueprint

from tokenauth.services.authorization import AccessPolicy

API_VERSION = "v1"

# Import blueprints *only here* to keep imports localized and avoid cycles.
from .auth import POLICIES as AUTH_POLICIES  # noqa: E402
from .auth import bp as auth_bp  # noqa: E402
from .health import POLICIES as HEALTH_POLICIES  # noqa: E402
from .health import bp as health_bp  # noqa: E402
from .users import POLICIES as USERS_POLICIES  # noqa: E402
from .users import bp as users_bp  # noqa: E402

# Each tuple: (blueprint, url_prefix_relative_to_version)
REGISTRY: list[tuple[Blueprint, str]] = [
    (health_bp, ""),  # -> /api/v1
    (auth_bp, "/auth"),  # -> /api/v1/auth
    (users_bp, "/users"),  # -> /api/v1/users
]

ACCESS_POLICIES: list[tuple[Blueprint, Mapping[str, AccessPolicy]]] = [
    (health_bp, HEALTH_POLICIES),
    (auth_bp, AUTH_POLICIES),
    (users_bp, USERS_POLICIES),
]
