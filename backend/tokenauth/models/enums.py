"""Plain enumerations shared by models, services and schemas."""

from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Principal role checked by role-restricted routes."""

    USER = "user"
    ADMIN = "admin"


class OAuthProviderType(str, Enum):
    """External identity providers a principal can be linked to."""

    GOOGLE = "google"
    GITHUB = "github"
    FACEBOOK = "facebook"
