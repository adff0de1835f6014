"""Repository package exposing persistence-layer access for the models."""

from __future__ import annotations

from tokenauth.repositories.base import (
    BaseRepository,
    Page,
    Pagination,
    apply_sorting,
    paginate_select,
)
from tokenauth.repositories.oauth_provider import OAuthProviderRepository
from tokenauth.repositories.user import UserRepository

__all__ = [
    "BaseRepository",
    "Page",
    "Pagination",
    "paginate_select",
    "apply_sorting",
    "UserRepository",
    "OAuthProviderRepository",
]
