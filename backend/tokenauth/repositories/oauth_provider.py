"""Repository for provider links of federated principals."""

from __future__ import annotations

from tokenauth.models.enums import OAuthProviderType
from tokenauth.models.oauth_provider import OAuthProvider
from tokenauth.repositories.base import BaseRepository


class OAuthProviderRepository(BaseRepository[OAuthProvider]):
    """Persistence-only repository for :class:`OAuthProvider`."""

    model = OAuthProvider

    def get_link(self, provider: OAuthProviderType, email: str) -> OAuthProvider | None:
        return self.find_one(provider=provider, email=email.strip().lower())

    def link(self, *, user_id: str, provider: OAuthProviderType, email: str) -> OAuthProvider:
        """Bind ``(provider, email)`` to ``user_id`` unless already bound."""
        existing = self.get_link(provider, email)
        if existing is not None:
            return existing
        return self.add(OAuthProvider(user_id=user_id, provider=provider, email=email))
