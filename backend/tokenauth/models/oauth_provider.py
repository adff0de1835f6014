"""Link between a principal and an external identity provider."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import Enum, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from tokenauth.core.extensions import db

from .base import ReprMixin, TimestampMixin, UUIDPKMixin
from .enums import OAuthProviderType

if TYPE_CHECKING:
    from .user import User


class OAuthProvider(UUIDPKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    One ``(provider, email)`` identity bound to a :class:`User`.

    Fields
    ------
    user_id : str
        Owning principal.
    provider : OAuthProviderType
        External provider that vouched for ``email``.
    email : str
        Email reported by the provider (normalized).
    """

    __tablename__ = "oauth_providers"

    user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    provider: Mapped[OAuthProviderType] = mapped_column(
        Enum(OAuthProviderType, name="oauth_provider_type", native_enum=False, length=16),
        nullable=False,
    )
    email: Mapped[str] = mapped_column(String(254), nullable=False)

    user: Mapped[User] = relationship(back_populates="oauth_providers")

    __table_args__ = (
        UniqueConstraint("provider", "email", name="uq_oauth_providers_provider_email"),
    )

    @validates("email")
    def _normalize_email(self, key: str, value: str) -> str:
        return value.strip().lower()
