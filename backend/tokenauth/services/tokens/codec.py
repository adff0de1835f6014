# tokenauth/services/tokens/codec.py
"""
HS256 token codec.

Every kind is signed with its own secret and carries a ``type`` claim, so a
token minted for one kind never verifies as another. Verification also caps
the token age at the kind's lifetime, whatever ``exp`` the token claims.
"""

from __future__ import annotations

import logging
import re
from datetime import UTC, datetime
from typing import Any, Literal, assert_never, overload
from uuid import uuid4

import jwt

from tokenauth.services._shared.clock import Clock, utcnow
from tokenauth.services._shared.errors import (
    TokenExpiredError,
    TokenInvalidError,
    TokenSigningError,
)
from tokenauth.services.tokens.types import (
    AccessClaims,
    EmailClaims,
    RefreshClaims,
    TokenClaims,
    TokenKind,
    TokenSettings,
    TokenSubject,
)

log = logging.getLogger(__name__)

ALGORITHM = "HS256"
_REQUIRED_CLAIMS = ["exp", "iat", "iss", "aud", "sub", "id", "type"]


class TokenCodec:
    """
    Sign and verify tokens for the four :class:`TokenKind` profiles.

    The codec is stateless apart from its settings and clock; it can be shared
    by reference across threads.
    """

    def __init__(self, settings: TokenSettings, *, clock: Clock = utcnow) -> None:
        """
        :param settings: Issuer domain and per-kind secret/lifetime.
        :param clock: Time source (UTC), injectable for tests.
        """
        self.settings = settings
        self.clock = clock

    @property
    def domain(self) -> str:
        return self.settings.domain

    def ttl(self, kind: TokenKind) -> int:
        """Return the lifetime in seconds configured for ``kind``."""
        return self.settings.profile(kind).ttl_seconds

    # ------------------------------------------------------------------ #
    # Generation
    # ------------------------------------------------------------------ #

    def generate(
        self,
        principal: TokenSubject,
        kind: TokenKind,
        *,
        audience: str | None = None,
        token_id: str | None = None,
    ) -> str:
        """
        Sign a token of ``kind`` for ``principal``.

        :param principal: Object exposing ``id`` and ``email``.
        :param kind: Token kind selecting secret, lifetime and claim shape.
        :param audience: Requesting origin; defaults to the configured domain.
        :param token_id: Session id for REFRESH tokens; a new UUID4 when omitted.
            Ignored for other kinds.
        :returns: Encoded JWT.
        :raises TokenSigningError: If the signing primitive fails.
        """
        profile = self.settings.profile(kind)
        now = self.clock()
        issued_at = int(now.timestamp())
        payload: dict[str, Any] = {
            "sub": principal.email,
            "iss": self.domain,
            "aud": audience or self.domain,
            "iat": issued_at,
            "exp": issued_at + profile.ttl_seconds,
            "id": str(principal.id),
            "type": kind.value,
        }
        if kind is TokenKind.REFRESH:
            payload["tokenId"] = token_id or str(uuid4())

        try:
            return jwt.encode(payload, profile.secret, algorithm=ALGORITHM)
        except Exception as exc:
            log.error("token.sign_failed", extra={"token_kind": kind.value}, exc_info=True)
            raise TokenSigningError() from exc

    def generate_pair(
        self,
        principal: TokenSubject,
        *,
        audience: str | None = None,
        token_id: str | None = None,
    ) -> tuple[str, str]:
        """
        Issue an ACCESS + REFRESH pair.

        :param token_id: Existing session id to keep on rotation.
        :returns: ``(access_token, refresh_token)``.
        """
        access = self.generate(principal, TokenKind.ACCESS, audience=audience)
        refresh = self.generate(
            principal, TokenKind.REFRESH, audience=audience, token_id=token_id
        )
        return access, refresh

    # ------------------------------------------------------------------ #
    # Verification
    # ------------------------------------------------------------------ #

    @overload
    def verify(self, token: str, kind: Literal[TokenKind.ACCESS]) -> AccessClaims: ...

    @overload
    def verify(self, token: str, kind: Literal[TokenKind.REFRESH]) -> RefreshClaims: ...

    @overload
    def verify(
        self,
        token: str,
        kind: Literal[TokenKind.CONFIRMATION, TokenKind.RESET_PASSWORD],
    ) -> EmailClaims: ...

    @overload
    def verify(self, token: str, kind: TokenKind) -> TokenClaims: ...

    def verify(self, token: str, kind: TokenKind) -> TokenClaims:
        """
        Verify ``token`` as ``kind`` and return its typed claims.

        Checks, in order: signature under the kind's secret, issuer, required
        claims, audience containing the domain, ``type`` matching ``kind``,
        expiry, and the age cap ``now - iat <= ttl``.

        :raises TokenExpiredError: Expired or older than the kind's lifetime.
        :raises TokenInvalidError: Any other verification failure.
        :raises TokenSigningError: Unexpected failure of the JWT library.
        """
        profile = self.settings.profile(kind)
        try:
            payload = jwt.decode(
                token,
                profile.secret,
                algorithms=[ALGORITHM],
                issuer=self.domain,
                options={
                    "verify_exp": False,
                    "verify_iat": False,
                    "verify_aud": False,
                    "require": _REQUIRED_CLAIMS,
                },
            )
        except jwt.ExpiredSignatureError as exc:
            raise TokenExpiredError() from exc
        except jwt.InvalidTokenError as exc:
            raise TokenInvalidError() from exc
        except Exception as exc:
            log.error("token.verify_failed", extra={"token_kind": kind.value}, exc_info=True)
            raise TokenSigningError() from exc

        return self._claims_from_payload(payload, kind, profile.ttl_seconds)

    def _claims_from_payload(
        self, payload: dict[str, Any], kind: TokenKind, ttl_seconds: int
    ) -> TokenClaims:
        if payload.get("type") != kind.value:
            raise TokenInvalidError()

        audience = payload.get("aud")
        if not self._audience_matches(audience):
            raise TokenInvalidError()

        subject_id, email = payload.get("id"), payload.get("sub")
        iat, exp = payload.get("iat"), payload.get("exp")
        if not isinstance(subject_id, str) or not subject_id or not isinstance(email, str):
            raise TokenInvalidError()
        if not isinstance(iat, int) or not isinstance(exp, int):
            raise TokenInvalidError()

        now = int(self.clock().timestamp())
        if iat > now:
            raise TokenInvalidError()
        if now >= exp or now >= iat + ttl_seconds:
            raise TokenExpiredError()

        common: dict[str, Any] = {
            "kind": kind,
            "subject_id": subject_id,
            "email": email,
            "issuer": str(payload["iss"]),
            "audience": audience if isinstance(audience, str) else ",".join(audience),
            "issued_at": datetime.fromtimestamp(iat, tz=UTC),
            "expires_at": datetime.fromtimestamp(exp, tz=UTC),
        }
        if kind is TokenKind.ACCESS:
            return AccessClaims(**common)
        elif kind is TokenKind.REFRESH:
            token_id = payload.get("tokenId")
            if not isinstance(token_id, str) or not token_id:
                raise TokenInvalidError()
            return RefreshClaims(**common, token_id=token_id)
        elif kind is TokenKind.CONFIRMATION or kind is TokenKind.RESET_PASSWORD:
            return EmailClaims(**common)
        else:
            assert_never(kind)

    def _audience_matches(self, audience: Any) -> bool:
        # The configured domain must appear in the audience, literally.
        pattern = re.compile(re.escape(self.domain))
        if isinstance(audience, str):
            return bool(pattern.search(audience))
        if isinstance(audience, list):
            return any(isinstance(a, str) and pattern.search(a) for a in audience)
        return False
