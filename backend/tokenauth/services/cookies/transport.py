# tokenauth/services/cookies/transport.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Protocol

from itsdangerous import BadSignature, Signer

from tokenauth.services._shared.clock import Clock, utcnow
from tokenauth.services._shared.errors import UnauthorizedError

log = logging.getLogger(__name__)

SIGNER_SALT = "refresh-cookie"


@dataclass(frozen=True, slots=True)
class CookieAttributes:
    """
    Attributes applied when a cookie is written.

    :param path: URL path the browser sends the cookie to.
    :param expires: Absolute expiry (UTC).
    :param secure: Send over HTTPS only.
    :param httponly: Hide from client-side scripts.
    :param samesite: ``Strict`` / ``Lax`` / ``None``.
    """

    path: str
    expires: datetime
    secure: bool
    httponly: bool = True
    samesite: str = "Strict"


class CookieJar(Protocol):
    """Minimal cookie capability of a transport (one implementation per framework)."""

    def get_cookie(self, name: str) -> str | None: ...

    def set_cookie(self, name: str, value: str, attrs: CookieAttributes) -> None: ...

    def clear_cookie(self, name: str, *, path: str) -> None: ...


class InMemoryCookieJar(CookieJar):
    """Dictionary-backed jar for unit tests; keeps the last attributes written."""

    def __init__(self, cookies: dict[str, str] | None = None) -> None:
        self.cookies: dict[str, str] = dict(cookies or {})
        self.attributes: dict[str, CookieAttributes] = {}
        self.cleared: list[tuple[str, str]] = []

    def get_cookie(self, name: str) -> str | None:
        return self.cookies.get(name)

    def set_cookie(self, name: str, value: str, attrs: CookieAttributes) -> None:
        self.cookies[name] = value
        self.attributes[name] = attrs

    def clear_cookie(self, name: str, *, path: str) -> None:
        self.cookies.pop(name, None)
        self.attributes.pop(name, None)
        self.cleared.append((name, path))


class RefreshCookieTransport:
    """
    Carry the REFRESH token in a signed, http-only, path-scoped cookie.

    The cookie value is the token signed with ``itsdangerous``; a value whose
    signature does not match is treated like a missing cookie.
    """

    def __init__(
        self,
        *,
        name: str,
        secret: str,
        path: str,
        ttl_seconds: int,
        secure: bool,
        clock: Clock = utcnow,
    ) -> None:
        """
        :param name: Cookie name.
        :param secret: Cookie signing secret (independent of token secrets).
        :param path: Auth route prefix the cookie is scoped to.
        :param ttl_seconds: Lifetime, the REFRESH token lifetime.
        :param secure: ``False`` only in testing mode (plain HTTP).
        :param clock: Time source (UTC), injectable for tests.
        """
        self.name = name
        self.path = path
        self.ttl_seconds = ttl_seconds
        self.secure = secure
        self.clock = clock
        self._signer = Signer(secret, salt=SIGNER_SALT)

    def attributes(self) -> CookieAttributes:
        return CookieAttributes(
            path=self.path,
            expires=self.clock() + timedelta(seconds=self.ttl_seconds),
            secure=self.secure,
        )

    def save(self, jar: CookieJar, refresh_token: str) -> None:
        """Write ``refresh_token`` into the jar."""
        signed = self._signer.sign(refresh_token).decode("utf-8")
        jar.set_cookie(self.name, signed, self.attributes())

    def extract(self, jar: CookieJar) -> str:
        """
        Read the refresh token back from the jar.

        :raises UnauthorizedError: If the cookie is missing or its signature
            does not verify.
        """
        raw = jar.get_cookie(self.name)
        if not raw:
            raise UnauthorizedError()
        try:
            return self._signer.unsign(raw).decode("utf-8")
        except BadSignature as exc:
            log.warning("cookie.bad_signature", extra={"reason": "bad_signature"})
            raise UnauthorizedError() from exc

    def clear(self, jar: CookieJar) -> None:
        jar.clear_cookie(self.name, path=self.path)
