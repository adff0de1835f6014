"""Build the token/auth object graph once per application."""

from __future__ import annotations

import atexit
import logging
from dataclasses import dataclass

from flask import Flask, current_app

from tokenauth.core import extensions
from tokenauth.infra.mail.notifier import LoggingNotifier, SMTPNotifier
from tokenauth.infra.redis.key_value_cache import RedisKeyValueCache
from tokenauth.infra.sqlalchemy.principal_store import SQLAlchemyPrincipalStore
from tokenauth.services._shared.ports import (
    InMemoryKeyValueCache,
    KeyValueCache,
    Notifier,
    PrincipalStore,
)
from tokenauth.services.auth import AuthService
from tokenauth.services.authorization import AuthorizationGate
from tokenauth.services.cookies import RefreshCookieTransport
from tokenauth.services.revocation import RevocationCache
from tokenauth.services.tokens import TokenCodec, TokenKind, TokenSettings

log = logging.getLogger(__name__)

EXTENSION_KEY = "tokenauth"


@dataclass(slots=True)
class AuthComponents:
    """
    Process-wide collaborators shared by reference across requests.

    Attributes
    ----------
    codec : TokenCodec
        Signs and verifies tokens.
    cache : KeyValueCache
        TTL store backing the revocation cache.
    revocations : RevocationCache
        Refresh-session blacklist.
    principals : PrincipalStore
        Principal storage adapter.
    notifier : Notifier
        Email delivery adapter (replaceable in tests).
    gate : AuthorizationGate
        Per-request authorization decision.
    cookies : RefreshCookieTransport
        Refresh cookie packaging.
    """

    codec: TokenCodec
    cache: KeyValueCache
    revocations: RevocationCache
    principals: PrincipalStore
    notifier: Notifier
    gate: AuthorizationGate
    cookies: RefreshCookieTransport

    def auth_service(self) -> AuthService:
        return AuthService(
            codec=self.codec,
            revocations=self.revocations,
            principals=self.principals,
            notifier=self.notifier,
        )


def _build_cache() -> KeyValueCache:
    if extensions.redis_client is not None:
        return RedisKeyValueCache(extensions.redis_client)
    log.warning("revocation.in_memory_cache", extra={"reason": "REDIS_URL unset"})
    return InMemoryKeyValueCache()


def _build_notifier(app: Flask, domain: str) -> Notifier:
    cfg = app.config
    if not cfg.get("MAIL_SERVER"):
        return LoggingNotifier(domain=domain)
    notifier = SMTPNotifier(
        domain=domain,
        host=cfg["MAIL_SERVER"],
        port=int(cfg.get("MAIL_PORT", 587)),
        username=cfg.get("MAIL_USERNAME"),
        password=cfg.get("MAIL_PASSWORD"),
        use_tls=bool(cfg.get("MAIL_USE_TLS", True)),
        sender=cfg.get("MAIL_DEFAULT_SENDER", f"no-reply@{domain}"),
    )
    atexit.register(notifier.shutdown)
    return notifier


def build_components(app: Flask) -> AuthComponents:
    """Assemble the components from ``app.config``."""
    settings = TokenSettings.from_mapping(app.config)
    codec = TokenCodec(settings)
    cache = _build_cache()
    principals = SQLAlchemyPrincipalStore()
    api_base = app.config.get("API_BASE_PREFIX", "/api")
    cookies = RefreshCookieTransport(
        name=app.config.get("REFRESH_COOKIE", "cookie_refresh"),
        secret=app.config["COOKIE_SECRET"],
        path=f"{api_base}/v1/auth",
        ttl_seconds=codec.ttl(TokenKind.REFRESH),
        secure=not app.config.get("AUTH_TESTING_MODE", False),
    )
    return AuthComponents(
        codec=codec,
        cache=cache,
        revocations=RevocationCache(cache),
        principals=principals,
        notifier=_build_notifier(app, settings.domain),
        gate=AuthorizationGate(codec=codec, principals=principals),
        cookies=cookies,
    )


def init_app(app: Flask) -> None:
    """Attach the components to ``app.extensions``. Requires :mod:`extensions` first."""
    app.extensions[EXTENSION_KEY] = build_components(app)


def get_components() -> AuthComponents:
    """Return the components of the current application."""
    try:
        return current_app.extensions[EXTENSION_KEY]
    except KeyError as exc:
        raise RuntimeError("Auth components are not initialized. Call init_app() first.") from exc
