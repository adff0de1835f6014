# tokenauth/services/revocation/cache.py
from __future__ import annotations

import logging

from tokenauth.services._shared.clock import Clock, epoch, utcnow
from tokenauth.services._shared.ports.key_value_cache import KeyValueCache

log = logging.getLogger(__name__)


class RevocationCache:
    """
    Blacklist of refresh sessions, keyed by ``(subject_id, token_id)``.

    An entry lives exactly as long as the token it blocks: its TTL is the
    remaining lifetime of the token at revocation time, so the cache never
    accumulates dead markers. Both operations are idempotent.
    """

    KEY_PREFIX = "blacklist"

    def __init__(self, cache: KeyValueCache, *, clock: Clock = utcnow) -> None:
        """
        :param cache: Shared TTL store (Redis in production).
        :param clock: Time source (UTC), injectable for tests.
        """
        self.cache = cache
        self.clock = clock

    @classmethod
    def key(cls, subject_id: str, token_id: str) -> str:
        return f"{cls.KEY_PREFIX}:{subject_id}:{token_id}"

    def blacklist(self, subject_id: str, token_id: str, natural_expiry_epoch: int) -> None:
        """
        Mark a refresh session as revoked until ``natural_expiry_epoch``.

        :param subject_id: Principal id (``id`` claim).
        :param token_id: Session id (``tokenId`` claim).
        :param natural_expiry_epoch: The token's ``exp`` (POSIX seconds).
            Nothing is stored when that instant already passed.
        """
        now = epoch(self.clock)
        ttl = natural_expiry_epoch - now
        if ttl <= 0:
            log.debug("revocation.skip_expired", extra={"principal_id": subject_id})
            return
        self.cache.set(self.key(subject_id, token_id), str(now), ttl_seconds=ttl)
        log.info("revocation.blacklisted", extra={"principal_id": subject_id})

    def is_blacklisted(self, subject_id: str, token_id: str) -> bool:
        """Return ``True`` while the session ``(subject_id, token_id)`` is revoked."""
        return self.cache.get(self.key(subject_id, token_id)) is not None
