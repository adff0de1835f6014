"""
tokenauth.services._shared.ports
================================

*Ports* (hexagonal interfaces) the auth services depend on, each paired with
an in-memory double used by unit tests and by local runs without Redis/SMTP.

Modules
-------
- :mod:`key_value_cache`:
    :class:`~.KeyValueCache`, the TTL store behind the revocation cache.
- :mod:`principal_store`:
    :class:`~.PrincipalStore`, durable storage of principals.
- :mod:`notifier`:
    :class:`~.Notifier`, delivery of confirmation / reset emails.

Concrete adapters (Redis, SQLAlchemy, SMTP) live under ``tokenauth.infra``.
"""

from __future__ import annotations

from .key_value_cache import InMemoryKeyValueCache, KeyValueCache
from .notifier import InMemoryNotifier, Notifier, SentNotification
from .principal_store import (
    UNUSABLE_PASSWORD,
    InMemoryPrincipalStore,
    PrincipalStore,
    normalize,
)

__all__ = [
    "KeyValueCache",
    "InMemoryKeyValueCache",
    "Notifier",
    "InMemoryNotifier",
    "SentNotification",
    "PrincipalStore",
    "InMemoryPrincipalStore",
    "UNUSABLE_PASSWORD",
    "normalize",
]
