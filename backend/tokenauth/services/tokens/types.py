# tokenauth/services/tokens/types.py
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Protocol


class TokenKind(str, Enum):
    """
    The four token kinds. Each one is signed with its own secret and lifetime,
    and the kind is also written into the ``type`` claim.
    """

    ACCESS = "access"
    REFRESH = "refresh"
    CONFIRMATION = "confirmation"
    RESET_PASSWORD = "reset_password"


class TokenSubject(Protocol):
    """Anything a token can be issued for (a principal DTO or a model row)."""

    @property
    def id(self) -> str: ...

    @property
    def email(self) -> str: ...


# ---------------------------- Claims (tagged by kind) ---------------------- #


@dataclass(frozen=True, slots=True)
class TokenClaims:
    """
    Verified claims common to every kind.

    :param kind: Kind the token was verified as.
    :param subject_id: Principal id (``id`` claim).
    :param email: Principal email (``sub`` claim).
    :param issuer: ``iss`` claim.
    :param audience: ``aud`` claim.
    :param issued_at: ``iat`` claim (UTC).
    :param expires_at: ``exp`` claim (UTC).
    """

    kind: TokenKind
    subject_id: str
    email: str
    issuer: str
    audience: str
    issued_at: datetime
    expires_at: datetime

    @property
    def expires_at_epoch(self) -> int:
        return int(self.expires_at.timestamp())


@dataclass(frozen=True, slots=True)
class AccessClaims(TokenClaims):
    """Claims of an ACCESS token."""


@dataclass(frozen=True, slots=True)
class EmailClaims(TokenClaims):
    """Claims of a CONFIRMATION or RESET_PASSWORD token."""


@dataclass(frozen=True, slots=True)
class RefreshClaims(TokenClaims):
    """
    Claims of a REFRESH token.

    :param token_id: Session identifier preserved across rotations.
    """

    token_id: str


# ------------------------------- Settings ---------------------------------- #


@dataclass(frozen=True, slots=True)
class TokenProfile:
    """
    Signing profile of one kind.

    :param secret: HMAC secret.
    :param ttl_seconds: Lifetime, also the maximum accepted token age.
    """

    secret: str
    ttl_seconds: int

    def __post_init__(self) -> None:
        if not self.secret:
            raise ValueError("Token secret must be a non-empty string.")
        if self.ttl_seconds <= 0:
            raise ValueError("Token lifetime must be a positive number of seconds.")


@dataclass(frozen=True, slots=True)
class TokenSettings:
    """
    Codec configuration: issuer domain plus one profile per kind.

    :param domain: Issuer and default audience.
    :param profiles: Profile for every :class:`TokenKind`.
    """

    domain: str
    profiles: Mapping[TokenKind, TokenProfile]

    def __post_init__(self) -> None:
        missing = [k.name for k in TokenKind if k not in self.profiles]
        if missing:
            raise ValueError(f"Missing token profiles: {missing}")

    def profile(self, kind: TokenKind) -> TokenProfile:
        return self.profiles[kind]

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> TokenSettings:
        """
        Build settings from a Flask-style config mapping.

        Reads ``DOMAIN`` and ``JWT_<KIND>_SECRET`` / ``JWT_<KIND>_TIME`` for each
        kind (e.g. ``JWT_RESET_PASSWORD_TIME``).
        """
        profiles = {
            kind: TokenProfile(
                secret=str(config[f"JWT_{kind.name}_SECRET"]),
                ttl_seconds=int(config[f"JWT_{kind.name}_TIME"]),
            )
            for kind in TokenKind
        }
        return cls(domain=str(config["DOMAIN"]), profiles=profiles)
