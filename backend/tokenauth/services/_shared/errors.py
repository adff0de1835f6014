"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and never import Flask or HTTP
helpers. They are stable contracts between the token codec, the principal
store, the authorization gate and the auth flows.

The translation to HTTP responses (RFC 7807) is handled by
``tokenauth/core/errors.py`` via :func:`tokenauth.core.errors.translate_service_error`.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError


def violates(exc: IntegrityError, constraint_name: str) -> bool:
    """
    Check whether an IntegrityError originates from a specific constraint.

    Parameters
    ----------
    exc : IntegrityError
        The exception raised by SQLAlchemy during flush/commit.
    constraint_name : str
        The name of the database constraint to match (e.g., 'uq_users_email').

    Returns
    -------
    bool
        True if the IntegrityError matches the given constraint.

    Notes
    -----
    PostgreSQL reports the constraint name; SQLite only reports the columns
    (``UNIQUE constraint failed: users.email``), so the column suffix of the
    conventional ``uq_<table>_<column>`` name is matched as well.
    """
    message = str(exc.orig).lower() if exc.orig else ""
    name = constraint_name.lower()
    if name in message:
        return True
    if name.startswith("uq_"):
        table, _, column = name[3:].partition("_")
        return bool(column) and f"{table}.{column}" in message
    return False


# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - The API layer translates them to ``APIError`` subclasses.
    """

    default_message = "Bad request"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self.args[0]) if self.args else self.default_message


# --------------------------------------------------------------------------- #
# Persistence errors
# --------------------------------------------------------------------------- #


@dataclass(slots=True)
class NotFoundError(ServiceError):
    """
    Raised when an entity is not found in the store.

    :param entity: Entity name (e.g., "User").
    :type entity: str
    :param key: Identifier or search key.
    :type key: str | int
    """

    entity: str
    key: str | int

    def __str__(self) -> str:
        return f"{self.entity} not found: {self.key}"


@dataclass(slots=True)
class ConflictError(ServiceError):
    """
    Raised when a unique constraint or business rule conflict occurs.

    :param entity: Entity name (e.g., "User").
    :type entity: str
    :param detail: Short human-readable explanation.
    :type detail: str
    """

    entity: str
    detail: str

    def __str__(self) -> str:
        return f"Conflict on {self.entity}: {self.detail}"


# --------------------------------------------------------------------------- #
# Authentication / authorization errors
# --------------------------------------------------------------------------- #


class InvalidCredentialsError(ServiceError):
    """Raised when the identifier/password pair does not match any principal."""

    default_message = "Invalid credentials"


class UnconfirmedError(ServiceError):
    """Raised on sign-in when the principal has not confirmed its email yet."""

    default_message = "Please confirm your email, a new email has been sent"


class UnauthorizedError(ServiceError):
    """Raised when a request carries no usable credential."""

    default_message = "Unauthorized"


class ForbiddenError(ServiceError):
    """Raised when an authenticated principal lacks the required role."""

    default_message = "Forbidden"


# --------------------------------------------------------------------------- #
# Token errors
# --------------------------------------------------------------------------- #


class TokenError(ServiceError):
    """Base class for token verification failures."""

    default_message = "Invalid token"


class TokenExpiredError(TokenError):
    """The token's ``exp`` passed or its age exceeds the kind's lifetime."""

    default_message = "Token expired"


class TokenInvalidError(TokenError):
    """Malformed token, bad signature, wrong issuer/audience or wrong kind."""

    default_message = "Invalid token"


class TokenRevokedError(TokenError):
    """The refresh session was blacklisted by a logout."""

    default_message = "Invalid token"


class TokenSigningError(ServiceError):
    """Unexpected failure of the signing primitive (internal error)."""

    default_message = "Something went wrong"
