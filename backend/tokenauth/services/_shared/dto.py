# tokenauth/services/_shared/dto.py
from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime

from tokenauth.models.enums import Role


@dataclass(frozen=True, slots=True)
class Principal:
    """
    Read-only view of a stored principal handed to services and the codec.

    Never carries the password hash.

    :param id: Principal identifier (UUID4 string).
    :type id: str
    :param name: Display name (normalized lowercase).
    :type name: str
    :param email: Login email (normalized lowercase).
    :type email: str
    :param confirmed: Whether the email address has been confirmed.
    :type confirmed: bool
    :param role: Authorization role.
    :type role: Role
    :param created_at: Creation timestamp, when known.
    :type created_at: datetime | None
    """

    id: str
    name: str
    email: str
    confirmed: bool = False
    role: Role = Role.USER
    created_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class PaginationIn:
    """
    Input pagination contract.

    :param page: 1-based page number.
    :type page: int
    :param limit: Page size (> 0).
    :type limit: int
    :param sort: Sort tokens like ``["-created_at", "email"]``.
    :type sort: Sequence[str]
    """

    page: int = 1
    limit: int = 20
    sort: Sequence[str] = field(default_factory=tuple)


@dataclass(frozen=True, slots=True)
class PageOut:
    """
    A page of principals plus metadata.

    :param items: Principals on this page.
    :param total: Total rows available.
    :param page: Current page (1-based).
    :param limit: Page size.
    """

    items: Sequence[Principal]
    total: int
    page: int
    limit: int
