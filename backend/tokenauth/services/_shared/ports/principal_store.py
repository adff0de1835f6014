from __future__ import annotations

import threading
from dataclasses import replace
from typing import Protocol
from uuid import uuid4

from werkzeug.security import check_password_hash, generate_password_hash

from tokenauth.models.enums import OAuthProviderType, Role
from tokenauth.models.user import UNUSABLE_PASSWORD
from tokenauth.services._shared.clock import Clock, utcnow
from tokenauth.services._shared.dto import PageOut, PaginationIn, Principal
from tokenauth.services._shared.errors import (
    ConflictError,
    InvalidCredentialsError,
    NotFoundError,
)


def normalize(value: str) -> str:
    """Lower-case and trim a name or email the way the store persists it."""
    return value.strip().lower()


class PrincipalStore(Protocol):
    """
    Durable storage of principals.

    Every method returns :class:`Principal` views, never ORM rows.
    """

    def create(
        self,
        *,
        name: str,
        email: str,
        password: str,
        role: Role = Role.USER,
        confirmed: bool = False,
    ) -> Principal:
        """
        Persist a new principal.

        :raises ConflictError: If the email is already registered.
        """
        ...

    def get(self, principal_id: str) -> Principal | None: ...

    def get_by_email(self, email: str) -> Principal | None: ...

    def find_by_credentials(self, id_or_email: str, password: str) -> Principal:
        """
        Look a principal up by email (or id) and compare the password.

        :raises InvalidCredentialsError: Unknown principal or wrong password.
        """
        ...

    def confirm(self, principal_id: str) -> Principal:
        """:raises NotFoundError: If the principal does not exist."""
        ...

    def set_password(self, principal_id: str, password: str) -> Principal:
        """:raises NotFoundError: If the principal does not exist."""
        ...

    def set_role(self, principal_id: str, role: Role) -> Principal:
        """:raises NotFoundError: If the principal does not exist."""
        ...

    def update(
        self,
        principal_id: str,
        *,
        name: str | None = None,
        email: str | None = None,
        password: str | None = None,
        role: Role | None = None,
    ) -> Principal:
        """
        Change the given fields; ``None`` leaves a field untouched.

        A new email address clears the confirmed flag.

        :raises NotFoundError: If the principal does not exist.
        :raises ConflictError: If the new email belongs to another principal.
        """
        ...

    def delete(self, principal_id: str) -> Principal:
        """
        Remove a principal with its provider links and return its last view.

        :raises NotFoundError: If the principal does not exist.
        """
        ...

    def find_or_create_federated(
        self, *, provider: OAuthProviderType, email: str, name: str
    ) -> Principal:
        """
        Return the principal owning ``email`` linked to ``provider``.

        Creates a confirmed principal with an unusable password when the email
        is unknown, and links the provider when it is not linked yet.
        """
        ...

    def list_page(self, pagination: PaginationIn) -> PageOut: ...


class InMemoryPrincipalStore(PrincipalStore):
    """Dictionary-backed principal store for unit tests."""

    def __init__(self, *, clock: Clock = utcnow) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._principals: dict[str, Principal] = {}
        self._hashes: dict[str, str] = {}
        self.links: set[tuple[str, OAuthProviderType]] = set()

    def _require(self, principal_id: str) -> Principal:
        principal = self._principals.get(principal_id)
        if principal is None:
            raise NotFoundError("User", principal_id)
        return principal

    def _store(self, principal: Principal) -> Principal:
        self._principals[principal.id] = principal
        return principal

    def create(
        self,
        *,
        name: str,
        email: str,
        password: str,
        role: Role = Role.USER,
        confirmed: bool = False,
    ) -> Principal:
        with self._lock:
            email = normalize(email)
            if self._find_email(email) is not None:
                raise ConflictError("User", "Email already in use")
            principal = Principal(
                id=str(uuid4()),
                name=normalize(name),
                email=email,
                confirmed=confirmed,
                role=role,
                created_at=self._clock(),
            )
            self._hashes[principal.id] = (
                UNUSABLE_PASSWORD if password == UNUSABLE_PASSWORD
                else generate_password_hash(password)
            )
            return self._store(principal)

    def _find_email(self, email: str) -> Principal | None:
        return next((p for p in self._principals.values() if p.email == email), None)

    def get(self, principal_id: str) -> Principal | None:
        return self._principals.get(principal_id)

    def get_by_email(self, email: str) -> Principal | None:
        return self._find_email(normalize(email))

    def find_by_credentials(self, id_or_email: str, password: str) -> Principal:
        principal = self._find_email(normalize(id_or_email)) or self.get(id_or_email)
        if principal is None:
            raise InvalidCredentialsError()
        if not check_password_hash(self._hashes[principal.id], password):
            raise InvalidCredentialsError()
        return principal

    def confirm(self, principal_id: str) -> Principal:
        with self._lock:
            return self._store(replace(self._require(principal_id), confirmed=True))

    def set_password(self, principal_id: str, password: str) -> Principal:
        with self._lock:
            principal = self._require(principal_id)
            self._hashes[principal_id] = generate_password_hash(password)
            return principal

    def set_role(self, principal_id: str, role: Role) -> Principal:
        with self._lock:
            return self._store(replace(self._require(principal_id), role=role))

    def update(
        self,
        principal_id: str,
        *,
        name: str | None = None,
        email: str | None = None,
        password: str | None = None,
        role: Role | None = None,
    ) -> Principal:
        with self._lock:
            principal = self._require(principal_id)
            changes: dict = {}
            if name is not None:
                changes["name"] = normalize(name)
            if role is not None:
                changes["role"] = role
            if email is not None and normalize(email) != principal.email:
                email = normalize(email)
                if self._find_email(email) is not None:
                    raise ConflictError("User", "Email already in use")
                changes.update(email=email, confirmed=False)
            if password is not None:
                self._hashes[principal_id] = generate_password_hash(password)
            return self._store(replace(principal, **changes))

    def delete(self, principal_id: str) -> Principal:
        with self._lock:
            principal = self._require(principal_id)
            del self._principals[principal_id]
            del self._hashes[principal_id]
            self.links = {link for link in self.links if link[0] != principal_id}
            return principal

    def find_or_create_federated(
        self, *, provider: OAuthProviderType, email: str, name: str
    ) -> Principal:
        principal = self.get_by_email(email)
        if principal is None:
            principal = self.create(
                name=name, email=email, password=UNUSABLE_PASSWORD, confirmed=True
            )
        self.links.add((principal.id, provider))
        return principal

    def list_page(self, pagination: PaginationIn) -> PageOut:
        ordered = sorted(self._principals.values(), key=lambda p: (p.created_at, p.id))
        start = (max(pagination.page, 1) - 1) * pagination.limit
        return PageOut(
            items=ordered[start : start + pagination.limit],
            total=len(ordered),
            page=pagination.page,
            limit=pagination.limit,
        )
