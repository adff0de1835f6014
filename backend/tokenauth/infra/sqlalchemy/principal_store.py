"""Principal store backed by the ``users`` / ``oauth_providers`` tables."""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError

from tokenauth.models.enums import OAuthProviderType, Role
from tokenauth.models.user import UNUSABLE_PASSWORD, User
from tokenauth.services._shared.base import BaseService
from tokenauth.services._shared.dto import PageOut, PaginationIn, Principal
from tokenauth.services._shared.errors import (
    ConflictError,
    InvalidCredentialsError,
    NotFoundError,
    violates,
)

log = logging.getLogger(__name__)

EMAIL_CONSTRAINT = "uq_users_email"


def to_principal(user: User) -> Principal:
    """Project an ORM row onto the immutable :class:`Principal` view."""
    return Principal(
        id=user.id,
        name=user.name,
        email=user.email,
        confirmed=bool(user.confirmed),
        role=user.role,
        created_at=user.created_at,
    )


class SQLAlchemyPrincipalStore(BaseService):
    """
    :class:`~tokenauth.services._shared.ports.PrincipalStore` over SQLAlchemy.

    Every call runs in its own unit of work; reads use the read-only scope and
    ORM rows never leave it.
    """

    # ---------------------------------------------------------------- #
    # Writes
    # ---------------------------------------------------------------- #

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
        Insert a principal.

        :raises ConflictError: If the email is taken (checked up front and
            again through the unique constraint for concurrent sign-ups).
        """
        try:
            with self.rw_uow() as uow:
                if uow.users.exists_by_email(email):
                    raise ConflictError("User", "Email already in use")
                user = User(name=name, email=email, role=role, confirmed=confirmed)
                if password == UNUSABLE_PASSWORD:
                    user.set_unusable_password()
                else:
                    user.password = password
                uow.users.add(user)
                principal = to_principal(user)
        except IntegrityError as exc:
            if violates(exc, EMAIL_CONSTRAINT):
                raise ConflictError("User", "Email already in use") from exc
            raise
        return principal

    def confirm(self, principal_id: str) -> Principal:
        with self.rw_uow() as uow:
            user = uow.users.mark_confirmed(principal_id)
            if user is None:
                raise NotFoundError("User", principal_id)
            return to_principal(user)

    def set_password(self, principal_id: str, password: str) -> Principal:
        with self.rw_uow() as uow:
            user = uow.users.update_password(principal_id, password)
            if user is None:
                raise NotFoundError("User", principal_id)
            return to_principal(user)

    def set_role(self, principal_id: str, role: Role) -> Principal:
        with self.rw_uow() as uow:
            user = uow.users.update_role(principal_id, role)
            if user is None:
                raise NotFoundError("User", principal_id)
            return to_principal(user)

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
        Change the given fields of a principal in one transaction.

        :raises NotFoundError: If the principal does not exist.
        :raises ConflictError: If the new email belongs to another principal.
        """
        fields: dict = {}
        if name is not None:
            fields["name"] = name
        if password is not None:
            fields["password"] = password
        if role is not None:
            fields["role"] = role
        try:
            with self.rw_uow() as uow:
                user = uow.users.get(principal_id)
                if user is None:
                    raise NotFoundError("User", principal_id)
                if email is not None and email.strip().lower() != user.email:
                    if uow.users.exists_by_email(email):
                        raise ConflictError("User", "Email already in use")
                    fields.update(email=email, confirmed=False)
                uow.users.assign_updates(user, fields)
                principal = to_principal(user)
        except IntegrityError as exc:
            if violates(exc, EMAIL_CONSTRAINT):
                raise ConflictError("User", "Email already in use") from exc
            raise
        return principal

    def delete(self, principal_id: str) -> Principal:
        with self.rw_uow() as uow:
            user = uow.users.get(principal_id)
            if user is None:
                raise NotFoundError("User", principal_id)
            principal = to_principal(user)
            uow.users.delete(user)
        log.info("principal.deleted", extra={"principal_id": principal_id})
        return principal

    def find_or_create_federated(
        self, *, provider: OAuthProviderType, email: str, name: str
    ) -> Principal:
        """
        Resolve (or create) the principal for an identity vouched by ``provider``.

        New principals are confirmed immediately and get an unusable password.
        """
        with self.rw_uow() as uow:
            user = uow.users.get_by_email(email)
            if user is None:
                user = User(name=name, email=email, confirmed=True)
                user.set_unusable_password()
                uow.users.add(user)
                log.info("principal.federated_created", extra={"principal_id": user.id})
            uow.oauth_providers.link(user_id=user.id, provider=provider, email=email)
            return to_principal(user)

    # ---------------------------------------------------------------- #
    # Reads
    # ---------------------------------------------------------------- #

    def get(self, principal_id: str) -> Principal | None:
        with self.ro_uow() as uow:
            user = uow.users.get(principal_id)
            return to_principal(user) if user is not None else None

    def get_by_email(self, email: str) -> Principal | None:
        with self.ro_uow() as uow:
            user = uow.users.get_by_email(email)
            return to_principal(user) if user is not None else None

    def find_by_credentials(self, id_or_email: str, password: str) -> Principal:
        with self.ro_uow() as uow:
            user = uow.users.authenticate(id_or_email, password)
            if user is None:
                raise InvalidCredentialsError()
            return to_principal(user)

    def list_page(self, pagination: PaginationIn) -> PageOut:
        params = self.ensure_pagination(
            page=pagination.page, limit=pagination.limit, sort=pagination.sort
        )
        with self.ro_uow() as uow:
            page = uow.users.paginate(params)
            return PageOut(
                items=[to_principal(u) for u in page.items],
                total=page.total,
                page=page.page,
                limit=page.limit,
            )
