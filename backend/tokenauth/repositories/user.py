"""User repository for persistence and credential checks."""

from __future__ import annotations

from typing import cast

from sqlalchemy import select

from tokenauth.models.enums import Role
from tokenauth.models.user import User
from tokenauth.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Persistence-only repository for :class:`User`.

    Lookup and password operations only. It never issues tokens.
    """

    model = User

    def _sortable_fields(self):
        """Expose sortable fields for safe public sorting."""
        return {
            "email": User.email,
            "name": User.name,
            "created_at": User.created_at,
        }

    def _updatable_fields(self) -> set[str]:
        return {"name", "email", "password", "role", "confirmed"}

    # ---------------------------- Lookup helpers ----------------------------

    def get_by_email(self, email: str) -> User | None:
        """Fetch a user by email (case-insensitive).

        :param email: Email address to normalise and search.
        :type email: str
        :returns: User instance or ``None`` when not found.
        :rtype: User | None
        """
        stmt = select(User).where(User.email == email.lower().strip())
        return cast(User | None, self.session.execute(stmt).scalars().first())

    def exists_by_email(self, email: str) -> bool:
        """Return ``True`` when a user with the provided email exists."""
        stmt = select(User.id).where(User.email == email.lower().strip())
        return bool(self.session.execute(stmt).first())

    def get_by_id_or_email(self, id_or_email: str) -> User | None:
        """Resolve a sign-in identifier that may be an email or a user id."""
        if "@" in id_or_email:
            return self.get_by_email(id_or_email)
        return self.get(id_or_email)

    # ---------------------------- Mutations ----------------------------

    def update_password(self, user_id: str, new_password: str) -> User | None:
        """Hash and store a new password; ``None`` when the user is missing."""
        user = self.get(user_id)
        if user is None:
            return None
        user.password = new_password  # invokes setter → hash
        self.flush()
        return user

    def mark_confirmed(self, user_id: str) -> User | None:
        """Flag the user's email as confirmed; ``None`` when missing."""
        user = self.get(user_id)
        if user is None:
            return None
        user.confirmed = True
        self.flush()
        return user

    def update_role(self, user_id: str, role: Role) -> User | None:
        user = self.get(user_id)
        if user is None:
            return None
        user.role = role
        self.flush()
        return user

    def update_fields(self, user_id: str, **fields) -> User | None:
        """Apply whitelisted field updates; ``None`` when the user is missing."""
        user = self.get(user_id)
        if user is None:
            return None
        return self.assign_updates(user, fields)

    def authenticate(self, id_or_email: str, password: str) -> User | None:
        """Authenticate a user by email (or id) and password.

        :returns: Authenticated user or ``None`` when credentials fail.
        :rtype: User | None
        """
        user = self.get_by_id_or_email(id_or_email)
        if user is None or not user.verify_password(password):
            return None
        return user
