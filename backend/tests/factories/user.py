"""Factory Boy definitions for :class:`tokenauth.models.user.User`."""

from __future__ import annotations

import factory
from tokenauth.models.enums import Role
from tokenauth.models.user import User

from tests.factories import BaseFactory

DEFAULT_PASSWORD = "Passw0rd!"


class UserFactory(BaseFactory):
    """
    Build persisted, confirmed :class:`User` instances.

    Notes
    -----
    - Pass ``confirmed=False`` for principals that still await confirmation.
    - ``password`` is applied through the model setter so it gets hashed.
    """

    class Meta:
        model = User

    name = factory.Sequence(lambda n: f"user {n}")
    email = factory.Sequence(lambda n: f"user{n}@example.com")
    confirmed = True
    role = Role.USER
    password_hash = factory.LazyFunction(lambda: "")  # set via postgen

    @factory.post_generation
    def password(obj, create, extracted, **kwargs):
        """Set password using model setter (ensures hashing)."""
        obj.password = extracted or DEFAULT_PASSWORD


class AdminFactory(UserFactory):
    role = Role.ADMIN
