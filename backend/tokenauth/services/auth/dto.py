# tokenauth/services/auth/dto.py
from __future__ import annotations

from dataclasses import dataclass

from tokenauth.models.enums import OAuthProviderType
from tokenauth.services._shared.dto import Principal

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class SignUpIn:
    """
    Input DTO for sign-up.

    :param name: Display name.
    :type name: str
    :param email: Login email.
    :type email: str
    :param password: Raw password (hashed by the store).
    :type password: str
    """

    name: str
    email: str
    password: str


@dataclass(frozen=True, slots=True)
class SignInIn:
    """
    Input DTO for sign-in.

    :param email: Login email (or principal id).
    :type email: str
    :param password: Raw password (to be verified).
    :type password: str
    """

    email: str
    password: str


@dataclass(frozen=True, slots=True)
class ResetPasswordIn:
    """
    Input DTO for completing a password reset.

    :param reset_token: RESET_PASSWORD token received by email.
    :type reset_token: str
    :param new_password: Raw replacement password.
    :type new_password: str
    """

    reset_token: str
    new_password: str


@dataclass(frozen=True, slots=True)
class FederatedIdentityIn:
    """
    Identity vouched for by an external provider after its own handshake.

    :param provider: Provider that authenticated the user.
    :param name: Display name reported by the provider.
    :param email: Email reported by the provider.
    """

    provider: OAuthProviderType
    name: str
    email: str


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class AuthResultOut:
    """
    Output DTO of every flow that opens a session.

    :param principal: Authenticated principal.
    :type principal: Principal
    :param access_token: Encoded ACCESS token.
    :type access_token: str
    :param refresh_token: Encoded REFRESH token.
    :type refresh_token: str
    """

    principal: Principal
    access_token: str
    refresh_token: str
