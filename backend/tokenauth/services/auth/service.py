# tokenauth/services/auth/service.py
from __future__ import annotations

import logging

from tokenauth.services._shared.dto import Principal
from tokenauth.services._shared.errors import (
    NotFoundError,
    TokenRevokedError,
    UnconfirmedError,
)
from tokenauth.services._shared.ports.notifier import Notifier
from tokenauth.services._shared.ports.principal_store import PrincipalStore
from tokenauth.services.auth.dto import (
    AuthResultOut,
    FederatedIdentityIn,
    ResetPasswordIn,
    SignInIn,
    SignUpIn,
)
from tokenauth.services.revocation import RevocationCache
from tokenauth.services.tokens import TokenCodec, TokenKind

log = logging.getLogger(__name__)


class AuthService:
    """
    Authentication flows (sign-up, confirmation, sign-in, refresh, logout and
    the password flows).

    The service owns no persistence: principals live in a
    :class:`PrincipalStore`, revoked sessions in a :class:`RevocationCache`,
    and emails leave through a :class:`Notifier`. Token strings and passwords
    are never logged.
    """

    def __init__(
        self,
        *,
        codec: TokenCodec,
        revocations: RevocationCache,
        principals: PrincipalStore,
        notifier: Notifier,
    ) -> None:
        """
        Initialize the service with its collaborators.

        :param codec: Signs and verifies the four token kinds.
        :param revocations: Blacklist of refresh sessions.
        :param principals: Principal storage port.
        :param notifier: Confirmation / reset email delivery.
        """
        self.codec = codec
        self.revocations = revocations
        self.principals = principals
        self.notifier = notifier

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    def _issue(
        self,
        principal: Principal,
        *,
        audience: str | None,
        token_id: str | None = None,
    ) -> AuthResultOut:
        access, refresh = self.codec.generate_pair(
            principal, audience=audience, token_id=token_id
        )
        return AuthResultOut(principal=principal, access_token=access, refresh_token=refresh)

    def _load(self, principal_id: str) -> Principal:
        principal = self.principals.get(principal_id)
        if principal is None:
            raise NotFoundError("User", principal_id)
        return principal

    def _send_confirmation(self, principal: Principal, *, audience: str | None) -> None:
        token = self.codec.generate(principal, TokenKind.CONFIRMATION, audience=audience)
        self.notifier.send_confirmation_email(principal, token)

    # ------------------------------------------------------------------ #
    # Registration
    # ------------------------------------------------------------------ #

    def sign_up(self, dto: SignUpIn, *, audience: str | None = None) -> Principal:
        """
        Create an unconfirmed principal and email it a confirmation token.

        :param dto: Sign-up input.
        :param audience: Requesting origin bound into the confirmation token.
        :returns: The created principal.
        :raises ConflictError: If the email is already registered.
        """
        principal = self.principals.create(
            name=dto.name, email=dto.email, password=dto.password
        )
        self._send_confirmation(principal, audience=audience)
        log.info("auth.sign_up", extra={"principal_id": principal.id, "flow": "sign_up"})
        return principal

    def confirm_email(self, token: str, *, audience: str | None = None) -> AuthResultOut:
        """
        Confirm the email behind a CONFIRMATION token and open a session.

        :raises TokenExpiredError: If the token is too old.
        :raises TokenInvalidError: If the token does not verify as CONFIRMATION.
        :raises NotFoundError: If the principal vanished since issuance.
        """
        claims = self.codec.verify(token, TokenKind.CONFIRMATION)
        principal = self.principals.confirm(claims.subject_id)
        log.info(
            "auth.email_confirmed",
            extra={"principal_id": principal.id, "flow": "confirm_email"},
        )
        return self._issue(principal, audience=audience)

    # ------------------------------------------------------------------ #
    # Sessions
    # ------------------------------------------------------------------ #

    def sign_in(self, dto: SignInIn, *, audience: str | None = None) -> AuthResultOut:
        """
        Authenticate credentials and issue an ACCESS + REFRESH pair.

        An unconfirmed principal gets a fresh confirmation email and the
        sign-in is rejected.

        :raises InvalidCredentialsError: Unknown principal or wrong password.
        :raises UnconfirmedError: If the email has not been confirmed yet.
        """
        principal = self.principals.find_by_credentials(dto.email, dto.password)
        if not principal.confirmed:
            self._send_confirmation(principal, audience=audience)
            log.warning(
                "auth.sign_in_unconfirmed",
                extra={"principal_id": principal.id, "flow": "sign_in"},
            )
            raise UnconfirmedError()
        log.info("auth.sign_in", extra={"principal_id": principal.id, "flow": "sign_in"})
        return self._issue(principal, audience=audience)

    def sign_in_with(
        self, identity: FederatedIdentityIn, *, audience: str | None = None
    ) -> AuthResultOut:
        """
        Open a session for an identity already verified by an external provider.

        The principal is created (confirmed, without a usable password) when
        the email is unknown.
        """
        principal = self.principals.find_or_create_federated(
            provider=identity.provider, email=identity.email, name=identity.name
        )
        log.info(
            "auth.sign_in_federated",
            extra={"principal_id": principal.id, "flow": identity.provider.value},
        )
        return self._issue(principal, audience=audience)

    def refresh_access(
        self, refresh_token: str, *, audience: str | None = None
    ) -> AuthResultOut:
        """
        Rotate a refresh token.

        The new REFRESH token keeps the ``tokenId`` of the presented one, so a
        later logout revokes every rotation of the session.

        Notes
        -----
        Two concurrent refreshes with the same token both pass the blacklist
        check and both succeed with the same session id.

        :raises TokenRevokedError: If the session was logged out.
        :raises TokenExpiredError: If the token is too old.
        :raises TokenInvalidError: If the token does not verify as REFRESH.
        :raises NotFoundError: If the principal no longer exists.
        """
        claims = self.codec.verify(refresh_token, TokenKind.REFRESH)
        if self.revocations.is_blacklisted(claims.subject_id, claims.token_id):
            log.warning(
                "auth.refresh_revoked",
                extra={"principal_id": claims.subject_id, "flow": "refresh"},
            )
            raise TokenRevokedError()
        principal = self._load(claims.subject_id)
        log.info("auth.refresh", extra={"principal_id": principal.id, "flow": "refresh"})
        return self._issue(principal, audience=audience, token_id=claims.token_id)

    def logout(self, refresh_token: str) -> None:
        """
        Revoke the session of ``refresh_token`` until the token would expire.

        :raises TokenExpiredError: If the token is too old.
        :raises TokenInvalidError: If the token does not verify as REFRESH.
        """
        claims = self.codec.verify(refresh_token, TokenKind.REFRESH)
        self.revocations.blacklist(
            claims.subject_id, claims.token_id, claims.expires_at_epoch
        )
        log.info("auth.logout", extra={"principal_id": claims.subject_id, "flow": "logout"})

    # ------------------------------------------------------------------ #
    # Passwords
    # ------------------------------------------------------------------ #

    def forgot_password(self, email: str, *, audience: str | None = None) -> None:
        """
        Email a RESET_PASSWORD token when ``email`` belongs to a principal.

        Unknown emails succeed silently so the endpoint cannot be used to
        enumerate accounts.
        """
        principal = self.principals.get_by_email(email)
        if principal is None:
            log.info("auth.forgot_password_unknown", extra={"flow": "forgot_password"})
            return
        token = self.codec.generate(principal, TokenKind.RESET_PASSWORD, audience=audience)
        self.notifier.send_reset_password_email(principal, token)
        log.info(
            "auth.forgot_password",
            extra={"principal_id": principal.id, "flow": "forgot_password"},
        )

    def reset_password(self, dto: ResetPasswordIn) -> Principal:
        """
        Replace the password of the principal behind a RESET_PASSWORD token.

        :raises TokenExpiredError: If the token is too old.
        :raises TokenInvalidError: If the token does not verify as RESET_PASSWORD.
        :raises NotFoundError: If the principal no longer exists.
        """
        claims = self.codec.verify(dto.reset_token, TokenKind.RESET_PASSWORD)
        principal = self.principals.set_password(claims.subject_id, dto.new_password)
        log.info(
            "auth.reset_password",
            extra={"principal_id": principal.id, "flow": "reset_password"},
        )
        return principal

    def update_password(
        self, principal_id: str, password: str, *, audience: str | None = None
    ) -> AuthResultOut:
        """
        Change the password of an authenticated principal and open a new session.

        :raises NotFoundError: If the principal no longer exists.
        """
        principal = self.principals.set_password(principal_id, password)
        log.info(
            "auth.update_password",
            extra={"principal_id": principal.id, "flow": "update_password"},
        )
        return self._issue(principal, audience=audience)

    # ------------------------------------------------------------------ #
    # Queries
    # ------------------------------------------------------------------ #

    def current_principal(self, principal_id: str) -> Principal:
        """:raises NotFoundError: If the principal no longer exists."""
        return self._load(principal_id)
