# tests/unit/services/test_auth_service.py
from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from tokenauth.models.enums import OAuthProviderType, Role
from tokenauth.services._shared.errors import (
    ConflictError,
    InvalidCredentialsError,
    NotFoundError,
    TokenExpiredError,
    TokenInvalidError,
    TokenRevokedError,
    UnconfirmedError,
)
from tokenauth.services._shared.ports import (
    InMemoryKeyValueCache,
    InMemoryNotifier,
    InMemoryPrincipalStore,
)
from tokenauth.services.auth import (
    AuthResultOut,
    AuthService,
    FederatedIdentityIn,
    ResetPasswordIn,
    SignInIn,
    SignUpIn,
)
from tokenauth.services.revocation import RevocationCache
from tokenauth.services.tokens import TokenCodec, TokenKind

from tests.helpers.tokens import TTLS


class Clock:
    """Shared mutable clock for codec, cache and store."""

    def __init__(self) -> None:
        self.now = datetime(2024, 1, 1, 9, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += timedelta(seconds=seconds)


# ------------------------------ Fixtures ---------------------------------- #
@pytest.fixture()
def clock() -> Clock:
    return Clock()


@pytest.fixture()
def store(clock) -> InMemoryPrincipalStore:
    return InMemoryPrincipalStore(clock=clock)


@pytest.fixture()
def mailbox() -> InMemoryNotifier:
    return InMemoryNotifier()


@pytest.fixture()
def service(token_settings, clock, store, mailbox) -> AuthService:
    """Build an AuthService wired to in-memory doubles."""
    return AuthService(
        codec=TokenCodec(token_settings, clock=clock),
        revocations=RevocationCache(InMemoryKeyValueCache(clock=clock), clock=clock),
        principals=store,
        notifier=mailbox,
    )


@pytest.fixture()
def confirmed(service, store):
    """A confirmed principal with password ``secret12``."""
    return store.create(name="Ann", email="ann@example.com", password="secret12", confirmed=True)


def _token_id(service: AuthService, refresh_token: str) -> str:
    return service.codec.verify(refresh_token, TokenKind.REFRESH).token_id


# ------------------------------- Sign-up ---------------------------------- #
def test_sign_up_creates_unconfirmed_principal_and_sends_confirmation(service, mailbox):
    principal = service.sign_up(SignUpIn(name="Ann", email="Ann@Example.com", password="secret12"))

    assert principal.confirmed is False
    assert principal.email == "ann@example.com"
    assert len(mailbox.sent) == 1
    sent = mailbox.last("confirmation")
    assert sent is not None and sent.email == "ann@example.com"
    claims = service.codec.verify(sent.token, TokenKind.CONFIRMATION)
    assert claims.subject_id == principal.id


def test_sign_up_duplicate_email_conflicts(service, confirmed, mailbox):
    with pytest.raises(ConflictError):
        service.sign_up(SignUpIn(name="Other", email="ann@example.com", password="secret12"))
    assert mailbox.sent == []


# ---------------------------- Confirm email -------------------------------- #
def test_confirm_email_marks_confirmed_and_opens_session(service, mailbox, store):
    principal = service.sign_up(SignUpIn(name="Ann", email="ann@example.com", password="secret12"))
    token = mailbox.last("confirmation").token

    result = service.confirm_email(token)

    assert isinstance(result, AuthResultOut)
    assert result.principal.confirmed is True
    assert store.get(principal.id).confirmed is True
    assert service.codec.verify(result.access_token, TokenKind.ACCESS).subject_id == principal.id
    assert service.codec.verify(result.refresh_token, TokenKind.REFRESH).subject_id == principal.id


def test_confirm_email_rejects_other_kinds(service, confirmed):
    access = service.codec.generate(confirmed, TokenKind.ACCESS)
    with pytest.raises(TokenInvalidError):
        service.confirm_email(access)


def test_confirm_email_expired(service, mailbox, clock):
    service.sign_up(SignUpIn(name="Ann", email="ann@example.com", password="secret12"))
    token = mailbox.last("confirmation").token
    clock.advance(TTLS[TokenKind.CONFIRMATION])
    with pytest.raises(TokenExpiredError):
        service.confirm_email(token)


def test_confirm_email_for_deleted_principal(service, confirmed, store):
    token = service.codec.generate(confirmed, TokenKind.CONFIRMATION)
    store.delete(confirmed.id)
    with pytest.raises(NotFoundError):
        service.confirm_email(token)


# ------------------------------- Sign-in ---------------------------------- #
def test_sign_in_issues_pair(service, confirmed):
    result = service.sign_in(SignInIn(email="ANN@example.com", password="secret12"))
    assert result.principal.id == confirmed.id
    assert service.codec.verify(result.access_token, TokenKind.ACCESS).subject_id == confirmed.id


def test_sign_in_accepts_principal_id(service, confirmed):
    result = service.sign_in(SignInIn(email=confirmed.id, password="secret12"))
    assert result.principal.id == confirmed.id


@pytest.mark.parametrize(
    "email, password",
    [("ann@example.com", "wrong-pass"), ("nobody@example.com", "secret12")],
)
def test_sign_in_bad_credentials(service, confirmed, email, password):
    with pytest.raises(InvalidCredentialsError):
        service.sign_in(SignInIn(email=email, password=password))


def test_sign_in_unconfirmed_resends_exactly_one_confirmation(service, store, mailbox):
    principal = store.create(name="Bob", email="bob@example.com", password="secret12")

    with pytest.raises(UnconfirmedError):
        service.sign_in(SignInIn(email="bob@example.com", password="secret12"))

    assert len(mailbox.sent) == 1
    sent = mailbox.sent[0]
    assert sent.kind == "confirmation"
    assert service.codec.verify(sent.token, TokenKind.CONFIRMATION).subject_id == principal.id


def test_sign_in_binds_audience(service, confirmed):
    result = service.sign_in(
        SignInIn(email="ann@example.com", password="secret12"), audience="https://app.example.com"
    )
    claims = service.codec.verify(result.access_token, TokenKind.ACCESS)
    assert claims.audience == "https://app.example.com"


# ------------------------------- Refresh ---------------------------------- #
def test_refresh_rotates_and_preserves_token_id(service, confirmed, clock):
    first = service.sign_in(SignInIn(email="ann@example.com", password="secret12"))
    clock.advance(5)

    second = service.refresh_access(first.refresh_token)

    assert second.refresh_token != first.refresh_token
    assert _token_id(service, second.refresh_token) == _token_id(service, first.refresh_token)


def test_refresh_rejects_access_token(service, confirmed):
    result = service.sign_in(SignInIn(email="ann@example.com", password="secret12"))
    with pytest.raises(TokenInvalidError):
        service.refresh_access(result.access_token)


def test_refresh_for_deleted_principal(service, confirmed, store):
    result = service.sign_in(SignInIn(email="ann@example.com", password="secret12"))
    store._principals.clear()
    with pytest.raises(NotFoundError):
        service.refresh_access(result.refresh_token)


# ------------------------------- Logout ----------------------------------- #
def test_logout_then_refresh_is_revoked(service, confirmed):
    result = service.sign_in(SignInIn(email="ann@example.com", password="secret12"))

    service.logout(result.refresh_token)

    with pytest.raises(TokenRevokedError):
        service.refresh_access(result.refresh_token)


def test_logout_revokes_every_rotation_of_the_session(service, confirmed, clock):
    first = service.sign_in(SignInIn(email="ann@example.com", password="secret12"))
    clock.advance(5)
    rotated = service.refresh_access(first.refresh_token)

    service.logout(first.refresh_token)

    with pytest.raises(TokenRevokedError):
        service.refresh_access(rotated.refresh_token)


def test_logout_does_not_touch_other_sessions(service, confirmed):
    one = service.sign_in(SignInIn(email="ann@example.com", password="secret12"))
    two = service.sign_in(SignInIn(email="ann@example.com", password="secret12"))

    service.logout(one.refresh_token)

    assert service.refresh_access(two.refresh_token).principal.id == confirmed.id


def test_revocation_lives_as_long_as_the_token(service, confirmed, clock):
    result = service.sign_in(SignInIn(email="ann@example.com", password="secret12"))
    service.logout(result.refresh_token)
    claims = service.codec.verify(result.refresh_token, TokenKind.REFRESH)

    clock.advance(TTLS[TokenKind.REFRESH])

    assert not service.revocations.is_blacklisted(claims.subject_id, claims.token_id)
    with pytest.raises(TokenExpiredError):
        service.refresh_access(result.refresh_token)


def test_logout_with_invalid_token(service):
    with pytest.raises(TokenInvalidError):
        service.logout("definitely.not.valid")


# --------------------------- Forgot / reset -------------------------------- #
def test_forgot_password_unknown_email_is_silent(service, mailbox):
    assert service.forgot_password("ghost@example.com") is None
    assert mailbox.sent == []


def test_forgot_and_reset_password(service, confirmed, mailbox):
    service.forgot_password("ann@example.com")
    sent = mailbox.last("reset_password")
    assert sent is not None

    service.reset_password(ResetPasswordIn(reset_token=sent.token, new_password="brand-new-1"))

    with pytest.raises(InvalidCredentialsError):
        service.sign_in(SignInIn(email="ann@example.com", password="secret12"))
    assert service.sign_in(SignInIn(email="ann@example.com", password="brand-new-1"))


def test_reset_password_rejects_confirmation_token(service, confirmed):
    token = service.codec.generate(confirmed, TokenKind.CONFIRMATION)
    with pytest.raises(TokenInvalidError):
        service.reset_password(ResetPasswordIn(reset_token=token, new_password="brand-new-1"))


def test_reset_password_for_deleted_principal(service, confirmed, store):
    token = service.codec.generate(confirmed, TokenKind.RESET_PASSWORD)
    store._principals.clear()
    with pytest.raises(NotFoundError):
        service.reset_password(ResetPasswordIn(reset_token=token, new_password="brand-new-1"))


# --------------------------- Update password ------------------------------- #
def test_update_password_opens_a_new_session(service, confirmed):
    first = service.sign_in(SignInIn(email="ann@example.com", password="secret12"))

    result = service.update_password(confirmed.id, "changed-pass")

    assert _token_id(service, result.refresh_token) != _token_id(service, first.refresh_token)
    assert service.sign_in(SignInIn(email="ann@example.com", password="changed-pass"))


def test_update_password_missing_principal(service):
    with pytest.raises(NotFoundError):
        service.update_password("missing-id", "changed-pass")


# --------------------------- Federated sign-in ----------------------------- #
def test_sign_in_with_creates_confirmed_principal_without_password(service, store):
    identity = FederatedIdentityIn(
        provider=OAuthProviderType.GITHUB, name="Cleo", email="cleo@example.com"
    )

    result = service.sign_in_with(identity)

    assert result.principal.confirmed is True
    assert (result.principal.id, OAuthProviderType.GITHUB) in store.links
    with pytest.raises(InvalidCredentialsError):
        store.find_by_credentials("cleo@example.com", "!")


def test_sign_in_with_reuses_existing_principal(service, confirmed, store):
    identity = FederatedIdentityIn(
        provider=OAuthProviderType.GOOGLE, name="Ann", email="ann@example.com"
    )
    result = service.sign_in_with(identity)
    assert result.principal.id == confirmed.id
    assert result.principal.role is Role.USER


# ------------------------------ Current ----------------------------------- #
def test_current_principal(service, confirmed):
    assert service.current_principal(confirmed.id) == confirmed
    with pytest.raises(NotFoundError):
        service.current_principal("missing-id")


# -------------------------- End-to-end example ----------------------------- #
def test_full_lifecycle(service, mailbox, clock):
    service.sign_up(SignUpIn(name="A", email="a@b.com", password="secret12"))
    t1 = mailbox.last("confirmation").token

    confirmed = service.confirm_email(t1)
    assert confirmed.access_token and confirmed.refresh_token

    clock.advance(1)
    signed_in = service.sign_in(SignInIn(email="a@b.com", password="secret12"))
    service.logout(signed_in.refresh_token)

    with pytest.raises(TokenRevokedError):
        service.refresh_access(signed_in.refresh_token)
