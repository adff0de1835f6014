"""Authentication endpoints using the service layer."""

from __future__ import annotations

from flask import Blueprint, request

from tokenauth.api.access import current_principal_id
from tokenauth.api.deps import (
    clear_refresh_cookie,
    get_auth_service,
    json_response,
    read_refresh_cookie,
    request_audience,
    save_refresh_cookie,
    timing,
)
from tokenauth.schemas import (
    AuthResponseSchema,
    ConfirmEmailSchema,
    EmailSchema,
    MessageSchema,
    PasswordSchema,
    ResetPasswordSchema,
    SignInSchema,
    SignUpSchema,
    UserSchema,
)
from tokenauth.services.auth import AuthResultOut, ResetPasswordIn, SignInIn, SignUpIn
from tokenauth.services.authorization import AUTHENTICATED, PUBLIC

bp = Blueprint("auth", __name__)

POLICIES = {
    "sign_up": PUBLIC,
    "confirm_email": PUBLIC,
    "sign_in": PUBLIC,
    "refresh_access": PUBLIC,
    "logout": AUTHENTICATED,
    "forgot_password": PUBLIC,
    "reset_password": PUBLIC,
    "update_password": AUTHENTICATED,
    "me": AUTHENTICATED,
}

sign_up_schema = SignUpSchema()
sign_in_schema = SignInSchema()
confirm_email_schema = ConfirmEmailSchema()
email_schema = EmailSchema()
reset_password_schema = ResetPasswordSchema()
password_schema = PasswordSchema()
auth_response_schema = AuthResponseSchema()
message_schema = MessageSchema()
user_schema = UserSchema()

SIGN_UP_MESSAGE = "The user has been created and is waiting confirmation"
LOGOUT_MESSAGE = "Logout successful"
FORGOT_PASSWORD_MESSAGE = "Reset password email sent"
RESET_PASSWORD_MESSAGE = "Password reset successfully"


def _payload() -> dict:
    return request.get_json(silent=True) or {}


def _message(text: str, *, status: int = 200):
    return json_response({"data": message_schema.dump({"message": text})}, status=status)


def _session_response(result: AuthResultOut):
    response = json_response({"data": auth_response_schema.dump(result)})
    return save_refresh_cookie(response, result.refresh_token)


@bp.post("/sign-up")
@timing
def sign_up():
    """Register a principal and email it a confirmation link."""

    data = sign_up_schema.load(_payload())
    get_auth_service().sign_up(SignUpIn(**data), audience=request_audience())
    return _message(SIGN_UP_MESSAGE, status=201)


@bp.post("/confirm-email")
@timing
def confirm_email():
    """Confirm an email and open a session."""

    data = confirm_email_schema.load(_payload())
    result = get_auth_service().confirm_email(
        data["confirmation_token"], audience=request_audience()
    )
    return _session_response(result)


@bp.post("/sign-in")
@timing
def sign_in():
    """Authenticate credentials and open a session."""

    data = sign_in_schema.load(_payload())
    result = get_auth_service().sign_in(SignInIn(**data), audience=request_audience())
    return _session_response(result)


@bp.post("/refresh-access")
@timing
def refresh_access():
    """Rotate the refresh cookie and issue a new access token."""

    token = read_refresh_cookie()
    result = get_auth_service().refresh_access(token, audience=request_audience())
    return _session_response(result)


@bp.post("/logout")
@timing
def logout():
    """Revoke the session carried by the refresh cookie and clear it."""

    token = read_refresh_cookie()
    get_auth_service().logout(token)
    return clear_refresh_cookie(_message(LOGOUT_MESSAGE))


@bp.post("/forgot-password")
@timing
def forgot_password():
    """Email a reset link; the answer is identical for unknown emails."""

    data = email_schema.load(_payload())
    get_auth_service().forgot_password(data["email"], audience=request_audience())
    return _message(FORGOT_PASSWORD_MESSAGE)


@bp.post("/reset-password")
@timing
def reset_password():
    data = reset_password_schema.load(_payload())
    get_auth_service().reset_password(ResetPasswordIn(**data))
    return _message(RESET_PASSWORD_MESSAGE)


@bp.patch("/update-password")
@timing
def update_password():
    """Change the password of the signed-in principal and open a new session."""

    data = password_schema.load(_payload())
    result = get_auth_service().update_password(
        current_principal_id(), data["password"], audience=request_audience()
    )
    return _session_response(result)


@bp.get("/me")
@timing
def me():
    """Return the authenticated principal."""

    principal = get_auth_service().current_principal(current_principal_id())
    return json_response({"data": user_schema.dump(principal)})
