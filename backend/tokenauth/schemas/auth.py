"""Authentication-related Marshmallow schemas."""

from __future__ import annotations

from marshmallow import Schema, fields, validate

from .user import PASSWORD_LENGTH, UserSchema


class SignUpSchema(Schema):
    """Input payload for account registration."""

    name = fields.String(required=True, validate=validate.Length(min=1, max=100))
    email = fields.Email(required=True, validate=validate.Length(max=254))
    password = fields.String(required=True, validate=PASSWORD_LENGTH)


class SignInSchema(Schema):
    """Input payload for authenticating a user (email or user id)."""

    email = fields.String(required=True, validate=validate.Length(min=1, max=254))
    password = fields.String(required=True, validate=validate.Length(min=1, max=128))


class ConfirmEmailSchema(Schema):
    confirmation_token = fields.String(required=True, validate=validate.Length(min=1))


class EmailSchema(Schema):
    """Input payload for requesting a password reset email."""

    email = fields.Email(required=True, validate=validate.Length(max=254))


class ResetPasswordSchema(Schema):
    reset_token = fields.String(required=True, validate=validate.Length(min=1))
    new_password = fields.String(required=True, validate=PASSWORD_LENGTH)


class PasswordSchema(Schema):
    """Input payload for changing the password of the signed-in user."""

    password = fields.String(required=True, validate=PASSWORD_LENGTH)


class AuthResponseSchema(Schema):
    """Session payload: the principal plus its ACCESS / REFRESH tokens."""

    user = fields.Nested(UserSchema, required=True, attribute="principal")
    access_token = fields.String(required=True)
    refresh_token = fields.String(required=True)
