"""User resource schemas."""

from __future__ import annotations

from marshmallow import Schema, fields, validate

from tokenauth.models.enums import Role

PASSWORD_LENGTH = validate.Length(min=8, max=128)


class UserSchema(Schema):
    """Public representation of a principal; never exposes the password hash."""

    id = fields.String(required=True)
    name = fields.String(required=True)
    email = fields.Email(required=True)
    confirmed = fields.Boolean(required=True)
    role = fields.Enum(Role, by_value=True, required=True)
    created_at = fields.DateTime(allow_none=True)


class UserCreateSchema(Schema):
    """Admin input for creating a principal directly."""

    name = fields.String(required=True, validate=validate.Length(min=1, max=100))
    email = fields.Email(required=True, validate=validate.Length(max=254))
    password = fields.String(required=True, validate=PASSWORD_LENGTH)
    role = fields.Enum(Role, by_value=True, load_default=Role.USER)
    confirmed = fields.Boolean(load_default=False)


class UserUpdateSchema(Schema):
    """Admin input for a partial update; omitted fields stay as they are."""

    name = fields.String(validate=validate.Length(min=1, max=100))
    email = fields.Email(validate=validate.Length(max=254))
    password = fields.String(validate=PASSWORD_LENGTH)
    role = fields.Enum(Role, by_value=True)
