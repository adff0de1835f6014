"""Convenience exports for application schemas."""

from __future__ import annotations

from .auth import (
    AuthResponseSchema,
    ConfirmEmailSchema,
    EmailSchema,
    PasswordSchema,
    ResetPasswordSchema,
    SignInSchema,
    SignUpSchema,
)
from .common import MessageSchema, MetaSchema, PaginationQuerySchema, SortQuerySchema, build_meta
from .user import UserCreateSchema, UserSchema, UserUpdateSchema

__all__ = [
    "AuthResponseSchema",
    "ConfirmEmailSchema",
    "EmailSchema",
    "PasswordSchema",
    "ResetPasswordSchema",
    "SignInSchema",
    "SignUpSchema",
    "MessageSchema",
    "MetaSchema",
    "PaginationQuerySchema",
    "SortQuerySchema",
    "build_meta",
    "UserSchema",
    "UserCreateSchema",
    "UserUpdateSchema",
]
