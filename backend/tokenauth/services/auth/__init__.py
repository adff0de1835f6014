"""Authentication flows composed from the token codec and the ports."""

from __future__ import annotations

from .dto import AuthResultOut, FederatedIdentityIn, ResetPasswordIn, SignInIn, SignUpIn
from .service import AuthService

__all__ = [
    "AuthResultOut",
    "AuthService",
    "FederatedIdentityIn",
    "ResetPasswordIn",
    "SignInIn",
    "SignUpIn",
]
