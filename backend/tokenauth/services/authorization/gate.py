# tokenauth/services/authorization/gate.py
"""
Request-time authorization decision.

The gate is framework-agnostic: it receives the raw ``Authorization`` header
and the route's :class:`AccessPolicy` and returns a :class:`GateDecision`. The
Flask hook in ``tokenauth.api.access`` feeds it and raises on rejection.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum

from tokenauth.models.enums import Role
from tokenauth.services._shared.errors import (
    ForbiddenError,
    ServiceError,
    TokenError,
    UnauthorizedError,
)
from tokenauth.services._shared.ports.principal_store import PrincipalStore
from tokenauth.services.tokens import TokenCodec, TokenKind

log = logging.getLogger(__name__)

BEARER_SCHEME = "bearer"
# header.payload.signature, each base64url without padding
_JWT_SHAPE = re.compile(r"^[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+$")


class GateState(str, Enum):
    UNCHECKED = "unchecked"
    AUTHENTICATED = "authenticated"
    REJECTED = "rejected"


@dataclass(frozen=True, slots=True)
class AccessPolicy:
    """
    Capability descriptor of a route.

    :param public: Admit requests without credentials.
    :param allowed_roles: Roles admitted on a protected route; empty means
        any authenticated principal.
    """

    public: bool = False
    allowed_roles: frozenset[Role] = field(default_factory=frozenset)

    @classmethod
    def roles(cls, *roles: Role) -> AccessPolicy:
        return cls(public=False, allowed_roles=frozenset(roles))

    def admits(self, role: Role) -> bool:
        return not self.allowed_roles or role in self.allowed_roles


PUBLIC = AccessPolicy(public=True)
AUTHENTICATED = AccessPolicy()
ADMIN_ONLY = AccessPolicy.roles(Role.ADMIN)


@dataclass(frozen=True, slots=True)
class GateDecision:
    """
    Outcome of :meth:`AuthorizationGate.evaluate`.

    :param state: ``AUTHENTICATED`` or ``REJECTED``.
    :param principal_id: Resolved principal, possibly ``None`` on public routes.
    :param error: Rejection reason (:class:`UnauthorizedError` or
        :class:`ForbiddenError`) when rejected.
    """

    state: GateState
    principal_id: str | None = None
    role: Role | None = None
    error: ServiceError | None = None

    @property
    def admitted(self) -> bool:
        return self.state is GateState.AUTHENTICATED

    def raise_for_rejection(self) -> None:
        if self.error is not None:
            raise self.error


def extract_bearer(header: str | None) -> str | None:
    """
    Return the token of an ``Authorization: Bearer <jwt>`` header.

    :returns: The token, or ``None`` when the header is missing, uses another
        scheme, or does not carry a three-segment JWT.
    """
    if not header:
        return None
    scheme, _, token = header.strip().partition(" ")
    if scheme.lower() != BEARER_SCHEME:
        return None
    token = token.strip()
    if not _JWT_SHAPE.match(token):
        return None
    return token


class AuthorizationGate:
    """
    Decide whether a request may reach its handler.

    States move from ``UNCHECKED`` to exactly one of ``AUTHENTICATED`` or
    ``REJECTED``. Rejections distinguish missing/failed authentication
    (unauthorized) from an authenticated principal whose role is not allowed
    (forbidden).
    """

    def __init__(self, *, codec: TokenCodec, principals: PrincipalStore) -> None:
        self.codec = codec
        self.principals = principals

    def evaluate(self, authorization: str | None, policy: AccessPolicy) -> GateDecision:
        """
        Run the decision for one request.

        :param authorization: Raw ``Authorization`` header value, if any.
        :param policy: The route's declared access policy.
        :returns: The final decision (never ``UNCHECKED``).
        """
        token = extract_bearer(authorization)

        if policy.public:
            # Public routes surface a valid identity and ignore a bad one.
            principal_id = role = None
            if token is not None:
                resolved = self._resolve(token)
                if resolved is not None:
                    principal_id, role = resolved
            return GateDecision(GateState.AUTHENTICATED, principal_id=principal_id, role=role)

        if token is None:
            return self._reject(UnauthorizedError(), reason="missing_bearer")

        resolved = self._resolve(token)
        if resolved is None:
            return self._reject(UnauthorizedError(), reason="invalid_bearer")
        principal_id, role = resolved

        if not policy.admits(role):
            return self._reject(
                ForbiddenError(), reason="role_not_allowed", principal_id=principal_id
            )
        return GateDecision(GateState.AUTHENTICATED, principal_id=principal_id, role=role)

    def _resolve(self, token: str) -> tuple[str, Role] | None:
        try:
            claims = self.codec.verify(token, TokenKind.ACCESS)
        except TokenError:
            return None
        principal = self.principals.get(claims.subject_id)
        if principal is None:
            return None
        return principal.id, principal.role

    @staticmethod
    def _reject(
        error: ServiceError, *, reason: str, principal_id: str | None = None
    ) -> GateDecision:
        log.warning(
            "gate.rejected",
            extra={"reason": reason, "principal_id": principal_id},
        )
        return GateDecision(GateState.REJECTED, principal_id=principal_id, error=error)
