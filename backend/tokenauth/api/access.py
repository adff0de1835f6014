"""
Route access policies and the ``before_request`` hook that enforces them.

Each blueprint module declares a ``POLICIES`` mapping from view name to
:class:`~tokenauth.services.authorization.AccessPolicy`. Endpoints missing
from the table require an authenticated principal.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from flask import Blueprint, Flask, current_app, g, request

from tokenauth.core.components import get_components
from tokenauth.services._shared.errors import UnauthorizedError
from tokenauth.services.authorization import AUTHENTICATED, AccessPolicy

POLICY_TABLE_KEY = "tokenauth.access_policies"


def build_policy_table(
    entries: Iterable[tuple[Blueprint, Mapping[str, AccessPolicy]]],
) -> dict[str, AccessPolicy]:
    """Flatten per-blueprint tables into ``{"<blueprint>.<view>": policy}``."""
    table: dict[str, AccessPolicy] = {}
    for bp, policies in entries:
        for view, policy in policies.items():
            table[f"{bp.name}.{view}"] = policy
    return table


def policy_for(endpoint: str) -> AccessPolicy:
    table: Mapping[str, AccessPolicy] = current_app.extensions.get(POLICY_TABLE_KEY, {})
    return table.get(endpoint, AUTHENTICATED)


def _authorize() -> None:
    # Unrouted requests fall through to the 404/405 handlers; CORS preflights
    # never carry credentials.
    if request.endpoint is None or request.endpoint == "static":
        return
    if request.method == "OPTIONS":
        return
    decision = get_components().gate.evaluate(
        request.headers.get("Authorization"), policy_for(request.endpoint)
    )
    g.principal_id = decision.principal_id
    g.principal_role = decision.role
    decision.raise_for_rejection()


def init_app(
    app: Flask,
    entries: Iterable[tuple[Blueprint, Mapping[str, AccessPolicy]]],
) -> None:
    """Install the policy table and the authorization hook on ``app``."""
    app.extensions[POLICY_TABLE_KEY] = build_policy_table(entries)
    app.before_request(_authorize)


def current_principal_id() -> str:
    """
    Return the principal admitted by the gate for this request.

    :raises UnauthorizedError: If the request is anonymous.
    """
    principal_id = g.get("principal_id")
    if not principal_id:
        raise UnauthorizedError()
    return principal_id
