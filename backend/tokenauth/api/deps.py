"""Shared API helpers for request parsing and cross-cutting concerns."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from typing import Any, TypeVar

from flask import Response, current_app, jsonify, request

from tokenauth.api.cookies import FlaskCookieJar
from tokenauth.core.components import get_components
from tokenauth.schemas.common import PaginationQuerySchema
from tokenauth.services._shared.dto import PaginationIn
from tokenauth.services.auth import AuthService

F = TypeVar("F", bound=Callable[..., Any])


def parse_pagination(default_limit: int = 20, max_limit: int = 200) -> PaginationIn:
    """Parse pagination parameters from ``request.args`` using Marshmallow."""

    schema = PaginationQuerySchema(default_limit=default_limit, max_limit=max_limit)
    data = schema.load(request.args)
    return PaginationIn(page=data["page"], limit=data["limit"], sort=tuple(data["sort"]))


def get_auth_service() -> AuthService:
    """Return an :class:`AuthService` bound to the application's components."""

    return get_components().auth_service()


def request_audience() -> str | None:
    """Return the requesting origin, used as token audience when present."""

    origin = (request.headers.get("Origin") or "").strip()
    return origin or None


def read_refresh_cookie() -> str:
    """
    Return the refresh token carried by the signed cookie.

    :raises UnauthorizedError: If the cookie is missing or tampered with.
    """

    return get_components().cookies.extract(FlaskCookieJar(request))


def save_refresh_cookie(response: Response, refresh_token: str) -> Response:
    get_components().cookies.save(FlaskCookieJar(request, response), refresh_token)
    return response


def clear_refresh_cookie(response: Response) -> Response:
    get_components().cookies.clear(FlaskCookieJar(request, response))
    return response


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            request_endpoint = getattr(request, "endpoint", None)
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request_endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]
