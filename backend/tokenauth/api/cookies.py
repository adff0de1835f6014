"""Flask implementation of the cookie capability used by the refresh cookie."""

from __future__ import annotations

from flask import Request, Response

from tokenauth.services.cookies import CookieAttributes


class FlaskCookieJar:
    """
    Read cookies from the current request and write them on a response.

    :param req: Inbound request.
    :param response: Outbound response; required for writes.
    """

    def __init__(self, req: Request, response: Response | None = None) -> None:
        self.request = req
        self.response = response

    def _require_response(self) -> Response:
        if self.response is None:
            raise RuntimeError("FlaskCookieJar needs a response to write cookies.")
        return self.response

    def get_cookie(self, name: str) -> str | None:
        return self.request.cookies.get(name)

    def set_cookie(self, name: str, value: str, attrs: CookieAttributes) -> None:
        self._require_response().set_cookie(
            name,
            value,
            expires=attrs.expires,
            path=attrs.path,
            secure=attrs.secure,
            httponly=attrs.httponly,
            samesite=attrs.samesite,
        )

    def clear_cookie(self, name: str, *, path: str) -> None:
        self._require_response().delete_cookie(name, path=path)
