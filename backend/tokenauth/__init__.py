"""Expose the application factory at package level.

Provide convenient access to :func:`tokenauth.factory.create_app` so callers
can ``from tokenauth import create_app`` (gunicorn, ``flask --app``).
"""

from __future__ import annotations

from .factory import create_app

__all__ = ["create_app"]
