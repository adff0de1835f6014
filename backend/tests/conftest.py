"""Pytest fixtures configuring an isolated transactional database layer.

Each test runs inside a SAVEPOINT-backed transaction against an in-memory
SQLite database so data changes never leak between cases. Email delivery and
the revocation cache are swapped for in-memory doubles on every test.
"""

from __future__ import annotations

import os
from collections.abc import Callable
from typing import Any

import pytest
from sqlalchemy import event
from sqlalchemy.orm import scoped_session, sessionmaker
from tokenauth.core.components import get_components
from tokenauth.core.config import TestingConfig
from tokenauth.core.extensions import db as _db  # Flask-SQLAlchemy instance
from tokenauth.factory import create_app  # application factory under test
from tokenauth.services._shared.ports import InMemoryKeyValueCache, InMemoryNotifier
from tokenauth.services.revocation import RevocationCache
from tokenauth.services.tokens import TokenKind, TokenProfile, TokenSettings

from tests.helpers.tokens import SECRETS, TTLS


class TestConfig(TestingConfig):
    """Testing configuration for creating the Flask app.

    Notes
    -----
    - Uses an in-memory SQLite database for speed.
    - Never talks to Redis or SMTP.
    - Pins the token domain and per-kind secrets.
    """

    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    DOMAIN = "example.com"
    JWT_ACCESS_SECRET = SECRETS[TokenKind.ACCESS]
    JWT_REFRESH_SECRET = SECRETS[TokenKind.REFRESH]
    JWT_CONFIRMATION_SECRET = SECRETS[TokenKind.CONFIRMATION]
    JWT_RESET_PASSWORD_SECRET = SECRETS[TokenKind.RESET_PASSWORD]
    JWT_ACCESS_TIME = TTLS[TokenKind.ACCESS]
    JWT_REFRESH_TIME = TTLS[TokenKind.REFRESH]
    JWT_CONFIRMATION_TIME = TTLS[TokenKind.CONFIRMATION]
    JWT_RESET_PASSWORD_TIME = TTLS[TokenKind.RESET_PASSWORD]
    COOKIE_SECRET = "cookie-secret-for-tests-0123456789abcdef"
    CORS_ORIGINS = "http://localhost:5173"
    LOG_LEVEL = "WARNING"


@pytest.fixture(scope="session")
def token_settings() -> TokenSettings:
    """Codec settings matching :class:`TestConfig`."""
    return TokenSettings(
        domain="example.com",
        profiles={kind: TokenProfile(SECRETS[kind], TTLS[kind]) for kind in TokenKind},
    )


@pytest.fixture(scope="session")
def app():
    """Create a Flask application configured for testing.

    Returns
    -------
    flask.Flask
        Application instance with :class:`TestConfig` applied and logging
        noise reduced.
    """
    # Ensure env-based config does not leak into tests
    os.environ.pop("DATABASE_URL", None)
    os.environ.pop("REDIS_URL", None)
    app = create_app(TestConfig)
    app.logger.setLevel("WARNING")
    return app


@pytest.fixture(scope="session")
def db(app):
    """Create database tables once per test session.

    Parameters
    ----------
    app: flask.Flask
        Application fixture ensuring the Flask context is available.

    Yields
    ------
    flask_sqlalchemy.SQLAlchemy
        Database extension bound to the testing application.
    """
    with app.app_context():
        _db.create_all()
        yield _db
        _db.session.remove()
        _db.drop_all()


@pytest.fixture(scope="session")
def connection(db):
    """Keep a dedicated DBAPI connection open for the whole session.

    Yields
    ------
    sqlalchemy.engine.Connection
        Connection reused by nested transactions in each test.
    """
    conn = db.engine.connect()
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture(scope="function")
def session(db, connection):
    """Provide a SQLAlchemy session wrapped in a nested transaction.

    Yields
    ------
    sqlalchemy.orm.scoping.scoped_session
        Scoped session bound to the shared connection; automatically rolled
        back after each test.

    Notes
    -----
    The fixture mirrors the SQLAlchemy 2.0 pattern for transactional tests: it
    begins a top-level transaction, starts a SAVEPOINT per test, and reinstalls
    the SAVEPOINT whenever SQLAlchemy ends one. Units of work commit into the
    SAVEPOINT, never into the database.
    """
    # 1) Top-level transaction
    top_trans = connection.begin()

    # 2) Scoped session bound to the connection
    SessionFactory = sessionmaker(bind=connection, future=True, autoflush=False)
    scoped = scoped_session(SessionFactory)

    # 3) SAVEPOINT per test
    nested = connection.begin_nested()

    # 4) Re-create SAVEPOINT when the previous nested transaction ends
    @event.listens_for(scoped(), "after_transaction_end")
    def _restart_savepoint(sess, trans):  # pragma: no cover
        if trans.nested and not trans._parent.nested:
            nonlocal nested
            nested = connection.begin_nested()

    # 5) Swap db.session so app code uses this scoped session
    original_session = db.session
    db.session.remove()
    db.session = scoped

    try:
        yield scoped
    finally:
        scoped.remove()
        db.session = original_session
        top_trans.rollback()


@pytest.fixture(scope="session")
def faker():
    """Provide a :class:`faker.Faker` instance seeded for deterministic tests."""
    from faker import Faker

    fk = Faker()
    Faker.seed(1337)
    return fk


@pytest.fixture()
def freeze_time() -> Callable[[str | None], Any]:
    """Factory returning :func:`freezegun.freeze_time`.

    Examples
    --------
    >>> def test_with_frozen_time(freeze_time):
    ...     with freeze_time("2024-01-01"):
    ...         ...
    """
    from freezegun import freeze_time as _freeze_time

    def _factory(target: str | None = None) -> Any:
        return _freeze_time(target or "2024-01-01")

    return _factory


# -- Per-test auth collaborators ----------------------------------------------
@pytest.fixture(autouse=True)
def components(app, db):
    """Give every test a fresh revocation cache and a recording notifier."""
    with app.app_context():
        comps = get_components()
    original = (comps.cache, comps.revocations, comps.notifier)
    comps.cache = InMemoryKeyValueCache()
    comps.revocations = RevocationCache(comps.cache)
    comps.notifier = InMemoryNotifier()
    try:
        yield comps
    finally:
        comps.cache, comps.revocations, comps.notifier = original


@pytest.fixture()
def notifier(components) -> InMemoryNotifier:
    return components.notifier


@pytest.fixture()
def client(app, session):
    """Return a Flask test client sharing the transactional session."""
    return app.test_client()


# -- Hook up Factory Boy to pytest SQLAlchemy session --------------------------
@pytest.fixture(autouse=True)
def _factories_session(session):
    """Wire Factory Boy's session helper to the transactional session fixture."""
    from tests.factories import SQLAlchemySession

    SQLAlchemySession.set(session)
    yield
