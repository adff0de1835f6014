"""Tests for environment-driven configuration helpers."""

from __future__ import annotations

import pytest
from tokenauth.core.config import (
    DevelopmentConfig,
    ProductionConfig,
    TestingConfig,
    env_bool,
    env_int,
    get_config,
)
from tokenauth.services.tokens import TokenKind, TokenSettings


@pytest.mark.parametrize("raw", ["1", "true", "YES", " on "])
def test_env_bool_truthy(monkeypatch, raw):
    monkeypatch.setenv("SOME_FLAG", raw)
    assert env_bool("SOME_FLAG") is True


def test_env_bool_default_and_falsy(monkeypatch):
    monkeypatch.delenv("SOME_FLAG", raising=False)
    assert env_bool("SOME_FLAG", True) is True
    monkeypatch.setenv("SOME_FLAG", "nope")
    assert env_bool("SOME_FLAG", True) is False


def test_env_int(monkeypatch):
    monkeypatch.setenv("SOME_INT", " 42 ")
    assert env_int("SOME_INT", 1) == 42
    monkeypatch.setenv("SOME_INT", "")
    assert env_int("SOME_INT", 7) == 7
    monkeypatch.setenv("SOME_INT", "abc")
    with pytest.raises(ValueError):
        env_int("SOME_INT", 1)


@pytest.mark.parametrize(
    ("env", "expected"),
    [
        ("production", ProductionConfig),
        ("Testing", TestingConfig),
        ("unknown", DevelopmentConfig),
    ],
)
def test_get_config(monkeypatch, env, expected):
    monkeypatch.setenv("APP_ENV", env)
    assert get_config() is expected


def test_app_config_builds_token_settings(app):
    settings = TokenSettings.from_mapping(app.config)
    assert settings.domain == "example.com"
    assert settings.profiles[TokenKind.REFRESH].ttl_seconds == app.config["JWT_REFRESH_TIME"]
