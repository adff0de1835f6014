"""Unit tests for the logging utility."""

from __future__ import annotations

import json
import logging

from tokenauth.core.logger import REQUEST_ID_HEADER, JSONFormatter, configure_logging


def test_configure_logging_sets_level() -> None:
    """``configure_logging`` should set the root logger level."""

    # Act
    configure_logging("DEBUG")

    # Assert
    assert logging.getLogger().level == logging.DEBUG
    configure_logging("WARNING")


def test_json_formatter_lifts_whitelisted_extras() -> None:
    record = logging.LogRecord("tokenauth.test", logging.INFO, __file__, 1, "auth.%s", ("ok",), None)
    record.principal_id = "p-1"
    record.flow = "sign_in"
    record.password = "hunter2"

    payload = json.loads(JSONFormatter().format(record))

    assert payload["message"] == "auth.ok"
    assert payload["level"] == "INFO"
    assert payload["principal_id"] == "p-1"
    assert payload["flow"] == "sign_in"
    assert "password" not in payload


def test_request_id_is_echoed(client) -> None:
    resp = client.get("/api/v1/health", headers={REQUEST_ID_HEADER: "req-123"})
    assert resp.headers[REQUEST_ID_HEADER] == "req-123"


def test_request_id_is_generated(client) -> None:
    resp = client.get("/api/v1/health")
    assert resp.headers.get(REQUEST_ID_HEADER)
