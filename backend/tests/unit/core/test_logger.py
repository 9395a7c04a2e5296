"""Unit tests for the logging utility."""

from __future__ import annotations

import json
import logging

import pytest

from vidstream.core.logger import JSONFormatter, configure_logging, ensure_request_id


@pytest.fixture()
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


def test_configure_logging_sets_level(restore_root_logger) -> None:
    """``configure_logging`` should set the root logger level."""

    configure_logging("debug")

    assert restore_root_logger.level == logging.DEBUG
    assert isinstance(restore_root_logger.handlers[0].formatter, JSONFormatter)


def test_json_formatter_includes_extra_fields() -> None:
    record = logging.LogRecord("vidstream.test", logging.INFO, __file__, 1, "hello %s", ("x",), None)
    record.user_id = 42
    record.request_id = "abc"

    payload = json.loads(JSONFormatter().format(record))

    assert payload["message"] == "hello x"
    assert payload["level"] == "INFO"
    assert payload["user_id"] == 42
    assert payload["request_id"] == "abc"
    assert "elapsed_ms" not in payload


def test_request_id_is_stable_within_a_request(app) -> None:
    with app.test_request_context(headers={"X-Correlation-ID": "corr-1"}):
        assert ensure_request_id() == "corr-1"
        assert ensure_request_id() == "corr-1"

    with app.test_request_context():
        first = ensure_request_id()
        assert ensure_request_id() == first
