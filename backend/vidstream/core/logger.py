"""Structured JSON logging with per-request correlation ids."""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from flask import Flask, g, has_request_context, request

REQUEST_ID_HEADER = "X-Request-ID"
CORRELATION_HEADERS = ("X-Request-ID", "X-Correlation-ID")
# Cached per WSGI request; the app context (and ``g``) may outlive a request.
REQUEST_ID_ENVIRON_KEY = "vidstream.request_id"

# Attributes passed through ``extra=`` that are copied into the JSON payload.
EXTRA_FIELDS = ("endpoint", "elapsed_ms", "user_id", "reason")


class JSONFormatter(logging.Formatter):
    """Render each log record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "time": datetime.now(UTC).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", None),
        }
        for key in EXTRA_FIELDS:
            if hasattr(record, key):
                payload[key] = getattr(record, key)
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class RequestIdFilter(logging.Filter):
    """Stamp ``request_id`` on every record (``None`` outside a request)."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = ensure_request_id() if has_request_context() else None
        return True


def ensure_request_id() -> str:
    """Return the current request id, adopting an inbound header or minting one.

    Outside a request context a fresh id is returned on every call.
    """
    if not has_request_context():
        return str(uuid4())
    current = request.environ.get(REQUEST_ID_ENVIRON_KEY)
    if current:
        return str(current)
    inbound = next(
        (request.headers[h] for h in CORRELATION_HEADERS if request.headers.get(h)),
        None,
    )
    request_id = inbound or str(uuid4())
    request.environ[REQUEST_ID_ENVIRON_KEY] = request_id
    g.request_id = request_id
    return request_id


def configure_logging(level: str | int = "INFO") -> None:
    """Send root logging to stdout as JSON at ``level``."""
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())
    handler.addFilter(RequestIdFilter())

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level.upper() if isinstance(level, str) else level)


def init_app(app: Flask) -> None:
    """Seed request ids early and echo them back on every response."""
    app.logger.addFilter(RequestIdFilter())

    @app.before_request
    def _seed_request_id() -> None:
        ensure_request_id()

    @app.after_request
    def _echo_request_id(response):
        response.headers.setdefault(REQUEST_ID_HEADER, ensure_request_id())
        return response


__all__ = ["configure_logging", "ensure_request_id", "init_app"]
