"""Centralized JSON error handling for the API.

Every failure leaves the application as the same envelope::

    {"statusCode": 401, "data": null, "message": "...", "success": false,
     "errors": [...], "requestId": "..."}
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any

from flask import Flask, Response, jsonify, request
from marshmallow import ValidationError as MarshmallowValidationError
from sqlalchemy.exc import IntegrityError, OperationalError
from werkzeug.exceptions import HTTPException

from vidstream.core.logger import ensure_request_id
from vidstream.services._shared.errors import ServiceError

log = logging.getLogger(__name__)


def error_envelope(
    *,
    status: int,
    message: str,
    errors: list[Any] | dict[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Build the failure envelope.

    :param status: HTTP status code.
    :param message: Human-readable error summary (safe for clients).
    :param errors: Optional safe, structured details.
    :returns: Envelope dictionary, always carrying the request id.
    :rtype: dict
    """
    return {
        "statusCode": int(status),
        "data": None,
        "message": message,
        "success": False,
        "errors": errors if errors is not None else [],
        "requestId": ensure_request_id(),
    }


def _error_response(envelope: dict[str, Any]) -> tuple[Response, int]:
    return jsonify(envelope), envelope["statusCode"]


def init_app(app: Flask) -> None:
    """
    Attach JSON error handlers to the Flask app.

    Notes
    -----
    - Guarantees the failure envelope for all handled errors.
    - Emits 5xx with ``exc_info`` for traceability; 4xx as warnings.
    """

    @app.errorhandler(ServiceError)
    def handle_service_error(err: ServiceError):
        status = err.status_code
        envelope = error_envelope(status=status, message=err.message, errors=err.errors)
        if status >= 500:
            log.error(
                "ServiceError: kind=%s status=%s msg=%s",
                err.kind.code,
                status,
                err.message,
                exc_info=err,
            )
        else:
            log.warning(
                "ServiceError: kind=%s status=%s msg=%s", err.kind.code, status, err.message
            )
        return _error_response(envelope)

    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        status = int(err.code or HTTPStatus.INTERNAL_SERVER_ERROR)
        # Werkzeug descriptions may be long or HTML-ish; use the status phrase.
        try:
            message = HTTPStatus(status).phrase
        except ValueError:
            message = "Error"
        if status == HTTPStatus.NOT_FOUND:
            message = f"Route '{request.path}' not found"
        level = log.error if status >= 500 else log.warning
        level("HTTPException: status=%s detail=%s", status, message)
        return _error_response(error_envelope(status=status, message=message))

    @app.errorhandler(MarshmallowValidationError)
    def handle_validation_error(err: MarshmallowValidationError):
        envelope = error_envelope(
            status=HTTPStatus.BAD_REQUEST,
            message="Validation failed",
            errors=err.normalized_messages(),
        )
        log.warning("ValidationError: fields=%s", sorted(err.normalized_messages()))
        return _error_response(envelope)

    @app.errorhandler(IntegrityError)
    def handle_integrity_error(err: IntegrityError):
        # Do not leak raw DB error to clients
        log.error("IntegrityError", exc_info=True)
        return _error_response(
            error_envelope(status=HTTPStatus.CONFLICT, message="Resource conflict")
        )

    @app.errorhandler(OperationalError)
    def handle_operational_error(err: OperationalError):
        # E.g., transient DB connectivity, deadlocks, etc.
        log.error("OperationalError", exc_info=True)
        return _error_response(
            error_envelope(
                status=HTTPStatus.SERVICE_UNAVAILABLE,
                message="Service temporarily unavailable",
            )
        )

    @app.errorhandler(Exception)
    def handle_unexpected_error(err: Exception):
        # Never leak internal details
        log.error("Unhandled exception", exc_info=True)
        return _error_response(
            error_envelope(
                status=HTTPStatus.INTERNAL_SERVER_ERROR,
                message="Something went wrong while processing the request.",
            )
        )
