"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and never import Flask or build
HTTP responses. Every failure carries an :class:`ErrorKind` tag; the transport
layer (``vidstream/core/errors.py``) is the only place that turns the tag into
a status code and a response envelope.
"""

from __future__ import annotations

from enum import Enum
from http import HTTPStatus
from typing import Any

from sqlalchemy.exc import IntegrityError


def violates(exc: IntegrityError, constraint_name: str) -> bool:
    """
    Check whether an IntegrityError originates from a specific constraint.

    PostgreSQL reports the constraint name; SQLite reports the column list
    (``users.email``), so callers may pass either form.

    :param exc: The exception raised by SQLAlchemy during flush/commit.
    :type exc: IntegrityError
    :param constraint_name: Constraint or ``table.column`` name to look for.
    :type constraint_name: str
    :returns: ``True`` when the driver message mentions it.
    :rtype: bool
    """
    message = str(exc.orig).lower() if exc.orig else ""
    return constraint_name.lower() in message


class ErrorKind(Enum):
    """Failure taxonomy shared by every service. The value is the HTTP status."""

    VALIDATION = HTTPStatus.BAD_REQUEST
    AUTHENTICATION = HTTPStatus.UNAUTHORIZED
    NOT_FOUND = HTTPStatus.NOT_FOUND
    CONFLICT = HTTPStatus.CONFLICT
    INTERNAL = HTTPStatus.INTERNAL_SERVER_ERROR

    @property
    def status_code(self) -> int:
        return int(self.value)

    @property
    def code(self) -> str:
        return self.name.lower()


# --------------------------------------------------------------------------- #
# Base type
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    :param message: Client-safe message.
    :type message: str
    :param errors: Optional structured details (e.g. offending field names).
    :type errors: list[Any] | None

    Notes
    -----
    - These are *not* HTTP errors; ``kind`` tags them for the transport layer.
    - Subclasses only fix ``kind`` and a default message.
    """

    kind: ErrorKind = ErrorKind.VALIDATION
    default_message = "Something went wrong."

    def __init__(self, message: str | None = None, *, errors: list[Any] | None = None) -> None:
        self.message = message or self.default_message
        self.errors = list(errors or [])
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return self.kind.status_code


# --------------------------------------------------------------------------- #
# Specific domain-level errors
# --------------------------------------------------------------------------- #


class ValidationError(ServiceError):
    """Missing, blank or otherwise unusable input."""

    kind = ErrorKind.VALIDATION
    default_message = "All fields are required."


class AuthenticationError(ServiceError):
    """Bad credentials, or a bad/expired/superseded token."""

    kind = ErrorKind.AUTHENTICATION
    default_message = "Unauthorized request."


class NotFoundError(ServiceError):
    """
    Raised when an entity is not found.

    :param entity: Entity name (e.g., ``"User"``).
    :type entity: str
    :param key: Identifier or search key, kept for logs.
    :type key: str | int | None
    :param message: Optional client-facing message override.
    :type message: str | None
    """

    kind = ErrorKind.NOT_FOUND

    def __init__(self, entity: str, key: str | int | None = None, message: str | None = None):
        self.entity = entity
        self.key = key
        super().__init__(message or f"{entity} does not exist.")


class ConflictError(ServiceError):
    """
    Raised when a uniqueness rule is violated.

    :param entity: Entity name (e.g., ``"User"``).
    :type entity: str
    :param detail: Short human-readable explanation.
    :type detail: str
    """

    kind = ErrorKind.CONFLICT

    def __init__(self, entity: str, detail: str) -> None:
        self.entity = entity
        self.detail = detail
        super().__init__(f"{entity} with {detail} already exists.")


class InternalError(ServiceError):
    """Hashing or persistence failure that the caller cannot fix."""

    kind = ErrorKind.INTERNAL
    default_message = "Something went wrong while processing the request."
