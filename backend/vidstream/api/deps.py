"""Shared API helpers for authentication, responses and cross-cutting concerns."""

from __future__ import annotations

import functools
import logging
import time
from collections.abc import Callable
from typing import Any, TypeVar

from flask import Response, current_app, g, jsonify, request

from vidstream.core.config import parse_duration
from vidstream.core.extensions import get_media_store, get_password_hasher, get_token_provider
from vidstream.services._shared.errors import AuthenticationError
from vidstream.services._shared.ports import InvalidTokenError, TokenKind, TokenPair
from vidstream.services.auth.service import AuthService
from vidstream.services.channels.service import ChannelService
from vidstream.services.identity.service import IdentityService

F = TypeVar("F", bound=Callable[..., Any])

ACCESS_COOKIE = "accessToken"
REFRESH_COOKIE = "refreshToken"

log = logging.getLogger(__name__)


# ------------------------------- Services -----------------------------------


def auth_service() -> AuthService:
    """Build an :class:`AuthService` wired to the application's collaborators."""
    return AuthService(
        token_provider=get_token_provider(),
        hasher=get_password_hasher(),
        media_store=get_media_store(),
        revoke_sessions_on_password_change=bool(
            current_app.config.get("AUTH_REVOKE_SESSIONS_ON_PASSWORD_CHANGE", False)
        ),
    )


def identity_service() -> IdentityService:
    return IdentityService(media_store=get_media_store())


def channel_service() -> ChannelService:
    return ChannelService()


# ---------------------------- Authentication --------------------------------


def _bearer_token() -> str | None:
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() == "bearer" and token.strip():
        return token.strip()
    return request.cookies.get(ACCESS_COOKIE) or None


def _authenticate(optional: bool) -> None:
    g.current_user_id = None
    g.token_claims = None

    token = _bearer_token()
    if token is None:
        if optional:
            return
        raise AuthenticationError("Unauthorized request.")

    try:
        claims = get_token_provider().verify(token, TokenKind.ACCESS)
    except InvalidTokenError as exc:
        if optional:
            # A stale cookie must not break public endpoints.
            return
        log.warning("Access token rejected", extra={"reason": exc.reason})
        raise AuthenticationError("Invalid access token.") from exc

    g.current_user_id = claims.user_id
    g.token_claims = claims


def require_auth(func: F) -> F:
    """Ensure the request carries a valid access token (header or cookie)."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        _authenticate(optional=False)
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def optional_auth(func: F) -> F:
    """Resolve the viewer when a valid access token is present; never reject."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        _authenticate(optional=True)
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def current_user_id() -> int:
    """Return the authenticated user id (only valid under :func:`require_auth`)."""
    user_id = getattr(g, "current_user_id", None)
    if user_id is None:
        raise AuthenticationError("Unauthorized request.")
    return int(user_id)


# ------------------------------- Cookies ------------------------------------


def _cookie_kwargs() -> dict[str, Any]:
    return {
        "httponly": True,
        "secure": bool(current_app.config.get("AUTH_COOKIE_SECURE", True)),
        "samesite": current_app.config.get("AUTH_COOKIE_SAMESITE"),
        "path": "/",
    }


def set_auth_cookies(response: Response, tokens: TokenPair) -> Response:
    """Attach both tokens as HttpOnly cookies living as long as the tokens."""
    access_age = parse_duration(current_app.config.get("ACCESS_TOKEN_EXPIRY", "1d"))
    refresh_age = parse_duration(current_app.config.get("REFRESH_TOKEN_EXPIRY", "10d"))
    kwargs = _cookie_kwargs()
    response.set_cookie(ACCESS_COOKIE, tokens.access_token, max_age=access_age, **kwargs)
    response.set_cookie(REFRESH_COOKIE, tokens.refresh_token, max_age=refresh_age, **kwargs)
    return response


def clear_auth_cookies(response: Response) -> Response:
    kwargs = _cookie_kwargs()
    response.delete_cookie(ACCESS_COOKIE, **kwargs)
    response.delete_cookie(REFRESH_COOKIE, **kwargs)
    return response


# ------------------------------- Responses ----------------------------------


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def api_response(data: Any, message: str = "Success", *, status: int = 200) -> Response:
    """Wrap ``data`` in the success envelope."""

    return json_response(
        {"statusCode": status, "data": data, "message": message, "success": status < 400},
        status=status,
    )


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
