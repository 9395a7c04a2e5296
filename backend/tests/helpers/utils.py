"""Small assertion helpers shared by service and API tests."""

from __future__ import annotations

from contextlib import contextmanager


@contextmanager
def not_raises(exception: type[BaseException]):
    """Fail the test if ``exception`` escapes the block."""
    try:
        yield
    except exception as exc:  # pragma: no cover
        raise AssertionError(f"Unexpected {type(exc).__name__}: {exc}") from exc


def set_cookies(resp) -> dict[str, str]:
    """Map cookie name to its raw ``Set-Cookie`` header for ``resp``."""
    return {
        header.split("=", 1)[0]: header for header in resp.headers.getlist("Set-Cookie")
    }


def is_cleared(set_cookie_header: str) -> bool:
    """True when the header empties the cookie (``name=;`` plus an expiry)."""
    _, _, rest = set_cookie_header.partition("=")
    return rest.startswith(";") and "Expires=Thu, 01 Jan 1970" in rest
