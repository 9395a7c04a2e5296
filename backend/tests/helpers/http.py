"""HTTP helper utilities for tests."""

from __future__ import annotations

import io

API = "/api/v1"


def json_headers(auth_token: str | None = None) -> dict[str, str]:
    """Return standard JSON headers.

    Parameters
    ----------
    auth_token:
        Optional bearer token to include.

    Returns
    -------
    dict[str, str]
        HTTP headers dictionary.
    """

    headers = {"Accept": "application/json"}
    if auth_token:
        headers["Authorization"] = f"Bearer {auth_token}"
    return headers


def image_file(name: str = "avatar.png", content: bytes = b"\x89PNG fake image"):
    """Return a ``(stream, filename)`` pair accepted by the Flask test client."""

    return io.BytesIO(content), name
