"""CORS configuration helper for API resources."""

from __future__ import annotations

from flask import Flask
from flask_cors import CORS


def init_app(app: Flask) -> None:
    """Configure CORS for the API so browser clients can send token cookies.

    Parameters
    ----------
    app: flask.Flask
        Application whose ``CORS_ORIGINS`` and ``CORS_MAX_AGE`` settings are
        consulted.

    Notes
    -----
    Credentialed requests (cookies) are only allowed for an explicit origin
    list; a blank value or ``"*"`` opens the API to any origin without
    credentials, since browsers reject ``*`` combined with credentials.
    """
    origins = [o.strip() for o in app.config.get("CORS_ORIGINS", "").split(",") if o.strip()]
    allow_any = not origins or origins == ["*"]

    CORS(
        app,
        resources={r"/api/*": {"origins": "*" if allow_any else origins}},
        supports_credentials=not allow_any,
        max_age=app.config.get("CORS_MAX_AGE", 600),
    )
