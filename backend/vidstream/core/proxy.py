"""WSGI proxy middleware configuration helper."""

from __future__ import annotations

from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix


def init_app(app: Flask) -> None:
    """Wrap the WSGI app in :class:`~werkzeug.middleware.proxy_fix.ProxyFix`.

    The ``Secure`` token cookies depend on Flask seeing the original scheme,
    so deployments behind a TLS-terminating proxy must keep ``USE_PROXYFIX``
    enabled (the default). One hop of ``X-Forwarded-*`` headers is trusted.
    """
    if app.config.get("USE_PROXYFIX", True):
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1)
