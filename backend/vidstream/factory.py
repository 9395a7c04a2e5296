"""Application factory for the accounts API.

Wiring order matters: logging first so extension start-up is logged, token
and media collaborators before the blueprints that resolve them, and error
handlers last so they cover every registered route.
"""

from __future__ import annotations

from flask import Flask

from vidstream.core.config import BaseConfig, get_config
from vidstream.core.logger import configure_logging, init_app as init_logging

# Placeholder secrets shipped in BaseConfig; never acceptable in production.
_PLACEHOLDER_SECRETS = ("CHANGE_ME", "CHANGE_ME_ACCESS", "CHANGE_ME_REFRESH")


def create_app(
    config: str | type[BaseConfig] | object | None = None,
    *,
    instance_relative_config: bool = True,
    instance_config_filename: str = "config.py",
) -> Flask:
    """
    Build the Flask application.

    :param config: Config class, object or import string. Defaults to the
        class selected by ``APP_ENV``.
    :param instance_relative_config: Load ``instance/<instance_config_filename>``
        on top of ``config`` when present.
    :raises RuntimeError: A non-debug, non-testing app still uses a
        placeholder secret.
    """
    app = Flask(__name__, instance_relative_config=instance_relative_config)

    app.config.from_object(get_config() if config is None else config)
    if instance_relative_config and instance_config_filename:
        app.config.from_pyfile(instance_config_filename, silent=True)
    _check_secrets(app)

    configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    from vidstream.core import cors, errors, extensions, proxy

    proxy.init_app(app)
    extensions.init_app(app)
    init_logging(app)
    cors.init_app(app)

    from vidstream.api import init_app as init_api

    init_api(app)
    errors.init_app(app)

    _register_shell_context(app)
    app.logger.debug("Accounts API ready")
    return app


def _check_secrets(app: Flask) -> None:
    if app.debug or app.testing:
        return
    weak = [
        key
        for key in ("SECRET_KEY", "ACCESS_TOKEN_SECRET", "REFRESH_TOKEN_SECRET")
        if app.config.get(key) in _PLACEHOLDER_SECRETS
    ]
    if weak:
        raise RuntimeError(f"Placeholder secrets in production config: {', '.join(weak)}")


def _register_shell_context(app: Flask) -> None:
    """Expose ``db`` and the models in ``flask shell``."""

    @app.shell_context_processor
    def _shell_context():
        from vidstream.core.extensions import db
        from vidstream.models import Subscription, User

        return {"db": db, "User": User, "Subscription": Subscription}
