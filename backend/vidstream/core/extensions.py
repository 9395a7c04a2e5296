"""Global Flask extension instances and initialization helpers."""

from __future__ import annotations

from typing import Any

from flask import Flask, current_app
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import MetaData

from vidstream.infra.jwt.jwt_token_provider import JWTTokenProvider, TokenSettings
from vidstream.infra.media.local_media_store import LocalMediaStore
from vidstream.infra.media.s3_media_store import S3MediaStore
from vidstream.infra.security.werkzeug_password_hasher import WerkzeugPasswordHasher
from vidstream.services._shared.ports import MediaStore, PasswordHasher, TokenProvider

# Global naming convention for all constraints
convention = {
    "ix": "ix_%(table_name)s_%(column_0_name)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

metadata = MetaData(naming_convention=convention)

# Global singletons (import-safe)
db: SQLAlchemy = SQLAlchemy(session_options={"autoflush": False}, metadata=metadata)
migrate = Migrate(render_as_batch=True)

EXTENSION_KEY = "vidstream"


def build_media_store(config: Any) -> MediaStore:
    """Instantiate the media store selected by ``MEDIA_STORE``.

    :raises ValueError: For an unknown backend name.
    """
    backend = str(config.get("MEDIA_STORE", "local")).lower()
    if backend == "local":
        return LocalMediaStore(config["MEDIA_ROOT"], config.get("MEDIA_BASE_URL", "/media"))
    if backend == "s3":
        return S3MediaStore(
            config.get("S3_BUCKET") or "",
            public_base_url=config.get("S3_PUBLIC_BASE_URL"),
            prefix=config.get("S3_KEY_PREFIX", "media/"),
            region=config.get("S3_REGION"),
        )
    raise ValueError(f"Unknown MEDIA_STORE backend: {backend!r}")


def init_app(app: Flask) -> None:
    """Initialize SQLAlchemy, migrations and the security collaborators.

    Parameters
    ----------
    app: flask.Flask
        Application used to bind extension instances. This call imports the
        :mod:`vidstream.models` package to ensure SQLAlchemy metadata is ready
        for migrations.

    Notes
    -----
    The token provider, password hasher and media store are built once from
    ``app.config`` and kept in ``app.extensions["vidstream"]``. Invalid token
    settings (missing or shared secrets, bad expiry strings) fail here, at
    startup, rather than on the first login.
    """
    db.init_app(app)

    # Ensure models are imported so Alembic sees metadata
    from vidstream import models as _models  # noqa: F401

    migrate.init_app(app, db)

    app.extensions[EXTENSION_KEY] = {
        "token_provider": JWTTokenProvider(TokenSettings.from_mapping(app.config)),
        "password_hasher": WerkzeugPasswordHasher(
            method=app.config.get("PASSWORD_HASH_METHOD", "scrypt"),
            salt_length=int(app.config.get("PASSWORD_SALT_LENGTH", 16)),
        ),
        "media_store": build_media_store(app.config),
    }


def _component(name: str) -> Any:
    try:
        return current_app.extensions[EXTENSION_KEY][name]
    except KeyError as exc:
        raise RuntimeError(f"{name} is not initialized. Call init_app() first.") from exc


def get_token_provider() -> TokenProvider:
    """Return the application's token provider."""
    return _component("token_provider")


def get_password_hasher() -> PasswordHasher:
    """Return the application's password hasher."""
    return _component("password_hasher")


def get_media_store() -> MediaStore:
    """Return the application's media store."""
    return _component("media_store")
