"""Application settings with environment-based simple classes."""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from datetime import timedelta
from typing import Final

from dotenv import load_dotenv

# Public selector env var (keep neutral name to avoid collisions)
ENV_VAR: Final[str] = "APP_ENV"  # 'development' | 'testing' | 'production'

# Load .env in development (no-op when the file is absent)
load_dotenv()

_DURATION_RE = re.compile(r"^\s*(\d+)\s*([smhdw]?)\s*$", re.IGNORECASE)
_DURATION_UNITS: Final[dict[str, str]] = {
    "": "seconds",
    "s": "seconds",
    "m": "minutes",
    "h": "hours",
    "d": "days",
    "w": "weeks",
}


def env_bool(name: str, default: bool = False) -> bool:
    """Parse a boolean flag from an environment variable.

    Parameters
    ----------
    name: str
        Environment variable to inspect.
    default: bool, optional
        Value returned when the variable is unset. Defaults to ``False``.

    Returns
    -------
    bool
        ``True`` if the value resembles ``{"1", "true", "yes", "y", "on"}``
        ignoring case; otherwise ``False`` or ``default`` when missing.
    """
    val = os.getenv(name)
    if val is None:
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "y", "on"}


def parse_duration(value: str | int | timedelta) -> timedelta:
    """Convert an expiry setting into a :class:`~datetime.timedelta`.

    Accepts the compact ``"<amount><unit>"`` notation used by token expiry
    settings (``"15m"``, ``"1d"``, ``"10d"``), bare seconds (``"900"`` or
    ``900``), or an existing ``timedelta``.

    Parameters
    ----------
    value: str | int | timedelta
        Raw setting value.

    Returns
    -------
    timedelta
        Parsed, strictly positive duration.

    Raises
    ------
    ValueError
        If the value cannot be parsed or is not positive.
    """
    if isinstance(value, timedelta):
        delta = value
    elif isinstance(value, int):
        delta = timedelta(seconds=value)
    else:
        match = _DURATION_RE.match(str(value))
        if match is None:
            raise ValueError(f"Invalid duration: {value!r}")
        amount, unit = match.groups()
        delta = timedelta(**{_DURATION_UNITS[unit.lower()]: int(amount)})
    if delta <= timedelta(0):
        raise ValueError(f"Duration must be positive: {value!r}")
    return delta


class BaseConfig:
    """Base configuration shared across environments.

    Attributes
    ----------
    API_BASE_PREFIX: str
        Root path for registering API blueprints.
    SECRET_KEY: str
        Flask secret. Not used for tokens; kept for extensions that need it.
    ACCESS_TOKEN_SECRET / REFRESH_TOKEN_SECRET: str
        Independent HMAC secrets for the two token kinds. Must differ.
    ACCESS_TOKEN_EXPIRY / REFRESH_TOKEN_EXPIRY: str
        Lifetimes in ``"<amount><unit>"`` notation (see :func:`parse_duration`).
    PASSWORD_HASH_METHOD: str
        Method string understood by :func:`werkzeug.security.generate_password_hash`.
    AUTH_COOKIE_SECURE: bool
        Emit ``Secure`` on the token cookies. Disable only for plain-HTTP dev.
    AUTH_REVOKE_SESSIONS_ON_PASSWORD_CHANGE: bool
        When ``True`` a password change also clears the stored refresh token.
    MEDIA_STORE: str
        ``"local"`` (files under ``MEDIA_ROOT``) or ``"s3"``.
    UPLOAD_TMP_DIR: str
        Staging directory for multipart uploads before they reach the store.
    SQLALCHEMY_DATABASE_URI: str
        Database connection string consumed by SQLAlchemy.
    LOG_LEVEL: str
        Root logging verbosity (``INFO`` by default).
    CORS_ORIGINS: str
        Comma-separated list of allowed origins for CORS.

    Notes
    -----
    Values are sourced from environment variables once, at import time. The
    security collaborators built from them are created in
    :func:`vidstream.core.extensions.init_app`.
    """

    API_BASE_PREFIX = "/api"

    # Secrets
    SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME")
    ACCESS_TOKEN_SECRET = os.getenv("ACCESS_TOKEN_SECRET", "CHANGE_ME_ACCESS")
    ACCESS_TOKEN_EXPIRY = os.getenv("ACCESS_TOKEN_EXPIRY", "1d")
    REFRESH_TOKEN_SECRET = os.getenv("REFRESH_TOKEN_SECRET", "CHANGE_ME_REFRESH")
    REFRESH_TOKEN_EXPIRY = os.getenv("REFRESH_TOKEN_EXPIRY", "10d")
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")

    # Passwords
    PASSWORD_HASH_METHOD = os.getenv("PASSWORD_HASH_METHOD", "scrypt")
    PASSWORD_SALT_LENGTH = int(os.getenv("PASSWORD_SALT_LENGTH", "16"))

    # Session cookies & policy
    AUTH_COOKIE_SECURE = env_bool("AUTH_COOKIE_SECURE", True)
    AUTH_COOKIE_SAMESITE = os.getenv("AUTH_COOKIE_SAMESITE") or None
    AUTH_REVOKE_SESSIONS_ON_PASSWORD_CHANGE = env_bool(
        "AUTH_REVOKE_SESSIONS_ON_PASSWORD_CHANGE", False
    )

    # Media
    MEDIA_STORE = os.getenv("MEDIA_STORE", "local")
    MEDIA_ROOT = os.getenv("MEDIA_ROOT", "./public/media")
    MEDIA_BASE_URL = os.getenv("MEDIA_BASE_URL", "/media")
    UPLOAD_TMP_DIR = os.getenv("UPLOAD_TMP_DIR", "./public/temp")
    S3_BUCKET = os.getenv("S3_BUCKET", "")
    S3_REGION = os.getenv("S3_REGION") or None
    S3_PUBLIC_BASE_URL = os.getenv("S3_PUBLIC_BASE_URL", "")
    S3_KEY_PREFIX = os.getenv("S3_KEY_PREFIX", "media/")
    MAX_CONTENT_LENGTH = int(os.getenv("MAX_CONTENT_LENGTH", str(10 * 1024 * 1024)))

    # DB
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///./dev.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)

    # Flask & JSON
    JSON_SORT_KEYS = False
    PROPAGATE_EXCEPTIONS = False

    # Logging, CORS, proxy
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:5173")
    USE_PROXYFIX = env_bool("USE_PROXYFIX", True)

    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    """Configuration tailored for local development.

    Notes
    -----
    Enables debug mode by default and relaxes the ``Secure`` cookie flag
    unless explicitly requested, since the dev server speaks plain HTTP.
    """

    DEBUG = env_bool("FLASK_DEBUG", True)
    AUTH_COOKIE_SECURE = env_bool("AUTH_COOKIE_SECURE", False)
    CORS_MAX_AGE = 600  # 10 minutes


class TestingConfig(BaseConfig):
    """Configuration for automated test runs.

    Notes
    -----
    - Uses an in-memory SQLite database unless ``TEST_DATABASE_URL`` is set.
    - Uses a cheap pbkdf2 work factor so password hashing does not dominate
      the suite runtime.
    - Propagates exceptions so pytest can surface tracebacks directly.
    """

    TESTING = True
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    ACCESS_TOKEN_SECRET = "test-access-secret"
    REFRESH_TOKEN_SECRET = "test-refresh-secret"
    PASSWORD_HASH_METHOD = "pbkdf2:sha256:1000"
    USE_PROXYFIX = False
    PROPAGATE_EXCEPTIONS = True


class ProductionConfig(BaseConfig):
    """Configuration defaults for production deployments.

    Notes
    -----
    Keeps debug and SQL echoing disabled while relying on WSGI-level log
    configuration for noise control.
    """

    DEBUG = False
    SQLALCHEMY_ECHO = False
    PROPAGATE_EXCEPTIONS = False
    AUTH_COOKIE_SECURE = True


CONFIG_MAP: Mapping[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config() -> type[BaseConfig]:
    """Return the configuration class inferred from ``APP_ENV``.

    Returns
    -------
    type[BaseConfig]
        Class to pass to :meth:`flask.Config.from_object`.

    Notes
    -----
    Falls back to :class:`DevelopmentConfig` when ``APP_ENV`` is unset or
    unknown.
    """
    name = os.getenv(ENV_VAR, "development").strip().lower()
    return CONFIG_MAP.get(name, DevelopmentConfig)
