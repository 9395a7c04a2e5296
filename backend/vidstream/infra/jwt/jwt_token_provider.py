# vidstream/infra/jwt/jwt_token_provider.py
from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import uuid4

import jwt

from vidstream.core.config import parse_duration
from vidstream.services._shared.ports import (
    InvalidTokenError,
    TokenClaims,
    TokenKind,
    TokenProvider,
)

# Claims managed by the provider; callers cannot override them.
REGISTERED_CLAIMS = frozenset({"sub", "typ", "iat", "exp", "jti", "nbf", "iss", "aud"})


@dataclass(frozen=True, slots=True)
class SigningConfig:
    """
    Secret, lifetime and algorithm for one token family.

    :param secret: HMAC secret.
    :type secret: str
    :param expires: Token lifetime.
    :type expires: timedelta
    :param algorithm: JWS algorithm name.
    :type algorithm: str
    """

    secret: str
    expires: timedelta
    algorithm: str = "HS256"


@dataclass(frozen=True, slots=True)
class TokenSettings:
    """
    Independent signing configurations for access and refresh tokens.

    :raises ValueError: If a secret is empty or both families share a secret.
    """

    access: SigningConfig
    refresh: SigningConfig
    leeway: timedelta = timedelta(0)

    def __post_init__(self) -> None:
        if not self.access.secret or not self.refresh.secret:
            raise ValueError("Access and refresh token secrets must be set.")
        if self.access.secret == self.refresh.secret:
            raise ValueError("Access and refresh tokens must use distinct secrets.")

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> TokenSettings:
        """Build settings from a Flask config (or any mapping of the same keys)."""
        algorithm = str(config.get("JWT_ALGORITHM", "HS256"))
        return cls(
            access=SigningConfig(
                secret=str(config.get("ACCESS_TOKEN_SECRET") or ""),
                expires=parse_duration(config.get("ACCESS_TOKEN_EXPIRY", "1d")),
                algorithm=algorithm,
            ),
            refresh=SigningConfig(
                secret=str(config.get("REFRESH_TOKEN_SECRET") or ""),
                expires=parse_duration(config.get("REFRESH_TOKEN_EXPIRY", "10d")),
                algorithm=algorithm,
            ),
        )


class JWTTokenProvider(TokenProvider):
    """
    PyJWT-backed token issuer.

    Every token carries ``sub`` (user id as string), ``typ``, ``iat``, ``exp``
    and a random ``jti``. Verification is purely cryptographic and temporal;
    whether a refresh token is still the *current* one is decided elsewhere.

    :param settings: Signing configuration for both families.
    :param clock: Source of "now" for issued tokens (UTC-aware).
    """

    def __init__(
        self,
        settings: TokenSettings,
        *,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.settings = settings
        self._clock = clock or (lambda: datetime.now(UTC))

    def _signing(self, kind: TokenKind) -> SigningConfig:
        return self.settings.access if kind is TokenKind.ACCESS else self.settings.refresh

    def _encode(self, user_id: int, kind: TokenKind, claims: Mapping[str, Any] | None) -> str:
        cfg = self._signing(kind)
        now = self._clock()
        payload = {k: v for k, v in (claims or {}).items() if k not in REGISTERED_CLAIMS}
        payload.update(
            {
                "sub": str(user_id),
                "typ": kind.value,
                "iat": now,
                "exp": now + cfg.expires,
                "jti": uuid4().hex,
            }
        )
        return jwt.encode(payload, cfg.secret, algorithm=cfg.algorithm)

    def issue_access(self, user_id: int, claims: Mapping[str, Any] | None = None) -> str:
        return self._encode(user_id, TokenKind.ACCESS, claims)

    def issue_refresh(self, user_id: int) -> str:
        # Refresh tokens carry identity only.
        return self._encode(user_id, TokenKind.REFRESH, None)

    def verify(self, token: str, kind: TokenKind) -> TokenClaims:
        if not isinstance(token, str) or not token:
            raise InvalidTokenError("missing token")

        cfg = self._signing(kind)
        try:
            payload = jwt.decode(
                token,
                cfg.secret,
                algorithms=[cfg.algorithm],
                leeway=self.settings.leeway,
                options={"require": ["sub", "typ", "iat", "exp", "jti"]},
            )
        except jwt.ExpiredSignatureError as exc:
            raise InvalidTokenError("token expired") from exc
        except jwt.InvalidTokenError as exc:
            raise InvalidTokenError(f"token rejected: {exc}") from exc

        if payload.get("typ") != kind.value:
            raise InvalidTokenError(f"expected {kind.value} token")

        try:
            user_id = int(payload["sub"])
            issued_at = datetime.fromtimestamp(int(payload["iat"]), tz=UTC)
            expires_at = datetime.fromtimestamp(int(payload["exp"]), tz=UTC)
        except (TypeError, ValueError) as exc:
            raise InvalidTokenError("malformed payload") from exc

        return TokenClaims(
            user_id=user_id,
            kind=kind,
            jti=str(payload["jti"]),
            issued_at=issued_at,
            expires_at=expires_at,
            extra={k: v for k, v in payload.items() if k not in REGISTERED_CLAIMS},
        )
