from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Protocol


class TokenKind(str, Enum):
    """The two independently signed token families."""

    ACCESS = "access"
    REFRESH = "refresh"


class InvalidTokenError(Exception):
    """
    A token failed verification.

    ``reason`` is for server logs only; callers must not echo it to clients.
    """

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


@dataclass(frozen=True, slots=True)
class TokenClaims:
    """
    Verified, decoded token contents.

    :ivar user_id: Subject of the token.
    :ivar kind: Token family it was verified against.
    :ivar jti: Unique token identifier.
    :ivar issued_at: ``iat`` claim (UTC).
    :ivar expires_at: ``exp`` claim (UTC).
    :ivar extra: Non-registered claims (identity hints on access tokens).
    """

    user_id: int
    kind: TokenKind
    jti: str
    issued_at: datetime
    expires_at: datetime
    extra: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class TokenPair:
    """Access/refresh tokens minted together."""

    access_token: str
    refresh_token: str


class TokenProvider(Protocol):
    """Port for issuing and statelessly verifying tokens."""

    def issue_access(self, user_id: int, claims: Mapping[str, Any] | None = None) -> str: ...

    def issue_refresh(self, user_id: int) -> str: ...

    def verify(self, token: str, kind: TokenKind) -> TokenClaims:
        """
        Verify signature, expiry and shape of ``token`` for ``kind``.

        :raises InvalidTokenError: On any failure.
        """
        ...
