"""
vidstream.services._shared.ports
================================

*Ports* (hexagonal interfaces) the service layer depends on.

Modules
-------
- :mod:`token_provider`:
    :class:`~.TokenProvider` for signing/verifying access and refresh tokens,
    plus the :class:`~.TokenKind`, :class:`~.TokenClaims`, :class:`~.TokenPair`
    value types and :class:`~.InvalidTokenError`.

- :mod:`password_hasher`:
    :class:`~.PasswordHasher`, one-way salted hashing with constant-time verify.

- :mod:`media_store`:
    :class:`~.MediaStore` for avatar/cover uploads, :class:`~.MediaAsset`, and
    the :class:`~.InMemoryMediaStore` test double.

Concrete adapters live under ``vidstream.infra``.
"""

from __future__ import annotations

from .media_store import InMemoryMediaStore, MediaAsset, MediaStore
from .password_hasher import PasswordHasher
from .token_provider import (
    InvalidTokenError,
    TokenClaims,
    TokenKind,
    TokenPair,
    TokenProvider,
)

__all__ = [
    "InMemoryMediaStore",
    "InvalidTokenError",
    "MediaAsset",
    "MediaStore",
    "PasswordHasher",
    "TokenClaims",
    "TokenKind",
    "TokenPair",
    "TokenProvider",
]
