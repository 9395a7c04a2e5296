"""Repository package exposing persistence-layer access for domain models."""

from __future__ import annotations

from vidstream.repositories.base import BaseRepository
from vidstream.repositories.user import UserRepository

__all__ = [
    "BaseRepository",
    "UserRepository",
]
