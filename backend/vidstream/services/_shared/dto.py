# comments in English; reST docstrings strict
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass(frozen=True, slots=True)
class UserPublicOut:
    """
    Public projection of a user. Never carries the password hash or tokens.

    :param id: User identifier.
    :param username: Lowercased handle.
    :param email: Lowercased email.
    :param full_name: Display name.
    :param avatar_url: Avatar URL.
    :param cover_image_url: Cover URL, empty string when unset.
    :param created_at: Creation timestamp.
    :param updated_at: Last update timestamp.
    """

    id: int
    username: str
    email: str
    full_name: str
    avatar_url: str
    cover_image_url: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_model(cls, user: Any) -> UserPublicOut:
        return cls(
            id=user.id,
            username=user.username,
            email=user.email,
            full_name=user.full_name,
            avatar_url=user.avatar_url,
            cover_image_url=user.cover_image_url or "",
            created_at=user.created_at,
            updated_at=user.updated_at,
        )
