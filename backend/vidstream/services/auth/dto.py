# vidstream/services/auth/dto.py
from __future__ import annotations

from dataclasses import dataclass

from vidstream.services._shared.dto import UserPublicOut
from vidstream.services._shared.ports import TokenPair

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class RegisterIn:
    """
    Input DTO for registration.

    :param full_name: Display name.
    :param email: Email (normalized by the model).
    :param username: Handle (normalized by the model).
    :param password: Raw password; hashed before persistence.
    :param avatar_path: Staged local file for the avatar (required).
    :param cover_image_path: Staged local file for the cover image (optional).
    """

    full_name: str | None
    email: str | None
    username: str | None
    password: str | None
    avatar_path: str | None = None
    cover_image_path: str | None = None


@dataclass(frozen=True, slots=True)
class LoginIn:
    """
    Input DTO for login. At least one of ``username``/``email`` is required.

    :param username: Handle to look up.
    :param email: Email to look up.
    :param password: Raw password (to be verified).
    """

    password: str | None
    username: str | None = None
    email: str | None = None


@dataclass(frozen=True, slots=True)
class RefreshIn:
    """
    Input DTO for token refresh.

    :param refresh_token: Encoded refresh JWT, ``None`` when the client sent none.
    """

    refresh_token: str | None


@dataclass(frozen=True, slots=True)
class ChangePasswordIn:
    user_id: int
    old_password: str | None
    new_password: str | None


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class LoginOut:
    """
    Output DTO for login.

    :param user: Public projection of the authenticated user.
    :param tokens: Freshly issued access/refresh pair.
    """

    user: UserPublicOut
    tokens: TokenPair
