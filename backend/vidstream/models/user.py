"""User model: credentials, public channel identity and the current session."""

from __future__ import annotations

from typing import Any, NoReturn

from sqlalchemy import String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, validates

from vidstream.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin


class User(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Account and channel owner.

    Fields
    ------
    username : str
        Public handle. Stored trimmed and lowercased; unique.
    email : str
        Login email. Stored trimmed and lowercased; unique.
    full_name : str
        Display name.
    password_hash : str
        Salted one-way hash. Written only through
        :meth:`vidstream.repositories.user.UserRepository.set_password`.
    avatar_url : str
        URL of the stored avatar image.
    cover_image_url : str
        URL of the cover image, empty string when the user has none.
    refresh_token : str | None
        The single refresh token currently honoured for this user, or ``None``
        when no session is active.
    """

    __tablename__ = "users"

    # Columns
    username: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    email: Mapped[str] = mapped_column(String(254), nullable=False)
    full_name: Mapped[str] = mapped_column(String(100), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    avatar_url: Mapped[str] = mapped_column(String(1024), nullable=False)
    cover_image_url: Mapped[str] = mapped_column(
        String(1024), nullable=False, default="", server_default=""
    )
    refresh_token: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Constraints & indexes
    __table_args__ = (
        UniqueConstraint("email", name="uq_users_email"),
        UniqueConstraint("username", name="uq_users_username"),
    )

    # -------------------- Password API --------------------
    @property
    def password(self) -> NoReturn:
        """
        Passwords are neither readable nor assignable on the model.

        :raises AttributeError: Always.
        """
        raise AttributeError("Password is not readable.")

    @password.setter
    def password(self, raw: Any) -> NoReturn:
        raise AttributeError("Use UserRepository.set_password() to change a password.")

    # -------------------- Validators --------------------
    @validates("email")
    def _normalize_email(self, key: str, value: str) -> str:
        """
        Normalize email.

        :raises ValueError: If email is missing or blank.
        """
        if not isinstance(value, str) or not value.strip():
            raise ValueError("Email is required.")
        return value.strip().lower()

    @validates("username")
    def _normalize_username(self, key: str, value: str) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ValueError("Username is required.")
        return value.strip().lower()

    @validates("full_name")
    def _normalize_full_name(self, key: str, value: str) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ValueError("Full name is required.")
        return value.strip()

    @validates("cover_image_url")
    def _normalize_cover(self, key: str, value: str | None) -> str:
        return value or ""
