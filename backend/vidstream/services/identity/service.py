"""
IdentityService
===============

Account self-service for an authenticated user:
- Current user projection
- Display name / email updates
- Avatar and cover image replacement
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.exc import IntegrityError

from vidstream.repositories.user import UserRepository
from vidstream.services._shared.base import BaseService, is_blank
from vidstream.services._shared.dto import UserPublicOut
from vidstream.services._shared.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    violates,
)
from vidstream.services._shared.ports import MediaStore
from vidstream.services.identity.dto import UpdateAccountIn

logger = logging.getLogger(__name__)


class IdentityService(BaseService):
    """
    Application service for a user's own account.

    :param media_store: Storage for avatar/cover replacements.
    """

    def __init__(self, *, media_store: MediaStore | None = None) -> None:
        super().__init__()
        self.media = media_store

    # --------------------------------------------------------------------- #
    # Retrieval
    # --------------------------------------------------------------------- #

    def get_user(self, user_id: int) -> UserPublicOut:
        """
        Retrieve a user by identifier.

        :param user_id: User primary key.
        :type user_id: int
        :returns: Public-safe user DTO.
        :rtype: UserPublicOut
        :raises NotFoundError: If user does not exist.
        """
        with self.ro_uow() as uow:
            user = uow.users.get(user_id)
            if user is None:
                raise NotFoundError("User", user_id)
            return UserPublicOut.from_model(user)

    # --------------------------------------------------------------------- #
    # Update details
    # --------------------------------------------------------------------- #

    def update_account(self, user_id: int, dto: UpdateAccountIn) -> UserPublicOut:
        """
        Update full name and/or email.

        :raises ValidationError: When both fields are blank.
        :raises ConflictError: When the email belongs to another user.
        :raises NotFoundError: When the user does not exist.
        """
        updates: dict[str, Any] = {
            k: v
            for k, v in {"full_name": dto.full_name, "email": dto.email}.items()
            if not is_blank(v)
        }
        if not updates:
            raise ValidationError(errors=["fullName", "email"])

        with self.ro_uow() as uow:
            repo: UserRepository = uow.users
            if repo.get(user_id) is None:
                raise NotFoundError("User", user_id)
            if "email" in updates:
                owner = repo.get_by_email(updates["email"])
                if owner is not None and owner.id != user_id:
                    raise ConflictError("User", "email")

        try:
            with self.rw_uow() as uow:
                repo = uow.users
                user = repo.get(user_id)
                if user is None:
                    raise NotFoundError("User", user_id)
                repo.assign_updates(user, updates)
                out = UserPublicOut.from_model(user)
        except IntegrityError as exc:
            if violates(exc, "uq_users_email") or violates(exc, "users.email"):
                raise ConflictError("User", "email") from exc
            raise

        logger.info("Account updated", extra={"user_id": user_id})
        return out

    # --------------------------------------------------------------------- #
    # Images
    # --------------------------------------------------------------------- #

    def update_avatar(self, user_id: int, local_path: str | None) -> UserPublicOut:
        """
        Upload a new avatar and point the user at it.

        :raises ValidationError: Missing file or failed upload.
        """
        return self._replace_image(
            user_id, local_path, field="avatar_url", label="Avatar", error_field="avatar"
        )

    def update_cover_image(self, user_id: int, local_path: str | None) -> UserPublicOut:
        """Upload a new cover image and point the user at it."""
        return self._replace_image(
            user_id,
            local_path,
            field="cover_image_url",
            label="Cover image",
            error_field="coverImage",
        )

    def _replace_image(
        self, user_id: int, local_path: str | None, *, field: str, label: str, error_field: str
    ) -> UserPublicOut:
        if is_blank(local_path) or self.media is None:
            raise ValidationError(f"{label} file is missing.", errors=[error_field])

        with self.ro_uow() as uow:
            if uow.users.get(user_id) is None:
                raise NotFoundError("User", user_id)

        asset = self.media.upload(local_path)
        if asset is None:
            raise ValidationError(f"Error while uploading {label.lower()}.", errors=[error_field])

        with self.rw_uow() as uow:
            repo: UserRepository = uow.users
            user = repo.get(user_id)
            if user is not None:
                repo.assign_updates(user, {field: asset.url})
                out = UserPublicOut.from_model(user)
        if user is None:
            raise NotFoundError("User", user_id)

        logger.info(f"{label} updated", extra={"user_id": user_id})
        return out
