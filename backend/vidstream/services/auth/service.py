# vidstream/services/auth/service.py
from __future__ import annotations

import hmac
import logging
from typing import Any, NoReturn

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from vidstream.repositories.user import UserRepository
from vidstream.services._shared.base import BaseService, is_blank
from vidstream.services._shared.dto import UserPublicOut
from vidstream.services._shared.errors import (
    AuthenticationError,
    ConflictError,
    InternalError,
    NotFoundError,
    ValidationError,
)
from vidstream.services._shared.ports import (
    InvalidTokenError,
    MediaStore,
    PasswordHasher,
    TokenKind,
    TokenPair,
    TokenProvider,
)
from vidstream.services.auth.dto import (
    ChangePasswordIn,
    LoginIn,
    LoginOut,
    RefreshIn,
    RegisterIn,
)

logger = logging.getLogger(__name__)

INVALID_REFRESH_TOKEN = "Invalid refresh token."
AVATAR_REQUIRED = "Avatar file is required."


class AuthService(BaseService):
    """
    Session lifecycle service (register / login / logout / refresh / change password).

    A user has at most one active session: the refresh token stored on the
    user row. Login overwrites it, refresh swaps it atomically, logout clears
    it. Access tokens are stateless and verified by the transport layer.

    :param token_provider: Signs and verifies access/refresh JWTs.
    :param hasher: One-way password hasher.
    :param media_store: Storage for avatar/cover uploads at registration.
    :param revoke_sessions_on_password_change: Clear the stored refresh token
        when the password changes.
    """

    def __init__(
        self,
        *,
        token_provider: TokenProvider,
        hasher: PasswordHasher,
        media_store: MediaStore | None = None,
        revoke_sessions_on_password_change: bool = False,
    ) -> None:
        super().__init__(hasher=hasher)
        self.tokens = token_provider
        self.media = media_store
        self.revoke_sessions_on_password_change = revoke_sessions_on_password_change

    # ------------------------------------------------------------------ #
    # Register
    # ------------------------------------------------------------------ #

    def register(self, dto: RegisterIn) -> UserPublicOut:
        """
        Create an account with uploaded avatar (and optional cover image).

        :raises ValidationError: Blank fields, or a missing/failed avatar upload.
        :raises ConflictError: Username or email already taken.
        """
        self.require_fields(
            {
                "full_name": dto.full_name,
                "email": dto.email,
                "username": dto.username,
                "password": dto.password,
            }
        )

        with self.ro_uow() as uow:
            taken = uow.users.exists_by_username_or_email(dto.username, dto.email)
        if taken:
            raise ConflictError("User", "email or username")

        if is_blank(dto.avatar_path) or self.media is None:
            raise ValidationError(AVATAR_REQUIRED, errors=["avatar"])

        avatar = self.media.upload(dto.avatar_path)
        if avatar is None:
            raise ValidationError(AVATAR_REQUIRED, errors=["avatar"])
        cover = self.media.upload(dto.cover_image_path) if dto.cover_image_path else None

        try:
            with self.rw_uow() as uow:
                repo: UserRepository = uow.users
                user = repo.create(
                    username=dto.username,
                    email=dto.email,
                    full_name=dto.full_name,
                    password=dto.password,
                    avatar_url=avatar.url,
                    cover_image_url=cover.url if cover else "",
                )
                out = UserPublicOut.from_model(user)
        except IntegrityError as exc:
            # Lost a uniqueness race with a concurrent registration.
            for asset in (avatar, cover):
                if asset is not None:
                    self.media.delete(asset.public_id)
            raise ConflictError("User", "email or username") from exc

        logger.info("User registered", extra={"user_id": out.id})
        return out

    # ------------------------------------------------------------------ #
    # Login
    # ------------------------------------------------------------------ #

    def login(self, dto: LoginIn) -> LoginOut:
        """
        Verify credentials and start a new session.

        Any previously stored refresh token is overwritten, which ends the
        previous session.

        :raises ValidationError: Neither username nor email supplied.
        :raises NotFoundError: No matching user.
        :raises AuthenticationError: Wrong password.
        :raises InternalError: The new refresh token could not be persisted.
        """
        if is_blank(dto.username) and is_blank(dto.email):
            raise ValidationError("Username or email is required.", errors=["username", "email"])

        with self.ro_uow() as uow:
            repo: UserRepository = uow.users
            user = repo.find_by_username_or_email(dto.username, dto.email)
            if user is None:
                raise NotFoundError("User", dto.username or dto.email)
            if not repo.verify_password(user, dto.password or ""):
                logger.info("Login rejected", extra={"user_id": user.id, "reason": "password"})
                raise AuthenticationError("Invalid user credentials.")
            user_id = user.id

        try:
            with self.rw_uow() as uow:
                repo = uow.users
                user = repo.get(user_id)
                if user is None:
                    raise NotFoundError("User", user_id)
                tokens = self._issue_pair(user)
                repo.store_refresh_token(user, tokens.refresh_token)
                out = LoginOut(user=UserPublicOut.from_model(user), tokens=tokens)
        except SQLAlchemyError as exc:
            logger.error("Failed to persist refresh token", extra={"user_id": user_id})
            raise InternalError(
                "Something went wrong while generating refresh and access token."
            ) from exc

        logger.info("User logged in", extra={"user_id": user_id})
        return out

    # ------------------------------------------------------------------ #
    # Logout
    # ------------------------------------------------------------------ #

    def logout(self, user_id: int) -> None:
        """
        End the user's session by clearing the stored refresh token.

        Idempotent; a user that no longer exists is not an error.
        """
        with self.rw_uow() as uow:
            cleared = uow.users.clear_refresh_token(user_id)
        if cleared:
            logger.info("User logged out", extra={"user_id": user_id})
        else:
            logger.info("Logout for unknown user", extra={"user_id": user_id})

    # ------------------------------------------------------------------ #
    # Refresh with atomic rotation
    # ------------------------------------------------------------------ #

    def refresh(self, dto: RefreshIn) -> TokenPair:
        """
        Exchange the current refresh token for a new pair.

        Security
        --------
        - The token must verify (signature, expiry, kind) *and* equal the one
          stored for the user. Anything else is rejected with one message.
        - The stored token is replaced with a conditional update; a concurrent
          refresh presenting the same token loses and is rejected.

        :raises AuthenticationError: Token absent (``"Unauthorized request."``)
            or invalid for any reason (``"Invalid refresh token."``).
        """
        presented = dto.refresh_token
        if is_blank(presented):
            raise AuthenticationError("Unauthorized request.")

        try:
            claims = self.tokens.verify(presented, TokenKind.REFRESH)
        except InvalidTokenError as exc:
            self._reject_refresh(None, exc.reason)

        with self.ro_uow() as uow:
            user = uow.users.get(claims.user_id)
            if user is None:
                self._reject_refresh(claims.user_id, "user not found")
            if not user.refresh_token or not hmac.compare_digest(
                user.refresh_token.encode(), presented.encode()
            ):
                self._reject_refresh(claims.user_id, "token superseded")
            tokens = self._issue_pair(user)

        with self.rw_uow() as uow:
            swapped = uow.users.swap_refresh_token(
                claims.user_id, presented, tokens.refresh_token
            )
        if not swapped:
            self._reject_refresh(claims.user_id, "lost rotation race")

        logger.info("Tokens refreshed", extra={"user_id": claims.user_id})
        return tokens

    # ------------------------------------------------------------------ #
    # Change password
    # ------------------------------------------------------------------ #

    def change_password(self, dto: ChangePasswordIn) -> None:
        """
        Replace the password after verifying the current one.

        :raises ValidationError: Blank fields or wrong current password.
        :raises NotFoundError: The user no longer exists.
        """
        self.require_fields({"old_password": dto.old_password, "new_password": dto.new_password})

        with self.ro_uow() as uow:
            repo: UserRepository = uow.users
            user = repo.get(dto.user_id)
            if user is None:
                raise NotFoundError("User", dto.user_id)
            if not repo.verify_password(user, dto.old_password):
                raise ValidationError("Invalid current password.", errors=["oldPassword"])

        with self.rw_uow() as uow:
            repo = uow.users
            user = repo.get(dto.user_id)
            if user is not None:
                repo.set_password(user, dto.new_password)
                if self.revoke_sessions_on_password_change:
                    repo.store_refresh_token(user, None)

        if user is None:
            raise NotFoundError("User", dto.user_id)
        logger.info(
            "Password changed",
            extra={
                "user_id": dto.user_id,
                "reason": "sessions_revoked" if self.revoke_sessions_on_password_change else None,
            },
        )

    # ------------------------------------------------------------------ #
    # Utilities
    # ------------------------------------------------------------------ #

    def _issue_pair(self, user: Any) -> TokenPair:
        claims = {"username": user.username, "email": user.email, "full_name": user.full_name}
        return TokenPair(
            access_token=self.tokens.issue_access(user.id, claims),
            refresh_token=self.tokens.issue_refresh(user.id),
        )

    @staticmethod
    def _reject_refresh(user_id: int | None, reason: str) -> NoReturn:
        logger.warning("Refresh rejected", extra={"user_id": user_id, "reason": reason})
        raise AuthenticationError(INVALID_REFRESH_TOKEN)
