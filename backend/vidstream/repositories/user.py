"""User repository: credential store, session token slot and channel profile query."""

from __future__ import annotations

from typing import Any, cast

from sqlalchemy import exists, false, func, or_, select, update
from sqlalchemy.engine import RowMapping
from sqlalchemy.orm import Session

from vidstream.models.subscription import Subscription
from vidstream.models.user import User
from vidstream.repositories.base import BaseRepository
from vidstream.services._shared.ports import PasswordHasher


def _norm(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip().lower()
    return value or None


class UserRepository(BaseRepository[User]):
    """Persistence-only repository for :class:`User`.

    Owns the only code path that writes ``password_hash`` (:meth:`create` and
    :meth:`set_password`) and the compare-and-swap on ``refresh_token``. It
    never signs or verifies tokens.

    :param session: Session shared across the Unit of Work scope.
    :param hasher: Password hasher used by the set-password path.
    """

    model = User

    def __init__(self, session: Session | None = None, *, hasher: PasswordHasher | None = None):
        super().__init__(session=session)
        self._hasher = hasher

    @property
    def hasher(self) -> PasswordHasher:
        if self._hasher is None:
            raise RuntimeError("UserRepository was built without a password hasher.")
        return self._hasher

    # ---------------------------- Whitelists ----------------------------

    def _filterable_fields(self):
        """Whitelist fields safe for equality filters."""
        return {
            "email": User.email,
            "username": User.username,
        }

    def _updatable_fields(self):
        """Publicly allowed updatable fields (never the password or token)."""
        return {"full_name", "email", "avatar_url", "cover_image_url"}

    # ---------------------------- Lookup helpers ----------------------------

    def get_by_username(self, username: str) -> User | None:
        """Fetch a user by username (case-insensitive)."""
        return self.find_one(username=_norm(username))

    def get_by_email(self, email: str) -> User | None:
        """Fetch a user by email (case-insensitive).

        :param email: Email address to normalise and search.
        :type email: str
        :returns: User instance or ``None`` when not found.
        :rtype: User | None
        """
        return self.find_one(email=_norm(email))

    def _username_or_email_clause(self, username: str | None, email: str | None):
        clauses = []
        if (u := _norm(username)) is not None:
            clauses.append(User.username == u)
        if (e := _norm(email)) is not None:
            clauses.append(User.email == e)
        return or_(*clauses) if clauses else None

    def find_by_username_or_email(
        self, username: str | None = None, email: str | None = None
    ) -> User | None:
        """Return the first user whose username OR email matches.

        Blank or ``None`` keys are ignored; with no usable key the result is ``None``.
        """
        clause = self._username_or_email_clause(username, email)
        if clause is None:
            return None
        stmt = select(User).where(clause).order_by(User.id).limit(1)
        return cast(User | None, self.session.execute(stmt).scalars().first())

    def exists_by_username_or_email(self, username: str | None, email: str | None) -> bool:
        clause = self._username_or_email_clause(username, email)
        if clause is None:
            return False
        return bool(self.session.execute(select(User.id).where(clause).limit(1)).first())

    # ---------------------------- Password ops ----------------------------

    def create(
        self,
        *,
        username: str,
        email: str,
        full_name: str,
        password: str,
        avatar_url: str,
        cover_image_url: str | None = None,
    ) -> User:
        """Hash ``password``, persist a new user and flush to obtain its id.

        :raises sqlalchemy.exc.IntegrityError: On a uniqueness race.
        """
        user = User(
            username=username,
            email=email,
            full_name=full_name,
            avatar_url=avatar_url,
            cover_image_url=cover_image_url or "",
        )
        user.password_hash = self.hasher.hash(password)
        return self.add(user)

    def set_password(self, user: User, raw: str) -> None:
        """Hash ``raw`` into ``user.password_hash`` and flush."""
        user.password_hash = self.hasher.hash(raw)
        self.flush()

    def verify_password(self, user: User, raw: str) -> bool:
        """Constant-time check of ``raw`` against the stored hash."""
        if not user.password_hash:
            return False
        return bool(self.hasher.verify(raw, user.password_hash))

    # ---------------------------- Refresh token slot ----------------------------

    def store_refresh_token(self, user: User, token: str | None) -> None:
        """Overwrite the user's current refresh token and flush."""
        user.refresh_token = token
        self.flush()

    def swap_refresh_token(self, user_id: int, expected: str, new: str) -> bool:
        """
        Replace the stored refresh token only if it still equals ``expected``.

        Issued as a single conditional ``UPDATE``; of two concurrent callers
        presenting the same token, exactly one sees ``True``.

        :returns: ``True`` when exactly one row was updated.
        :rtype: bool
        """
        stmt = (
            update(User)
            .where(User.id == user_id, User.refresh_token == expected)
            .values(refresh_token=new)
            .execution_options(synchronize_session=False)
        )
        result = self.session.execute(stmt)
        return result.rowcount == 1

    def clear_refresh_token(self, user_id: int) -> bool:
        """Null the stored refresh token. Returns ``False`` if the user is gone."""
        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(refresh_token=None)
            .execution_options(synchronize_session=False)
        )
        result = self.session.execute(stmt)
        return result.rowcount > 0

    # ---------------------------- Channel profile ----------------------------

    def profile_with_counts(self, username: str, viewer_id: int | None = None) -> RowMapping | None:
        """
        Load a channel's public projection with subscription aggregates.

        One statement with correlated scalar subqueries:

        - ``subscribers_count``: subscriptions whose channel is this user.
        - ``channels_subscribed_to_count``: subscriptions made by this user.
        - ``is_subscribed``: whether ``viewer_id`` subscribes to this user
          (always false for anonymous viewers).

        :returns: Mapping with ``id``, ``username``, ``email``, ``full_name``,
            ``avatar_url``, ``cover_image_url`` and the three aggregates, or
            ``None`` when no such user exists.
        """
        subscribers_count = (
            select(func.count(Subscription.id))
            .where(Subscription.channel_id == User.id)
            .correlate(User)
            .scalar_subquery()
        )
        subscribed_to_count = (
            select(func.count(Subscription.id))
            .where(Subscription.subscriber_id == User.id)
            .correlate(User)
            .scalar_subquery()
        )
        is_subscribed: Any
        if viewer_id is None:
            is_subscribed = false()
        else:
            is_subscribed = exists().where(
                Subscription.channel_id == User.id,
                Subscription.subscriber_id == viewer_id,
            )

        stmt = select(
            User.id,
            User.username,
            User.email,
            User.full_name,
            User.avatar_url,
            User.cover_image_url,
            subscribers_count.label("subscribers_count"),
            subscribed_to_count.label("channels_subscribed_to_count"),
            is_subscribed.label("is_subscribed"),
        ).where(User.username == _norm(username))
        return self.session.execute(stmt).mappings().first()
