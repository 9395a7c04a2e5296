"""Subscription edges between users (subscriber -> channel)."""

from __future__ import annotations

from sqlalchemy import ForeignKey, Index, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from vidstream.core.extensions import db

from .base import CreatedAtMixin, PKMixin, ReprMixin
from .user import User


class Subscription(PKMixin, ReprMixin, CreatedAtMixin, db.Model):
    """
    ``subscriber`` follows ``channel``; both are users.

    The pair is unique. Counts are aggregated by
    :meth:`vidstream.repositories.user.UserRepository.profile_with_counts`.
    """

    __tablename__ = "subscriptions"

    subscriber_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    channel_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )

    subscriber: Mapped[User] = relationship(foreign_keys=[subscriber_id])
    channel: Mapped[User] = relationship(foreign_keys=[channel_id])

    __table_args__ = (
        UniqueConstraint("subscriber_id", "channel_id", name="uq_subscriptions_pair"),
        Index("ix_subscriptions_channel_id", "channel_id"),
    )
