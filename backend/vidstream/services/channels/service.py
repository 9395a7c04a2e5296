# vidstream/services/channels/service.py
from __future__ import annotations

import logging

from vidstream.services._shared.base import BaseService, is_blank
from vidstream.services._shared.errors import NotFoundError, ValidationError
from vidstream.services.channels.dto import ChannelProfileOut

logger = logging.getLogger(__name__)


class ChannelService(BaseService):
    """Read-only queries over channels (users seen through their subscriptions)."""

    def get_channel_profile(
        self, username: str | None, viewer_id: int | None = None
    ) -> ChannelProfileOut:
        """
        Build the public profile of the channel owned by ``username``.

        :param username: Channel handle, matched case-insensitively.
        :param viewer_id: Authenticated viewer, ``None`` for anonymous requests.
        :raises ValidationError: Blank username.
        :raises NotFoundError: No such channel.
        """
        if is_blank(username):
            raise ValidationError("Username is required.", errors=["username"])

        with self.ro_uow() as uow:
            row = uow.users.profile_with_counts(username, viewer_id)
            if row is None:
                raise NotFoundError("Channel", username)

            logger.debug("Channel profile loaded", extra={"user_id": row["id"]})
            return ChannelProfileOut(
                full_name=row["full_name"],
                username=row["username"],
                email=row["email"],
                avatar_url=row["avatar_url"],
                cover_image_url=row["cover_image_url"] or "",
                subscribers_count=int(row["subscribers_count"] or 0),
                channels_subscribed_to_count=int(row["channels_subscribed_to_count"] or 0),
                is_subscribed=bool(row["is_subscribed"]),
            )
