# vidstream/services/channels/dto.py
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ChannelProfileOut:
    """
    Public channel profile with subscription aggregates.

    :param full_name: Display name of the channel owner.
    :param username: Channel handle.
    :param email: Owner email.
    :param avatar_url: Avatar URL.
    :param cover_image_url: Cover URL, empty string when unset.
    :param subscribers_count: Users subscribed to this channel.
    :param channels_subscribed_to_count: Channels this user subscribes to.
    :param is_subscribed: Whether the viewer subscribes to this channel.
    """

    full_name: str
    username: str
    email: str
    avatar_url: str
    cover_image_url: str
    subscribers_count: int
    channels_subscribed_to_count: int
    is_subscribed: bool
