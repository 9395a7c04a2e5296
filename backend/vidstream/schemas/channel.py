"""Channel profile schema."""

from __future__ import annotations

from marshmallow import Schema, fields


class ChannelProfileSchema(Schema):
    full_name = fields.String(data_key="fullName")
    username = fields.String()
    email = fields.Email()
    avatar_url = fields.String(data_key="avatarUrl")
    cover_image_url = fields.String(data_key="coverImageUrl")
    subscribers_count = fields.Integer(data_key="subscribersCount")
    channels_subscribed_to_count = fields.Integer(data_key="channelsSubscribedToCount")
    is_subscribed = fields.Boolean(data_key="isSubscribed")
