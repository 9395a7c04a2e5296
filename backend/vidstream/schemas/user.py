"""User resource schemas."""

from __future__ import annotations

from marshmallow import Schema, fields, validate

from .common import InputSchema


class UpdateAccountSchema(InputSchema):
    """Account details a user may change about themselves."""

    full_name = fields.String(
        data_key="fullName", load_default=None, validate=validate.Length(max=100)
    )
    email = fields.Email(load_default=None, validate=validate.Length(max=254))


class UserSchema(Schema):
    """Public representation of a user entity."""

    id = fields.Integer(required=True)
    username = fields.String(required=True)
    email = fields.Email(required=True)
    full_name = fields.String(data_key="fullName", required=True)
    avatar_url = fields.String(data_key="avatarUrl", required=True)
    cover_image_url = fields.String(data_key="coverImageUrl")
    created_at = fields.DateTime(data_key="createdAt", allow_none=True)
    updated_at = fields.DateTime(data_key="updatedAt", allow_none=True)
