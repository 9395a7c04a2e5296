"""Authentication-related Marshmallow schemas."""

from __future__ import annotations

from marshmallow import Schema, fields, validate

from .common import InputSchema
from .user import UserSchema


class RegisterSchema(InputSchema):
    """Form fields for account registration (files are read separately)."""

    full_name = fields.String(
        data_key="fullName", load_default=None, validate=validate.Length(max=100)
    )
    email = fields.Email(load_default=None, validate=validate.Length(max=254))
    username = fields.String(load_default=None, validate=validate.Length(max=50))
    password = fields.String(load_default=None, validate=validate.Length(max=128))


class LoginSchema(InputSchema):
    """Credentials: username or email, plus password."""

    username = fields.String(load_default=None, validate=validate.Length(max=50))
    email = fields.String(load_default=None, validate=validate.Length(max=254))
    password = fields.String(load_default=None, validate=validate.Length(max=128))


class RefreshTokenSchema(InputSchema):
    refresh_token = fields.String(data_key="refreshToken", load_default=None)


class ChangePasswordSchema(InputSchema):
    old_password = fields.String(
        data_key="oldPassword", load_default=None, validate=validate.Length(max=128)
    )
    new_password = fields.String(
        data_key="newPassword", load_default=None, validate=validate.Length(max=128)
    )


class TokenPairSchema(Schema):
    """Access/refresh pair as returned in response bodies."""

    access_token = fields.String(data_key="accessToken", required=True)
    refresh_token = fields.String(data_key="refreshToken", required=True)


class LoginResponseSchema(TokenPairSchema):
    """Authenticated user plus the new token pair."""

    user = fields.Nested(UserSchema, required=True)
