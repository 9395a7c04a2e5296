"""Convenience exports for application schemas."""

from __future__ import annotations

from .auth import (
    ChangePasswordSchema,
    LoginResponseSchema,
    LoginSchema,
    RefreshTokenSchema,
    RegisterSchema,
    TokenPairSchema,
)
from .channel import ChannelProfileSchema
from .common import InputSchema
from .user import UpdateAccountSchema, UserSchema

__all__ = [
    "ChangePasswordSchema",
    "ChannelProfileSchema",
    "InputSchema",
    "LoginResponseSchema",
    "LoginSchema",
    "RefreshTokenSchema",
    "RegisterSchema",
    "TokenPairSchema",
    "UpdateAccountSchema",
    "UserSchema",
]
