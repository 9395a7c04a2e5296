"""
DTOs for IdentityService.

Data Transfer Objects (DTOs) isolate the service layer from ORM models,
ensuring clear input/output contracts and type safety.
"""

from __future__ import annotations

from dataclasses import dataclass

from vidstream.services._shared.dto import UserPublicOut

# --------------------------------------------------------------------------- #
# Input DTOs
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class UpdateAccountIn:
    """
    Input DTO for account detail updates. ``None`` means "leave unchanged".

    :param full_name: New display name.
    :type full_name: str | None
    :param email: New email (normalized to lowercase).
    :type email: str | None
    """

    full_name: str | None = None
    email: str | None = None


__all__ = ["UpdateAccountIn", "UserPublicOut"]
