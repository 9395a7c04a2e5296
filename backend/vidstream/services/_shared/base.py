# vidstream/services/_shared/base.py
from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from vidstream.services._shared.errors import ValidationError
from vidstream.services._shared.ports import PasswordHasher
from vidstream.uow.sqlalchemy_uow import (
    SQLAlchemyReadOnlyUnitOfWork,
    SQLAlchemyUnitOfWork,
)


def is_blank(value: Any) -> bool:
    """``True`` for ``None`` and for strings that are empty after trimming."""
    return value is None or (isinstance(value, str) and not value.strip())


class BaseService:
    """
    Base class for application services.

    Responsibilities
    ----------------
    * Provide helpers to run read-only and read-write units of work.
    * Offer shared input guards.
    * Keep services thin, orchestration-only, no web/ORM leakage.

    Notes
    -----
    - Services must never touch the global session; always use a Unit of Work.
    - Services raise :class:`~vidstream.services._shared.errors.ServiceError`
      subclasses; the transport layer maps them to responses.
    """

    def __init__(self, *, hasher: PasswordHasher | None = None) -> None:
        """
        :param hasher: Password hasher handed to repositories that need it.
        :type hasher: PasswordHasher | None
        """
        self.hasher = hasher

    # -------------------------- UoW helpers ---------------------------------

    def rw_uow(self) -> SQLAlchemyUnitOfWork:
        """
        Create a read-write Unit of Work (commit on success, rollback on error).

        :rtype: SQLAlchemyUnitOfWork
        """
        return SQLAlchemyUnitOfWork(hasher=self.hasher)

    def ro_uow(self, *, enforce_db_readonly: bool = True) -> SQLAlchemyReadOnlyUnitOfWork:
        """
        Create a read-only Unit of Work.

        :param enforce_db_readonly: Apply ``SET TRANSACTION READ ONLY`` when supported.
        :type enforce_db_readonly: bool
        :rtype: SQLAlchemyReadOnlyUnitOfWork
        """
        return SQLAlchemyReadOnlyUnitOfWork(
            hasher=self.hasher, enforce_db_readonly=enforce_db_readonly
        )

    # ----------------------- Validation utilities ---------------------------

    def require_fields(
        self, fields: Mapping[str, Any], *, message: str | None = None
    ) -> None:
        """
        Reject the call if any value in ``fields`` is missing or blank.

        :raises ValidationError: Listing the offending field names in ``errors``.
        """
        missing = [name for name, value in fields.items() if is_blank(value)]
        if missing:
            raise ValidationError(message, errors=missing)
