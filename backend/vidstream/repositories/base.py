"""Generic repository base for SQLAlchemy 2.x.

This module centralizes persistence-only concerns shared by all repositories:
- Session resolution (injected Unit of Work session or the Flask-scoped one).
- Equality lookups honouring a per-repository filter whitelist.
- Safe update helpers with per-repository updatable-field whitelists.
- No business logic, no commit/rollback; Services own transactions.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Generic, TypeVar, cast

from sqlalchemy import Select, and_, select
from sqlalchemy.orm import InstrumentedAttribute, Session

from vidstream.core.extensions import db

E = TypeVar("E")  # SQLAlchemy mapped entity type


class BaseRepository(Generic[E]):
    """Generic, persistence-only repository for a single aggregate.

    Subclasses MUST define:

    * ``model``: the SQLAlchemy mapped class.

    Subclasses MAY override:

    * ``_default_eagerload`` to attach eager-loading options.
    * ``_filterable_fields`` to enable filter whitelisting (recommended).
    * ``_updatable_fields`` to whitelist keys allowed for updates.

    This class NEVER opens, commits or rolls back transactions.
    """

    #: SQLAlchemy mapped model (must be set by subclasses)
    model: type[E]

    def __init__(self, session: Session | None = None) -> None:
        """Initialise the repository with an optional SQLAlchemy session.

        When no explicit session is provided the repository falls back to the
        Flask-scoped session exposed by ``vidstream.core.extensions``.

        :param session: Session shared across the Unit of Work scope.
        :type session: :class:`sqlalchemy.orm.Session` | None
        """
        self._session: Session | None = session

    # ------------------------------ Session access ---------------------------

    @property
    def session(self) -> Session:
        """Return the active SQLAlchemy session."""
        if self._session is not None:
            return self._session
        return cast(Session, db.session)

    # ------------------------------ Extensibility ----------------------------

    def _default_eagerload(self, stmt: Select[Any]) -> Select[Any]:
        """Attach eager-loading options to generic get/find operations."""
        return stmt

    def _pk_attr(self) -> InstrumentedAttribute[Any] | None:
        return getattr(self.model, "id", None)

    def _filterable_fields(self) -> Mapping[str, InstrumentedAttribute[Any]] | None:
        """Optional whitelist of equality-filterable fields.

        If this returns ``None``, filters are applied via
        ``getattr(self.model, key) == value``. If a mapping is returned, only
        keys present in the map are applied; unknown keys are ignored.
        """
        return None

    def _updatable_fields(self) -> set[str]:
        """Whitelist of public keys that can be assigned on update.

        :returns: Set of allowed public keys for update operations.
        :rtype: set[str]
        """
        return set()

    # ------------------------------ Internals --------------------------------

    def _apply_equality_filters(
        self,
        stmt: Select[Any],
        filters: Mapping[str, Any] | None,
    ) -> Select[Any]:
        if not filters:
            return stmt

        allowed = self._filterable_fields()
        if allowed is None:
            clauses = [getattr(self.model, k) == v for k, v in filters.items()]
            return stmt.where(and_(*clauses)) if clauses else stmt

        whitelist_clauses: list[Any] = []
        for k, v in filters.items():
            col = allowed.get(k)
            if isinstance(col, InstrumentedAttribute):
                whitelist_clauses.append(col == v)
        return stmt.where(and_(*whitelist_clauses)) if whitelist_clauses else stmt

    def _sanitize_update_fields(
        self,
        fields: Mapping[str, Any],
        *,
        strict: bool = True,
    ) -> dict[str, Any]:
        """Return a dict with only whitelisted update keys.

        :param fields: Raw update mapping (public keys).
        :type fields: Mapping[str, Any]
        :param strict: When ``True``, raise ``ValueError`` on unknown keys.
        :type strict: bool
        :returns: Filtered mapping with only allowed keys.
        :rtype: dict[str, Any]
        :raises ValueError: If ``strict`` and unknown keys are present.
        """
        allowed = self._updatable_fields()
        if not allowed:
            # Fail-closed to avoid accidental mass-assignment
            if fields and strict:
                raise ValueError("No updatable fields configured for this repository.")
            return {}

        unknown = [k for k in fields if k not in allowed]
        if unknown and strict:
            raise ValueError(f"Unknown or non-updatable fields: {unknown}")

        return {k: v for k, v in fields.items() if k in allowed}

    # --------------------------------- CRUD ----------------------------------

    def add(self, instance: E) -> E:
        """Stage a new entity for persistence and flush to materialize the PK."""
        self.session.add(instance)
        self.flush()
        return instance

    def get(self, entity_id: Any) -> E | None:
        """Retrieve a single entity by primary key.

        :raises RuntimeError: If no PK attribute can be detected.
        """
        pk_attr = self._pk_attr()
        if pk_attr is None:
            raise RuntimeError("BaseRepository.get requires a detectable PK attribute.")
        stmt = self._default_eagerload(select(self.model).where(pk_attr == entity_id))
        result = self.session.execute(stmt).scalars().first()
        return cast(E | None, result)

    def find_one(self, **filters: Any) -> E | None:
        """Find a single entity by simple equality filters."""
        stmt: Select[Any] = select(self.model)
        stmt = self._apply_equality_filters(stmt, filters)
        stmt = self._default_eagerload(stmt)
        result = self.session.execute(stmt).scalars().first()
        return cast(E | None, result)

    def flush(self) -> None:
        """Flush pending changes to the database without committing."""
        self.session.flush()

    # ----------------------------- Safe updates -------------------------------

    def assign_updates(
        self,
        instance: E,
        fields: Mapping[str, Any],
        *,
        strict: bool = True,
        flush: bool = True,
    ) -> E:
        """Assign only whitelisted keys to ``instance`` and optionally flush.

        The assignment uses ``setattr`` to trigger SQLAlchemy ``@validates``
        decorators defined on the mapped class.

        :raises ValueError: If ``strict`` and unknown keys are present, or if no
                           updatable fields are configured.
        """
        updates = self._sanitize_update_fields(fields, strict=strict)
        for k, v in updates.items():
            setattr(instance, k, v)
        if flush:
            self.flush()
        return instance
