"""
SQLAlchemy implementation of UnitOfWork for Flask.
"""

from __future__ import annotations

import logging
from contextlib import suppress

from sqlalchemy import event, text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import InvalidRequestError, SQLAlchemyError
from sqlalchemy.orm import Session, SessionTransaction, scoped_session

from vidstream.core.extensions import db
from vidstream.repositories import UserRepository
from vidstream.services._shared.ports import PasswordHasher
from vidstream.uow.base import UnitOfWork

logger = logging.getLogger(__name__)


class SQLAlchemyRepositoryContainer:
    """Provide repository instances that share a SQLAlchemy session."""

    def __init__(self, *, session: Session, hasher: PasswordHasher | None = None) -> None:
        self.session = session
        self.users = UserRepository(session=self.session, hasher=hasher)


class SQLAlchemyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    SQLAlchemy-backed UoW using the Flask-scoped session.

    The same session is shared across all repositories for a consistent transaction.
    """

    def __init__(self, *, hasher: PasswordHasher | None = None) -> None:
        super().__init__(session=db.session, hasher=hasher)

    def __enter__(self) -> SQLAlchemyUnitOfWork:
        # No-op: the session is lazily started on the first write.
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            try:
                self.commit()
            except Exception:
                self.rollback()
                raise
        else:
            self.rollback()

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


class SQLAlchemyReadOnlyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    Read-only Unit of Work backed by the Flask-scoped SQLAlchemy session.

    This UoW:
    - Applies ``SET TRANSACTION READ ONLY`` on PostgreSQL/MySQL when it owns
      the transaction.
    - Installs portable write-guards (ORM flush and raw DML) for its scope.
    - Rolls back on exit when it owns the transaction.
    - Disallows ``commit()``.

    When a transaction is already running on the session (an outer fixture or
    an earlier read in the same request) the scope attaches to it: the guards
    still apply but no ``SET TRANSACTION`` is issued.
    """

    _WRITE_PREFIXES = (
        "insert",
        "update",
        "delete",
        "merge",
        "alter",
        "drop",
        "truncate",
        "create",
        "replace",
    )

    def __init__(
        self,
        *,
        hasher: PasswordHasher | None = None,
        enforce_db_readonly: bool = True,
    ) -> None:
        super().__init__(session=db.session, hasher=hasher)
        self.enforce_db_readonly = enforce_db_readonly

        self._conn: Connection | None = None
        self._txn_ctx: SessionTransaction | None = None
        self._listeners_installed = False

    # ----------------------------- Context Manager -----------------------------

    def __enter__(self) -> SQLAlchemyReadOnlyUnitOfWork:
        self._txn_ctx = None
        try:
            txn_ctx = self.session.begin()
            txn_ctx.__enter__()
            self._txn_ctx = txn_ctx
        except InvalidRequestError:
            # Already in a transaction; attach to it.
            pass

        self._conn = self.session.connection()
        self._install_listeners()

        if self._txn_ctx is not None and self.enforce_db_readonly:
            if self._conn.dialect.name in ("postgresql", "mysql", "mariadb"):
                try:
                    self.session.execute(text("SET TRANSACTION READ ONLY"))
                except SQLAlchemyError as exc:
                    logger.warning("SET TRANSACTION READ ONLY failed (%s); guards only.", exc)

        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if self._txn_ctx is not None:
                with suppress(SQLAlchemyError):
                    self.session.rollback()
                # Leave the SessionTransaction context entered in __enter__.
                try:
                    self._txn_ctx.__exit__(exc_type, exc, tb)
                finally:
                    self._txn_ctx = None
        finally:
            self._remove_listeners()
            self._conn = None

    # ----------------------------- Public API ---------------------------------

    def commit(self) -> None:
        """
        :raises RuntimeError: always, to prevent accidental writes.
        """
        raise RuntimeError("Read-only UnitOfWork does not allow commit().")

    def rollback(self) -> None:
        self.session.rollback()

    # ----------------------------- Guards & Listeners --------------------------

    def _install_listeners(self) -> None:
        """Install ORM/db-level listeners to prevent any write attempt."""
        if self._listeners_installed:
            return

        def _before_flush(session, flush_context, instances):
            if session.new or session.dirty or session.deleted:
                raise RuntimeError(
                    "Read-only UnitOfWork: ORM flush blocked (new/dirty/deleted objects present)."
                )

        def _before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
            first_token = statement.lstrip().split(None, 1)[0].lower() if statement else ""
            if first_token.startswith(self._WRITE_PREFIXES):
                raise RuntimeError(
                    f"Read-only UnitOfWork: SQL statement blocked: {first_token.upper()}"
                )

        # Bind to the concrete thread-local session, not the scoped registry.
        target = self.session
        if isinstance(target, scoped_session):
            target = target()
        event.listen(target, "before_flush", _before_flush)
        event.listen(self._conn, "before_cursor_execute", _before_cursor_execute)

        self._ro_before_flush = _before_flush
        self._ro_before_cursor_execute = _before_cursor_execute
        self._ro_session = target
        self._ro_conn = self._conn
        self._listeners_installed = True

    def _remove_listeners(self) -> None:
        if not self._listeners_installed:
            return

        with suppress(InvalidRequestError):
            event.remove(self._ro_session, "before_flush", self._ro_before_flush)
        with suppress(InvalidRequestError):
            event.remove(self._ro_conn, "before_cursor_execute", self._ro_before_cursor_execute)

        self._listeners_installed = False
