"""
SQLAlchemy units of work bound to the Flask-scoped session.
"""

from __future__ import annotations

from contextlib import suppress

from flask import current_app
from sqlalchemy import event, text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from enclave.core.extensions import db
from enclave.repositories import (
    CommunityInviteRepository,
    CommunityMemberRepository,
    CommunityRepository,
    RefreshTokenRepository,
    UserRepository,
)
from enclave.uow.base import UnitOfWork


class SQLAlchemyRepositoryContainer:
    """Repositories sharing one session."""

    def __init__(self, *, session: Session) -> None:
        self.session = session
        self.users = UserRepository(session=session)
        self.refresh_tokens = RefreshTokenRepository(session=session)
        self.communities = CommunityRepository(session=session)
        self.members = CommunityMemberRepository(session=session)
        self.invites = CommunityInviteRepository(session=session)


class SQLAlchemyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    Read-write unit of work.

    Every write made through its repositories lands in one transaction that
    commits when the ``with`` block exits cleanly and rolls back otherwise.
    """

    def __init__(self) -> None:
        super().__init__(session=db.session())

    def __enter__(self) -> SQLAlchemyUnitOfWork:
        # The session autobegins on first use.
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None:
            self.rollback()
            return
        try:
            self.commit()
        except Exception:
            self.rollback()
            raise

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


class SQLAlchemyReadOnlyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    Read-only unit of work.

    Installs guards that reject ORM flushes and DML/DDL statements for the
    duration of the block. When it starts the transaction itself it also
    asks PostgreSQL/MySQL for a ``READ ONLY`` transaction at
    ``isolation_level`` and rolls it back on exit. When the session is
    already inside a transaction it attaches to it and leaves it open.

    :param isolation_level: Isolation hint applied on servers that support it.
    :param enforce_db_readonly: Issue ``SET TRANSACTION READ ONLY`` when supported.
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
        "grant",
        "revoke",
    )
    _SERVER_DIALECTS = ("postgresql", "mysql", "mariadb")

    def __init__(
        self,
        *,
        isolation_level: str | None = "READ COMMITTED",
        enforce_db_readonly: bool = True,
    ) -> None:
        super().__init__(session=db.session())
        self.isolation_level = isolation_level
        self.enforce_db_readonly = enforce_db_readonly
        self._conn: Connection | None = None
        self._owns_txn = False
        self._listeners_installed = False

    def __enter__(self) -> SQLAlchemyReadOnlyUnitOfWork:
        self._owns_txn = not self.session.in_transaction()
        self._conn = self.session.connection()
        if self._owns_txn and self._conn.dialect.name in self._SERVER_DIALECTS:
            self._apply_transaction_directives()
        self._install_listeners()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if self._owns_txn:
                self.session.rollback()
        finally:
            self._remove_listeners()
            self._conn = None
            self._owns_txn = False

    def commit(self) -> None:
        """
        :raises RuntimeError: Always; this unit of work never writes.
        """
        raise RuntimeError("Read-only UnitOfWork does not allow commit().")

    def rollback(self) -> None:
        self.session.rollback()

    def _apply_transaction_directives(self) -> None:
        try:
            if self.isolation_level:
                iso = self.isolation_level.upper().strip()
                self.session.execute(text(f"SET TRANSACTION ISOLATION LEVEL {iso}"))
            if self.enforce_db_readonly:
                self.session.execute(text("SET TRANSACTION READ ONLY"))
        except SQLAlchemyError as exc:
            current_app.logger.warning(
                "SET TRANSACTION directives failed (%s); relying on guards only.", exc
            )

    def _install_listeners(self) -> None:
        if self._listeners_installed:
            return

        def _before_flush(session, flush_context, instances):
            if session.new or session.dirty or session.deleted:
                raise RuntimeError("Read-only UnitOfWork: ORM flush blocked.")

        def _before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
            first_token = statement.lstrip().split(None, 1)[0].lower() if statement else ""
            if first_token.startswith(self._WRITE_PREFIXES):
                raise RuntimeError(
                    f"Read-only UnitOfWork: SQL statement blocked: {first_token.upper()}"
                )

        event.listen(self.session, "before_flush", _before_flush)
        event.listen(self._conn, "before_cursor_execute", _before_cursor_execute)
        self._ro_before_flush = _before_flush
        self._ro_before_cursor_execute = _before_cursor_execute
        self._listeners_installed = True

    def _remove_listeners(self) -> None:
        if not self._listeners_installed:
            return
        event.remove(self.session, "before_flush", self._ro_before_flush)
        if self._conn is not None:
            # The connection may already be closed by the rollback above.
            with suppress(SQLAlchemyError):
                event.remove(self._conn, "before_cursor_execute", self._ro_before_cursor_execute)
        self._listeners_installed = False
