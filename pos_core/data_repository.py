"""Store handle: engine construction, transaction scopes and DataFrame reads.

A single :class:`Database` is built at startup and handed to every store and
engine.  Multi-step writes go through :meth:`Database.transaction`, which either
joins a connection that is already inside a transaction or opens a new one,
so that several engine calls can be composed into one commit/rollback unit.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

import pandas as pd
from sqlalchemy import create_engine, event, text
from sqlalchemy import exc as sa_exc
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.engine.url import URL, make_url
from sqlalchemy.pool import StaticPool
from sqlalchemy.sql.elements import ClauseElement

from .errors import PersistenceError
from .settings import AppSettings

LOGGER = logging.getLogger(__name__)

_SQLITE_BUSY_TIMEOUT_SECONDS = 30


def _is_memory_database(url: URL) -> bool:
    return url.database in (None, "", ":memory:") or url.query.get("mode") == "memory"


def _configure_sqlite(engine: Engine) -> None:
    # pysqlite's implicit BEGIN is disabled so that every transaction takes the
    # write lock up front; concurrent writers then queue on busy_timeout.
    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, _connection_record) -> None:
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys = ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn: Connection) -> None:
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def _build_engine(url: URL, *, pool_size: int, max_overflow: int, echo: bool) -> Engine:
    if url.get_backend_name() == "sqlite":
        kwargs: dict[str, object] = {
            "connect_args": {"check_same_thread": False, "timeout": _SQLITE_BUSY_TIMEOUT_SECONDS},
        }
        if _is_memory_database(url):
            # One shared connection, otherwise each checkout sees an empty database.
            kwargs["poolclass"] = StaticPool
        engine = create_engine(url, echo=echo, **kwargs)
        _configure_sqlite(engine)
        return engine

    return create_engine(
        url,
        echo=echo,
        pool_pre_ping=True,
        pool_size=max(1, pool_size),
        max_overflow=max(0, max_overflow),
    )


def _normalize_statement(sql: str | ClauseElement) -> ClauseElement:
    if isinstance(sql, str):
        return text(sql)
    if isinstance(sql, ClauseElement):
        return sql
    raise TypeError("sql must be a string or SQLAlchemy ClauseElement")


class Database:
    """Owns the SQLAlchemy engine of the shop store."""

    def __init__(
        self,
        url: str | URL,
        *,
        pool_size: int = 10,
        max_overflow: int = 20,
        echo: bool = False,
    ) -> None:
        self.url = make_url(url)
        self.engine = _build_engine(self.url, pool_size=pool_size, max_overflow=max_overflow, echo=echo)

    @classmethod
    def from_settings(cls, settings: AppSettings) -> "Database":
        return cls(
            settings.database_url,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_pool_max_overflow,
        )

    @property
    def is_sqlite(self) -> bool:
        return self.engine.dialect.name == "sqlite"

    @property
    def sqlite_path(self) -> Path | None:
        """Path of the SQLite file backing the store, ``None`` for other stores."""

        if not self.is_sqlite or _is_memory_database(self.url):
            return None
        return Path(self.url.database)

    def lock_clause(self) -> str:
        """Row-lock suffix for SELECT statements run inside a write transaction."""

        # SQLite has no row locks; BEGIN IMMEDIATE already holds the database write lock.
        return "" if self.is_sqlite else " FOR UPDATE"

    @contextmanager
    def transaction(self, conn: Connection | None = None) -> Iterator[Connection]:
        """Yield a connection inside a transaction.

        When ``conn`` is given the caller already owns the transaction and the
        same connection is yielded untouched.  Otherwise a new transaction is
        opened, committed on success and rolled back on any exception; storage
        failures are re-raised as :class:`PersistenceError`.
        """

        if conn is not None:
            yield conn
            return

        try:
            with self.engine.begin() as own:
                yield own
        except sa_exc.SQLAlchemyError as exc:
            LOGGER.error("Storage failure, transaction rolled back: %s", exc)
            raise PersistenceError(f"Storage failure, the operation was rolled back: {exc}") from exc

    def query_df(self, sql: str | ClauseElement, params: dict | None = None) -> pd.DataFrame:
        """Run a SELECT and return the rows as a pandas DataFrame."""

        statement = _normalize_statement(sql)
        if params is not None and not isinstance(params, dict):
            raise TypeError("params must be a mapping when provided")

        with self.transaction() as conn:
            result = conn.execute(statement, params or {})
            columns = list(result.keys())
            rows = result.fetchall()

        if not rows:
            return pd.DataFrame(columns=columns)
        return pd.DataFrame([tuple(row) for row in rows], columns=columns)

    def dispose(self) -> None:
        self.engine.dispose()


__all__ = ["Database"]
