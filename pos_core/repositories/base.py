"""
Base Repository - shared plumbing for the SQL stores.

Every public store method takes an optional ``conn``.  Without it the call runs
in its own transaction; with it the call joins the caller's transaction, which
is how the inventory and checkout services compose several writes into one
commit/rollback unit.
"""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import exc as sa_exc
from sqlalchemy.engine import Row

from ..data_repository import Database


class SqlRepository:
    """Holds the injected :class:`Database` handle."""

    def __init__(self, db: Database):
        self._db = db

    @property
    def db(self) -> Database:
        return self._db


def row_mapping(row: Row) -> dict:
    return dict(row._mapping)


def money_param(amount: Decimal) -> str:
    # pysqlite cannot bind Decimal; the textual form is exact on every backend.
    return str(amount)


def is_unique_violation(exc: sa_exc.IntegrityError) -> bool:
    message = str(exc.orig).lower()
    return "unique" in message or "duplicate key" in message


__all__ = ["SqlRepository", "is_unique_violation", "money_param", "row_mapping"]
