"""
Inventory Transaction Repository - append-only stock ledger.
"""

from __future__ import annotations

from typing import Protocol, Sequence

from sqlalchemy import exc as sa_exc
from sqlalchemy import text
from sqlalchemy.engine import Connection

from ..errors import ProductNotFoundError
from ..models import (
    InventoryTransaction,
    TransactionType,
    format_timestamp,
    parse_timestamp,
    utcnow,
)
from .base import SqlRepository, is_unique_violation, row_mapping


class InventoryTransactionRepository(Protocol):
    """Ledger store interface."""

    def append(
        self,
        product_id: int,
        type: TransactionType,
        quantity_change: int,
        note: str | None = None,
        *,
        conn: Connection | None = None,
    ) -> InventoryTransaction:
        ...

    def history(
        self,
        product_id: int | None = None,
        limit: int | None = None,
        *,
        conn: Connection | None = None,
    ) -> Sequence[InventoryTransaction]:
        ...

    def net_change(self, product_id: int, *, conn: Connection | None = None) -> int:
        ...


class SqlInventoryTransactionRepository(SqlRepository):
    """SQLAlchemy implementation of the ledger store."""

    def append(
        self,
        product_id: int,
        type: TransactionType,
        quantity_change: int,
        note: str | None = None,
        *,
        conn: Connection | None = None,
    ) -> InventoryTransaction:
        now = utcnow()
        movement = TransactionType(type)
        sql = text(
            """
            INSERT INTO inventory_transactions (product_id, type, quantity_change, note, created_at)
            VALUES (:product_id, :type, :quantity_change, :note, :created_at)
            RETURNING id
            """
        )
        params = {
            "product_id": int(product_id),
            "type": movement.value,
            "quantity_change": int(quantity_change),
            "note": note,
            "created_at": format_timestamp(now),
        }
        with self._db.transaction(conn) as tx:
            try:
                new_id = tx.execute(sql, params).scalar_one()
            except sa_exc.IntegrityError as exc:
                # The only constraint on the ledger besides the primary key is the product FK.
                if is_unique_violation(exc):
                    raise
                raise ProductNotFoundError(product_id) from exc

        return InventoryTransaction(
            id=int(new_id),
            product_id=int(product_id),
            type=movement,
            quantity_change=int(quantity_change),
            note=note,
            created_at=now,
        )

    def history(
        self,
        product_id: int | None = None,
        limit: int | None = None,
        *,
        conn: Connection | None = None,
    ) -> list[InventoryTransaction]:
        """Ledger entries, newest first."""

        sql = "SELECT id, product_id, type, quantity_change, note, created_at FROM inventory_transactions"
        params: dict[str, object] = {}
        if product_id is not None:
            sql += " WHERE product_id = :product_id"
            params["product_id"] = int(product_id)
        sql += " ORDER BY created_at DESC, id DESC"
        if limit is not None:
            sql += " LIMIT :limit"
            params["limit"] = max(0, int(limit))

        with self._db.transaction(conn) as tx:
            rows = tx.execute(text(sql), params).fetchall()
        return [self._row_to_transaction(row_mapping(row)) for row in rows]

    def net_change(self, product_id: int, *, conn: Connection | None = None) -> int:
        with self._db.transaction(conn) as tx:
            total = tx.execute(
                text(
                    "SELECT COALESCE(SUM(quantity_change), 0) FROM inventory_transactions "
                    "WHERE product_id = :product_id"
                ),
                {"product_id": int(product_id)},
            ).scalar_one()
        return int(total)

    @staticmethod
    def _row_to_transaction(row: dict) -> InventoryTransaction:
        return InventoryTransaction(
            id=int(row["id"]),
            product_id=int(row["product_id"]),
            type=TransactionType.from_stored(row["type"]),
            quantity_change=int(row["quantity_change"]),
            note=row.get("note"),
            created_at=parse_timestamp(row["created_at"], field_name="created_at"),
        )


__all__ = ["InventoryTransactionRepository", "SqlInventoryTransactionRepository"]
