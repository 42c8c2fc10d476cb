"""Stock movements: every quantity change is applied together with its ledger entry.

The product row is loaded under lock (``FOR UPDATE`` on PostgreSQL, the
database write lock taken by ``BEGIN IMMEDIATE`` on SQLite) and the
non-negative check is made inside the same transaction that writes the new
quantity, so concurrent sales of the same product are serialized.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from sqlalchemy.engine import Connection

from .data_repository import Database
from .errors import InsufficientStockError, ProductNotFoundError, ValidationError
from .models import InventoryTransaction, Product, TransactionType
from .repositories.inventory_transactions import SqlInventoryTransactionRepository
from .repositories.products import SqlProductRepository

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class StockChange:
    """Outcome of a stock movement: the product after the change and its ledger entry."""

    product: Product
    transaction: InventoryTransaction | None

    @property
    def quantity(self) -> int:
        return self.product.quantity


def _as_int(value, field_name: str) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be an integer.")
    try:
        number = int(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"{field_name} must be an integer.") from exc
    if number != value and not isinstance(value, str):
        raise ValidationError(f"{field_name} must be an integer.")
    return number


class InventoryService:
    def __init__(
        self,
        db: Database,
        products: SqlProductRepository,
        ledger: SqlInventoryTransactionRepository,
    ) -> None:
        self._db = db
        self._products = products
        self._ledger = ledger

    def adjust_stock(
        self,
        product_id: int,
        delta: int,
        type: TransactionType = TransactionType.ADJUSTMENT,
        note: str | None = None,
        *,
        conn: Connection | None = None,
    ) -> StockChange:
        """Apply ``delta`` to the on-hand quantity and ledger it.

        Raises :class:`ProductNotFoundError` for an unknown or deleted product
        and :class:`InsufficientStockError` when the result would be negative;
        in both cases nothing is written.
        """

        delta = _as_int(delta, "delta")
        movement = TransactionType(type)

        with self._db.transaction(conn) as tx:
            product = self._products.lock(tx, product_id)
            if product is None or product.deleted:
                LOGGER.warning("Stock change rejected: product %s not found", product_id)
                raise ProductNotFoundError(product_id)

            new_quantity = product.quantity + delta
            if new_quantity < 0:
                LOGGER.warning(
                    "Stock change rejected for %s: on hand %s, delta %s",
                    product.code,
                    product.quantity,
                    delta,
                )
                raise InsufficientStockError(
                    product_id=int(product.id),
                    code=product.code,
                    available=product.quantity,
                    requested=-delta,
                )

            updated = self._products.apply_quantity(tx, product, new_quantity)
            entry = self._ledger.append(int(product.id), movement, delta, note, conn=tx)

        LOGGER.info(
            "Stock %s for %s: %+d (now %s)",
            movement.value,
            product.code,
            delta,
            new_quantity,
        )
        return StockChange(product=updated, transaction=entry)

    def add_stock(
        self,
        product_id: int,
        quantity: int,
        note: str | None = None,
        *,
        conn: Connection | None = None,
    ) -> StockChange:
        quantity = _as_int(quantity, "quantity")
        if quantity < 0:
            raise ValidationError("Stock-in quantity must be zero or positive.")
        return self.adjust_stock(product_id, quantity, TransactionType.STOCK_IN, note, conn=conn)

    def consume_stock(
        self,
        product_id: int,
        quantity: int,
        note: str | None = None,
        *,
        conn: Connection | None = None,
    ) -> StockChange:
        quantity = _as_int(quantity, "quantity")
        return self.adjust_stock(product_id, -abs(quantity), TransactionType.SALE, note, conn=conn)

    def set_stock_level(
        self,
        product_id: int,
        target: int,
        note: str | None = None,
        *,
        conn: Connection | None = None,
    ) -> StockChange:
        """Bring the on-hand quantity to ``target`` with one Adjustment entry.

        When the product already holds ``target`` nothing is ledgered and the
        returned change carries no transaction.
        """

        target = _as_int(target, "target")
        if target < 0:
            raise ValidationError("Target stock level must be zero or positive.")

        with self._db.transaction(conn) as tx:
            product = self._products.lock(tx, product_id)
            if product is None or product.deleted:
                raise ProductNotFoundError(product_id)
            delta = target - product.quantity
            if delta == 0:
                return StockChange(product=product, transaction=None)
            return self.adjust_stock(product_id, delta, TransactionType.ADJUSTMENT, note, conn=tx)

    def history(
        self,
        product_id: int | None = None,
        limit: int | None = None,
        *,
        conn: Connection | None = None,
    ) -> Sequence[InventoryTransaction]:
        return self._ledger.history(product_id, limit, conn=conn)


__all__ = ["InventoryService", "StockChange"]
