"""Checkout: turns a cart into a persisted sale in a single transaction."""

from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Callable, Sequence

from .data_repository import Database
from .errors import EmptyCartError, SaleNotFoundError, ValidationError
from .inventory_service import InventoryService
from .models import CENT, CartItem, SaleReceipt, to_money
from .receipt_exporter import ReceiptRenderer
from .repositories.sales import SqlSaleRepository

LOGGER = logging.getLogger(__name__)

RECEIPT_PREFIX = "RCPT-"


def _local_now() -> datetime:
    return datetime.now().astimezone()


def make_receipt_number(moment: datetime) -> str:
    """``RCPT-YYYYMMDDHHmmss`` in local time; two sales in the same second collide."""

    return f"{RECEIPT_PREFIX}{moment:%Y%m%d%H%M%S}"


def compute_tax(sub_total: Decimal, tax_rate: Decimal) -> Decimal:
    return (sub_total * tax_rate).quantize(CENT, rounding=ROUND_HALF_UP)


def _coerce_tax_rate(value) -> Decimal:
    try:
        rate = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError) as exc:
        raise ValidationError(f"Invalid tax rate: {value!r}") from exc
    if not rate.is_finite() or rate < 0:
        raise ValidationError(f"Tax rate must be zero or positive, got {value!r}.")
    return rate


def _validate_cart(cart_items: Sequence[CartItem] | None) -> list[CartItem]:
    if not cart_items:
        raise EmptyCartError()

    items = list(cart_items)
    for item in items:
        if item.product is None or item.product.id is None:
            raise ValidationError("Every cart line must reference a saved product.")
        if isinstance(item.quantity, bool) or not isinstance(item.quantity, int) or item.quantity < 1:
            raise ValidationError(
                f"Quantity for {item.product.code} must be a whole number of at least 1, got {item.quantity!r}."
            )
    return items


class CheckoutService:
    def __init__(
        self,
        db: Database,
        inventory: InventoryService,
        sales: SqlSaleRepository,
        renderer: ReceiptRenderer | None = None,
        clock: Callable[[], datetime] = _local_now,
    ) -> None:
        self._db = db
        self._inventory = inventory
        self._sales = sales
        self._renderer = renderer
        self._clock = clock

    def checkout(
        self,
        store_name: str,
        cart_items: Sequence[CartItem] | None,
        tax_rate: Decimal | str | float,
    ) -> SaleReceipt:
        """Record a sale.

        Stock is consumed for every line and the receipt with its items is
        stored in one transaction; if any line fails nothing is kept.  The
        receipt is rendered only after the commit and a rendering failure
        does not undo the sale.
        """

        items = _validate_cart(cart_items)
        rate = _coerce_tax_rate(tax_rate)

        sub_total = to_money(sum((item.line_total for item in items), Decimal("0")))
        tax_amount = compute_tax(sub_total, rate)
        issued_at = self._clock()
        receipt_number = make_receipt_number(issued_at)

        draft = SaleReceipt(
            receipt_number=receipt_number,
            issued_at=issued_at,
            store_name=store_name,
            sub_total=sub_total,
            tax_amount=tax_amount,
            items=tuple(item.to_line_item() for item in items),
        )

        note = f"Sale receipt {receipt_number}"
        with self._db.transaction() as conn:
            # Rows are locked in product id order; concurrent carts then queue instead of deadlocking.
            for item in sorted(items, key=lambda line: int(line.product.id)):
                self._inventory.consume_stock(int(item.product.id), item.quantity, note, conn=conn)
            receipt = self._sales.save(draft, conn=conn)

        LOGGER.info(
            "Sale %s recorded: %d line(s), total %s",
            receipt.receipt_number,
            len(receipt.items),
            receipt.grand_total,
        )
        self._render(receipt)
        return receipt

    def _render(self, receipt: SaleReceipt) -> None:
        if self._renderer is None:
            return
        try:
            self._renderer(receipt, receipt.items)
        except Exception:  # sale already committed
            LOGGER.exception("Receipt rendering failed for %s", receipt.receipt_number)

    def get_sale(self, sale_id: int) -> SaleReceipt:
        receipt = self._sales.get_by_id(sale_id)
        if receipt is None:
            raise SaleNotFoundError(sale_id)
        return receipt

    def get_sale_by_receipt_number(self, receipt_number: str) -> SaleReceipt:
        receipt = self._sales.get_by_receipt_number(receipt_number)
        if receipt is None:
            raise SaleNotFoundError(receipt_number)
        return receipt

    def list_sales(self, limit: int | None = 50) -> list[SaleReceipt]:
        return self._sales.list_sales(limit)


__all__ = ["CheckoutService", "RECEIPT_PREFIX", "compute_tax", "make_receipt_number"]
