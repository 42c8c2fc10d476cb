"""Domain entities for the catalog, the stock ledger and the sales."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from enum import Enum

from .errors import DataCorruptionError

CENT = Decimal("0.01")


def to_money(value) -> Decimal:
    """Convert a numeric-like value to a Decimal rounded to the cent (half away from zero)."""

    if isinstance(value, float):
        value = str(value)
    try:
        amount = Decimal(value)
    except (InvalidOperation, TypeError, ValueError) as exc:
        raise ValueError(f"Invalid amount: {value!r}") from exc
    if not amount.is_finite():
        raise ValueError(f"Invalid amount: {value!r}")
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    # Fixed width so that TEXT ordering matches chronological ordering.
    return value.isoformat(timespec="microseconds")


def parse_timestamp(raw, *, field_name: str = "timestamp") -> datetime:
    if isinstance(raw, datetime):
        parsed = raw
    else:
        try:
            parsed = datetime.fromisoformat(str(raw))
        except (TypeError, ValueError) as exc:
            raise DataCorruptionError(f"Unreadable {field_name}: {raw!r}") from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_money(raw, *, field_name: str = "amount") -> Decimal:
    try:
        return to_money(raw)
    except ValueError as exc:
        raise DataCorruptionError(f"Unreadable {field_name}: {raw!r}") from exc


class _StoredEnum(str, Enum):
    """String enum persisted by value."""

    @classmethod
    def from_stored(cls, raw: str):
        try:
            return cls(raw)
        except ValueError as exc:
            raise DataCorruptionError(f"Unknown {cls.__name__} value: {raw!r}") from exc


class ProductCategory(_StoredEnum):
    BEVERAGE = "Beverage"
    SNACK = "Snack"
    HOUSEHOLD = "Household"
    PERSONAL_CARE = "PersonalCare"


class TransactionType(_StoredEnum):
    STOCK_IN = "StockIn"
    SALE = "Sale"
    ADJUSTMENT = "Adjustment"


@dataclass
class Product:
    """Catalog entry. ``quantity`` is only changed through the inventory service."""

    code: str
    name: str
    price: Decimal
    quantity: int
    category: ProductCategory
    description: str | None = None
    id: int | None = None
    deleted: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class InventoryTransaction:
    """One immutable line of the stock ledger."""

    id: int
    product_id: int
    type: TransactionType
    quantity_change: int
    note: str | None
    created_at: datetime


@dataclass(frozen=True)
class SaleLineItem:
    product_id: int
    product_name: str
    unit_price: Decimal
    quantity: int
    id: int | None = None
    sale_id: int | None = None

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


@dataclass(frozen=True)
class SaleReceipt:
    receipt_number: str
    issued_at: datetime
    store_name: str
    sub_total: Decimal
    tax_amount: Decimal
    id: int | None = None
    items: tuple[SaleLineItem, ...] = field(default_factory=tuple)

    @property
    def grand_total(self) -> Decimal:
        return self.sub_total + self.tax_amount


@dataclass
class CartItem:
    """Transient checkout line: a product snapshot and the requested quantity."""

    product: Product
    quantity: int

    @property
    def line_total(self) -> Decimal:
        return self.product.price * self.quantity

    def to_line_item(self) -> SaleLineItem:
        return SaleLineItem(
            product_id=int(self.product.id),
            product_name=self.product.name,
            unit_price=self.product.price,
            quantity=self.quantity,
        )


__all__ = [
    "CENT",
    "CartItem",
    "InventoryTransaction",
    "Product",
    "ProductCategory",
    "SaleLineItem",
    "SaleReceipt",
    "TransactionType",
    "format_timestamp",
    "parse_money",
    "parse_timestamp",
    "to_money",
    "utcnow",
]
