"""Utilities to normalise raw cart rows and resolve them against the catalog."""
from __future__ import annotations

from typing import Any, Iterable, Mapping

from .errors import ProductNotFoundError, ValidationError
from .models import CartItem
from .repositories.products import SqlProductRepository

_FIELD_ALIASES: dict[str, str] = {
    "product_id": "product_id",
    "productId": "product_id",
    "pid": "product_id",
    "id": "product_id",
    "code": "code",
    "product_code": "code",
    "sku": "code",
    "quantity": "quantity",
    "qty": "quantity",
    "count": "quantity",
}  # Incoming field names mapped to the canonical keys


def _coerce_quantity(value: Any) -> int:
    """Strict conversion of a cart quantity to int."""
    if isinstance(value, bool):  # True/False are ints for Python, not for a cart
        raise ValidationError(f"Invalid cart quantity: {value!r}")
    if isinstance(value, int):
        return value
    text = str(value if value is not None else "").strip()
    try:
        number = float(text.replace(",", "."))  # Accepts "2", "2.0" and "2,0"
    except ValueError as exc:
        raise ValidationError(f"Invalid cart quantity: {value!r}") from exc
    if not number.is_integer():
        raise ValidationError(f"Cart quantity must be a whole number: {value!r}")
    return int(number)


def _coerce_product_id(value: Any) -> int | None:
    if value is None or value == "":
        return None
    try:
        return int(str(value).strip())
    except ValueError as exc:
        raise ValidationError(f"Invalid product id in cart: {value!r}") from exc


def normalize_cart_rows(cart: Iterable[Mapping[str, Any] | None] | None) -> list[dict[str, Any]]:
    """Return one canonical row per product with the quantities merged.

    Each output row has ``product_id`` (int or None), ``code`` (str or None)
    and ``quantity`` (int). Rows that are not mappings are ignored; rows that
    name neither an id nor a code, or ask for less than one unit, raise
    :class:`ValidationError`.
    """
    merged: dict[tuple[str, object], dict[str, Any]] = {}  # Keeps first-seen order

    for raw_row in cart or []:
        if not isinstance(raw_row, Mapping):  # Skip None and stray values
            continue

        canonical: dict[str, Any] = {}
        for key, value in raw_row.items():
            canonical_key = _FIELD_ALIASES.get(key)
            if canonical_key is not None and canonical_key not in canonical:
                canonical[canonical_key] = value

        product_id = _coerce_product_id(canonical.get("product_id"))
        code = str(canonical["code"]).strip() if canonical.get("code") not in (None, "") else None
        if product_id is None and code is None:
            raise ValidationError("A cart row names neither a product id nor a product code.")

        quantity = _coerce_quantity(canonical.get("quantity", 1))  # A bare reference means one unit
        if quantity < 1:  # Checked per row, before lines of the same product are merged
            raise ValidationError(f"Cart quantity must be at least 1: {canonical.get('quantity')!r}")
        key = ("id", product_id) if product_id is not None else ("code", code)

        row = merged.setdefault(key, {"product_id": product_id, "code": code, "quantity": 0})
        row["quantity"] += quantity

    return list(merged.values())


def resolve_cart(
    cart: Iterable[Mapping[str, Any] | None] | None,
    products: SqlProductRepository,
) -> list[CartItem]:
    """Turn raw cart rows into CartItems holding a snapshot of each product.

    Unknown or deleted products raise :class:`ProductNotFoundError`.
    """
    items: list[CartItem] = []
    by_product: dict[int, CartItem] = {}

    for row in normalize_cart_rows(cart):
        if row["product_id"] is not None:
            product = products.get_by_id(row["product_id"])
            reference = row["product_id"]
        else:
            product = products.get_by_code(row["code"])
            reference = row["code"]
        if product is None or product.deleted:
            raise ProductNotFoundError(reference)

        existing = by_product.get(int(product.id))
        if existing is not None:  # Same product referenced once by id and once by code
            existing.quantity += row["quantity"]
            continue

        item = CartItem(product=product, quantity=row["quantity"])
        by_product[int(product.id)] = item
        items.append(item)

    return items


__all__ = ["normalize_cart_rows", "resolve_cart"]
