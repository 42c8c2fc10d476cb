"""Catalog service: validation and queries on top of the product repository."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any

from .data_repository import Database
from .errors import DuplicateCodeError, ProductNotFoundError, ValidationError
from .inventory_service import InventoryService
from .models import Product, ProductCategory, to_money
from .repositories.products import SqlProductRepository

LOGGER = logging.getLogger(__name__)

DEFAULT_LOW_STOCK_THRESHOLD = 5


def _coerce_text(value: Any, *, field: str) -> str:
    cleaned = str(value or "").strip()
    if not cleaned:
        raise ValidationError(f"Field '{field}' cannot be empty.")
    return cleaned


def _coerce_price(value: Any):
    try:
        price = to_money(value)
    except ValueError as exc:
        raise ValidationError(f"Invalid price: {value!r}") from exc
    if price < 0:
        raise ValidationError("Price must be zero or positive.")
    return price


def _coerce_quantity(value: Any) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"Invalid quantity: {value!r}")
    try:
        quantity = int(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"Invalid quantity: {value!r}") from exc
    if quantity != value and not isinstance(value, str):
        raise ValidationError(f"Quantity must be a whole number: {value!r}")
    if quantity < 0:
        raise ValidationError("Quantity must be zero or positive.")
    return quantity


def coerce_category(value: Any) -> ProductCategory:
    """Accept a category member, its stored value (``PersonalCare``) or its name."""

    if isinstance(value, ProductCategory):
        return value
    raw = str(value or "").strip()
    for category in ProductCategory:
        if raw in (category.value, category.name) or raw.lower() == category.value.lower():
            return category
    allowed = ", ".join(category.value for category in ProductCategory)
    raise ValidationError(f"Unknown category {value!r}; expected one of {allowed}.")


def _clean_description(value: Any) -> str | None:
    if value is None:
        return None
    cleaned = str(value).strip()
    return cleaned or None


class ProductService:
    def __init__(
        self,
        db: Database,
        products: SqlProductRepository,
        inventory: InventoryService,
        *,
        low_stock_threshold: int = DEFAULT_LOW_STOCK_THRESHOLD,
    ) -> None:
        self._db = db
        self._products = products
        self._inventory = inventory
        self._low_stock_threshold = low_stock_threshold

    def create_product(
        self,
        code: Any,
        name: Any,
        price: Any,
        quantity: Any = 0,
        category: Any = ProductCategory.BEVERAGE,
        description: Any = None,
    ) -> Product:
        product = Product(
            code=_coerce_text(code, field="code"),
            name=_coerce_text(name, field="name"),
            price=_coerce_price(price),
            quantity=_coerce_quantity(quantity),
            category=coerce_category(category),
            description=_clean_description(description),
        )

        with self._db.transaction() as conn:
            if self._products.get_by_code(product.code, conn=conn) is not None:
                LOGGER.warning("Product creation rejected: code %s already exists", product.code)
                raise DuplicateCodeError(product.code)
            created = self._products.add(product, conn=conn)

        LOGGER.info("Product %s created (id %s, on hand %s)", created.code, created.id, created.quantity)
        return created

    def update_product(
        self,
        product_id: int,
        name: Any,
        price: Any,
        quantity: Any,
        category: Any,
        description: Any = None,
        *,
        code: Any = None,
    ) -> Product:
        """Replace the editable fields of a product.

        Codes are immutable; passing a different ``code`` is rejected.  A new
        ``quantity`` is not written directly: the difference is recorded as an
        Adjustment in the stock ledger within the same transaction.
        """

        clean_name = _coerce_text(name, field="name")
        clean_price = _coerce_price(price)
        target_quantity = _coerce_quantity(quantity)
        clean_category = coerce_category(category)
        clean_description = _clean_description(description)

        with self._db.transaction() as conn:
            current = self._products.get_by_id(product_id, conn=conn)
            if current is None or current.deleted:
                raise ProductNotFoundError(product_id)
            if code is not None and str(code).strip() != current.code:
                raise ValidationError("Product codes cannot be changed.")

            updated = self._products.update(
                replace(
                    current,
                    name=clean_name,
                    price=clean_price,
                    category=clean_category,
                    description=clean_description,
                ),
                conn=conn,
            )
            if target_quantity != current.quantity:
                change = self._inventory.set_stock_level(
                    int(current.id),
                    target_quantity,
                    note="Catalog quantity correction",
                    conn=conn,
                )
                updated = replace(
                    updated,
                    quantity=change.product.quantity,
                    updated_at=change.product.updated_at,
                )

        LOGGER.info("Product %s updated", updated.code)
        return updated

    def delete_product(self, product_id: int) -> None:
        if not self._products.soft_delete(product_id):
            raise ProductNotFoundError(product_id)
        LOGGER.info("Product %s marked as deleted", product_id)

    def search_products(
        self,
        keyword: str | None = "",
        category: Any = None,
        include_deleted: bool = False,
    ) -> list[Product]:
        clean_category = coerce_category(category) if category not in (None, "") else None
        return self._products.search(keyword or "", clean_category, include_deleted=include_deleted)

    def get_low_stock(self, threshold: int | None = None) -> list[Product]:
        """Active products whose quantity is at or below ``threshold``."""

        limit = self._low_stock_threshold if threshold is None else int(threshold)
        return [product for product in self._products.search("") if product.quantity <= limit]

    def get_product(self, product_id: int) -> Product:
        product = self._products.get_by_id(product_id)
        if product is None:
            raise ProductNotFoundError(product_id)
        return product

    def get_product_by_code(self, code: str) -> Product:
        product = self._products.get_by_code(code)
        if product is None:
            raise ProductNotFoundError(code)
        return product


__all__ = ["DEFAULT_LOW_STOCK_THRESHOLD", "ProductService", "coerce_category"]
