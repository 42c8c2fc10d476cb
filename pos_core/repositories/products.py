"""
Product Repository - data access for the products table (catalog store).
"""

from __future__ import annotations

from dataclasses import replace
from typing import Protocol, Sequence

from sqlalchemy import exc as sa_exc
from sqlalchemy import text
from sqlalchemy.engine import Connection

from ..errors import DuplicateCodeError, ProductNotFoundError
from ..models import (
    Product,
    ProductCategory,
    format_timestamp,
    parse_money,
    parse_timestamp,
    to_money,
    utcnow,
)
from .base import SqlRepository, is_unique_violation, money_param, row_mapping

_COLUMNS = "id, code, name, price, quantity, category, description, deleted, created_at, updated_at"


class ProductRepository(Protocol):
    """Catalog store interface."""

    def add(self, product: Product, *, conn: Connection | None = None) -> Product:
        ...

    def update(self, product: Product, *, conn: Connection | None = None) -> Product:
        ...

    def soft_delete(self, product_id: int, *, conn: Connection | None = None) -> bool:
        ...

    def search(
        self,
        keyword: str = "",
        category: ProductCategory | None = None,
        *,
        include_deleted: bool = False,
        conn: Connection | None = None,
    ) -> Sequence[Product]:
        ...

    def get_by_id(self, product_id: int, *, conn: Connection | None = None) -> Product | None:
        ...

    def get_by_code(self, code: str, *, conn: Connection | None = None) -> Product | None:
        ...


class SqlProductRepository(SqlRepository):
    """SQLAlchemy implementation of ProductRepository."""

    def add(self, product: Product, *, conn: Connection | None = None) -> Product:
        """Insert a product; the code must be unique across active and deleted rows."""

        now = utcnow()
        price = to_money(product.price)
        sql = text(
            """
            INSERT INTO products
                (code, name, price, quantity, category, description, deleted, created_at, updated_at)
            VALUES
                (:code, :name, :price, :quantity, :category, :description, FALSE, :created_at, :updated_at)
            RETURNING id
            """
        )
        params = {
            "code": product.code,
            "name": product.name,
            "price": money_param(price),
            "quantity": int(product.quantity),
            "category": ProductCategory(product.category).value,
            "description": product.description,
            "created_at": format_timestamp(now),
            "updated_at": format_timestamp(now),
        }
        with self._db.transaction(conn) as tx:
            if self._fetch_by_code(tx, product.code) is not None:
                raise DuplicateCodeError(product.code)
            try:
                new_id = tx.execute(sql, params).scalar_one()
            except sa_exc.IntegrityError as exc:
                if is_unique_violation(exc):
                    raise DuplicateCodeError(product.code) from exc
                raise

        return replace(
            product,
            id=int(new_id),
            price=price,
            deleted=False,
            created_at=now,
            updated_at=now,
        )

    def update(self, product: Product, *, conn: Connection | None = None) -> Product:
        """Overwrite the descriptive fields of an existing product.

        ``quantity`` and ``deleted`` are left alone: stock moves through the
        inventory service and a soft-deleted row is never resurrected here.
        """

        if product.id is None:
            raise ProductNotFoundError("<unsaved>")

        price = to_money(product.price)
        category = ProductCategory(product.category)
        with self._db.transaction(conn) as tx:
            current = self._fetch_by_id(tx, int(product.id))
            if current is None:
                raise ProductNotFoundError(product.id)

            updated_at = max(utcnow(), current.created_at)
            tx.execute(
                text(
                    """
                    UPDATE products
                    SET name = :name,
                        price = :price,
                        category = :category,
                        description = :description,
                        updated_at = :updated_at
                    WHERE id = :id
                    """
                ),
                {
                    "id": int(product.id),
                    "name": product.name,
                    "price": money_param(price),
                    "category": category.value,
                    "description": product.description,
                    "updated_at": format_timestamp(updated_at),
                },
            )

        return replace(
            current,
            name=product.name,
            price=price,
            category=category,
            description=product.description,
            updated_at=updated_at,
        )

    def soft_delete(self, product_id: int, *, conn: Connection | None = None) -> bool:
        """Flag a product as deleted. Returns False when the id is unknown.

        Deleting an already deleted product changes nothing.
        """

        with self._db.transaction(conn) as tx:
            current = self._fetch_by_id(tx, int(product_id))
            if current is None:
                return False
            if current.deleted:
                return True
            tx.execute(
                text("UPDATE products SET deleted = TRUE, updated_at = :updated_at WHERE id = :id"),
                {
                    "id": int(product_id),
                    "updated_at": format_timestamp(max(utcnow(), current.created_at)),
                },
            )
        return True

    def search(
        self,
        keyword: str = "",
        category: ProductCategory | None = None,
        *,
        include_deleted: bool = False,
        conn: Connection | None = None,
    ) -> list[Product]:
        """Products whose name or code contains ``keyword`` (case-sensitive), by name."""

        sql = f"SELECT {_COLUMNS} FROM products WHERE 1 = 1"
        params: dict[str, object] = {}
        if not include_deleted:
            sql += " AND deleted = FALSE"
        if category is not None:
            sql += " AND category = :category"
            params["category"] = ProductCategory(category).value
        sql += " ORDER BY name ASC, id ASC"

        with self._db.transaction(conn) as tx:
            rows = tx.execute(text(sql), params).fetchall()

        products = [self._row_to_product(row_mapping(row)) for row in rows]
        if keyword:
            # LIKE is case-insensitive on SQLite, so the substring match stays in Python.
            products = [p for p in products if keyword in p.name or keyword in p.code]
        return products

    def get_by_id(self, product_id: int, *, conn: Connection | None = None) -> Product | None:
        with self._db.transaction(conn) as tx:
            return self._fetch_by_id(tx, int(product_id))

    def get_by_code(self, code: str, *, conn: Connection | None = None) -> Product | None:
        with self._db.transaction(conn) as tx:
            return self._fetch_by_code(tx, code)

    def lock(self, conn: Connection, product_id: int) -> Product | None:
        """Load a product for update inside the caller's transaction."""

        row = conn.execute(
            text(f"SELECT {_COLUMNS} FROM products WHERE id = :id{self._db.lock_clause()}"),
            {"id": int(product_id)},
        ).fetchone()
        return self._row_to_product(row_mapping(row)) if row else None

    def apply_quantity(self, conn: Connection, product: Product, quantity: int) -> Product:
        """Write a new on-hand quantity. Only the inventory service calls this."""

        updated_at = max(utcnow(), product.created_at)
        conn.execute(
            text("UPDATE products SET quantity = :quantity, updated_at = :updated_at WHERE id = :id"),
            {
                "id": int(product.id),
                "quantity": int(quantity),
                "updated_at": format_timestamp(updated_at),
            },
        )
        return replace(product, quantity=int(quantity), updated_at=updated_at)

    def _fetch_by_id(self, conn: Connection, product_id: int) -> Product | None:
        row = conn.execute(
            text(f"SELECT {_COLUMNS} FROM products WHERE id = :id"),
            {"id": product_id},
        ).fetchone()
        return self._row_to_product(row_mapping(row)) if row else None

    def _fetch_by_code(self, conn: Connection, code: str) -> Product | None:
        row = conn.execute(
            text(f"SELECT {_COLUMNS} FROM products WHERE code = :code"),
            {"code": code},
        ).fetchone()
        return self._row_to_product(row_mapping(row)) if row else None

    def _row_to_product(self, row: dict) -> Product:
        return Product(
            id=int(row["id"]),
            code=row["code"],
            name=row["name"],
            price=parse_money(row["price"], field_name="price"),
            quantity=int(row["quantity"]),
            category=ProductCategory.from_stored(row["category"]),
            description=row.get("description"),
            deleted=bool(row["deleted"]),
            created_at=parse_timestamp(row["created_at"], field_name="created_at"),
            updated_at=parse_timestamp(row["updated_at"], field_name="updated_at"),
        )


__all__ = ["ProductRepository", "SqlProductRepository"]
