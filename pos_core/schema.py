"""Idempotent creation of the four shop tables."""

from __future__ import annotations

import logging

from .data_repository import Database

LOGGER = logging.getLogger(__name__)

_TABLES = (
    """
    CREATE TABLE IF NOT EXISTS products (
        id {pk},
        code TEXT NOT NULL UNIQUE,
        name TEXT NOT NULL,
        price NUMERIC(12, 2) NOT NULL CHECK (price >= 0),
        quantity INTEGER NOT NULL CHECK (quantity >= 0),
        category TEXT NOT NULL,
        description TEXT,
        deleted BOOLEAN NOT NULL DEFAULT FALSE,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS inventory_transactions (
        id {pk},
        product_id INTEGER NOT NULL REFERENCES products(id),
        type TEXT NOT NULL,
        quantity_change INTEGER NOT NULL,
        note TEXT,
        created_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS sales (
        id {pk},
        receipt_number TEXT NOT NULL UNIQUE,
        issued_at TEXT NOT NULL,
        store_name TEXT NOT NULL,
        sub_total NUMERIC(12, 2) NOT NULL,
        tax_amount NUMERIC(12, 2) NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS sale_items (
        id {pk},
        sale_id INTEGER NOT NULL REFERENCES sales(id),
        product_id INTEGER NOT NULL REFERENCES products(id),
        product_name TEXT NOT NULL,
        unit_price NUMERIC(12, 2) NOT NULL,
        quantity INTEGER NOT NULL CHECK (quantity > 0)
    )
    """,
)

_INDEXES = (
    "CREATE INDEX IF NOT EXISTS idx_products_name ON products(name)",
    "CREATE INDEX IF NOT EXISTS idx_inventory_product ON inventory_transactions(product_id)",
    "CREATE INDEX IF NOT EXISTS idx_sales_issued_at ON sales(issued_at)",
    "CREATE INDEX IF NOT EXISTS idx_sale_items_sale ON sale_items(sale_id)",
)


def _primary_key(db: Database) -> str:
    if db.is_sqlite:
        return "INTEGER PRIMARY KEY AUTOINCREMENT"
    return "SERIAL PRIMARY KEY"


def ensure_schema(db: Database) -> None:
    """Create missing tables and indexes; existing data is left untouched."""

    pk = _primary_key(db)
    with db.transaction() as conn:
        for ddl in _TABLES:
            conn.exec_driver_sql(ddl.format(pk=pk))
        for ddl in _INDEXES:
            conn.exec_driver_sql(ddl)
    LOGGER.debug("Schema ensured on %s", db.engine.dialect.name)


__all__ = ["ensure_schema"]
