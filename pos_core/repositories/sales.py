"""
Sale Repository - persisted receipts and their line items.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Protocol, Sequence

from sqlalchemy import bindparam, text
from sqlalchemy import exc as sa_exc
from sqlalchemy.engine import Connection

from ..errors import DuplicateReceiptError
from ..models import (
    SaleLineItem,
    SaleReceipt,
    format_timestamp,
    parse_money,
    parse_timestamp,
)
from .base import SqlRepository, is_unique_violation, money_param, row_mapping

_SALE_COLUMNS = "id, receipt_number, issued_at, store_name, sub_total, tax_amount"


class SaleRepository(Protocol):
    """Sale store interface."""

    def save(self, receipt: SaleReceipt, *, conn: Connection | None = None) -> SaleReceipt:
        ...

    def get_by_id(self, sale_id: int, *, conn: Connection | None = None) -> SaleReceipt | None:
        ...

    def get_by_receipt_number(
        self, receipt_number: str, *, conn: Connection | None = None
    ) -> SaleReceipt | None:
        ...

    def list_sales(
        self, limit: int | None = None, *, conn: Connection | None = None
    ) -> Sequence[SaleReceipt]:
        ...


class SqlSaleRepository(SqlRepository):
    """SQLAlchemy implementation of the sale store."""

    def save(self, receipt: SaleReceipt, *, conn: Connection | None = None) -> SaleReceipt:
        """Insert the sale header and every line item; returns the receipt with ids."""

        header_sql = text(
            """
            INSERT INTO sales (receipt_number, issued_at, store_name, sub_total, tax_amount)
            VALUES (:receipt_number, :issued_at, :store_name, :sub_total, :tax_amount)
            RETURNING id
            """
        )
        item_sql = text(
            """
            INSERT INTO sale_items (sale_id, product_id, product_name, unit_price, quantity)
            VALUES (:sale_id, :product_id, :product_name, :unit_price, :quantity)
            RETURNING id
            """
        )

        with self._db.transaction(conn) as tx:
            try:
                sale_id = int(
                    tx.execute(
                        header_sql,
                        {
                            "receipt_number": receipt.receipt_number,
                            "issued_at": format_timestamp(receipt.issued_at),
                            "store_name": receipt.store_name,
                            "sub_total": money_param(receipt.sub_total),
                            "tax_amount": money_param(receipt.tax_amount),
                        },
                    ).scalar_one()
                )
            except sa_exc.IntegrityError as exc:
                if is_unique_violation(exc):
                    raise DuplicateReceiptError(receipt.receipt_number) from exc
                raise

            saved_items: list[SaleLineItem] = []
            for item in receipt.items:
                item_id = tx.execute(
                    item_sql,
                    {
                        "sale_id": sale_id,
                        "product_id": int(item.product_id),
                        "product_name": item.product_name,
                        "unit_price": money_param(item.unit_price),
                        "quantity": int(item.quantity),
                    },
                ).scalar_one()
                saved_items.append(replace(item, id=int(item_id), sale_id=sale_id))

        return replace(receipt, id=sale_id, items=tuple(saved_items))

    def get_by_id(self, sale_id: int, *, conn: Connection | None = None) -> SaleReceipt | None:
        with self._db.transaction(conn) as tx:
            row = tx.execute(
                text(f"SELECT {_SALE_COLUMNS} FROM sales WHERE id = :id"),
                {"id": int(sale_id)},
            ).fetchone()
            if row is None:
                return None
            return self._load(tx, [row_mapping(row)])[0]

    def get_by_receipt_number(
        self, receipt_number: str, *, conn: Connection | None = None
    ) -> SaleReceipt | None:
        with self._db.transaction(conn) as tx:
            row = tx.execute(
                text(f"SELECT {_SALE_COLUMNS} FROM sales WHERE receipt_number = :receipt_number"),
                {"receipt_number": receipt_number},
            ).fetchone()
            if row is None:
                return None
            return self._load(tx, [row_mapping(row)])[0]

    def list_sales(
        self, limit: int | None = None, *, conn: Connection | None = None
    ) -> list[SaleReceipt]:
        """Sales with their items, most recently recorded first."""

        sql = f"SELECT {_SALE_COLUMNS} FROM sales ORDER BY id DESC"
        params: dict[str, object] = {}
        if limit is not None:
            sql += " LIMIT :limit"
            params["limit"] = max(0, int(limit))

        with self._db.transaction(conn) as tx:
            rows = [row_mapping(row) for row in tx.execute(text(sql), params).fetchall()]
            return self._load(tx, rows)

    def _load(self, conn: Connection, headers: list[dict]) -> list[SaleReceipt]:
        if not headers:
            return []

        item_rows = conn.execute(
            text(
                """
                SELECT id, sale_id, product_id, product_name, unit_price, quantity
                FROM sale_items
                WHERE sale_id IN :sale_ids
                ORDER BY id ASC
                """
            ).bindparams(bindparam("sale_ids", expanding=True)),
            {"sale_ids": [int(header["id"]) for header in headers]},
        ).fetchall()

        items_by_sale: dict[int, list[SaleLineItem]] = {}
        for raw in item_rows:
            row = row_mapping(raw)
            item = SaleLineItem(
                id=int(row["id"]),
                sale_id=int(row["sale_id"]),
                product_id=int(row["product_id"]),
                product_name=row["product_name"],
                unit_price=parse_money(row["unit_price"], field_name="unit_price"),
                quantity=int(row["quantity"]),
            )
            items_by_sale.setdefault(item.sale_id, []).append(item)

        return [
            SaleReceipt(
                id=int(header["id"]),
                receipt_number=header["receipt_number"],
                issued_at=parse_timestamp(header["issued_at"], field_name="issued_at"),
                store_name=header["store_name"],
                sub_total=parse_money(header["sub_total"], field_name="sub_total"),
                tax_amount=parse_money(header["tax_amount"], field_name="tax_amount"),
                items=tuple(items_by_sale.get(int(header["id"]), [])),
            )
            for header in headers
        ]


__all__ = ["SaleRepository", "SqlSaleRepository"]
