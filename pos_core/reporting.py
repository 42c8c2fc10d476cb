"""Read-only projections over the catalog, the stock ledger and the sales."""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Optional

import pandas as pd

from .data_repository import Database
from .models import to_money
from .product_service import coerce_category
from .receipt_exporter import format_amount


def _money_column(series: pd.Series) -> pd.Series:
    return series.map(lambda value: to_money(value if value is not None else 0))


class ReportingService:
    def __init__(self, db: Database) -> None:
        self._db = db

    def inventory_report(self) -> list[str]:
        """One line per active product: ``CODE | Name | on hand N | price P``."""

        df = self._db.query_df(
            "SELECT code, name, quantity, price FROM products WHERE deleted = FALSE ORDER BY name ASC, id ASC"
        )
        return [
            f"{row.code} | {row.name} | on hand {int(row.quantity)} | price {format_amount(to_money(row.price))}"
            for row in df.itertuples(index=False)
        ]

    def stock_value(self, category: Any = None) -> pd.DataFrame:
        """Valuation of the active stock (``quantity × price``) per product."""

        sql = """
            SELECT id, code, name, category, quantity, price
            FROM products
            WHERE deleted = FALSE
        """
        params: dict[str, object] = {}
        if category:
            sql += " AND category = :category"
            params["category"] = coerce_category(category).value
        sql += " ORDER BY name ASC, id ASC"

        df = self._db.query_df(sql, params)
        if df.empty:
            return pd.DataFrame(columns=["id", "code", "name", "category", "quantity", "price", "stock_value"])

        df["quantity"] = df["quantity"].astype(int)
        df["price"] = _money_column(df["price"])
        df["stock_value"] = [price * qty for price, qty in zip(df["price"], df["quantity"])]
        return df

    def total_stock_value(self) -> Decimal:
        df = self.stock_value()
        return sum(df["stock_value"], Decimal("0.00")) if not df.empty else Decimal("0.00")

    def ledger_summary(self, product_id: Optional[int] = None) -> pd.DataFrame:
        """Net quantity change per product and movement type."""

        sql = """
            SELECT
                p.id AS product_id,
                p.code,
                p.name,
                t.type,
                COUNT(t.id) AS movements,
                SUM(t.quantity_change) AS quantity_change
            FROM inventory_transactions t
            JOIN products p ON p.id = t.product_id
        """
        params: dict[str, object] = {}
        if product_id is not None:
            sql += " WHERE t.product_id = :product_id"
            params["product_id"] = int(product_id)
        sql += """
            GROUP BY p.id, p.code, p.name, t.type
            ORDER BY p.code ASC, t.type ASC
        """
        df = self._db.query_df(sql, params)
        if not df.empty:
            df["movements"] = df["movements"].astype(int)
            df["quantity_change"] = df["quantity_change"].astype(int)
        return df

    def sales_summary(self, limit_days: Optional[int] = None) -> pd.DataFrame:
        """Sales grouped by (local) day, most recent day first."""

        columns = ["day", "sales", "sub_total", "tax_amount", "grand_total"]
        df = self._db.query_df("SELECT issued_at, sub_total, tax_amount FROM sales")
        if df.empty:
            return pd.DataFrame(columns=columns)

        df["day"] = df["issued_at"].astype(str).str.slice(0, 10)
        df["sub_total"] = _money_column(df["sub_total"])
        df["tax_amount"] = _money_column(df["tax_amount"])

        rows = []
        for day, group in df.groupby("day", sort=True):
            sub_total = sum(group["sub_total"], Decimal("0.00"))
            tax_amount = sum(group["tax_amount"], Decimal("0.00"))
            rows.append(
                {
                    "day": day,
                    "sales": int(len(group)),
                    "sub_total": sub_total,
                    "tax_amount": tax_amount,
                    "grand_total": sub_total + tax_amount,
                }
            )

        summary = pd.DataFrame(rows, columns=columns).sort_values("day", ascending=False)
        if limit_days is not None:
            summary = summary.head(max(0, int(limit_days)))
        return summary.reset_index(drop=True)


__all__ = ["ReportingService"]
