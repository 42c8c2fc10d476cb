"""Schemas for reporting endpoints."""

from __future__ import annotations

from decimal import Decimal
from typing import List

from pydantic import BaseModel


class InventoryReportResponse(BaseModel):
    lines: List[str]


class StockValueRow(BaseModel):
    code: str
    name: str
    category: str
    quantity: int
    price: Decimal
    stock_value: Decimal


class StockValueResponse(BaseModel):
    items: List[StockValueRow]
    total: Decimal


class SalesSummaryRow(BaseModel):
    day: str
    sales: int
    sub_total: Decimal
    tax_amount: Decimal
    grand_total: Decimal


class SalesSummaryResponse(BaseModel):
    items: List[SalesSummaryRow]


__all__ = [
    "InventoryReportResponse",
    "SalesSummaryResponse",
    "SalesSummaryRow",
    "StockValueResponse",
    "StockValueRow",
]
