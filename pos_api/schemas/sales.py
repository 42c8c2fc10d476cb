"""Schemas for checkout and sale lookup endpoints."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from pos_core.models import SaleReceipt


class CartLine(BaseModel):
    product_id: Optional[int] = Field(default=None, description="Product id")
    code: Optional[str] = Field(default=None, description="Product code, used when no id is given")
    quantity: int = Field(default=1, description="Units sold")


class CheckoutRequest(BaseModel):
    items: List[CartLine]
    tax_rate: Optional[Decimal] = Field(default=None, description="Defaults to the configured TAX_RATE")


class SaleLineOut(BaseModel):
    product_id: int
    product_name: str
    unit_price: Decimal
    quantity: int
    line_total: Decimal


class SaleOut(BaseModel):
    id: int
    receipt_number: str
    issued_at: datetime
    store_name: str
    sub_total: Decimal
    tax_amount: Decimal
    grand_total: Decimal
    items: List[SaleLineOut]

    @classmethod
    def from_receipt(cls, receipt: SaleReceipt) -> "SaleOut":
        return cls(
            id=int(receipt.id),
            receipt_number=receipt.receipt_number,
            issued_at=receipt.issued_at,
            store_name=receipt.store_name,
            sub_total=receipt.sub_total,
            tax_amount=receipt.tax_amount,
            grand_total=receipt.grand_total,
            items=[
                SaleLineOut(
                    product_id=item.product_id,
                    product_name=item.product_name,
                    unit_price=item.unit_price,
                    quantity=item.quantity,
                    line_total=item.line_total,
                )
                for item in receipt.items
            ],
        )


class SaleList(BaseModel):
    items: List[SaleOut]


__all__ = ["CartLine", "CheckoutRequest", "SaleLineOut", "SaleList", "SaleOut"]
