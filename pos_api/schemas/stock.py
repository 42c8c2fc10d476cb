"""Schemas for stock and ledger endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from pos_core.inventory_service import StockChange
from pos_core.models import InventoryTransaction, TransactionType

from .catalog import ProductOut


class StockInRequest(BaseModel):
    quantity: int = Field(..., ge=0)
    note: Optional[str] = None


class StockAdjustmentRequest(BaseModel):
    """Either a signed ``delta`` or an absolute ``target_quantity``."""

    delta: Optional[int] = None
    target_quantity: Optional[int] = Field(default=None, ge=0)
    note: Optional[str] = None

    @model_validator(mode="after")
    def _exactly_one(self) -> "StockAdjustmentRequest":
        if (self.delta is None) == (self.target_quantity is None):
            raise ValueError("Provide exactly one of 'delta' or 'target_quantity'.")
        return self


class TransactionOut(BaseModel):
    id: int
    product_id: int
    type: TransactionType
    quantity_change: int
    note: Optional[str] = None
    created_at: datetime

    @classmethod
    def from_transaction(cls, entry: InventoryTransaction) -> "TransactionOut":
        return cls(
            id=entry.id,
            product_id=entry.product_id,
            type=entry.type,
            quantity_change=entry.quantity_change,
            note=entry.note,
            created_at=entry.created_at,
        )


class StockChangeResponse(BaseModel):
    product: ProductOut
    transaction: Optional[TransactionOut] = None

    @classmethod
    def from_change(cls, change: StockChange) -> "StockChangeResponse":
        return cls(
            product=ProductOut.from_product(change.product),
            transaction=TransactionOut.from_transaction(change.transaction) if change.transaction else None,
        )


class TransactionList(BaseModel):
    items: List[TransactionOut]


__all__ = [
    "StockAdjustmentRequest",
    "StockChangeResponse",
    "StockInRequest",
    "TransactionList",
    "TransactionOut",
]
