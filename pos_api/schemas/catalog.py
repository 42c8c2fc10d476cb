"""Schemas for catalog endpoints."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from pos_core.models import Product, ProductCategory


class ProductBase(BaseModel):
    name: str = Field(..., min_length=1)
    price: Decimal = Field(..., ge=0)
    quantity: int = Field(default=0, ge=0)
    category: str = Field(default=ProductCategory.BEVERAGE.value)
    description: Optional[str] = None

    @field_validator("name", mode="before")
    def _strip_name(cls, value: str | None) -> str | None:
        return value.strip() if isinstance(value, str) else value


class ProductCreate(ProductBase):
    code: str = Field(..., min_length=1)


class ProductUpdate(ProductBase):
    code: Optional[str] = Field(default=None, description="Codes are immutable; when sent it must match.")


class ProductOut(BaseModel):
    id: int
    code: str
    name: str
    price: Decimal
    quantity: int
    category: ProductCategory
    description: Optional[str] = None
    deleted: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_product(cls, product: Product) -> "ProductOut":
        return cls(
            id=int(product.id),
            code=product.code,
            name=product.name,
            price=product.price,
            quantity=product.quantity,
            category=product.category,
            description=product.description,
            deleted=product.deleted,
            created_at=product.created_at,
            updated_at=product.updated_at,
        )


class ProductList(BaseModel):
    items: List[ProductOut]


__all__ = ["ProductCreate", "ProductList", "ProductOut", "ProductUpdate"]
