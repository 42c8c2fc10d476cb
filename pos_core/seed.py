"""Sample catalog used to bootstrap an empty shop."""

from __future__ import annotations

import logging
from decimal import Decimal

from .errors import DuplicateCodeError
from .models import Product, ProductCategory
from .product_service import ProductService

LOGGER = logging.getLogger(__name__)

SAMPLE_PRODUCTS: tuple[dict[str, object], ...] = (
    {
        "code": "BV001",
        "name": "Black coffee",
        "price": Decimal("45.00"),
        "quantity": 20,
        "category": ProductCategory.BEVERAGE,
        "description": "Americano",
    },
    {
        "code": "BV002",
        "name": "Green tea",
        "price": Decimal("40.00"),
        "quantity": 15,
        "category": ProductCategory.BEVERAGE,
        "description": "Matcha latte",
    },
    {
        "code": "BV003",
        "name": "Iced cocoa",
        "price": Decimal("50.00"),
        "quantity": 4,
        "category": ProductCategory.BEVERAGE,
        "description": "Iced cocoa",
    },
)


def seed_sample_products(products: ProductService) -> list[Product]:
    """Create the sample products; codes that already exist are skipped."""

    created: list[Product] = []
    for sample in SAMPLE_PRODUCTS:
        try:
            created.append(products.create_product(**sample))
        except DuplicateCodeError:
            LOGGER.info("Sample product %s already present, skipped", sample["code"])
    return created


__all__ = ["SAMPLE_PRODUCTS", "seed_sample_products"]
