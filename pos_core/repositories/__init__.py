"""Repository layer (data access) for the point-of-sale core."""

from .base import SqlRepository
from .inventory_transactions import InventoryTransactionRepository, SqlInventoryTransactionRepository
from .products import ProductRepository, SqlProductRepository
from .sales import SaleRepository, SqlSaleRepository

__all__ = [
    "InventoryTransactionRepository",
    "ProductRepository",
    "SaleRepository",
    "SqlInventoryTransactionRepository",
    "SqlProductRepository",
    "SqlRepository",
    "SqlSaleRepository",
]
