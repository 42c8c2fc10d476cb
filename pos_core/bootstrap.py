"""Service wiring: one store handle, one instance of every store and engine."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable

from .checkout_service import CheckoutService
from .data_repository import Database
from .inventory_service import InventoryService
from .product_service import ProductService
from .receipt_exporter import ReceiptExporter
from .reporting import ReportingService
from .repositories import SqlInventoryTransactionRepository, SqlProductRepository, SqlSaleRepository
from .schema import ensure_schema
from .settings import AppSettings


@dataclass(frozen=True)
class ShopServices:
    settings: AppSettings
    db: Database
    products: SqlProductRepository
    ledger: SqlInventoryTransactionRepository
    sales: SqlSaleRepository
    inventory: InventoryService
    catalog: ProductService
    checkout: CheckoutService
    reporting: ReportingService
    receipts: ReceiptExporter

    def checkout_cart(self, cart_items, tax_rate=None):
        """Checkout with the configured store name and, by default, tax rate."""

        rate = self.settings.tax_rate if tax_rate is None else tax_rate
        return self.checkout.checkout(self.settings.store_name, cart_items, rate)


def build_services(
    db: Database | None = None,
    settings: AppSettings | None = None,
    *,
    create_schema: bool = True,
    clock: Callable[[], datetime] | None = None,
) -> ShopServices:
    settings = settings or AppSettings.load()
    db = db or Database.from_settings(settings)
    if create_schema:
        ensure_schema(db)

    products = SqlProductRepository(db)
    ledger = SqlInventoryTransactionRepository(db)
    sales = SqlSaleRepository(db)
    inventory = InventoryService(db, products, ledger)
    receipts = ReceiptExporter(Path(settings.receipts_dir))
    checkout = (
        CheckoutService(db, inventory, sales, renderer=receipts, clock=clock)
        if clock is not None
        else CheckoutService(db, inventory, sales, renderer=receipts)
    )

    return ShopServices(
        settings=settings,
        db=db,
        products=products,
        ledger=ledger,
        sales=sales,
        inventory=inventory,
        catalog=ProductService(db, products, inventory, low_stock_threshold=settings.low_stock_threshold),
        checkout=checkout,
        reporting=ReportingService(db),
        receipts=receipts,
    )


__all__ = ["ShopServices", "build_services"]
