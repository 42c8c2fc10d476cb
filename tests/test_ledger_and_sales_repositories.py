from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from sqlalchemy import text

from pos_core.errors import DuplicateReceiptError, ProductNotFoundError
from pos_core.models import Product, ProductCategory, SaleLineItem, SaleReceipt, TransactionType
from pos_core.repositories import (
    SqlInventoryTransactionRepository,
    SqlProductRepository,
    SqlSaleRepository,
)


@pytest.fixture()
def product(db):
    return SqlProductRepository(db).add(
        Product(code="BV001", name="Black coffee", price=Decimal("45.00"), quantity=20,
                category=ProductCategory.BEVERAGE)
    )


def _receipt(product, number="RCPT-20240301093000", quantity=2):
    return SaleReceipt(
        receipt_number=number,
        issued_at=datetime(2024, 3, 1, 9, 30, tzinfo=timezone(timedelta(hours=7))),
        store_name="Athens Beverage Shop",
        sub_total=Decimal("90.00"),
        tax_amount=Decimal("6.30"),
        items=(
            SaleLineItem(
                product_id=product.id,
                product_name=product.name,
                unit_price=product.price,
                quantity=quantity,
            ),
        ),
    )


def test_ledger_append_and_history_newest_first(db, product):
    ledger = SqlInventoryTransactionRepository(db)
    first = ledger.append(product.id, TransactionType.STOCK_IN, 5, "delivery")
    second = ledger.append(product.id, TransactionType.SALE, -3, None)

    history = ledger.history(product.id)

    assert [entry.id for entry in history] == [second.id, first.id]
    assert history[1] == first
    assert ledger.net_change(product.id) == 2
    assert ledger.history(limit=1) == [second]


def test_ledger_rejects_unknown_product(db):
    ledger = SqlInventoryTransactionRepository(db)

    with pytest.raises(ProductNotFoundError):
        ledger.append(999, TransactionType.ADJUSTMENT, 1)

    assert ledger.history() == []


def test_sale_round_trip(db, product):
    sales = SqlSaleRepository(db)
    saved = sales.save(_receipt(product))

    assert saved.id is not None
    assert all(item.sale_id == saved.id for item in saved.items)
    assert sales.get_by_id(saved.id) == saved
    assert sales.get_by_receipt_number(saved.receipt_number) == saved
    assert saved.grand_total == Decimal("96.30")
    assert sales.get_by_receipt_number("RCPT-missing") is None


def test_duplicate_receipt_number_is_rejected(db, product):
    sales = SqlSaleRepository(db)
    sales.save(_receipt(product))

    with pytest.raises(DuplicateReceiptError):
        sales.save(_receipt(product))

    with db.engine.connect() as conn:
        assert conn.execute(text("SELECT COUNT(*) FROM sale_items")).scalar_one() == 1


def test_line_item_snapshot_survives_product_edits(db, product):
    products = SqlProductRepository(db)
    sales = SqlSaleRepository(db)
    saved = sales.save(_receipt(product))

    products.update(Product(**{**product.__dict__, "name": "Renamed", "price": Decimal("99.00")}))

    item = sales.get_by_id(saved.id).items[0]
    assert item.product_name == "Black coffee"
    assert item.unit_price == Decimal("45.00")


def test_list_sales_most_recent_first(db, product):
    sales = SqlSaleRepository(db)
    older = sales.save(_receipt(product, "RCPT-1"))
    newer = sales.save(
        SaleReceipt(
            receipt_number="RCPT-2",
            issued_at=older.issued_at + timedelta(minutes=5),
            store_name=older.store_name,
            sub_total=Decimal("0.00"),
            tax_amount=Decimal("0.00"),
        )
    )

    assert [sale.receipt_number for sale in sales.list_sales()] == [newer.receipt_number, older.receipt_number]
    assert sales.list_sales(limit=1)[0].items == ()


def test_list_sales_follows_recording_order_across_clock_fall_back(db):
    sales = SqlSaleRepository(db)

    def header(number, moment):
        return SaleReceipt(
            receipt_number=number,
            issued_at=moment,
            store_name="Athens Beverage Shop",
            sub_total=Decimal("0.00"),
            tax_amount=Decimal("0.00"),
        )

    # 01:30 summer time, then 01:10 winter time forty minutes later.
    summer, winter = timezone(timedelta(hours=-4)), timezone(timedelta(hours=-5))
    before = sales.save(header("RCPT-20241103013000", datetime(2024, 11, 3, 1, 30, tzinfo=summer)))
    after = sales.save(header("RCPT-20241103011000", datetime(2024, 11, 3, 1, 10, tzinfo=winter)))

    assert after.issued_at > before.issued_at
    assert [sale.receipt_number for sale in sales.list_sales()] == [after.receipt_number, before.receipt_number]
