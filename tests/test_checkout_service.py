import threading
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from sqlalchemy import exc as sa_exc
from sqlalchemy import text

from pos_core.bootstrap import build_services
from pos_core.checkout_service import CheckoutService, compute_tax, make_receipt_number
from pos_core.errors import (
    DuplicateReceiptError,
    EmptyCartError,
    InsufficientStockError,
    PersistenceError,
    ValidationError,
)
from pos_core.models import CartItem, ProductCategory, TransactionType


def _count(db, table):
    with db.engine.connect() as conn:
        return conn.execute(text(f"SELECT COUNT(*) FROM {table}")).scalar_one()


def test_checkout_single_item_totals(services, coffee):
    receipt = services.checkout.checkout("Athens Beverage Shop", [CartItem(coffee, 1)], Decimal("0.07"))

    assert receipt.id is not None
    assert receipt.receipt_number == "RCPT-20240301093000"
    assert receipt.sub_total == Decimal("45.00")
    assert receipt.tax_amount == Decimal("3.15")
    assert receipt.grand_total == Decimal("48.15")
    assert [(item.product_name, item.quantity) for item in receipt.items] == [("Black coffee", 1)]
    assert services.checkout.get_sale_by_receipt_number(receipt.receipt_number) == receipt


def test_checkout_consumes_stock_with_receipt_note(services, coffee, tea):
    receipt = services.checkout_cart([CartItem(coffee, 2), CartItem(tea, 3)])

    assert services.products.get_by_id(coffee.id).quantity == 18
    assert services.products.get_by_id(tea.id).quantity == 12
    entries = services.inventory.history(coffee.id)
    assert entries[0].type is TransactionType.SALE
    assert entries[0].note == f"Sale receipt {receipt.receipt_number}"
    assert receipt.sub_total == Decimal("210.00")
    assert sum(item.line_total for item in receipt.items) == receipt.sub_total


def test_tax_rounds_half_away_from_zero():
    assert compute_tax(Decimal("0.50"), Decimal("0.07")) == Decimal("0.04")
    assert compute_tax(Decimal("2.50"), Decimal("0.07")) == Decimal("0.18")
    assert compute_tax(Decimal("10.00"), Decimal("0")) == Decimal("0.00")


def test_receipt_number_uses_local_timestamp():
    moment = datetime(2024, 12, 31, 23, 59, 58, tzinfo=timezone(timedelta(hours=7)))
    assert make_receipt_number(moment) == "RCPT-20241231235958"


@pytest.mark.parametrize("cart", [None, []])
def test_empty_cart_is_rejected(services, cart):
    with pytest.raises(EmptyCartError):
        services.checkout_cart(cart)
    assert _count(services.db, "sales") == 0


def test_invalid_quantity_and_tax_rate_are_rejected(services, coffee):
    with pytest.raises(ValidationError):
        services.checkout_cart([CartItem(coffee, 0)])
    with pytest.raises(ValidationError):
        services.checkout_cart([CartItem(coffee, 1)], Decimal("-0.01"))
    assert services.products.get_by_id(coffee.id).quantity == 20


def test_checkout_is_all_or_nothing(services, coffee, tea):
    with pytest.raises(InsufficientStockError):
        services.checkout_cart([CartItem(coffee, 2), CartItem(tea, 500)])

    assert services.products.get_by_id(coffee.id).quantity == 20
    assert services.inventory.history() == []
    assert _count(services.db, "sales") == 0
    assert _count(services.db, "sale_items") == 0


def test_same_second_checkout_collides(db, settings, coffee, clock_factory):
    shop = build_services(db, settings, clock=clock_factory(step=timedelta(0)))
    shop.checkout_cart([CartItem(coffee, 1)])

    with pytest.raises(DuplicateReceiptError):
        shop.checkout_cart([CartItem(coffee, 1)])

    assert shop.products.get_by_id(coffee.id).quantity == 19
    assert len(shop.inventory.history(coffee.id)) == 1


def test_storage_failure_rolls_back_stock(services, coffee, monkeypatch):
    def failing_save(*args, **kwargs):
        raise sa_exc.OperationalError("INSERT INTO sales", {}, Exception("disk I/O error"))

    monkeypatch.setattr(services.sales, "save", failing_save)

    with pytest.raises(PersistenceError):
        services.checkout_cart([CartItem(coffee, 1)])

    assert services.products.get_by_id(coffee.id).quantity == 20
    assert services.inventory.history() == []


def test_renderer_failure_keeps_the_sale(services, coffee, caplog, clock_factory):
    def broken_renderer(receipt, items):
        raise OSError("printer offline")

    checkout = CheckoutService(
        services.db, services.inventory, services.sales, renderer=broken_renderer, clock=clock_factory()
    )

    receipt = checkout.checkout("Athens Beverage Shop", [CartItem(coffee, 1)], Decimal("0.07"))

    assert checkout.get_sale(receipt.id) == receipt
    assert services.products.get_by_id(coffee.id).quantity == 19
    assert "Receipt rendering failed" in caplog.text


def test_checkout_writes_receipt_file(services, coffee, settings):
    receipt = services.checkout_cart([CartItem(coffee, 1)])

    content = services.receipts.path_for(receipt.receipt_number).read_text(encoding="utf-8")
    assert "Black coffee x1 @ 45.00 = 45.00" in content
    assert "Grand total: 48.15" in content


def test_stock_is_locked_in_product_id_order(services, coffee, tea, monkeypatch):
    consumed: list[int] = []
    original = services.inventory.consume_stock

    def recording_consume(product_id, quantity, note=None, *, conn=None):
        consumed.append(product_id)
        return original(product_id, quantity, note, conn=conn)

    monkeypatch.setattr(services.inventory, "consume_stock", recording_consume)

    receipt = services.checkout_cart([CartItem(tea, 1), CartItem(coffee, 1)])

    assert consumed == [coffee.id, tea.id]
    assert [item.product_name for item in receipt.items] == ["Green tea", "Black coffee"]


def test_concurrent_checkouts_in_opposite_order_all_succeed(file_db, settings):
    moments = iter(datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc) + timedelta(seconds=n) for n in range(100))
    clock_lock = threading.Lock()

    def clock():
        with clock_lock:
            return next(moments)

    shop = build_services(file_db, settings, clock=clock)
    first = shop.catalog.create_product("BV001", "Black coffee", Decimal("45.00"), 10, ProductCategory.BEVERAGE)
    second = shop.catalog.create_product("BV002", "Green tea", Decimal("40.00"), 10, ProductCategory.BEVERAGE)

    errors: list[Exception] = []
    start = threading.Barrier(8)

    def sell(cart):
        start.wait()
        try:
            shop.checkout_cart(cart)
        except Exception as exc:  # collected for the assertion below
            errors.append(exc)

    carts = [
        [CartItem(first, 1), CartItem(second, 1)] if n % 2 else [CartItem(second, 1), CartItem(first, 1)]
        for n in range(8)
    ]
    threads = [threading.Thread(target=sell, args=(cart,)) for cart in carts]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    assert shop.products.get_by_id(first.id).quantity == 2
    assert shop.products.get_by_id(second.id).quantity == 2
    assert len(shop.checkout.list_sales()) == 8
    assert shop.ledger.net_change(first.id) == -8
