from decimal import Decimal

import pytest

from pos_core.errors import ValidationError
from pos_core.models import CartItem, ProductCategory
from pos_core.seed import seed_sample_products


def test_inventory_report_lines(services):
    seed_sample_products(services.catalog)
    services.catalog.create_product("HH001", "Dish soap", "1250.5", 2, "Household")

    assert services.reporting.inventory_report() == [
        "BV001 | Black coffee | on hand 20 | price 45.00",
        "HH001 | Dish soap | on hand 2 | price 1,250.50",
        "BV002 | Green tea | on hand 15 | price 40.00",
        "BV003 | Iced cocoa | on hand 4 | price 50.00",
    ]


def test_stock_value_excludes_deleted_products(services, coffee, tea):
    services.catalog.delete_product(tea.id)

    df = services.reporting.stock_value()

    assert list(df["code"]) == ["BV001"]
    assert df.iloc[0]["stock_value"] == Decimal("900.00")
    assert services.reporting.total_stock_value() == Decimal("900.00")


def test_empty_reports(services):
    assert services.reporting.inventory_report() == []
    assert services.reporting.stock_value().empty
    assert services.reporting.sales_summary().empty
    assert services.reporting.total_stock_value() == Decimal("0.00")


def test_ledger_summary_groups_by_type(services, coffee):
    services.inventory.add_stock(coffee.id, 5)
    services.inventory.consume_stock(coffee.id, 2)
    services.inventory.consume_stock(coffee.id, 1)

    df = services.reporting.ledger_summary(coffee.id)
    rows = {row["type"]: (row["movements"], row["quantity_change"]) for row in df.to_dict(orient="records")}

    assert rows == {"Sale": (2, -3), "StockIn": (1, 5)}


def test_sales_summary_by_day(services, coffee, tea):
    services.checkout_cart([CartItem(coffee, 1)])
    services.checkout_cart([CartItem(tea, 2)])

    df = services.reporting.sales_summary()

    assert len(df) == 1
    row = df.iloc[0]
    assert row["day"] == "2024-03-01"
    assert row["sales"] == 2
    assert row["sub_total"] == Decimal("125.00")
    assert row["tax_amount"] == Decimal("8.75")
    assert row["grand_total"] == Decimal("133.75")


def test_stock_value_category_filter_accepts_member_value_or_name(services, coffee):
    services.catalog.create_product("SN001", "Crackers", "12.00", 3, "Snack")

    for category in (ProductCategory.SNACK, "Snack", "snack", "SNACK"):
        df = services.reporting.stock_value(category)
        assert list(df["code"]) == ["SN001"]

    with pytest.raises(ValidationError):
        services.reporting.stock_value("Toys")
