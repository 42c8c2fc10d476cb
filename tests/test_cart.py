import pytest

from pos_core.cart import normalize_cart_rows, resolve_cart
from pos_core.errors import ProductNotFoundError, ValidationError


def test_normalize_cart_rows_merges_aliases():
    rows = normalize_cart_rows(
        [
            {"id": "1", "qty": "2"},
            {"product_id": 1, "quantity": 3},
            {"code": " BV002 "},
            None,
            "garbage",
            {"sku": "BV002", "count": "2,0"},
        ]
    )

    assert rows == [
        {"product_id": 1, "code": None, "quantity": 5},
        {"product_id": None, "code": "BV002", "quantity": 3},
    ]


@pytest.mark.parametrize(
    "row",
    [
        {"qty": 1},
        {"id": "abc", "qty": 1},
        {"id": 1, "qty": "1.5"},
        {"id": 1, "qty": True},
        {"id": 1, "qty": 0},
        {"code": "BV001", "quantity": "-2"},
    ],
)
def test_normalize_cart_rows_rejects_bad_rows(row):
    with pytest.raises(ValidationError):
        normalize_cart_rows([row])


def test_negative_row_cannot_offset_another_row(services, coffee):
    cart = [{"code": "BV001", "quantity": 5}, {"code": "BV001", "quantity": -3}]

    with pytest.raises(ValidationError):
        resolve_cart(cart, services.products)

    assert services.products.get_by_id(coffee.id).quantity == 20
    assert services.checkout.list_sales() == []


def test_resolve_cart_by_id_and_code(services, coffee, tea):
    items = resolve_cart(
        [{"code": "BV002", "qty": 1}, {"id": coffee.id, "qty": 2}, {"code": "BV001", "qty": 1}],
        services.products,
    )

    assert [(item.product.code, item.quantity) for item in items] == [("BV002", 1), ("BV001", 3)]


def test_resolve_cart_rejects_unknown_and_deleted(services, coffee):
    with pytest.raises(ProductNotFoundError):
        resolve_cart([{"code": "NOPE"}], services.products)

    services.catalog.delete_product(coffee.id)
    with pytest.raises(ProductNotFoundError):
        resolve_cart([{"id": coffee.id}], services.products)
