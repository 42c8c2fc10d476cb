from datetime import datetime, timedelta, timezone
from decimal import Decimal

from pos_core.models import SaleLineItem, SaleReceipt
from pos_core.receipt_exporter import (
    ReceiptExporter,
    format_amount,
    render_receipt_lines,
    sanitize_receipt_text,
)


def _receipt():
    return SaleReceipt(
        id=1,
        receipt_number="RCPT-20240301093000",
        issued_at=datetime(2024, 3, 1, 9, 30, 5, tzinfo=timezone(timedelta(hours=7))),
        store_name="Athens Beverage Shop",
        sub_total=Decimal("1130.00"),
        tax_amount=Decimal("79.10"),
        items=(
            SaleLineItem(product_id=1, product_name="Black coffee", unit_price=Decimal("45.00"), quantity=2),
            SaleLineItem(product_id=2, product_name="Coffee  beans\n1kg", unit_price=Decimal("1040.00"), quantity=1),
        ),
    )


def test_render_receipt_lines_layout():
    lines = render_receipt_lines(_receipt())

    assert lines[0] == "Athens Beverage Shop"
    assert lines[2] == "No: RCPT-20240301093000"
    assert lines[3] == "Date: 01/03/2024 09:30:05"
    assert "Black coffee x2 @ 45.00 = 90.00" in lines
    assert "Coffee beans 1kg x1 @ 1,040.00 = 1,040.00" in lines
    assert lines[-3:] == ["Sub total: 1,130.00", "Tax: 79.10", "Grand total: 1,209.10"]


def test_exporter_writes_utf8_file(tmp_path):
    exporter = ReceiptExporter(tmp_path / "receipts")
    receipt = _receipt()
    thai_item = SaleLineItem(product_id=3, product_name="กาแฟดำ", unit_price=Decimal("45.00"), quantity=1)

    path = exporter(receipt, [thai_item])

    assert path.name == "RCPT-20240301093000.pdf"
    content = path.read_text(encoding="utf-8")
    assert "กาแฟดำ x1 @ 45.00 = 45.00" in content
    assert "Black coffee" not in content


def test_helpers():
    assert sanitize_receipt_text(None) == ""
    assert sanitize_receipt_text("  a \t b ") == "a b"
    assert format_amount(Decimal("2.345")) == "2.35"
