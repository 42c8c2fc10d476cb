from __future__ import annotations

import logging
import unicodedata
from decimal import Decimal, ROUND_HALF_UP
from pathlib import Path
from typing import Iterable, Protocol

from .models import CENT, SaleLineItem, SaleReceipt

LOGGER = logging.getLogger(__name__)

RULE = "-" * 50


class ReceiptRenderer(Protocol):
    def __call__(self, receipt: SaleReceipt, items: Iterable[SaleLineItem]) -> object:
        ...


def sanitize_receipt_text(value: object) -> str:
    """Single-line, NFC-normalised text for a receipt line."""

    if value is None:
        return ""

    text = str(value)
    if not text:
        return ""

    normalized = unicodedata.normalize("NFC", text)
    return " ".join(normalized.split())


def format_amount(amount: Decimal) -> str:
    safe_amount = Decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)
    return f"{safe_amount:,.2f}"


def format_currency_line(label: str, amount: Decimal) -> str:
    return sanitize_receipt_text(f"{label}: {format_amount(amount)}")


def render_receipt_lines(receipt: SaleReceipt, items: Iterable[SaleLineItem] | None = None) -> list[str]:
    """Build the printable lines of a receipt.

    ``items`` defaults to the line items carried by the receipt.
    """

    lines = [
        sanitize_receipt_text(receipt.store_name),
        "Receipt",
        f"No: {receipt.receipt_number}",
        f"Date: {receipt.issued_at:%d/%m/%Y %H:%M:%S}",
        RULE,
    ]
    for item in receipt.items if items is None else items:
        lines.append(
            sanitize_receipt_text(
                f"{item.product_name} x{item.quantity} @ {format_amount(item.unit_price)}"
                f" = {format_amount(item.line_total)}"
            )
        )
    lines.append(RULE)
    lines.append(format_currency_line("Sub total", receipt.sub_total))
    lines.append(format_currency_line("Tax", receipt.tax_amount))
    lines.append(format_currency_line("Grand total", receipt.grand_total))
    return lines


def render_receipt_text(receipt: SaleReceipt, items: Iterable[SaleLineItem] | None = None) -> str:
    return "\n".join(render_receipt_lines(receipt, items)) + "\n"


class ReceiptExporter:
    """Writes ``<receipt_number>.pdf`` (plain UTF-8 text) into the receipts folder."""

    def __init__(self, receipts_dir: str | Path) -> None:
        self.receipts_dir = Path(receipts_dir)

    def path_for(self, receipt_number: str) -> Path:
        return self.receipts_dir / f"{receipt_number}.pdf"

    def export(self, receipt: SaleReceipt, items: Iterable[SaleLineItem] | None = None) -> Path:
        self.receipts_dir.mkdir(parents=True, exist_ok=True)
        target = self.path_for(receipt.receipt_number)
        target.write_text(render_receipt_text(receipt, items), encoding="utf-8")
        LOGGER.info("Receipt %s written to %s", receipt.receipt_number, target)
        return target

    __call__ = export


__all__ = [
    "ReceiptExporter",
    "ReceiptRenderer",
    "format_amount",
    "format_currency_line",
    "render_receipt_lines",
    "render_receipt_text",
    "sanitize_receipt_text",
]
