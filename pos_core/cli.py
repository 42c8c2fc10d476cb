"""Command line entry point: ``athens-pos <command>``."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Sequence

from dotenv import load_dotenv

from . import backup_manager
from .bootstrap import ShopServices, build_services
from .cart import resolve_cart
from .errors import PosError, ValidationError
from .receipt_exporter import render_receipt_text
from .seed import seed_sample_products
from .settings import AppSettings

LOGGER = logging.getLogger(__name__)


def _parse_item(raw: str) -> dict[str, object]:
    code, sep, quantity = raw.partition("=")
    if not code.strip():
        raise ValidationError(f"Invalid cart item {raw!r}, expected CODE=QTY.")
    return {"code": code.strip(), "quantity": quantity.strip() if sep else 1}


def _cmd_init_db(services: ShopServices, args: argparse.Namespace) -> int:
    print(f"Schema ready on {services.db.url.render_as_string(hide_password=True)}")
    return 0


def _cmd_seed(services: ShopServices, args: argparse.Namespace) -> int:
    created = seed_sample_products(services.catalog)
    print(f"{len(created)} sample product(s) created.")
    return 0


def _cmd_report(services: ShopServices, args: argparse.Namespace) -> int:
    if args.stock_value:
        df = services.reporting.stock_value()
        print(df.to_string(index=False) if not df.empty else "No products.")
        print(f"Total stock value: {services.reporting.total_stock_value():,.2f}")
        return 0
    if args.sales:
        df = services.reporting.sales_summary()
        print(df.to_string(index=False) if not df.empty else "No sales.")
        return 0
    for line in services.reporting.inventory_report():
        print(line)
    return 0


def _cmd_low_stock(services: ShopServices, args: argparse.Namespace) -> int:
    for product in services.catalog.get_low_stock(args.threshold):
        print(f"{product.code} | {product.name} | on hand {product.quantity}")
    return 0


def _cmd_stock_in(services: ShopServices, args: argparse.Namespace) -> int:
    product = services.catalog.get_product_by_code(args.code)
    change = services.inventory.add_stock(int(product.id), args.quantity, args.note)
    print(f"{product.code}: on hand {change.quantity}")
    return 0


def _cmd_checkout(services: ShopServices, args: argparse.Namespace) -> int:
    cart = resolve_cart([_parse_item(raw) for raw in args.item], services.products)
    receipt = services.checkout_cart(cart, args.tax_rate)
    print(render_receipt_text(receipt), end="")
    return 0


def _cmd_backup(services: ShopServices, args: argparse.Namespace) -> int:
    metadata = backup_manager.create_backup(
        services.db,
        label=args.label,
        backup_dir=services.settings.backup_dir,
    )
    print(f"Backup created: {metadata.path}")
    return 0


def _cmd_restore(services: ShopServices, args: argparse.Namespace) -> int:
    backup_manager.restore_backup(services.db, args.name, backup_dir=services.settings.backup_dir)
    print(f"Database restored from {args.name}")
    return 0


def _cmd_backups(services: ShopServices, args: argparse.Namespace) -> int:
    backups = backup_manager.list_backups(services.settings.backup_dir)
    report = backup_manager.integrity_report(backups)
    print(json.dumps(report, indent=2, default=str))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="athens-pos", description="Athens point-of-sale tools.")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init-db", help="Create the tables if needed.").set_defaults(handler=_cmd_init_db)
    sub.add_parser("seed", help="Load the sample products.").set_defaults(handler=_cmd_seed)

    report = sub.add_parser("report", help="Inventory report.")
    report.add_argument("--stock-value", action="store_true", help="Stock valuation per product.")
    report.add_argument("--sales", action="store_true", help="Daily sales summary.")
    report.set_defaults(handler=_cmd_report)

    low_stock = sub.add_parser("low-stock", help="Products at or below the threshold.")
    low_stock.add_argument("--threshold", type=int, default=None)
    low_stock.set_defaults(handler=_cmd_low_stock)

    stock_in = sub.add_parser("stock-in", help="Receive stock for a product code.")
    stock_in.add_argument("code")
    stock_in.add_argument("quantity", type=int)
    stock_in.add_argument("--note", default=None)
    stock_in.set_defaults(handler=_cmd_stock_in)

    checkout = sub.add_parser("checkout", help="Sell items, e.g. BV001=2 BV002=1.")
    checkout.add_argument("item", nargs="+", help="CODE=QTY")
    checkout.add_argument("--tax-rate", default=None, help="Defaults to TAX_RATE.")
    checkout.set_defaults(handler=_cmd_checkout)

    backup = sub.add_parser("backup", help="Copy the SQLite database into the backup folder.")
    backup.add_argument("--label", default=None)
    backup.set_defaults(handler=_cmd_backup)

    restore = sub.add_parser("restore", help="Restore a backup over the database.")
    restore.add_argument("name")
    restore.set_defaults(handler=_cmd_restore)

    sub.add_parser("backups", help="List backups with their integrity status.").set_defaults(handler=_cmd_backups)
    return parser


def main(argv: Sequence[str] | None = None, services: ShopServices | None = None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)

    try:
        if services is None:
            settings = AppSettings.load()
            logging.basicConfig(
                level=settings.log_level,
                format="%(asctime)s %(levelname)s %(name)s: %(message)s",
            )
            services = build_services(settings=settings)
        return args.handler(services, args)
    except PosError as exc:
        LOGGER.debug("Command %s failed", args.command, exc_info=True)
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
