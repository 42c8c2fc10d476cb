"""Shared pytest fixtures for the point-of-sale core tests."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from pos_core.bootstrap import build_services
from pos_core.data_repository import Database
from pos_core.models import ProductCategory
from pos_core.schema import ensure_schema
from pos_core.settings import AppSettings


class FixedClock:
    """Deterministic clock for receipt numbers; advances one second per call."""

    def __init__(self, start: datetime | None = None, step: timedelta = timedelta(seconds=1)) -> None:
        self.current = start or datetime(2024, 3, 1, 9, 30, 0, tzinfo=timezone(timedelta(hours=7)))
        self.step = step

    def __call__(self) -> datetime:
        value = self.current
        self.current = self.current + self.step
        return value


@pytest.fixture()
def clock_factory():
    return FixedClock


@pytest.fixture()
def settings(tmp_path) -> AppSettings:
    return AppSettings(
        database_url="sqlite://",
        receipts_dir=str(tmp_path / "receipts"),
        backup_dir=str(tmp_path / "backups"),
    )


@pytest.fixture()
def db():
    database = Database("sqlite://")
    ensure_schema(database)
    yield database
    database.dispose()


@pytest.fixture()
def file_db(tmp_path):
    database = Database(f"sqlite:///{(tmp_path / 'shop.db').as_posix()}")
    ensure_schema(database)
    yield database
    database.dispose()


@pytest.fixture()
def services(db, settings):
    return build_services(db, settings, clock=FixedClock())


@pytest.fixture()
def coffee(services):
    return services.catalog.create_product(
        "BV001", "Black coffee", Decimal("45.00"), 20, ProductCategory.BEVERAGE, "Americano"
    )


@pytest.fixture()
def tea(services):
    return services.catalog.create_product(
        "BV002", "Green tea", Decimal("40.00"), 15, ProductCategory.BEVERAGE, "Matcha latte"
    )
