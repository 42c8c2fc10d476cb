"""Centralised configuration read from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation

from .database_url import get_database_url
from .errors import ValidationError


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError as exc:
        raise ValidationError(f"{name} must be an integer, got {raw!r}.") from exc


def _decimal_env(name: str, default: str) -> Decimal:
    raw = (os.getenv(name) or "").strip() or default
    try:
        value = Decimal(raw)
    except InvalidOperation as exc:
        raise ValidationError(f"{name} must be a decimal number, got {raw!r}.") from exc
    if not value.is_finite() or value < 0:
        raise ValidationError(f"{name} must be a non-negative number, got {raw!r}.")
    return value


@dataclass(frozen=True)
class AppSettings:
    app_env: str = "development"
    database_url: str = "sqlite:///shop.db"
    db_pool_size: int = 10
    db_pool_max_overflow: int = 20
    store_name: str = "Athens Beverage Shop"
    tax_rate: Decimal = Decimal("0.07")
    low_stock_threshold: int = 5
    receipts_dir: str = "receipts"
    backup_dir: str = "backups"
    log_level: str = "INFO"
    cors_allowed_origins: list[str] = field(default_factory=list)

    @staticmethod
    def load() -> "AppSettings":
        cors_raw = os.getenv("CORS_ALLOWED_ORIGINS")
        cors = [entry.strip() for entry in cors_raw.split(",") if entry.strip()] if cors_raw else []
        return AppSettings(
            app_env=os.getenv("APP_ENV", os.getenv("ENV", "development")).lower(),
            database_url=get_database_url(),
            db_pool_size=_int_env("DB_POOL_SIZE", 10),
            db_pool_max_overflow=_int_env("DB_POOL_MAX_OVERFLOW", 20),
            store_name=os.getenv("STORE_NAME", "Athens Beverage Shop").strip() or "Athens Beverage Shop",
            tax_rate=_decimal_env("TAX_RATE", "0.07"),
            low_stock_threshold=_int_env("LOW_STOCK_THRESHOLD", 5),
            receipts_dir=os.getenv("RECEIPTS_DIR", "receipts"),
            backup_dir=os.getenv("BACKUP_DIR", "backups"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            cors_allowed_origins=cors,
        )
