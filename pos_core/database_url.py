"""Utilities to assemble the DATABASE_URL used by the store."""

from __future__ import annotations

import os
from pathlib import Path
from urllib.parse import quote_plus


def _get_env(name: str) -> str | None:
    """Return the environment variable when it is a non-empty string."""

    value = os.getenv(name)
    if value is None:
        return None
    value = value.strip()
    return value if value else None


def get_database_url() -> str:
    """Build a SQLAlchemy compatible DATABASE_URL.

    Priority order:

    1. ``DATABASE_URL`` (already complete connection string).
    2. ``POSTGRES_DB`` / ``DB_HOST`` style variables, when any is set.
    3. A SQLite file, ``SHOP_DB_PATH`` or ``shop.db`` in the working directory.
    """

    explicit_url = _get_env("DATABASE_URL")
    if explicit_url:
        return explicit_url

    database = _get_env("POSTGRES_DB") or _get_env("DB_NAME")
    host = _get_env("DB_HOST") or _get_env("POSTGRES_HOST")
    if database or host:
        user = _get_env("POSTGRES_USER") or "postgres"
        password = _get_env("POSTGRES_PASSWORD")
        port = _get_env("DB_PORT") or _get_env("POSTGRES_PORT") or "5432"

        user_part = quote_plus(user)
        if password is None:
            auth_part = user_part
        else:
            auth_part = f"{user_part}:{quote_plus(password)}"
        return f"postgresql+psycopg2://{auth_part}@{host or 'localhost'}:{port}/{database or 'shop'}"

    db_path = Path(_get_env("SHOP_DB_PATH") or "shop.db")
    return f"sqlite:///{db_path.as_posix()}"


__all__ = ["get_database_url"]
