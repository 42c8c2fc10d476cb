"""Shared pytest fixtures for the API tests."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from pos_api.main import create_app
from pos_core.bootstrap import build_services
from pos_core.data_repository import Database
from pos_core.settings import AppSettings


def _stepping_clock():
    state = {"now": datetime(2024, 3, 1, 9, 30, 0, tzinfo=timezone(timedelta(hours=7)))}

    def clock() -> datetime:
        value = state["now"]
        state["now"] = value + timedelta(seconds=1)
        return value

    return clock


def _client_for(database_url: str, tmp_path) -> TestClient:
    settings = AppSettings(
        app_env="test",
        database_url=database_url,
        receipts_dir=str(tmp_path / "receipts"),
        backup_dir=str(tmp_path / "backups"),
    )
    services = build_services(Database(database_url), settings, clock=_stepping_clock())
    return TestClient(create_app(services=services))


@pytest.fixture
def client(tmp_path):
    """TestClient over an in-memory SQLite shop."""
    test_client = _client_for("sqlite://", tmp_path)
    yield test_client
    test_client.app.state.services.db.dispose()


@pytest.fixture
def file_client(tmp_path):
    """TestClient over a SQLite file, needed for backups."""
    test_client = _client_for(f"sqlite:///{(tmp_path / 'shop.db').as_posix()}", tmp_path)
    yield test_client
    test_client.app.state.services.db.dispose()


@pytest.fixture
def coffee_id(client) -> int:
    response = client.post(
        "/catalog/products",
        json={"code": "BV001", "name": "Black coffee", "price": "45.00", "quantity": 20},
    )
    assert response.status_code == 201
    return response.json()["id"]
