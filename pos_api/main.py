"""FastAPI application exposing the point-of-sale features."""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pos_api.api import catalog as catalog_router
from pos_api.api import maintenance as maintenance_router
from pos_api.api import reports as reports_router
from pos_api.api import sales as sales_router
from pos_api.api import stock as stock_router
from pos_core.bootstrap import ShopServices, build_services
from pos_core.data_repository import Database
from pos_core.settings import AppSettings

LOGGER = logging.getLogger(__name__)

_DEV_ORIGINS = [
    "http://localhost:5173",
    "http://localhost:3000",
]


def create_app(
    settings: AppSettings | None = None,
    db: Database | None = None,
    services: ShopServices | None = None,
) -> FastAPI:
    """Build the application around one set of shop services."""

    if services is None:
        settings = settings or AppSettings.load()
        logging.basicConfig(
            level=settings.log_level,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
        services = build_services(db, settings)
    settings = services.settings

    app = FastAPI(
        title="Athens POS API",
        version="1.0.0",
        description="Catalog, stock ledger, checkout and reports for a single shop.",
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.services = services

    allowed_origins = settings.cors_allowed_origins or (_DEV_ORIGINS if settings.app_env == "development" else [])
    if allowed_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=allowed_origins,
            allow_credentials="*" not in allowed_origins,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.include_router(catalog_router.router)
    app.include_router(stock_router.router)
    app.include_router(sales_router.router)
    app.include_router(reports_router.router)
    app.include_router(maintenance_router.router)

    @app.get("/health")
    def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    LOGGER.info("API ready on %s", services.db.engine.dialect.name)
    return app


__all__ = ["create_app"]
