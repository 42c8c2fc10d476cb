"""Stock movement endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from pos_api.dependencies import get_services, to_http_exception
from pos_api.schemas.stock import (
    StockAdjustmentRequest,
    StockChangeResponse,
    StockInRequest,
    TransactionList,
    TransactionOut,
)
from pos_core.bootstrap import ShopServices
from pos_core.errors import PosError
from pos_core.models import TransactionType

router = APIRouter(prefix="/stock", tags=["stock"])


@router.post("/{product_id}/stock-in", response_model=StockChangeResponse)
def receive_stock(
    product_id: int,
    payload: StockInRequest,
    services: ShopServices = Depends(get_services),
):
    try:
        change = services.inventory.add_stock(product_id, payload.quantity, payload.note)
    except PosError as exc:
        raise to_http_exception(exc) from exc
    return StockChangeResponse.from_change(change)


@router.post("/{product_id}/adjustments", response_model=StockChangeResponse)
def create_stock_adjustment(
    product_id: int,
    payload: StockAdjustmentRequest,
    services: ShopServices = Depends(get_services),
):
    try:
        if payload.target_quantity is not None:
            change = services.inventory.set_stock_level(product_id, payload.target_quantity, payload.note)
        else:
            change = services.inventory.adjust_stock(
                product_id,
                payload.delta,
                TransactionType.ADJUSTMENT,
                payload.note,
            )
    except PosError as exc:
        raise to_http_exception(exc) from exc
    return StockChangeResponse.from_change(change)


@router.get("/transactions", response_model=TransactionList)
def list_transactions(
    product_id: int | None = Query(default=None),
    limit: int = Query(100, ge=1, le=1000),
    services: ShopServices = Depends(get_services),
):
    try:
        entries = services.inventory.history(product_id, limit)
    except PosError as exc:
        raise to_http_exception(exc) from exc
    return TransactionList(items=[TransactionOut.from_transaction(entry) for entry in entries])
