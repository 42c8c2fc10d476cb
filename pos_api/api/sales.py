"""Checkout and sale lookup endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status

from pos_api.dependencies import get_services, to_http_exception
from pos_api.schemas.sales import CheckoutRequest, SaleList, SaleOut
from pos_core.bootstrap import ShopServices
from pos_core.cart import resolve_cart
from pos_core.errors import PosError

router = APIRouter(prefix="/sales", tags=["sales"])


@router.post("/checkout", response_model=SaleOut, status_code=status.HTTP_201_CREATED)
def checkout(payload: CheckoutRequest, services: ShopServices = Depends(get_services)):
    try:
        cart = resolve_cart([line.model_dump() for line in payload.items], services.products)
        receipt = services.checkout_cart(cart, payload.tax_rate)
    except PosError as exc:
        raise to_http_exception(exc) from exc
    return SaleOut.from_receipt(receipt)


@router.get("", response_model=SaleList)
def list_sales(
    limit: int = Query(50, ge=1, le=500),
    services: ShopServices = Depends(get_services),
):
    try:
        receipts = services.checkout.list_sales(limit)
    except PosError as exc:
        raise to_http_exception(exc) from exc
    return SaleList(items=[SaleOut.from_receipt(receipt) for receipt in receipts])


@router.get("/{receipt_number}", response_model=SaleOut)
def get_sale(receipt_number: str, services: ShopServices = Depends(get_services)):
    try:
        return SaleOut.from_receipt(services.checkout.get_sale_by_receipt_number(receipt_number))
    except PosError as exc:
        raise to_http_exception(exc) from exc
