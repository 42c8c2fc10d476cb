from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response, status

from pos_api.dependencies import get_services, to_http_exception
from pos_api.schemas.catalog import ProductCreate, ProductList, ProductOut, ProductUpdate
from pos_core.bootstrap import ShopServices
from pos_core.errors import PosError

router = APIRouter(prefix="/catalog", tags=["catalog"])


@router.get("/products", response_model=ProductList)
def list_products(
    keyword: str = "",
    category: str | None = None,
    include_deleted: bool = False,
    services: ShopServices = Depends(get_services),
):
    try:
        products = services.catalog.search_products(keyword, category, include_deleted)
    except PosError as exc:
        raise to_http_exception(exc) from exc
    return ProductList(items=[ProductOut.from_product(product) for product in products])


@router.get("/low-stock", response_model=ProductList)
def list_low_stock(
    threshold: int | None = Query(default=None, ge=0),
    services: ShopServices = Depends(get_services),
):
    products = services.catalog.get_low_stock(threshold)
    return ProductList(items=[ProductOut.from_product(product) for product in products])


@router.get("/products/{product_id}", response_model=ProductOut)
def get_product(product_id: int, services: ShopServices = Depends(get_services)):
    try:
        return ProductOut.from_product(services.catalog.get_product(product_id))
    except PosError as exc:
        raise to_http_exception(exc) from exc


@router.post("/products", response_model=ProductOut, status_code=status.HTTP_201_CREATED)
def create_product(payload: ProductCreate, services: ShopServices = Depends(get_services)):
    try:
        product = services.catalog.create_product(
            payload.code,
            payload.name,
            payload.price,
            payload.quantity,
            payload.category,
            payload.description,
        )
    except PosError as exc:
        raise to_http_exception(exc) from exc
    return ProductOut.from_product(product)


@router.put("/products/{product_id}", response_model=ProductOut)
def update_product(product_id: int, payload: ProductUpdate, services: ShopServices = Depends(get_services)):
    try:
        product = services.catalog.update_product(
            product_id,
            payload.name,
            payload.price,
            payload.quantity,
            payload.category,
            payload.description,
            code=payload.code,
        )
    except PosError as exc:
        raise to_http_exception(exc) from exc
    return ProductOut.from_product(product)


@router.delete("/products/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_product(product_id: int, services: ShopServices = Depends(get_services)):
    try:
        services.catalog.delete_product(product_id)
    except PosError as exc:
        raise to_http_exception(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)
