from __future__ import annotations

from decimal import Decimal

from fastapi import APIRouter, Depends, Query

from pos_api.dependencies import get_services, to_http_exception
from pos_api.schemas.reports import (
    InventoryReportResponse,
    SalesSummaryResponse,
    SalesSummaryRow,
    StockValueResponse,
    StockValueRow,
)
from pos_core.bootstrap import ShopServices
from pos_core.errors import PosError

router = APIRouter(prefix="/reports", tags=["reports"])


@router.get("/inventory", response_model=InventoryReportResponse)
def inventory_report(services: ShopServices = Depends(get_services)):
    return InventoryReportResponse(lines=services.reporting.inventory_report())


@router.get("/stock-value", response_model=StockValueResponse)
def stock_value(
    category: str | None = None,
    services: ShopServices = Depends(get_services),
):
    try:
        df = services.reporting.stock_value(category)
    except PosError as exc:
        raise to_http_exception(exc) from exc
    items = [
        StockValueRow(
            code=row.code,
            name=row.name,
            category=str(row.category),
            quantity=int(row.quantity),
            price=row.price,
            stock_value=row.stock_value,
        )
        for row in df.itertuples(index=False)
    ]
    total = sum((item.stock_value for item in items), Decimal("0.00"))
    return StockValueResponse(items=items, total=total)


@router.get("/sales-summary", response_model=SalesSummaryResponse)
def sales_summary(
    days: int | None = Query(default=None, ge=1, le=366),
    services: ShopServices = Depends(get_services),
):
    df = services.reporting.sales_summary(days)
    items = [
        SalesSummaryRow(
            day=str(row.day),
            sales=int(row.sales),
            sub_total=row.sub_total,
            tax_amount=row.tax_amount,
            grand_total=row.grand_total,
        )
        for row in df.itertuples(index=False)
    ]
    return SalesSummaryResponse(items=items)
