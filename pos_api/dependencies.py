"""Request dependencies and error translation shared by the routers."""

from __future__ import annotations

from fastapi import HTTPException, Request, status

from pos_core.bootstrap import ShopServices
from pos_core.errors import (
    DataCorruptionError,
    DuplicateCodeError,
    DuplicateReceiptError,
    EmptyCartError,
    InsufficientStockError,
    NotFoundError,
    PersistenceError,
    PosError,
    ValidationError,
)

_STATUS_BY_ERROR: tuple[tuple[type[PosError], int], ...] = (
    (ValidationError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (DuplicateCodeError, status.HTTP_409_CONFLICT),
    (DuplicateReceiptError, status.HTTP_409_CONFLICT),
    (InsufficientStockError, status.HTTP_409_CONFLICT),
    (EmptyCartError, status.HTTP_409_CONFLICT),
    (PersistenceError, status.HTTP_500_INTERNAL_SERVER_ERROR),
    (DataCorruptionError, status.HTTP_500_INTERNAL_SERVER_ERROR),
)


def get_services(request: Request) -> ShopServices:
    return request.app.state.services


def to_http_exception(exc: PosError) -> HTTPException:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return HTTPException(status_code=status_code, detail=str(exc))
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


__all__ = ["get_services", "to_http_exception"]
