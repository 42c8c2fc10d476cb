"""Exception taxonomy shared by the stores and the engines."""

from __future__ import annotations


class PosError(Exception):
    """Base class for every error raised by the point-of-sale core."""


class ValidationError(PosError, ValueError):
    """Raised when caller input is rejected before any state change."""


class NotFoundError(PosError, LookupError):
    """Raised when a referenced record does not exist."""


class ProductNotFoundError(NotFoundError):
    def __init__(self, product_id: int | str) -> None:
        self.product_id = product_id
        super().__init__(f"Product {product_id} not found.")


class SaleNotFoundError(NotFoundError):
    def __init__(self, reference: int | str) -> None:
        self.reference = reference
        super().__init__(f"Sale {reference} not found.")


class DuplicateCodeError(PosError):
    def __init__(self, code: str) -> None:
        self.code = code
        super().__init__(f"Product code '{code}' already exists.")


class DuplicateReceiptError(PosError):
    def __init__(self, receipt_number: str) -> None:
        self.receipt_number = receipt_number
        super().__init__(f"Receipt number '{receipt_number}' already exists.")


class InsufficientStockError(PosError):
    """Raised when a stock delta would drive a product below zero."""

    def __init__(self, product_id: int, code: str, available: int, requested: int) -> None:
        self.product_id = product_id
        self.code = code
        self.available = available
        self.requested = requested
        super().__init__(
            f"Insufficient stock for product {code} (id {product_id}): "
            f"available {available}, requested {requested}."
        )


class EmptyCartError(PosError):
    def __init__(self) -> None:
        super().__init__("The cart is empty, no sale was recorded.")


class PersistenceError(PosError):
    """Raised after a storage failure has rolled a unit of work back."""


class DataCorruptionError(PosError):
    """Raised when a stored value cannot be mapped back to the domain model."""


__all__ = [
    "DataCorruptionError",
    "DuplicateCodeError",
    "DuplicateReceiptError",
    "EmptyCartError",
    "InsufficientStockError",
    "NotFoundError",
    "PersistenceError",
    "PosError",
    "ProductNotFoundError",
    "SaleNotFoundError",
    "ValidationError",
]
