"""Recoverable checkout errors.

Every error here is raised before any state changes, so the caller can fix
the input and retry.
"""

from __future__ import annotations


class CheckoutError(ValueError):
    code = "CHECKOUT_ERROR"


class OutOfStock(CheckoutError):
    code = "OUT_OF_STOCK"

    def __init__(self, product_id: str) -> None:
        self.product_id = product_id
        super().__init__(f"Product {product_id} is out of stock")


class StockExceeded(CheckoutError):
    code = "STOCK_EXCEEDED"

    def __init__(self, product_id: str, requested: int, available: int) -> None:
        self.product_id = product_id
        self.requested = requested
        self.available = available
        super().__init__(
            f"Not enough stock for {product_id}: "
            f"{available} available, {requested} requested"
        )


class InvalidDiscount(CheckoutError):
    code = "INVALID_DISCOUNT"


class EmptyCart(CheckoutError):
    code = "EMPTY_CART"

    def __init__(self) -> None:
        super().__init__("Cart must contain at least one item")


class InsufficientStock(CheckoutError):
    code = "INSUFFICIENT_STOCK"

    def __init__(self, product_id: str, requested: int, available: int) -> None:
        self.product_id = product_id
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient stock for {product_id}: "
            f"{available} available, {requested} requested"
        )


class DraftNotFound(CheckoutError):
    code = "DRAFT_NOT_FOUND"

    def __init__(self, message: str = "No draft found") -> None:
        super().__init__(message)


class InvalidQuantity(CheckoutError):
    code = "INVALID_QUANTITY"


class SaleInProgress(CheckoutError):
    code = "SALE_IN_PROGRESS"

    def __init__(self) -> None:
        super().__init__("A sale is already being submitted from this terminal")
