"""Shop exceptions.

Raised by the pricing and storage layers when a business rule or lookup
fails. The application installs a handler that renders every ``ShopError``
in the response envelope with its ``status_code``.
"""
from __future__ import annotations
from typing import Optional


class ShopError(Exception):
    """Base exception for all shop errors."""

    status_code = 500

    def __init__(self, message: str, errors: Optional[list[str]] = None):
        self.message = message
        self.errors = errors
        super().__init__(message)


# Validation


class ValidationFailure(ShopError):
    """Missing or malformed input."""

    status_code = 400


class EmptyOrder(ValidationFailure):
    def __init__(self):
        super().__init__("Order must contain at least one product")


class MissingCustomerDetails(ValidationFailure):
    def __init__(self):
        super().__init__("Customer details are required")


class InvalidOrderStatus(ValidationFailure):
    def __init__(self, status: str, allowed: list[str]):
        self.status = status
        super().__init__("Invalid status. Must be one of: " + ", ".join(allowed))


class InvalidCategory(ValidationFailure):
    def __init__(self, category: str, allowed: list[str]):
        self.category = category
        super().__init__("Invalid category. Must be one of: " + ", ".join(allowed))


class MalformedIdentifier(ShopError):
    """An identifier that is not a well-formed ObjectId."""

    status_code = 400

    def __init__(self, value: str, kind: str = "ID"):
        self.value = value
        super().__init__(f"Invalid {kind} format")


# Lookups


class NotFound(ShopError):
    status_code = 404


class ProductNotFound(NotFound):
    def __init__(self, product_id: Optional[str] = None):
        self.product_id = product_id
        if product_id is None:
            super().__init__("Product not found")
        else:
            super().__init__(f"Product with ID {product_id} not found")


class OrderNotFound(NotFound):
    def __init__(self):
        super().__init__("Order not found")


# Business rules


class StateConflict(ShopError):
    """The request is well-formed but the current state forbids it."""

    status_code = 400


class OutOfStock(StateConflict):
    def __init__(self, product_name: str):
        self.product_name = product_name
        super().__init__(f'Product "{product_name}" is currently out of stock')


class InsufficientStock(StateConflict):
    def __init__(self, product_name: str, available: int):
        self.product_name = product_name
        self.available = available
        super().__init__(f'Insufficient stock for "{product_name}". Available: {available}')


class IllegalCancellation(StateConflict):
    def __init__(self, current_status: str):
        self.current_status = current_status
        super().__init__(f"Cannot cancel order with status: {current_status}")


# Infrastructure


class InternalFailure(ShopError):
    status_code = 500


class DuplicateOrderNumber(InternalFailure):
    def __init__(self, order_number: str):
        self.order_number = order_number
        super().__init__(f"Order number {order_number} already exists")
