"""
Order validation and pricing.

Everything here is pure: the catalog is passed in as a mapping of product id
to ``Product`` so the rules can run (and be tested) without a database.
Totals are always recomputed from catalog prices; amounts sent by the client
are never trusted.
"""
from __future__ import annotations
import random
import time
from typing import Mapping, Optional

from errors import (
    EmptyOrder,
    IllegalCancellation,
    InsufficientStock,
    InvalidOrderStatus,
    MissingCustomerDetails,
    OutOfStock,
    ProductNotFound,
)
from schemas import ORDER_STATUSES, LineItem, OrderCreate, OrderDraft, Product

TAX_RATE = 0.10
SHIPPING_COST = 0.0
DEFAULT_COUNTRY = "United States"

ORDER_NUMBER_PREFIX = "PW"
ORDER_NUMBER_MAX_RETRIES = 5

NON_CANCELLABLE = frozenset({"Shipped", "Delivered", "Cancelled"})


def check_order_request(order: OrderCreate) -> None:
    """Checks that need no catalog lookup."""
    if not order.products:
        raise EmptyOrder()
    if order.customer_details is None:
        raise MissingCustomerDetails()


def price_order(order: OrderCreate, catalog: Mapping[str, Product]) -> OrderDraft:
    """Validate every line against the catalog and build a priced draft.

    Lines are checked in request order and the first failure is raised.
    Stock is only read here, never reserved.
    """
    check_order_request(order)

    subtotal = 0.0
    lines: list[LineItem] = []
    for item in order.products:
        product = catalog.get(item.product_id)
        if product is None:
            raise ProductNotFound(item.product_id)
        if not product.is_available:
            raise OutOfStock(product.name)
        if product.stock_quantity < item.quantity:
            raise InsufficientStock(product.name, product.stock_quantity)

        line_subtotal = product.price * item.quantity
        subtotal += line_subtotal
        lines.append(LineItem(
            product_id=product.id,
            name=product.name,
            price=product.price,
            quantity=item.quantity,
            subtotal=line_subtotal,
        ))

    tax = subtotal * TAX_RATE
    customer = order.customer_details.model_copy(deep=True)
    if not customer.address.country:
        customer.address.country = DEFAULT_COUNTRY

    return OrderDraft(
        products=lines,
        customer_details=customer,
        subtotal=subtotal,
        tax=tax,
        shipping_cost=SHIPPING_COST,
        total_amount=subtotal + tax + SHIPPING_COST,
        status="Placed",
        payment_status="Paid",  # no payment gateway yet
        notes=order.notes,
    )


def generate_order_number(now_ms: Optional[int] = None, rng: random.Random | None = None) -> str:
    """PW + last 8 digits of the epoch-millisecond clock + 4 random digits."""
    if now_ms is None:
        now_ms = time.time_ns() // 1_000_000
    suffix = (rng or random).randint(1000, 9999)
    return f"{ORDER_NUMBER_PREFIX}{str(now_ms)[-8:]}{suffix}"


def check_status(status: Optional[str]) -> str:
    # Any status may follow any other; only membership is enforced
    if status not in ORDER_STATUSES:
        raise InvalidOrderStatus(str(status), ORDER_STATUSES)
    return status


def check_cancellable(current_status: str) -> None:
    if current_status in NON_CANCELLABLE:
        raise IllegalCancellation(current_status)
