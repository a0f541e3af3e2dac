from __future__ import annotations
import logging
import math
from typing import Any, Optional

from fastapi import APIRouter, Depends, Query, Request
from pymongo import DESCENDING
from pymongo.errors import DuplicateKeyError

from config import Settings
from database import ORDERS, PRODUCTS, Store, get_store, parse_object_id
from errors import DuplicateOrderNumber, InsufficientStock, OrderNotFound
from pricing import (
    ORDER_NUMBER_MAX_RETRIES,
    check_cancellable,
    check_order_request,
    check_status,
    generate_order_number,
    price_order,
)
from schemas import Order, OrderCreate, OrderDraft, Product, StatusUpdate, envelope

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/orders", tags=["orders"])


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def order_to_client(doc: dict[str, Any]) -> dict[str, Any]:
    return Order.model_validate(doc).to_client()


async def load_catalog(store: Store, product_ids: list[str]) -> dict[str, Product]:
    docs = await store.find_by_ids(PRODUCTS, product_ids)
    return {pid: Product.model_validate(doc) for pid, doc in docs.items()}


async def reserve_lines(store: Store, draft: OrderDraft) -> list[tuple[str, int]]:
    """Decrement stock line by line, undoing earlier lines if one falls short."""
    reserved: list[tuple[str, int]] = []
    for line in draft.products:
        if not await store.reserve_stock(line.product_id, line.quantity):
            await release_lines(store, reserved)
            current = await store.get_document(PRODUCTS, {"_id": parse_object_id(line.product_id)})
            available = current.get("stockQuantity", 0) if current else 0
            raise InsufficientStock(line.name, available)
        reserved.append((line.product_id, line.quantity))
    return reserved


async def release_lines(store: Store, reserved: list[tuple[str, int]]) -> None:
    for product_id, quantity in reserved:
        await store.release_stock(product_id, quantity)


async def insert_order(store: Store, draft: OrderDraft) -> dict[str, Any]:
    """Persist a draft under a fresh order number, retrying on collisions."""
    data = draft.to_document()
    order_number = ""
    for attempt in range(1, ORDER_NUMBER_MAX_RETRIES + 1):
        order_number = generate_order_number()
        try:
            return await store.create_document(ORDERS, {**data, "orderNumber": order_number})
        except DuplicateKeyError:
            logger.warning(
                "Order number collision on %s (attempt %d/%d)",
                order_number, attempt, ORDER_NUMBER_MAX_RETRIES,
            )
    raise DuplicateOrderNumber(order_number)


async def place_order(store: Store, order: OrderCreate, reserve_stock: bool = False) -> dict[str, Any]:
    # Reject before touching the database
    check_order_request(order)
    catalog = await load_catalog(store, [item.product_id for item in order.products])
    draft = price_order(order, catalog)

    reserved = await reserve_lines(store, draft) if reserve_stock else []
    try:
        doc = await insert_order(store, draft)
    except Exception:
        await release_lines(store, reserved)
        raise
    logger.info("Order %s placed: total=%.2f", doc["orderNumber"], draft.total_amount)
    return doc


@router.post("", status_code=201)
async def create_order(
    order: OrderCreate,
    store: Store = Depends(get_store),
    settings: Settings = Depends(get_app_settings),
):
    doc = await place_order(store, order, reserve_stock=settings.RESERVE_STOCK)
    return envelope(order_to_client(doc), message="Order placed successfully")


# Admin listing, not access-controlled
@router.get("")
async def list_orders(
    status: Optional[str] = Query(None),
    limit: int = Query(50, ge=1),
    page: int = Query(1, ge=1),
    store: Store = Depends(get_store),
):
    query = {"status": status} if status else {}
    docs = await store.get_documents(
        ORDERS, query, sort=[("createdAt", DESCENDING)], skip=(page - 1) * limit, limit=limit
    )
    total = await store.count_documents(ORDERS, query)
    data = [order_to_client(d) for d in docs]
    return envelope(data, count=len(data), total=total, page=page, pages=math.ceil(total / limit))


@router.get("/number/{order_number}")
async def get_order_by_number(order_number: str, store: Store = Depends(get_store)):
    doc = await store.get_document(ORDERS, {"orderNumber": order_number})
    if not doc:
        raise OrderNotFound()
    return envelope(order_to_client(doc))


@router.get("/{order_id}")
async def get_order(order_id: str, store: Store = Depends(get_store)):
    oid = parse_object_id(order_id, "order ID")
    doc = await store.get_document(ORDERS, {"_id": oid})
    if not doc:
        raise OrderNotFound()
    return envelope(order_to_client(doc))


@router.patch("/{order_id}/status")
async def update_order_status(order_id: str, body: StatusUpdate, store: Store = Depends(get_store)):
    status = check_status(body.status)
    oid = parse_object_id(order_id, "order ID")
    doc = await store.update_document(ORDERS, {"_id": oid}, {"status": status})
    if not doc:
        raise OrderNotFound()
    logger.info("Order %s status set to %s", doc["orderNumber"], status)
    return envelope(order_to_client(doc), message="Order status updated successfully")


@router.patch("/{order_id}/cancel")
async def cancel_order(order_id: str, store: Store = Depends(get_store)):
    oid = parse_object_id(order_id, "order ID")
    doc = await store.get_document(ORDERS, {"_id": oid})
    if not doc:
        raise OrderNotFound()
    check_cancellable(doc["status"])
    doc = await store.update_document(ORDERS, {"_id": oid}, {"status": "Cancelled"})
    if not doc:
        raise OrderNotFound()
    logger.info("Order %s cancelled", doc["orderNumber"])
    return envelope(order_to_client(doc), message="Order cancelled successfully")
