from __future__ import annotations
import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, Query
from pymongo import ASCENDING, DESCENDING

from database import PRODUCTS, Store, get_store, parse_object_id
from errors import InvalidCategory, ProductNotFound
from schemas import CATEGORIES, Product, ProductIn, ProductUpdate, envelope

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/products", tags=["products"])

SORT_OPTIONS = {
    "price-low": [("price", ASCENDING)],
    "price-high": [("price", DESCENDING)],
    "name": [("name", ASCENDING)],
}
NEWEST_FIRST = [("createdAt", DESCENDING)]


def product_to_client(doc: dict[str, Any]) -> dict[str, Any]:
    return Product.model_validate(doc).to_client()


def build_product_query(
    category: Optional[str] = None,
    min_price: Optional[float] = None,
    max_price: Optional[float] = None,
) -> dict[str, Any]:
    query: dict[str, Any] = {"inStock": True}
    if category and category != "All":
        query["category"] = category
    if min_price is not None or max_price is not None:
        query["price"] = {}
        if min_price is not None:
            query["price"]["$gte"] = min_price
        if max_price is not None:
            query["price"]["$lte"] = max_price
    return query


@router.get("")
async def list_products(
    category: Optional[str] = Query(None),
    min_price: Optional[float] = Query(None, alias="minPrice"),
    max_price: Optional[float] = Query(None, alias="maxPrice"),
    sort: Optional[str] = Query(None),
    store: Store = Depends(get_store),
):
    query = build_product_query(category, min_price, max_price)
    docs = await store.get_documents(PRODUCTS, query, sort=SORT_OPTIONS.get(sort, NEWEST_FIRST))
    data = [product_to_client(d) for d in docs]
    return envelope(data, count=len(data))


@router.get("/category/{category}")
async def list_products_by_category(category: str, store: Store = Depends(get_store)):
    if category not in CATEGORIES:
        raise InvalidCategory(category, CATEGORIES)
    docs = await store.get_documents(PRODUCTS, {"category": category, "inStock": True})
    data = [product_to_client(d) for d in docs]
    return envelope(data, category=category, count=len(data))


@router.get("/{product_id}")
async def get_product(product_id: str, store: Store = Depends(get_store)):
    oid = parse_object_id(product_id, "product ID")
    doc = await store.get_document(PRODUCTS, {"_id": oid})
    if not doc:
        raise ProductNotFound()
    return envelope(product_to_client(doc))


# Admin routes below are not access-controlled


@router.post("", status_code=201)
async def create_product(product: ProductIn, store: Store = Depends(get_store)):
    doc = await store.create_document(PRODUCTS, product.to_document())
    logger.info("Product created: %s (%s)", doc["id"], product.name)
    return envelope(product_to_client(doc), message="Product created successfully")


@router.put("/{product_id}")
async def update_product(product_id: str, changes: ProductUpdate, store: Store = Depends(get_store)):
    oid = parse_object_id(product_id, "product ID")
    doc = await store.update_document(PRODUCTS, {"_id": oid}, changes.changes())
    if not doc:
        raise ProductNotFound()
    return envelope(product_to_client(doc), message="Product updated successfully")


@router.delete("/{product_id}")
async def delete_product(product_id: str, store: Store = Depends(get_store)):
    oid = parse_object_id(product_id, "product ID")
    if not await store.delete_document(PRODUCTS, {"_id": oid}):
        raise ProductNotFound()
    logger.info("Product deleted: %s", product_id)
    return envelope({}, message="Product deleted successfully")
