from __future__ import annotations
import logging
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

from bson import ObjectId
from fastapi import Request
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING, ReturnDocument

from config import Settings
from errors import MalformedIdentifier

logger = logging.getLogger(__name__)

# Each collection is the lowercased model name
PRODUCTS = "product"
ORDERS = "order"


def parse_object_id(value: str, kind: str = "ID") -> ObjectId:
    if not ObjectId.is_valid(value):
        raise MalformedIdentifier(value, kind)
    return ObjectId(value)


def to_client(doc: dict[str, Any]) -> dict[str, Any]:
    doc["id"] = str(doc.pop("_id"))
    return doc


class Store:
    """Explicit handle on the shop database, created once per process."""

    def __init__(self, db: AsyncIOMotorDatabase, client: Optional[AsyncIOMotorClient] = None):
        self.db = db
        self.client = client

    @classmethod
    def connect(cls, settings: Settings) -> "Store":
        client = AsyncIOMotorClient(settings.DATABASE_URL)
        logger.info("Connecting to MongoDB database %s", settings.DATABASE_NAME)
        return cls(client[settings.DATABASE_NAME], client)

    def close(self) -> None:
        if self.client is not None:
            self.client.close()
            logger.info("MongoDB connection closed")

    @property
    def name(self) -> str:
        return self.db.name

    async def ensure_indexes(self) -> None:
        orders = self.db[ORDERS]
        await orders.create_index([("orderNumber", ASCENDING)], unique=True)
        await orders.create_index([("customerDetails.email", ASCENDING)])
        await orders.create_index([("status", ASCENDING)])
        await orders.create_index([("createdAt", DESCENDING)])
        products = self.db[PRODUCTS]
        await products.create_index([("category", ASCENDING)])
        await products.create_index([("price", ASCENDING)])
        await products.create_index([("createdAt", DESCENDING)])

    async def collection_names(self) -> list[str]:
        return await self.db.list_collection_names()

    async def create_document(self, collection_name: str, data: dict[str, Any]) -> dict[str, Any]:
        now = datetime.now(timezone.utc)
        data_with_meta = {**data, "createdAt": now, "updatedAt": now}
        result = await self.db[collection_name].insert_one(data_with_meta)
        inserted = await self.db[collection_name].find_one({"_id": result.inserted_id})
        return to_client(inserted) if inserted else {}

    async def insert_many(self, collection_name: str, items: Iterable[dict[str, Any]]) -> int:
        now = datetime.now(timezone.utc)
        docs = [{**d, "createdAt": now, "updatedAt": now} for d in items]
        if not docs:
            return 0
        result = await self.db[collection_name].insert_many(docs)
        return len(result.inserted_ids)

    async def get_document(self, collection_name: str, filter_dict: dict[str, Any]) -> Optional[dict[str, Any]]:
        doc = await self.db[collection_name].find_one(filter_dict)
        return to_client(doc) if doc else None

    async def get_documents(
        self,
        collection_name: str,
        filter_dict: dict[str, Any] | None = None,
        sort: Optional[list[tuple[str, int]]] = None,
        skip: int = 0,
        limit: int = 0,
    ) -> list[dict[str, Any]]:
        cursor = self.db[collection_name].find(filter_dict or {}, sort=sort, skip=skip, limit=limit)
        docs = []
        async for d in cursor:
            docs.append(to_client(d))
        return docs

    async def count_documents(self, collection_name: str, filter_dict: dict[str, Any] | None = None) -> int:
        return await self.db[collection_name].count_documents(filter_dict or {})

    async def update_document(
        self, collection_name: str, filter_dict: dict[str, Any], changes: dict[str, Any]
    ) -> Optional[dict[str, Any]]:
        doc = await self.db[collection_name].find_one_and_update(
            filter_dict,
            {"$set": {**changes, "updatedAt": datetime.now(timezone.utc)}},
            return_document=ReturnDocument.AFTER,
        )
        return to_client(doc) if doc else None

    async def delete_document(self, collection_name: str, filter_dict: dict[str, Any]) -> bool:
        result = await self.db[collection_name].delete_one(filter_dict)
        return result.deleted_count > 0

    async def delete_all(self, collection_name: str) -> int:
        result = await self.db[collection_name].delete_many({})
        return result.deleted_count

    async def find_by_ids(self, collection_name: str, ids: Iterable[str]) -> dict[str, dict[str, Any]]:
        """Fetch documents by id, keyed by string id. Malformed ids are skipped."""
        object_ids = [ObjectId(i) for i in set(ids) if ObjectId.is_valid(i)]
        if not object_ids:
            return {}
        docs = await self.get_documents(collection_name, {"_id": {"$in": object_ids}})
        return {d["id"]: d for d in docs}

    async def reserve_stock(self, product_id: str, quantity: int) -> bool:
        """Atomically take ``quantity`` units if at least that many remain."""
        result = await self.db[PRODUCTS].update_one(
            {"_id": ObjectId(product_id), "stockQuantity": {"$gte": quantity}},
            {"$inc": {"stockQuantity": -quantity}},
        )
        return result.modified_count == 1

    async def release_stock(self, product_id: str, quantity: int) -> None:
        await self.db[PRODUCTS].update_one(
            {"_id": ObjectId(product_id)},
            {"$inc": {"stockQuantity": quantity}},
        )


def get_store(request: Request) -> Store:
    return request.app.state.store
