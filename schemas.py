"""
Request, response and document schemas for the Peachwood Jewellery API.

Each collection ("product", "order") is stored with the camelCase field
names the storefront uses, so every model serializes by alias. These models
carry the field constraints; the database layer stores whatever they emit.
"""
from __future__ import annotations
from datetime import datetime
from typing import Any, List, Literal, Optional, get_args

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, EmailStr, Field, computed_field, field_validator
from pydantic.alias_generators import to_camel

Category = Literal["Necklaces", "Earrings", "Rings", "Bracelets"]
OrderStatus = Literal["Pending", "Placed", "Processing", "Shipped", "Delivered", "Cancelled"]
PaymentStatus = Literal["Pending", "Paid", "Failed"]

CATEGORIES: list[str] = list(get_args(Category))
ORDER_STATUSES: list[str] = list(get_args(OrderStatus))


class ShopModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    def to_document(self, **kwargs: Any) -> dict[str, Any]:
        return self.model_dump(by_alias=True, **kwargs)

    def to_client(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


# Products


class ProductIn(ShopModel):
    name: str = Field(..., min_length=1, max_length=200)
    price: float = Field(..., ge=0, description="Price in USD")
    description: str = Field(..., min_length=1, max_length=2000)
    image_url: str = Field(..., min_length=1)
    category: Category
    details: List[str] = Field(default_factory=list)
    in_stock: bool = True
    stock_quantity: int = Field(100, ge=0)


class ProductUpdate(ShopModel):
    """Partial update; only supplied, non-null fields are written."""

    name: Optional[str] = Field(None, min_length=1, max_length=200)
    price: Optional[float] = Field(None, ge=0)
    description: Optional[str] = Field(None, min_length=1, max_length=2000)
    image_url: Optional[str] = Field(None, min_length=1)
    category: Optional[Category] = None
    details: Optional[List[str]] = None
    in_stock: Optional[bool] = None
    stock_quantity: Optional[int] = Field(None, ge=0)

    def changes(self) -> dict[str, Any]:
        return self.to_document(exclude_unset=True, exclude_none=True)


class Product(ProductIn):
    id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_available(self) -> bool:
        return self.in_stock and self.stock_quantity > 0

    @computed_field(alias="formattedPrice")
    @property
    def formatted_price(self) -> str:
        return f"${self.price:.2f}"


# Orders


class Address(ShopModel):
    street: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    state: str = Field(..., min_length=1)
    zip_code: str = Field(..., min_length=1)
    country: Optional[str] = None


class CustomerDetails(ShopModel):
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    email: EmailStr
    phone: str = Field(..., min_length=1)
    address: Address

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, value: str) -> str:
        return value.lower()


class LineItemIn(ShopModel):
    product_id: str = Field(..., min_length=1)
    quantity: int = Field(1, ge=1)

    @field_validator("product_id")
    @classmethod
    def canonical_product_id(cls, value: str) -> str:
        # Stored ids are lowercase hex
        return str(ObjectId(value)) if ObjectId.is_valid(value) else value


class OrderCreate(ShopModel):
    # Client-supplied subtotal/tax/totalAmount are ignored
    products: Optional[List[LineItemIn]] = None
    customer_details: Optional[CustomerDetails] = None
    notes: Optional[str] = Field(None, max_length=500)


class LineItem(ShopModel):
    product_id: str
    name: str
    price: float = Field(..., ge=0)
    quantity: int = Field(..., ge=1)
    subtotal: float = Field(..., ge=0)


class OrderDraft(ShopModel):
    products: List[LineItem]
    customer_details: CustomerDetails
    subtotal: float = Field(..., ge=0)
    tax: float = Field(0, ge=0)
    shipping_cost: float = Field(0, ge=0)
    total_amount: float = Field(..., ge=0)
    status: OrderStatus = "Placed"
    payment_status: PaymentStatus = "Paid"
    shipping_method: str = "Standard Shipping"
    tracking_number: Optional[str] = None
    notes: Optional[str] = Field(None, max_length=500)


class Order(OrderDraft):
    id: str
    order_number: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @computed_field(alias="customerFullName")
    @property
    def customer_full_name(self) -> str:
        return f"{self.customer_details.first_name} {self.customer_details.last_name}"

    @computed_field(alias="formattedTotal")
    @property
    def formatted_total(self) -> str:
        return f"${self.total_amount:.2f}"

    @computed_field(alias="totalItems")
    @property
    def total_items(self) -> int:
        return sum(item.quantity for item in self.products)


class StatusUpdate(BaseModel):
    status: Optional[str] = None


def envelope(data: Any = None, message: Optional[str] = None, **extra: Any) -> dict[str, Any]:
    body: dict[str, Any] = {"success": True}
    if message:
        body["message"] = message
    body.update(extra)
    if data is not None:
        body["data"] = data
    return body
