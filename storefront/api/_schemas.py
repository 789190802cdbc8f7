"""
Wire schemas — payloads exchanged with the shop API.

Responses are validated with pydantic; unknown fields are ignored so the
client keeps working when the server adds columns.
"""

from __future__ import annotations

from datetime import date as Date, datetime

from pydantic import BaseModel, ConfigDict, Field


class Schema(BaseModel):
    model_config = ConfigDict(extra="ignore")


# ═══════════════════════════════════════════════════════════════════════════════
# Catalog
# ═══════════════════════════════════════════════════════════════════════════════


class Category(Schema):
    id_key: int
    name: str


class Review(Schema):
    id_key: int | None = None
    rating: float
    comment: str | None = None
    product_id: int | None = None


class ReviewDraft(Schema):
    """Body for POST /reviews."""

    rating: float
    comment: str = ""
    product_id: int


class Product(Schema):
    id_key: int
    name: str
    price: float = Field(ge=0)
    stock: int = Field(ge=0)
    category_id: int | None = None
    active: bool = True
    image_url: str | None = None
    reviews: list[Review] = Field(default_factory=list)


class ProductDraft(Schema):
    """Body for product create/update."""

    name: str
    price: float = Field(ge=0)
    stock: int = Field(ge=0)
    category_id: int
    active: bool = True
    image_url: str | None = None


class CategoryDraft(Schema):
    name: str


# ═══════════════════════════════════════════════════════════════════════════════
# Cart
# ═══════════════════════════════════════════════════════════════════════════════


class CartLine(Schema):
    product_id: int
    quantity: int
    product: Product
    adjustment_message: str | None = None

    @property
    def subtotal(self) -> float:
        return self.product.price * self.quantity


class Cart(Schema):
    items: list[CartLine] = Field(default_factory=list)
    total: float = 0.0
    has_adjustments: bool = False

    @property
    def is_empty(self) -> bool:
        return not self.items

    def line(self, product_id: int) -> CartLine | None:
        for item in self.items:
            if item.product_id == product_id:
                return item
        return None


class CartItemRequest(Schema):
    product_id: int
    quantity: int


# ═══════════════════════════════════════════════════════════════════════════════
# Purchase Records
# ═══════════════════════════════════════════════════════════════════════════════


class BillCreate(Schema):
    bill_number: str
    discount: float = 0
    date: Date
    total: float
    payment_type: int
    client_id: int


class Bill(Schema):
    id_key: int
    bill_number: str | None = None
    total: float | None = None


class OrderCreate(Schema):
    total: float
    delivery_method: int
    client_id: int
    bill_id: int


class OrderDetailCreate(Schema):
    quantity: int
    price: float
    order_id: int
    product_id: int


class OrderDetail(Schema):
    id_key: int | None = None
    quantity: int
    price: float
    product_id: int
    product: Product | None = None


class Order(Schema):
    id_key: int
    total: float
    date: datetime | None = None
    status: int
    client_id: int | None = None
    bill_id: int | None = None
    details: list[OrderDetail] = Field(default_factory=list)


class OrderStatusUpdate(Schema):
    status: int


# ═══════════════════════════════════════════════════════════════════════════════
# Clients
# ═══════════════════════════════════════════════════════════════════════════════


class Credentials(Schema):
    email: str
    password: str


class Client(Schema):
    id_key: int
    name: str | None = None
    lastname: str | None = None
    email: str | None = None
    telephone: str | None = None
    is_admin: bool = False


class ClientUpdate(Schema):
    name: str
    lastname: str
    email: str
    telephone: str


__all__ = (
    "Category",
    "Product",
    "ProductDraft",
    "CategoryDraft",
    "CartLine",
    "Cart",
    "CartItemRequest",
    "BillCreate",
    "Bill",
    "OrderCreate",
    "OrderDetailCreate",
    "OrderDetail",
    "Order",
    "OrderStatusUpdate",
    "Credentials",
    "Client",
    "ClientUpdate",
)
