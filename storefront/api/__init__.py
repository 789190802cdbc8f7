"""
API — async client for the shop REST service.

    from storefront import api as A

    async with A.ShopApi(settings.api_url, timeout=settings.request_timeout) as shop:
        cart = await shop.get_cart(user_id)
"""

from __future__ import annotations

from storefront.api._client import ShopApi
from storefront.api._schemas import (
    Category,
    Review,
    ReviewDraft,
    Product,
    ProductDraft,
    CategoryDraft,
    CartLine,
    Cart,
    CartItemRequest,
    BillCreate,
    Bill,
    OrderCreate,
    OrderDetailCreate,
    OrderDetail,
    Order,
    OrderStatusUpdate,
    Credentials,
    Client,
    ClientUpdate,
)

__all__ = (
    "ShopApi",
    "Category",
    "Review",
    "ReviewDraft",
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
