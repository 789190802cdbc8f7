"""
Shop API client — thin async wrapper over the REST surface.

Every method performs exactly one HTTP call, raises on failure
(`httpx.HTTPStatusError`, `httpx.TransportError`, pydantic `ValidationError`)
and returns parsed schemas. Lifting into `Result` happens one level up via
`storefront.lift.request`.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import TypeAdapter

from storefront.api._schemas import (
    Bill,
    BillCreate,
    Cart,
    CartItemRequest,
    Category,
    CategoryDraft,
    Client,
    ClientUpdate,
    Credentials,
    Order,
    OrderCreate,
    OrderDetail,
    OrderDetailCreate,
    OrderStatusUpdate,
    Product,
    ProductDraft,
    Review,
    ReviewDraft,
)
from storefront.config import DEFAULT_API_URL

logger = logging.getLogger(__name__)

_products = TypeAdapter(list[Product])
_categories = TypeAdapter(list[Category])
_orders = TypeAdapter(list[Order])


class ShopApi:
    """
    Example:
        async with ShopApi("http://localhost:8000") as api:
            cart = await api.get_cart(7)
    """

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        *,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._http = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
            headers={"Content-Type": "application/json"},
        )

    async def __aenter__(self) -> ShopApi:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _send(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        logger.debug("%s %s", method, path)
        response = await self._http.request(method, path, json=json, params=params)
        response.raise_for_status()
        if not response.content:
            return None
        return response.json()

    # ───────────────────────────────────────────────────────────────────────────
    # Cart
    # ───────────────────────────────────────────────────────────────────────────

    async def get_cart(self, user_id: int) -> Cart:
        return Cart.model_validate(await self._send("GET", f"/cart/{user_id}"))

    async def add_cart_item(self, user_id: int, product_id: int, quantity: int) -> None:
        body = CartItemRequest(product_id=product_id, quantity=quantity)
        await self._send("POST", f"/cart/{user_id}/items", json=body.model_dump())

    async def update_cart_item(self, user_id: int, product_id: int, quantity: int) -> None:
        body = CartItemRequest(product_id=product_id, quantity=quantity)
        await self._send("PUT", f"/cart/{user_id}/items", json=body.model_dump())

    async def remove_cart_item(self, user_id: int, product_id: int) -> None:
        await self._send("DELETE", f"/cart/{user_id}/items/{product_id}")

    async def clear_cart(self, user_id: int) -> None:
        await self._send("DELETE", f"/cart/{user_id}")

    # ───────────────────────────────────────────────────────────────────────────
    # Purchase records
    # ───────────────────────────────────────────────────────────────────────────

    async def create_bill(self, bill: BillCreate) -> Bill:
        data = await self._send("POST", "/bills", json=bill.model_dump(mode="json"))
        return Bill.model_validate(data)

    async def create_order(self, order: OrderCreate) -> Order:
        data = await self._send("POST", "/orders", json=order.model_dump(mode="json"))
        return Order.model_validate(data)

    async def create_order_detail(self, detail: OrderDetailCreate) -> OrderDetail:
        data = await self._send(
            "POST", "/order_details", json=detail.model_dump(mode="json")
        )
        return OrderDetail.model_validate(data)

    # ───────────────────────────────────────────────────────────────────────────
    # Orders
    # ───────────────────────────────────────────────────────────────────────────

    async def list_client_orders(self, client_id: int) -> list[Order]:
        return _orders.validate_python(
            await self._send("GET", f"/orders/client/{client_id}")
        )

    async def list_orders(self) -> list[Order]:
        return _orders.validate_python(await self._send("GET", "/orders"))

    async def update_order_status(self, order_id: int, status: int) -> None:
        body = OrderStatusUpdate(status=status)
        await self._send(
            "PATCH", f"/orders/id/{order_id}/status", json=body.model_dump()
        )

    # ───────────────────────────────────────────────────────────────────────────
    # Catalog
    # ───────────────────────────────────────────────────────────────────────────

    async def list_products(
        self, *, include_inactive: bool = True, limit: int = 100
    ) -> list[Product]:
        params = {"include_inactive": str(include_inactive).lower(), "limit": limit}
        return _products.validate_python(
            await self._send("GET", "/products", params=params)
        )

    async def get_product(self, product_id: int) -> Product:
        return Product.model_validate(
            await self._send("GET", f"/products/id/{product_id}")
        )

    async def create_product(self, draft: ProductDraft) -> Product:
        data = await self._send("POST", "/products", json=draft.model_dump())
        return Product.model_validate(data)

    async def update_product(self, product_id: int, draft: ProductDraft) -> Product:
        data = await self._send(
            "PUT", f"/products/id/{product_id}", json=draft.model_dump()
        )
        return Product.model_validate(data)

    async def deactivate_product(self, product_id: int) -> None:
        await self._send("DELETE", f"/products/id/{product_id}")

    async def list_categories(self) -> list[Category]:
        return _categories.validate_python(await self._send("GET", "/categories"))

    async def create_category(self, draft: CategoryDraft) -> Category:
        data = await self._send("POST", "/categories", json=draft.model_dump())
        return Category.model_validate(data)

    async def delete_category(self, category_id: int) -> None:
        await self._send("DELETE", f"/categories/id/{category_id}")

    async def create_review(self, draft: ReviewDraft) -> Review:
        data = await self._send("POST", "/reviews", json=draft.model_dump())
        return Review.model_validate(data)

    # ───────────────────────────────────────────────────────────────────────────
    # Clients
    # ───────────────────────────────────────────────────────────────────────────

    async def login(self, email: str, password: str) -> Client:
        body = Credentials(email=email, password=password)
        return Client.model_validate(
            await self._send("POST", "/clients/login", json=body.model_dump())
        )

    async def register(self, email: str, password: str) -> Client:
        body = Credentials(email=email, password=password)
        return Client.model_validate(
            await self._send("POST", "/clients", json=body.model_dump())
        )

    async def get_client(self, client_id: int) -> Client:
        return Client.model_validate(
            await self._send("GET", f"/clients/id/{client_id}")
        )

    async def update_client(self, client_id: int, update: ClientUpdate) -> Client:
        data = await self._send(
            "PUT", f"/clients/id/{client_id}", json=update.model_dump()
        )
        return Client.model_validate(data)


__all__ = ("ShopApi",)
