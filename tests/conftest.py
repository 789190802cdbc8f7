"""Shared fixtures: an in-memory shop server behind httpx.MockTransport."""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

import httpx
import pytest
from kungfu import Error, Ok

from storefront.api import ShopApi
from storefront.catalog import CatalogCache
from storefront.checkout import CheckoutCoordinator
from storefront.session import Identity, MemoryStorage, SessionStore

FIXED_NOW = datetime(2024, 5, 17, 14, 30, 0)


# ═══════════════════════════════════════════════════════════════════════════════
# Fake Shop Server
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass
class Call:
    method: str
    path: str
    params: dict[str, str]
    body: Any


@dataclass
class Failure:
    method: str
    path: str
    status: int
    detail: Any
    when: Any = None


@dataclass
class FakeShop:
    """
    Mimics the shop API closely enough for the client core:
    stock is enforced and decremented server-side, carts are clamped
    (with an adjustment note) when stock drops below a line's quantity.
    """

    products: dict[int, dict[str, Any]] = field(default_factory=dict)
    categories: dict[int, dict[str, Any]] = field(default_factory=dict)
    clients: dict[int, dict[str, Any]] = field(default_factory=dict)
    carts: dict[int, dict[int, int]] = field(default_factory=dict)
    bills: list[dict[str, Any]] = field(default_factory=list)
    orders: list[dict[str, Any]] = field(default_factory=list)
    details: list[dict[str, Any]] = field(default_factory=list)
    calls: list[Call] = field(default_factory=list)
    failures: list[Failure] = field(default_factory=list)
    holds: dict[tuple[str, str], asyncio.Event] = field(default_factory=dict)
    _ids: int = 100

    # ── test controls ───────────────────────────────────────────────────────

    def fail(
        self,
        method: str,
        path: str,
        status: int = 500,
        detail: Any = "Internal error",
        when: Any = None,
    ) -> None:
        self.failures.append(Failure(method, path, status, detail, when))

    def hold(self, method: str, path: str) -> asyncio.Event:
        """Block matching requests until the returned event is set."""
        event = asyncio.Event()
        self.holds[(method, path)] = event
        return event

    def requests(self, method: str | None = None, prefix: str = "") -> list[Call]:
        return [
            c for c in self.calls
            if (method is None or c.method == method) and c.path.startswith(prefix)
        ]

    def put_in_cart(self, user_id: int, product_id: int, quantity: int) -> None:
        self.carts.setdefault(user_id, {})[product_id] = quantity

    def next_id(self) -> int:
        self._ids += 1
        return self._ids

    # ── transport ───────────────────────────────────────────────────────────

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        body = json.loads(request.content) if request.content else None
        self.calls.append(Call(request.method, path, dict(request.url.params), body))

        event = self.holds.get((request.method, path))
        if event is not None:
            await event.wait()

        for f in self.failures:
            if f.method == request.method and f.path == path:
                if f.when is None or f.when(body):
                    return httpx.Response(f.status, json={"detail": f.detail})

        status, payload = self.route(request.method, path, body)
        if payload is None:
            return httpx.Response(status)
        return httpx.Response(status, json=payload)

    def route(self, method: str, path: str, body: Any) -> tuple[int, Any]:
        parts = tuple(p for p in path.split("/") if p)
        match method, parts:
            case "GET", ("cart", uid):
                return 200, self.cart_view(int(uid))
            case "POST", ("cart", uid, "items"):
                return self.set_line(int(uid), body, add=True)
            case "PUT", ("cart", uid, "items"):
                return self.set_line(int(uid), body, add=False)
            case "DELETE", ("cart", uid, "items", pid):
                self.carts.get(int(uid), {}).pop(int(pid), None)
                return 200, {"ok": True}
            case "DELETE", ("cart", uid):
                self.carts.pop(int(uid), None)
                return 204, None

            case "POST", ("bills",):
                bill = {"id_key": self.next_id(), **body}
                self.bills.append(bill)
                return 201, bill
            case "POST", ("orders",):
                order = {
                    "id_key": self.next_id(),
                    "date": FIXED_NOW.isoformat(),
                    "status": 1,
                    **body,
                }
                self.orders.append(order)
                return 201, order
            case "POST", ("order_details",):
                product = self.products[body["product_id"]]
                if product["stock"] < body["quantity"]:
                    return 400, {"detail": "Insufficient stock"}
                product["stock"] -= body["quantity"]
                detail = {"id_key": self.next_id(), **body}
                self.details.append(detail)
                return 201, detail

            case "GET", ("orders", "client", cid):
                return 200, [self.order_view(o) for o in self.orders
                             if o["client_id"] == int(cid)]
            case "GET", ("orders",):
                return 200, [self.order_view(o) for o in self.orders]
            case "PATCH", ("orders", "id", oid, "status"):
                for o in self.orders:
                    if o["id_key"] == int(oid):
                        o["status"] = body["status"]
                        return 200, self.order_view(o)
                return 404, {"detail": "Order not found"}

            case "GET", ("products",):
                return 200, list(self.products.values())
            case "GET", ("products", "id", pid):
                if int(pid) not in self.products:
                    return 404, {"detail": "Product not found"}
                return 200, self.products[int(pid)]
            case "POST", ("products",):
                product = {"id_key": self.next_id(), **body}
                self.products[product["id_key"]] = product
                return 201, product
            case "PUT", ("products", "id", pid):
                product = {"id_key": int(pid), **body}
                self.products[int(pid)] = product
                return 200, product
            case "DELETE", ("products", "id", pid):
                self.products[int(pid)]["active"] = False
                return 204, None

            case "GET", ("categories",):
                return 200, list(self.categories.values())
            case "POST", ("categories",):
                category = {"id_key": self.next_id(), **body}
                self.categories[category["id_key"]] = category
                return 201, category
            case "DELETE", ("categories", "id", cid):
                if any(p.get("category_id") == int(cid) for p in self.products.values()):
                    return 400, {"detail": "Category has products"}
                self.categories.pop(int(cid), None)
                return 204, None

            case "POST", ("reviews",):
                product = self.products.get(body["product_id"])
                if product is None:
                    return 404, {"detail": "Product not found"}
                review = {"id_key": self.next_id(), **body}
                product.setdefault("reviews", []).append(review)
                return 201, review

            case "POST", ("clients", "login"):
                for c in self.clients.values():
                    if c["email"] == body["email"] and c["password"] == body["password"]:
                        return 200, self.client_view(c)
                return 401, {"detail": "Invalid credentials"}
            case "POST", ("clients",):
                if "@" not in body["email"]:
                    return 422, {"detail": [{"msg": "value is not a valid email address"}]}
                client = {
                    "id_key": self.next_id(),
                    "name": None,
                    "lastname": None,
                    "telephone": None,
                    "is_admin": False,
                    **body,
                }
                self.clients[client["id_key"]] = client
                return 201, self.client_view(client)
            case "GET", ("clients", "id", cid):
                return 200, self.client_view(self.clients[int(cid)])
            case "PUT", ("clients", "id", cid):
                client = self.clients[int(cid)]
                client.update(body)
                return 200, self.client_view(client)

        return 404, {"detail": f"No route for {method} {path}"}

    # ── views ───────────────────────────────────────────────────────────────

    def set_line(self, user_id: int, body: dict[str, Any], *, add: bool) -> tuple[int, Any]:
        product = self.products.get(body["product_id"])
        if product is None:
            return 404, {"detail": "Product not found"}
        cart = self.carts.setdefault(user_id, {})
        quantity = body["quantity"] + (cart.get(body["product_id"], 0) if add else 0)
        if quantity > product["stock"]:
            return 400, {"detail": f"Only {product['stock']} units available"}
        cart[body["product_id"]] = quantity
        return 200, {"product_id": body["product_id"], "quantity": quantity}

    def cart_view(self, user_id: int) -> dict[str, Any]:
        items = []
        adjusted = False
        cart = self.carts.get(user_id, {})
        for product_id, quantity in list(cart.items()):
            product = self.products[product_id]
            message = None
            if quantity > product["stock"]:
                adjusted = True
                quantity = product["stock"]
                message = f"Quantity reduced to {quantity}: stock changed"
                if quantity == 0:
                    del cart[product_id]
                    continue
                cart[product_id] = quantity
            items.append({
                "id_key": product_id,
                "product_id": product_id,
                "quantity": quantity,
                "product": dict(product),
                "adjustment_message": message,
            })
        total = sum(i["product"]["price"] * i["quantity"] for i in items)
        return {"items": items, "total": total, "has_adjustments": adjusted}

    def order_view(self, order: dict[str, Any]) -> dict[str, Any]:
        lines = [
            {**d, "product": self.products.get(d["product_id"])}
            for d in self.details if d["order_id"] == order["id_key"]
        ]
        return {**order, "details": lines}

    def client_view(self, client: dict[str, Any]) -> dict[str, Any]:
        return {k: v for k, v in client.items() if k != "password"}


# ═══════════════════════════════════════════════════════════════════════════════
# Notifier
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass
class RecordingNotifier:
    notices: list[tuple[str, str]] = field(default_factory=list)

    def info(self, message: str) -> None:
        self.notices.append(("info", message))

    def success(self, message: str) -> None:
        self.notices.append(("success", message))

    def warning(self, message: str) -> None:
        self.notices.append(("warning", message))

    def error(self, message: str) -> None:
        self.notices.append(("error", message))

    def of(self, level: str) -> list[str]:
        return [m for lvl, m in self.notices if lvl == level]


# ═══════════════════════════════════════════════════════════════════════════════
# Fixtures
# ═══════════════════════════════════════════════════════════════════════════════

ANA = Identity(id=7, name="Ana", lastname="Diaz", email="ana@example.com")
ADMIN = Identity(id=1, name="Root", email="admin@example.com", is_admin=True)


@pytest.fixture
def shop() -> FakeShop:
    s = FakeShop()
    s.categories = {
        1: {"id_key": 1, "name": "Audio"},
        2: {"id_key": 2, "name": "Accessories"},
    }
    s.products = {
        1: {"id_key": 1, "name": "Headphones", "price": 100.0, "stock": 5,
            "category_id": 1, "active": True, "image_url": None},
        2: {"id_key": 2, "name": "USB-C Cable", "price": 15.5, "stock": 10,
            "category_id": 2, "active": True, "image_url": None},
        3: {"id_key": 3, "name": "Old Phone", "price": 50.0, "stock": 0,
            "category_id": 2, "active": False, "image_url": None},
    }
    s.clients = {
        7: {"id_key": 7, "email": "ana@example.com", "password": "secret",
            "name": "Ana", "lastname": "Diaz", "telephone": None, "is_admin": False},
        1: {"id_key": 1, "email": "admin@example.com", "password": "root",
            "name": "Root", "lastname": "", "telephone": None, "is_admin": True},
    }
    return s


@pytest.fixture
def api(shop: FakeShop) -> ShopApi:
    return ShopApi("http://shop.test", transport=httpx.MockTransport(shop))


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def session(storage: MemoryStorage) -> SessionStore:
    return SessionStore(storage)


@pytest.fixture
def ana(session: SessionStore) -> Identity:
    session.establish(ANA)
    return ANA


@pytest.fixture
def admin(session: SessionStore) -> Identity:
    session.establish(ADMIN)
    return ADMIN


@pytest.fixture
def catalog(api: ShopApi) -> CatalogCache:
    return CatalogCache(api, clock=lambda: FIXED_NOW)


@pytest.fixture
def notices() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def coordinator(
    api: ShopApi,
    session: SessionStore,
    catalog: CatalogCache,
    notices: RecordingNotifier,
) -> CheckoutCoordinator:
    return CheckoutCoordinator(
        api, session, catalog, notifier=notices, clock=lambda: FIXED_NOW
    )


# ═══════════════════════════════════════════════════════════════════════════════
# Result Helpers
# ═══════════════════════════════════════════════════════════════════════════════


def ok(result):
    assert isinstance(result, Ok), f"expected Ok, got {result!r}"
    return result.value


def err(result):
    assert isinstance(result, Error), f"expected Error, got {result!r}"
    return result.value
