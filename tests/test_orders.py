from datetime import datetime

import pytest

from conftest import FakeShop, err, ok
from storefront._errors import AccessDenied, StateError
from storefront.api import ShopApi
from storefront.orders import (
    UNKNOWN_BADGE,
    OrderBook,
    OrderStatus,
    describe_status,
    describe_status_code,
)
from storefront.session import Identity, SessionStore


@pytest.fixture
def book(api: ShopApi, session: SessionStore) -> OrderBook:
    return OrderBook(api, session)


@pytest.fixture
def placed(shop: FakeShop) -> FakeShop:
    shop.orders = [
        {"id_key": 50, "total": 200.0, "status": 1, "client_id": 7, "bill_id": 40,
         "date": datetime(2024, 1, 2).isoformat(), "delivery_method": 3},
        {"id_key": 51, "total": 15.5, "status": 3, "client_id": 1, "bill_id": 41,
         "date": datetime(2024, 3, 4).isoformat(), "delivery_method": 3},
        {"id_key": 52, "total": 31.0, "status": 9, "client_id": 7, "bill_id": 42,
         "date": datetime(2024, 2, 3).isoformat(), "delivery_method": 3},
    ]
    shop.details = [
        {"id_key": 60, "order_id": 50, "product_id": 1, "quantity": 2, "price": 100.0},
    ]
    return shop


def test_every_status_has_a_badge() -> None:
    labels = {describe_status(s).label for s in OrderStatus}
    assert len(labels) == len(OrderStatus)
    assert describe_status_code(3).label == "Delivered"


def test_unknown_status_code() -> None:
    assert describe_status_code(0) is UNKNOWN_BADGE
    assert describe_status_code(9) is UNKNOWN_BADGE


async def test_history_requires_login(book: OrderBook) -> None:
    assert isinstance(err(await book.history()), StateError)


async def test_history_of_current_client(
    book: OrderBook, placed: FakeShop, ana: Identity
) -> None:
    orders = ok(await book.history())

    assert [o.id_key for o in orders] == [50, 52]
    assert orders[0].details[0].product.name == "Headphones"
    assert describe_status_code(orders[1].status) is UNKNOWN_BADGE


async def test_all_orders_is_admin_only(
    book: OrderBook, placed: FakeShop, ana: Identity
) -> None:
    assert isinstance(err(await book.all_orders()), AccessDenied)
    assert placed.calls == []


async def test_all_orders_newest_first(
    book: OrderBook, placed: FakeShop, admin: Identity
) -> None:
    orders = ok(await book.all_orders())
    assert [o.id_key for o in orders] == [51, 52, 50]


async def test_change_status(book: OrderBook, placed: FakeShop, admin: Identity) -> None:
    assert ok(await book.change_status(50, OrderStatus.DELIVERED)) is OrderStatus.DELIVERED
    assert placed.orders[0]["status"] == 3
    assert placed.calls[0].body == {"status": 3}


async def test_change_status_denied_for_customer(
    book: OrderBook, placed: FakeShop, ana: Identity
) -> None:
    assert isinstance(err(await book.change_status(50, OrderStatus.CANCELED)), AccessDenied)
    assert placed.calls == []


async def test_change_status_of_missing_order(
    book: OrderBook, placed: FakeShop, admin: Identity
) -> None:
    assert err(await book.change_status(999, OrderStatus.PENDING)).status == 404
