"""
Orders — purchase history, status display and admin status changes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import IntEnum

from kungfu import Result, Ok, Error

from storefront._errors import AccessDenied, RequestError, StateError
from storefront.api import Order, ShopApi
from storefront.lift import request
from storefront.session import SessionStore

logger = logging.getLogger(__name__)

# ═══════════════════════════════════════════════════════════════════════════════
# Status
# ═══════════════════════════════════════════════════════════════════════════════


class OrderStatus(IntEnum):
    PENDING = 1
    IN_PROGRESS = 2
    DELIVERED = 3
    CANCELED = 4


@dataclass(frozen=True, slots=True)
class StatusBadge:
    label: str
    color: str


_BADGES: dict[OrderStatus, StatusBadge] = {
    OrderStatus.PENDING: StatusBadge("Pending", "yellow"),
    OrderStatus.IN_PROGRESS: StatusBadge("In progress", "blue"),
    OrderStatus.DELIVERED: StatusBadge("Delivered", "green"),
    OrderStatus.CANCELED: StatusBadge("Canceled", "red"),
}

UNKNOWN_BADGE = StatusBadge("Unknown", "gray")


def describe_status(status: OrderStatus) -> StatusBadge:
    return _BADGES[status]


def describe_status_code(code: int) -> StatusBadge:
    """Wire codes outside the enum get the Unknown badge."""
    try:
        return describe_status(OrderStatus(code))
    except ValueError:
        return UNKNOWN_BADGE


# ═══════════════════════════════════════════════════════════════════════════════
# Order Book
# ═══════════════════════════════════════════════════════════════════════════════

type OrdersError = RequestError | StateError | AccessDenied


def _newest_first(orders: list[Order]) -> list[Order]:
    return sorted(orders, key=lambda o: o.date or datetime.min, reverse=True)


class OrderBook:
    def __init__(self, api: ShopApi, session: SessionStore) -> None:
        self._api = api
        self._session = session

    async def history(self) -> Result[list[Order], OrdersError]:
        """Orders of the current identity."""
        identity = self._session.current()
        if identity is None:
            return Error(StateError("Log in to continue", "idle"))
        return await request(lambda: self._api.list_client_orders(identity.id))

    async def all_orders(self) -> Result[list[Order], OrdersError]:
        """Every order, newest first. Admin only."""
        identity = self._session.current()
        if identity is None or not identity.is_admin:
            return Error(AccessDenied())
        match await request(self._api.list_orders):
            case Ok(orders):
                return Ok(_newest_first(orders))
            case Error(e):
                return Error(e)

    async def change_status(
        self, order_id: int, status: OrderStatus
    ) -> Result[OrderStatus, OrdersError]:
        identity = self._session.current()
        if identity is None or not identity.is_admin:
            return Error(AccessDenied())
        match await request(
            lambda: self._api.update_order_status(order_id, int(status))
        ):
            case Ok(_):
                logger.info("Order %s set to %s", order_id, status.name)
                return Ok(status)
            case Error(e):
                return Error(e)


__all__ = (
    "OrderStatus",
    "StatusBadge",
    "UNKNOWN_BADGE",
    "describe_status",
    "describe_status_code",
    "OrdersError",
    "OrderBook",
)
