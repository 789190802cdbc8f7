"""
Purchase sequence — cart → bill → order → order lines → empty cart.

Steps run strictly in order because each needs the id produced by the
previous one; order lines are independent and run in parallel.

No compensation: once the bill exists, a later failure is reported as
PartialPurchaseFailure naming what was left on the server.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

import combinators as C
from combinators import lift as L
from kungfu import Result, Ok, Error, LazyCoroResult

from storefront._errors import (
    PartialPurchaseFailure,
    PurchaseStep,
    RequestError,
)
from storefront.api import (
    BillCreate,
    Cart,
    CartLine,
    OrderCreate,
    OrderDetail,
    OrderDetailCreate,
    ShopApi,
)
from storefront.checkout._types import (
    DELIVERY_METHOD,
    PaymentType,
    PurchaseReceipt,
    PurchaseTrail,
)
from storefront.lift import request

logger = logging.getLogger(__name__)

type PurchaseFailure = RequestError | PartialPurchaseFailure

# ═══════════════════════════════════════════════════════════════════════════════
# Request
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class PurchaseRequest:
    """
    Everything the sequence needs, frozen at submission time.

    `cart.total` and each line's product price are used as-is: they are
    only trustworthy when the cart was re-fetched right before submitting.
    """

    client_id: int
    cart: Cart
    payment_type: PaymentType


def bill_number(now: datetime) -> str:
    """Client-generated, millisecond timestamp based."""
    return f"BILL-{int(now.timestamp() * 1000)}"


def failure(
    trail: PurchaseTrail, step: PurchaseStep, error: RequestError
) -> PurchaseFailure:
    """Plain RequestError until the bill exists; partial failure afterwards."""
    if trail.bill_id is None:
        return error
    logger.warning(
        "Purchase failed at %s leaving bill=%s order=%s lines=%s on the server",
        step.name,
        trail.bill_id,
        trail.order_id,
        trail.line_ids,
    )
    return PartialPurchaseFailure(
        cause=error,
        step=step,
        bill_id=trail.bill_id,
        order_id=trail.order_id,
        line_ids=tuple(trail.line_ids),
    )


# ═══════════════════════════════════════════════════════════════════════════════
# create_lines() — Parallel Step
# ═══════════════════════════════════════════════════════════════════════════════

async def create_line(
    api: ShopApi,
    order_id: int,
    line: CartLine,
    trail: PurchaseTrail,
) -> Result[OrderDetail, RequestError]:
    """Create one order line, recording its id on success."""
    body = OrderDetailCreate(
        quantity=line.quantity,
        price=line.product.price,
        order_id=order_id,
        product_id=line.product_id,
    )
    result = await request(lambda: api.create_order_detail(body))
    match result:
        case Ok(detail):
            if detail.id_key is not None:
                trail.line_ids.append(detail.id_key)
            return Ok(detail)
        case Error(e):
            return Error(e)


async def create_lines(
    api: ShopApi,
    order_id: int,
    lines: list[CartLine],
    trail: PurchaseTrail,
) -> Result[list[OrderDetail], RequestError]:
    """
    Create all order lines concurrently; wait for every one.

    The step fails if any line fails. Lines that did succeed stay created.
    """

    def make_op(line: CartLine) -> LazyCoroResult[Result[OrderDetail, RequestError], str]:
        """Wrap line creation so the parallel run itself never short-circuits."""
        return L.catching_async(
            lambda line=line: create_line(api, order_id, line, trail),
            on_error=str,
        )

    parallel_result = await C.parallel(*[make_op(line) for line in lines])

    match parallel_result:
        case Error(message):
            return Error(RequestError(str(message)))
        case Ok(results):
            # results is list[Result[OrderDetail, RequestError]]
            details: list[OrderDetail] = []
            for line_result in results:
                match line_result:
                    case Ok(detail):
                        details.append(detail)
                    case Error(e):
                        return Error(e)
            return Ok(details)
        case _:
            return Error(RequestError("Unexpected order line response"))


# ═══════════════════════════════════════════════════════════════════════════════
# run_purchase() — Whole Sequence
# ═══════════════════════════════════════════════════════════════════════════════

async def run_purchase(
    api: ShopApi,
    req: PurchaseRequest,
    trail: PurchaseTrail,
    *,
    clock: Callable[[], datetime] = datetime.now,
) -> Result[PurchaseReceipt, PurchaseFailure]:
    """
    Execute the four purchase steps.

    On success: the cart is deleted server-side and a receipt is returned.
    On failure: stops at the failing step, nothing is undone.

    Example:
        trail = PurchaseTrail()
        result = await run_purchase(api, PurchaseRequest(7, cart, PaymentType.CARD), trail)

        match result:
            case Ok(receipt):
                print(f"Order {receipt.order_id}")
            case Error(PartialPurchaseFailure() as e):
                print(f"Orphaned bill {e.bill_id}")
            case Error(e):
                print(f"Failed: {e}")
    """
    now = clock()
    number = bill_number(now)
    total = float(req.cart.total)

    # 1. Bill
    bill_body = BillCreate(
        bill_number=number,
        discount=0,
        date=now.date(),
        total=total,
        payment_type=int(req.payment_type),
        client_id=req.client_id,
    )
    match await request(lambda: api.create_bill(bill_body)):
        case Ok(bill):
            trail.bill_id = bill.id_key
            trail.completed.append(PurchaseStep.BILL)
            logger.info("Bill %s created (%s)", bill.id_key, number)
        case Error(e):
            return Error(failure(trail, PurchaseStep.BILL, e))

    # 2. Order
    order_body = OrderCreate(
        total=total,
        delivery_method=DELIVERY_METHOD,
        client_id=req.client_id,
        bill_id=bill.id_key,
    )
    match await request(lambda: api.create_order(order_body)):
        case Ok(order):
            trail.order_id = order.id_key
            trail.completed.append(PurchaseStep.ORDER)
            logger.info("Order %s created", order.id_key)
        case Error(e):
            return Error(failure(trail, PurchaseStep.ORDER, e))

    # 3. Order lines
    match await create_lines(api, order.id_key, req.cart.items, trail):
        case Ok(details):
            trail.completed.append(PurchaseStep.ORDER_LINES)
            logger.info("%d order lines created", len(details))
        case Error(e):
            return Error(failure(trail, PurchaseStep.ORDER_LINES, e))

    # 4. Empty the cart
    match await request(lambda: api.clear_cart(req.client_id)):
        case Ok(_):
            trail.completed.append(PurchaseStep.CLEAR_CART)
        case Error(e):
            return Error(failure(trail, PurchaseStep.CLEAR_CART, e))

    return Ok(PurchaseReceipt(
        bill_number=number,
        bill_id=bill.id_key,
        order_id=order.id_key,
        line_ids=tuple(trail.line_ids),
        total=total,
        payment_type=req.payment_type,
    ))


__all__ = (
    "PurchaseRequest",
    "PurchaseFailure",
    "bill_number",
    "failure",
    "create_line",
    "create_lines",
    "run_purchase",
)
