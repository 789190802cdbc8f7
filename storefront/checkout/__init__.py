"""
Checkout — cart reconciliation and the purchase transaction.

    from storefront import checkout as Co

    coordinator = Co.CheckoutCoordinator(api, session, catalog)
    await coordinator.load()

    form = coordinator.form(Co.PaymentType.CASH)
    match await coordinator.purchase(form):
        case Ok(receipt):
            print(f"Order {receipt.order_id}")
        case Error(e):
            print(f"Failed: {e}")
"""

from __future__ import annotations

from storefront.checkout._types import (
    CheckoutState,
    PaymentType,
    DELIVERY_METHOD,
    CheckoutForm,
    PurchaseTrail,
    PurchaseReceipt,
)
from storefront.checkout._notify import Notifier, LogNotifier
from storefront.checkout._purchase import (
    PurchaseRequest,
    PurchaseFailure,
    bill_number,
    run_purchase,
)
from storefront.checkout._coordinator import (
    CheckoutCoordinator,
    ADJUSTMENT_NOTICE,
    HISTORY_LIMIT,
)

__all__ = (
    "CheckoutState",
    "PaymentType",
    "DELIVERY_METHOD",
    "CheckoutForm",
    "PurchaseTrail",
    "PurchaseReceipt",
    "Notifier",
    "LogNotifier",
    "PurchaseRequest",
    "PurchaseFailure",
    "bill_number",
    "run_purchase",
    "CheckoutCoordinator",
    "ADJUSTMENT_NOTICE",
    "HISTORY_LIMIT",
)
