"""
Checkout types — state machine, form, purchase records.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum

from storefront._errors import PurchaseStep
from storefront.session import Identity

# ═══════════════════════════════════════════════════════════════════════════════
# State Machine
# ═══════════════════════════════════════════════════════════════════════════════


class CheckoutState(Enum):
    """
    IDLE -> LOADING_CART -> READY
    READY -> MUTATING -> READY
    READY -> SUBMITTING -> SUCCESS
    SUBMITTING -> FAILED -> READY
    SUBMITTING -> FAILED -> IDLE      (cancelled; cart must be reloaded)
    any settled state -> IDLE         (logout or another identity)
    """

    IDLE = "idle"
    LOADING_CART = "loading_cart"
    READY = "ready"
    MUTATING = "mutating"
    SUBMITTING = "submitting"
    SUCCESS = "success"
    FAILED = "failed"

    @property
    def in_flight(self) -> bool:
        return self in _IN_FLIGHT


_IN_FLIGHT = frozenset({
    CheckoutState.LOADING_CART,
    CheckoutState.MUTATING,
    CheckoutState.SUBMITTING,
})

# ═══════════════════════════════════════════════════════════════════════════════
# Checkout Form
# ═══════════════════════════════════════════════════════════════════════════════


class PaymentType(IntEnum):
    """Label only; no gateway behind it."""

    CASH = 1
    CARD = 2

    @classmethod
    def parse(cls, value: str) -> PaymentType:
        return cls.CASH if value.strip().lower() == "cash" else cls.CARD


DELIVERY_METHOD = 3
"""Delivery method code sent with every order."""


@dataclass(frozen=True, slots=True)
class CheckoutForm:
    name: str = ""
    lastname: str = ""
    email: str = ""
    telephone: str = ""
    address: str = ""
    city: str = ""
    payment_type: PaymentType = PaymentType.CARD

    @classmethod
    def prefilled(
        cls, identity: Identity, payment_type: PaymentType = PaymentType.CARD
    ) -> CheckoutForm:
        return cls(
            name=identity.name,
            lastname=identity.lastname,
            email=identity.email,
            telephone=identity.telephone,
            payment_type=payment_type,
        )

    def contact_differs(self, identity: Identity) -> bool:
        """Name, last name or phone edited relative to the stored identity."""
        return (
            self.name != (identity.name or "")
            or self.lastname != (identity.lastname or "")
            or self.telephone != (identity.telephone or "")
        )


# ═══════════════════════════════════════════════════════════════════════════════
# Purchase Records
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(slots=True)
class PurchaseTrail:
    """
    What one purchase attempt has created server-side so far.

    Filled in as each call succeeds, so a timeout or failure at any point
    still reports the exact set of records left behind.
    """

    bill_id: int | None = None
    order_id: int | None = None
    line_ids: list[int] = field(default_factory=list)
    completed: list[PurchaseStep] = field(default_factory=list)

    @property
    def steps_executed(self) -> int:
        return len(self.completed)


@dataclass(frozen=True, slots=True)
class PurchaseReceipt:
    """Successful purchase."""

    bill_number: str
    bill_id: int
    order_id: int
    line_ids: tuple[int, ...]
    total: float
    payment_type: PaymentType


__all__ = (
    "CheckoutState",
    "PaymentType",
    "DELIVERY_METHOD",
    "CheckoutForm",
    "PurchaseTrail",
    "PurchaseReceipt",
)
