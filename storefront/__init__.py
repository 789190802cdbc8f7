"""
storefront — client core for the electronics shop API.

    from storefront import session as Se    # Current identity
    from storefront import catalog as Ca    # Product listing cache
    from storefront import checkout as Co   # Cart + purchase coordinator

Account, order history, product reviews and admin maintenance live in
`storefront.account`, `storefront.orders`, `storefront.reviews` and
`storefront.admin`.
"""

from storefront import api
from storefront import session
from storefront import catalog
from storefront import checkout
from storefront._errors import (
    ValidationError,
    RequestError,
    PartialPurchaseFailure,
    PurchaseStep,
    StateError,
    AccessDenied,
    CheckoutFailure,
)
from storefront.config import Settings

__version__ = "0.1.0"

__all__ = (
    "api",
    "session",
    "catalog",
    "checkout",
    "ValidationError",
    "RequestError",
    "PartialPurchaseFailure",
    "PurchaseStep",
    "StateError",
    "AccessDenied",
    "CheckoutFailure",
    "Settings",
)
