"""
Error taxonomy.

Errors are plain values carried in `Result`:

    ValidationError         — client-side guard failed, nothing was sent
    RequestError            — a call to the API failed
    PartialPurchaseFailure  — a call failed after the bill already existed
    StateError              — coordinator refused (no identity / busy)
    AccessDenied            — admin operation without admin identity
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

import httpx

# ═══════════════════════════════════════════════════════════════════════════════
# Client-side Guards
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class ValidationError:
    """Client-side guard failure. Never reaches the network."""

    message: str
    field: str | None = None

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True, slots=True)
class StateError:
    """Operation refused by the coordinator state machine."""

    message: str
    state: str

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True, slots=True)
class AccessDenied:
    """Admin-only operation attempted without admin identity."""

    message: str = "Access denied"

    def __str__(self) -> str:
        return self.message


# ═══════════════════════════════════════════════════════════════════════════════
# Network Failures
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class RequestError:
    """
    Any failed network call.

    4xx and 5xx are not distinguished by callers; `status` is kept for
    display and logging only. `None` means the request never got a response.
    """

    message: str
    status: int | None = None
    details: tuple[str, ...] = ()

    def __str__(self) -> str:
        return self.message


class PurchaseStep(Enum):
    """The four dependent calls of a purchase, in order."""

    BILL = 1
    ORDER = 2
    ORDER_LINES = 3
    CLEAR_CART = 4


@dataclass(frozen=True, slots=True)
class PartialPurchaseFailure:
    """
    Request failure after the bill was created server-side.

    Nothing is rolled back: `bill_id`, `order_id` and `line_ids` name the
    records left on the server for an administrator to reconcile.
    """

    cause: RequestError
    step: PurchaseStep
    bill_id: int
    order_id: int | None = None
    line_ids: tuple[int, ...] = ()

    @property
    def message(self) -> str:
        return self.cause.message

    def __str__(self) -> str:
        return f"{self.cause.message} (failed at {self.step.name.lower()})"


type CheckoutFailure = (
    ValidationError | RequestError | PartialPurchaseFailure | StateError
)

# ═══════════════════════════════════════════════════════════════════════════════
# Error Body Parsing
# ═══════════════════════════════════════════════════════════════════════════════


def detail_messages(body: Any) -> tuple[str, ...]:
    """
    Extract messages from an error body's `detail` field.

    `detail` is either a string or a list of `{msg}` validation objects.
    """
    if not isinstance(body, dict):
        return ()
    detail = body.get("detail")
    if isinstance(detail, str):
        return (detail,)
    if isinstance(detail, list):
        messages: list[str] = []
        for entry in detail:
            if isinstance(entry, dict) and entry.get("msg"):
                messages.append(str(entry["msg"]))
            elif isinstance(entry, str):
                messages.append(entry)
        return tuple(messages)
    return ()


def request_error(exc: Exception) -> RequestError:
    """Map any exception raised by an API call into a RequestError."""
    match exc:
        case httpx.HTTPStatusError(response=response):
            try:
                body = response.json()
            except ValueError:
                body = None
            details = detail_messages(body)
            message = details[0] if details else f"HTTP {response.status_code}"
            return RequestError(message, response.status_code, details)
        case httpx.TimeoutException():
            return RequestError("Request timed out")
        case httpx.TransportError():
            return RequestError(f"Connection error: {exc}")
        case _:
            return RequestError(str(exc) or type(exc).__name__)


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "ValidationError",
    "StateError",
    "AccessDenied",
    "RequestError",
    "PurchaseStep",
    "PartialPurchaseFailure",
    "CheckoutFailure",
    "detail_messages",
    "request_error",
)
