"""
Client-side guards.

Pure checks run before any request is built. They are sanity checks,
the server stays the final authority.
"""

from __future__ import annotations

import math
import re

from kungfu import Result, Ok, Error

from storefront._errors import ValidationError

PHONE_MIN_DIGITS = 10
PHONE_MAX_DIGITS = 13
RATING_MIN = 1
RATING_MAX = 5

_NON_DIGIT = re.compile(r"\D")


def phone_digits(phone: str) -> str:
    return _NON_DIGIT.sub("", phone)


def validate_phone(phone: str) -> Result[str, ValidationError]:
    """
    Empty is allowed; otherwise 10..13 digits, ignoring separators.

    "11 1234 5678" → Ok, "123" → Error.
    """
    if not phone:
        return Ok(phone)
    count = len(phone_digits(phone))
    if PHONE_MIN_DIGITS <= count <= PHONE_MAX_DIGITS:
        return Ok(phone)
    return Error(ValidationError(
        f"Phone must have between {PHONE_MIN_DIGITS} and {PHONE_MAX_DIGITS} digits",
        field="telephone",
    ))


def validate_quantity(quantity: int, ceiling: int) -> Result[int, ValidationError]:
    """Requested quantity must lie in [1, ceiling]."""
    if quantity < 1:
        return Error(ValidationError("Quantity must be at least 1", field="quantity"))
    if quantity > ceiling:
        return Error(ValidationError(
            f"Maximum available stock: {ceiling}", field="quantity",
        ))
    return Ok(quantity)


def validate_total(total: object) -> Result[float, ValidationError]:
    """Total must be a finite, non-negative number."""
    if isinstance(total, bool) or not isinstance(total, (int, float)):
        return Error(ValidationError("Invalid order total", field="total"))
    if math.isnan(total) or math.isinf(total) or total < 0:
        return Error(ValidationError("Invalid order total", field="total"))
    return Ok(float(total))


def validate_rating(rating: float) -> Result[float, ValidationError]:
    if not RATING_MIN <= rating <= RATING_MAX:
        return Error(ValidationError(
            f"Rating must be between {RATING_MIN} and {RATING_MAX}", field="rating"
        ))
    return Ok(float(rating))


__all__ = (
    "PHONE_MIN_DIGITS",
    "PHONE_MAX_DIGITS",
    "phone_digits",
    "validate_phone",
    "validate_quantity",
    "validate_total",
    "RATING_MIN",
    "RATING_MAX",
    "validate_rating",
)
