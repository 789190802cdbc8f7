"""
Lift — turning raising API calls into `Result` values.

ShopApi methods raise; everything above them works with `Result`.
This module is the single crossing point.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable

from combinators.lift import catching_async
from kungfu import LazyCoroResult

from storefront._errors import RequestError, request_error


def request[T](call_api: Callable[[], Awaitable[T]]) -> LazyCoroResult[T, RequestError]:
    """
    Lift an API call into LazyCoroResult.

    Any exception (HTTP status, transport, timeout, bad payload) becomes
    a RequestError carrying the server's `detail` message when present.
    Nothing runs until the result is awaited, so lifted calls can be
    handed to `combinators.parallel` as-is.

    Example:
        match await request(lambda: api.get_cart(user_id)):
            case Ok(cart): ...
            case Error(e): print(e.message)
    """
    return catching_async(call_api, on_error=request_error)


__all__ = ("request",)
