"""
Catalog cache — refresh-on-demand product and category listing.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

import combinators as C
from kungfu import Result, Ok, Error

from storefront._errors import RequestError
from storefront.api import Category, Product, ShopApi
from storefront.catalog._types import CatalogSnapshot, EMPTY_CATALOG
from storefront.lift import request

logger = logging.getLogger(__name__)


class CatalogCache:
    """
    Full catalog held in memory.

    No TTL and no push invalidation: anything that creates, edits,
    (de)activates a product or completes a purchase calls `refresh()`.
    A failed refresh keeps the previous snapshot.

    Example:
        catalog = CatalogCache(api)
        await catalog.refresh()
        catalog.active_only()
    """

    def __init__(
        self,
        api: ShopApi,
        *,
        limit: int = 100,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._api = api
        self._limit = limit
        self._clock = clock
        self._snapshot = EMPTY_CATALOG
        self._refreshes = 0

    @property
    def snapshot(self) -> CatalogSnapshot:
        return self._snapshot

    @property
    def loaded(self) -> bool:
        return self._snapshot.fetched_at is not None

    @property
    def refresh_count(self) -> int:
        """Successful refreshes since construction."""
        return self._refreshes

    async def refresh(self) -> Result[CatalogSnapshot, RequestError]:
        """Fetch products and categories in parallel; replace state only if both succeed."""
        api = self._api
        limit = self._limit

        fetch_products = request(
            lambda: api.list_products(include_inactive=True, limit=limit)
        )
        fetch_categories = request(api.list_categories)

        result = await C.parallel(fetch_products, fetch_categories)

        match result:
            case Ok([products, categories]):
                self._snapshot = CatalogSnapshot(
                    products=tuple(products),
                    categories=tuple(categories),
                    fetched_at=self._clock(),
                )
                self._refreshes += 1
                logger.debug(
                    "Catalog refreshed: %d products, %d categories",
                    len(products),
                    len(categories),
                )
                return Ok(self._snapshot)
            case Error(e):
                logger.warning("Catalog refresh failed, keeping previous data: %s", e)
                return Error(e)
            case _:
                return Error(RequestError("Unexpected catalog response"))

    def all(self) -> tuple[Product, ...]:
        return self._snapshot.products

    def active_only(self, category_id: int | None = None) -> tuple[Product, ...]:
        """Active products, optionally narrowed to one category."""
        active = self._snapshot.active_products
        if category_id is None:
            return active
        return tuple(p for p in active if p.category_id == category_id)

    def categories(self) -> tuple[Category, ...]:
        return self._snapshot.categories

    def product(self, product_id: int) -> Product | None:
        for p in self._snapshot.products:
            if p.id_key == product_id:
                return p
        return None


__all__ = ("CatalogCache",)
