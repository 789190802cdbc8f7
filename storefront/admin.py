"""
Admin — product and category maintenance.

Every successful mutation refreshes the catalog cache; the cache has no
other way of learning about the change.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

from kungfu import Result, Ok, Error

from storefront._errors import AccessDenied, RequestError, ValidationError
from storefront.api import Category, CategoryDraft, Product, ProductDraft, ShopApi
from storefront.catalog import CatalogCache
from storefront.lift import request
from storefront.session import SessionStore

logger = logging.getLogger(__name__)

type AdminError = RequestError | ValidationError | AccessDenied


class AdminPanel:
    def __init__(
        self, api: ShopApi, session: SessionStore, catalog: CatalogCache
    ) -> None:
        self._api = api
        self._session = session
        self._catalog = catalog

    def _authorized(self) -> bool:
        identity = self._session.current()
        return identity is not None and identity.is_admin

    async def _mutate[T](
        self, call_api: Callable[[], Awaitable[T]]
    ) -> Result[T, AdminError]:
        if not self._authorized():
            return Error(AccessDenied())
        match await request(call_api):
            case Ok(value):
                match await self._catalog.refresh():
                    case Error(e):
                        logger.warning("Catalog refresh after admin change failed: %s", e)
                    case _:
                        pass
                return Ok(value)
            case Error(e):
                return Error(e)

    async def save_product(
        self, draft: ProductDraft, product_id: int | None = None
    ) -> Result[Product, AdminError]:
        """Create when `product_id` is None, otherwise update."""
        if not draft.category_id:
            return Error(ValidationError("Select a category", field="category_id"))
        if product_id is None:
            return await self._mutate(lambda: self._api.create_product(draft))
        return await self._mutate(lambda: self._api.update_product(product_id, draft))

    async def set_active(
        self, product: Product, active: bool
    ) -> Result[Product, AdminError]:
        """
        Deactivate is a soft delete; reactivate re-sends the product with
        `active=True` and needs its category.
        """
        if not active:
            match await self._mutate(
                lambda: self._api.deactivate_product(product.id_key)
            ):
                case Ok(_):
                    return Ok(product.model_copy(update={"active": False}))
                case Error(e):
                    return Error(e)

        if product.category_id is None:
            return Error(ValidationError("Product has no category", field="category_id"))
        draft = ProductDraft(
            name=product.name,
            price=product.price,
            stock=product.stock,
            category_id=product.category_id,
            active=True,
            image_url=product.image_url,
        )
        return await self._mutate(
            lambda: self._api.update_product(product.id_key, draft)
        )

    async def create_category(self, name: str) -> Result[Category, AdminError]:
        if not name.strip():
            return Error(ValidationError("Category name is required", field="name"))
        draft = CategoryDraft(name=name.strip())
        return await self._mutate(lambda: self._api.create_category(draft))

    async def delete_category(self, category_id: int) -> Result[None, AdminError]:
        """Fails server-side while products still reference the category."""
        return await self._mutate(lambda: self._api.delete_category(category_id))


__all__ = ("AdminPanel", "AdminError")
