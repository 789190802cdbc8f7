"""
Catalog types.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from storefront.api import Category, Product


@dataclass(frozen=True, slots=True)
class CatalogSnapshot:
    """Products (inactive included) and categories from one refresh."""

    products: tuple[Product, ...] = ()
    categories: tuple[Category, ...] = ()
    fetched_at: datetime | None = field(default=None, compare=False)

    @property
    def active_products(self) -> tuple[Product, ...]:
        return tuple(p for p in self.products if p.active)


EMPTY_CATALOG = CatalogSnapshot()


__all__ = ("CatalogSnapshot", "EMPTY_CATALOG")
