"""
Catalog — products and categories, refreshed on demand.

    from storefront import catalog as Ca

    catalog = Ca.CatalogCache(api, limit=100)
    await catalog.refresh()
    visible = catalog.active_only()
"""

from __future__ import annotations

from storefront.catalog._types import CatalogSnapshot, EMPTY_CATALOG
from storefront.catalog._cache import CatalogCache

__all__ = (
    "CatalogSnapshot",
    "EMPTY_CATALOG",
    "CatalogCache",
)
