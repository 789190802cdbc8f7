from conftest import FIXED_NOW, FakeShop, err, ok
from storefront.catalog import CatalogCache


async def test_empty_until_refreshed(catalog: CatalogCache) -> None:
    assert not catalog.loaded
    assert catalog.all() == ()
    assert catalog.active_only() == ()


async def test_refresh_fetches_products_and_categories(
    catalog: CatalogCache, shop: FakeShop
) -> None:
    snapshot = ok(await catalog.refresh())

    assert [p.id_key for p in snapshot.products] == [1, 2, 3]
    assert [c.name for c in snapshot.categories] == ["Audio", "Accessories"]
    assert snapshot.fetched_at == FIXED_NOW
    assert catalog.loaded
    assert catalog.refresh_count == 1

    (products_call,) = shop.requests("GET", "/products")
    assert products_call.params == {"include_inactive": "true", "limit": "100"}
    assert len(shop.requests("GET", "/categories")) == 1


async def test_active_only_hides_inactive(catalog: CatalogCache) -> None:
    await catalog.refresh()
    assert [p.name for p in catalog.active_only()] == ["Headphones", "USB-C Cable"]
    assert len(catalog.all()) == 3


async def test_active_only_by_category(catalog: CatalogCache) -> None:
    await catalog.refresh()

    assert [p.name for p in catalog.active_only(category_id=1)] == ["Headphones"]
    # the inactive Old Phone shares category 2
    assert [p.name for p in catalog.active_only(category_id=2)] == ["USB-C Cable"]
    assert catalog.active_only(category_id=99) == ()


async def test_product_lookup(catalog: CatalogCache) -> None:
    await catalog.refresh()
    assert catalog.product(2).stock == 10
    assert catalog.product(999) is None


async def test_failed_refresh_keeps_previous_state(
    catalog: CatalogCache, shop: FakeShop
) -> None:
    first = ok(await catalog.refresh())
    shop.products[1]["stock"] = 0
    shop.fail("GET", "/categories", 503, "Maintenance")

    error = err(await catalog.refresh())

    assert error.status == 503
    assert catalog.snapshot is first
    assert catalog.product(1).stock == 5
    assert catalog.refresh_count == 1


async def test_refresh_is_idempotent(catalog: CatalogCache) -> None:
    first = ok(await catalog.refresh())
    second = ok(await catalog.refresh())
    assert first == second
    assert catalog.refresh_count == 2


async def test_custom_limit_is_sent(api, shop: FakeShop) -> None:
    await CatalogCache(api, limit=25).refresh()
    assert shop.requests("GET", "/products")[0].params["limit"] == "25"
