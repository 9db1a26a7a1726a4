from typing import Optional

from checkout_engine.cart.refresh import refresh_cart_items
from checkout_engine.models.cart import CartState
from checkout_engine.models.product import Product, ProductStatus

from .conftest import make_item, make_product


class FakeCatalog:
    def __init__(self, products: dict[str, Product], broken: tuple[str, ...] = ()):
        self.products = products
        self.broken = broken

    async def get_product_by_id(self, product_id: str) -> Optional[Product]:
        if product_id in self.broken:
            raise ConnectionError("catalog unavailable")
        return self.products.get(product_id)


def _cart(*items):
    return CartState(items=list(items), store_id="store-001")


async def test_price_changes_are_applied():
    item = make_item(make_product("a", price=5.00))
    catalog = FakeCatalog({"a": make_product("a", price=6.25)})

    result = await refresh_cart_items(_cart(item), catalog)

    assert result.items[0].price_at_time == 6.25
    assert result.price_changes == {item.id: (5.00, 6.25)}
    assert result.removed_items == []


async def test_missing_and_inactive_products_are_reported():
    keep = make_item(make_product("keep"))
    gone = make_item(make_product("gone"))
    draft = make_item(make_product("draft"))
    draft_product = make_product("draft").model_copy(update={"status": ProductStatus.DRAFT})
    catalog = FakeCatalog({"keep": make_product("keep"), "draft": draft_product})

    result = await refresh_cart_items(_cart(keep, gone, draft), catalog)

    assert [i.product.id for i in result.items] == ["keep"]
    assert result.removed_names == ["Product gone", "Product draft"]


async def test_lookup_failure_keeps_cached_item():
    item = make_item(make_product("a", price=5.00))
    result = await refresh_cart_items(_cart(item), FakeCatalog({}, broken=("a",)))

    assert result.items == [item]
    assert result.removed_items == []


async def test_empty_cart_needs_no_lookups():
    result = await refresh_cart_items(CartState(), FakeCatalog({}, broken=("a",)))
    assert result.items == []
