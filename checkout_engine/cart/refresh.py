"""Revalidate a restored cart against the live catalog"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Optional, Protocol

from ..models.cart import CartItem, CartState
from ..models.product import Product

logger = logging.getLogger(__name__)


class ProductLookup(Protocol):
    async def get_product_by_id(self, product_id: str) -> Optional[Product]:
        ...


@dataclass
class RefreshResult:
    """Refreshed items plus the ones that had to be dropped"""
    items: list[CartItem] = field(default_factory=list)
    removed_items: list[CartItem] = field(default_factory=list)
    price_changes: dict[str, tuple[float, float]] = field(default_factory=dict)

    @property
    def removed_names(self) -> list[str]:
        return [item.product.name for item in self.removed_items]


async def refresh_cart_items(state: CartState, catalog: ProductLookup) -> RefreshResult:
    """
    Re-sync each cart item with the catalog.

    Items whose product is gone or inactive are dropped and reported.
    Surviving items take the live product snapshot and price. A lookup that
    fails outright keeps the cached item rather than emptying the cart.
    """
    result = RefreshResult()
    if not state.items:
        return result

    lookups = await asyncio.gather(
        *(catalog.get_product_by_id(item.product.id) for item in state.items),
        return_exceptions=True,
    )

    for item, product in zip(state.items, lookups):
        if isinstance(product, Exception):
            logger.error(f"Product refresh failed for {item.product.id}: {product}")
            result.items.append(item)
            continue

        if product is None or not product.is_active:
            logger.warning(f"Removing unavailable product {item.product.id} from cart")
            result.removed_items.append(item)
            continue

        if product.price != item.price_at_time:
            result.price_changes[item.id] = (item.price_at_time, product.price)

        result.items.append(
            item.model_copy(update={"product": product, "price_at_time": product.price})
        )

    return result
