"""
Cart state transitions.

cart_reducer is a pure (state, action) -> state function. Persistence
happens outside it, in the cart database adapter, and pricing inputs that
are not part of the cart itself (delivery fee, platform fee, commission,
discount) are passed in so every transition re-derives the summary.
"""

import time
from dataclasses import dataclass
from typing import Optional, Union

from ..core.config import settings
from ..models.cart import PENDING, CartItem, CartState, MaybeLoaded
from ..models.delivery import DeliveryFeeDiscount
from ..models.product import Product
from ..pricing.summary import calculate_cart_summary


@dataclass(frozen=True)
class PricingInputs:
    """Non-cart inputs to the summary calculator"""
    delivery_fee: MaybeLoaded[float] = PENDING
    platform_fee: MaybeLoaded[float] = PENDING
    commission_rate: MaybeLoaded[float] = PENDING
    discount: Optional[DeliveryFeeDiscount] = None


@dataclass(frozen=True)
class AddItem:
    item_id: str
    product: Product
    quantity: int
    store_id: str
    store_name: str
    store_image: Optional[str] = None


@dataclass(frozen=True)
class RemoveItem:
    item_id: str


@dataclass(frozen=True)
class UpdateQuantity:
    item_id: str
    quantity: int


@dataclass(frozen=True)
class ClearCart:
    pass


@dataclass(frozen=True)
class LoadCart:
    state: CartState


@dataclass(frozen=True)
class ApplyRefresh:
    """
    Merge a catalog refresh into the current cart by line id.

    Quantities come from the current cart, product snapshots and prices
    from the refresh. Lines added after the refresh started are kept as is.
    """
    items: tuple[CartItem, ...]
    removed_ids: tuple[str, ...] = ()


CartAction = Union[AddItem, RemoveItem, UpdateQuantity, ClearCart, LoadCart, ApplyRefresh]


def initial_cart_state() -> CartState:
    return CartState()


def add_item(
    product: Product,
    quantity: int = 1,
    store_name: Optional[str] = None,
    store_image: Optional[str] = None,
) -> AddItem:
    """Build an AddItem action with a fresh cart line id"""
    return AddItem(
        item_id=f"{product.id}-{int(time.time() * 1000)}",
        product=product,
        quantity=quantity,
        store_id=product.store_id,
        store_name=store_name or f"Store {product.store_id}",
        store_image=store_image,
    )


def with_summary(state: CartState, pricing: PricingInputs) -> CartState:
    """Return state with its summary recomputed from pricing"""
    summary = calculate_cart_summary(
        state.items,
        delivery_fee=pricing.delivery_fee,
        platform_fee=pricing.platform_fee,
        commission_rate=pricing.commission_rate,
        discount=pricing.discount,
        default_platform_fee=settings.default_platform_fee,
        default_commission_rate=settings.default_commission_rate,
    )
    return state.model_copy(update={"summary": summary})


def cart_reducer(
    state: CartState,
    action: CartAction,
    pricing: PricingInputs = PricingInputs(),
) -> CartState:
    """Apply an action to the cart and recompute its summary"""
    if isinstance(action, AddItem):
        # Different store: no-op; the mutation layer rejects it explicitly
        if not state.can_add_from(action.store_id):
            return state

        existing = next(
            (item for item in state.items if item.product.id == action.product.id),
            None,
        )
        if existing:
            items = [
                item.model_copy(update={"quantity": item.quantity + action.quantity})
                if item.id == existing.id
                else item
                for item in state.items
            ]
        else:
            new_item = CartItem(
                id=action.item_id,
                product=action.product,
                quantity=action.quantity,
                price_at_time=action.product.price,
            )
            items = [*state.items, new_item]

        new_state = state.model_copy(update={
            "items": items,
            "store_id": action.store_id,
            "store_name": action.store_name,
            "store_image": action.store_image or state.store_image,
        })
        return with_summary(new_state, pricing)

    if isinstance(action, RemoveItem):
        items = [item for item in state.items if item.id != action.item_id]
        if not items:
            return with_summary(initial_cart_state(), pricing)
        return with_summary(state.model_copy(update={"items": items}), pricing)

    if isinstance(action, UpdateQuantity):
        if action.quantity <= 0:
            return cart_reducer(state, RemoveItem(action.item_id), pricing)
        items = [
            item.model_copy(update={"quantity": action.quantity})
            if item.id == action.item_id
            else item
            for item in state.items
        ]
        return with_summary(state.model_copy(update={"items": items}), pricing)

    if isinstance(action, ClearCart):
        return with_summary(initial_cart_state(), pricing)

    if isinstance(action, LoadCart):
        return with_summary(action.state, pricing)

    if isinstance(action, ApplyRefresh):
        refreshed = {item.id: item for item in action.items}
        items = []
        for item in state.items:
            if item.id in action.removed_ids:
                continue
            fresh = refreshed.get(item.id)
            if fresh is not None:
                item = item.model_copy(update={"product": fresh.product, "price_at_time": fresh.price_at_time})
            items.append(item)
        if not items:
            return with_summary(initial_cart_state(), pricing)
        return with_summary(state.model_copy(update={"items": items}), pricing)

    return state
