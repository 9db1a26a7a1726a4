# Cart state container

from .reducer import (
    AddItem,
    RemoveItem,
    UpdateQuantity,
    ClearCart,
    LoadCart,
    ApplyRefresh,
    CartAction,
    PricingInputs,
    add_item,
    cart_reducer,
    initial_cart_state,
    with_summary,
)
from .refresh import RefreshResult, refresh_cart_items

__all__ = [
    "AddItem",
    "RemoveItem",
    "UpdateQuantity",
    "ClearCart",
    "LoadCart",
    "ApplyRefresh",
    "CartAction",
    "PricingInputs",
    "add_item",
    "cart_reducer",
    "initial_cart_state",
    "with_summary",
    "RefreshResult",
    "refresh_cart_items",
]
