"""Cart models for the checkout engine"""

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar, Union

from pydantic import BaseModel, Field

from .delivery import DeliveryFeeDiscount
from .product import Product

T = TypeVar("T")


@dataclass(frozen=True)
class Loaded(Generic[T]):
    """A value that has actually been fetched or calculated"""
    value: T


@dataclass(frozen=True)
class Pending:
    """A value that is not known yet (never the same thing as zero)"""

    def __repr__(self) -> str:
        return "PENDING"


PENDING = Pending()

MaybeLoaded = Union[Loaded[T], Pending]


def loaded_or(value: "MaybeLoaded[T]", default: T) -> T:
    """Unwrap a Loaded value, or fall back to default while pending"""
    if isinstance(value, Loaded):
        return value.value
    return default


class CartItem(BaseModel):
    """Item in a shopping cart"""
    id: str
    product: Product
    quantity: int = Field(ge=1)
    # Authoritative unit price, captured at add-to-cart time
    price_at_time: float = Field(ge=0)
    special_instructions: Optional[str] = None


class CartSummary(BaseModel):
    """Financial summary of a cart"""
    subtotal: float = 0.0
    gst: float = 0.0
    pst: float = 0.0
    tax: float = 0.0
    delivery_fee: float = 0.0
    # True until a real delivery fee is known; delivery_fee then reads 0
    delivery_fee_pending: bool = True
    total: float = 0.0
    platform_fee: float = 0.0
    final_total: float = 0.0
    item_count: int = 0
    commission_rate: float = 0.0
    commission_amount: float = 0.0
    store_amount: float = 0.0
    lulocart_amount: float = 0.0
    delivery_fee_discount: Optional[DeliveryFeeDiscount] = None


class CartState(BaseModel):
    """Shopping cart; holds items from exactly one store"""
    items: list[CartItem] = []
    store_id: Optional[str] = None
    store_name: Optional[str] = None
    store_image: Optional[str] = None
    summary: CartSummary = CartSummary()

    @property
    def is_empty(self) -> bool:
        return not self.items

    def can_add_from(self, store_id: str) -> bool:
        """Whether an item from store_id may join this cart"""
        return self.store_id is None or self.store_id == store_id


class AddToCartRequest(BaseModel):
    """Request to add item to cart"""
    product_id: str
    quantity: int = Field(default=1, gt=0)
    store_name: Optional[str] = None


class UpdateCartItemRequest(BaseModel):
    """Request to update cart item quantity"""
    quantity: int = Field(ge=0)


class CartResponse(BaseModel):
    """Cart API response"""
    cart_id: str
    cart: CartState
    message: Optional[str] = None
    removed_items: list[str] = []
