"""Checkout engine exceptions"""

from typing import Optional


class CheckoutError(Exception):
    """Base exception for checkout engine errors"""
    pass


class CheckoutValidationError(CheckoutError):
    """Checkout input failed validation; carries field -> message pairs"""

    def __init__(self, errors: dict[str, str]):
        self.errors = errors
        super().__init__("; ".join(f"{k}: {v}" for k, v in errors.items()))


class ConfigValidationError(CheckoutValidationError):
    """Admin fee configuration is invalid"""
    pass


class DeliveryNotAvailableError(CheckoutError):
    """Customer address is beyond the maximum delivery distance"""

    def __init__(self, reason: str, distance: Optional[float] = None):
        self.reason = reason
        self.distance = distance
        super().__init__(reason)


class GeocodingError(CheckoutError):
    """Address could not be turned into coordinates"""
    pass


class StoreMismatchError(CheckoutError):
    """Item belongs to a different store than the current cart"""

    def __init__(self, cart_store_id: str, item_store_id: str):
        self.cart_store_id = cart_store_id
        self.item_store_id = item_store_id
        super().__init__(
            f"Cart already contains items from store {cart_store_id}; "
            f"cannot add items from store {item_store_id}"
        )


class PaymentError(CheckoutError):
    """Payment processor rejected or failed the request"""
    pass


class OrderNotFoundError(CheckoutError):
    """Order document does not exist"""
    pass


class OrderStateError(CheckoutError):
    """Order is terminal or the transition is not allowed"""
    pass


class ProductNotFoundError(CheckoutError):
    """Product does not exist or is no longer sold"""
    pass


class CartNotFoundError(CheckoutError):
    """Cart does not exist"""
    pass
