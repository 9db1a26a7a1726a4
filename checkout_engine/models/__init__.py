# Checkout Engine Models

from .product import Product, ProductStatus, Store
from .delivery import (
    UNLIMITED_DISTANCE,
    Coordinates,
    DistanceTier,
    DeliveryFeeConfig,
    TierBreakdown,
    FeeCalculationResult,
    DeliveryDistanceCheckResult,
    DeliveryFeeDiscount,
    DeliveryQuote,
    PlatformFeeConfig,
)
from .cart import (
    PENDING,
    Loaded,
    Pending,
    MaybeLoaded,
    loaded_or,
    CartItem,
    CartState,
    CartSummary,
    AddToCartRequest,
    UpdateCartItemRequest,
    CartResponse,
)
from .order import (
    Order,
    OrderItem,
    OrderStatus,
    OrderSummary,
    PaymentStatus,
    PaymentDetails,
    CustomerInfo,
    DeliveryAddress,
    CheckoutFormData,
    FailedOrderRecord,
    PaymentIntent,
    PaymentIntentRequest,
    StatusUpdate,
)

__all__ = [
    "Product",
    "ProductStatus",
    "Store",
    "UNLIMITED_DISTANCE",
    "Coordinates",
    "DistanceTier",
    "DeliveryFeeConfig",
    "TierBreakdown",
    "FeeCalculationResult",
    "DeliveryDistanceCheckResult",
    "DeliveryFeeDiscount",
    "DeliveryQuote",
    "PlatformFeeConfig",
    "PENDING",
    "Loaded",
    "Pending",
    "MaybeLoaded",
    "loaded_or",
    "CartItem",
    "CartState",
    "CartSummary",
    "AddToCartRequest",
    "UpdateCartItemRequest",
    "CartResponse",
    "Order",
    "OrderItem",
    "OrderStatus",
    "OrderSummary",
    "PaymentStatus",
    "PaymentDetails",
    "CustomerInfo",
    "DeliveryAddress",
    "CheckoutFormData",
    "FailedOrderRecord",
    "PaymentIntent",
    "PaymentIntentRequest",
    "StatusUpdate",
]
