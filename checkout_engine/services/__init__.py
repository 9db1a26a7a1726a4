# Checkout services

from .geocoding import Geocoder, GoogleGeocoder, StaticGeocoder, create_geocoder
from .payment_processor import (
    PaymentProcessor,
    MockPaymentProcessor,
    get_payment_processor,
    set_payment_processor,
)
from .order_utils import (
    generate_order_id,
    is_valid_order_id,
    get_timestamp_from_order_id,
    generate_receipt_number,
)
from .order_builder import build_order_data
from .validation import validate_customer_info, validate_delivery_address, validate_checkout_form
from .checkout_session import CheckoutSession, SessionRegistry, session_registry
from .cart_service import CartService, cart_service
from .order_payment import (
    OrderPaymentStateMachine,
    PaymentFlowState,
    CompletionSource,
    calculate_application_fee,
    payment_flows,
)

__all__ = [
    "Geocoder",
    "GoogleGeocoder",
    "StaticGeocoder",
    "create_geocoder",
    "PaymentProcessor",
    "MockPaymentProcessor",
    "get_payment_processor",
    "set_payment_processor",
    "generate_order_id",
    "is_valid_order_id",
    "get_timestamp_from_order_id",
    "generate_receipt_number",
    "build_order_data",
    "validate_customer_info",
    "validate_delivery_address",
    "validate_checkout_form",
    "CheckoutSession",
    "SessionRegistry",
    "session_registry",
    "CartService",
    "cart_service",
    "OrderPaymentStateMachine",
    "PaymentFlowState",
    "CompletionSource",
    "calculate_application_fee",
    "payment_flows",
]
