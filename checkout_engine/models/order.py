"""Order models for the checkout engine"""

from pydantic import BaseModel, Field
from typing import Any, Optional
from datetime import datetime
from enum import Enum

from .cart import CartSummary
from .delivery import Coordinates


class OrderStatus(str, Enum):
    """Fulfillment axis of an order"""
    PENDING = "pending"
    PENDING_PAYMENT = "pending_payment"
    PROCESSING = "processing"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    READY = "ready"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    """Payment axis of an order, as reported by the processor"""
    PENDING = "pending"
    PROCESSING = "processing"
    AUTHORIZED = "authorized"
    CAPTURED = "captured"
    PAID = "paid"
    FAILED = "failed"
    VOIDED = "voided"
    REFUNDED = "refunded"


TERMINAL_ORDER_STATUSES = frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED})

CONFIRMED_ORDER_STATUSES = frozenset({
    OrderStatus.CONFIRMED,
    OrderStatus.PREPARING,
    OrderStatus.READY,
    OrderStatus.OUT_FOR_DELIVERY,
    OrderStatus.DELIVERED,
})

# Store-operator fulfillment moves; terminal statuses accept nothing
ALLOWED_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.PENDING_PAYMENT, OrderStatus.PROCESSING, OrderStatus.CANCELLED}),
    OrderStatus.PENDING_PAYMENT: frozenset({OrderStatus.PROCESSING, OrderStatus.CONFIRMED, OrderStatus.CANCELLED}),
    OrderStatus.PROCESSING: frozenset({OrderStatus.CONFIRMED, OrderStatus.CANCELLED}),
    OrderStatus.CONFIRMED: frozenset({OrderStatus.PREPARING, OrderStatus.CANCELLED}),
    OrderStatus.PREPARING: frozenset({OrderStatus.READY, OrderStatus.CANCELLED}),
    OrderStatus.READY: frozenset({OrderStatus.OUT_FOR_DELIVERY, OrderStatus.DELIVERED, OrderStatus.CANCELLED}),
    OrderStatus.OUT_FOR_DELIVERY: frozenset({OrderStatus.DELIVERED}),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}

_DISPLAY_LABELS = {
    OrderStatus.PENDING: "Pending",
    OrderStatus.PENDING_PAYMENT: "Awaiting Payment",
    OrderStatus.PROCESSING: "Processing Payment",
    OrderStatus.CONFIRMED: "Confirmed",
    OrderStatus.PREPARING: "Being Prepared",
    OrderStatus.READY: "Ready",
    OrderStatus.OUT_FOR_DELIVERY: "Out for Delivery",
    OrderStatus.DELIVERED: "Delivered",
    OrderStatus.CANCELLED: "Cancelled",
}


def get_display_status(status: Optional[str]) -> str:
    """Human-readable label for an order status"""
    try:
        return _DISPLAY_LABELS[OrderStatus(status)]
    except ValueError:
        return "Unknown"


def is_final_state(status: OrderStatus) -> bool:
    return status in TERMINAL_ORDER_STATUSES


def is_confirmed(status: OrderStatus) -> bool:
    return status in CONFIRMED_ORDER_STATUSES


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


class CustomerInfo(BaseModel):
    """Customer contact details"""
    name: str = ""
    email: str = ""
    phone: str = ""


class DeliveryAddress(BaseModel):
    """Delivery address for an order"""
    street: str = ""
    city: str = ""
    province: str = ""
    postal_code: str = ""
    country: str = "Canada"
    delivery_instructions: str = ""
    access_instructions: str = ""
    coordinates: Optional[Coordinates] = None
    estimated_distance: float = 0.0


class CheckoutFormData(BaseModel):
    """Customer-entered checkout data"""
    customer_info: CustomerInfo
    delivery_address: DeliveryAddress
    order_notes: str = ""
    is_delivery: bool = True
    delivery_date: Optional[str] = None
    tip_amount: float = Field(ge=0, default=0.0)


class OrderItem(BaseModel):
    """Item in an order"""
    id: str
    product_id: str
    product_name: str
    product_description: str = ""
    product_image_url: str = ""
    price: float
    quantity: int
    special_instructions: str = ""


class OrderSummary(CartSummary):
    """Financial snapshot persisted with an order"""
    discount_amount: float = 0.0
    tip_amount: float = 0.0
    service_fee: float = 0.0
    new_customer_discount_applied: bool = False


class PaymentDetails(BaseModel):
    """Payment reference for receipts"""
    method: str = "credit_card"
    transaction_id: str = ""


class Order(BaseModel):
    """Persisted order document"""
    id: str
    user_id: str = ""
    store_id: str
    store_name: str = ""
    customer_info: CustomerInfo
    delivery_address: DeliveryAddress
    items: list[OrderItem]
    summary: OrderSummary
    status: OrderStatus = OrderStatus.PENDING_PAYMENT
    payment_status: PaymentStatus = PaymentStatus.PENDING
    payment_id: Optional[str] = None
    payment_details: PaymentDetails = PaymentDetails()
    receipt_number: str = ""
    order_type: str = "delivery"
    order_notes: str = ""
    is_delivery: bool = True
    language: str = "en"
    order_source: str = "web"
    created_at: datetime
    updated_at: datetime


class FailedOrderRecord(BaseModel):
    """Minimal record of a failed payment attempt, kept apart from the order"""
    order_id: str
    store_id: str
    user_id: str = ""
    error: str
    payment_intent_id: Optional[str] = None
    created_at: datetime
    order_data: dict[str, Any] = {}


class PaymentIntentRequest(BaseModel):
    """What the processor needs to create a payment intent"""
    order_id: str
    store_id: str
    amount: float
    currency: str = "cad"
    platform_fee_amount: float = 0.0
    metadata: dict[str, Any] = {}


class PaymentIntent(BaseModel):
    """Opaque handle returned by the payment processor"""
    client_secret: str
    intent_id: str


class StatusUpdate(BaseModel):
    """Live status snapshot pushed for an order"""
    order_id: str
    status: str
    payment_status: Optional[str] = None
    updated_at: Optional[datetime] = None
