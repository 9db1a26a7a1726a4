"""Build the persisted order document from a checkout session"""

from datetime import datetime, timezone
from typing import Any, Optional

from ..models.cart import CartState
from ..models.order import (
    CheckoutFormData,
    OrderItem,
    OrderStatus,
    OrderSummary,
    PaymentDetails,
    PaymentStatus,
)
from .order_utils import generate_receipt_number


def build_order_data(
    order_id: str,
    cart: CartState,
    form: CheckoutFormData,
    user_id: str = "",
    estimated_distance: Optional[float] = None,
    payment_intent_id: Optional[str] = None,
    language: str = "en",
    status: OrderStatus = OrderStatus.PENDING_PAYMENT,
) -> dict[str, Any]:
    """
    Build order document fields.

    Args:
        order_id: Client-generated order ID
        cart: Cart with its computed summary
        form: Validated checkout form
        user_id: Customer user ID ("" for guests)
        estimated_distance: Store-to-customer distance in km
        payment_intent_id: Processor intent ID, if already known
        language: Customer locale for notifications
        status: Initial fulfillment status

    Returns:
        Dict accepted by OrderDatabase.create_order
    """
    now = datetime.now(timezone.utc)
    summary = cart.summary
    discount = summary.delivery_fee_discount
    discount_applied = bool(discount and discount.is_eligible)

    order_summary = OrderSummary(
        **summary.model_dump(exclude={"delivery_fee_discount"}),
        # Only an eligible discount is recorded on the order
        delivery_fee_discount=discount if discount_applied else None,
        tip_amount=form.tip_amount,
        new_customer_discount_applied=discount_applied,
    )

    delivery_address = form.delivery_address.model_copy(
        update={"estimated_distance": estimated_distance or 0.0}
    )

    items = [
        OrderItem(
            id=item.id,
            product_id=item.product.id,
            product_name=item.product.name,
            product_description=item.product.description,
            product_image_url=item.product.image_url or "",
            price=item.price_at_time,
            quantity=item.quantity,
            special_instructions=item.special_instructions or "",
        )
        for item in cart.items
    ]

    if payment_intent_id:
        payment_details = PaymentDetails(method="credit_card", transaction_id=payment_intent_id)
    else:
        payment_details = PaymentDetails(method="cash", transaction_id=order_id)

    return {
        "id": order_id,
        "user_id": user_id,
        "store_id": cart.store_id or "",
        "store_name": cart.store_name or "",
        "customer_info": form.customer_info,
        "delivery_address": delivery_address,
        "items": items,
        "summary": order_summary,
        "status": status,
        "payment_status": PaymentStatus.PENDING,
        "payment_id": payment_intent_id,
        "payment_details": payment_details,
        "receipt_number": generate_receipt_number(order_id),
        "order_type": "delivery" if form.is_delivery else "pickup",
        "order_notes": form.order_notes,
        "is_delivery": form.is_delivery,
        "language": language,
        "order_source": "web",
        "created_at": now,
        "updated_at": now,
    }
