"""
New-customer delivery fee discount.

calculate_delivery_discount is the pure form: callers that have just
computed a fee must use it directly. cached_delivery_discount is only a
memoized convenience for repeated lookups with settled inputs.
"""

from functools import lru_cache
from typing import Optional

from ..models.delivery import DeliveryFeeDiscount
from .money import quantize_money, round_money

DISCOUNT_PERCENTAGE = 0.20
MAX_DISCOUNTED_ORDERS = 3


def calculate_delivery_discount(
    delivery_fee: float,
    completed_order_count: int,
    is_logged_in: bool,
    discount_percentage: Optional[float] = None,
    discount_eligible_order_count: Optional[int] = None,
) -> DeliveryFeeDiscount:
    """
    Calculate the new-customer discount on a delivery fee.

    Args:
        delivery_fee: Fee after tier calculation, before discount
        completed_order_count: Customer's paid order count
        is_logged_in: Whether the customer is signed in
        discount_percentage: Fraction off (0.20 = 20%); defaults to DISCOUNT_PERCENTAGE
        discount_eligible_order_count: How many first orders qualify

    Returns:
        DeliveryFeeDiscount; discounted_fee equals original_fee when ineligible
    """
    pct = DISCOUNT_PERCENTAGE if discount_percentage is None else discount_percentage
    max_orders = (
        MAX_DISCOUNTED_ORDERS
        if discount_eligible_order_count is None
        else discount_eligible_order_count
    )

    original_fee = delivery_fee
    is_eligible = is_logged_in and completed_order_count < max_orders and original_fee > 0
    orders_remaining = max(0, max_orders - completed_order_count)

    if is_eligible:
        discount = quantize_money(original_fee * pct)
        discount_amount = float(discount)
        discounted_fee = round_money(quantize_money(original_fee) - discount)
    else:
        discount_amount = 0.0
        discounted_fee = original_fee

    return DeliveryFeeDiscount(
        original_fee=original_fee,
        discounted_fee=discounted_fee,
        discount_amount=discount_amount,
        is_eligible=is_eligible,
        orders_remaining=orders_remaining,
        discount_percentage=pct,
    )


@lru_cache(maxsize=256)
def cached_delivery_discount(
    delivery_fee: float,
    completed_order_count: int,
    is_logged_in: bool,
    discount_percentage: float = DISCOUNT_PERCENTAGE,
    discount_eligible_order_count: int = MAX_DISCOUNTED_ORDERS,
) -> DeliveryFeeDiscount:
    """Memoized calculate_delivery_discount (inputs must be hashable and settled)"""
    return calculate_delivery_discount(
        delivery_fee,
        completed_order_count,
        is_logged_in,
        discount_percentage,
        discount_eligible_order_count,
    )
