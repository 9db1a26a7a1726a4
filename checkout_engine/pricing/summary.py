"""
Cart/Order Summary Calculator

Pure and synchronous: it is re-run on every cart mutation and every fee
update, so it must never await or touch state. Monetary fields are kept
as exact decimals until the summary is built and rounded once there.
"""

from decimal import Decimal
from typing import Iterable, Optional, Union

from ..models.cart import PENDING, CartItem, CartSummary, Loaded, MaybeLoaded, Pending
from ..models.delivery import DeliveryFeeDiscount
from .money import quantize_money, to_decimal

DEFAULT_PLATFORM_FEE = 2.00
DEFAULT_COMMISSION_RATE = 0.06

FeeInput = Union[MaybeLoaded[float], float, None]


def as_loaded(value: FeeInput) -> MaybeLoaded[float]:
    """Normalize a raw number or None into Loaded/Pending"""
    if isinstance(value, (Loaded, Pending)):
        return value
    if value is None:
        return PENDING
    return Loaded(float(value))


def calculate_cart_summary(
    items: Iterable[CartItem],
    delivery_fee: FeeInput = PENDING,
    platform_fee: FeeInput = PENDING,
    commission_rate: FeeInput = PENDING,
    discount: Optional[DeliveryFeeDiscount] = None,
    default_platform_fee: float = DEFAULT_PLATFORM_FEE,
    default_commission_rate: float = DEFAULT_COMMISSION_RATE,
) -> CartSummary:
    """
    Build the financial summary for a list of cart items.

    Args:
        items: Cart items (price_at_time is the unit price)
        delivery_fee: Loaded fee once the address is confirmed; PENDING shows as 0
        platform_fee: Loaded fee from config; PENDING uses default_platform_fee
        commission_rate: Loaded rate from config; PENDING uses default_commission_rate
        discount: Existing new-customer discount, carried through recalculation

    Returns:
        CartSummary with every monetary field rounded to the cent
    """
    items = list(items)
    delivery_fee = as_loaded(delivery_fee)
    platform_fee = as_loaded(platform_fee)
    commission_rate = as_loaded(commission_rate)

    subtotal_raw = Decimal(0)
    gst_raw = Decimal(0)
    pst_raw = Decimal(0)
    item_count = 0

    for item in items:
        line = to_decimal(item.price_at_time) * item.quantity
        subtotal_raw += line
        gst_raw += line * to_decimal(item.product.gst_percentage) / 100
        pst_raw += line * to_decimal(item.product.pst_percentage) / 100
        item_count += item.quantity

    subtotal = quantize_money(subtotal_raw)
    gst = quantize_money(gst_raw)
    pst = quantize_money(pst_raw)
    tax = gst + pst

    if discount is not None and discount.is_eligible:
        effective_delivery_fee = quantize_money(discount.discounted_fee)
    elif isinstance(delivery_fee, Loaded):
        effective_delivery_fee = quantize_money(delivery_fee.value)
    else:
        effective_delivery_fee = Decimal("0.00")

    total = subtotal + tax + effective_delivery_fee

    if item_count > 0:
        fee = platform_fee.value if isinstance(platform_fee, Loaded) else default_platform_fee
        platform = quantize_money(fee)
    else:
        platform = Decimal("0.00")

    final_total = total + platform
    fee_pending = isinstance(delivery_fee, Pending) and not (
        discount is not None and discount.is_eligible
    )

    rate = commission_rate.value if isinstance(commission_rate, Loaded) else default_commission_rate
    commission_amount = quantize_money(subtotal * to_decimal(rate))
    store_amount = subtotal - commission_amount + tax
    lulocart_amount = commission_amount + effective_delivery_fee + platform

    return CartSummary(
        subtotal=float(subtotal),
        gst=float(gst),
        pst=float(pst),
        tax=float(tax),
        delivery_fee=float(effective_delivery_fee),
        delivery_fee_pending=fee_pending,
        total=float(total),
        platform_fee=float(platform),
        final_total=float(final_total),
        item_count=item_count,
        commission_rate=float(rate),
        commission_amount=float(commission_amount),
        store_amount=float(store_amount),
        lulocart_amount=float(lulocart_amount),
        delivery_fee_discount=discount,
    )
