# Financial calculation engine

from .money import round_money, quantize_money
from .distance import haversine_distance, check_delivery_distance, MAX_DELIVERY_DISTANCE_KM
from .delivery_fee import (
    calculate_delivery_fee,
    find_tier_problems,
    DEFAULT_TIERS,
    DEFAULT_DELIVERY_FEE_CONFIG,
)
from .discount import calculate_delivery_discount, cached_delivery_discount
from .tax import calculate_tax_breakdown, TaxBreakdown, PROVINCE_TAX_RATES
from .summary import (
    calculate_cart_summary,
    as_loaded,
    DEFAULT_PLATFORM_FEE,
    DEFAULT_COMMISSION_RATE,
)

__all__ = [
    "round_money",
    "quantize_money",
    "haversine_distance",
    "check_delivery_distance",
    "MAX_DELIVERY_DISTANCE_KM",
    "calculate_delivery_fee",
    "find_tier_problems",
    "DEFAULT_TIERS",
    "DEFAULT_DELIVERY_FEE_CONFIG",
    "calculate_delivery_discount",
    "cached_delivery_discount",
    "calculate_tax_breakdown",
    "TaxBreakdown",
    "PROVINCE_TAX_RATES",
    "calculate_cart_summary",
    "as_loaded",
    "DEFAULT_PLATFORM_FEE",
    "DEFAULT_COMMISSION_RATE",
]
