"""
Delivery Fee Calculator

Distance-tiered delivery pricing. Tiers are applied as cumulative bands:
a 20 km trip pays the 0-15 band rate for 15 km and the 15-25 band rate
for the remaining 5 km.
"""

import logging

from ..models.delivery import (
    DeliveryFeeConfig,
    DistanceTier,
    FeeCalculationResult,
    TierBreakdown,
)
from .distance import MAX_DELIVERY_DISTANCE_KM

logger = logging.getLogger(__name__)

DEFAULT_TIERS: list[DistanceTier] = [
    DistanceTier(from_km=0, to_km=15, rate_per_km=0.00),
    DistanceTier(from_km=15, to_km=25, rate_per_km=0.10),
    DistanceTier(from_km=25, to_km=30, rate_per_km=0.20),
    DistanceTier(from_km=30, to_km=35, rate_per_km=0.30),
    DistanceTier(from_km=35, to_km=40, rate_per_km=0.40),
    DistanceTier(from_km=40, to_km=45, rate_per_km=0.50),
    DistanceTier(from_km=45, to_km=50, rate_per_km=0.60),
    DistanceTier(from_km=50, to_km=55, rate_per_km=0.70),
    DistanceTier(from_km=55, to_km=70, rate_per_km=1.00),
]

DEFAULT_DELIVERY_FEE_CONFIG = DeliveryFeeConfig(
    enabled=True,
    base_fee=2.00,
    min_fee=2.00,
    max_fee=20.00,
    tiers=DEFAULT_TIERS,
    max_delivery_distance_km=MAX_DELIVERY_DISTANCE_KM,
    discount_percentage=0.20,
    discount_eligible_order_count=3,
)


def calculate_delivery_fee(
    distance: float,
    config: DeliveryFeeConfig,
) -> FeeCalculationResult:
    """
    Calculate the delivery fee for a distance.

    Args:
        distance: Distance in kilometers (negative is treated as 0)
        config: Fee configuration with tiers

    Returns:
        FeeCalculationResult with per-tier breakdown and clamp marker
    """
    distance = max(0.0, distance)
    sorted_tiers = sorted(config.tiers, key=lambda t: t.from_km)

    distance_fee = 0.0
    breakdown: list[TierBreakdown] = []

    for tier in sorted_tiers:
        if distance <= tier.from_km:
            continue

        tier_end = distance if tier.is_unlimited else min(tier.to_km, distance)
        km_in_tier = max(0.0, tier_end - tier.from_km)

        if km_in_tier > 0:
            fee = km_in_tier * tier.rate_per_km
            distance_fee += fee
            breakdown.append(TierBreakdown(tier=tier, km_in_tier=km_in_tier, fee=fee))

    total_fee = config.base_fee + distance_fee
    capped_at = None

    if total_fee < config.min_fee:
        total_fee = config.min_fee
        capped_at = "min"
    elif total_fee > config.max_fee:
        total_fee = config.max_fee
        capped_at = "max"

    logger.debug(
        f"Delivery fee for {distance:.2f} km: base={config.base_fee} "
        f"distance={distance_fee:.4f} total={total_fee:.2f} capped={capped_at}"
    )

    return FeeCalculationResult(
        total_fee=total_fee,
        base_fee=config.base_fee,
        distance_fee=distance_fee,
        distance=distance,
        tier_breakdown=breakdown,
        capped_at=capped_at,
    )


def find_tier_problems(tiers: list[DistanceTier]) -> list[str]:
    """
    Describe gaps and overlaps in a tier set.

    Gaps under-charge and overlaps double-charge, so admin saves reject both.
    """
    problems = []
    sorted_tiers = sorted(tiers, key=lambda t: t.from_km)

    for tier in sorted_tiers:
        if tier.to_km <= tier.from_km:
            problems.append(f"Tier starting at {tier.from_km:g} km must end after it starts")

    for previous, current in zip(sorted_tiers, sorted_tiers[1:]):
        if current.from_km < previous.to_km:
            problems.append(
                f"Tier {current.from_km:g}-{current.to_km:g} km overlaps "
                f"tier {previous.from_km:g}-{previous.to_km:g} km"
            )
        elif current.from_km > previous.to_km:
            problems.append(
                f"Gap between {previous.to_km:g} km and {current.from_km:g} km"
            )

    if sorted_tiers and sorted_tiers[0].from_km > 0:
        problems.append(f"First tier must start at 0 km, not {sorted_tiers[0].from_km:g} km")

    return problems
