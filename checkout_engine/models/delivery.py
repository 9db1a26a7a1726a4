"""Delivery fee models"""

from pydantic import BaseModel, Field, model_validator
from typing import Literal, Optional

# toKm at or above this value means "no upper bound"
UNLIMITED_DISTANCE = 9999


class Coordinates(BaseModel):
    """Geographic point in decimal degrees"""
    lat: float
    lng: float


class DistanceTier(BaseModel):
    """Half-open kilometer band [from_km, to_km) with its own rate"""
    from_km: float = Field(ge=0)
    to_km: float = Field(ge=0)
    rate_per_km: float = Field(ge=0)

    @property
    def is_unlimited(self) -> bool:
        return self.to_km >= UNLIMITED_DISTANCE


class DeliveryFeeConfig(BaseModel):
    """Tiered delivery fee configuration"""
    enabled: bool = True
    base_fee: float = Field(ge=0)
    min_fee: float = Field(ge=0)
    max_fee: float = Field(ge=0)
    tiers: list[DistanceTier] = []
    max_delivery_distance_km: float = Field(gt=0, default=60.0)
    discount_percentage: float = Field(ge=0, le=1, default=0.20)
    discount_eligible_order_count: int = Field(ge=0, default=3)

    @model_validator(mode="after")
    def check_fee_bounds(self) -> "DeliveryFeeConfig":
        if self.min_fee > self.max_fee:
            raise ValueError("min_fee must not exceed max_fee")
        return self


class TierBreakdown(BaseModel):
    """Charge accrued inside a single tier"""
    tier: DistanceTier
    km_in_tier: float
    fee: float


class FeeCalculationResult(BaseModel):
    """Audit trail of how a delivery fee was derived"""
    total_fee: float
    base_fee: float
    distance_fee: float
    distance: float
    tier_breakdown: list[TierBreakdown] = []
    capped_at: Optional[Literal["min", "max"]] = None


class DeliveryDistanceCheckResult(BaseModel):
    """Result of the maximum-distance gate"""
    is_supported: bool
    distance: float
    max_distance: float
    reason: Optional[str] = None


class DeliveryFeeDiscount(BaseModel):
    """New-customer delivery discount"""
    original_fee: float
    discounted_fee: float
    discount_amount: float
    is_eligible: bool
    orders_remaining: int
    discount_percentage: float


class PlatformFeeConfig(BaseModel):
    """Platform fee and commission configuration"""
    enabled: bool = True
    fixed_amount: float = Field(ge=0, default=2.00)
    commission_rate: float = Field(ge=0, le=1, default=0.06)


class DeliveryQuote(BaseModel):
    """Everything the checkout needs after an address is confirmed"""
    customer_coordinates: Coordinates
    distance_check: DeliveryDistanceCheckResult
    fee: FeeCalculationResult
    discount: DeliveryFeeDiscount
