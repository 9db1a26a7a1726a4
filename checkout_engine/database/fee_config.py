"""
Admin-editable fee configuration.

Reads never fail: a missing or unreadable document falls back to the
built-in defaults with a warning. Saves are validated and replace the
stored document wholesale.
"""

import logging
from typing import Any, Callable, Optional

from pydantic import ValidationError

from ..core.config import settings
from ..errors import ConfigValidationError
from ..models.delivery import DeliveryFeeConfig, PlatformFeeConfig
from ..pricing.delivery_fee import DEFAULT_DELIVERY_FEE_CONFIG, find_tier_problems
from .documents import DocumentStore, document_store

logger = logging.getLogger(__name__)

CONFIG_COLLECTION = "config"
DELIVERY_FEE_DOC = "deliveryFees"
PLATFORM_FEE_DOC = "platformFees"

MAX_COMMISSION_RATE = 0.5
MAX_PLATFORM_FEE = 50.0

DEFAULT_PLATFORM_FEE_CONFIG = PlatformFeeConfig(
    enabled=True,
    fixed_amount=2.00,
    commission_rate=0.06,
)


def default_delivery_fee_config() -> DeliveryFeeConfig:
    """Built-in delivery fee config with the configured distance limit"""
    return DEFAULT_DELIVERY_FEE_CONFIG.model_copy(
        deep=True,
        update={"max_delivery_distance_km": settings.default_max_delivery_distance_km},
    )


def default_platform_fee_config() -> PlatformFeeConfig:
    """Built-in platform fee config with the configured fee and commission"""
    return DEFAULT_PLATFORM_FEE_CONFIG.model_copy(
        update={
            "fixed_amount": settings.default_platform_fee,
            "commission_rate": settings.default_commission_rate,
        }
    )


def validate_platform_fee_config(config: PlatformFeeConfig) -> None:
    """Raise ConfigValidationError if the platform fee config is out of bounds"""
    errors = {}
    if not 0 <= config.commission_rate <= MAX_COMMISSION_RATE:
        errors["commission_rate"] = f"Commission rate must be between 0 and {MAX_COMMISSION_RATE}"
    if not 0 <= config.fixed_amount <= MAX_PLATFORM_FEE:
        errors["fixed_amount"] = f"Platform fee must be between 0 and {MAX_PLATFORM_FEE:g}"
    if errors:
        raise ConfigValidationError(errors)


def validate_delivery_fee_config(config: DeliveryFeeConfig) -> None:
    """Raise ConfigValidationError if the delivery fee config is inconsistent"""
    errors = {}
    if config.min_fee > config.max_fee:
        errors["min_fee"] = "Minimum fee must not exceed maximum fee"
    if not config.tiers:
        errors["tiers"] = "At least one distance tier is required"
    else:
        problems = find_tier_problems(config.tiers)
        if problems:
            errors["tiers"] = "; ".join(problems)
    if errors:
        raise ConfigValidationError(errors)


def parse_config(model: type, data: dict[str, Any]):
    """Build a config model, turning pydantic errors into ConfigValidationError"""
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise ConfigValidationError({
            ".".join(str(p) for p in err["loc"]) or "config": err["msg"]
            for err in e.errors()
        })


class ConfigStore:
    """Delivery and platform fee configuration documents"""

    def __init__(self, store: DocumentStore):
        self.store = store

    async def get_delivery_fee_config(self) -> DeliveryFeeConfig:
        """Current delivery fee config, or the defaults"""
        try:
            data = await self.store.get(CONFIG_COLLECTION, DELIVERY_FEE_DOC)
            if data is None:
                logger.warning("No delivery fee config stored, using defaults")
                return default_delivery_fee_config()
            return DeliveryFeeConfig.model_validate(data)
        except Exception as e:
            logger.warning(f"Error loading delivery fee config, using defaults: {e}")
            return default_delivery_fee_config()

    async def get_platform_fee_config(self) -> PlatformFeeConfig:
        """Current platform fee config, or the defaults"""
        try:
            data = await self.store.get(CONFIG_COLLECTION, PLATFORM_FEE_DOC)
            if data is None:
                logger.warning("No platform fee config stored, using defaults")
                return default_platform_fee_config()
            return PlatformFeeConfig.model_validate(data)
        except Exception as e:
            logger.warning(f"Error loading platform fee config, using defaults: {e}")
            return default_platform_fee_config()

    async def save_delivery_fee_config(self, config: DeliveryFeeConfig) -> DeliveryFeeConfig:
        validate_delivery_fee_config(config)
        await self.store.set(CONFIG_COLLECTION, DELIVERY_FEE_DOC, config.model_dump(mode="json"))
        logger.info("Delivery fee config saved")
        return config

    async def save_platform_fee_config(self, config: PlatformFeeConfig) -> PlatformFeeConfig:
        validate_platform_fee_config(config)
        await self.store.set(CONFIG_COLLECTION, PLATFORM_FEE_DOC, config.model_dump(mode="json"))
        logger.info("Platform fee config saved")
        return config

    async def reset_delivery_fee_config(self) -> DeliveryFeeConfig:
        return await self.save_delivery_fee_config(default_delivery_fee_config())

    async def reset_platform_fee_config(self) -> PlatformFeeConfig:
        return await self.save_platform_fee_config(default_platform_fee_config())

    def subscribe_to_delivery_fee_config(
        self,
        on_update: Callable[[DeliveryFeeConfig], None],
        on_error: Optional[Callable[[Exception], None]] = None,
    ) -> Callable[[], None]:
        """Stream delivery fee config changes; a deleted document streams the defaults"""

        def handle_snapshot(doc: Optional[dict[str, Any]]) -> None:
            if doc is None:
                on_update(default_delivery_fee_config())
            else:
                on_update(DeliveryFeeConfig.model_validate(doc))

        return self.store.subscribe(CONFIG_COLLECTION, DELIVERY_FEE_DOC, handle_snapshot, on_error)

    def subscribe_to_platform_fee_config(
        self,
        on_update: Callable[[PlatformFeeConfig], None],
        on_error: Optional[Callable[[Exception], None]] = None,
    ) -> Callable[[], None]:
        def handle_snapshot(doc: Optional[dict[str, Any]]) -> None:
            if doc is None:
                on_update(default_platform_fee_config())
            else:
                on_update(PlatformFeeConfig.model_validate(doc))

        return self.store.subscribe(CONFIG_COLLECTION, PLATFORM_FEE_DOC, handle_snapshot, on_error)


# Singleton instance
config_store = ConfigStore(document_store)
