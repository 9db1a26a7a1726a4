import asyncio

import pytest

from checkout_engine.database.documents import DocumentStore
from checkout_engine.database.fee_config import ConfigStore, parse_config
from checkout_engine.errors import ConfigValidationError
from checkout_engine.models.delivery import DeliveryFeeConfig, DistanceTier, PlatformFeeConfig
from checkout_engine.pricing.delivery_fee import DEFAULT_DELIVERY_FEE_CONFIG


@pytest.fixture
def store():
    return ConfigStore(DocumentStore())


async def test_defaults_when_nothing_stored(store, caplog):
    delivery = await store.get_delivery_fee_config()
    platform = await store.get_platform_fee_config()

    assert delivery.tiers == DEFAULT_DELIVERY_FEE_CONFIG.tiers
    assert delivery.max_fee == 20.00
    assert platform.fixed_amount == 2.00
    assert platform.commission_rate == 0.06
    assert "using defaults" in caplog.text


async def test_unreadable_config_falls_back(store):
    await store.store.set("config", "platformFees", {"fixed_amount": "lots"})
    assert (await store.get_platform_fee_config()).fixed_amount == 2.00


async def test_save_overwrites(store):
    await store.save_platform_fee_config(PlatformFeeConfig(fixed_amount=3.00, commission_rate=0.10))
    await store.save_platform_fee_config(PlatformFeeConfig(enabled=False))

    saved = await store.get_platform_fee_config()
    assert saved.enabled is False
    assert saved.fixed_amount == 2.00
    assert saved.commission_rate == 0.06


async def test_commission_bounds(store):
    with pytest.raises(ConfigValidationError) as exc:
        await store.save_platform_fee_config(PlatformFeeConfig(fixed_amount=60, commission_rate=0.6))
    assert set(exc.value.errors) == {"commission_rate", "fixed_amount"}


async def test_tier_gaps_rejected(store):
    config = DEFAULT_DELIVERY_FEE_CONFIG.model_copy(update={
        "tiers": [
            DistanceTier(from_km=0, to_km=10, rate_per_km=0),
            DistanceTier(from_km=12, to_km=9999, rate_per_km=0.5),
        ]
    })
    with pytest.raises(ConfigValidationError) as exc:
        await store.save_delivery_fee_config(config)
    assert "Gap" in exc.value.errors["tiers"]


def test_parse_config_reports_fields():
    with pytest.raises(ConfigValidationError) as exc:
        parse_config(DeliveryFeeConfig, {"base_fee": -1, "min_fee": 2, "max_fee": 20})
    assert "base_fee" in exc.value.errors


async def test_reset_restores_defaults(store):
    await store.save_platform_fee_config(PlatformFeeConfig(fixed_amount=9.00))
    await store.reset_platform_fee_config()
    assert (await store.get_platform_fee_config()).fixed_amount == 2.00


async def test_subscription_streams_saves(store):
    received = []
    unsubscribe = store.subscribe_to_platform_fee_config(received.append)
    await asyncio.sleep(0)

    await store.save_platform_fee_config(PlatformFeeConfig(fixed_amount=4.50))
    await asyncio.sleep(0)
    unsubscribe()
    await store.save_platform_fee_config(PlatformFeeConfig(fixed_amount=5.00))
    await asyncio.sleep(0)

    assert [c.fixed_amount for c in received] == [2.00, 4.50]
