"""Admin fee configuration routes"""

from typing import Any

from fastapi import APIRouter, Body, HTTPException

from ..database.fee_config import config_store, parse_config
from ..errors import ConfigValidationError
from ..models.delivery import DeliveryFeeConfig, PlatformFeeConfig

router = APIRouter(prefix="/api/admin/config", tags=["Config"])


@router.get("/delivery-fees", response_model=DeliveryFeeConfig)
async def get_delivery_fee_config():
    return await config_store.get_delivery_fee_config()


@router.put("/delivery-fees", response_model=DeliveryFeeConfig)
async def save_delivery_fee_config(data: dict[str, Any] = Body(...)):
    """Replace the delivery fee config"""
    try:
        config = parse_config(DeliveryFeeConfig, data)
        return await config_store.save_delivery_fee_config(config)
    except ConfigValidationError as e:
        raise HTTPException(status_code=400, detail=e.errors)


@router.post("/delivery-fees/reset", response_model=DeliveryFeeConfig)
async def reset_delivery_fee_config():
    return await config_store.reset_delivery_fee_config()


@router.get("/platform-fees", response_model=PlatformFeeConfig)
async def get_platform_fee_config():
    return await config_store.get_platform_fee_config()


@router.put("/platform-fees", response_model=PlatformFeeConfig)
async def save_platform_fee_config(data: dict[str, Any] = Body(...)):
    """Replace the platform fee config"""
    try:
        config = parse_config(PlatformFeeConfig, data)
        return await config_store.save_platform_fee_config(config)
    except ConfigValidationError as e:
        raise HTTPException(status_code=400, detail=e.errors)


@router.post("/platform-fees/reset", response_model=PlatformFeeConfig)
async def reset_platform_fee_config():
    return await config_store.reset_platform_fee_config()
