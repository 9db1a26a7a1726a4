"""Delivery quote and tax routes"""

from typing import Optional

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel

from ..core.config import settings
from ..database.products import product_db
from ..errors import CheckoutValidationError, DeliveryNotAvailableError, GeocodingError
from ..models.cart import CartState
from ..models.delivery import DeliveryQuote
from ..models.order import DeliveryAddress
from ..pricing.tax import TaxBreakdown, calculate_tax_breakdown
from ..services.geocoding import Geocoder, create_geocoder
from .cart import load_session

router = APIRouter(prefix="/api/delivery", tags=["Delivery"])

_geocoder: Optional[Geocoder] = None


def get_geocoder() -> Geocoder:
    global _geocoder
    if _geocoder is None:
        _geocoder = create_geocoder()
    return _geocoder


def set_geocoder(geocoder: Optional[Geocoder]) -> None:
    """Override the geocoder (None resets to the configured one)"""
    global _geocoder
    _geocoder = geocoder


class DeliveryQuoteRequest(BaseModel):
    """Address plus who is ordering"""
    address: DeliveryAddress
    completed_order_count: int = 0
    is_logged_in: bool = False


class DeliveryQuoteResponse(BaseModel):
    quote: DeliveryQuote
    cart: CartState


@router.post("/{cart_id}/quote", response_model=DeliveryQuoteResponse)
async def quote_delivery(cart_id: str, request: DeliveryQuoteRequest):
    """Price delivery for the cart's store to an address"""
    session = await load_session(cart_id)
    if not session.state.store_id:
        raise HTTPException(status_code=400, detail="Cart is empty")

    store = await product_db.get_store_by_id(session.state.store_id)
    if store is None:
        raise HTTPException(status_code=404, detail="Store not found")

    session.set_customer(request.completed_order_count, request.is_logged_in)
    try:
        quote = await session.quote_delivery(request.address, store, get_geocoder())
    except DeliveryNotAvailableError as e:
        raise HTTPException(status_code=400, detail=e.reason)
    except GeocodingError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return DeliveryQuoteResponse(quote=quote, cart=session.state)


@router.get("/tax", response_model=TaxBreakdown)
async def tax_breakdown(
    subtotal: float = Query(..., ge=0),
    province: Optional[str] = None,
):
    """Tax breakdown for a subtotal in a province"""
    try:
        return calculate_tax_breakdown(
            subtotal,
            province or settings.default_province,
            strict=settings.strict_province,
        )
    except CheckoutValidationError as e:
        raise HTTPException(status_code=400, detail=e.errors)
