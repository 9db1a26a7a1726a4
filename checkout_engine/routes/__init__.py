# API Routes

from .cart import router as cart_router
from .delivery import router as delivery_router
from .checkout import router as checkout_router
from .config import router as config_router

__all__ = ["cart_router", "delivery_router", "checkout_router", "config_router"]
