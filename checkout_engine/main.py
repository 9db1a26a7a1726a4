"""
Checkout Engine Application

Marketplace checkout service: cart pricing, delivery quotes, order
creation and payment tracking.
"""

import os
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv

# Load environment variables
load_dotenv(os.path.join(os.path.dirname(__file__), "..", "config", ".env"))

from .core.config import settings
from .routes import cart_router, delivery_router, checkout_router, config_router
from .services.order_payment import payment_flows

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    logger.info(f"{settings.app_name} starting up...")
    logger.info(f"Geocoding: {'configured' if settings.geocoding_configured else 'static fallback'}")
    logger.info(
        f"Payment confirmation delay {settings.payment_confirmation_delay_seconds:g}s, "
        f"fallback timeout {settings.payment_fallback_timeout_seconds:g}s"
    )
    yield
    await payment_flows.close_all()
    logger.info(f"{settings.app_name} shutting down...")


# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Marketplace checkout: pricing, delivery quotes and payment tracking",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routers
app.include_router(cart_router)
app.include_router(delivery_router)
app.include_router(checkout_router)
app.include_router(config_router)


@app.get("/")
async def root():
    return {
        "message": f"{settings.app_name} API",
        "docs": "/docs",
        "endpoints": {
            "cart": "/api/cart",
            "delivery": "/api/delivery",
            "checkout": "/api/checkout",
            "config": "/api/admin/config",
        },
    }


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "service": "checkout-engine"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "checkout_engine.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
