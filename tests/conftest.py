import pytest
from fastapi.testclient import TestClient

from checkout_engine.core.config import settings
from checkout_engine.database.documents import document_store
from checkout_engine.database.products import product_db
from checkout_engine.models.cart import CartItem
from checkout_engine.models.delivery import Coordinates
from checkout_engine.models.order import CheckoutFormData, CustomerInfo, DeliveryAddress
from checkout_engine.models.product import Product
from checkout_engine.routes.delivery import set_geocoder
from checkout_engine.services.checkout_session import session_registry
from checkout_engine.services.geocoding import StaticGeocoder
from checkout_engine.services.order_payment import payment_flows
from checkout_engine.services.payment_processor import set_payment_processor

# About 3 km from store-001 in downtown Vancouver
NEARBY = Coordinates(lat=49.2636, lng=-123.1386)
# Kelowna, well past the 60 km limit
FAR_AWAY = Coordinates(lat=49.8880, lng=-119.4960)


@pytest.fixture(autouse=True)
def reset_state():
    """Every test starts from the seeded catalog and empty collections"""
    document_store.collections.clear()
    document_store._listeners.clear()
    product_db.__init__()
    session_registry.clear()
    payment_flows.flows.clear()
    payment_flows._expiry.clear()
    set_payment_processor(None)
    set_geocoder(StaticGeocoder(known={"V6K1A1": NEARBY, "V1Y1A1": FAR_AWAY}, default=NEARBY))
    yield
    set_geocoder(None)
    set_payment_processor(None)


@pytest.fixture
def fast_payments(monkeypatch):
    """Millisecond payment timings for the HTTP flow"""
    monkeypatch.setattr(settings, "payment_confirmation_delay_seconds", 0.01)
    monkeypatch.setattr(settings, "payment_fallback_timeout_seconds", 0.2)


@pytest.fixture
def client():
    from checkout_engine.main import app

    with TestClient(app) as test_client:
        yield test_client


def make_product(
    product_id: str = "p1",
    price: float = 10.00,
    store_id: str = "store-001",
    gst: float = 5.0,
    pst: float = 0.0,
) -> Product:
    return Product(
        id=product_id,
        name=f"Product {product_id}",
        price=price,
        store_id=store_id,
        gst_percentage=gst,
        pst_percentage=pst,
    )


def make_item(product: Product, quantity: int = 1, price: float = None) -> CartItem:
    return CartItem(
        id=f"{product.id}-1",
        product=product,
        quantity=quantity,
        price_at_time=product.price if price is None else price,
    )


@pytest.fixture
def checkout_form() -> CheckoutFormData:
    return CheckoutFormData(
        customer_info=CustomerInfo(name="Ana Torres", email="ana@example.com", phone="604-555-0199"),
        delivery_address=DeliveryAddress(
            street="2150 W Broadway",
            city="Vancouver",
            province="BC",
            postal_code="V6K 1A1",
        ),
        order_notes="Leave at the door",
    )
