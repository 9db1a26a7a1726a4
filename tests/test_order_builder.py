from datetime import timedelta

import pytest

from checkout_engine.errors import CheckoutValidationError
from checkout_engine.models.cart import CartState
from checkout_engine.models.order import CustomerInfo, DeliveryAddress, Order, OrderStatus
from checkout_engine.pricing.discount import calculate_delivery_discount
from checkout_engine.pricing.summary import calculate_cart_summary
from checkout_engine.services.order_builder import build_order_data
from checkout_engine.services.validation import (
    validate_checkout_form,
    validate_customer_info,
    validate_delivery_address,
)

from .conftest import make_item, make_product

ORDER_ID = "order_1753222065065_i3hwfxx7w"


def _cart(discount=None):
    items = [make_item(make_product("a", price=12.00), 2)]
    return CartState(
        items=items,
        store_id="store-001",
        store_name="Main Street Bakehouse",
        summary=calculate_cart_summary(items, delivery_fee=5.00, discount=discount),
    )


def test_valid_customer_info():
    info = CustomerInfo(name="Ana", email="ana@example.com", phone="+1 (604) 555-0199")
    assert validate_customer_info(info) == {}


def test_customer_info_errors():
    errors = validate_customer_info(CustomerInfo(name=" ", email="not-an-email", phone="0123"))
    assert set(errors) == {"customer_info.name", "customer_info.email", "customer_info.phone"}
    assert errors["customer_info.name"] == "This field is required"


def test_delivery_address_required_fields():
    errors = validate_delivery_address(DeliveryAddress(street="1 Main St", city="Vancouver"))
    assert set(errors) == {"delivery_address.province", "delivery_address.postal_code"}


def test_pickup_skips_address(checkout_form):
    pickup = checkout_form.model_copy(update={"is_delivery": False, "delivery_address": DeliveryAddress()})
    validate_checkout_form(pickup)


def test_form_errors_are_collected(checkout_form):
    broken = checkout_form.model_copy(update={"delivery_address": DeliveryAddress()})
    with pytest.raises(CheckoutValidationError) as exc:
        validate_checkout_form(broken)
    assert len(exc.value.errors) == 4


def test_order_document(checkout_form):
    data = build_order_data(ORDER_ID, _cart(), checkout_form, user_id="user-9", estimated_distance=3.2)
    order = Order.model_validate(data)

    assert order.id == ORDER_ID
    assert order.receipt_number == "#5065-I3HW"
    assert order.status == OrderStatus.PENDING_PAYMENT
    assert order.payment_status.value == "pending"
    assert order.order_type == "delivery"
    assert order.delivery_address.estimated_distance == 3.2
    assert order.items[0].product_id == "a"
    assert order.items[0].price == 12.00
    assert order.summary.final_total == _cart().summary.final_total
    assert order.payment_details.method == "cash"
    assert order.created_at.utcoffset() == timedelta(0)
    assert order.updated_at == order.created_at


def test_only_eligible_discount_is_recorded(checkout_form):
    ineligible = calculate_delivery_discount(5.00, 4, True)
    data = build_order_data(ORDER_ID, _cart(ineligible), checkout_form)
    assert data["summary"].delivery_fee_discount is None
    assert not data["summary"].new_customer_discount_applied

    eligible = calculate_delivery_discount(5.00, 0, True)
    data = build_order_data(ORDER_ID, _cart(eligible), checkout_form, payment_intent_id="pi_1")
    assert data["summary"].delivery_fee_discount == eligible
    assert data["summary"].new_customer_discount_applied
    assert data["payment_details"].transaction_id == "pi_1"
