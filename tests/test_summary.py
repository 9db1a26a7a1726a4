import random

import pytest

from checkout_engine.models.cart import PENDING, Loaded
from checkout_engine.pricing.discount import calculate_delivery_discount
from checkout_engine.pricing.summary import calculate_cart_summary

from .conftest import make_item, make_product


@pytest.fixture
def example_items():
    return [
        make_item(make_product("a", price=10.00), quantity=2),
        make_item(make_product("b", price=15.50), quantity=1),
    ]


def test_two_item_example(example_items):
    summary = calculate_cart_summary(example_items, delivery_fee=Loaded(4.99))

    assert summary.subtotal == 35.50
    # 1.775 rounds once, half up
    assert summary.gst == 1.78
    assert summary.pst == 0
    assert summary.tax == 1.78
    assert summary.delivery_fee == 4.99
    assert summary.total == 42.27
    assert summary.item_count == 3
    assert not summary.delivery_fee_pending


def test_defaults_apply_while_config_pending(example_items):
    summary = calculate_cart_summary(example_items, delivery_fee=Loaded(4.99))

    assert summary.platform_fee == 2.00
    assert summary.commission_rate == 0.06
    assert summary.final_total == 44.27
    # 35.50 x 0.06 = 2.13
    assert summary.commission_amount == 2.13
    assert summary.store_amount == 35.15
    assert summary.lulocart_amount == 9.12


def test_pending_delivery_fee_reads_zero_but_is_flagged(example_items):
    summary = calculate_cart_summary(example_items)
    assert summary.delivery_fee == 0
    assert summary.delivery_fee_pending


def test_loaded_zero_fee_is_not_pending(example_items):
    summary = calculate_cart_summary(example_items, delivery_fee=Loaded(0.0))
    assert summary.delivery_fee == 0
    assert not summary.delivery_fee_pending


def test_raw_numbers_are_accepted(example_items):
    assert calculate_cart_summary(example_items, 4.99, 1.50, 0.10) == calculate_cart_summary(
        example_items, Loaded(4.99), Loaded(1.50), Loaded(0.10)
    )


def test_eligible_discount_replaces_fee(example_items):
    discount = calculate_delivery_discount(10.00, 0, True)
    summary = calculate_cart_summary(example_items, delivery_fee=Loaded(10.00), discount=discount)

    assert summary.delivery_fee == 8.00
    assert summary.delivery_fee_discount == discount


def test_ineligible_discount_keeps_fee(example_items):
    discount = calculate_delivery_discount(10.00, 5, True)
    summary = calculate_cart_summary(example_items, delivery_fee=Loaded(10.00), discount=discount)
    assert summary.delivery_fee == 10.00


def test_empty_cart_has_no_platform_fee():
    summary = calculate_cart_summary([], delivery_fee=PENDING, platform_fee=Loaded(2.00))
    assert summary.platform_fee == 0
    assert summary.final_total == 0
    assert summary.store_amount + summary.lulocart_amount == 0


def test_per_item_tax_rates():
    items = [
        make_item(make_product("bread", price=8.50, gst=0, pst=0)),
        make_item(make_product("mug", price=22.00, gst=5, pst=7)),
    ]
    summary = calculate_cart_summary(items, delivery_fee=Loaded(0))
    assert summary.gst == 1.10
    assert summary.pst == 1.54
    assert summary.tax == 2.64


def test_same_inputs_same_output(example_items):
    first = calculate_cart_summary(example_items, Loaded(4.99), Loaded(2.00), Loaded(0.06))
    second = calculate_cart_summary(example_items, Loaded(4.99), Loaded(2.00), Loaded(0.06))
    assert first.model_dump_json() == second.model_dump_json()


def test_store_and_platform_shares_balance():
    rng = random.Random(20240611)
    for _ in range(300):
        items = [
            make_item(
                make_product(
                    f"p{i}",
                    price=round(rng.uniform(0.5, 80), 2),
                    gst=rng.choice([0, 5]),
                    pst=rng.choice([0, 7, 9.975]),
                ),
                quantity=rng.randint(1, 6),
            )
            for i in range(rng.randint(1, 5))
        ]
        summary = calculate_cart_summary(
            items,
            delivery_fee=Loaded(round(rng.uniform(0, 20), 2)),
            platform_fee=Loaded(round(rng.uniform(0, 5), 2)),
            commission_rate=Loaded(rng.choice([0.0, 0.06, 0.125, 0.3333])),
        )

        assert round(summary.store_amount + summary.lulocart_amount, 2) == summary.final_total
        assert round(summary.gst + summary.pst, 2) == summary.tax
        assert round(summary.subtotal + summary.tax + summary.delivery_fee, 2) == summary.total
        assert round(summary.total + summary.platform_fee, 2) == summary.final_total
