import pytest

from checkout_engine.pricing.discount import cached_delivery_discount, calculate_delivery_discount


def test_second_order_gets_twenty_percent_off():
    discount = calculate_delivery_discount(10.00, completed_order_count=1, is_logged_in=True, discount_percentage=0.20)

    assert discount.is_eligible
    assert discount.discount_amount == 2.00
    assert discount.discounted_fee == 8.00
    assert discount.orders_remaining == 2


def test_guest_is_not_eligible():
    discount = calculate_delivery_discount(10.00, 0, is_logged_in=False)
    assert not discount.is_eligible
    assert discount.discounted_fee == 10.00
    assert discount.discount_amount == 0


def test_eligibility_ends_after_allowance():
    discount = calculate_delivery_discount(10.00, 3, is_logged_in=True)
    assert not discount.is_eligible
    assert discount.orders_remaining == 0


def test_free_delivery_is_not_discounted():
    assert not calculate_delivery_discount(0.0, 0, True).is_eligible


def test_rounds_half_up_to_the_cent():
    discount = calculate_delivery_discount(4.99, 0, True, discount_percentage=0.25)
    # 4.99 x 0.25 = 1.2475
    assert discount.discount_amount == 1.25
    assert discount.discounted_fee == 3.74


@pytest.mark.parametrize("fee", [0.0, 0.01, 2.00, 3.33, 7.77, 19.99, 20.00])
@pytest.mark.parametrize("completed", [0, 2, 3, 10])
@pytest.mark.parametrize("logged_in", [True, False])
def test_discount_never_raises_the_fee(fee, completed, logged_in):
    discount = calculate_delivery_discount(fee, completed, logged_in)
    assert discount.discounted_fee <= discount.original_fee
    if not discount.is_eligible:
        assert discount.discounted_fee == discount.original_fee


def test_cached_form_matches_pure_form():
    assert cached_delivery_discount(6.50, 1, True) == calculate_delivery_discount(6.50, 1, True)
