import pytest

from checkout_engine.models.delivery import Coordinates
from checkout_engine.pricing.distance import (
    MAX_DELIVERY_DISTANCE_KM,
    check_delivery_distance,
    haversine_distance,
)


def test_identical_points_are_zero():
    point = Coordinates(lat=49.2827, lng=-123.1207)
    assert haversine_distance(point, point) == 0


def test_vancouver_to_victoria():
    vancouver = Coordinates(lat=49.2827, lng=-123.1207)
    victoria = Coordinates(lat=48.4284, lng=-123.3656)
    assert haversine_distance(vancouver, victoria) == pytest.approx(96.9, abs=1.0)


def test_distance_is_symmetric():
    a = Coordinates(lat=49.2827, lng=-123.1207)
    b = Coordinates(lat=49.1666, lng=-123.1336)
    assert haversine_distance(a, b) == pytest.approx(haversine_distance(b, a))


def test_one_degree_of_latitude():
    a = Coordinates(lat=0, lng=0)
    b = Coordinates(lat=1, lng=0)
    assert haversine_distance(a, b) == pytest.approx(111.19, abs=0.01)


def test_gate_allows_exact_limit():
    result = check_delivery_distance(60.0, 60.0)
    assert result.is_supported
    assert result.reason is None


def test_gate_rejects_with_reason():
    result = check_delivery_distance(72.345, 60.0)
    assert not result.is_supported
    assert result.reason == (
        "Delivery is not available for distances over 60 km. Your location is 72.3 km away."
    )


def test_gate_falls_back_to_default_limit():
    result = check_delivery_distance(MAX_DELIVERY_DISTANCE_KM + 0.1)
    assert result.max_distance == MAX_DELIVERY_DISTANCE_KM
    assert not result.is_supported
