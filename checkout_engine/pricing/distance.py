"""Great-circle distance and the delivery distance gate"""

import math
from typing import Optional

from ..models.delivery import Coordinates, DeliveryDistanceCheckResult

EARTH_RADIUS_KM = 6371.0

# Used when the fee config carries no maximum distance
MAX_DELIVERY_DISTANCE_KM = 60.0


def haversine_distance(coord1: Coordinates, coord2: Coordinates) -> float:
    """
    Haversine distance between two coordinates.

    Args:
        coord1: First point (lat, lng in decimal degrees)
        coord2: Second point

    Returns:
        Distance in kilometers
    """
    d_lat = math.radians(coord2.lat - coord1.lat)
    d_lng = math.radians(coord2.lng - coord1.lng)

    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(coord1.lat))
        * math.cos(math.radians(coord2.lat))
        * math.sin(d_lng / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_KM * c


def check_delivery_distance(
    distance: float,
    max_distance: Optional[float] = None,
) -> DeliveryDistanceCheckResult:
    """
    Check if delivery is supported for a distance.

    A missing max_distance falls back to MAX_DELIVERY_DISTANCE_KM.
    """
    if max_distance is None:
        max_distance = MAX_DELIVERY_DISTANCE_KM

    is_supported = distance <= max_distance
    reason = None
    if not is_supported:
        reason = (
            f"Delivery is not available for distances over {max_distance:g} km. "
            f"Your location is {distance:.1f} km away."
        )

    return DeliveryDistanceCheckResult(
        is_supported=is_supported,
        distance=distance,
        max_distance=max_distance,
        reason=reason,
    )
