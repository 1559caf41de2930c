"""Great-circle distance between two points, in whole miles."""
from __future__ import annotations

import math

EARTH_RADIUS_MILES = 3958.756


def distance(
    lat1: float,
    lon1: float,
    lat2: float,
    lon2: float,
    radius: float = EARTH_RADIUS_MILES,
) -> int:
    """Haversine distance between two coordinates in degrees.

    The result is truncated toward zero, not rounded: a 4.9 mile hop
    counts as 4.
    """
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return int(radius * c)
