"""Great-circle helpers for coordinate search."""

from __future__ import annotations

import math

EARTH_RADIUS_KM = 6371.0


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Distance in kilometres between two points given in degrees."""

    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lng / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def bounding_box(lat: float, lng: float, radius_km: float) -> tuple[float, float, float, float]:
    """(min_lat, max_lat, min_lng, max_lng) enclosing the circle around a point.

    Used as a cheap database prefilter; callers still compare the exact
    haversine distance with the radius.
    """

    angular_radius = radius_km / EARTH_RADIUS_KM
    delta_lat = math.degrees(angular_radius)
    cos_lat = math.cos(math.radians(lat))
    if math.sin(angular_radius) >= cos_lat:
        # The circle reaches over a pole: every longitude is within reach.
        delta_lng = 180.0
    else:
        delta_lng = math.degrees(math.asin(math.sin(angular_radius) / cos_lat))
    return max(lat - delta_lat, -90.0), min(lat + delta_lat, 90.0), lng - delta_lng, lng + delta_lng


def longitude_ranges(min_lng: float, max_lng: float) -> list[tuple[float, float]]:
    """Split a longitude span from ``bounding_box`` into ranges within [-180, 180].

    A span reaching past the antimeridian becomes two ranges, one on
    each side of it.
    """

    if max_lng - min_lng >= 360:
        return [(-180.0, 180.0)]
    if min_lng < -180:
        return [(min_lng + 360, 180.0), (-180.0, max_lng)]
    if max_lng > 180:
        return [(min_lng, 180.0), (-180.0, max_lng - 360)]
    return [(min_lng, max_lng)]
