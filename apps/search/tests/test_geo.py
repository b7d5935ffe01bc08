import math

import pytest

from apps.search.geo import bounding_box, haversine_km, longitude_ranges


def test_haversine_zero_for_same_point():
    assert haversine_km(12.97, 77.59, 12.97, 77.59) == 0


def test_haversine_known_distance():
    # Mumbai to Pune, roughly 120 km as the crow flies.
    assert haversine_km(19.0760, 72.8777, 18.5204, 73.8567) == pytest.approx(120, abs=5)


def test_haversine_is_symmetric():
    assert haversine_km(1, 2, 3, 4) == pytest.approx(haversine_km(3, 4, 1, 2))


@pytest.mark.parametrize("lat,lng", [(0, 0), (45, 10), (-33.9, 18.4)])
def test_bounding_box_latitude_extent(lat, lng):
    min_lat, max_lat, min_lng, max_lng = bounding_box(lat, lng, 50)

    assert haversine_km(lat, lng, max_lat, lng) == pytest.approx(50, rel=1e-3)
    assert haversine_km(lat, lng, min_lat, lng) == pytest.approx(50, rel=1e-3)
    assert min_lng < lng < max_lng


def test_bounding_box_keeps_points_inside_the_radius():
    lat, lng = 60.0, 10.0
    min_lat, max_lat, min_lng, max_lng = bounding_box(lat, lng, 100)
    # Sample points on a 99 km circle; all must fall inside the box.
    for bearing in range(0, 360, 15):
        b = math.radians(bearing)
        d = 99 / 6371
        p_lat = math.asin(
            math.sin(math.radians(lat)) * math.cos(d)
            + math.cos(math.radians(lat)) * math.sin(d) * math.cos(b)
        )
        p_lng = math.radians(lng) + math.atan2(
            math.sin(b) * math.sin(d) * math.cos(math.radians(lat)),
            math.cos(d) - math.sin(math.radians(lat)) * math.sin(p_lat),
        )
        assert min_lat <= math.degrees(p_lat) <= max_lat
        assert min_lng <= math.degrees(p_lng) <= max_lng


def test_bounding_box_at_pole_spans_all_longitudes():
    _, _, min_lng, max_lng = bounding_box(90, 0, 10)
    assert max_lng - min_lng == 360


def test_bounding_box_near_the_antimeridian_is_split():
    _, _, min_lng, max_lng = bounding_box(-17.0, 179.98, 20)

    ranges = longitude_ranges(min_lng, max_lng)

    assert len(ranges) == 2
    (east_low, east_high), (west_low, west_high) = ranges
    assert east_low < 179.98 and east_high == 180.0
    assert west_low == -180.0 and -180.0 < west_high < -179.5


def test_longitude_ranges_inside_the_map_are_untouched():
    assert longitude_ranges(10.0, 12.0) == [(10.0, 12.0)]
    assert longitude_ranges(-200.0, 160.0) == [(-180.0, 180.0)]
    assert longitude_ranges(-181.0, -179.0) == [(179.0, 180.0), (-180.0, -179.0)]
