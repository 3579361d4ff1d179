import math

import pytest

from cleancity.geo import EARTH_RADIUS_M, distance
from cleancity.models import GeoPoint

CONNAUGHT_PLACE = GeoPoint(lat=28.6139, lng=77.2090)
MINTO_ROAD = GeoPoint(lat=28.6350, lng=77.2050)


class TestDistance:
    def test_same_point_is_zero(self):
        assert distance(CONNAUGHT_PLACE, CONNAUGHT_PLACE) == 0

    def test_symmetric(self):
        assert distance(CONNAUGHT_PLACE, MINTO_ROAD) == distance(MINTO_ROAD, CONNAUGHT_PLACE)

    def test_one_degree_of_latitude(self):
        d = distance(GeoPoint(lat=0, lng=0), GeoPoint(lat=1, lng=0))
        assert d == pytest.approx(2 * math.pi * EARTH_RADIUS_M / 360, rel=1e-9)

    def test_city_scale_distance(self):
        # roughly 2.4 km between the two Delhi points
        assert 2300 < distance(CONNAUGHT_PLACE, MINTO_ROAD) < 2450

    def test_antipodes(self):
        d = distance(GeoPoint(lat=0, lng=0), GeoPoint(lat=0, lng=180))
        assert d == pytest.approx(math.pi * EARTH_RADIUS_M)

    def test_nan_propagates(self):
        bad = GeoPoint.model_construct(lat=float("nan"), lng=77.0)
        assert math.isnan(distance(bad, CONNAUGHT_PLACE))
