"""Tests for swath interpolation between ground track samples."""

from datetime import datetime, timedelta, timezone

import pytest

from revisit_eo.orbits import GroundTrackPoint
from revisit_eo.swath import CoveragePoint, interpolate_segment, swath_half_width_deg

T0 = datetime(2025, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


def _pt(lat, lon, minutes=0.0) -> GroundTrackPoint:
    return GroundTrackPoint(lat=lat, lon=lon, timestamp=T0 + timedelta(minutes=minutes))


class TestSwathHalfWidth:

    def test_flat_earth_conversion(self):
        assert swath_half_width_deg(120.0) == pytest.approx(60.0 / 111.0)

    def test_scales_linearly(self):
        assert swath_half_width_deg(240.0) == pytest.approx(2 * swath_half_width_deg(120.0))


class TestInterpolateSegment:

    def test_last_sample_yields_single_point(self):
        points = interpolate_segment(_pt(10.0, 20.0), None, 0.5)
        assert points == [CoveragePoint(10.0, 20.0, 0.5)]

    def test_includes_both_endpoints(self):
        points = interpolate_segment(_pt(0.0, 0.0), _pt(5.0, 10.0, 0.5), 0.5)
        assert len(points) == 6
        assert [p.lon for p in points] == pytest.approx([0.0, 2.0, 4.0, 6.0, 8.0, 10.0])
        assert [p.lat for p in points] == pytest.approx([0.0, 1.0, 2.0, 3.0, 4.0, 5.0])

    def test_every_point_carries_half_width(self):
        points = interpolate_segment(_pt(0.0, 0.0), _pt(1.0, 1.0, 0.5), 0.54)
        assert all(p.half_width_deg == 0.54 for p in points)

    def test_custom_step_count(self):
        points = interpolate_segment(_pt(0.0, 0.0), _pt(0.0, 4.0, 0.5), 0.5, steps=4)
        assert [p.lon for p in points] == pytest.approx([0.0, 1.0, 2.0, 3.0, 4.0])

    def test_eastward_dateline_crossing_goes_short_way(self):
        points = interpolate_segment(_pt(0.0, 179.0), _pt(0.0, -179.0, 0.5), 0.5)
        lons = [p.lon for p in points]
        assert lons == pytest.approx([179.0, 179.4, 179.8, -179.8, -179.4, -179.0])
        assert all(abs(lon) > 178.0 for lon in lons)

    def test_westward_dateline_crossing_goes_short_way(self):
        points = interpolate_segment(_pt(0.0, -179.0), _pt(0.0, 179.0, 0.5), 0.5)
        lons = [p.lon for p in points]
        assert lons == pytest.approx([-179.0, -179.4, -179.8, 179.8, 179.4, 179.0])

    def test_interpolated_longitudes_in_range(self):
        points = interpolate_segment(_pt(-30.0, 170.0), _pt(-28.0, -160.0, 0.5), 0.5)
        assert all(-180.0 <= p.lon <= 180.0 for p in points)
