"""Tests for ground track sampling with Skyfield/SGP4."""

import logging
from datetime import datetime, timedelta, timezone

import numpy as np
import pytest

from revisit_eo.config import SatelliteOrbitSpec
from revisit_eo.exceptions import InputValidationError
from revisit_eo.orbits import (
    GroundTrackPoint,
    ground_track_to_dataframe,
    resolve_tle_lines,
    sample_count,
    sample_ground_track,
    sample_times,
    validate_orbit_spec,
)

ISS_TLE = (
    "ISS (ZARYA)\n"
    "1 25544U 98067A   08264.51782528 -.00002182  00000-0 -11606-4 0  2927\n"
    "2 25544  51.6416 247.4627 0006703 130.5360 325.0288 15.72125391563537"
)
ISS_EPOCH = datetime(2008, 9, 20, 12, 0, 0, tzinfo=timezone.utc)
START = datetime(2025, 6, 1, 0, 0, 0, tzinfo=timezone.utc)


def _sso_spec(**overrides) -> SatelliteOrbitSpec:
    values = dict(name="EO-1", altitude_km=500.0, inclination_deg=97.4)
    values.update(overrides)
    return SatelliteOrbitSpec(**values)


class TestSampling:

    @pytest.mark.parametrize("hours, expected", [
        (0.5, 200),
        (1.0, 200),
        (10.0, 1200),
        (16.0, 1920),
        (24.0, 2000),
        (168.0, 2000),
    ])
    def test_sample_count_bounded(self, hours, expected):
        assert sample_count(hours) == expected

    def test_sample_times_evenly_spaced(self):
        times = sample_times(START, 1.0, 4)
        assert times == [START + timedelta(minutes=15 * i) for i in range(4)]


class TestValidateOrbitSpec:

    def test_tle_spec_valid(self):
        validate_orbit_spec(SatelliteOrbitSpec(name="ISS", tle=ISS_TLE))

    def test_element_spec_valid(self):
        validate_orbit_spec(_sso_spec())

    def test_bad_tle_rejected(self):
        with pytest.raises(InputValidationError):
            validate_orbit_spec(SatelliteOrbitSpec(name="BAD", tle="1 nonsense\n2 nonsense"))

    def test_missing_elements_rejected(self):
        with pytest.raises(InputValidationError):
            validate_orbit_spec(SatelliteOrbitSpec(name="EMPTY"))

    def test_non_positive_swath_override_rejected(self):
        with pytest.raises(InputValidationError):
            validate_orbit_spec(_sso_spec(swath_width_km=0.0))

    def test_resolve_uses_given_tle(self):
        line1, line2 = resolve_tle_lines(SatelliteOrbitSpec(tle=ISS_TLE), START)
        assert line1.startswith("1 25544U")
        assert line2.startswith("2 25544 ")

    def test_resolve_generates_tle_for_elements(self):
        line1, line2 = resolve_tle_lines(_sso_spec(), START)
        assert line1[18:23] == "25152"
        assert len(line2) == 69


class TestSampleGroundTrack:

    def test_tle_ground_track(self):
        track = sample_ground_track(SatelliteOrbitSpec(name="ISS", tle=ISS_TLE), 1.5, ISS_EPOCH)
        assert len(track) == 200
        assert all(isinstance(p, GroundTrackPoint) for p in track)
        lats = np.array([p.lat for p in track])
        lons = np.array([p.lon for p in track])
        assert np.all(np.abs(lats) <= 52.0)
        assert np.all((lons >= -180.0) & (lons <= 180.0))

    def test_timestamps_start_at_window_and_increase(self):
        track = sample_ground_track(_sso_spec(), 2.0, START)
        assert track[0].timestamp == START
        stamps = [p.timestamp for p in track]
        assert all(a < b for a, b in zip(stamps, stamps[1:]))
        assert stamps[-1] < START + timedelta(hours=2)

    def test_polar_orbit_reaches_high_latitudes(self):
        track = sample_ground_track(_sso_spec(), 2.0, START)
        max_lat = max(abs(p.lat) for p in track)
        # Inclination 97.4 deg peaks at 82.6 deg latitude
        assert 80.0 < max_lat < 83.5

    def test_naive_start_treated_as_utc(self):
        track = sample_ground_track(_sso_spec(), 1.0, datetime(2025, 6, 1))
        assert track[0].timestamp == START

    def test_invalid_tle_returns_empty(self, caplog):
        spec = SatelliteOrbitSpec(name="BROKEN", tle="not a tle")
        with caplog.at_level(logging.WARNING, logger="revisit_eo.orbits"):
            track = sample_ground_track(spec, 1.0, START)
        assert track == []
        assert "BROKEN" in caplog.text

    def test_missing_elements_returns_empty(self):
        assert sample_ground_track(SatelliteOrbitSpec(name="EMPTY"), 1.0, START) == []

    def test_dataframe_view(self):
        track = sample_ground_track(_sso_spec(), 1.0, START)
        df = ground_track_to_dataframe(track, "EO-1")
        assert list(df.columns) == ['Satellite', 'Epoch', 'Latitude', 'Longitude']
        assert len(df) == len(track)
        assert (df['Satellite'] == "EO-1").all()

    def test_empty_dataframe_view(self):
        df = ground_track_to_dataframe([], "EO-1")
        assert df.empty
        assert list(df.columns) == ['Satellite', 'Epoch', 'Latitude', 'Longitude']
