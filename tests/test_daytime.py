"""Tests for the local-solar-time daytime filter."""

from datetime import datetime, timedelta, timezone

import pytest

from revisit_eo.config import DaytimeWindow
from revisit_eo.daytime import DaytimeFilter, local_solar_hours, to_hhmm_code
from revisit_eo.exceptions import ConfigurationError


def _utc(hour, minute=0) -> datetime:
    return datetime(2025, 6, 1, hour, minute, tzinfo=timezone.utc)


@pytest.fixture
def office_hours() -> DaytimeFilter:
    return DaytimeFilter(DaytimeWindow(1000, 1700))


class TestLocalSolarTime:

    def test_greenwich_matches_utc(self):
        assert local_solar_hours(_utc(10, 30), 0.0) == pytest.approx(10.5)

    def test_antimeridian_is_twelve_hours_ahead(self):
        assert local_solar_hours(_utc(0), 180.0) == pytest.approx(12.0)

    def test_west_longitude_wraps_to_previous_day(self):
        assert local_solar_hours(_utc(3), -90.0) == pytest.approx(21.0)

    def test_seconds_are_ignored(self):
        t = _utc(10, 0) + timedelta(seconds=59)
        assert local_solar_hours(t, 0.0) == pytest.approx(10.0)

    def test_naive_timestamp_treated_as_utc(self):
        assert local_solar_hours(datetime(2025, 6, 1, 10, 0), 0.0) == pytest.approx(10.0)

    def test_aware_timestamp_converted_to_utc(self):
        t = datetime(2025, 6, 1, 12, 0, tzinfo=timezone(timedelta(hours=2)))
        assert local_solar_hours(t, 0.0) == pytest.approx(10.0)

    def test_local_midnight_stays_below_twenty_four(self):
        # 01:00 UTC minus a hair over one hour of longitude
        hours = local_solar_hours(_utc(1), -15.000000000000002)
        assert 0.0 <= hours < 24.0
        assert to_hhmm_code(hours) == 0


class TestHHMMCode:

    @pytest.mark.parametrize("hours, code", [
        (0.0, 0),
        (10.0, 1000),
        (10.5, 1030),
        (23.75, 2345),
    ])
    def test_encoding(self, hours, code):
        assert to_hhmm_code(hours) == code


class TestDaytimeFilter:

    def test_start_of_window_accepted(self, office_hours):
        assert office_hours.accepts(_utc(10, 0), 0.0)

    def test_one_minute_early_rejected(self, office_hours):
        assert not office_hours.accepts(_utc(9, 59), 0.0)

    def test_end_of_window_inclusive(self, office_hours):
        assert office_hours.accepts(_utc(17, 0), 0.0)
        assert not office_hours.accepts(_utc(17, 1), 0.0)

    def test_antimeridian_midnight_utc_is_local_noon(self, office_hours):
        assert office_hours.accepts(_utc(0, 0), 180.0)

    def test_longitude_offset_shifts_window(self, office_hours):
        # 09:00 UTC at 15 deg E is 10:00 local
        assert office_hours.accepts(_utc(9, 0), 15.0)
        assert not office_hours.accepts(_utc(9, 0), -15.0)

    def test_local_code(self, office_hours):
        assert office_hours.local_code(_utc(6, 0), 90.0) == 1200

    def test_local_midnight_accepted_by_early_window(self):
        window = DaytimeFilter(DaytimeWindow(0, 100))
        assert window.accepts(_utc(1), -15.000000000000002)

    @pytest.mark.parametrize("start, end", [
        (1700, 1000),
        (2400, 2400),
        (1060, 1700),
        (-5, 1700),
    ])
    def test_invalid_window_rejected(self, start, end):
        with pytest.raises(ConfigurationError):
            DaytimeFilter(DaytimeWindow(start, end))
