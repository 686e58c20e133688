"""
Ground track sampling for revisit analysis.

Uses Skyfield's SGP4 implementation for orbit propagation. Satellites given as
orbital elements are first converted to a TLE at the run's start epoch, so
every satellite goes through the same propagator.
"""

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Callable, List, Optional, Tuple

import numpy as np
import pandas as pd
from skyfield.api import load, EarthSatellite, wgs84

from .config import SatelliteOrbitSpec
from .constants import (
    MIN_GROUND_TRACK_SAMPLES,
    MAX_GROUND_TRACK_SAMPLES,
    SAMPLES_PER_MINUTE,
    MINUTES_PER_HOUR,
    HOURS_PER_DAY,
)
from .exceptions import InputValidationError
from .tle import generate_tle, parse_tle, split_tle_lines, validate_elements
from .utils import normalize_longitude

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GroundTrackPoint:
    """Sub-satellite point at one instant."""
    lat: float
    lon: float
    timestamp: datetime


# (spec, time_span_hours, start_date) -> ordered ground track; empty = cannot propagate
OrbitSampler = Callable[[SatelliteOrbitSpec, float, Optional[datetime]], List[GroundTrackPoint]]


@lru_cache(maxsize=1)
def _timescale():
    return load.timescale()


def sample_count(time_span_hours: float) -> int:
    """
    Number of ground track samples for a time span.

    Two samples per minute, bounded to keep long runs affordable and short
    runs smooth.

    Examples
    --------
    >>> sample_count(1)
    200
    >>> sample_count(24)
    2000
    """
    total_minutes = time_span_hours * MINUTES_PER_HOUR
    return min(MAX_GROUND_TRACK_SAMPLES, max(MIN_GROUND_TRACK_SAMPLES, math.floor(total_minutes * SAMPLES_PER_MINUTE)))


def sample_times(start: datetime, time_span_hours: float, num_points: int) -> List[datetime]:
    """Evenly spaced sample instants in [start, start + span)."""
    total_minutes = time_span_hours * MINUTES_PER_HOUR
    step = total_minutes / num_points
    return [start + timedelta(minutes=i * step) for i in range(num_points)]


def validate_orbit_spec(spec: SatelliteOrbitSpec) -> None:
    """
    Validate a satellite spec before propagation.

    Raises
    ------
    InputValidationError
        If the TLE is malformed, the elements are incomplete or out of
        range, or the swath override is not positive.
    """
    if spec.swath_width_km is not None and not spec.swath_width_km > 0:
        raise InputValidationError(f"Satellite {spec.name!r}: swath_width_km must be > 0")
    if spec.has_tle:
        parse_tle(spec.tle)
    else:
        validate_elements(spec)


def resolve_tle_lines(spec: SatelliteOrbitSpec, epoch: datetime) -> Tuple[str, str]:
    """
    TLE lines for a spec: its own TLE when given, otherwise one generated
    from its elements at ``epoch``.
    """
    if spec.has_tle:
        _, line1, line2 = split_tle_lines(spec.tle)
        return line1, line2
    return generate_tle(epoch, spec)


def _as_utc(value: Optional[datetime]) -> datetime:
    if value is None:
        return datetime.now(timezone.utc)
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def propagate_ground_track(
    line1: str,
    line2: str,
    start: datetime,
    time_span_hours: float,
    name: str = '',
) -> List[GroundTrackPoint]:
    """
    Propagate a TLE with SGP4 and return its ground track.

    Parameters
    ----------
    line1, line2 : str
        TLE data lines.
    start : datetime
        Start time (timezone-aware UTC).
    time_span_hours : float
        Length of the window in hours.
    name : str
        Satellite name, for diagnostics.

    Returns
    -------
    List[GroundTrackPoint]
        Chronological sub-satellite points. Samples where SGP4 reports an
        error (non-finite position) are dropped.
    """
    ts = _timescale()
    num_points = sample_count(time_span_hours)
    times = sample_times(start, time_span_hours, num_points)

    satellite = EarthSatellite(line1, line2, name or None, ts)

    # Vectorized propagation over all sample instants
    t0 = ts.from_datetime(start)
    offsets_days = np.arange(num_points) * (time_span_hours / num_points) / HOURS_PER_DAY
    t = ts.tt_jd(t0.tt + offsets_days)
    geocentric = satellite.at(t)
    subpoints = wgs84.geographic_position_of(geocentric)

    lats = np.atleast_1d(subpoints.latitude.degrees)
    lons = np.atleast_1d(normalize_longitude(subpoints.longitude.degrees))
    valid = np.isfinite(lats) & np.isfinite(lons)

    if not valid.all():
        logger.debug(f"{name or 'satellite'}: dropped {int((~valid).sum())} samples with SGP4 errors")

    return [
        GroundTrackPoint(lat=float(lat), lon=float(lon), timestamp=when)
        for lat, lon, when, ok in zip(lats, lons, times, valid)
        if ok
    ]


def sample_ground_track(
    spec: SatelliteOrbitSpec,
    time_span_hours: float,
    start_date: Optional[datetime] = None,
) -> List[GroundTrackPoint]:
    """
    Default orbit sampler used by the revisit engine.

    Parameters
    ----------
    spec : SatelliteOrbitSpec
        Satellite orbit, as TLE text or orbital elements.
    time_span_hours : float
        Length of the analysis window in hours.
    start_date : datetime, optional
        Start of the window (UTC). Defaults to the current time.

    Returns
    -------
    List[GroundTrackPoint]
        Ordered ground track, or an empty list when the satellite cannot be
        propagated. Never raises for per-satellite problems.
    """
    start = _as_utc(start_date)

    try:
        line1, line2 = resolve_tle_lines(spec, start)
        points = propagate_ground_track(line1, line2, start, time_span_hours, spec.name)
    except InputValidationError as e:
        logger.warning(f"Cannot propagate {spec.name or 'satellite'}: {e}")
        return []
    except Exception as e:
        logger.warning(f"SGP4 propagation failed for {spec.name or 'satellite'}: {e}")
        return []

    logger.debug(f"{spec.name or 'satellite'}: {len(points)} ground track samples")
    return points


def ground_track_to_dataframe(points: List[GroundTrackPoint], satellite: str = '') -> pd.DataFrame:
    """
    Convert a ground track to a DataFrame.

    Returns
    -------
    pd.DataFrame
        DataFrame with columns: Satellite, Epoch, Latitude, Longitude
    """
    df = pd.DataFrame(
        [
            {'Satellite': satellite, 'Epoch': p.timestamp, 'Latitude': p.lat, 'Longitude': p.lon}
            for p in points
        ],
        columns=['Satellite', 'Epoch', 'Latitude', 'Longitude'],
    )
    if not df.empty:
        df['Epoch'] = pd.to_datetime(df['Epoch'], utc=True)
    return df
