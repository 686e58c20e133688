"""
Swath interpolation between consecutive ground track samples.

Ground tracks are sampled every ~30 s, which at LEO speeds is a few hundred
km apart. Painting only the samples would leave gaps in the grid, so each
segment is bridged with evenly spaced coverage points.
"""

from dataclasses import dataclass
from typing import List, Optional

from .constants import INTERPOLATION_STEPS, KM_PER_DEGREE
from .orbits import GroundTrackPoint
from .utils import normalize_longitude


@dataclass(frozen=True)
class CoveragePoint:
    """Centre of one sensor footprint to paint into the grid."""
    lat: float
    lon: float
    half_width_deg: float


def swath_half_width_deg(swath_width_km: float) -> float:
    """
    Convert a full swath width to a half-width in degrees.

    Uses a flat-Earth 111 km/deg conversion, adequate for regional swaths.

    Examples
    --------
    >>> round(swath_half_width_deg(120.0), 3)
    0.541
    """
    return (swath_width_km / 2) / KM_PER_DEGREE


def interpolate_segment(
    p1: GroundTrackPoint,
    p2: Optional[GroundTrackPoint],
    half_width_deg: float,
    steps: int = INTERPOLATION_STEPS,
) -> List[CoveragePoint]:
    """
    Interpolate coverage points between two ground track samples.

    Parameters
    ----------
    p1 : GroundTrackPoint
        Segment start.
    p2 : GroundTrackPoint or None
        Segment end. None for the last sample of a track.
    half_width_deg : float
        Swath half-width attached to every coverage point.
    steps : int
        Number of interpolation intervals; ``steps + 1`` points are returned,
        both endpoints included.

    Returns
    -------
    List[CoveragePoint]
        Coverage points along the segment, taking the short way across the
        dateline.
    """
    if p2 is None:
        return [CoveragePoint(p1.lat, p1.lon, half_width_deg)]

    lon1 = p1.lon
    lon2 = p2.lon
    # Cross the dateline the short way round
    if abs(lon2 - lon1) > 180:
        if lon2 > lon1:
            lon2 -= 360
        else:
            lon2 += 360

    points = []
    for i in range(steps + 1):
        t = i / steps
        lat = p1.lat + (p2.lat - p1.lat) * t
        lon = lon1 + (lon2 - lon1) * t
        if lon > 180 or lon < -180:
            lon = normalize_longitude(lon)
        points.append(CoveragePoint(lat, lon, half_width_deg))

    return points
