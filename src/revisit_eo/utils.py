"""
Shared utility functions for revisit analysis.

Consolidates common orbital and longitude calculations to avoid code duplication.
"""

from typing import Union

import numpy as np

from .constants import EARTH_RADIUS_KM, EARTH_MU_KM3_S2, SECONDS_PER_DAY


def normalize_longitude(lon: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
    """
    Normalize longitude to [-180, 180) range.

    Parameters
    ----------
    lon : float or array
        Longitude(s) in degrees.

    Returns
    -------
    float or array
        Normalized longitude(s).

    Examples
    --------
    >>> normalize_longitude(190.0)
    -170.0
    >>> normalize_longitude(-181.0)
    179.0
    """
    return ((lon + 180) % 360) - 180


def normalize_angle(angle_deg: float) -> float:
    """Normalize an angle to [0, 360)."""
    return angle_deg % 360.0


def mean_motion_from_altitude(altitude_km: float) -> float:
    """
    Mean motion of a circular orbit in revolutions per day.

    Parameters
    ----------
    altitude_km : float
        Orbital altitude above Earth's surface in km.

    Returns
    -------
    float
        Mean motion in rev/day.
    """
    semi_major_axis = EARTH_RADIUS_KM + altitude_km
    return float(np.sqrt(EARTH_MU_KM3_S2 / semi_major_axis ** 3) * SECONDS_PER_DAY / (2 * np.pi))


def semi_major_axis_from_mean_motion(mean_motion_rev_per_day: float) -> float:
    """
    Semi-major axis in km for a mean motion given in revolutions per day.
    """
    n_rad_s = mean_motion_rev_per_day * 2 * np.pi / SECONDS_PER_DAY
    return float((EARTH_MU_KM3_S2 / n_rad_s ** 2) ** (1.0 / 3.0))


def true_to_mean_anomaly(true_anomaly_deg: float, eccentricity: float = 0.0) -> float:
    """
    Convert true anomaly to mean anomaly through the eccentric anomaly.

    For circular orbits the two are identical.

    Parameters
    ----------
    true_anomaly_deg : float
        True anomaly in degrees.
    eccentricity : float
        Orbital eccentricity in [0, 1).

    Returns
    -------
    float
        Mean anomaly in degrees, in [0, 360).
    """
    if eccentricity == 0:
        return normalize_angle(true_anomaly_deg)

    nu = np.radians(true_anomaly_deg)
    eccentric_anomaly = 2 * np.arctan2(
        np.sqrt(1 - eccentricity) * np.sin(nu / 2),
        np.sqrt(1 + eccentricity) * np.cos(nu / 2),
    )
    mean_anomaly = eccentric_anomaly - eccentricity * np.sin(eccentric_anomaly)
    return normalize_angle(float(np.degrees(mean_anomaly)))
