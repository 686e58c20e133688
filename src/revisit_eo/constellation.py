"""
Constellation builders.

Expand a single base orbit into the satellite list of a Walker or train
constellation. Only element-based orbits can be expanded; a TLE pins a
single satellite's state.
"""

import logging
from dataclasses import replace
from typing import List

from .config import ConstellationConfig, SatelliteOrbitSpec
from .exceptions import ConfigurationError, InputValidationError
from .utils import normalize_angle

logger = logging.getLogger(__name__)

WALKER_PATTERNS = ('delta', 'star')
CONSTELLATION_TYPES = ('single', 'walker', 'train')


def _require_elements(base: SatelliteOrbitSpec) -> None:
    if base.has_tle:
        raise InputValidationError(
            f"Cannot build a constellation from TLE-based satellite {base.name!r}; give orbital elements"
        )


def _base_anomaly(base: SatelliteOrbitSpec) -> float:
    # Mean anomaly wins when set, matching TLE generation
    if base.mean_anomaly_deg is not None:
        return base.mean_anomaly_deg
    return base.true_anomaly_deg


def _with_anomaly(base: SatelliteOrbitSpec, name: str, raan_deg: float, anomaly_deg: float) -> SatelliteOrbitSpec:
    if base.mean_anomaly_deg is not None:
        return replace(base, name=name, raan_deg=normalize_angle(raan_deg), mean_anomaly_deg=normalize_angle(anomaly_deg))
    return replace(base, name=name, raan_deg=normalize_angle(raan_deg), true_anomaly_deg=normalize_angle(anomaly_deg))


def single_satellite(base: SatelliteOrbitSpec) -> List[SatelliteOrbitSpec]:
    """A one-satellite 'constellation'."""
    return [base]


def walker_constellation(
    base: SatelliteOrbitSpec,
    total_satellites: int,
    planes: int,
    phasing: int = 0,
    pattern: str = 'delta',
) -> List[SatelliteOrbitSpec]:
    """
    Generate a Walker constellation T/P/F around a base orbit.

    Parameters
    ----------
    base : SatelliteOrbitSpec
        Reference orbit for plane 1, satellite 1.
    total_satellites : int
        Total number of satellites T.
    planes : int
        Number of orbital planes P; must divide T.
    phasing : int
        Phasing factor F in [0, P - 1].
    pattern : str
        'delta' spreads plane RAANs over 360 deg, 'star' over 180 deg.

    Returns
    -------
    List[SatelliteOrbitSpec]
        T satellites, ordered plane by plane.

    Examples
    --------
    >>> sats = walker_constellation(base, 6, 3, 1)
    >>> [s.raan_deg for s in sats]
    [0.0, 0.0, 120.0, 120.0, 240.0, 240.0]
    """
    _require_elements(base)
    if pattern not in WALKER_PATTERNS:
        raise InputValidationError(f"Walker pattern must be one of {WALKER_PATTERNS}, got {pattern!r}")
    if total_satellites < 1 or planes < 1:
        raise InputValidationError("Walker constellation needs at least one satellite and one plane")
    if total_satellites % planes != 0:
        raise InputValidationError(
            f"Total satellites ({total_satellites}) must be divisible by planes ({planes})"
        )
    if not 0 <= phasing < planes:
        raise InputValidationError(f"Phasing must be in [0, {planes - 1}], got {phasing}")

    sats_per_plane = total_satellites // planes
    raan_span = 360.0 if pattern == 'delta' else 180.0
    raan_spacing = raan_span / planes
    in_plane_spacing = 360.0 / sats_per_plane
    phase_offset = phasing * 360.0 / total_satellites

    prefix = base.name or 'SAT'
    anomaly0 = _base_anomaly(base)

    satellites = []
    for plane_idx in range(planes):
        raan = base.raan_deg + plane_idx * raan_spacing
        for sat_idx in range(sats_per_plane):
            anomaly = anomaly0 + sat_idx * in_plane_spacing + plane_idx * phase_offset
            name = f"{prefix}-P{plane_idx + 1}-S{sat_idx + 1}"
            satellites.append(_with_anomaly(base, name, raan, anomaly))

    logger.info(
        f"Walker {pattern} {total_satellites}/{planes}/{phasing}: {sats_per_plane} satellites per plane"
    )
    return satellites


def satellite_train(
    base: SatelliteOrbitSpec,
    count: int,
    in_plane_spacing_deg: float,
) -> List[SatelliteOrbitSpec]:
    """
    Satellites following each other in the base orbit's plane.

    Each satellite trails the previous one by ``in_plane_spacing_deg`` of
    anomaly; RAAN and inclination are shared.
    """
    _require_elements(base)
    if count < 1:
        raise InputValidationError(f"Train needs at least one satellite, got {count}")

    prefix = base.name or 'SAT'
    anomaly0 = _base_anomaly(base)
    return [
        _with_anomaly(base, f"{prefix}-{i + 1}", base.raan_deg, anomaly0 + i * in_plane_spacing_deg)
        for i in range(count)
    ]


def build_constellation(config: ConstellationConfig) -> List[SatelliteOrbitSpec]:
    """
    Expand a constellation config into its satellites.

    Raises
    ------
    ConfigurationError
        If the type is unknown or no base orbit is given.
    InputValidationError
        If the layout parameters are inconsistent.
    """
    if config.type not in CONSTELLATION_TYPES:
        raise ConfigurationError(
            f"Constellation type must be one of {CONSTELLATION_TYPES}, got {config.type!r}"
        )
    if config.base is None:
        raise ConfigurationError("Constellation requires a 'base' orbit")

    if config.type == 'walker':
        return walker_constellation(
            config.base, config.total_satellites, config.planes, config.phasing, config.pattern
        )
    if config.type == 'train':
        return satellite_train(config.base, config.total_satellites, config.in_plane_spacing_deg)
    return single_satellite(config.base)
