"""
TLE (Two-Line Element) generation and parsing.

Generated TLEs follow the standard fixed-column layout so they can be fed
straight into SGP4 through Skyfield.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import List, Tuple

from .config import SatelliteOrbitSpec
from .constants import (
    EARTH_RADIUS_KM,
    TLE_LINE_LENGTH,
    DEFAULT_CLASSIFICATION,
    DEFAULT_INTL_DESIGNATOR,
    DEFAULT_ELEMENT_NUMBER,
)
from .exceptions import InputValidationError
from .utils import (
    mean_motion_from_altitude,
    normalize_angle,
    semi_major_axis_from_mean_motion,
    true_to_mean_anomaly,
)


@dataclass(frozen=True)
class TLEData:
    """Container for TLE lines and the orbital elements parsed from them."""
    name: str
    line1: str
    line2: str
    inclination_deg: float
    raan_deg: float
    eccentricity: float
    arg_of_perigee_deg: float
    mean_anomaly_deg: float
    mean_motion_rev_per_day: float
    epoch_year: int
    epoch_day: float
    semi_major_axis_km: float
    altitude_km: float


def calculate_checksum(line: str) -> int:
    """
    Calculate the checksum for a TLE line.

    Parameters
    ----------
    line : str
        TLE line (the checksum digit itself, if present, is ignored).

    Returns
    -------
    int
        Checksum digit (0-9).
    """
    checksum = 0
    for char in line[:68]:
        if char.isdigit():
            checksum += int(char)
        elif char == '-':
            checksum += 1
    return checksum % 10


def split_tle_lines(tle_text: str) -> Tuple[str, str, str]:
    """
    Split 2- or 3-line TLE text into (name, line1, line2).

    The name is empty for the 2-line form.

    Raises
    ------
    InputValidationError
        If the text does not hold exactly 2 or 3 non-empty lines.
    """
    if not tle_text or not tle_text.strip():
        raise InputValidationError("TLE text is empty")

    lines = [line.rstrip() for line in tle_text.strip().splitlines() if line.strip()]
    if len(lines) == 3:
        return lines[0].strip(), lines[1].strip(), lines[2].strip()
    if len(lines) == 2:
        return '', lines[0].strip(), lines[1].strip()
    raise InputValidationError(
        f"TLE must have exactly 2 or 3 lines (satellite name optional), got {len(lines)}"
    )


def _check_line(line: str, number: int) -> None:
    if not line.startswith(f"{number} "):
        raise InputValidationError(f"TLE line {number} must start with '{number} '")
    if len(line) < TLE_LINE_LENGTH:
        raise InputValidationError(
            f"TLE line {number} is {len(line)} characters, expected {TLE_LINE_LENGTH}"
        )
    expected = calculate_checksum(line)
    if line[68] != str(expected):
        raise InputValidationError(
            f"TLE line {number} checksum mismatch: found {line[68]!r}, expected {expected}"
        )


def parse_tle(tle_text: str) -> TLEData:
    """
    Parse TLE text into orbital elements.

    Parameters
    ----------
    tle_text : str
        Two data lines, optionally preceded by a satellite name line.

    Returns
    -------
    TLEData
        Parsed lines and elements.

    Raises
    ------
    InputValidationError
        If the TLE is malformed (line count, prefixes, length, checksum,
        or non-numeric fields).
    """
    name, line1, line2 = split_tle_lines(tle_text)
    _check_line(line1, 1)
    _check_line(line2, 2)

    if line1[2:7] != line2[2:7]:
        raise InputValidationError(
            f"TLE catalog numbers differ between lines: {line1[2:7]!r} vs {line2[2:7]!r}"
        )

    try:
        epoch_year = int(line1[18:20])
        epoch_day = float(line1[20:32])
        inclination = float(line2[8:16])
        raan = float(line2[17:25])
        eccentricity = float('0.' + line2[26:33].strip())
        arg_of_perigee = float(line2[34:42])
        mean_anomaly = float(line2[43:51])
        mean_motion = float(line2[52:63])
    except ValueError as e:
        raise InputValidationError(f"Failed to parse TLE: {e}") from e

    if mean_motion <= 0:
        raise InputValidationError(f"TLE mean motion must be positive, got {mean_motion}")

    semi_major_axis = semi_major_axis_from_mean_motion(mean_motion)

    return TLEData(
        name=name,
        line1=line1,
        line2=line2,
        inclination_deg=inclination,
        raan_deg=raan,
        eccentricity=eccentricity,
        arg_of_perigee_deg=arg_of_perigee,
        mean_anomaly_deg=mean_anomaly,
        mean_motion_rev_per_day=mean_motion,
        # Two-digit years: 57-99 are 1900s, 00-56 are 2000s
        epoch_year=2000 + epoch_year if epoch_year < 57 else 1900 + epoch_year,
        epoch_day=epoch_day,
        semi_major_axis_km=semi_major_axis,
        altitude_km=semi_major_axis - EARTH_RADIUS_KM,
    )


def tle_epoch_datetime(tle: TLEData) -> datetime:
    """Epoch of a parsed TLE as an aware UTC datetime."""
    start = datetime(tle.epoch_year, 1, 1, tzinfo=timezone.utc)
    return start + timedelta(days=tle.epoch_day - 1)


def _format_epoch(epoch: datetime) -> str:
    epoch = epoch.astimezone(timezone.utc) if epoch.tzinfo else epoch.replace(tzinfo=timezone.utc)
    day_of_year = epoch.timetuple().tm_yday
    fraction = (
        epoch.hour * 3600 + epoch.minute * 60 + epoch.second + epoch.microsecond / 1e6
    ) / 86400.0
    return f"{epoch.year % 100:02d}{day_of_year + fraction:012.8f}"


def generate_tle(
    epoch: datetime,
    spec: SatelliteOrbitSpec,
    sat_num: int = 1,
) -> Tuple[str, str]:
    """
    Generate a TLE for a satellite from its orbital elements.

    Parameters
    ----------
    epoch : datetime
        Epoch time for the TLE (timezone-aware UTC; naive is treated as UTC).
    spec : SatelliteOrbitSpec
        Orbital elements. ``altitude_km`` is the mean altitude used for the
        mean motion; ``mean_anomaly_deg`` wins over ``true_anomaly_deg``.
    sat_num : int
        Satellite catalog number (1-99999).

    Returns
    -------
    tuple of (str, str)
        The two lines of the TLE.

    Raises
    ------
    InputValidationError
        If the elements are missing or out of range.
    """
    validate_elements(spec)
    if not 0 < sat_num < 100000:
        raise InputValidationError(f"Satellite number must be in 1..99999, got {sat_num}")

    mean_motion = mean_motion_from_altitude(spec.altitude_km)
    if spec.mean_anomaly_deg is not None:
        mean_anomaly = normalize_angle(spec.mean_anomaly_deg)
    else:
        mean_anomaly = true_to_mean_anomaly(spec.true_anomaly_deg, spec.eccentricity)

    ecc_digits = min(int(round(spec.eccentricity * 1e7)), 9999999)

    # Line 1: zero drag terms, ephemeris type 0
    line1 = (
        f"1 {sat_num:05d}{DEFAULT_CLASSIFICATION} {DEFAULT_INTL_DESIGNATOR:<8} "
        f"{_format_epoch(epoch)}  .00000000  00000-0  00000-0 0 {DEFAULT_ELEMENT_NUMBER:>4}"
    )
    line1 = line1 + str(calculate_checksum(line1))

    # Line 2
    line2 = (
        f"2 {sat_num:05d} {spec.inclination_deg:8.4f} {normalize_angle(spec.raan_deg):8.4f} "
        f"{ecc_digits:07d} {normalize_angle(spec.arg_of_perigee_deg):8.4f} "
        f"{mean_anomaly:8.4f} {mean_motion:11.8f}{0:5d}"
    )
    line2 = line2 + str(calculate_checksum(line2))

    return line1, line2


def validate_elements(spec: SatelliteOrbitSpec) -> None:
    """
    Check that an element-based spec can be turned into a TLE.

    Raises
    ------
    InputValidationError
        If altitude or inclination is missing, or any element is out of range.
    """
    if spec.altitude_km is None or spec.inclination_deg is None:
        raise InputValidationError(
            f"Satellite {spec.name!r} needs altitude_km and inclination_deg or a TLE"
        )
    if not spec.altitude_km > 0:
        raise InputValidationError(f"Satellite {spec.name!r}: altitude_km must be > 0")
    if not 0 <= spec.inclination_deg <= 180:
        raise InputValidationError(
            f"Satellite {spec.name!r}: inclination_deg must be in [0, 180], got {spec.inclination_deg}"
        )
    if not 0 <= spec.eccentricity < 1:
        raise InputValidationError(
            f"Satellite {spec.name!r}: eccentricity must be in [0, 1), got {spec.eccentricity}"
        )
    # Perigee must clear the Earth's surface
    semi_major_axis = EARTH_RADIUS_KM + spec.altitude_km
    if semi_major_axis * (1 - spec.eccentricity) <= EARTH_RADIUS_KM:
        raise InputValidationError(f"Satellite {spec.name!r}: perigee is below the surface")


def format_tle(name: str, line1: str, line2: str) -> str:
    """Join TLE lines into 3-line text (2-line when no name is given)."""
    lines: List[str] = [name] if name else []
    lines.extend([line1, line2])
    return '\n'.join(lines)
