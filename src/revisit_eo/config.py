"""
Configuration dataclasses and loading utilities.

All configuration is managed through typed dataclasses for validation
and IDE support.
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional, Any

import yaml

from .constants import (
    DEFAULT_TIME_SPAN_HOURS,
    DEFAULT_GRID_RESOLUTION_DEG,
    DEFAULT_SWATH_WIDTH_KM,
    DEFAULT_DAYTIME_START,
    DEFAULT_DAYTIME_END,
    DEFAULT_MAX_WORKERS,
    SECONDS_PER_HOUR,
    SLOW_GRID_RESOLUTION_DEG,
)
from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SatelliteOrbitSpec:
    """Orbit definition for a single satellite, fixed for the whole run."""
    name: str = ""
    altitude_km: Optional[float] = None
    inclination_deg: Optional[float] = None
    raan_deg: float = 0.0
    true_anomaly_deg: float = 0.0
    eccentricity: float = 0.0
    arg_of_perigee_deg: float = 0.0
    # Takes precedence over true_anomaly_deg when given
    mean_anomaly_deg: Optional[float] = None
    # Optional: provide a 2- or 3-line TLE instead of elements
    tle: Optional[str] = None
    # Optional: override the run's swath width for this satellite
    swath_width_km: Optional[float] = None

    @property
    def has_tle(self) -> bool:
        """True when the spec carries TLE text rather than only elements."""
        return bool(self.tle and self.tle.strip())


@dataclass(frozen=True)
class DaytimeWindow:
    """Local mean solar time window, as HHMM codes (e.g. 1030 for 10:30)."""
    start_code: int = DEFAULT_DAYTIME_START
    end_code: int = DEFAULT_DAYTIME_END

    def validate(self) -> None:
        for label, code in (('start', self.start_code), ('end', self.end_code)):
            if not isinstance(code, int) or isinstance(code, bool):
                raise ConfigurationError(f"Daytime {label} must be an HHMM integer, got {code!r}")
            hours, minutes = divmod(code, 100)
            if code < 0 or hours > 23 or minutes > 59:
                raise ConfigurationError(f"Daytime {label} {code} is not a valid HHMM time")
        if self.start_code > self.end_code:
            raise ConfigurationError(
                f"Daytime window start {self.start_code:04d} is after end {self.end_code:04d}"
            )


@dataclass(frozen=True)
class AnalysisParameters:
    """Run-level parameters for a revisit analysis."""
    time_span_hours: float = DEFAULT_TIME_SPAN_HOURS
    grid_resolution_deg: float = DEFAULT_GRID_RESOLUTION_DEG
    # Full cross-track swath width
    swath_width_km: float = DEFAULT_SWATH_WIDTH_KM
    # Absolute propagation window (UTC); start defaults to "now" at run time
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    # None disables the daytime filter
    daytime: Optional[DaytimeWindow] = None

    @property
    def effective_time_span_hours(self) -> float:
        """Time span of the run; derived from start/end dates when both are set."""
        if self.start_date is not None and self.end_date is not None:
            start = _as_utc(self.start_date)
            end = _as_utc(self.end_date)
            return (end - start).total_seconds() / SECONDS_PER_HOUR
        return self.time_span_hours

    def validate(self) -> None:
        """
        Check that the parameters describe a runnable analysis.

        Raises
        ------
        ConfigurationError
            If the time span, grid resolution, swath width, or daytime window
            is structurally invalid.
        """
        span = self.effective_time_span_hours
        if not _is_positive_number(span):
            if self.start_date is not None and self.end_date is not None:
                raise ConfigurationError(
                    f"end_date {self.end_date} must be after start_date {self.start_date}"
                )
            raise ConfigurationError(f"time_span_hours must be a finite number > 0, got {self.time_span_hours!r}")
        if not _is_positive_number(self.grid_resolution_deg):
            raise ConfigurationError(
                f"grid_resolution_deg must be a finite number > 0, got {self.grid_resolution_deg!r}"
            )
        if not _is_positive_number(self.swath_width_km):
            raise ConfigurationError(f"swath_width_km must be a finite number > 0, got {self.swath_width_km!r}")
        if self.daytime is not None:
            self.daytime.validate()
        if self.grid_resolution_deg < SLOW_GRID_RESOLUTION_DEG:
            logger.warning(
                f"Grid resolution {self.grid_resolution_deg} deg is very fine; "
                f"the analysis may take a long time and use a lot of memory"
            )


@dataclass
class ConstellationConfig:
    """Constellation layout expanded from a single base orbit."""
    # 'single', 'walker' or 'train'
    type: str = 'single'
    base: Optional[SatelliteOrbitSpec] = None
    total_satellites: int = 1
    planes: int = 1
    phasing: int = 0
    # Walker pattern: 'delta' spreads planes over 360 deg, 'star' over 180 deg
    pattern: str = 'delta'
    # Along-track spacing for 'train' constellations
    in_plane_spacing_deg: float = 30.0


@dataclass
class AnalysisConfig:
    """Main configuration for a revisit analysis run."""
    parameters: AnalysisParameters = field(default_factory=AnalysisParameters)

    # Explicitly listed satellites
    satellites: List[SatelliteOrbitSpec] = field(default_factory=list)

    # Optional generated constellation (added to explicit satellites)
    constellation: Optional[ConstellationConfig] = None

    # Concurrent propagation workers (1 = sequential)
    max_workers: int = DEFAULT_MAX_WORKERS

    # Output paths
    output_dir: str = "results"
    csv_filename: str = "revisit_analysis.csv"
    excel_filename: str = "revisit_summary.xlsx"

    # Raw config for extended parameters
    raw_config: Dict[str, Any] = field(default_factory=dict)

    @property
    def output_path(self) -> Path:
        """Get output directory path."""
        return Path(self.output_dir)


def _is_positive_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value) and value > 0


def _as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _parse_datetime(value: Any) -> Optional[datetime]:
    """Parse an ISO string or YAML date/datetime into an aware UTC datetime."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return _as_utc(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if isinstance(value, str):
        text = value.strip()
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        try:
            return _as_utc(datetime.fromisoformat(text))
        except ValueError as e:
            raise ConfigurationError(f"Invalid date {value!r}: {e}") from e
    raise ConfigurationError(f"Invalid date {value!r}")


def _optional_float(data: Dict[str, Any], key: str, default: Optional[float] = None) -> Optional[float]:
    value = data.get(key, default)
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"'{key}' must be a number, got {value!r}") from e


def _parse_hhmm(data: Dict[str, Any], key: str, default: int) -> int:
    """
    Read an HHMM daytime code.

    Unquoted YAML values with a leading zero are octal (0700 loads as 448), so
    early-morning codes must be quoted; quoted codes are read as decimal.
    """
    value = data.get(key, default)
    if value is None:
        return default
    if isinstance(value, str):
        text = value.strip()
        if not (text.isascii() and text.isdigit()):
            raise ConfigurationError(f"'{key}' must be an HHMM time such as \"0730\", got {value!r}")
        return int(text, 10)
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def _parse_satellite(data: Dict[str, Any], index: int = 0) -> SatelliteOrbitSpec:
    """Parse satellite config from dict."""
    if not isinstance(data, dict):
        raise ConfigurationError(f"Satellite entry {index} must be a mapping")
    return SatelliteOrbitSpec(
        name=str(data.get('name', f"SAT-{index + 1}")),
        altitude_km=_optional_float(data, 'altitude_km'),
        inclination_deg=_optional_float(data, 'inclination_deg'),
        raan_deg=_optional_float(data, 'raan_deg', 0.0),
        true_anomaly_deg=_optional_float(data, 'true_anomaly_deg', 0.0),
        eccentricity=_optional_float(data, 'eccentricity', 0.0),
        arg_of_perigee_deg=_optional_float(data, 'arg_of_perigee_deg', 0.0),
        mean_anomaly_deg=_optional_float(data, 'mean_anomaly_deg'),
        tle=data.get('tle'),
        swath_width_km=_optional_float(data, 'swath_width_km'),
    )


def _parse_constellation(data: Dict[str, Any]) -> ConstellationConfig:
    """Parse constellation config from dict."""
    base = data.get('base')
    return ConstellationConfig(
        type=data.get('type', 'single'),
        base=_parse_satellite(base) if base is not None else None,
        total_satellites=int(data.get('total_satellites', 1)),
        planes=int(data.get('planes', 1)),
        phasing=int(data.get('phasing', 0)),
        pattern=data.get('pattern', 'delta'),
        in_plane_spacing_deg=float(data.get('in_plane_spacing_deg', 30.0)),
    )


def _parse_parameters(data: Dict[str, Any]) -> AnalysisParameters:
    """Parse run-level analysis parameters from the top-level dict."""
    daytime = None
    if data.get('only_daytime_revisit', False):
        daytime = DaytimeWindow(
            start_code=_parse_hhmm(data, 'local_daytime_start', DEFAULT_DAYTIME_START),
            end_code=_parse_hhmm(data, 'local_daytime_end', DEFAULT_DAYTIME_END),
        )

    return AnalysisParameters(
        time_span_hours=_optional_float(data, 'time_span_hours', DEFAULT_TIME_SPAN_HOURS),
        grid_resolution_deg=_optional_float(data, 'grid_resolution_deg', DEFAULT_GRID_RESOLUTION_DEG),
        swath_width_km=_optional_float(data, 'swath_width_km', DEFAULT_SWATH_WIDTH_KM),
        start_date=_parse_datetime(data.get('start_date')),
        end_date=_parse_datetime(data.get('end_date')),
        daytime=daytime,
    )


def load_config(config_path: str) -> AnalysisConfig:
    """
    Load configuration from a YAML file.

    Parameters
    ----------
    config_path : str
        Path to the YAML configuration file.

    Returns
    -------
    AnalysisConfig
        Parsed and validated configuration.

    Raises
    ------
    ConfigurationError
        If the file is not a mapping or the run parameters are invalid.
    """
    with open(config_path, 'r') as f:
        data = yaml.safe_load(f)

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration file {config_path} must contain a mapping")

    parameters = _parse_parameters(data)
    parameters.validate()

    satellites = [_parse_satellite(s, i) for i, s in enumerate(data.get('satellites', []) or [])]
    constellation = None
    if data.get('constellation'):
        constellation = _parse_constellation(data['constellation'])

    config = AnalysisConfig(
        parameters=parameters,
        satellites=satellites,
        constellation=constellation,
        max_workers=int(data.get('max_workers', DEFAULT_MAX_WORKERS)),
        output_dir=data.get('output_dir', 'results'),
        csv_filename=data.get('csv_filename', 'revisit_analysis.csv'),
        excel_filename=data.get('excel_filename', 'revisit_summary.xlsx'),
        raw_config=data,
    )

    return config


def _satellite_to_dict(sat: SatelliteOrbitSpec) -> Dict[str, Any]:
    data = {
        'name': sat.name,
        'altitude_km': sat.altitude_km,
        'inclination_deg': sat.inclination_deg,
        'raan_deg': sat.raan_deg,
        'true_anomaly_deg': sat.true_anomaly_deg,
        'eccentricity': sat.eccentricity,
        'arg_of_perigee_deg': sat.arg_of_perigee_deg,
    }
    if sat.mean_anomaly_deg is not None:
        data['mean_anomaly_deg'] = sat.mean_anomaly_deg
    if sat.tle:
        data['tle'] = sat.tle
    if sat.swath_width_km is not None:
        data['swath_width_km'] = sat.swath_width_km
    return data


def save_config(config: AnalysisConfig, config_path: str) -> None:
    """
    Save configuration to a YAML file.

    Parameters
    ----------
    config : AnalysisConfig
        Configuration to save.
    config_path : str
        Path to write the YAML file.
    """
    params = config.parameters
    window = params.daytime if params.daytime is not None else DaytimeWindow()
    data = {
        'start_date': params.start_date.isoformat() if params.start_date else None,
        'end_date': params.end_date.isoformat() if params.end_date else None,
        'time_span_hours': params.time_span_hours,
        'grid_resolution_deg': params.grid_resolution_deg,
        'swath_width_km': params.swath_width_km,
        'only_daytime_revisit': params.daytime is not None,
        'local_daytime_start': f"{window.start_code:04d}",
        'local_daytime_end': f"{window.end_code:04d}",
        'max_workers': config.max_workers,
        'satellites': [_satellite_to_dict(s) for s in config.satellites],
        'output_dir': config.output_dir,
        'csv_filename': config.csv_filename,
        'excel_filename': config.excel_filename,
    }

    if config.constellation is not None:
        c = config.constellation
        data['constellation'] = {
            'type': c.type,
            'base': _satellite_to_dict(c.base) if c.base is not None else None,
            'total_satellites': c.total_satellites,
            'planes': c.planes,
            'phasing': c.phasing,
            'pattern': c.pattern,
            'in_plane_spacing_deg': c.in_plane_spacing_deg,
        }

    with open(config_path, 'w') as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False)
