"""
Satellite Revisit Analysis Package

A Python package for computing how often points on Earth fall within the
sensor swath of a satellite or constellation, using a global
latitude/longitude revisit-count grid.
"""

__version__ = "0.1.0"

from .constants import (
    EARTH_RADIUS_KM,
    EARTH_MU_KM3_S2,
    KM_PER_DEGREE,
)
from .exceptions import (
    RevisitAnalysisError,
    ConfigurationError,
    InputValidationError,
    PropagationFailure,
    AnalysisCancelled,
)
from .utils import normalize_longitude
from .config import (
    AnalysisConfig,
    AnalysisParameters,
    ConstellationConfig,
    DaytimeWindow,
    SatelliteOrbitSpec,
    load_config,
    save_config,
)
from .tle import (
    TLEData,
    calculate_checksum,
    generate_tle,
    parse_tle,
)
from .orbits import (
    GroundTrackPoint,
    sample_ground_track,
)
from .swath import (
    CoveragePoint,
    interpolate_segment,
    swath_half_width_deg,
)
from .daytime import DaytimeFilter
from .grid import (
    CoverageGrid,
    footprint_indices,
    grid_dimensions,
)
from .statistics import (
    RevisitStatistics,
    compute_revisit_statistics,
)
from .engine import (
    RevisitAnalysisEngine,
    RevisitResult,
    SkippedSatellite,
    AnalysisJob,
    start_background_analysis,
)
from .constellation import (
    build_constellation,
    satellite_train,
    single_satellite,
    walker_constellation,
)
from .reports import (
    generate_excel_report,
    grid_to_dataframe,
    statistics_to_dataframe,
    write_csv_report,
)
