"""
Physical constants and analysis defaults used throughout the revisit analysis.

Centralizes magic numbers to ensure consistency and easy updates.
"""

# =============================================================================
# Earth Parameters (WGS84)
# =============================================================================
EARTH_RADIUS_KM = 6378.137  # Equatorial radius in km
EARTH_MU_KM3_S2 = 398600.4418  # Gravitational parameter (km^3/s^2)

# Flat-Earth conversion used for swath widths
KM_PER_DEGREE = 111.0

# =============================================================================
# Time Constants
# =============================================================================
SECONDS_PER_HOUR = 3600
SECONDS_PER_DAY = 86400
MINUTES_PER_HOUR = 60
HOURS_PER_DAY = 24

# Mean solar time: the Sun moves 15 degrees of longitude per hour
DEGREES_PER_SOLAR_HOUR = 15.0

# =============================================================================
# Ground Track Sampling
# =============================================================================
MIN_GROUND_TRACK_SAMPLES = 200
MAX_GROUND_TRACK_SAMPLES = 2000
SAMPLES_PER_MINUTE = 2

# Interpolation steps between consecutive ground track samples
INTERPOLATION_STEPS = 5

# =============================================================================
# Grid Painting
# =============================================================================
# Lower bound on cos(latitude) when widening footprints towards the poles
MIN_LATITUDE_COSINE = 0.1

# Resolutions finer than this are slow at global scale
SLOW_GRID_RESOLUTION_DEG = 0.1

# =============================================================================
# Analysis Defaults
# =============================================================================
DEFAULT_TIME_SPAN_HOURS = 24.0
DEFAULT_GRID_RESOLUTION_DEG = 1.0
DEFAULT_SWATH_WIDTH_KM = 120.0
DEFAULT_DAYTIME_START = 1000  # 10:00 local
DEFAULT_DAYTIME_END = 1700  # 17:00 local
DEFAULT_MAX_WORKERS = 1
DEFAULT_CHUNK_SIZE = 250

# =============================================================================
# TLE Defaults
# =============================================================================
TLE_LINE_LENGTH = 69
DEFAULT_CLASSIFICATION = 'U'
DEFAULT_INTL_DESIGNATOR = '99999A'
DEFAULT_ELEMENT_NUMBER = 999
