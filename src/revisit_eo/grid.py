"""
Global latitude/longitude revisit-count grid.

Row 0 is the northernmost band and column 0 starts at -180 deg longitude.
The index-range math is kept in the pure function `footprint_indices` so the
seam wrap and pole clamp can be tested without a grid.
"""

import math
from typing import List, Tuple

import numpy as np

from .constants import MIN_LATITUDE_COSINE
from .exceptions import ConfigurationError

IndexRange = Tuple[int, int]


def grid_dimensions(resolution_deg: float) -> Tuple[int, int]:
    """
    Grid shape for a resolution.

    Returns
    -------
    tuple of (int, int)
        (rows, cols) = (ceil(180 / R), ceil(360 / R)).

    Examples
    --------
    >>> grid_dimensions(1.0)
    (180, 360)
    >>> grid_dimensions(7.0)
    (26, 52)
    """
    if isinstance(resolution_deg, bool) or not isinstance(resolution_deg, (int, float)):
        raise ConfigurationError(f"grid_resolution_deg must be a number, got {resolution_deg!r}")
    if not math.isfinite(resolution_deg) or resolution_deg <= 0:
        raise ConfigurationError(f"grid_resolution_deg must be finite and > 0, got {resolution_deg!r}")
    return math.ceil(180 / resolution_deg), math.ceil(360 / resolution_deg)


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def footprint_indices(
    lat: float,
    lon: float,
    half_width_deg: float,
    rows: int,
    cols: int,
) -> Tuple[IndexRange, List[IndexRange]]:
    """
    Grid cells covered by a square footprint.

    Parameters
    ----------
    lat, lon : float
        Footprint centre in degrees.
    half_width_deg : float
        Half-width of the footprint in degrees of latitude. The longitude
        half-width is widened by 1 / max(0.1, cos(lat)).
    rows, cols : int
        Grid shape.

    Returns
    -------
    row_range : tuple of (int, int)
        Inclusive (first_row, last_row), clamped to the grid.
    col_ranges : list of tuple of (int, int)
        One inclusive column range, or two when the footprint crosses the
        +/-180 deg seam.
    """
    lat_min = max(-90.0, lat - half_width_deg)
    lat_max = min(90.0, lat + half_width_deg)

    lon_half_width = half_width_deg / max(MIN_LATITUDE_COSINE, math.cos(math.radians(lat)))
    lon_min = lon - lon_half_width
    lon_max = lon + lon_half_width

    # Max latitude maps to the smaller row index
    min_row = _clamp(math.floor((90 - lat_max) * rows / 180), 0, rows - 1)
    max_row = _clamp(math.floor((90 - lat_min) * rows / 180), 0, rows - 1)

    # Unclamped; may fall outside [0, cols - 1] near the seam
    min_col = math.floor((lon_min + 180) * cols / 360)
    max_col = math.floor((lon_max + 180) * cols / 360)

    if max_col - min_col + 1 >= cols:
        return (min_row, max_row), [(0, cols - 1)]

    min_col %= cols
    max_col %= cols
    if min_col <= max_col:
        return (min_row, max_row), [(min_col, max_col)]

    return (min_row, max_row), [(min_col, cols - 1), (0, max_col)]


class CoverageGrid:
    """
    Dense revisit-count accumulator owned by a single analysis run.

    Cells start at zero and only ever increase while painting. After
    `finalize` the counts are read-only.

    Parameters
    ----------
    resolution_deg : float
        Cell size in degrees (> 0).
    """

    def __init__(self, resolution_deg: float):
        self.rows, self.cols = grid_dimensions(resolution_deg)
        self.resolution_deg = float(resolution_deg)
        self._counts = np.zeros((self.rows, self.cols), dtype=np.int32)
        self._finalized = False

    @property
    def shape(self) -> Tuple[int, int]:
        return self.rows, self.cols

    @property
    def total_cells(self) -> int:
        return self.rows * self.cols

    @property
    def finalized(self) -> bool:
        return self._finalized

    @property
    def counts(self) -> np.ndarray:
        """Read-only view of the revisit counts."""
        view = self._counts.view()
        view.flags.writeable = False
        return view

    def paint(self, lat: float, lon: float, half_width_deg: float) -> None:
        """
        Add one visit to every cell under a footprint.

        Raises
        ------
        RuntimeError
            If the grid has been finalized.
        """
        if self._finalized:
            raise RuntimeError("Cannot paint a finalized coverage grid")

        (row0, row1), col_ranges = footprint_indices(lat, lon, half_width_deg, self.rows, self.cols)
        for col0, col1 in col_ranges:
            self._counts[row0:row1 + 1, col0:col1 + 1] += 1

    def finalize(self) -> 'CoverageGrid':
        """Freeze the counts at the end of the run."""
        self._finalized = True
        self._counts.flags.writeable = False
        return self

    def cell_centers(self) -> Tuple[np.ndarray, np.ndarray]:
        """
        Latitude and longitude of every cell centre.

        Returns
        -------
        lats : np.ndarray
            Shape (rows,), north to south.
        lons : np.ndarray
            Shape (cols,), west to east.
        """
        lats = 90.0 - (np.arange(self.rows) + 0.5) * 180.0 / self.rows
        lons = -180.0 + (np.arange(self.cols) + 0.5) * 360.0 / self.cols
        return lats, lons

    def __repr__(self) -> str:
        state = 'finalized' if self._finalized else 'open'
        return f"CoverageGrid({self.rows}x{self.cols}, {self.resolution_deg} deg, {state})"
