"""
Summary statistics of a finished coverage grid.

Revisit intervals assume visits to a cell are evenly spread over the
analysis window, since only per-cell counts are kept.
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict

import numpy as np


@dataclass(frozen=True)
class RevisitStatistics:
    """Immutable snapshot of revisit metrics for one run."""
    total_cells: int
    covered_cells: int
    coverage_percent: float
    min_revisits: int
    max_revisits: int
    average_revisits: float
    average_revisit_time_hours: float
    min_revisit_time_hours: float
    max_gap_hours: float
    time_span_hours: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _round1(value: float) -> float:
    # Half-up to one decimal place
    return float(np.floor(value * 10 + 0.5) / 10)


def compute_revisit_statistics(counts: np.ndarray, time_span_hours: float) -> RevisitStatistics:
    """
    Compute revisit statistics from grid counts.

    Parameters
    ----------
    counts : np.ndarray
        2D revisit counts, one entry per grid cell. Not modified.
    time_span_hours : float
        Length of the analysis window in hours.

    Returns
    -------
    RevisitStatistics
        Coverage and revisit-time metrics. Cells seen once are covered but
        never revisited within the window.
    """
    counts = np.asarray(counts)
    total_cells = int(counts.size)
    covered = counts[counts > 0]
    covered_cells = int(covered.size)

    if covered_cells > 0:
        min_revisits = int(covered.min())
        max_revisits = int(covered.max())
        mean_revisits = float(covered.mean())
    else:
        min_revisits = 0
        max_revisits = 0
        mean_revisits = 0.0

    if mean_revisits > 0:
        average_revisit_time = time_span_hours / mean_revisits
    else:
        average_revisit_time = time_span_hours

    revisited = counts[counts > 1]
    if revisited.size > 0:
        intervals = time_span_hours / (revisited.astype(np.float64) - 1)
        min_revisit_time = float(intervals.min())
        max_gap = float(intervals.max())
    else:
        min_revisit_time = time_span_hours
        max_gap = time_span_hours

    coverage_percent = 100.0 * covered_cells / total_cells if total_cells else 0.0

    return RevisitStatistics(
        total_cells=total_cells,
        covered_cells=covered_cells,
        coverage_percent=_round1(coverage_percent),
        min_revisits=min_revisits,
        max_revisits=max_revisits,
        average_revisits=_round1(mean_revisits),
        average_revisit_time_hours=float(average_revisit_time),
        min_revisit_time_hours=min_revisit_time,
        max_gap_hours=max_gap,
        time_span_hours=float(time_span_hours),
    )


def format_statistics(stats: RevisitStatistics) -> str:
    """Multi-line text summary for console output."""
    lines = [
        f"  Grid cells:            {stats.total_cells:,}",
        f"  Covered cells:         {stats.covered_cells:,} ({stats.coverage_percent:.1f}%)",
        f"  Revisits per cell:     min {stats.min_revisits}, max {stats.max_revisits}, "
        f"avg {stats.average_revisits:.1f}",
        f"  Avg revisit time:      {stats.average_revisit_time_hours:.2f} h",
        f"  Min revisit time:      {stats.min_revisit_time_hours:.2f} h",
        f"  Max gap:               {stats.max_gap_hours:.2f} h",
        f"  Time span:             {stats.time_span_hours:.1f} h",
    ]
    return '\n'.join(lines)
