"""
Report generation utilities for CSV and Excel outputs.

Turns a finished revisit run into tabular summaries: statistics, satellite
configuration, skipped satellites and per-cell revisit data.
"""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Sequence

import numpy as np
import pandas as pd

from .config import AnalysisConfig, SatelliteOrbitSpec
from .engine import RevisitResult
from .grid import CoverageGrid
from .statistics import RevisitStatistics

logger = logging.getLogger(__name__)

# Excel sheets hold 1,048,576 rows including the header
EXCEL_MAX_DATA_ROWS = 1_048_575


def _convert_datetimes_to_string(df: pd.DataFrame) -> pd.DataFrame:
    """Convert all datetime columns in a DataFrame to strings for Excel compatibility."""
    df = df.copy()
    for col in df.columns:
        if 'datetime' in str(df[col].dtype):
            # Excel cannot store timezone-aware datetimes
            if df[col].dt.tz is not None:
                df[col] = df[col].dt.tz_localize(None)
            df[col] = df[col].dt.strftime('%Y-%m-%d %H:%M:%S')
        elif df[col].dtype == 'object' and len(df) > 0:
            df[col] = df[col].apply(
                lambda x: x.strftime('%Y-%m-%d %H:%M:%S') if isinstance(x, datetime) else x
            )
    return df


def statistics_to_dataframe(stats: RevisitStatistics) -> pd.DataFrame:
    """
    Tabulate revisit statistics.

    Returns
    -------
    pd.DataFrame
        DataFrame with columns: Metric, Value, Unit
    """
    rows = [
        ('Average Revisit Time', round(stats.average_revisit_time_hours, 2), 'hours'),
        ('Maximum Gap', round(stats.max_gap_hours, 2), 'hours'),
        ('Minimum Revisit', round(stats.min_revisit_time_hours, 2), 'hours'),
        ('Global Coverage', stats.coverage_percent, '%'),
        ('Covered Cells', stats.covered_cells, 'cells'),
        ('Total Cells', stats.total_cells, 'cells'),
        ('Min Revisits per Cell', stats.min_revisits, 'count'),
        ('Max Revisits per Cell', stats.max_revisits, 'count'),
        ('Average Revisits per Cell', stats.average_revisits, 'count'),
        ('Time Span', stats.time_span_hours, 'hours'),
    ]
    return pd.DataFrame(rows, columns=['Metric', 'Value', 'Unit'])


def satellites_to_dataframe(satellites: Sequence[SatelliteOrbitSpec]) -> pd.DataFrame:
    """
    Tabulate the satellite configuration.

    Returns
    -------
    pd.DataFrame
        One row per satellite; TLE-based satellites show 'TLE' as source.
    """
    rows = []
    for i, sat in enumerate(satellites):
        rows.append({
            'Satellite ID': i + 1,
            'Name': sat.name or f"SAT-{i + 1}",
            'Source': 'TLE' if sat.has_tle else 'Elements',
            'Altitude (km)': sat.altitude_km,
            'Inclination (deg)': sat.inclination_deg,
            'RAAN (deg)': sat.raan_deg,
            'True Anomaly (deg)': sat.true_anomaly_deg,
            'Eccentricity': sat.eccentricity,
            'Swath Width (km)': sat.swath_width_km,
        })
    columns = [
        'Satellite ID', 'Name', 'Source', 'Altitude (km)', 'Inclination (deg)',
        'RAAN (deg)', 'True Anomaly (deg)', 'Eccentricity', 'Swath Width (km)',
    ]
    return pd.DataFrame(rows, columns=columns)


def skipped_to_dataframe(result: RevisitResult) -> pd.DataFrame:
    """
    Tabulate satellites skipped during the run.

    Returns
    -------
    pd.DataFrame
        DataFrame with columns: Satellite ID, Name, Error, Reason
    """
    rows = [
        {'Satellite ID': s.index + 1, 'Name': s.name, 'Error': s.kind, 'Reason': s.reason}
        for s in result.skipped
    ]
    return pd.DataFrame(rows, columns=['Satellite ID', 'Name', 'Error', 'Reason'])


def grid_to_dataframe(
    grid: CoverageGrid,
    time_span_hours: float,
    covered_only: bool = True,
) -> pd.DataFrame:
    """
    Per-cell revisit data.

    Parameters
    ----------
    grid : CoverageGrid
        Coverage grid (usually finalized).
    time_span_hours : float
        Analysis window, used for the mean revisit interval.
    covered_only : bool
        Drop cells that were never seen.

    Returns
    -------
    pd.DataFrame
        DataFrame with columns: Latitude, Longitude, Revisit Count,
        Mean Revisit Interval (hours). The interval is NaN for cells seen
        at most once.
    """
    lats, lons = grid.cell_centers()
    lat_grid, lon_grid = np.meshgrid(lats, lons, indexing='ij')
    counts = grid.counts

    df = pd.DataFrame({
        'Latitude': lat_grid.ravel(),
        'Longitude': lon_grid.ravel(),
        'Revisit Count': counts.ravel().astype(np.int64),
    })
    if covered_only:
        df = df[df['Revisit Count'] > 0].reset_index(drop=True)

    intervals = pd.Series(np.nan, index=df.index)
    revisited = df['Revisit Count'] > 1
    intervals[revisited] = time_span_hours / (df.loc[revisited, 'Revisit Count'] - 1)
    df['Mean Revisit Interval (hours)'] = intervals
    return df


def write_csv_report(
    result: RevisitResult,
    config: AnalysisConfig,
    output_path: Optional[Path] = None,
    satellites: Optional[Sequence[SatelliteOrbitSpec]] = None,
) -> Path:
    """
    Write a sectioned CSV report of a run.

    Sections: header, summary statistics, satellite configuration, skipped
    satellites (when any) and grid cell analysis of covered cells.

    Parameters
    ----------
    result : RevisitResult
        Finished run.
    config : AnalysisConfig
        Configuration the run was made with.
    output_path : Path, optional
        Output path. Defaults to ``output_dir / csv_filename``.
    satellites : Sequence[SatelliteOrbitSpec], optional
        Satellites actually analysed (e.g. an expanded constellation).
        Defaults to ``config.satellites``.

    Returns
    -------
    Path
        Path to the written CSV file.
    """
    if output_path is None:
        output_path = config.output_path / config.csv_filename
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    if satellites is None:
        satellites = config.satellites
    stats = result.statistics

    with open(output_path, 'w', newline='') as f:
        f.write("Revisit Analysis Results\n")
        f.write(f"Generated on: {datetime.now(timezone.utc).isoformat()}\n")
        f.write(f"Start Time: {result.start_time.isoformat()}\n")
        f.write(f"Simulation Duration: {stats.time_span_hours} hours\n")
        f.write(f"Grid Cell Size: {result.grid.resolution_deg} deg\n")
        f.write(f"Number of Satellites: {len(satellites)}\n")
        f.write(f"Skipped Satellites: {len(result.skipped)}\n\n")

        f.write("SUMMARY STATISTICS\n")
        statistics_to_dataframe(stats).to_csv(f, index=False)
        f.write("\n")

        f.write("SATELLITE CONFIGURATION\n")
        satellites_to_dataframe(satellites).to_csv(f, index=False)
        f.write("\n")

        if result.skipped:
            f.write("SKIPPED SATELLITES\n")
            skipped_to_dataframe(result).to_csv(f, index=False)
            f.write("\n")

        f.write("GRID CELL ANALYSIS\n")
        grid_to_dataframe(result.grid, stats.time_span_hours).to_csv(f, index=False, float_format='%.4f')

    return output_path


def generate_excel_report(
    result: RevisitResult,
    config: AnalysisConfig,
    output_path: Optional[Path] = None,
    satellites: Optional[Sequence[SatelliteOrbitSpec]] = None,
) -> Path:
    """
    Generate Excel report with all analysis results.

    Parameters
    ----------
    result : RevisitResult
        Finished run.
    config : AnalysisConfig
        Analysis configuration.
    output_path : Path, optional
        Output path for the Excel file.
    satellites : Sequence[SatelliteOrbitSpec], optional
        Satellites actually analysed. Defaults to ``config.satellites``.

    Returns
    -------
    Path
        Path to the generated Excel file.
    """
    if output_path is None:
        output_path = config.output_path / config.excel_filename
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    if satellites is None:
        satellites = config.satellites
    params = config.parameters

    with pd.ExcelWriter(output_path, engine='openpyxl') as writer:
        # Sheet 1: Configuration
        daytime = params.daytime
        config_data = {
            'Parameter': [
                'Start Time',
                'End Date',
                'Time Span (hours)',
                'Grid Resolution (deg)',
                'Swath Width (km)',
                'Daytime Only',
                'Daytime Window (local)',
                'Number of Satellites',
                'Max Workers',
            ],
            'Value': [
                result.start_time,
                params.end_date,
                result.statistics.time_span_hours,
                params.grid_resolution_deg,
                params.swath_width_km,
                daytime is not None,
                f"{daytime.start_code:04d}-{daytime.end_code:04d}" if daytime else '',
                len(satellites),
                config.max_workers,
            ],
        }
        config_df = pd.DataFrame(config_data)
        config_df['Value'] = config_df['Value'].astype(object)
        _convert_datetimes_to_string(config_df).to_excel(writer, sheet_name='Config', index=False)

        # Sheet 2: Satellites
        satellites_to_dataframe(satellites).to_excel(writer, sheet_name='Satellites', index=False)

        # Sheet 3: Statistics
        statistics_to_dataframe(result.statistics).to_excel(writer, sheet_name='Statistics', index=False)

        # Sheet 4: Skipped satellites (header only when none)
        skipped_to_dataframe(result).to_excel(writer, sheet_name='Skipped', index=False)

        # Sheet 5: Covered grid cells
        grid_df = grid_to_dataframe(result.grid, result.statistics.time_span_hours)
        if len(grid_df) > EXCEL_MAX_DATA_ROWS:
            logger.warning(
                f"Grid sheet truncated to {EXCEL_MAX_DATA_ROWS:,} of {len(grid_df):,} covered cells; "
                f"use the CSV report for the full grid"
            )
            grid_df = grid_df.iloc[:EXCEL_MAX_DATA_ROWS]
        grid_df.to_excel(writer, sheet_name='Grid', index=False)

    return output_path
