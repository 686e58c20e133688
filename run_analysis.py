#!/usr/bin/env python3
"""
Satellite Revisit Analysis CLI

Run global revisit/coverage analysis for a satellite or constellation.

Usage:
    python run_analysis.py --config configs/example.yaml
"""

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import Optional


def run_single_analysis(
    config_path: str,
    output_dir: Optional[str] = None,
    skip_csv: bool = False,
    skip_excel: bool = False,
    workers: Optional[int] = None,
    verbose: bool = False,
) -> Path:
    """
    Run revisit analysis for a single configuration file.

    Args:
        config_path: Path to YAML configuration file
        output_dir: Override output directory from config (optional)
        skip_csv: Skip CSV report generation
        skip_excel: Skip Excel report generation
        workers: Override number of propagation workers (optional)
        verbose: Enable verbose output

    Returns:
        Path to the output directory containing results
    """
    # Import after function call to speed up module import
    from revisit_eo.config import load_config
    from revisit_eo.constellation import build_constellation
    from revisit_eo.engine import RevisitAnalysisEngine
    from revisit_eo.exceptions import ConfigurationError, InputValidationError
    from revisit_eo.reports import write_csv_report, generate_excel_report
    from revisit_eo.statistics import format_statistics

    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    processing_start_time = time.time()

    print("=" * 60)
    print("Satellite Revisit Analysis")
    print("=" * 60)

    # Load configuration
    print(f"\nLoading configuration from: {config_path}")
    try:
        config = load_config(config_path)
    except ConfigurationError as e:
        print(f"\nConfiguration error: {e}")
        sys.exit(1)

    if output_dir:
        config.output_dir = output_dir
    if workers is not None:
        config.max_workers = workers

    # =========================================================================
    # Build satellite list
    # =========================================================================
    satellites = list(config.satellites)
    if config.constellation is not None:
        try:
            satellites.extend(build_constellation(config.constellation))
        except (ConfigurationError, InputValidationError) as e:
            print(f"\nConstellation error: {e}")
            sys.exit(1)

    if not satellites:
        print("\nConfiguration error: no satellites or constellation defined")
        sys.exit(1)

    params = config.parameters
    output_path = config.output_path
    output_path.mkdir(parents=True, exist_ok=True)

    print(f"Output directory: {output_path}")
    if params.start_date is not None:
        print(f"Start: {params.start_date.isoformat()}")
    print(f"Time span: {params.effective_time_span_hours:.1f} hours")
    print(f"Grid resolution: {params.grid_resolution_deg} deg")
    print(f"Swath width: {params.swath_width_km} km")
    if params.daytime is not None:
        print(f"Daytime only: {params.daytime.start_code:04d}-{params.daytime.end_code:04d} local")
    print(f"Satellites: {len(satellites)}")
    print(f"Workers: {config.max_workers}")

    # =========================================================================
    # Propagate and accumulate coverage
    # =========================================================================
    print("\nRunning revisit analysis...")

    last_reported = [-1]

    def print_progress(fraction: float, message: str) -> None:
        pct = int(fraction * 100)
        # Report in 10% steps
        if pct // 10 > last_reported[0]:
            last_reported[0] = pct // 10
            print(f"  [{pct:3d}%] {message}")

    engine = RevisitAnalysisEngine(params, max_workers=config.max_workers)
    try:
        result = engine.run(satellites, progress_callback=print_progress)
    except ConfigurationError as e:
        print(f"\nConfiguration error: {e}")
        sys.exit(1)

    if result.skipped:
        print(f"\nSkipped satellites ({len(result.skipped)} of {len(satellites)}):")
        for skipped in result.skipped:
            print(f"  {skipped.name}: {skipped.reason}")

    # =========================================================================
    # Reports
    # =========================================================================
    csv_path = None
    excel_path = None
    if not skip_csv:
        print("\nWriting CSV report...")
        csv_path = write_csv_report(result, config, satellites=satellites)
    if not skip_excel:
        print("Generating Excel report...")
        excel_path = generate_excel_report(result, config, satellites=satellites)

    # =========================================================================
    # Summary
    # =========================================================================
    print("\n" + "=" * 60)
    print("Analysis Complete" + (" (partial coverage)" if result.partial else ""))
    print("=" * 60)

    print(f"\nRevisit Statistics ({result.processed_satellites} satellite(s) processed):")
    print(format_statistics(result.statistics))

    if csv_path or excel_path:
        print(f"\nOutput files:")
        if csv_path:
            print(f"  CSV: {csv_path}")
        if excel_path:
            print(f"  Excel: {excel_path}")

    print(f"\nProcessing time: {time.time() - processing_start_time:.1f} s")
    print("\nDone!")

    return output_path


def main():
    """CLI entry point for satellite revisit analysis."""
    parser = argparse.ArgumentParser(
        description='Satellite Revisit and Coverage Analysis',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python run_analysis.py --config configs/example.yaml
    python run_analysis.py --config configs/example.yaml --skip-excel
    python run_analysis.py --config configs/example.yaml --output-dir results/run1 --workers 4
        """
    )

    parser.add_argument(
        '--config', '-c',
        type=str,
        required=True,
        help='Path to YAML configuration file'
    )

    parser.add_argument(
        '--output-dir', '-o',
        type=str,
        default=None,
        help='Override output directory from config'
    )

    parser.add_argument(
        '--skip-csv',
        action='store_true',
        help='Skip CSV report generation'
    )

    parser.add_argument(
        '--skip-excel',
        action='store_true',
        help='Skip Excel report generation'
    )

    parser.add_argument(
        '--workers', '-w',
        type=int,
        default=None,
        help='Number of concurrent propagation workers (overrides config)'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable verbose output'
    )

    args = parser.parse_args()

    run_single_analysis(
        config_path=args.config,
        output_dir=args.output_dir,
        skip_csv=args.skip_csv,
        skip_excel=args.skip_excel,
        workers=args.workers,
        verbose=args.verbose,
    )


if __name__ == '__main__':
    main()
