"""
Revisit analysis engine.

Propagates every satellite of a constellation, interpolates its swath and
paints it into one shared coverage grid, then computes revisit statistics.

Satellites that cannot be propagated are skipped and reported; they never
abort the run. Propagation may run in a thread pool, while painting always
happens on the calling thread so every grid increment is counted exactly once.
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, List, Optional, Sequence

from .config import AnalysisParameters, SatelliteOrbitSpec
from .constants import DEFAULT_CHUNK_SIZE, DEFAULT_MAX_WORKERS
from .daytime import DaytimeFilter
from .exceptions import (
    AnalysisCancelled,
    ConfigurationError,
    InputValidationError,
    PropagationFailure,
    RevisitAnalysisError,
)
from .grid import CoverageGrid
from .orbits import GroundTrackPoint, OrbitSampler, sample_ground_track, validate_orbit_spec
from .statistics import RevisitStatistics, compute_revisit_statistics
from .swath import interpolate_segment, swath_half_width_deg

logger = logging.getLogger(__name__)

# (fraction in [0, 1], message)
ProgressCallback = Callable[[float, str], None]


@dataclass
class SkippedSatellite:
    """A satellite left out of the run, with the reason."""
    index: int
    name: str
    error: RevisitAnalysisError

    @property
    def reason(self) -> str:
        return str(self.error)

    @property
    def kind(self) -> str:
        return type(self.error).__name__


@dataclass
class RevisitResult:
    """Outcome of one analysis run."""
    grid: CoverageGrid
    statistics: RevisitStatistics
    start_time: datetime
    processed_satellites: int = 0
    skipped: List[SkippedSatellite] = field(default_factory=list)

    @property
    def partial(self) -> bool:
        """True when at least one satellite did not contribute."""
        return bool(self.skipped)

    @property
    def warnings(self) -> List[str]:
        return [f"{s.name}: {s.kind}: {s.reason}" for s in self.skipped]


def _satellite_name(spec: SatelliteOrbitSpec, index: int) -> str:
    return spec.name or f"SAT-{index + 1}"


class RevisitAnalysisEngine:
    """
    Runs a revisit analysis over a list of satellites.

    Parameters
    ----------
    parameters : AnalysisParameters
        Time span, grid resolution, swath width, start/end dates and
        optional daytime window.
    sampler : OrbitSampler
        Ground track provider. Must return an empty list, not raise, when a
        satellite cannot be propagated.
    max_workers : int
        Number of concurrent propagation threads (1 = sequential).
    chunk_size : int
        Ground track samples painted between cancellation checks and
        progress updates.
    """

    def __init__(
        self,
        parameters: AnalysisParameters,
        sampler: OrbitSampler = sample_ground_track,
        max_workers: int = DEFAULT_MAX_WORKERS,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ):
        self.parameters = parameters
        self.sampler = sampler
        self.max_workers = max_workers
        self.chunk_size = chunk_size

    def _validate(self) -> None:
        self.parameters.validate()
        if isinstance(self.max_workers, bool) or not isinstance(self.max_workers, int) or self.max_workers < 1:
            raise ConfigurationError(f"max_workers must be a positive integer, got {self.max_workers!r}")
        if isinstance(self.chunk_size, bool) or not isinstance(self.chunk_size, int) or self.chunk_size < 1:
            raise ConfigurationError(f"chunk_size must be a positive integer, got {self.chunk_size!r}")

    def _start_time(self) -> datetime:
        start = self.parameters.start_date
        if start is None:
            return datetime.now(timezone.utc)
        if start.tzinfo is None:
            return start.replace(tzinfo=timezone.utc)
        return start.astimezone(timezone.utc)

    def run(
        self,
        satellites: Sequence[SatelliteOrbitSpec],
        progress_callback: Optional[ProgressCallback] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> RevisitResult:
        """
        Run the analysis.

        Parameters
        ----------
        satellites : Sequence[SatelliteOrbitSpec]
            Satellites whose coverage accumulates into one grid.
        progress_callback : Callable, optional
            Called with (fraction, message) after each satellite and each
            chunk of a ground track.
        cancel_event : threading.Event, optional
            Checked between satellites and between chunks.

        Returns
        -------
        RevisitResult
            Finalized grid, statistics and skipped satellites.

        Raises
        ------
        ConfigurationError
            If the parameters are invalid. Raised before any propagation.
        AnalysisCancelled
            If ``cancel_event`` is set during the run.
        """
        self._validate()

        params = self.parameters
        time_span = params.effective_time_span_hours
        start = self._start_time()
        daytime_filter = DaytimeFilter(params.daytime) if params.daytime is not None else None
        satellites = list(satellites)
        total = len(satellites)

        logger.info(
            f"Revisit analysis: {total} satellite(s), {time_span:.1f} h from {start.isoformat()}, "
            f"{params.grid_resolution_deg} deg grid"
        )

        grid = CoverageGrid(params.grid_resolution_deg)
        skipped: List[SkippedSatellite] = []

        def report(fraction: float, message: str) -> None:
            if progress_callback is not None:
                progress_callback(min(1.0, max(0.0, fraction)), message)

        # Per-satellite validation; invalid specs are recorded and skipped
        half_widths = {}
        for index, spec in enumerate(satellites):
            try:
                validate_orbit_spec(spec)
            except InputValidationError as e:
                self._skip(skipped, index, spec, e)
                continue
            width_km = spec.swath_width_km if spec.swath_width_km is not None else params.swath_width_km
            half_widths[index] = swath_half_width_deg(width_km)

        tracks = self._iter_tracks(satellites, half_widths, time_span, start, cancel_event)
        processed = 0
        try:
            for index, spec, track in tracks:
                name = _satellite_name(spec, index)
                if isinstance(track, InputValidationError):
                    self._skip(skipped, index, spec, track)
                elif not track:
                    self._skip(skipped, index, spec, PropagationFailure(f"no ground track points for {name}"))
                else:
                    self._paint_track(
                        grid, track, half_widths[index], daytime_filter, cancel_event,
                        lambda frac, i=index, n=name: report((i + frac) / total, f"Painting {n}"),
                    )
                    processed += 1
                report((index + 1) / total, f"Processed {name} ({index + 1}/{total})")
        finally:
            tracks.close()

        _check_cancelled(cancel_event)
        grid.finalize()
        statistics = compute_revisit_statistics(grid.counts, time_span)
        report(1.0, "Analysis complete")
        skipped.sort(key=lambda s: s.index)

        if skipped:
            logger.warning(
                f"Partial coverage: {len(skipped)} of {total} satellite(s) skipped"
            )
        logger.info(
            f"Coverage {statistics.coverage_percent:.1f}% over {statistics.covered_cells} cells "
            f"from {processed} satellite(s)"
        )

        return RevisitResult(
            grid=grid,
            statistics=statistics,
            start_time=start,
            processed_satellites=processed,
            skipped=skipped,
        )

    def _skip(
        self,
        skipped: List[SkippedSatellite],
        index: int,
        spec: SatelliteOrbitSpec,
        error: RevisitAnalysisError,
    ) -> None:
        name = _satellite_name(spec, index)
        logger.warning(f"Skipping {name}: {type(error).__name__}: {error}")
        skipped.append(SkippedSatellite(index=index, name=name, error=error))

    def _sample(self, spec: SatelliteOrbitSpec, time_span: float, start: datetime):
        try:
            return self.sampler(spec, time_span, start)
        except InputValidationError as e:
            return e

    def _iter_tracks(self, satellites, half_widths, time_span, start, cancel_event):
        """
        Yield (index, spec, track) in satellite order for validated satellites.

        The track is a list of points, or the InputValidationError raised by
        the sampler.
        """
        order = [i for i in range(len(satellites)) if i in half_widths]

        if self.max_workers == 1 or len(order) <= 1:
            for index in order:
                _check_cancelled(cancel_event)
                spec = satellites[index]
                yield index, spec, self._sample(spec, time_span, start)
            return

        executor = ThreadPoolExecutor(max_workers=self.max_workers)
        futures = {
            index: executor.submit(self._sample, satellites[index], time_span, start)
            for index in order
        }
        try:
            for index in order:
                _check_cancelled(cancel_event)
                yield index, satellites[index], futures[index].result()
        finally:
            for future in futures.values():
                future.cancel()
            executor.shutdown(wait=True)

    def _paint_track(
        self,
        grid: CoverageGrid,
        track: List[GroundTrackPoint],
        half_width_deg: float,
        daytime_filter: Optional[DaytimeFilter],
        cancel_event: Optional[threading.Event],
        report: Callable[[float], None],
    ) -> None:
        n = len(track)
        for chunk_start in range(0, n, self.chunk_size):
            _check_cancelled(cancel_event)
            chunk_end = min(n, chunk_start + self.chunk_size)
            for i in range(chunk_start, chunk_end):
                point = track[i]
                if daytime_filter is not None and not daytime_filter.accepts(point.timestamp, point.lon):
                    continue
                next_point = track[i + 1] if i + 1 < n else None
                for cp in interpolate_segment(point, next_point, half_width_deg):
                    grid.paint(cp.lat, cp.lon, cp.half_width_deg)
            report(chunk_end / n)


def _check_cancelled(cancel_event: Optional[threading.Event]) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise AnalysisCancelled("Revisit analysis cancelled")


class AnalysisJob:
    """
    Handle to an analysis running on a background thread.

    Attributes
    ----------
    future : Future
        Resolves to the RevisitResult, or raises the run's error.
    """

    def __init__(self, future: Future, cancel_event: threading.Event):
        self.future = future
        self._cancel_event = cancel_event
        self._lock = threading.Lock()
        self._progress = 0.0
        self._message = ''

    def _update(self, fraction: float, message: str) -> None:
        with self._lock:
            self._progress = fraction
            self._message = message

    @property
    def progress(self) -> float:
        """Latest reported fraction complete."""
        with self._lock:
            return self._progress

    @property
    def message(self) -> str:
        with self._lock:
            return self._message

    def cancel(self) -> None:
        """Request cooperative cancellation."""
        self._cancel_event.set()

    @property
    def cancelled(self) -> bool:
        return self._cancel_event.is_set()

    def done(self) -> bool:
        return self.future.done()

    def result(self, timeout: Optional[float] = None) -> RevisitResult:
        return self.future.result(timeout=timeout)


def start_background_analysis(
    parameters: AnalysisParameters,
    satellites: Sequence[SatelliteOrbitSpec],
    sampler: OrbitSampler = sample_ground_track,
    max_workers: int = DEFAULT_MAX_WORKERS,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    progress_callback: Optional[ProgressCallback] = None,
) -> AnalysisJob:
    """
    Run an analysis on a worker thread.

    Parameters
    ----------
    parameters : AnalysisParameters
        Run parameters.
    satellites : Sequence[SatelliteOrbitSpec]
        Satellites to analyse.
    sampler, max_workers, chunk_size
        Passed to RevisitAnalysisEngine.
    progress_callback : Callable, optional
        Also called with (fraction, message), from the worker thread.

    Returns
    -------
    AnalysisJob
        Handle exposing progress, cancellation and the result.
    """
    engine = RevisitAnalysisEngine(parameters, sampler=sampler, max_workers=max_workers, chunk_size=chunk_size)
    cancel_event = threading.Event()
    satellites = list(satellites)

    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix='revisit-analysis')
    job = AnalysisJob(Future(), cancel_event)

    def on_progress(fraction: float, message: str) -> None:
        job._update(fraction, message)
        if progress_callback is not None:
            progress_callback(fraction, message)

    job.future = executor.submit(engine.run, satellites, on_progress, cancel_event)
    executor.shutdown(wait=False)
    return job
