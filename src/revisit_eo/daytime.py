"""
Local daytime filtering of coverage samples.

Local time is mean solar time from longitude (15 deg per hour), not true
apparent solar time.
"""

import math
from datetime import datetime, timezone

from .config import DaytimeWindow
from .constants import DEGREES_PER_SOLAR_HOUR, HOURS_PER_DAY, MINUTES_PER_HOUR


def local_solar_hours(timestamp: datetime, lon: float) -> float:
    """
    Local mean solar time in decimal hours, in [0, 24).

    UTC time is taken at minute precision. Naive timestamps are treated as UTC.

    Examples
    --------
    >>> local_solar_hours(datetime(2025, 1, 1, 0, 0, tzinfo=timezone.utc), 180.0)
    12.0
    """
    if timestamp.tzinfo is not None:
        timestamp = timestamp.astimezone(timezone.utc)
    utc_hours = timestamp.hour + timestamp.minute / MINUTES_PER_HOUR
    local = (utc_hours + lon / DEGREES_PER_SOLAR_HOUR) % HOURS_PER_DAY
    # float modulo of a tiny negative value rounds up to exactly 24.0
    if local >= HOURS_PER_DAY:
        local -= HOURS_PER_DAY
    return local


def to_hhmm_code(hours: float) -> int:
    """
    Encode decimal hours as an HHMM integer (10.5 -> 1030).

    Minutes are rounded half up, so a value a hair under the hour can yield a
    minute field of 60 (e.g. 9.9999 -> 960), which still orders correctly
    against valid codes.
    """
    whole = math.floor(hours)
    minutes = math.floor((hours - whole) * MINUTES_PER_HOUR + 0.5)
    return whole * 100 + minutes


class DaytimeFilter:
    """
    Accepts coverage samples whose local solar time falls in a window.

    Parameters
    ----------
    window : DaytimeWindow
        Inclusive HHMM bounds, e.g. 1000-1700.
    """

    def __init__(self, window: DaytimeWindow):
        window.validate()
        self.window = window

    def local_code(self, timestamp: datetime, lon: float) -> int:
        """HHMM code of the local solar time at a sample."""
        return to_hhmm_code(local_solar_hours(timestamp, lon))

    def accepts(self, timestamp: datetime, lon: float) -> bool:
        code = self.local_code(timestamp, lon)
        return self.window.start_code <= code <= self.window.end_code

    def __repr__(self) -> str:
        return f"DaytimeFilter({self.window.start_code:04d}-{self.window.end_code:04d})"
