"""
Error taxonomy for revisit analysis runs.

Structurally invalid configuration fails fast; problems with an individual
satellite are recorded and the run continues without it.
"""


class RevisitAnalysisError(Exception):
    """Base class for all revisit analysis errors."""


class ConfigurationError(RevisitAnalysisError, ValueError):
    """Run-level configuration is invalid. Raised before any propagation."""


class InputValidationError(RevisitAnalysisError, ValueError):
    """A single satellite's orbit spec or TLE is malformed."""


class PropagationFailure(RevisitAnalysisError):
    """The orbit sampler produced no ground track for a satellite."""


class AnalysisCancelled(RevisitAnalysisError):
    """The run was cancelled cooperatively before it completed."""
