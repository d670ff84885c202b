"""
Observation data exceptions.

Provides the fault taxonomy of the observation bookkeeping and matrix
assembly code. All exceptions inherit from ObsDataError for consistent
error handling.
"""

from obsdata.core.exceptions import ConfigurationError, ObsDataError


class ObservationDataError(ObsDataError):
    """Base exception for all observation data errors."""
    pass


class IndexOutOfRangeError(ObservationDataError, IndexError):
    """Raised when a total or local observation index is outside its range."""
    pass


class NonFiniteResultError(ObservationDataError):
    """Raised when an assembled matrix contains NaN or infinite entries."""
    pass


class InvalidConfigurationError(ObservationDataError, ConfigurationError):
    """Raised when inputs are rejected at assignment (e.g. std <= 0)."""
    pass
