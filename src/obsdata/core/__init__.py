"""
Core infrastructure for obsdata: exceptions, mixins and configuration.
"""

from .exceptions import (
    ConfigurationError,
    ObsDataError,
    ValidationError,
    obsdata_error_handler,
    require,
    require_not_none,
)
from .mixins import LoggingMixin

__all__ = [
    "ObsDataError",
    "ConfigurationError",
    "ValidationError",
    "LoggingMixin",
    "obsdata_error_handler",
    "require",
    "require_not_none",
]
