"""
Core mixins for obsdata modules.

Provides the logging mixin that long-lived orchestrators build upon.
"""

import logging

import numpy as np


class LoggingMixin:
    """
    Mixin providing standardized logger access.

    Defaults to the logger of the defining module, so orchestrators log
    under the same hierarchy as the module-level loggers they call into.
    """

    @property
    def logger(self) -> logging.Logger:
        """Get the logger instance."""
        _logger = getattr(self, '_logger', None)
        if _logger is None:
            _logger = logging.getLogger(self.__class__.__module__)
            self._logger = _logger
        return _logger

    @logger.setter
    def logger(self, value: logging.Logger) -> None:
        """Set the logger instance."""
        self._logger = value

    def log_shapes(self, label: str, **matrices: np.ndarray) -> None:
        """Log the shape of each named matrix at DEBUG."""
        shapes = ", ".join(f"{name}={np.shape(m)}" for name, m in matrices.items())
        self.logger.debug("%s: %s", label, shapes)
