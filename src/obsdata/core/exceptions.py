"""
Exception hierarchy for obsdata.

Every error raised on purpose by the package derives from ObsDataError, so
a caller driving an assimilation cycle can abandon the cycle with a single
``except ObsDataError``.
"""

import logging
from contextlib import contextmanager
from typing import Optional, Type, TypeVar


class ObsDataError(Exception):
    """Root of all obsdata errors."""
    pass


class ConfigurationError(ObsDataError):
    """
    A configuration file or setting was rejected.

    Raised for unreadable YAML, a file that is not a mapping, or model
    validation failures reported by the config loader.
    """
    pass


class ValidationError(ObsDataError):
    """An argument failed a ``require`` check."""
    pass


T = TypeVar('T')


def require(condition: bool, message: str, error_type: Optional[Type[Exception]] = None) -> None:
    """
    Raise ``error_type(message)`` unless ``condition`` holds.

    Unlike ``assert`` the check survives ``python -O``.

    Args:
        condition: Condition that must be true
        message: Message of the raised exception
        error_type: Exception class (default: ValidationError)

    Example:
        >>> require(cov.shape[0] == cov.shape[1], "covariance must be square",
        ...         InvalidConfigurationError)
    """
    if not condition:
        raise (error_type or ValidationError)(message)


def require_not_none(
    value: Optional[T], name: str, error_type: Optional[Type[Exception]] = None
) -> T:
    """
    Return ``value`` or raise if it is None.

    Args:
        value: Value to check
        name: Setting or argument name used in the message
        error_type: Exception class (default: ValidationError)
    """
    if value is None:
        raise (error_type or ValidationError)(f"{name} must not be None")
    return value


@contextmanager
def obsdata_error_handler(
    operation: str,
    logger: Optional[logging.Logger] = None,
    reraise: bool = True,
    error_type: Type[ObsDataError] = ObsDataError
):
    """
    Log failures of ``operation`` and keep them inside the hierarchy.

    ObsDataError subclasses pass through unchanged. Any other exception is
    wrapped in ``error_type`` with the original chained as ``__cause__``.

    Args:
        operation: Short description used in log and error messages
        logger: Logger for the failure; nothing is logged when None
        reraise: Re-raise after logging (default: True)
        error_type: Wrapper class for foreign exceptions

    Example:
        >>> with obsdata_error_handler("analysis matrix assembly", logger):
        ...     R = dataset.build_r()
    """
    try:
        yield
    except ObsDataError:
        if logger:
            logger.error("%s failed", operation, exc_info=True)
        if reraise:
            raise
    except Exception as e:
        if logger:
            logger.error("%s failed: %s", operation, e, exc_info=True)
        if reraise:
            raise error_type(f"{operation} failed: {e}") from e


__all__ = [
    'ObsDataError',
    'ConfigurationError',
    'ValidationError',
    'require',
    'require_not_none',
    'obsdata_error_handler',
]
