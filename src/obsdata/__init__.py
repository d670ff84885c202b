# src/obsdata/__init__.py
try:
    from .obsdata_version import __version__
except ImportError:
    try:
        from importlib.metadata import version, PackageNotFoundError
        __version__ = version("obsdata")
    except (ImportError, PackageNotFoundError):
        __version__ = "0.0.0"

from .data_assimilation import ObservationBlock, ObservationDataSet

__all__ = ["ObservationBlock", "ObservationDataSet", "__version__"]
