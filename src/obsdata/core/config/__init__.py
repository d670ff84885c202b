"""
Configuration package: pydantic models and the YAML loader.
"""

from .config_loader import load_config
from .models import (
    AnalysisConfig,
    ObservationBlockConfig,
    ObservationDataConfig,
)

__all__ = [
    "load_config",
    "AnalysisConfig",
    "ObservationBlockConfig",
    "ObservationDataConfig",
]
