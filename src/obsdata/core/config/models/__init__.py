"""
Configuration models for obsdata.

- Type-safe nested structure (config.analysis.global_std_scaling)
- Uppercase aliases for flat YAML files and environment overrides
- Immutable configs (frozen=True) to prevent mutation bugs
"""

from .observation_config import (
    FROZEN_CONFIG,
    AnalysisConfig,
    ObservationBlockConfig,
    ObservationDataConfig,
)

__all__ = [
    "FROZEN_CONFIG",
    "AnalysisConfig",
    "ObservationBlockConfig",
    "ObservationDataConfig",
]
