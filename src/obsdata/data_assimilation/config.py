# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2024-2026 SYMFLUENCE Team <dev@symfluence.org>

"""
Observation data configuration.

Re-exports from the core config module for convenience.
"""

from obsdata.core.config.models.observation_config import (
    AnalysisConfig,
    ObservationBlockConfig,
    ObservationDataConfig,
)

__all__ = [
    "AnalysisConfig",
    "ObservationBlockConfig",
    "ObservationDataConfig",
]
