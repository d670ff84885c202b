# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2024-2026 SYMFLUENCE Team <dev@symfluence.org>

"""
Observation data for ensemble-based data assimilation.

Tracks scalar observations in named blocks together with their uncertainty
and activation state, and assembles the perturbation (E), innovation (D),
error covariance (R) and dObs matrices consumed by an ensemble Kalman
filter analysis step.
"""

from .config import AnalysisConfig, ObservationBlockConfig, ObservationDataConfig
from .da_manager import ObservationDataManager
from .exceptions import (
    IndexOutOfRangeError,
    InvalidConfigurationError,
    NonFiniteResultError,
    ObservationDataError,
)
from .observations import (
    ActivationState,
    CovarianceOwnership,
    ErrorCovariance,
    ObservationBlock,
    ObservationDataSet,
    UpdateMatrices,
)

__all__ = [
    "AnalysisConfig",
    "ObservationBlockConfig",
    "ObservationDataConfig",
    "ObservationDataManager",
    "ActivationState",
    "CovarianceOwnership",
    "ErrorCovariance",
    "ObservationBlock",
    "ObservationDataSet",
    "UpdateMatrices",
    "ObservationDataError",
    "IndexOutOfRangeError",
    "InvalidConfigurationError",
    "NonFiniteResultError",
]
