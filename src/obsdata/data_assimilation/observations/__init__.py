# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2024-2026 SYMFLUENCE Team <dev@symfluence.org>

"""
Observation block bookkeeping and analysis matrix assembly.
"""

from .active_state import ActivationState, ObservationEvent
from .covariance import CovarianceOwnership, ErrorCovariance
from .matrices import UpdateMatrices, assert_finite
from .observation_block import ObservationBlock
from .observation_data import ObservationDataSet
from .perturbation import CenteredPerturbation, NonCenteredPerturbation, PerturbationStrategy
from .scaling import apply_scaling, compute_scale_factors

__all__ = [
    "ActivationState",
    "ObservationEvent",
    "CovarianceOwnership",
    "ErrorCovariance",
    "ObservationBlock",
    "ObservationDataSet",
    "UpdateMatrices",
    "assert_finite",
    "PerturbationStrategy",
    "CenteredPerturbation",
    "NonCenteredPerturbation",
    "apply_scaling",
    "compute_scale_factors",
]
