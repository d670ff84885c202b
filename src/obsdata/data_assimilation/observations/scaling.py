# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2024-2026 SYMFLUENCE Team <dev@symfluence.org>

"""
Normalisation of the analysis matrices by the observation std.

With scale_factor[i] = 1 / std[i], every row of S, E, D and dObs is
multiplied by scale_factor[row] and R by scale_factor[i] * scale_factor[j],
so all quantities have unit nominal variance. Scaling is applied in place
and is not idempotent: apply it exactly once per assembled matrix set.
"""

import logging
from typing import Optional

import numpy as np

from ..exceptions import InvalidConfigurationError
from .matrices import assert_finite

logger = logging.getLogger(__name__)


def compute_scale_factors(std: np.ndarray) -> np.ndarray:
    """Return 1 / std for each active observation."""
    std = np.asarray(std, dtype=np.float64)
    if np.any(std <= 0):
        raise InvalidConfigurationError("Cannot scale by a non-positive observation std")
    return assert_finite(1.0 / std, "scale_factor")


def _check_rows(matrix: np.ndarray, scale_factors: np.ndarray, name: str) -> None:
    if matrix.shape[0] != scale_factors.shape[0]:
        raise InvalidConfigurationError(
            f"Matrix {name} has {matrix.shape[0]} rows but {scale_factors.shape[0]} scale factors"
        )


def scale_rows(matrix: np.ndarray, scale_factors: np.ndarray, name: str = "matrix") -> None:
    """Multiply row i of ``matrix`` by ``scale_factors[i]`` in place."""
    _check_rows(matrix, scale_factors, name)
    matrix *= scale_factors[:, np.newaxis]


def scale_covariance(R: np.ndarray, scale_factors: np.ndarray) -> None:
    """R[i, j] *= scale_factors[i] * scale_factors[j], in place."""
    _check_rows(R, scale_factors, "R")
    if R.shape[1] != scale_factors.shape[0]:
        raise InvalidConfigurationError(
            f"Matrix R has {R.shape[1]} columns but {scale_factors.shape[0]} scale factors"
        )
    R *= np.outer(scale_factors, scale_factors)


def apply_scaling(
    scale_factors: np.ndarray,
    S: Optional[np.ndarray] = None,
    E: Optional[np.ndarray] = None,
    D: Optional[np.ndarray] = None,
    R: Optional[np.ndarray] = None,
    dobs: Optional[np.ndarray] = None,
) -> None:
    """Scale every supplied matrix in place.

    Args:
        scale_factors: 1 / std per active observation.
        S: Ensemble forecast matrix.
        E: Observation perturbation matrix.
        D: Innovation matrix.
        R: Observation error covariance.
        dobs: Value/std pairs per active observation.
    """
    scale_factors = np.asarray(scale_factors, dtype=np.float64)
    for name, matrix in (("S", S), ("E", E), ("D", D), ("dObs", dobs)):
        if matrix is not None:
            scale_rows(matrix, scale_factors, name)
    if R is not None:
        scale_covariance(R, scale_factors)
    logger.debug("Scaled analysis matrices for %d active observations", scale_factors.shape[0])
