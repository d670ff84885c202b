# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2024-2026 SYMFLUENCE Team <dev@symfluence.org>

"""
Assembled analysis matrices and their consistency check.
"""

from dataclasses import dataclass, field
from typing import List, Tuple

import numpy as np

from ..exceptions import NonFiniteResultError


def assert_finite(matrix: np.ndarray, name: str) -> np.ndarray:
    """Raise NonFiniteResultError if ``matrix`` holds any NaN or Inf.

    Args:
        matrix: Assembled matrix.
        name: Name tag used in the error message (e.g. ``"R"``).

    Returns:
        The matrix, unchanged.
    """
    finite = np.isfinite(matrix)
    if not finite.all():
        rows, cols = np.nonzero(~finite.reshape(matrix.shape[0], -1))
        raise NonFiniteResultError(
            f"Matrix {name} {matrix.shape} has {rows.size} non-finite entries, "
            f"first at ({rows[0]}, {cols[0]})"
        )
    return matrix


@dataclass
class UpdateMatrices:
    """Matrix set for one analysis step, in active-index row order.

    Attributes:
        S: Ensemble forecast of the observed quantities (n_active, n_members).
        E: Synthetic observation errors (n_active, n_members).
        D: Innovations E - S + observed value (n_active, n_members).
        R: Observation error covariance (n_active, n_active).
        dobs: Observed value and std per active row (n_active, 2).
        scale_factors: 1 / std per active row (n_active,).
        active_mask: ACTIVE flag per total index (n_total,).
        observation_keys: (block key, local index) for each active row.
        scaled: Whether scale_factors have been applied.
    """
    S: np.ndarray
    E: np.ndarray
    D: np.ndarray
    R: np.ndarray
    dobs: np.ndarray
    scale_factors: np.ndarray
    active_mask: np.ndarray
    observation_keys: List[Tuple[str, int]] = field(default_factory=list)
    scaled: bool = False

    @property
    def active_size(self) -> int:
        return self.E.shape[0]

    @property
    def ensemble_size(self) -> int:
        return self.E.shape[1]
