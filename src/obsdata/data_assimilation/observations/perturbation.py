# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2024-2026 SYMFLUENCE Team <dev@symfluence.org>

"""
Perturbation strategies for synthetic observation errors (the E matrix).

Rows are active observations and columns are ensemble members. Standard
normal draws are consumed row by row, every member of a row before the
next row, so a seeded generator reproduces E exactly.
"""

from abc import ABC, abstractmethod
from typing import Optional

import numpy as np

from ..exceptions import InvalidConfigurationError


class PerturbationStrategy(ABC):
    """Abstract base class for observation perturbation strategies."""

    min_ensemble_size = 1

    def generate(
        self,
        std: np.ndarray,
        ensemble_size: int,
        rng: Optional[np.random.Generator] = None,
    ) -> np.ndarray:
        """Generate the (len(std), ensemble_size) perturbation matrix.

        Args:
            std: Effective std of each active observation, in active order.
            ensemble_size: Number of ensemble members (columns).
            rng: Source of standard normal draws (default: fresh generator).

        Returns:
            Perturbation matrix of shape (len(std), ensemble_size).
        """
        if ensemble_size < self.min_ensemble_size:
            raise InvalidConfigurationError(
                f"{type(self).__name__} needs ensemble_size >= {self.min_ensemble_size}, "
                f"got {ensemble_size}"
            )
        rng = rng or np.random.default_rng()
        std = np.asarray(std, dtype=np.float64)
        draws = rng.standard_normal((std.shape[0], ensemble_size))
        return self._shape_draws(draws, std)

    @abstractmethod
    def _shape_draws(self, draws: np.ndarray, std: np.ndarray) -> np.ndarray:
        """Turn raw standard normal draws into observation errors.

        Args:
            draws: Standard normal samples (n_active, n_members).
            std: Effective std per row.

        Returns:
            Perturbation matrix, same shape as draws.
        """
        ...


class CenteredPerturbation(PerturbationStrategy):
    """Moment-matched perturbations.

    Each row is centred to an exact zero sample mean and rescaled so that
    its sample standard deviation (normalised by N) equals the requested
    std exactly, not only in expectation.
    """

    min_ensemble_size = 2

    def _shape_draws(self, draws: np.ndarray, std: np.ndarray) -> np.ndarray:
        ensemble_size = draws.shape[1]
        E = draws - draws.mean(axis=1, keepdims=True)
        sum_sq = np.sum(E * E, axis=1)
        factor = std * np.sqrt(ensemble_size / sum_sq)
        E *= factor[:, np.newaxis]
        return E


class NonCenteredPerturbation(PerturbationStrategy):
    """Raw draws scaled by the observation std; no moment matching."""

    def _shape_draws(self, draws: np.ndarray, std: np.ndarray) -> np.ndarray:
        return draws * std[:, np.newaxis]


def perturbation_for(centered: bool) -> PerturbationStrategy:
    """Strategy matching the caller-selected perturbation policy."""
    return CenteredPerturbation() if centered else NonCenteredPerturbation()
