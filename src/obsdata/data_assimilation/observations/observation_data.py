# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2024-2026 SYMFLUENCE Team <dev@symfluence.org>

"""
Ordered collection of observation blocks and analysis matrix assembly.

Two index spaces are in use:

- total index: position among all observations of all blocks, including
  inactive ones, in block insertion order then local index;
- active index: position among the ACTIVE observations only, same order.

Vectors over the total index (value, std, active mask) have
``total_size()`` entries; the assembled matrices S, E, D, R and dObs
have ``active_size()`` rows.
"""

import logging
from typing import Iterator, List, Optional, Tuple, Union

import numpy as np

from ..exceptions import IndexOutOfRangeError, InvalidConfigurationError
from .active_state import ActivationState
from .covariance import CovarianceOwnership, ErrorCovariance
from .matrices import assert_finite
from .observation_block import ObservationBlock
from .perturbation import perturbation_for
from .scaling import apply_scaling, compute_scale_factors, scale_covariance, scale_rows

logger = logging.getLogger(__name__)


class ObservationDataSet:
    """Observation blocks for one assimilation cycle.

    The dataset is reset and reused between cycles rather than recreated.
    Block insertion order defines the row layout of every assembled matrix.

    Args:
        global_std_scaling: Std multiplier inherited by every block added.
    """

    def __init__(self, global_std_scaling: float = 1.0):
        if not np.isfinite(global_std_scaling) or global_std_scaling <= 0:
            raise InvalidConfigurationError(
                f"global_std_scaling must be finite and > 0, got {global_std_scaling}"
            )
        self.global_std_scaling = global_std_scaling
        self._blocks: List[ObservationBlock] = []

    # ------------------------------------------------------------------
    # Block management
    # ------------------------------------------------------------------

    def reset(self) -> None:
        """Discard all blocks."""
        self._blocks.clear()

    def add_block(
        self,
        key: str,
        size: int,
        error_covariance: Optional[Union[ErrorCovariance, np.ndarray]] = None,
        ownership: CovarianceOwnership = CovarianceOwnership.BORROWED,
    ) -> ObservationBlock:
        """Append a new block and return it for population.

        Args:
            key: Observation key.
            size: Number of elements in the block.
            error_covariance: Optional size x size covariance, either already
                wrapped or a plain array wrapped with ``ownership``.
            ownership: Ownership applied when ``error_covariance`` is an array.

        Returns:
            The new block, all elements INACTIVE.
        """
        if error_covariance is not None and not isinstance(error_covariance, ErrorCovariance):
            if ownership is CovarianceOwnership.OWNED:
                error_covariance = ErrorCovariance.owned(error_covariance)
            else:
                error_covariance = ErrorCovariance.borrowed(error_covariance)

        block = ObservationBlock(
            key, size,
            error_covariance=error_covariance,
            global_std_scaling=self.global_std_scaling,
        )
        self._blocks.append(block)
        return block

    def get_block(self, index: int) -> ObservationBlock:
        if not 0 <= index < len(self._blocks):
            raise IndexOutOfRangeError(
                f"Block index {index} outside dataset of {len(self._blocks)} blocks"
            )
        return self._blocks[index]

    @property
    def blocks(self) -> Tuple[ObservationBlock, ...]:
        return tuple(self._blocks)

    def __iter__(self) -> Iterator[ObservationBlock]:
        return iter(self._blocks)

    # ------------------------------------------------------------------
    # Sizes and lookup
    # ------------------------------------------------------------------

    def block_count(self) -> int:
        return len(self._blocks)

    def total_size(self) -> int:
        return sum(block.size for block in self._blocks)

    def active_size(self) -> int:
        return sum(block.active_size for block in self._blocks)

    def lookup(self, total_index: int) -> Tuple[ObservationBlock, int]:
        """Resolve a total index to its block and local index.

        Linear scan over the blocks; datasets hold tens to a few thousand
        observations.

        Raises:
            IndexOutOfRangeError: If ``total_index`` is not in ``[0, total_size())``.
        """
        if total_index >= 0:
            offset = 0
            for block in self._blocks:
                if total_index < offset + block.size:
                    return block, total_index - offset
                offset += block.size
        raise IndexOutOfRangeError(
            f"Could not look up observation {total_index}: total size is {self.total_size()}"
        )

    def value_at(self, total_index: int) -> float:
        block, local = self.lookup(total_index)
        return block.get_value(local)

    def std_at(self, total_index: int) -> float:
        """Effective (scaled) std at a total index."""
        block, local = self.lookup(total_index)
        return block.get_std(local)

    def state_at(self, total_index: int) -> ActivationState:
        block, local = self.lookup(total_index)
        return block.get_state(local)

    def active_index(self, total_index: int) -> int:
        """Row of an ACTIVE observation in the assembled matrices.

        Raises:
            IndexOutOfRangeError: If the index is out of range or the
                observation is not ACTIVE.
        """
        target, local = self.lookup(total_index)
        if not target.is_active(local):
            raise IndexOutOfRangeError(
                f"Observation {total_index} ({target.key}({local})) is "
                f"{target.get_state(local).value} and has no active index"
            )
        offset = 0
        for block in self._blocks:
            if block is target:
                return offset + int(block.active_mask()[:local].sum())
            offset += block.active_size
        raise IndexOutOfRangeError(f"Block {target.key} is not part of this dataset")

    def active_mask(self) -> np.ndarray:
        """ACTIVE flag per total index, rebuilt from block state on every call."""
        if not self._blocks:
            return np.zeros(0, dtype=bool)
        return np.concatenate([block.active_mask() for block in self._blocks])

    def active_observations(self) -> List[Tuple[str, int]]:
        """(block key, local index) for each active row, in active order."""
        return [
            (block.key, int(local))
            for block in self._blocks
            for local in np.flatnonzero(block.active_mask())
        ]

    def active_values(self) -> np.ndarray:
        if not self._blocks:
            return np.zeros(0)
        return np.concatenate([block.active_values() for block in self._blocks])

    def active_std(self) -> np.ndarray:
        """Effective std per active row."""
        if not self._blocks:
            return np.zeros(0)
        return np.concatenate([block.active_std() for block in self._blocks])

    # ------------------------------------------------------------------
    # Matrix assembly
    # ------------------------------------------------------------------

    def build_e(
        self,
        rng: Optional[np.random.Generator],
        ensemble_size: int,
        centered: bool = True,
    ) -> np.ndarray:
        """Synthetic observation errors, shape (active_size, ensemble_size).

        Args:
            rng: Source of standard normal draws.
            ensemble_size: Number of ensemble members.
            centered: Moment-match each row (requires ensemble_size >= 2).
        """
        strategy = perturbation_for(centered)
        E = strategy.generate(self.active_std(), ensemble_size, rng)
        logger.debug("Built E %s (centered=%s)", E.shape, centered)
        return assert_finite(E, "E")

    def build_d(self, E: np.ndarray, S: np.ndarray) -> np.ndarray:
        """Innovations D = E - S + observed value, row by row."""
        E = np.asarray(E, dtype=np.float64)
        S = np.asarray(S, dtype=np.float64)
        if E.ndim != 2 or E.shape != S.shape or E.shape[0] != self.active_size():
            raise InvalidConfigurationError(
                f"E {E.shape} and S {S.shape} must both be "
                f"({self.active_size()}, ensemble_size)"
            )
        D = E - S
        D += self.active_values()[:, np.newaxis]
        logger.debug("Built D %s", D.shape)
        return assert_finite(D, "D")

    def build_r(self) -> np.ndarray:
        """Observation error covariance, block diagonal in active order.

        Blocks without a covariance contribute std**2 on the diagonal. Blocks
        with a covariance contribute its active rows and columns. Owned
        covariances are released only once R has passed the finiteness check.
        """
        n_active = self.active_size()
        R = np.zeros((n_active, n_active))
        offset = 0
        for block in self._blocks:
            n = block.active_size
            rows = slice(offset, offset + n)
            if block.error_covariance is None:
                R[rows, rows] = np.diag(block.active_std() ** 2)
            else:
                R[rows, rows] = block.error_covariance.active_submatrix(block.active_mask())
            offset += n
        assert_finite(R, "R")

        # Owned covariances are released only after R is accepted
        for block in self._blocks:
            if block.error_covariance is not None:
                block.error_covariance.release()
        logger.debug("Built R %s", R.shape)
        return R

    def build_dobs(self) -> np.ndarray:
        """(value, effective std) per active observation, shape (active_size, 2)."""
        dobs = np.column_stack([self.active_values(), self.active_std()])
        return assert_finite(dobs.reshape(self.active_size(), 2), "dObs")

    # ------------------------------------------------------------------
    # Scaling
    # ------------------------------------------------------------------

    def compute_scale_factors(self) -> np.ndarray:
        """1 / effective std per active observation."""
        return compute_scale_factors(self.active_std())

    def scale_matrix(self, matrix: np.ndarray) -> None:
        """Scale the rows of a (active_size, k) matrix in place."""
        scale_rows(matrix, self.compute_scale_factors())

    def scale_r_matrix(self, R: np.ndarray) -> None:
        """Scale an error covariance in place."""
        scale_covariance(R, self.compute_scale_factors())

    def scale(
        self,
        S: np.ndarray,
        E: Optional[np.ndarray] = None,
        D: Optional[np.ndarray] = None,
        R: Optional[np.ndarray] = None,
        dobs: Optional[np.ndarray] = None,
    ) -> np.ndarray:
        """Compute the scale factors once and apply them to every matrix.

        Returns:
            The scale factors used.
        """
        scale_factors = self.compute_scale_factors()
        apply_scaling(scale_factors, S=S, E=E, D=D, R=R, dobs=dobs)
        return scale_factors

    def __repr__(self) -> str:
        return (
            f"ObservationDataSet(blocks={self.block_count()}, "
            f"total={self.total_size()}, active={self.active_size()})"
        )
