# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2024-2026 SYMFLUENCE Team <dev@symfluence.org>

"""
A named block of scalar observations.

Each element carries a value, a prior standard deviation and an
ActivationState. The number of ACTIVE elements is tracked incrementally
on every state transition.
"""

import logging
import math
from typing import List, Optional

import numpy as np

from ..exceptions import IndexOutOfRangeError, InvalidConfigurationError
from .active_state import (
    ActivationState,
    ObservationEvent,
    active_count_delta,
    transition,
)
from .covariance import ErrorCovariance

logger = logging.getLogger(__name__)


class ObservationBlock:
    """One group of observations sharing an optional error covariance.

    Blocks are created through ``ObservationDataSet.add_block`` so that
    they inherit the dataset's global std scaling.

    Args:
        key: Observation key (uniqueness within a dataset is not enforced).
        size: Number of observation elements.
        error_covariance: Optional size x size covariance with ownership tag.
        global_std_scaling: Multiplier applied to every element's std.
    """

    def __init__(
        self,
        key: str,
        size: int,
        error_covariance: Optional[ErrorCovariance] = None,
        global_std_scaling: float = 1.0,
    ):
        if size < 0:
            raise InvalidConfigurationError(f"Block {key}: size must be >= 0, got {size}")
        if not math.isfinite(global_std_scaling) or global_std_scaling <= 0:
            raise InvalidConfigurationError(
                f"Block {key}: global_std_scaling must be finite and > 0, got {global_std_scaling}"
            )
        if error_covariance is not None and error_covariance.size != size:
            raise InvalidConfigurationError(
                f"Block {key}: error covariance is {error_covariance.size}x{error_covariance.size}, "
                f"expected {size}x{size}"
            )

        self.key = key
        self.size = size
        self.error_covariance = error_covariance
        self.global_std_scaling = global_std_scaling

        self._value = np.zeros(size)
        self._std = np.zeros(size)
        self._state: List[ActivationState] = [ActivationState.INACTIVE] * size
        self._active_count = 0

    # ------------------------------------------------------------------
    # State transitions
    # ------------------------------------------------------------------

    def _apply(self, index: int, event: ObservationEvent) -> ActivationState:
        old = self._state[index]
        new = transition(old, event)
        self._state[index] = new
        self._active_count += active_count_delta(old, new)
        return old

    def _check_index(self, index: int) -> None:
        if not 0 <= index < self.size:
            raise IndexOutOfRangeError(
                f"Local index {index} outside block {self.key} of size {self.size}"
            )

    def set_value(self, index: int, value: float, std: float) -> None:
        """Write an observation and make the element ACTIVE.

        Raises:
            IndexOutOfRangeError: If ``index`` is outside ``[0, size)``.
            InvalidConfigurationError: If ``std`` is not finite and > 0, or
                ``value`` is not finite.
        """
        self._check_index(index)
        if not math.isfinite(std) or std <= 0:
            raise InvalidConfigurationError(
                f"{self.key}({index}): observation std must be finite and > 0, got {std}"
            )
        if not math.isfinite(value):
            raise InvalidConfigurationError(
                f"{self.key}({index}): observation value must be finite, got {value}"
            )
        self._value[index] = value
        self._std[index] = std
        self._apply(index, ObservationEvent.SET_VALUE)

    def set_missing(self, index: int) -> None:
        """Mark an element as having no data."""
        self._check_index(index)
        self._apply(index, ObservationEvent.SET_MISSING)

    def deactivate(self, index: int, reason: str = "", verbose: bool = False) -> None:
        """Exclude an ACTIVE element, e.g. as an outlier. No-op otherwise."""
        self._check_index(index)
        old = self._apply(index, ObservationEvent.DEACTIVATE)
        if old is ActivationState.ACTIVE:
            level = logging.INFO if verbose else logging.DEBUG
            logger.log(level, "Deactivating: %s(%d) : %s", self.key, index, reason)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def active_size(self) -> int:
        return self._active_count

    def get_value(self, index: int) -> float:
        self._check_index(index)
        return float(self._value[index])

    def get_raw_std(self, index: int) -> float:
        """Std as written, without the global scaling."""
        self._check_index(index)
        return float(self._std[index])

    def get_std(self, index: int) -> float:
        """Effective std: the written std times the global std scaling."""
        self._check_index(index)
        return float(self._std[index] * self.global_std_scaling)

    def get_state(self, index: int) -> ActivationState:
        self._check_index(index)
        return self._state[index]

    def is_active(self, index: int) -> bool:
        return self.get_state(index) is ActivationState.ACTIVE

    def active_mask(self) -> np.ndarray:
        """Boolean mask over local indices, True where ACTIVE."""
        return np.fromiter(
            (state is ActivationState.ACTIVE for state in self._state),
            dtype=bool,
            count=self.size,
        )

    def active_values(self) -> np.ndarray:
        return self._value[self.active_mask()]

    def active_std(self) -> np.ndarray:
        """Effective std of the ACTIVE elements in local order."""
        return self._std[self.active_mask()] * self.global_std_scaling

    def verify_active_count(self) -> bool:
        """Full-scan check that the cached active count is consistent."""
        return self._active_count == sum(
            state is ActivationState.ACTIVE for state in self._state
        )

    def __len__(self) -> int:
        return self.size

    def __repr__(self) -> str:
        return (
            f"ObservationBlock(key={self.key!r}, size={self.size}, "
            f"active={self._active_count})"
        )
