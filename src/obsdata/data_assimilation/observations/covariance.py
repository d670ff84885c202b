# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2024-2026 SYMFLUENCE Team <dev@symfluence.org>

"""
Block-local observation error covariance with explicit ownership.

A block either owns its covariance (it keeps a private copy and drops it
once the covariance has been copied into R) or borrows it (the caller keeps
the array and the block only reads it).
"""

from enum import Enum
from typing import Optional

import numpy as np

from obsdata.core.exceptions import require
from ..exceptions import InvalidConfigurationError


class CovarianceOwnership(Enum):
    """Who controls the lifetime of a block's error covariance matrix."""
    OWNED = 'owned'
    BORROWED = 'borrowed'


class ErrorCovariance:
    """Tagged ownership wrapper around a square covariance matrix.

    Use the ``owned`` / ``borrowed`` constructors rather than ``__init__``.

    Args:
        matrix: Square covariance matrix.
        ownership: OWNED or BORROWED.
    """

    def __init__(self, matrix: np.ndarray, ownership: CovarianceOwnership):
        matrix = np.asarray(matrix, dtype=np.float64)
        require(
            matrix.ndim == 2 and matrix.shape[0] == matrix.shape[1],
            f"Error covariance must be square, got shape {matrix.shape}",
            InvalidConfigurationError,
        )
        self.ownership = ownership
        self._matrix: Optional[np.ndarray] = matrix
        self._released = False

    @classmethod
    def owned(cls, matrix: np.ndarray) -> "ErrorCovariance":
        """Take a private copy; it is released after it is copied into R."""
        return cls(np.array(matrix, dtype=np.float64, copy=True), CovarianceOwnership.OWNED)

    @classmethod
    def borrowed(cls, matrix: np.ndarray) -> "ErrorCovariance":
        """Reference the caller's matrix; its lifetime is never touched."""
        return cls(matrix, CovarianceOwnership.BORROWED)

    @property
    def is_owned(self) -> bool:
        return self.ownership is CovarianceOwnership.OWNED

    @property
    def released(self) -> bool:
        return self._released

    @property
    def size(self) -> int:
        return self.matrix.shape[0]

    @property
    def matrix(self) -> np.ndarray:
        if self._released:
            raise InvalidConfigurationError(
                "Owned error covariance was already released after building R"
            )
        return self._matrix

    def active_submatrix(self, mask: np.ndarray) -> np.ndarray:
        """Rows and columns of the active elements only, in local order."""
        return self.matrix[np.ix_(mask, mask)]

    def release(self) -> None:
        """Drop an owned matrix. Borrowed matrices are left alone."""
        if self.is_owned:
            self._matrix = None
            self._released = True

    def __repr__(self) -> str:
        state = "released" if self._released else f"{self._matrix.shape[0]}x{self._matrix.shape[0]}"
        return f"ErrorCovariance({self.ownership.value}, {state})"
