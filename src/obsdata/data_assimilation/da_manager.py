"""
Observation Data Manager.

Top-level orchestrator for one assimilation cycle's observation inputs.

Workflow:
    1. Build (or reset and refill) an ObservationDataSet from config
    2. Caller's outlier filter deactivates or marks observations missing
    3. Assemble E, D, R and dObs for the forecast matrix S
    4. Scale all matrices by 1/std exactly once
    5. Optionally write the matrix set to NetCDF
"""

import logging
from pathlib import Path
from typing import Optional

import numpy as np

from obsdata.core.exceptions import obsdata_error_handler, require_not_none
from obsdata.core.mixins import LoggingMixin
from .config import ObservationDataConfig
from .exceptions import InvalidConfigurationError, ObservationDataError
from .observations.covariance import CovarianceOwnership
from .observations.matrices import UpdateMatrices, assert_finite
from .observations.observation_data import ObservationDataSet


class ObservationDataManager(LoggingMixin):
    """Builds observation datasets and assembles their analysis matrices.

    Args:
        config: Observation data configuration.
        logger: Optional logger (defaults to this module's logger).
    """

    def __init__(
        self,
        config: Optional[ObservationDataConfig] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.config = config or ObservationDataConfig()
        if logger is not None:
            self.logger = logger

    @property
    def analysis(self):
        return self.config.analysis

    def create_rng(self) -> np.random.Generator:
        """Random generator seeded from config (unseeded when no seed is set)."""
        return np.random.default_rng(self.analysis.random_seed)

    def build_dataset(self, dataset: Optional[ObservationDataSet] = None) -> ObservationDataSet:
        """Populate a dataset with the configured blocks.

        Args:
            dataset: Dataset to reset and reuse; a new one is created if None.

        Returns:
            The populated dataset, every configured observation ACTIVE.
        """
        if dataset is None:
            dataset = ObservationDataSet(self.analysis.global_std_scaling)
        else:
            dataset.reset()

        for block_cfg in self.config.blocks:
            covariance = None
            if block_cfg.error_covariance is not None:
                covariance = np.array(block_cfg.error_covariance, dtype=np.float64)
            ownership = (
                CovarianceOwnership.OWNED if block_cfg.covariance_owned
                else CovarianceOwnership.BORROWED
            )
            block = dataset.add_block(block_cfg.key, block_cfg.size, covariance, ownership)
            for i, (value, std) in enumerate(zip(block_cfg.values, block_cfg.std)):
                block.set_value(i, value, std)

        self.logger.info(
            "Built observation dataset: %d blocks, %d observations",
            dataset.block_count(), dataset.total_size()
        )
        return dataset

    def deactivate(self, dataset: ObservationDataSet, total_index: int, reason: str) -> None:
        """Deactivate one observation by total index (outlier rejection)."""
        block, local = dataset.lookup(total_index)
        block.deactivate(local, reason, verbose=self.analysis.verbose_deactivation)

    def assemble(
        self,
        dataset: ObservationDataSet,
        S: np.ndarray,
        rng: Optional[np.random.Generator] = None,
    ) -> UpdateMatrices:
        """Assemble the analysis matrices for one cycle.

        Args:
            dataset: Populated dataset (after any outlier deactivation).
            S: Ensemble forecast of the active observations,
                shape (active_size, n_members). Not modified.
            rng: Random generator for E (default: seeded from config).

        Returns:
            UpdateMatrices, scaled when ``scale_matrices`` is set.
        """
        S = np.array(S, dtype=np.float64, copy=True)
        if S.ndim != 2 or S.shape[0] != dataset.active_size():
            raise InvalidConfigurationError(
                f"S has shape {S.shape}, expected ({dataset.active_size()}, n_members)"
            )
        rng = rng if rng is not None else self.create_rng()

        with obsdata_error_handler("analysis matrix assembly", self.logger,
                                   error_type=ObservationDataError):
            assert_finite(S, "S")
            E = dataset.build_e(rng, S.shape[1], centered=self.analysis.centered_perturbations)
            D = dataset.build_d(E, S)
            R = dataset.build_r()
            dobs = dataset.build_dobs()
            scale_factors = dataset.compute_scale_factors()

            matrices = UpdateMatrices(
                S=S, E=E, D=D, R=R, dobs=dobs,
                scale_factors=scale_factors,
                active_mask=dataset.active_mask(),
                observation_keys=dataset.active_observations(),
            )

            self.log_shapes("Assembled", S=S, E=E, D=D, R=R, dObs=dobs)

            if self.analysis.scale_matrices:
                dataset.scale(matrices.S, E=matrices.E, D=matrices.D,
                              R=matrices.R, dobs=matrices.dobs)
                matrices.scaled = True

        self.logger.info(
            "Assembled analysis matrices: %d active of %d observations, %d members",
            matrices.active_size, dataset.total_size(), matrices.ensemble_size
        )
        return matrices

    def write(self, matrices: UpdateMatrices, output_path: Optional[Path] = None) -> Path:
        """Write an assembled matrix set to NetCDF.

        Args:
            matrices: Assembled matrices.
            output_path: Target file; defaults to ``<output_dir>/analysis_matrices.nc``.

        Returns:
            Path to the output file.
        """
        from .output import UpdateMatrixWriter

        if output_path is None:
            output_dir = require_not_none(
                self.analysis.output_dir, "OBS_OUTPUT_DIR", InvalidConfigurationError
            )
            output_path = Path(output_dir) / "analysis_matrices.nc"

        return UpdateMatrixWriter().write(output_path, matrices)
