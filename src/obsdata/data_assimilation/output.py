"""
Analysis matrix output writer.

Writes an assembled UpdateMatrices set to a CF-1.6 style NetCDF file for
offline inspection and replay.
"""

import logging
from pathlib import Path

import numpy as np

from .observations.matrices import UpdateMatrices

logger = logging.getLogger(__name__)


class UpdateMatrixWriter:
    """Writes analysis matrices to NetCDF."""

    def write(self, output_path: Path, matrices: UpdateMatrices) -> Path:
        """Write an assembled matrix set to a NetCDF file.

        Args:
            output_path: Path to the output NetCDF file.
            matrices: Assembled matrices (scaled or not).

        Returns:
            The path written.
        """
        import xarray as xr

        n_active = matrices.active_size
        n_members = matrices.ensemble_size

        keys = [key for key, _ in matrices.observation_keys]
        local_index = [local for _, local in matrices.observation_keys]
        if len(keys) != n_active:
            keys = [''] * n_active
            local_index = [-1] * n_active

        data_vars = {
            'S': (['obs', 'member'], matrices.S),
            'E': (['obs', 'member'], matrices.E),
            'D': (['obs', 'member'], matrices.D),
            'R': (['obs', 'obs_col'], matrices.R),
            'observed_value': (['obs'], matrices.dobs[:, 0]),
            'observed_std': (['obs'], matrices.dobs[:, 1]),
            'scale_factor': (['obs'], matrices.scale_factors),
            'active_mask': (['total'], matrices.active_mask.astype(np.int8)),
            'observation_key': (['obs'], np.array(keys, dtype=str)),
            'local_index': (['obs'], np.array(local_index, dtype=np.int32)),
        }
        coords = {
            'obs': np.arange(n_active),
            'obs_col': np.arange(n_active),
            'member': np.arange(n_members),
            'total': np.arange(matrices.active_mask.shape[0]),
        }

        ds = xr.Dataset(data_vars=data_vars, coords=coords)

        ds.attrs.update({
            'Conventions': 'CF-1.6',
            'title': 'Ensemble Kalman filter analysis matrices',
            'n_active_observations': n_active,
            'n_total_observations': int(matrices.active_mask.shape[0]),
            'n_members': n_members,
            'scaled': int(matrices.scaled),
        })

        ds['S'].attrs = {'long_name': 'Ensemble forecast of observed quantities'}
        ds['E'].attrs = {'long_name': 'Synthetic observation errors'}
        ds['D'].attrs = {'long_name': 'Innovations (observation + perturbation - forecast)'}
        ds['R'].attrs = {'long_name': 'Observation error covariance'}
        ds['scale_factor'].attrs = {'long_name': 'Inverse observation standard deviation'}
        ds['active_mask'].attrs = {'long_name': 'Observation active flag by total index'}

        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        encoding = {}
        for var in ('S', 'E', 'D', 'R'):
            encoding[var] = {'zlib': True, 'complevel': 4}

        ds.to_netcdf(output_path, encoding=encoding)
        logger.info("Wrote analysis matrices: %s", output_path)
        return output_path
