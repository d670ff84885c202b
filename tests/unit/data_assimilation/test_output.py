"""Tests for the NetCDF analysis matrix writer."""

import numpy as np
import pytest

from obsdata.data_assimilation.observations.matrices import UpdateMatrices
from obsdata.data_assimilation.output import UpdateMatrixWriter

xr = pytest.importorskip("xarray")
pytest.importorskip("netCDF4")

pytestmark = [pytest.mark.unit]


@pytest.fixture
def matrices(wopr_dataset, rng):
    wopr_dataset.get_block(0).deactivate(2, "outlier")
    S = np.arange(8, dtype=float).reshape(2, 4)
    E = wopr_dataset.build_e(rng, 4)
    return UpdateMatrices(
        S=S,
        E=E,
        D=wopr_dataset.build_d(E, S),
        R=wopr_dataset.build_r(),
        dobs=wopr_dataset.build_dobs(),
        scale_factors=wopr_dataset.compute_scale_factors(),
        active_mask=wopr_dataset.active_mask(),
        observation_keys=wopr_dataset.active_observations(),
    )


class TestUpdateMatrixWriter:

    def test_write_and_read_back(self, matrices, tmp_path):
        path = UpdateMatrixWriter().write(tmp_path / "out" / "matrices.nc", matrices)
        assert path.exists()

        with xr.open_dataset(path) as ds:
            assert ds.sizes['obs'] == 2
            assert ds.sizes['member'] == 4
            assert ds.sizes['total'] == 3
            np.testing.assert_allclose(ds['S'].values, matrices.S)
            np.testing.assert_allclose(ds['R'].values, matrices.R)
            np.testing.assert_allclose(ds['observed_value'].values, [10.0, 20.0])
            np.testing.assert_array_equal(ds['active_mask'].values, [1, 1, 0])
            assert list(ds['observation_key'].values) == ['WOPR', 'WOPR']
            assert list(ds['local_index'].values) == [0, 1]
            assert ds.attrs['n_total_observations'] == 3
            assert ds.attrs['scaled'] == 0
