"""Tests for ObservationDataManager."""

import numpy as np
import pytest

from obsdata.data_assimilation import (
    ActivationState,
    AnalysisConfig,
    ObservationBlockConfig,
    ObservationDataConfig,
    ObservationDataManager,
    ObservationDataSet,
)
from obsdata.data_assimilation.exceptions import (
    InvalidConfigurationError,
    NonFiniteResultError,
)

pytestmark = [pytest.mark.unit, pytest.mark.quick]


def _config(**analysis):
    return ObservationDataConfig(
        analysis=AnalysisConfig(**analysis),
        blocks=[
            ObservationBlockConfig(key="WOPR", values=[10.0, 20.0, 30.0], std=[1.0, 2.0, 3.0]),
            ObservationBlockConfig(
                key="WGOR",
                values=[1.0, 2.0],
                std=[2.0, 3.0],
                error_covariance=[[4.0, 1.0], [1.0, 9.0]],
                covariance_owned=True,
            ),
        ],
    )


@pytest.fixture
def manager():
    return ObservationDataManager(_config(random_seed=11))


class TestBuildDataset:

    def test_blocks_from_config(self, manager):
        dataset = manager.build_dataset()
        assert dataset.block_count() == 2
        assert dataset.total_size() == 5
        assert dataset.active_size() == 5
        assert dataset.get_block(1).error_covariance.is_owned

    def test_reuses_dataset(self, manager):
        dataset = ObservationDataSet()
        dataset.add_block("OLD", 4)
        same = manager.build_dataset(dataset)
        assert same is dataset
        assert [block.key for block in dataset] == ["WOPR", "WGOR"]

    def test_global_scaling_applied(self):
        manager = ObservationDataManager(_config(OBS_GLOBAL_STD_SCALING=2.0))
        dataset = manager.build_dataset()
        assert dataset.std_at(0) == pytest.approx(2.0)

    def test_deactivate_by_total_index(self, manager):
        dataset = manager.build_dataset()
        manager.deactivate(dataset, 3, "outlier")
        assert dataset.state_at(3) is ActivationState.DEACTIVATED
        assert dataset.active_size() == 4

    def test_custom_logger(self, mock_logger):
        manager = ObservationDataManager(_config(), logger=mock_logger)
        manager.build_dataset()
        mock_logger.info.assert_called()


class TestAssemble:

    def test_unscaled_matrices(self):
        manager = ObservationDataManager(_config(random_seed=3, scale_matrices=False))
        dataset = manager.build_dataset()
        S = np.zeros((5, 6))
        matrices = manager.assemble(dataset, S)

        assert not matrices.scaled
        assert matrices.active_size == 5
        assert matrices.ensemble_size == 6
        np.testing.assert_allclose(
            matrices.D, matrices.E + dataset.active_values()[:, np.newaxis]
        )
        np.testing.assert_allclose(matrices.R[3:, 3:], [[4.0, 1.0], [1.0, 9.0]])
        np.testing.assert_allclose(np.diag(matrices.R)[:3], [1.0, 4.0, 9.0])
        assert matrices.observation_keys[3] == ("WGOR", 0)

    def test_scaled_matrices(self, manager):
        dataset = manager.build_dataset()
        matrices = manager.assemble(dataset, np.ones((5, 4)))
        assert matrices.scaled
        np.testing.assert_allclose(np.diag(matrices.R), 1.0)
        np.testing.assert_allclose(matrices.dobs[:, 1], 1.0)
        np.testing.assert_allclose(matrices.scale_factors, [1.0, 0.5, 1.0 / 3.0, 0.5, 1.0 / 3.0])

    def test_input_forecast_not_modified(self, manager):
        dataset = manager.build_dataset()
        S = np.ones((5, 4))
        manager.assemble(dataset, S)
        np.testing.assert_array_equal(S, 1.0)

    def test_same_seed_reproducible(self):
        first_manager = ObservationDataManager(_config(random_seed=5))
        second_manager = ObservationDataManager(_config(random_seed=5))
        S = np.zeros((5, 4))
        first = first_manager.assemble(first_manager.build_dataset(), S)
        second = second_manager.assemble(second_manager.build_dataset(), S)
        np.testing.assert_array_equal(first.E, second.E)

    def test_after_deactivation(self, manager):
        dataset = manager.build_dataset()
        manager.deactivate(dataset, 3, "outlier")
        matrices = manager.assemble(dataset, np.zeros((4, 3)))
        assert matrices.R.shape == (4, 4)
        np.testing.assert_array_equal(matrices.active_mask, [True, True, True, False, True])

    def test_wrong_forecast_shape(self, manager):
        dataset = manager.build_dataset()
        with pytest.raises(InvalidConfigurationError):
            manager.assemble(dataset, np.zeros((4, 3)))

    def test_non_finite_forecast(self, manager):
        dataset = manager.build_dataset()
        S = np.zeros((5, 3))
        S[0, 0] = np.inf
        with pytest.raises(NonFiniteResultError):
            manager.assemble(dataset, S)

    def test_single_member_centred_rejected(self, manager):
        dataset = manager.build_dataset()
        with pytest.raises(InvalidConfigurationError):
            manager.assemble(dataset, np.zeros((5, 1)))


class TestWrite:

    def test_write_requires_output_dir(self, manager):
        dataset = manager.build_dataset()
        matrices = manager.assemble(dataset, np.zeros((5, 3)))
        with pytest.raises(InvalidConfigurationError):
            manager.write(matrices)

    def test_write_to_output_dir(self, tmp_path):
        pytest.importorskip("netCDF4")
        manager = ObservationDataManager(_config(random_seed=1, output_dir=str(tmp_path)))
        dataset = manager.build_dataset()
        matrices = manager.assemble(dataset, np.zeros((5, 3)))
        path = manager.write(matrices)
        assert path == tmp_path / "analysis_matrices.nc"
        assert path.exists()
