"""Shared fixtures for observation data unit tests."""

import numpy as np
import pytest

from obsdata.data_assimilation.observations import ObservationDataSet


@pytest.fixture
def rng():
    return np.random.default_rng(42)


@pytest.fixture
def wopr_dataset():
    """One block 'WOPR' with values [10, 20, 30] and std [1, 2, 3], all active."""
    dataset = ObservationDataSet()
    block = dataset.add_block("WOPR", 3)
    for i, (value, std) in enumerate(zip([10.0, 20.0, 30.0], [1.0, 2.0, 3.0])):
        block.set_value(i, value, std)
    return dataset


@pytest.fixture
def two_block_dataset():
    """Blocks of size 2 and 3; the last element of the second block is missing."""
    dataset = ObservationDataSet()
    first = dataset.add_block("WOPR", 2)
    first.set_value(0, 1.0, 0.1)
    first.set_value(1, 2.0, 0.2)
    second = dataset.add_block("WWCT", 3)
    second.set_value(0, 3.0, 0.3)
    second.set_value(1, 4.0, 0.4)
    second.set_missing(2)
    return dataset
