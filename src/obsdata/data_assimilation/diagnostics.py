"""
Observation data diagnostics.

Provides human-readable views of an ObservationDataSet:
- Per-observation table (value, std, state, active row)
- Per-block activation counts
- Plain-text block dump
"""

import logging
from collections import Counter

import numpy as np
import pandas as pd

from .observations.active_state import ActivationState
from .observations.observation_block import ObservationBlock
from .observations.observation_data import ObservationDataSet

logger = logging.getLogger(__name__)


def observation_summary(dataset: ObservationDataSet) -> pd.DataFrame:
    """One row per observation in total-index order.

    Args:
        dataset: Observation dataset.

    Returns:
        DataFrame with columns block, local_index, value, std, state and
        active_index (-1 where the observation is not ACTIVE), indexed by
        total index.
    """
    records = []
    active_row = 0
    for block in dataset:
        for local in range(block.size):
            state = block.get_state(local)
            if state is ActivationState.ACTIVE:
                active_index = active_row
                active_row += 1
            else:
                active_index = -1
            records.append({
                'block': block.key,
                'local_index': local,
                'value': block.get_value(local),
                'std': block.get_std(local),
                'state': state.value,
                'active_index': active_index,
            })

    columns = ['block', 'local_index', 'value', 'std', 'state', 'active_index']
    df = pd.DataFrame.from_records(records, columns=columns)
    df.index.name = 'total_index'
    return df


def block_summary(dataset: ObservationDataSet) -> pd.DataFrame:
    """Activation counts per block, in insertion order.

    Returns:
        DataFrame with columns key, size, active, deactivated, missing,
        inactive and covariance ('none', 'owned' or 'borrowed').
    """
    rows = []
    for block in dataset:
        counts = Counter(block.get_state(i) for i in range(block.size))
        cov = block.error_covariance
        rows.append({
            'key': block.key,
            'size': block.size,
            'active': block.active_size,
            'deactivated': counts[ActivationState.DEACTIVATED],
            'missing': counts[ActivationState.MISSING],
            'inactive': counts[ActivationState.INACTIVE],
            'covariance': cov.ownership.value if cov is not None else 'none',
        })

    columns = ['key', 'size', 'active', 'deactivated', 'missing', 'inactive', 'covariance']
    return pd.DataFrame(rows, columns=columns)


def format_block(block: ObservationBlock) -> str:
    """Plain-text dump with one ``[ value  +/-  std ]`` line per element."""
    lines = [
        f"[ {block.get_value(i):12.5f}  +/-  {block.get_raw_std(i):12.5f} ]"
        for i in range(block.size)
    ]
    return "\n".join(lines)


def active_fraction(dataset: ObservationDataSet) -> float:
    """Share of observations that are ACTIVE (nan for an empty dataset)."""
    total = dataset.total_size()
    if total == 0:
        return float(np.nan)
    return dataset.active_size() / total
