# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2024-2026 SYMFLUENCE Team <dev@symfluence.org>

"""
Observation data and analysis-matrix configuration models.

Contains AnalysisConfig for the matrix assembly settings of one
assimilation cycle, ObservationBlockConfig describing one named block
of scalar observations, and ObservationDataConfig as the parent container.
"""

import math
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

FROZEN_CONFIG = ConfigDict(extra='allow', populate_by_name=True, frozen=True)


class AnalysisConfig(BaseModel):
    """Configuration for assembling the analysis matrices of one cycle."""
    model_config = FROZEN_CONFIG

    global_std_scaling: float = Field(
        default=1.0, alias='OBS_GLOBAL_STD_SCALING', gt=0.0,
        description='Multiplier applied to every observation std'
    )
    centered_perturbations: bool = Field(
        default=True, alias='OBS_CENTERED_PERTURBATIONS',
        description='Moment-match the synthetic observation errors (E)'
    )
    scale_matrices: bool = Field(
        default=True, alias='OBS_SCALE_MATRICES',
        description='Normalise S, E, D, R and dObs by 1/std before analysis'
    )
    random_seed: Optional[int] = Field(default=None, alias='OBS_RANDOM_SEED')
    verbose_deactivation: bool = Field(default=False, alias='OBS_VERBOSE_DEACTIVATION')
    output_dir: Optional[str] = Field(default=None, alias='OBS_OUTPUT_DIR')


class ObservationBlockConfig(BaseModel):
    """A named group of observations with an optional joint error covariance."""
    model_config = FROZEN_CONFIG

    key: str = Field(..., description='Observation key, e.g. "WOPR:OP_1"')
    values: List[float] = Field(default_factory=list)
    std: List[float] = Field(default_factory=list)
    error_covariance: Optional[List[List[float]]] = Field(default=None)
    covariance_owned: bool = Field(
        default=False,
        description='Block releases the covariance once it is copied into R'
    )

    @field_validator('std')
    @classmethod
    def validate_std(cls, v):
        """Ensure every std is finite and strictly positive."""
        for s in v:
            if not math.isfinite(s) or s <= 0:
                raise ValueError(f"Observation std must be finite and > 0, got {s}")
        return v

    @model_validator(mode='after')
    def validate_shapes(self):
        """Check values/std lengths and the covariance shape agree."""
        size = len(self.values)
        if len(self.std) != size:
            raise ValueError(
                f"Block {self.key}: {size} values but {len(self.std)} std entries"
            )
        if self.error_covariance is not None:
            if len(self.error_covariance) != size or any(
                len(row) != size for row in self.error_covariance
            ):
                raise ValueError(
                    f"Block {self.key}: error_covariance must be {size}x{size}"
                )
        return self

    @property
    def size(self) -> int:
        return len(self.values)


class ObservationDataConfig(BaseModel):
    """Top-level observation data configuration."""
    model_config = FROZEN_CONFIG

    analysis: AnalysisConfig = Field(default_factory=AnalysisConfig)
    blocks: List[ObservationBlockConfig] = Field(default_factory=list)
