# Copyright 2024 inuex35
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Run configuration for sky visibility computation"""

import math
import os
from dataclasses import dataclass, field, fields
from typing import Any, Optional

import numpy as np

from ..core.constants import (
    DEFAULT_ENGINE,
    DEFAULT_OUTPUT_MODE,
    DEFAULT_SAMPLING,
    DEFAULT_STEP_FRACTION,
    DEFAULT_ZSCALE,
    ENGINES,
    OUTPUT_MODES,
    SAMPLING_MODES,
)
from ..core.errors import ConfigurationError
from ..geometry.azimuth import default_azimuths, validate_azimuths, validate_elevation_angle


def default_worker_count() -> int:
    """Available parallelism minus one, never below one"""
    return max(1, (os.cpu_count() or 1) - 1)


@dataclass
class SkyViewConfig:
    """Sky visibility run configuration.

    Attributes
    ----------
    elevation_angle : float
        Minimum line-of-sight elevation in degrees, strictly inside (0, 90)
    azimuths : np.ndarray
        Azimuths in degrees to test (default: the 360 whole degrees)
    zscale : float
        Vertical exaggeration of height differences; overrides the zscale of
        a prebuilt grid
    worker_count : int
        Number of worker threads running direction passes
    output_mode : str
        'degrees' (0-360) or 'proportion' (0-1)
    sampling : str
        Height lookup along the ray: 'nearest' or 'bilinear'
    step_fraction : float
        Ray sampling interval as a fraction of the cell size, in (0, 1]
    max_distance : float, optional
        Maximum ray length in world units (None = until the grid edge)
    engine : str
        Direction pass implementation: 'numba' or 'numpy'
    """
    elevation_angle: float
    azimuths: np.ndarray = field(default_factory=default_azimuths)
    zscale: float = DEFAULT_ZSCALE
    worker_count: int = field(default_factory=default_worker_count)
    output_mode: str = DEFAULT_OUTPUT_MODE
    sampling: str = DEFAULT_SAMPLING
    step_fraction: float = DEFAULT_STEP_FRACTION
    max_distance: Optional[float] = None
    engine: str = DEFAULT_ENGINE

    @property
    def n_azimuths(self) -> int:
        return int(np.size(self.azimuths))

    def validate(self) -> 'SkyViewConfig':
        """
        Check every option and normalize the azimuth set in place.

        Returns
        -------
        SkyViewConfig
            self, for chaining

        Raises
        ------
        ConfigurationError
            On the first invalid option
        """
        self.elevation_angle = validate_elevation_angle(self.elevation_angle)
        self.azimuths = validate_azimuths(self.azimuths)

        if not math.isfinite(self.zscale) or self.zscale <= 0.0:
            raise ConfigurationError(f"zscale must be positive, got {self.zscale}")
        if isinstance(self.worker_count, bool) or int(self.worker_count) != self.worker_count \
                or self.worker_count < 1:
            raise ConfigurationError(f"worker_count must be a positive integer, got {self.worker_count}")
        self.worker_count = int(self.worker_count)
        if self.output_mode not in OUTPUT_MODES:
            raise ConfigurationError(
                f"Unknown output mode: {self.output_mode}. Must be one of {OUTPUT_MODES}")
        if self.sampling not in SAMPLING_MODES:
            raise ConfigurationError(
                f"Unknown sampling mode: {self.sampling}. Must be one of {SAMPLING_MODES}")
        if self.engine not in ENGINES:
            raise ConfigurationError(f"Unknown engine: {self.engine}. Must be one of {ENGINES}")
        if not math.isfinite(self.step_fraction) or not (0.0 < self.step_fraction <= 1.0):
            raise ConfigurationError(f"step_fraction must lie in (0, 1], got {self.step_fraction}")
        if self.max_distance is not None and \
                (math.isnan(self.max_distance) or self.max_distance <= 0.0):
            raise ConfigurationError(f"max_distance must be positive, got {self.max_distance}")
        return self

    @classmethod
    def from_dict(cls, config: dict[str, Any]) -> 'SkyViewConfig':
        """
        Build and validate a configuration from a dictionary.

        Example config:
        {
            'elevation_angle': 30.0,
            'azimuths': [0, 45, 90, 135, 180, 225, 270, 315],
            'zscale': 1.0,
            'worker_count': 4,
            'output_mode': 'proportion'
        }
        """
        known = {f.name for f in fields(cls)}
        unknown = set(config) - known
        if unknown:
            raise ConfigurationError(f"Unknown configuration keys: {sorted(unknown)}")
        if 'elevation_angle' not in config:
            raise ConfigurationError("Configuration requires 'elevation_angle'")
        return cls(**config).validate()

    def to_dict(self) -> dict[str, Any]:
        """Plain-dict form of the configuration, accepted by from_dict"""
        return {
            'elevation_angle': self.elevation_angle,
            'azimuths': [float(az) for az in np.atleast_1d(self.azimuths)],
            'zscale': self.zscale,
            'worker_count': self.worker_count,
            'output_mode': self.output_mode,
            'sampling': self.sampling,
            'step_fraction': self.step_fraction,
            'max_distance': self.max_distance,
            'engine': self.engine,
        }
