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

"""Obstruction removal for what-if comparison runs"""

import logging
import math

import numpy as np

from ..core.errors import ConfigurationError
from ..core.grid import HeightGrid

logger = logging.getLogger(__name__)


def obstruction_mask(grid: HeightGrid, threshold: float) -> np.ndarray:
    """Boolean mask of valid cells strictly higher than threshold"""
    if threshold is None or not math.isfinite(threshold):
        raise ConfigurationError(f"Obstruction threshold must be finite, got {threshold}")
    return grid.valid & (np.where(grid.valid, grid.heights, -np.inf) > threshold)


def remove_obstructions(grid: HeightGrid, threshold: float) -> HeightGrid:
    """
    Flatten every cell above a height threshold to the grid's lowest terrain.

    Parameters
    ----------
    grid : HeightGrid
        Source grid; left unchanged
    threshold : float
        Cells with height > threshold are replaced by the minimum valid height

    Returns
    -------
    HeightGrid
        New independent grid with the same cell size, zscale and no-data mask

    Raises
    ------
    ConfigurationError
        If threshold is not finite
    DataError
        If the grid has no valid cell to take the minimum from
    """
    baseline = grid.min_valid_height()
    flatten = obstruction_mask(grid, threshold)

    heights = grid.heights.copy()
    heights[flatten] = baseline

    logger.info(f"Flattened {int(np.count_nonzero(flatten))} of {grid.valid_count} cells "
                f"above {threshold:g} to {baseline:g}")
    return grid.with_heights(heights)
