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

"""
Single-azimuth occlusion pass over every cell of a grid.

A direction pass runs the ray marcher from each cell for one
(azimuth, elevation angle) pair and returns a boolean occlusion mask
(True = lit). It is a pure function of its arguments: nothing is shared
between calls except the read-only grid, so passes for different azimuths
can run concurrently.

Two engines are available:

- ``numba``: compiled loop calling the ray marching kernel per cell
- ``numpy``: vectorized march advancing the rays of all cells together one
  step at a time; bilinear sampling uses ``scipy.ndimage.map_coordinates``

Both engines produce identical masks with nearest-cell sampling.
"""

import logging
from typing import Optional

import numpy as np
from numba import njit
from scipy.ndimage import map_coordinates

from ..core.constants import DEFAULT_ENGINE, DEFAULT_SAMPLING, ENGINE_NUMBA, ENGINE_NUMPY, ENGINES
from ..core.errors import ConfigurationError, DataError
from ..core.grid import HeightGrid
from .ray_marcher import MarchParameters, _march_ray, march_parameters

logger = logging.getLogger(__name__)


@njit(cache=True, nogil=True)
def _direction_pass_kernel(heights, valid, drow, dcol, step, step_cells,
                           tan_elevation, zscale, max_steps, bilinear):
    rows, cols = heights.shape
    mask = np.zeros((rows, cols), dtype=np.bool_)
    for row in range(rows):
        for col in range(cols):
            if valid[row, col]:
                mask[row, col] = _march_ray(heights, valid, row, col, drow, dcol,
                                            step, step_cells, tan_elevation, zscale,
                                            max_steps, bilinear)
    return mask


def _direction_pass_numba(grid: HeightGrid, params: MarchParameters) -> np.ndarray:
    return _direction_pass_kernel(grid.heights, grid.valid, params.drow, params.dcol,
                                  params.step, params.step_cells, params.tan_elevation,
                                  grid.zscale, params.max_steps, params.bilinear)


def _direction_pass_numpy(grid: HeightGrid, params: MarchParameters) -> np.ndarray:
    """Vectorized march: all active rays advance one sample per iteration"""
    rows, cols = grid.shape
    row_idx, col_idx = np.nonzero(grid.valid)
    origin_r = row_idx.astype(np.float64)
    origin_c = col_idx.astype(np.float64)
    h0 = grid.heights[row_idx, col_idx]

    mask = np.zeros(grid.shape, dtype=bool)
    active = np.arange(row_idx.size)

    if params.bilinear:
        filled = np.where(grid.valid, grid.heights, 0.0)
        invalid = (~grid.valid).astype(np.float64)

    k = 1
    while active.size and (params.max_steps < 0 or k <= params.max_steps):
        offset = k * params.step_cells
        r = origin_r[active] + offset * params.drow
        c = origin_c[active] + offset * params.dcol

        inside = (r >= -0.5) & (r < rows - 0.5) & (c >= -0.5) & (c < cols - 0.5)
        exited = active[~inside]
        mask[row_idx[exited], col_idx[exited]] = True

        active = active[inside]
        r = r[inside]
        c = c[inside]
        if not active.size:
            break

        if params.bilinear:
            coords = np.vstack([np.clip(r, 0.0, rows - 1.0), np.clip(c, 0.0, cols - 1.0)])
            h = map_coordinates(filled, coords, order=1, mode='nearest', prefilter=False)
            touched_nodata = map_coordinates(invalid, coords, order=1, mode='nearest',
                                             prefilter=False) > 0.0
            h[touched_nodata] = np.nan
        else:
            ri = np.floor(r + 0.5).astype(np.intp)
            ci = np.floor(c + 0.5).astype(np.intp)
            h = np.where(grid.valid[ri, ci], grid.heights[ri, ci], np.nan)

        # Comparisons against NaN are False, so no-data samples never occlude
        with np.errstate(invalid='ignore'):
            occluded = grid.zscale * (h - h0[active]) >= (k * params.step) * params.tan_elevation
        active = active[~occluded]
        k += 1

    # Rays cut short by max_distance count as lit
    mask[row_idx[active], col_idx[active]] = True
    return mask


def direction_pass(grid: HeightGrid,
                   azimuth: float,
                   elevation_angle: float,
                   step: Optional[float] = None,
                   sampling: str = DEFAULT_SAMPLING,
                   max_distance: Optional[float] = None,
                   engine: str = DEFAULT_ENGINE) -> np.ndarray:
    """
    Compute the occlusion mask of every cell for one azimuth.

    Parameters
    ----------
    grid : HeightGrid
        Height grid
    azimuth : float
        Azimuth in degrees clockwise from north
    elevation_angle : float
        Sight line elevation in degrees, inside (0, 90)
    step : float, optional
        Ray sampling interval in world units (default: half a cell)
    sampling : str
        'nearest' or 'bilinear'
    max_distance : float, optional
        Maximum ray length in world units
    engine : str
        'numba' or 'numpy'

    Returns
    -------
    np.ndarray
        Boolean mask with the grid's shape, True where the sky is visible
        along ``azimuth``. No-data cells are False.

    Raises
    ------
    ConfigurationError
        If an option is invalid
    DataError
        If the produced mask does not match the grid shape
    """
    if engine not in ENGINES:
        raise ConfigurationError(f"Unknown engine: {engine}. Must be one of {ENGINES}")
    params = march_parameters(grid, azimuth, elevation_angle, step, sampling, max_distance)

    if engine == ENGINE_NUMBA:
        mask = _direction_pass_numba(grid, params)
    elif engine == ENGINE_NUMPY:
        mask = _direction_pass_numpy(grid, params)

    if mask.shape != grid.shape:
        raise DataError(f"Occlusion mask shape {mask.shape} does not match grid {grid.shape}")

    logger.debug(f"Direction pass az={azimuth:.3f} deg: {int(np.count_nonzero(mask))} lit cells")
    return mask
