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
Line-of-sight ray marching over a height grid.

For one origin cell, one azimuth and one elevation angle the marcher decides
whether terrain between the origin and the grid edge rises above the sight
line leaving the origin at that elevation. The ray is sampled at a fixed
interval ``step`` (at most one cell) starting one step beyond the origin, so
the origin never occludes itself. At distance ``d`` a sample occludes when

    zscale * (h(d) - h0) >= d * tan(elevation)

Ties occlude. Samples falling on no-data cells are skipped, and marching
stops at the first occluding sample or when the ray leaves the grid extent
``[-0.5, rows - 0.5) x [-0.5, cols - 0.5)`` in index space.

Functions
---------
march_parameters : function
    Validate and precompute the per-azimuth marching parameters
is_unobstructed : function
    Test one origin cell

Notes
-----
The kernels operate on raw numpy arrays and are compiled with
``nogil=True`` so direction passes can run on several threads at once.
"""

import math
from typing import NamedTuple, Optional

import numpy as np
from numba import njit

from ..core.constants import DEFAULT_SAMPLING, DEFAULT_STEP_FRACTION, SAMPLING_BILINEAR, SAMPLING_MODES
from ..core.errors import ConfigurationError
from ..core.grid import HeightGrid
from ..geometry.azimuth import azimuth_to_direction, validate_elevation_angle


class MarchParameters(NamedTuple):
    """Precomputed values shared by every ray of one direction pass"""
    drow: float           # row step per unit distance (index space)
    dcol: float           # column step per unit distance (index space)
    step: float           # sampling interval (world units)
    step_cells: float     # sampling interval (cells)
    tan_elevation: float  # slope of the sight line
    max_steps: int        # last sample index to test, -1 for unlimited
    bilinear: bool        # bilinear instead of nearest-cell lookup


def march_parameters(grid: HeightGrid,
                     azimuth: float,
                     elevation_angle: float,
                     step: Optional[float] = None,
                     sampling: str = DEFAULT_SAMPLING,
                     max_distance: Optional[float] = None) -> MarchParameters:
    """
    Validate marching options and precompute the kernel arguments.

    Parameters
    ----------
    grid : HeightGrid
        Height grid to march over
    azimuth : float
        Ray azimuth in degrees clockwise from north
    elevation_angle : float
        Sight line elevation in degrees, inside (0, 90)
    step : float, optional
        Sampling interval in world units, 0 < step <= cell_size.
        Defaults to half a cell.
    sampling : str
        'nearest' or 'bilinear'
    max_distance : float, optional
        Maximum ray length in world units

    Returns
    -------
    MarchParameters
        Kernel arguments

    Raises
    ------
    ConfigurationError
        If any option is out of range
    """
    elevation = validate_elevation_angle(elevation_angle)
    if sampling not in SAMPLING_MODES:
        raise ConfigurationError(f"Unknown sampling mode: {sampling}. Must be one of {SAMPLING_MODES}")

    if step is None:
        step = DEFAULT_STEP_FRACTION * grid.cell_size
    step = float(step)
    if not math.isfinite(step) or step <= 0.0 or step > grid.cell_size:
        raise ConfigurationError(
            f"Ray step must lie in (0, cell_size={grid.cell_size}], got {step}")

    max_steps = -1
    if max_distance is not None:
        if math.isnan(max_distance) or max_distance <= 0.0:
            raise ConfigurationError(f"max_distance must be positive, got {max_distance}")
        if math.isfinite(max_distance):
            max_steps = int(math.floor(max_distance / step))

    drow, dcol = azimuth_to_direction(azimuth)
    return MarchParameters(
        drow=drow,
        dcol=dcol,
        step=step,
        step_cells=step / grid.cell_size,
        tan_elevation=math.tan(math.radians(elevation)),
        max_steps=max_steps,
        bilinear=sampling == SAMPLING_BILINEAR,
    )


@njit(cache=True, nogil=True)
def _sample_nearest(heights, valid, r, c):
    """Height of the cell whose centre is nearest to (r, c); NaN for no-data"""
    ri = int(math.floor(r + 0.5))
    ci = int(math.floor(c + 0.5))
    if not valid[ri, ci]:
        return np.nan
    return heights[ri, ci]


@njit(cache=True, nogil=True)
def _sample_bilinear(heights, valid, r, c):
    """
    Bilinear height at (r, c), clamped to the outer cell centres.

    Returns NaN when a corner carrying non-zero weight is a no-data cell.
    """
    rows, cols = heights.shape
    rr = min(max(r, 0.0), rows - 1.0)
    cc = min(max(c, 0.0), cols - 1.0)

    r_lo = int(math.floor(rr))
    c_lo = int(math.floor(cc))
    r_hi = min(r_lo + 1, rows - 1)
    c_hi = min(c_lo + 1, cols - 1)
    fr = rr - r_lo
    fc = cc - c_lo

    w00 = (1.0 - fr) * (1.0 - fc)
    w01 = (1.0 - fr) * fc
    w10 = fr * (1.0 - fc)
    w11 = fr * fc

    total = 0.0
    if w00 > 0.0:
        if not valid[r_lo, c_lo]:
            return np.nan
        total += w00 * heights[r_lo, c_lo]
    if w01 > 0.0:
        if not valid[r_lo, c_hi]:
            return np.nan
        total += w01 * heights[r_lo, c_hi]
    if w10 > 0.0:
        if not valid[r_hi, c_lo]:
            return np.nan
        total += w10 * heights[r_hi, c_lo]
    if w11 > 0.0:
        if not valid[r_hi, c_hi]:
            return np.nan
        total += w11 * heights[r_hi, c_hi]
    return total


@njit(cache=True, nogil=True)
def _march_ray(heights, valid, row, col, drow, dcol, step, step_cells,
               tan_elevation, zscale, max_steps, bilinear):
    """
    March one ray from (row, col).

    Returns
    -------
    bool
        True if no sample reaches the sight line (lit), False if occluded
    """
    rows, cols = heights.shape
    h0 = heights[row, col]
    upper_r = rows - 0.5
    upper_c = cols - 0.5

    k = 1
    while max_steps < 0 or k <= max_steps:
        offset = k * step_cells
        r = row + offset * drow
        c = col + offset * dcol
        if r < -0.5 or r >= upper_r or c < -0.5 or c >= upper_c:
            return True

        if bilinear:
            h = _sample_bilinear(heights, valid, r, c)
        else:
            h = _sample_nearest(heights, valid, r, c)

        # NaN samples (no-data) fail the comparison and are skipped
        if zscale * (h - h0) >= (k * step) * tan_elevation:
            return False
        k += 1
    return True


def is_unobstructed(grid: HeightGrid,
                    row: int,
                    col: int,
                    azimuth: float,
                    elevation_angle: float,
                    step: Optional[float] = None,
                    sampling: str = DEFAULT_SAMPLING,
                    max_distance: Optional[float] = None) -> bool:
    """
    Test whether the sky is visible from one cell along one azimuth.

    Parameters
    ----------
    grid : HeightGrid
        Height grid
    row, col : int
        Origin cell
    azimuth : float
        Azimuth in degrees clockwise from north
    elevation_angle : float
        Sight line elevation in degrees, inside (0, 90)
    step : float, optional
        Sampling interval in world units (default: half a cell)
    sampling : str
        'nearest' or 'bilinear'
    max_distance : float, optional
        Maximum ray length in world units

    Returns
    -------
    bool
        True if unobstructed, False if occluded. A no-data origin has no
        defined visibility and returns False.

    Raises
    ------
    BoundsError
        If (row, col) is outside the grid
    ConfigurationError
        If a marching option is invalid

    Examples
    --------
    >>> grid = HeightGrid.from_array([[0, 0, 0], [0, 0, 0], [0, 0, 10]])
    >>> is_unobstructed(grid, 0, 0, 135.0, 45.0)
    False
    """
    grid.check_bounds(row, col)
    params = march_parameters(grid, azimuth, elevation_angle, step, sampling, max_distance)
    if not grid.valid[row, col]:
        return False
    return bool(_march_ray(grid.heights, grid.valid, int(row), int(col),
                           params.drow, params.dcol, params.step, params.step_cells,
                           params.tan_elevation, grid.zscale, params.max_steps,
                           params.bilinear))
