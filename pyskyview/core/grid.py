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
Height grid data structure.

The HeightGrid is the only input of the occlusion engine. It stores a dense
row-major ``float64`` array of terrain heights together with the horizontal
cell spacing, the vertical exaggeration factor and a validity mask marking
no-data cells.

Grid conventions
----------------
- Cells are indexed ``(row, col)``; row 0 is the northern edge of the
  raster and columns increase eastward (north-up raster).
- Cell ``(row, col)`` covers ``[row - 0.5, row + 0.5) x [col - 0.5, col + 0.5)``
  in continuous index space, so cell centres sit on integer coordinates.
- ``zscale`` exaggerates height differences only, never horizontal distance.

Instances are immutable: the arrays are private copies flagged read-only.
"""

from dataclasses import dataclass, field
from typing import Optional

import numpy as np

from .constants import DEFAULT_CELL_SIZE, DEFAULT_ZSCALE, NO_TERRAIN
from .errors import BoundsError, ConfigurationError, DataError


def _readonly(array: np.ndarray) -> np.ndarray:
    array.flags.writeable = False
    return array


@dataclass(frozen=True, eq=False)
class HeightGrid:
    """Immutable terrain height field.

    Attributes
    ----------
    heights : np.ndarray
        2-D ``float64`` array of heights, shape (rows, cols). No-data cells
        hold ``NaN``.
    cell_size : float
        Horizontal spacing between cell centres, identical on both axes
    zscale : float
        Multiplier applied to height differences
    valid : np.ndarray
        Boolean mask, False where the cell carries no terrain
    """
    heights: np.ndarray
    cell_size: float = DEFAULT_CELL_SIZE
    zscale: float = DEFAULT_ZSCALE
    valid: Optional[np.ndarray] = field(default=None)

    def __post_init__(self):
        heights = np.array(self.heights, dtype=np.float64, order='C', copy=True)
        if heights.ndim != 2:
            raise DataError(f"Height grid must be 2-D, got {heights.ndim} dimension(s)")
        if heights.shape[0] < 1 or heights.shape[1] < 1:
            raise DataError(f"Height grid must have at least one cell, got shape {heights.shape}")

        cell_size = float(self.cell_size)
        zscale = float(self.zscale)
        if not np.isfinite(cell_size) or cell_size <= 0.0:
            raise ConfigurationError(f"cell_size must be positive, got {self.cell_size}")
        if not np.isfinite(zscale) or zscale <= 0.0:
            raise ConfigurationError(f"zscale must be positive, got {self.zscale}")

        if self.valid is None:
            valid = np.isfinite(heights)
        else:
            valid = np.array(self.valid, dtype=bool, order='C', copy=True)
            if valid.shape != heights.shape:
                raise DataError(
                    f"Validity mask shape {valid.shape} does not match heights {heights.shape}")
            valid &= np.isfinite(heights)

        # No-data cells are stored as NaN so they can never take part in a comparison
        heights[~valid] = np.nan

        object.__setattr__(self, 'heights', _readonly(heights))
        object.__setattr__(self, 'valid', _readonly(valid))
        object.__setattr__(self, 'cell_size', cell_size)
        object.__setattr__(self, 'zscale', zscale)

    @classmethod
    def from_array(cls,
                   heights,
                   cell_size: float = DEFAULT_CELL_SIZE,
                   zscale: float = DEFAULT_ZSCALE,
                   nodata: Optional[float] = None) -> 'HeightGrid':
        """
        Build a grid from any 2-D array-like of heights.

        Parameters
        ----------
        heights : array_like
            2-D heights, shape (rows, cols)
        cell_size : float
            Horizontal cell spacing (must be > 0)
        zscale : float
            Vertical exaggeration factor (must be > 0)
        nodata : float, optional
            Marker value flagging cells without terrain. NaN and infinite
            heights are always treated as no-data.

        Returns
        -------
        HeightGrid
            New immutable grid

        Raises
        ------
        ConfigurationError
            If cell_size or zscale is not positive
        DataError
            If heights is not a non-empty 2-D array
        """
        array = np.asarray(heights, dtype=np.float64)
        valid = np.isfinite(array)
        if nodata is not None and not np.isnan(nodata):
            valid &= array != nodata
        return cls(heights=array, cell_size=cell_size, zscale=zscale, valid=valid)

    @property
    def shape(self) -> tuple[int, int]:
        return self.heights.shape

    @property
    def rows(self) -> int:
        return self.heights.shape[0]

    @property
    def cols(self) -> int:
        return self.heights.shape[1]

    @property
    def valid_count(self) -> int:
        """Number of cells carrying terrain"""
        return int(np.count_nonzero(self.valid))

    def in_bounds(self, row: int, col: int) -> bool:
        """Check whether (row, col) lies inside [0, rows) x [0, cols)"""
        return 0 <= row < self.rows and 0 <= col < self.cols

    def check_bounds(self, row: int, col: int):
        """Raise BoundsError when (row, col) lies outside the grid"""
        if not self.in_bounds(row, col):
            raise BoundsError(f"Cell ({row}, {col}) outside grid of shape {self.shape}")

    def is_valid(self, row: int, col: int) -> bool:
        self.check_bounds(row, col)
        return bool(self.valid[row, col])

    def height(self, row: int, col: int) -> float:
        """
        Look up the height of one cell.

        Returns
        -------
        float
            Stored height, or NO_TERRAIN (-inf) for a no-data cell

        Raises
        ------
        BoundsError
            If (row, col) is outside the grid
        """
        self.check_bounds(row, col)
        if not self.valid[row, col]:
            return NO_TERRAIN
        return float(self.heights[row, col])

    def min_valid_height(self) -> float:
        """
        Minimum height over all valid cells.

        Raises
        ------
        DataError
            If the grid contains no valid cell
        """
        if not self.valid.any():
            raise DataError("Height grid contains no valid cells")
        return float(np.min(self.heights[self.valid]))

    def with_heights(self, heights: np.ndarray) -> 'HeightGrid':
        """Return an independent grid with new heights and the same spacing, zscale and no-data mask"""
        heights = np.asarray(heights, dtype=np.float64)
        if heights.shape != self.shape:
            raise DataError(f"New heights shape {heights.shape} does not match grid {self.shape}")
        return HeightGrid(heights=heights, cell_size=self.cell_size,
                          zscale=self.zscale, valid=self.valid)

    def __repr__(self):
        return (f"HeightGrid(shape={self.shape}, cell_size={self.cell_size}, "
                f"zscale={self.zscale}, valid_cells={self.valid_count})")
