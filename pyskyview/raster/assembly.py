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
Raster assembly for sky visibility results.

Pairs a visibility grid with the coordinate reference of the height grid it
was computed from. The georeference is opaque: whatever the external loader
supplied (CRS object or string, affine transform, extent tuple) is carried
through unchanged so the result can be written or plotted by the same
tools that produced the input.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

import numpy as np
import pandas as pd

from ..core.constants import OUTPUT_DEGREES, OUTPUT_MODES, VISIBILITY_NODATA
from ..core.errors import ConfigurationError, DataError
from ..core.grid import HeightGrid
from ..occlusion.aggregator import SkyVisibilityAggregator
from ..occlusion.config import SkyViewConfig
from ..occlusion.obstruction import remove_obstructions

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GeoReference:
    """Coordinate reference metadata passed through from the input raster"""
    crs: Any = None
    transform: Any = None
    extent: Optional[tuple] = None
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class VisibilityRaster:
    """Sky visibility grid with its coordinate reference.

    Attributes
    ----------
    values : np.ndarray
        float64 visibility, NaN where the input had no terrain
    georef : GeoReference
        Coordinate reference of the input height grid
    output_mode : str
        'degrees' or 'proportion'
    elevation_angle : float
        Elevation angle of the run (deg)
    n_azimuths : int
        Number of azimuths aggregated
    """
    values: np.ndarray
    georef: GeoReference = field(default_factory=GeoReference)
    output_mode: str = OUTPUT_DEGREES
    elevation_angle: float = float('nan')
    n_azimuths: int = 0
    nodata: float = VISIBILITY_NODATA

    def __post_init__(self):
        if self.output_mode not in OUTPUT_MODES:
            raise ConfigurationError(
                f"Unknown output mode: {self.output_mode}. Must be one of {OUTPUT_MODES}")

    @property
    def shape(self) -> tuple[int, int]:
        return self.values.shape

    @property
    def valid(self) -> np.ndarray:
        return np.isfinite(self.values)

    def to_dataframe(self) -> pd.DataFrame:
        """
        Long-format table of valid cells.

        Returns
        -------
        pd.DataFrame
            Columns: row, col, value
        """
        rows, cols = np.nonzero(self.valid)
        return pd.DataFrame({
            'row': rows,
            'col': cols,
            'value': self.values[rows, cols],
        })

    def summary(self) -> pd.Series:
        """Min, mean and max visibility over valid cells plus the valid cell count"""
        values = self.values[self.valid]
        if values.size == 0:
            stats = {'min': np.nan, 'mean': np.nan, 'max': np.nan}
        else:
            stats = {'min': float(values.min()), 'mean': float(values.mean()),
                     'max': float(values.max())}
        stats['valid_cells'] = int(values.size)
        return pd.Series(stats, name=self.output_mode)

    def difference(self, other: 'VisibilityRaster') -> 'VisibilityRaster':
        """
        Cell-wise ``self - other`` for comparing two runs.

        Typically ``after.difference(before)`` where ``after`` was computed on
        a grid with obstructions removed.

        Raises
        ------
        DataError
            If the rasters differ in shape or output mode
        """
        if self.shape != other.shape:
            raise DataError(f"Cannot compare rasters of shape {self.shape} and {other.shape}")
        if self.output_mode != other.output_mode:
            raise DataError(
                f"Cannot compare {self.output_mode} raster with {other.output_mode} raster")
        return VisibilityRaster(
            values=self.values - other.values,
            georef=self.georef,
            output_mode=self.output_mode,
            elevation_angle=self.elevation_angle,
            n_azimuths=self.n_azimuths,
        )


def assemble_visibility_raster(values: np.ndarray,
                               grid: HeightGrid,
                               config: SkyViewConfig,
                               georef: Optional[GeoReference] = None) -> VisibilityRaster:
    """
    Wrap a visibility grid with the input's coordinate reference.

    Raises
    ------
    DataError
        If values and grid differ in shape
    """
    if values.shape != grid.shape:
        raise DataError(f"Visibility grid shape {values.shape} does not match height grid {grid.shape}")
    return VisibilityRaster(
        values=values,
        georef=georef if georef is not None else GeoReference(),
        output_mode=config.output_mode,
        elevation_angle=config.elevation_angle,
        n_azimuths=config.n_azimuths,
    )


def run_pipeline(heights,
                 config: SkyViewConfig,
                 cell_size: float = 1.0,
                 georef: Optional[GeoReference] = None,
                 nodata: Optional[float] = None,
                 obstruction_threshold: Optional[float] = None) -> VisibilityRaster:
    """
    Height array in, georeferenced visibility raster out.

    Builds the grid (using ``config.zscale``), optionally removes
    obstructions above ``obstruction_threshold``, runs the aggregator and
    assembles the result.

    Parameters
    ----------
    heights : array_like
        2-D heights from an external loader
    config : SkyViewConfig
        Run configuration
    cell_size : float
        Horizontal cell spacing
    georef : GeoReference, optional
        Coordinate reference to carry through
    nodata : float, optional
        No-data marker value in heights
    obstruction_threshold : float, optional
        Flatten cells higher than this before computing visibility

    Returns
    -------
    VisibilityRaster
        Result raster
    """
    config.validate()
    grid = HeightGrid.from_array(heights, cell_size=cell_size, zscale=config.zscale, nodata=nodata)
    logger.debug(f"Pipeline input: {grid!r}")
    if obstruction_threshold is not None:
        grid = remove_obstructions(grid, obstruction_threshold)

    values = SkyVisibilityAggregator(config).run(grid)
    return assemble_visibility_raster(values, grid, config, georef)
