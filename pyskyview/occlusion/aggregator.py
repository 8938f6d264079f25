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
Sky visibility aggregation over many azimuths.

The aggregator fans out one direction pass per azimuth onto a thread pool,
waits for all of them, and reduces the occlusion masks into a per-cell count
of lit azimuths. The reduction is an integer sum, so the result does not
depend on worker count or completion order. Counts are then normalized:

    proportion = lit / n_azimuths
    degrees    = proportion * 360

Cells without terrain have no defined visibility and are reported as NaN.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Optional

import numpy as np
import pandas as pd

from ..core.constants import FULL_CIRCLE_DEG, OUTPUT_DEGREES, OUTPUT_MODES, VISIBILITY_NODATA
from ..core.errors import ConfigurationError, DataError
from ..core.grid import HeightGrid
from .config import SkyViewConfig
from .direction_pass import direction_pass

logger = logging.getLogger(__name__)


def normalize_counts(counts: np.ndarray,
                     n_azimuths: int,
                     output_mode: str = OUTPUT_DEGREES,
                     valid: Optional[np.ndarray] = None) -> np.ndarray:
    """
    Convert lit-azimuth counts into degrees or proportion.

    Parameters
    ----------
    counts : np.ndarray
        Integer count of lit azimuths per cell
    n_azimuths : int
        Number of azimuths that were tested
    output_mode : str
        'degrees' (0-360) or 'proportion' (0-1)
    valid : np.ndarray, optional
        Boolean mask of cells with terrain; other cells become NaN

    Returns
    -------
    np.ndarray
        float64 visibility grid

    Raises
    ------
    ConfigurationError
        If n_azimuths is zero or the output mode is unknown
    DataError
        If valid does not match the shape of counts
    """
    if n_azimuths <= 0:
        raise ConfigurationError(f"Cannot normalize over {n_azimuths} azimuths")
    if output_mode not in OUTPUT_MODES:
        raise ConfigurationError(f"Unknown output mode: {output_mode}. Must be one of {OUTPUT_MODES}")

    proportion = counts.astype(np.float64) / float(n_azimuths)
    if output_mode == OUTPUT_DEGREES:
        values = proportion * FULL_CIRCLE_DEG
    else:
        values = proportion

    if valid is not None:
        if valid.shape != counts.shape:
            raise DataError(f"Validity mask shape {valid.shape} does not match counts {counts.shape}")
        values[~valid] = VISIBILITY_NODATA
    return values


class SkyVisibilityAggregator:
    """
    Parallel sky visibility computation over a set of azimuths.

    Attributes:
        config: Validated run configuration
        azimuth_lit_cells: Lit cell count of each azimuth from the last run,
            in configuration order (None before the first run)
        last_run_seconds: Wall time of the last run

    Examples:
        >>> config = SkyViewConfig(elevation_angle=30.0, worker_count=4)
        >>> aggregator = SkyVisibilityAggregator(config)
        >>> visibility = aggregator.run(grid)
        >>> profile = aggregator.azimuth_profile()
    """

    def __init__(self, config: SkyViewConfig):
        self.config = config.validate()
        self.azimuth_lit_cells: Optional[np.ndarray] = None
        self.last_run_seconds = 0.0
        self._valid_count = 0

    def _pass_kwargs(self, grid: HeightGrid) -> dict:
        return {
            'elevation_angle': self.config.elevation_angle,
            'step': self.config.step_fraction * grid.cell_size,
            'sampling': self.config.sampling,
            'max_distance': self.config.max_distance,
            'engine': self.config.engine,
        }

    def lit_counts(self, grid: HeightGrid) -> np.ndarray:
        """
        Count, per cell, the azimuths along which the sky is visible.

        Parameters
        ----------
        grid : HeightGrid
            Height grid, shared read-only by all workers

        Returns
        -------
        np.ndarray
            int32 counts with the grid's shape

        Notes
        -----
        The configured ``zscale`` takes precedence over the grid's own.
        """
        if grid.valid_count == 0:
            raise DataError("Height grid contains no valid cells")
        if grid.zscale != self.config.zscale:
            logger.debug(f"Rescaling grid zscale {grid.zscale:g} -> {self.config.zscale:g}")
            grid = HeightGrid(grid.heights, grid.cell_size, self.config.zscale, grid.valid)

        azimuths = self.config.azimuths
        kwargs = self._pass_kwargs(grid)
        counts = np.zeros(grid.shape, dtype=np.int32)
        lit_cells = np.zeros(azimuths.size, dtype=np.int64)

        def accumulate(index: int, mask: np.ndarray):
            if mask.shape != counts.shape:
                raise DataError(f"Occlusion mask shape {mask.shape} does not match grid {counts.shape}")
            counts[mask] += 1
            lit_cells[index] = np.count_nonzero(mask)

        start = time.perf_counter()
        if self.config.worker_count == 1:
            for index, azimuth in enumerate(azimuths):
                accumulate(index, direction_pass(grid, azimuth, **kwargs))
        else:
            with ThreadPoolExecutor(max_workers=self.config.worker_count) as executor:
                futures = {
                    executor.submit(direction_pass, grid, azimuth, **kwargs): index
                    for index, azimuth in enumerate(azimuths)
                }
                try:
                    # Masks are reduced on this thread only; completion order is irrelevant
                    for future in as_completed(futures):
                        index = futures[future]
                        accumulate(index, future.result())
                        logger.debug(f"Azimuth {azimuths[index]:.3f} deg done "
                                     f"({lit_cells[index]} lit cells)")
                except Exception:
                    logger.error("Direction pass failed; cancelling queued azimuths")
                    executor.shutdown(wait=True, cancel_futures=True)
                    raise

        self.last_run_seconds = time.perf_counter() - start
        self.azimuth_lit_cells = lit_cells
        self._valid_count = grid.valid_count
        return counts

    def run(self, grid: HeightGrid) -> np.ndarray:
        """
        Compute the visibility grid.

        Parameters
        ----------
        grid : HeightGrid
            Height grid

        Returns
        -------
        np.ndarray
            float64 visibility in the configured output mode, NaN where the
            grid has no terrain

        Raises
        ------
        DataError
            If the grid has no valid cell
        """
        logger.info(f"Sky visibility: grid {grid.shape}, elevation {self.config.elevation_angle:g} deg, "
                    f"{self.config.n_azimuths} azimuths, {self.config.worker_count} worker(s), "
                    f"{self.config.sampling} sampling, {self.config.engine} engine")
        counts = self.lit_counts(grid)
        values = normalize_counts(counts, self.config.n_azimuths, self.config.output_mode, grid.valid)
        logger.info(f"Sky visibility done in {self.last_run_seconds:.2f} s")
        return values

    def azimuth_profile(self) -> pd.DataFrame:
        """
        Per-azimuth summary of the last run.

        Returns
        -------
        pd.DataFrame
            Columns: azimuth (deg), lit_cells, lit_fraction (of valid cells)

        Raises
        ------
        RuntimeError
            If called before run()
        """
        if self.azimuth_lit_cells is None:
            raise RuntimeError("No run recorded; call run() first")
        return pd.DataFrame({
            'azimuth': self.config.azimuths,
            'lit_cells': self.azimuth_lit_cells,
            'lit_fraction': self.azimuth_lit_cells / float(self._valid_count),
        })


def lit_counts(grid: HeightGrid, config: SkyViewConfig) -> np.ndarray:
    """Per-cell count of lit azimuths (see SkyVisibilityAggregator.lit_counts)"""
    return SkyVisibilityAggregator(config).lit_counts(grid)


def compute_sky_visibility(grid: HeightGrid, config: SkyViewConfig) -> np.ndarray:
    """
    Compute the sky visibility grid for one configuration.

    Parameters
    ----------
    grid : HeightGrid
        Height grid
    config : SkyViewConfig
        Run configuration

    Returns
    -------
    np.ndarray
        Visibility in degrees or proportion, NaN for no-data cells
    """
    return SkyVisibilityAggregator(config).run(grid)
