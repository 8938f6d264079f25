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

"""Example usage of the sky visibility pipeline"""

import numpy as np
from pyskyview.core.grid import HeightGrid
from pyskyview.logger import setup_logger
from pyskyview.occlusion import SkyViewConfig, SkyVisibilityAggregator, is_unobstructed
from pyskyview.raster import GeoReference, run_pipeline


def synthetic_valley(rows=80, cols=100, cell_size=5.0):
    """East-west valley with a few buildings on the valley floor"""
    r = np.arange(rows)[:, None]
    heights = 0.02 * (r - rows / 2.0) ** 2 * cell_size + np.zeros((1, cols))
    heights[38:42, 20:24] += 30.0
    heights[36:44, 60:63] += 45.0
    return heights


# Example 1: Single cell, single direction
def example_single_ray():
    """Line-of-sight test from one cell"""
    print("=== Example 1: Single Ray ===\n")

    grid = HeightGrid.from_array([[0, 0, 0], [0, 0, 0], [0, 0, 10]])
    for az in (0.0, 90.0, 135.0):
        visible = is_unobstructed(grid, 0, 0, az, 45.0)
        print(f"Azimuth {az:5.1f} deg from (0, 0): {'sky' if visible else 'terrain'}")
    print()


# Example 2: Whole grid with per-azimuth profile
def example_aggregator():
    """Sky visibility of a valley and which directions are blocked most"""
    print("=== Example 2: Valley Sky Visibility ===\n")

    grid = HeightGrid.from_array(synthetic_valley(), cell_size=5.0)
    config = SkyViewConfig(elevation_angle=15.0, azimuths=np.arange(0.0, 360.0, 5.0),
                           output_mode='degrees')

    aggregator = SkyVisibilityAggregator(config)
    visibility = aggregator.run(grid)
    print(f"Grid: {grid}")
    print(f"Visibility range: {np.nanmin(visibility):.1f} - {np.nanmax(visibility):.1f} deg")
    print(f"Computed in {aggregator.last_run_seconds:.2f} s with {config.worker_count} workers\n")

    profile = aggregator.azimuth_profile()
    print("Most obstructed azimuths:")
    print(profile.nsmallest(5, 'lit_fraction').to_string(index=False))
    print()


# Example 3: What-if run with buildings removed
def example_obstruction_removal():
    """Visibility gained by removing everything above 20 m"""
    print("=== Example 3: Obstruction Removal ===\n")

    heights = synthetic_valley()
    config = SkyViewConfig(elevation_angle=15.0, azimuths=np.arange(0.0, 360.0, 5.0),
                           output_mode='proportion')
    georef = GeoReference(crs="EPSG:32633",
                          transform=(5.0, 0.0, 500000.0, 0.0, -5.0, 4100000.0))

    before = run_pipeline(heights, config, cell_size=5.0, georef=georef)
    after = run_pipeline(heights, config, cell_size=5.0, georef=georef,
                         obstruction_threshold=20.0)
    gain = after.difference(before)

    print("Before:")
    print(before.summary().to_string())
    print("\nGain after removal:")
    print(gain.summary().to_string())

    table = gain.to_dataframe()
    print(f"\nCells with improved visibility: {(table['value'] > 0).sum()}")
    print()


if __name__ == "__main__":
    setup_logger("pyskyview", level="INFO")
    example_single_ray()
    example_aggregator()
    example_obstruction_removal()
