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
Directional occlusion engine.

- ray_marcher: per-cell line-of-sight test along one azimuth
- direction_pass: occlusion mask of a whole grid for one azimuth
- aggregator: parallel fan-out over azimuths and normalization
- obstruction: flattening of tall obstructions for what-if runs
- config: run configuration
"""

from .aggregator import SkyVisibilityAggregator, compute_sky_visibility, lit_counts, normalize_counts
from .config import SkyViewConfig, default_worker_count
from .direction_pass import direction_pass
from .obstruction import obstruction_mask, remove_obstructions
from .ray_marcher import is_unobstructed

__all__ = [
    'SkyVisibilityAggregator', 'compute_sky_visibility', 'lit_counts', 'normalize_counts',
    'SkyViewConfig', 'default_worker_count',
    'direction_pass',
    'obstruction_mask', 'remove_obstructions',
    'is_unobstructed'
]
