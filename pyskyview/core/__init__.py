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

"""Core data model: constants, error types and the height grid.

Example Usage:
    >>> from pyskyview.core import HeightGrid
    >>> grid = HeightGrid.from_array([[0.0, 1.0], [2.0, 3.0]], cell_size=5.0)
    >>> grid.height(1, 0)
    2.0
"""

from .constants import *
from .errors import BoundsError, ConfigurationError, DataError, SkyViewError
from .grid import HeightGrid

__all__ = [
    'FULL_CIRCLE_DEG', 'MIN_ELEVATION_DEG', 'MAX_ELEVATION_DEG',
    'DEFAULT_CELL_SIZE', 'DEFAULT_ZSCALE', 'NO_TERRAIN',
    'DEFAULT_STEP_FRACTION', 'SAMPLING_NEAREST', 'SAMPLING_BILINEAR', 'SAMPLING_MODES',
    'DEFAULT_SAMPLING', 'ENGINE_NUMBA', 'ENGINE_NUMPY', 'ENGINES', 'DEFAULT_ENGINE',
    'OUTPUT_DEGREES', 'OUTPUT_PROPORTION', 'OUTPUT_MODES', 'DEFAULT_OUTPUT_MODE',
    'VISIBILITY_NODATA',
    'SkyViewError', 'ConfigurationError', 'DataError', 'BoundsError',
    'HeightGrid'
]
