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

"""Sky Visibility Constants and Default Parameters"""

import numpy as np

# Angular constants
FULL_CIRCLE_DEG = 360.0       # full azimuth circle (deg)
MIN_ELEVATION_DEG = 0.0       # exclusive lower bound for elevation angle (deg)
MAX_ELEVATION_DEG = 90.0      # exclusive upper bound for elevation angle (deg)

# Height grid defaults
DEFAULT_CELL_SIZE = 1.0       # horizontal cell spacing (m)
DEFAULT_ZSCALE = 1.0          # vertical exaggeration of height differences
NO_TERRAIN = -np.inf          # height reported for no-data cells

# Ray marching defaults
DEFAULT_STEP_FRACTION = 0.5   # sampling interval as a fraction of cell size
SAMPLING_NEAREST = 'nearest'
SAMPLING_BILINEAR = 'bilinear'
SAMPLING_MODES = (SAMPLING_NEAREST, SAMPLING_BILINEAR)
DEFAULT_SAMPLING = SAMPLING_NEAREST

# Direction pass engines
ENGINE_NUMBA = 'numba'        # JIT kernel, one ray per cell
ENGINE_NUMPY = 'numpy'        # vectorized march of all cells per step
ENGINES = (ENGINE_NUMBA, ENGINE_NUMPY)
DEFAULT_ENGINE = ENGINE_NUMBA

# Output modes
OUTPUT_DEGREES = 'degrees'
OUTPUT_PROPORTION = 'proportion'
OUTPUT_MODES = (OUTPUT_DEGREES, OUTPUT_PROPORTION)
DEFAULT_OUTPUT_MODE = OUTPUT_DEGREES

# Output no-data marker
VISIBILITY_NODATA = np.nan
