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
pyskyview - Terrain Sky Visibility Library

Computes, for every cell of a terrain height grid, how much of the sky above
a chosen elevation angle is free of surrounding terrain, as a degree count
(0-360) or a proportion (0-1). Visibility along each azimuth is decided by
ray marching over the grid; the per-azimuth results are summed in parallel.
"""

__version__ = "1.0.0"
__author__ = "pyskyview Development Team"
__title__ = "pyskyview"
__description__ = "Terrain sky visibility by directional ray marching"

from .core import *
from .geometry import *
from .occlusion import *
from .raster import *
