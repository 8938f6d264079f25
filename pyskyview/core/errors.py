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

"""Exception types raised by pyskyview"""


class SkyViewError(Exception):
    """Base class for all pyskyview errors"""


class ConfigurationError(SkyViewError, ValueError):
    """Invalid run configuration.

    Raised for an empty azimuth set, non-positive cell size, zscale or
    sampling step, an elevation angle outside (0, 90) degrees, or an
    unknown output mode, sampling mode or engine.
    """


class DataError(SkyViewError, ValueError):
    """Invalid or inconsistent grid data.

    Raised for grids without any valid cell and for arrays whose
    dimensions do not match the grid they were derived from.
    """


class BoundsError(SkyViewError, IndexError):
    """Cell index outside the grid"""
