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
Angular geometry for ray marching.

Azimuths are degrees clockwise from north; elevation angles are degrees above
the horizontal, strictly between 0 and 90.
"""

from .azimuth import (
    azimuth_to_direction,
    default_azimuths,
    normalize_azimuth,
    validate_azimuths,
    validate_elevation_angle,
)

__all__ = [
    'azimuth_to_direction', 'default_azimuths', 'normalize_azimuth',
    'validate_azimuths', 'validate_elevation_angle'
]
