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
Azimuth and elevation angle handling.

Azimuths are measured in degrees clockwise from north (the +y axis of the
world frame). On a north-up raster north is the direction of decreasing row
index and east the direction of increasing column index, so

    drow = -cos(azimuth),  dcol = sin(azimuth)

Azimuths that are exact multiples of 90 degrees map to exact axis vectors so
that rays along the grid axes step cell by cell without rounding drift.
"""

import math

import numpy as np

from ..core.constants import FULL_CIRCLE_DEG, MAX_ELEVATION_DEG, MIN_ELEVATION_DEG
from ..core.errors import ConfigurationError

# Exact (drow, dcol) steps for the four axis-aligned azimuths
_AXIS_DIRECTIONS = {
    0: (-1.0, 0.0),    # north
    90: (0.0, 1.0),    # east
    180: (1.0, 0.0),   # south
    270: (0.0, -1.0),  # west
}


def normalize_azimuth(azimuth: float) -> float:
    """
    Wrap an azimuth to [0, 360) degrees.

    Parameters
    ----------
    azimuth : float
        Azimuth in degrees, any finite value

    Returns
    -------
    float
        Equivalent azimuth in [0, 360)
    """
    if not math.isfinite(azimuth):
        raise ConfigurationError(f"Azimuth must be finite, got {azimuth}")
    wrapped = math.fmod(float(azimuth), FULL_CIRCLE_DEG)
    if wrapped < 0.0:
        wrapped += FULL_CIRCLE_DEG
    # fmod of a tiny negative value can round up to exactly 360
    if wrapped >= FULL_CIRCLE_DEG:
        wrapped = 0.0
    return wrapped


def azimuth_to_direction(azimuth: float) -> tuple[float, float]:
    """
    Convert an azimuth to a unit step in (row, col) index space.

    Parameters
    ----------
    azimuth : float
        Azimuth in degrees clockwise from north

    Returns
    -------
    tuple[float, float]
        (drow, dcol) with drow**2 + dcol**2 == 1

    Examples
    --------
    >>> azimuth_to_direction(90.0)
    (0.0, 1.0)
    """
    az = normalize_azimuth(azimuth)
    if az.is_integer() and int(az) in _AXIS_DIRECTIONS:
        return _AXIS_DIRECTIONS[int(az)]
    rad = math.radians(az)
    return -math.cos(rad), math.sin(rad)


def default_azimuths() -> np.ndarray:
    """The 360 whole-degree azimuths 0, 1, ..., 359"""
    return np.arange(0.0, FULL_CIRCLE_DEG, 1.0, dtype=np.float64)


def validate_azimuths(azimuths) -> np.ndarray:
    """
    Check and normalize an azimuth set.

    Parameters
    ----------
    azimuths : array_like
        Azimuths in degrees

    Returns
    -------
    np.ndarray
        1-D float64 array of azimuths wrapped to [0, 360), input order kept

    Raises
    ------
    ConfigurationError
        If the set is empty or contains a non-finite value
    """
    values = np.atleast_1d(np.asarray(azimuths, dtype=np.float64)).ravel()
    if values.size == 0:
        raise ConfigurationError("Azimuth set is empty")
    if not np.all(np.isfinite(values)):
        raise ConfigurationError("Azimuth set contains non-finite values")
    return np.array([normalize_azimuth(az) for az in values], dtype=np.float64)


def validate_elevation_angle(elevation_angle: float) -> float:
    """
    Check an elevation angle lies strictly inside (0, 90) degrees.

    Angles of exactly 0 or 90 degrees are rejected rather than clamped:
    tan(0) makes every origin occlude itself and tan(90) is undefined.

    Raises
    ------
    ConfigurationError
        If the angle is not finite or outside (0, 90)
    """
    try:
        angle = float(elevation_angle)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Elevation angle must be a number, got {elevation_angle!r}") from e
    if not math.isfinite(angle) or not (MIN_ELEVATION_DEG < angle < MAX_ELEVATION_DEG):
        raise ConfigurationError(
            f"Elevation angle must lie in ({MIN_ELEVATION_DEG:g}, {MAX_ELEVATION_DEG:g}) degrees, "
            f"got {elevation_angle}")
    return angle
