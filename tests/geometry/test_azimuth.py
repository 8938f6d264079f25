#!/usr/bin/env python3
"""Test suite for azimuth and elevation helpers"""

import math
import unittest
import numpy as np

from pyskyview.core.errors import ConfigurationError
from pyskyview.geometry.azimuth import (
    azimuth_to_direction,
    default_azimuths,
    normalize_azimuth,
    validate_azimuths,
    validate_elevation_angle,
)


class TestNormalizeAzimuth(unittest.TestCase):
    """Test azimuth wrapping"""

    def test_wraps_into_range(self):
        """Test values outside [0, 360) are wrapped"""
        self.assertEqual(normalize_azimuth(0.0), 0.0)
        self.assertEqual(normalize_azimuth(360.0), 0.0)
        self.assertEqual(normalize_azimuth(450.0), 90.0)
        self.assertEqual(normalize_azimuth(-90.0), 270.0)
        self.assertEqual(normalize_azimuth(-720.0), 0.0)

    def test_tiny_negative_stays_below_360(self):
        """Test a tiny negative azimuth does not round to 360"""
        self.assertLess(normalize_azimuth(-1e-20), 360.0)

    def test_rejects_non_finite(self):
        """Test NaN and infinite azimuths"""
        with self.assertRaises(ConfigurationError):
            normalize_azimuth(float('nan'))
        with self.assertRaises(ConfigurationError):
            normalize_azimuth(float('inf'))


class TestAzimuthToDirection(unittest.TestCase):
    """Test azimuth to grid step conversion"""

    def test_axis_aligned_directions_are_exact(self):
        """Test the four axis azimuths map to exact steps"""
        self.assertEqual(azimuth_to_direction(0.0), (-1.0, 0.0))
        self.assertEqual(azimuth_to_direction(90.0), (0.0, 1.0))
        self.assertEqual(azimuth_to_direction(180.0), (1.0, 0.0))
        self.assertEqual(azimuth_to_direction(270.0), (0.0, -1.0))
        self.assertEqual(azimuth_to_direction(-90.0), (0.0, -1.0))
        self.assertEqual(azimuth_to_direction(450.0), (0.0, 1.0))

    def test_diagonal_direction(self):
        """Test north-east steps up and right"""
        drow, dcol = azimuth_to_direction(135.0)
        # South-east: rows and columns both increase
        self.assertAlmostEqual(drow, math.sqrt(0.5))
        self.assertAlmostEqual(dcol, math.sqrt(0.5))

    def test_unit_length(self):
        """Test directions have unit length"""
        for az in np.linspace(0.0, 359.5, 720):
            drow, dcol = azimuth_to_direction(az)
            self.assertAlmostEqual(math.hypot(drow, dcol), 1.0, places=12)


class TestAzimuthSets(unittest.TestCase):
    """Test azimuth set construction and validation"""

    def test_default_azimuths(self):
        """Test the 360 whole-degree default set"""
        azimuths = default_azimuths()
        self.assertEqual(azimuths.size, 360)
        self.assertEqual(azimuths[0], 0.0)
        self.assertEqual(azimuths[-1], 359.0)

    def test_validate_keeps_order_and_wraps(self):
        """Test validation wraps values and keeps order"""
        azimuths = validate_azimuths([90, 370, -45])
        np.testing.assert_array_equal(azimuths, [90.0, 10.0, 315.0])

    def test_validate_scalar(self):
        """Test a scalar azimuth becomes a one-element set"""
        np.testing.assert_array_equal(validate_azimuths(45), [45.0])

    def test_validate_rejects_empty(self):
        """Test an empty azimuth set"""
        with self.assertRaises(ConfigurationError):
            validate_azimuths([])

    def test_validate_rejects_nan(self):
        """Test a set containing NaN"""
        with self.assertRaises(ConfigurationError):
            validate_azimuths([0.0, np.nan])


class TestElevationAngle(unittest.TestCase):
    """Test elevation angle validation"""

    def test_accepts_open_interval(self):
        """Test angles strictly between 0 and 90"""
        for angle in (0.001, 15.0, 45, 89.999):
            self.assertEqual(validate_elevation_angle(angle), float(angle))

    def test_rejects_bounds_and_outside(self):
        """Test 0, 90 and angles outside the interval"""
        for angle in (0.0, 90.0, -10.0, 120.0, float('nan')):
            with self.assertRaises(ConfigurationError):
                validate_elevation_angle(angle)

    def test_rejects_non_numeric(self):
        """Test non-numeric elevation angles"""
        with self.assertRaises(ConfigurationError):
            validate_elevation_angle("steep")


if __name__ == '__main__':
    unittest.main()
