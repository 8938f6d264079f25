#!/usr/bin/env python3
"""Test suite for the line-of-sight ray marcher"""

import unittest
import numpy as np

from pyskyview.core.errors import BoundsError, ConfigurationError
from pyskyview.core.grid import HeightGrid
from pyskyview.occlusion.ray_marcher import (
    _march_ray,
    _sample_bilinear,
    _sample_nearest,
    is_unobstructed,
    march_parameters,
)

CORNER_PEAK = [[0.0, 0.0, 0.0],
               [0.0, 0.0, 0.0],
               [0.0, 0.0, 10.0]]


class TestMarchParameters(unittest.TestCase):
    """Test marching option validation"""

    def setUp(self):
        self.grid = HeightGrid.from_array(np.zeros((4, 4)), cell_size=2.0)

    def test_default_step_is_half_cell(self):
        """Test the default step is half a cell"""
        params = march_parameters(self.grid, 90.0, 30.0)
        self.assertEqual(params.step, 1.0)
        self.assertEqual(params.step_cells, 0.5)
        self.assertEqual(params.max_steps, -1)
        self.assertFalse(params.bilinear)

    def test_step_must_not_exceed_cell_size(self):
        """Test steps outside (0, cell_size]"""
        with self.assertRaises(ConfigurationError):
            march_parameters(self.grid, 0.0, 30.0, step=2.5)
        with self.assertRaises(ConfigurationError):
            march_parameters(self.grid, 0.0, 30.0, step=0.0)
        # A full cell is allowed
        self.assertEqual(march_parameters(self.grid, 0.0, 30.0, step=2.0).step_cells, 1.0)

    def test_max_distance_to_steps(self):
        """Test max_distance converts to a sample count"""
        params = march_parameters(self.grid, 0.0, 30.0, step=1.0, max_distance=3.5)
        self.assertEqual(params.max_steps, 3)
        with self.assertRaises(ConfigurationError):
            march_parameters(self.grid, 0.0, 30.0, max_distance=-1.0)

    def test_rejects_bad_elevation_and_sampling(self):
        """Test invalid elevation and sampling mode"""
        with self.assertRaises(ConfigurationError):
            march_parameters(self.grid, 0.0, 0.0)
        with self.assertRaises(ConfigurationError):
            march_parameters(self.grid, 0.0, 90.0)
        with self.assertRaises(ConfigurationError):
            march_parameters(self.grid, 0.0, 30.0, sampling='cubic')


class TestSamplers(unittest.TestCase):
    """Test nearest and bilinear height sampling"""

    def setUp(self):
        self.heights = np.array([[0.0, 10.0],
                                 [20.0, np.nan]])
        self.valid = np.isfinite(self.heights)

    def test_nearest_rounds_half_up(self):
        """Test nearest sampling rounds half up"""
        self.assertEqual(_sample_nearest(self.heights, self.valid, 0.0, 0.49), 0.0)
        self.assertEqual(_sample_nearest(self.heights, self.valid, 0.0, 0.5), 10.0)
        self.assertEqual(_sample_nearest(self.heights, self.valid, -0.5, 0.0), 0.0)
        self.assertTrue(np.isnan(_sample_nearest(self.heights, self.valid, 1.0, 1.0)))

    def test_bilinear_interpolates(self):
        """Test bilinear interpolation between centres"""
        self.assertAlmostEqual(_sample_bilinear(self.heights, self.valid, 0.0, 0.25), 2.5)
        self.assertAlmostEqual(_sample_bilinear(self.heights, self.valid, 0.5, 0.0), 10.0)

    def test_bilinear_clamps_border_half_cells(self):
        """Test bilinear sampling clamps at the border"""
        self.assertEqual(_sample_bilinear(self.heights, self.valid, -0.4, -0.4), 0.0)

    def test_bilinear_nodata_corner(self):
        """Test a weighted no-data corner makes the sample no-data"""
        # Non-zero weight on the no-data corner
        self.assertTrue(np.isnan(_sample_bilinear(self.heights, self.valid, 0.5, 0.5)))
        # Zero weight on the no-data corner
        self.assertAlmostEqual(_sample_bilinear(self.heights, self.valid, 0.0, 0.5), 5.0)


class TestMarchRay(unittest.TestCase):
    """Kernel-level behaviour"""

    def test_tie_occludes(self):
        """Test a sample exactly on the sight line blocks"""
        heights = np.array([[0.0, 0.5]])
        valid = np.ones_like(heights, dtype=bool)
        # zscale * 0.5 == 1.0 * 0.5 at the first sample
        lit = _march_ray(heights, valid, 0, 0, 0.0, 1.0, 1.0, 1.0, 0.5, 1.0, -1, False)
        self.assertFalse(lit)

    def test_just_below_threshold_is_lit(self):
        """Test a sample just under the sight line does not block"""
        heights = np.array([[0.0, 0.4999]])
        valid = np.ones_like(heights, dtype=bool)
        lit = _march_ray(heights, valid, 0, 0, 0.0, 1.0, 1.0, 1.0, 0.5, 1.0, -1, False)
        self.assertTrue(lit)

    def test_zscale_exaggerates_differences(self):
        """Test zscale scales height differences"""
        heights = np.array([[0.0, 0.3]])
        valid = np.ones_like(heights, dtype=bool)
        self.assertTrue(_march_ray(heights, valid, 0, 0, 0.0, 1.0, 1.0, 1.0, 0.5, 1.0, -1, False))
        self.assertFalse(_march_ray(heights, valid, 0, 0, 0.0, 1.0, 1.0, 1.0, 0.5, 2.0, -1, False))


class TestIsUnobstructed(unittest.TestCase):
    """Test the single-cell line-of-sight query"""

    def setUp(self):
        self.grid = HeightGrid.from_array(CORNER_PEAK)

    def test_blocked_toward_peak(self):
        """Test the ray toward the peak is blocked"""
        # Azimuth 135 (south-east) points from (0, 0) straight at (2, 2)
        self.assertFalse(is_unobstructed(self.grid, 0, 0, 135.0, 45.0))

    def test_open_in_other_directions(self):
        """Test rays away from the peak are open"""
        for az in (0, 45, 90, 180, 225, 270, 315):
            self.assertTrue(is_unobstructed(self.grid, 0, 0, az, 45.0), f"azimuth {az}")

    def test_peak_sees_everything(self):
        """Test the peak itself sees the sky everywhere"""
        for az in range(0, 360, 15):
            self.assertTrue(is_unobstructed(self.grid, 2, 2, az, 1.0))

    def test_steep_angle_clears_peak(self):
        """Test a steep sight line clears the peak"""
        # First sample on the peak is 2.5 m out: clearing 10 m needs about 76 degrees
        self.assertTrue(is_unobstructed(self.grid, 0, 0, 135.0, 80.0))

    def test_origin_never_occludes_itself(self):
        """Test the origin cell is never sampled"""
        # Single cell: the only samples inside the grid land on the origin
        grid = HeightGrid.from_array([[100.0]])
        for az in (0.0, 45.0, 90.0, 200.0):
            self.assertTrue(is_unobstructed(grid, 0, 0, az, 0.01))

    def test_tall_origin_on_flat_ground(self):
        """Test a raised origin over flat ground"""
        grid = HeightGrid.from_array([[0.0, 0.0, 0.0],
                                      [0.0, 50.0, 0.0],
                                      [0.0, 0.0, 0.0]])
        for az in range(0, 360, 45):
            self.assertTrue(is_unobstructed(grid, 1, 1, az, 5.0))

    def test_nodata_samples_are_transparent(self):
        """Test no-data cells along the ray never block"""
        grid = HeightGrid.from_array([[0.0, -9999.0, 0.0]], nodata=-9999.0)
        self.assertTrue(is_unobstructed(grid, 0, 0, 90.0, 10.0))

    def test_nodata_origin(self):
        """Test a no-data origin is not lit"""
        grid = HeightGrid.from_array([[np.nan, 0.0]])
        self.assertFalse(is_unobstructed(grid, 0, 0, 90.0, 10.0))

    def test_max_distance_limits_ray(self):
        """Test terrain beyond max_distance is ignored"""
        heights = np.zeros((1, 10))
        heights[0, 9] = 100.0
        grid = HeightGrid.from_array(heights)
        self.assertFalse(is_unobstructed(grid, 0, 0, 90.0, 45.0))
        self.assertTrue(is_unobstructed(grid, 0, 0, 90.0, 45.0, max_distance=3.0))

    def test_bilinear_sampling(self):
        """Test the bilinear marcher on the peak scenario"""
        self.assertFalse(is_unobstructed(self.grid, 0, 0, 135.0, 45.0, sampling='bilinear'))
        self.assertTrue(is_unobstructed(self.grid, 0, 0, 90.0, 45.0, sampling='bilinear'))

    def test_out_of_range_origin(self):
        """Test origins outside the grid"""
        with self.assertRaises(BoundsError):
            is_unobstructed(self.grid, 3, 0, 0.0, 45.0)
        with self.assertRaises(BoundsError):
            is_unobstructed(self.grid, 0, -1, 0.0, 45.0)


if __name__ == '__main__':
    unittest.main()
