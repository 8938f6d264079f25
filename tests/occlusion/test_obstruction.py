#!/usr/bin/env python3
"""Test suite for obstruction removal"""

import unittest
import numpy as np

from pyskyview.core.errors import ConfigurationError, DataError
from pyskyview.core.grid import HeightGrid
from pyskyview.occlusion.obstruction import obstruction_mask, remove_obstructions


class TestRemoveObstructions(unittest.TestCase):
    """Test obstruction masking and flattening"""

    def setUp(self):
        self.grid = HeightGrid.from_array(
            [[2.0, 3.0, 40.0],
             [np.nan, 12.0, 5.0],
             [1.5, 4.0, 25.0]],
            cell_size=2.0, zscale=1.5)

    def test_cells_above_threshold_flattened(self):
        """Test cells above the threshold drop to the lowest height"""
        edited = remove_obstructions(self.grid, 10.0)
        expected = [[2.0, 3.0, 1.5],
                    [np.nan, 1.5, 5.0],
                    [1.5, 4.0, 1.5]]
        np.testing.assert_array_equal(edited.heights, expected)

    def test_threshold_is_exclusive(self):
        """Test cells equal to the threshold are kept"""
        edited = remove_obstructions(self.grid, 12.0)
        self.assertEqual(edited.height(1, 1), 12.0)
        self.assertEqual(edited.height(0, 2), 1.5)

    def test_input_untouched(self):
        """Test the input grid is not modified"""
        before = self.grid.heights.copy()
        edited = remove_obstructions(self.grid, 0.0)
        np.testing.assert_array_equal(self.grid.heights, before)
        self.assertIsNot(edited, self.grid)

    def test_metadata_preserved(self):
        """Test cell size, zscale and mask carry over"""
        edited = remove_obstructions(self.grid, 10.0)
        self.assertEqual(edited.cell_size, 2.0)
        self.assertEqual(edited.zscale, 1.5)
        np.testing.assert_array_equal(edited.valid, self.grid.valid)

    def test_threshold_above_everything(self):
        """Test a threshold above all terrain changes nothing"""
        edited = remove_obstructions(self.grid, 100.0)
        np.testing.assert_array_equal(edited.heights, self.grid.heights)

    def test_obstruction_mask(self):
        """Test the mask of cells above the threshold"""
        mask = obstruction_mask(self.grid, 10.0)
        expected = [[False, False, True],
                    [False, True, False],
                    [False, False, True]]
        np.testing.assert_array_equal(mask, expected)

    def test_no_valid_cells(self):
        """Test flattening an all no-data grid"""
        grid = HeightGrid.from_array(np.full((2, 3), np.nan))
        with self.assertRaises(DataError):
            remove_obstructions(grid, 1.0)

    def test_non_finite_threshold(self):
        """Test a NaN threshold"""
        with self.assertRaises(ConfigurationError):
            remove_obstructions(self.grid, float('nan'))


if __name__ == '__main__':
    unittest.main()
