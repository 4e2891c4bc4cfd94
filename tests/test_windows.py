"""Tests for rolling window extraction."""

import pytest
import numpy as np

from connectedness.analysis.windows import RollingWindows, extract_rolling_windows
from connectedness.core.exceptions import InvalidWindowError, InsufficientDataError


class TestExtractRollingWindows:
    """Tests for extract_rolling_windows."""

    @pytest.fixture
    def matrix(self):
        return np.arange(30, dtype=float).reshape(10, 3)

    def test_window_count(self, matrix):
        """Test T_total - bw + 1 windows are produced."""
        windows = extract_rolling_windows(matrix, 4)

        assert isinstance(windows, RollingWindows)
        assert len(windows) == 7

    def test_window_contents(self, matrix):
        """Test window k covers rows k .. k + bw - 1."""
        windows = extract_rolling_windows(matrix, 4)

        np.testing.assert_array_equal(windows[0], matrix[0:4])
        np.testing.assert_array_equal(windows[6], matrix[6:10])
        np.testing.assert_array_equal(windows[-1], matrix[6:10])
        assert windows.end_index(6) == 9

    def test_full_length_window(self, matrix):
        """Test bw equal to the panel length yields one window."""
        windows = extract_rolling_windows(matrix, 10)

        assert len(windows) == 1
        np.testing.assert_array_equal(windows[0], matrix)

    def test_window_too_long(self, matrix):
        """Test bw above the panel length is rejected."""
        with pytest.raises(InvalidWindowError) as exc_info:
            extract_rolling_windows(matrix, 11)

        assert isinstance(exc_info.value, InsufficientDataError)
        assert exc_info.value.observations == 10

    def test_restartable(self, matrix):
        """Test iterating twice yields identical windows."""
        windows = extract_rolling_windows(matrix, 5)

        first = [w.copy() for w in windows]
        second = list(windows)

        assert len(first) == len(second) == 6
        for a, b in zip(first, second):
            np.testing.assert_array_equal(a, b)

    def test_windows_are_read_only(self, matrix):
        """Test windows cannot modify the source matrix."""
        windows = extract_rolling_windows(matrix, 5)

        with pytest.raises(ValueError):
            windows[0][0, 0] = 99.0

        assert matrix[0, 0] == 0.0

    def test_index_out_of_range(self, matrix):
        """Test indexing past the last window raises IndexError."""
        windows = extract_rolling_windows(matrix, 5)

        with pytest.raises(IndexError):
            windows[6]

    def test_accepts_dataframe(self, small_returns):
        """Test DataFrames are accepted."""
        windows = extract_rolling_windows(small_returns, 21)

        assert len(windows) == 20
        assert windows[0].shape == (21, 4)
