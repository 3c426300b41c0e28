"""Test the histogram axis and its binning conventions."""

import numpy as np
import pytest

from detqa.hist import Axis, log_binning


class TestAxisBinning:
    """Test the bin numbering of uniform and variable axes."""

    def test_uniform_edges(self):
        """Uniform axes have evenly spaced edges over the requested range."""
        axis = Axis(10, 0.0, 1.0)
        assert axis.nbins == 10
        assert axis.low == 0.0
        assert axis.high == 1.0
        assert np.allclose(axis.widths, 0.1)
        assert np.allclose(axis.centers[:2], [0.05, 0.15])

    def test_find_bin_conventions(self):
        """Bin 0 is the underflow, nbins + 1 the overflow. Values exactly
        at the upper edge go to the overflow bin."""
        axis = Axis(10, 0.0, 1.0)
        assert axis.find_bin(-0.5) == 0
        assert axis.find_bin(0.0) == 1
        assert axis.find_bin(0.05) == 1
        assert axis.find_bin(0.95) == 10
        assert axis.find_bin(1.0) == 11
        assert axis.find_bin(3.0) == 11
        assert isinstance(axis.find_bin(0.5), int)

    def test_find_bin_array(self):
        """Arrays of values are binned in one go."""
        axis = Axis(4, 0.0, 4.0)
        bins = axis.find_bin(np.array([-1.0, 0.5, 1.5, 3.5, 4.0]))
        assert bins.dtype == np.int64
        assert np.all(bins == [0, 1, 2, 4, 5])

    def test_species_axis(self):
        """A species axis with 6 bins over [-1, 5] puts species s in bin s + 2."""
        axis = Axis(6, -1.0, 5.0)
        for species in range(-1, 5):
            assert axis.find_bin(species) == species + 2

    def test_bin_edges(self):
        """Underflow and overflow bins inherit the width of their neighbors."""
        axis = Axis(4, 0.0, 4.0)
        assert axis.bin_low_edge(1) == 0.0
        assert axis.bin_up_edge(4) == 4.0
        assert axis.bin_center(2) == 1.5
        assert axis.bin_width(3) == 1.0
        assert axis.bin_low_edge(0) == -1.0
        assert axis.bin_up_edge(5) == 5.0

    def test_variable_edges(self):
        """Custom edges must be strictly increasing."""
        axis = Axis(3, edges=[0.0, 1.0, 5.0, 10.0])
        assert axis.nbins == 3
        assert axis.find_bin(2.0) == 2
        assert axis.bin_width(3) == 5.0

        with pytest.raises(AssertionError):
            axis.set_edges([0.0, 2.0, 1.0])

    def test_log_binning(self):
        """Logarithmic edges are equidistant in log space."""
        edges = log_binning(40, 0.1, 10.0)
        assert len(edges) == 41
        assert np.isclose(edges[0], 0.1)
        assert np.isclose(edges[-1], 10.0)
        assert np.isclose(edges[20], 1.0)
        assert np.allclose(np.diff(np.log10(edges)), 0.05)

        with pytest.raises(AssertionError):
            log_binning(10, 0.0, 1.0)

    def test_equality(self):
        """Axes compare equal when their edges match."""
        assert Axis(10, 0.0, 1.0) == Axis(10, 0.0, 1.0)
        assert Axis(10, 0.0, 1.0) != Axis(5, 0.0, 1.0)
        assert Axis(10, 0.0, 1.0).copy() == Axis(10, 0.0, 1.0)


class TestAxisRange:
    """Test the active range of an axis."""

    def test_default_range(self):
        """By default, every regular bin is active and no range is set."""
        axis = Axis(10, 0.0, 1.0)
        assert axis.first == 1
        assert axis.last == 10
        assert not axis.range_set
        assert np.all(axis.bin_mask(np.arange(12)))

    def test_restricted_range(self):
        """A restricted range masks every bin outside of it."""
        axis = Axis(10, 0.0, 1.0)
        axis.set_range(3, 4)
        assert axis.range_set
        assert (axis.first, axis.last) == (3, 4)
        mask = axis.bin_mask(np.arange(12))
        assert np.all(np.where(mask)[0] == [3, 4])

    def test_range_clipping(self):
        """Out-of-bound ranges are clipped to the regular bins, and the full
        range clears the restriction."""
        axis = Axis(10, 0.0, 1.0)
        axis.set_range(-5, 20)
        assert (axis.first, axis.last) == (1, 10)
        assert not axis.range_set

        axis.set_range(2, 2)
        axis.set_range(0, axis.nbins)
        assert not axis.range_set

        axis.set_range(7, 3)
        assert (axis.first, axis.last) == (1, 10)

    def test_reset_range(self):
        """Resetting the range restores every regular bin."""
        axis = Axis(10, 0.0, 1.0)
        axis.set_range(5, 6)
        axis.reset_range()
        assert (axis.first, axis.last) == (1, 10)
        assert not axis.range_set
