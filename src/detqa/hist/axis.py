"""Histogram axis definition.

Bins are numbered the usual way in HEP histogramming packages: bin 0 is the
underflow bin, bins 1 to `nbins` cover the axis and bin `nbins + 1` is the
overflow bin.
"""

import numpy as np

__all__ = ["Axis", "log_binning"]


def log_binning(nbins, low, high):
    """Produces logarithmically spaced bin edges.

    Parameters
    ----------
    nbins : int
        Number of bins
    low : float
        Lower edge of the first bin (must be strictly positive)
    high : float
        Upper edge of the last bin

    Returns
    -------
    np.ndarray
        (nbins + 1) bin edges
    """
    assert low > 0, "Logarithmic binning requires a strictly positive lower bound."
    assert high > low, "The upper bound must be larger than the lower bound."

    return np.logspace(np.log10(low), np.log10(high), nbins + 1)


class Axis:
    """One axis of a histogram.

    Attributes
    ----------
    edges : np.ndarray
        (nbins + 1) bin edges
    name : str
        Name of the axis
    title : str
        Title of the axis
    range_set : bool
        Whether a sub-range of the axis was selected with :meth:`set_range`
    """

    def __init__(self, nbins, low=0.0, high=1.0, edges=None, name="", title=""):
        """Initialize the axis binning.

        Parameters
        ----------
        nbins : int
            Number of bins
        low : float, default 0.
            Lower edge of the axis (uniform binning)
        high : float, default 1.
            Upper edge of the axis (uniform binning)
        edges : np.ndarray, optional
            (nbins + 1) bin edges (variable binning)
        name : str, default ''
            Name of the axis
        title : str, default ''
            Title of the axis
        """
        assert nbins > 0, "An axis must have at least one bin."
        if edges is None:
            assert high > low, (
                f"The upper bound of an axis ({high}) must be larger than "
                f"its lower bound ({low})."
            )
            edges = np.linspace(low, high, nbins + 1)

        self.set_edges(edges)
        assert self.nbins == nbins, (
            f"Got {len(edges)} bin edges, expected {nbins + 1}."
        )

        self.name = name
        self.title = title

    def __eq__(self, other):
        """Two axes are identical if they share the same binning."""
        if not isinstance(other, Axis):
            return False

        return self.edges.shape == other.edges.shape and np.allclose(
            self.edges, other.edges
        )

    def __repr__(self):
        return f"Axis(nbins={self.nbins}, low={self.low}, high={self.high})"

    @property
    def nbins(self):
        """Number of regular bins."""
        return len(self.edges) - 1

    @property
    def low(self):
        """Lower edge of the axis."""
        return self.edges[0]

    @property
    def high(self):
        """Upper edge of the axis."""
        return self.edges[-1]

    @property
    def first(self):
        """First bin of the active range."""
        return self._first if self.range_set else 1

    @property
    def last(self):
        """Last bin of the active range."""
        return self._last if self.range_set else self.nbins

    @property
    def centers(self):
        """(nbins) centers of the regular bins."""
        return 0.5 * (self.edges[1:] + self.edges[:-1])

    @property
    def widths(self):
        """(nbins) widths of the regular bins."""
        return np.diff(self.edges)

    def set_edges(self, edges):
        """Sets a variable binning, resets the active range.

        Parameters
        ----------
        edges : np.ndarray
            (nbins + 1) monotonically increasing bin edges
        """
        edges = np.asarray(edges, dtype=np.float64)
        assert edges.ndim == 1 and len(edges) > 1, "Must provide at least two edges."
        assert np.all(np.diff(edges) > 0), "Bin edges must be strictly increasing."

        self.edges = edges
        self.reset_range()

    def find_bin(self, x):
        """Finds the bin(s) which contain(s) the value(s).

        Values equal to the upper edge of the axis go to the overflow bin.

        Parameters
        ----------
        x : Union[float, np.ndarray]
            Value or array of values

        Returns
        -------
        Union[int, np.ndarray]
            Bin index or array of bin indexes
        """
        bins = np.searchsorted(self.edges, x, side="right")
        if np.isscalar(bins):
            return int(bins)

        return bins.astype(np.int64)

    def bin_center(self, i):
        """Center of bin `i`."""
        return 0.5 * (self.bin_low_edge(i) + self.bin_up_edge(i))

    def bin_width(self, i):
        """Width of bin `i`."""
        return self.bin_up_edge(i) - self.bin_low_edge(i)

    def bin_low_edge(self, i):
        """Lower edge of bin `i`. Underflow and overflow bins have the width
        of the first and last regular bins, respectively."""
        if i < 1:
            return self.edges[0] - (self.edges[1] - self.edges[0])
        if i > self.nbins:
            return self.edges[-1]

        return self.edges[i - 1]

    def bin_up_edge(self, i):
        """Upper edge of bin `i`."""
        if i < 1:
            return self.edges[0]
        if i > self.nbins:
            return self.edges[-1] + (self.edges[-1] - self.edges[-2])

        return self.edges[i]

    def set_range(self, first, last):
        """Restricts the bins used when integrating or projecting.

        Out-of-bound values are clipped to the regular bins. Selecting the
        full set of regular bins (e.g. `set_range(0, nbins)`) clears the
        restriction, in which case the underflow and overflow bins are
        used again in projections.

        Parameters
        ----------
        first : int
            First bin of the range
        last : int
            Last bin of the range
        """
        if last <= 0 or last > self.nbins:
            last = self.nbins
        first = max(first, 1)
        if last < first:
            first, last = 1, self.nbins

        self._first, self._last = int(first), int(last)
        self.range_set = not (first == 1 and last == self.nbins)

    def reset_range(self):
        """Clears the active range restriction."""
        self._first, self._last = 1, self.nbins
        self.range_set = False

    def bin_mask(self, bins):
        """Checks which bin indexes are within the active range.

        Parameters
        ----------
        bins : np.ndarray
            Array of bin indexes

        Returns
        -------
        np.ndarray
            Boolean mask of the bins to be used
        """
        if not self.range_set:
            return np.ones(len(bins), dtype=bool)

        return (bins >= self._first) & (bins <= self._last)

    def copy(self):
        """Returns an independent copy of the axis, active range included."""
        axis = Axis(self.nbins, edges=self.edges.copy(), name=self.name, title=self.title)
        if self.range_set:
            axis.set_range(self._first, self._last)

        return axis
