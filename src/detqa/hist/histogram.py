"""Dense and sparse histograms.

The :class:`SparseHistogram` class is used to accumulate multi-dimensional
distributions (species, momentum, detector signal, ...), most bins of which
are never filled. Low-dimensional views of it are extracted as dense
:class:`Histogram` objects with :meth:`SparseHistogram.projection`.
"""

import numpy as np

from .axis import Axis

__all__ = ["Histogram", "SparseHistogram", "parse_titles"]


def parse_titles(title, ndim):
    """Splits a `title; axis title 1; axis title 2; ...` string.

    Parameters
    ----------
    title : str
        Combined histogram and axis titles
    ndim : int
        Number of axes

    Returns
    -------
    str
        Histogram title
    List[str]
        (ndim) list of axis titles (empty where not provided)
    """
    parts = [t.strip() for t in title.split(";")]
    axis_titles = parts[1 : ndim + 1]
    axis_titles += [""] * (ndim - len(axis_titles))

    return parts[0], axis_titles


class Histogram:
    """Dense one or two-dimensional histogram.

    The content array includes the underflow and overflow bins of each axis,
    such that `counts[i]` (1D) or `counts[i, j]` (2D) is the content of bin
    `i` (resp. `(i, j)`) with the usual bin numbering.

    Attributes
    ----------
    name : str
        Name of the histogram
    title : str
        Title of the histogram
    axes : List[Axis]
        List of histogram axes
    counts : np.ndarray
        Bin contents, including underflow and overflow bins
    fills : np.ndarray
        Number of fills of each bin, including underflow and overflow bins
    entries : float
        Number of times the histogram was filled
    stats : bool
        Whether to show the statistics box when drawn
    """

    def __init__(self, name, title, axes, counts=None, entries=None, fills=None):
        """Initialize the histogram.

        Parameters
        ----------
        name : str
            Name of the histogram
        title : str
            Title of the histogram
        axes : List[Axis]
            One or two axes
        counts : np.ndarray, optional
            Initial bin contents, including underflow and overflow bins
        entries : float, optional
            Number of entries. If not provided, the total number of fills is
            used (0 when the number of fills per bin is not known)
        fills : np.ndarray, optional
            Number of fills of each bin, including underflow and overflow bins
        """
        assert 0 < len(axes) < 3, "Dense histograms must have one or two axes."
        self.name = name
        self.title = title
        self.axes = list(axes)
        self.stats = True

        shape = tuple(a.nbins + 2 for a in self.axes)
        if counts is None:
            self.counts = np.zeros(shape, dtype=np.float64)
        else:
            self.counts = np.asarray(counts, dtype=np.float64)
            assert self.counts.shape == shape, (
                f"Bin content shape {self.counts.shape} does not match the "
                f"histogram binning {shape}."
            )

        if fills is None:
            self.fills = np.zeros(shape, dtype=np.int64)
        else:
            self.fills = np.asarray(fills, dtype=np.int64)
            assert self.fills.shape == shape, (
                f"Fill count shape {self.fills.shape} does not match the "
                f"histogram binning {shape}."
            )

        self.entries = float(self.fills.sum()) if entries is None else entries

    @property
    def ndim(self):
        """Number of axes."""
        return len(self.axes)

    @property
    def x_axis(self):
        """First axis of the histogram."""
        return self.axes[0]

    @property
    def y_axis(self):
        """Second axis of the histogram."""
        assert self.ndim > 1, "A one-dimensional histogram has no y axis."
        return self.axes[1]

    @property
    def contents(self):
        """Bin contents without the underflow and overflow bins."""
        return self.counts[(slice(1, -1),) * self.ndim]

    def fill(self, *values, weight=1.0):
        """Fills the histogram with one value per axis.

        Parameters
        ----------
        *values : float
            One value per axis
        weight : float, default 1.
            Weight of the entry
        """
        assert len(values) == self.ndim, f"Expected {self.ndim} values."
        bins = tuple(a.find_bin(v) for a, v in zip(self.axes, values))
        self.counts[bins] += weight
        self.fills[bins] += 1
        self.entries += 1

    def bin_content(self, *bins):
        """Content of one bin."""
        return self.counts[bins]

    def set_bin_content(self, *bins, value):
        """Sets the content of one bin."""
        self.counts[bins] = value

    def set_stats(self, stats):
        """Toggle the statistics box."""
        self.stats = stats

    def integral(self, first=None, last=None):
        """Sums the bin contents over the active range of the x axis.

        For two-dimensional histograms, the active range of the y axis is
        also used.

        Parameters
        ----------
        first : int, optional
            First x bin of the sum. Defaults to the first active bin
        last : int, optional
            Last x bin of the sum. Defaults to the last active bin

        Returns
        -------
        float
            Sum of the bin contents
        """
        first = self.x_axis.first if first is None else first
        last = self.x_axis.last if last is None else last
        if self.ndim == 1:
            return float(self.counts[first : last + 1].sum())

        y_axis = self.y_axis
        return float(self.counts[first : last + 1, y_axis.first : y_axis.last + 1].sum())

    def scale(self, factor):
        """Multiplies every bin content by a constant factor.

        The number of entries is left unchanged.

        Parameters
        ----------
        factor : float
            Scaling factor
        """
        self.counts *= factor

    def projection_x(self, name="_px", first=0, last=-1):
        """Projects a two-dimensional histogram onto its x axis.

        The projection counts the fills of the summed bins as its entries.

        Parameters
        ----------
        name : str, default '_px'
            Name of the projected histogram
        first : int, default 0
            First y bin to sum over
        last : int, default -1
            Last y bin to sum over. If negative, use the overflow bin

        Returns
        -------
        Histogram
            One-dimensional projection
        """
        assert self.ndim == 2, "Can only project a two-dimensional histogram."
        last = self.y_axis.nbins + 1 if last < 0 else last
        counts = self.counts[:, first : last + 1].sum(axis=1)
        fills = self.fills[:, first : last + 1].sum(axis=1)

        return Histogram(name, self.title, [self.x_axis.copy()], counts, fills=fills)

    def projection_y(self, name="_py", first=0, last=None):
        """Projects a two-dimensional histogram onto its y axis.

        If only `first` is provided, a single x bin is projected.

        Parameters
        ----------
        name : str, default '_py'
            Name of the projected histogram
        first : int, default 0
            First x bin to sum over
        last : int, optional
            Last x bin to sum over. Defaults to `first`

        Returns
        -------
        Histogram
            One-dimensional projection
        """
        assert self.ndim == 2, "Can only project a two-dimensional histogram."
        last = first if last is None else last
        counts = self.counts[first : last + 1, :].sum(axis=0)
        fills = self.fills[first : last + 1, :].sum(axis=0)

        return Histogram(name, self.title, [self.y_axis.copy()], counts, fills=fills)

    def add(self, other, scale=1.0):
        """Adds the content of another histogram with the same binning.

        Parameters
        ----------
        other : Histogram
            Histogram to add
        scale : float, default 1.
            Factor to apply to the other histogram contents
        """
        if self.axes != other.axes:
            raise ValueError(
                f"Cannot add histogram {other.name} to {self.name}: "
                "the binnings differ."
            )
        self.counts += scale * other.counts
        self.fills += other.fills
        self.entries += other.entries

    def copy(self, name=None):
        """Returns an independent copy of the histogram."""
        hist = Histogram(
            name or self.name,
            self.title,
            [a.copy() for a in self.axes],
            self.counts.copy(),
            self.entries,
            self.fills.copy(),
        )
        hist.stats = self.stats

        return hist


class SparseHistogram:
    """Multi-dimensional histogram which only stores filled bins.

    The filled bins are stored in a dictionary which maps the flattened bin
    index (underflow and overflow bins included) onto the bin content. A
    second dictionary with the same keys counts the fills of each bin.

    Attributes
    ----------
    name : str
        Name of the histogram
    title : str
        Title of the histogram
    axes : List[Axis]
        List of histogram axes
    entries : int
        Number of times the histogram was filled
    """

    def __init__(self, name, title, axes):
        """Initialize the histogram.

        Parameters
        ----------
        name : str
            Name of the histogram
        title : str
            Title of the histogram, optionally followed by `;`-separated
            axis titles
        axes : List[Axis]
            List of histogram axes
        """
        assert len(axes), "A histogram must have at least one axis."
        self.name = name
        self.axes = list(axes)
        self.title, titles = parse_titles(title, len(self.axes))
        for axis, axis_title in zip(self.axes, titles):
            if axis_title and not axis.title:
                axis.title = axis_title

        self.entries = 0
        self._bins = {}
        self._fills = {}

    @classmethod
    def uniform(cls, name, title, nbins, low, high):
        """Builds a histogram with uniform binning along each axis.

        Parameters
        ----------
        name : str
            Name of the histogram
        title : str
            Title of the histogram
        nbins : List[int]
            Number of bins along each axis
        low : List[float]
            Lower bound of each axis
        high : List[float]
            Upper bound of each axis

        Returns
        -------
        SparseHistogram
            Empty histogram
        """
        assert len(nbins) == len(low) == len(high), (
            "Must provide one number of bins and one range per axis."
        )
        axes = [Axis(n, l, h) for n, l, h in zip(nbins, low, high)]

        return cls(name, title, axes)

    @property
    def ndim(self):
        """Number of axes."""
        return len(self.axes)

    @property
    def shape(self):
        """Number of bins along each axis, underflow and overflow included."""
        return tuple(a.nbins + 2 for a in self.axes)

    @property
    def num_filled_bins(self):
        """Number of bins with a non-zero content."""
        return len(self._bins)

    def axis(self, i):
        """Returns axis `i`."""
        return self.axes[i]

    def fill(self, values, weight=1.0):
        """Fills the histogram with one or several points.

        Parameters
        ----------
        values : np.ndarray
            (N) single point or (M, N) set of points
        weight : Union[float, np.ndarray], default 1.
            Weight of each point
        """
        values = np.atleast_2d(np.asarray(values, dtype=np.float64))
        assert values.shape[1] == self.ndim, (
            f"Expected points with {self.ndim} coordinates, got {values.shape[1]}."
        )
        if not len(values):
            return

        bins = [a.find_bin(values[:, i]) for i, a in enumerate(self.axes)]
        flat = np.ravel_multi_index(bins, self.shape)
        weights = np.broadcast_to(np.asarray(weight, dtype=np.float64), len(flat))
        uniques, inverse = np.unique(flat, return_inverse=True)
        sums = np.bincount(inverse.ravel(), weights=weights)
        fills = np.bincount(inverse.ravel())
        for idx, w, n in zip(uniques.tolist(), sums.tolist(), fills.tolist()):
            self._bins[idx] = self._bins.get(idx, 0.0) + w
            self._fills[idx] = self._fills.get(idx, 0) + n

        self.entries += len(flat)

    def bin_content(self, *bins):
        """Content of one bin, given one bin index per axis."""
        return self._bins.get(int(np.ravel_multi_index(bins, self.shape)), 0.0)

    def integral(self):
        """Sum of all the bin contents, ignoring the active ranges."""
        return float(sum(self._bins.values()))

    def projection(self, *dims, name=None):
        """Projects the histogram onto one or two of its axes.

        Only the bins within the active range of every axis contribute. The
        axes which are not projected onto are summed over. The entries of the
        projection are the fills of the contributing bins.

        Parameters
        ----------
        *dims : int
            Index of the axes to project onto. The first one is used as the
            x axis of the projection
        name : str, optional
            Name of the projected histogram

        Returns
        -------
        Histogram
            Dense projection
        """
        assert 0 < len(dims) < 3, "Can only project onto one or two axes."
        assert len(set(dims)) == len(dims), "Cannot project twice onto an axis."
        for d in dims:
            assert 0 <= d < self.ndim, f"Axis {d} does not exist."

        axes = [self.axes[d].copy() for d in dims]
        for axis in axes:
            axis.reset_range()
        shape = tuple(a.nbins + 2 for a in axes)
        counts = np.zeros(shape, dtype=np.float64)
        fills = np.zeros(shape, dtype=np.int64)
        if name is None:
            name = f"{self.name}_proj_" + "_".join(str(d) for d in dims)
        if not self._bins:
            return Histogram(name, self.title, axes, counts, fills=fills)

        # Unravel the filled bins, select those within the active ranges
        bins, values = self.filled_bins()
        bin_fills = self.bin_fills()
        mask = np.ones(len(values), dtype=bool)
        for i, axis in enumerate(self.axes):
            mask &= axis.bin_mask(bins[:, i])

        index = tuple(bins[mask, d] for d in dims)
        np.add.at(counts, index, values[mask])
        np.add.at(fills, index, bin_fills[mask])

        return Histogram(name, self.title, axes, counts, fills=fills)

    def add(self, other, scale=1.0):
        """Adds the content of another histogram with the same binning.

        Parameters
        ----------
        other : SparseHistogram
            Histogram to add
        scale : float, default 1.
            Factor to apply to the other histogram contents
        """
        if self.axes != other.axes:
            raise ValueError(
                f"Cannot add histogram {other.name} to {self.name}: "
                "the binnings differ."
            )
        for idx, w in other._bins.items():
            self._bins[idx] = self._bins.get(idx, 0.0) + scale * w
            self._fills[idx] = self._fills.get(idx, 0) + other._fills[idx]
        self.entries += other.entries

    def reset(self):
        """Empties the histogram."""
        self._bins = {}
        self._fills = {}
        self.entries = 0

    def reset_ranges(self):
        """Clears the active range of every axis."""
        for axis in self.axes:
            axis.reset_range()

    def filled_bins(self):
        """Returns the filled bins and their contents.

        Returns
        -------
        np.ndarray
            (B, N) bin indexes along each axis
        np.ndarray
            (B) bin contents
        """
        flat = np.fromiter(self._bins.keys(), dtype=np.int64, count=len(self._bins))
        values = np.fromiter(self._bins.values(), dtype=np.float64, count=len(self._bins))
        bins = np.stack(np.unravel_index(flat, self.shape), axis=1).reshape(-1, self.ndim)

        return bins, values

    def bin_fills(self):
        """Number of fills of each filled bin, in the order of
        :meth:`filled_bins`."""
        return np.fromiter(
            (self._fills[idx] for idx in self._bins), dtype=np.int64, count=len(self._bins)
        )

    def set_filled_bins(self, bins, values, entries=None, fills=None):
        """Sets the filled bins of the histogram, replacing its content.

        Parameters
        ----------
        bins : np.ndarray
            (B, N) bin indexes along each axis
        values : np.ndarray
            (B) bin contents
        entries : int, optional
            Number of entries. If not provided, the total number of fills is
            used
        fills : np.ndarray, optional
            (B) number of fills of each bin. Unknown fills are counted as 0
        """
        self._bins, self._fills = {}, {}
        if fills is None:
            fills = np.zeros(len(values), dtype=np.int64)
        fills = np.asarray(fills, dtype=np.int64)
        assert len(fills) == len(values), "Must provide one fill count per bin."
        if len(bins):
            flat = np.ravel_multi_index(np.asarray(bins).T, self.shape).tolist()
            self._bins = dict(zip(flat, np.asarray(values, dtype=float).tolist()))
            self._fills = dict(zip(flat, fills.tolist()))
        self.entries = int(fills.sum()) if entries is None else int(entries)

    def copy(self, name=None):
        """Returns an independent copy of the histogram."""
        hist = SparseHistogram(name or self.name, self.title, [a.copy() for a in self.axes])
        hist._bins = dict(self._bins)
        hist._fills = dict(self._fills)
        hist.entries = self.entries

        return hist
