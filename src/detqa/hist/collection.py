"""Named container of histograms."""

import numpy as np

from .axis import Axis
from .histogram import SparseHistogram

__all__ = ["HistogramCollection"]


class HistogramCollection:
    """Ordered collection of histograms, accessed by name.

    Attributes
    ----------
    name : str
        Name of the collection
    title : str
        Title of the collection
    """

    def __init__(self, name, title=""):
        """Initialize an empty collection.

        Parameters
        ----------
        name : str
            Name of the collection
        title : str, default ''
            Title of the collection
        """
        self.name = name
        self.title = title
        self._histos = {}

    def __len__(self):
        return len(self._histos)

    def __contains__(self, name):
        return name in self._histos

    def __getitem__(self, name):
        return self.get(name)

    def __iter__(self):
        return iter(self._histos.values())

    def keys(self):
        """Names of the histograms in the collection."""
        return self._histos.keys()

    def items(self):
        """(name, histogram) pairs."""
        return self._histos.items()

    def add(self, hist):
        """Adds a histogram to the collection.

        Parameters
        ----------
        hist : Union[Histogram, SparseHistogram]
            Histogram to add

        Raises
        ------
        KeyError
            If a histogram with the same name already exists
        """
        if hist.name in self._histos:
            raise KeyError(f"Histogram {hist.name} already exists in {self.name}.")
        self._histos[hist.name] = hist

        return hist

    def create_sparse(self, name, title, nbins, low, high):
        """Books a sparse histogram with uniform binning along each axis.

        Parameters
        ----------
        name : str
            Name of the histogram
        title : str
            Title of the histogram, optionally followed by `;`-separated
            axis titles
        nbins : List[int]
            Number of bins along each axis
        low : List[float]
            Lower bound of each axis
        high : List[float]
            Upper bound of each axis

        Returns
        -------
        SparseHistogram
            Booked histogram
        """
        return self.add(SparseHistogram.uniform(name, title, nbins, low, high))

    def get(self, name):
        """Fetches a histogram by name.

        Parameters
        ----------
        name : str
            Name of the histogram

        Returns
        -------
        Union[Histogram, SparseHistogram]
            Requested histogram
        """
        if name not in self._histos:
            raise KeyError(
                f"No histogram named {name} in {self.name}. "
                f"Available: {list(self._histos.keys())}"
            )

        return self._histos[name]

    def merge(self, others):
        """Adds the histograms of other collections to this one, by name.

        Histograms which do not exist in this collection yet are copied in.

        Parameters
        ----------
        others : List[HistogramCollection]
            Collections to merge into this one

        Returns
        -------
        int
            Number of collections merged, this one included
        """
        count = 0
        for other in others:
            if other is None:
                continue
            for name, hist in other.items():
                if name in self._histos:
                    self._histos[name].add(hist)
                else:
                    self._histos[name] = hist.copy()
            count += 1

        return count + 1

    def copy(self):
        """Returns an independent copy of the collection."""
        collection = HistogramCollection(self.name, self.title)
        for name, hist in self._histos.items():
            collection._histos[name] = hist.copy()

        return collection

    @staticmethod
    def build_axes(nbins, low, high, edges=None):
        """Builds a list of axes, optionally with variable binning.

        Parameters
        ----------
        nbins : List[int]
            Number of bins along each axis
        low : List[float]
            Lower bound of each axis
        high : List[float]
            Upper bound of each axis
        edges : Dict[int, np.ndarray], optional
            Variable bin edges of some of the axes, by axis index

        Returns
        -------
        List[Axis]
            List of axes
        """
        edges = edges or {}
        axes = []
        for i, (n, l, h) in enumerate(zip(nbins, low, high)):
            if i in edges:
                axes.append(Axis(n, edges=np.asarray(edges[i])))
            else:
                axes.append(Axis(n, l, h))

        return axes
