"""Histogramming tools.

This module provides the containers used to accumulate and post-process the
detector QA distributions:

- :class:`Axis` with uniform or variable binning (see :func:`log_binning`)
- :class:`SparseHistogram` for multi-dimensional distributions
- :class:`Histogram` for dense one and two-dimensional views
- :class:`Graph` and :class:`GraphErrors` for derived quantities
- :class:`Function1D` parametrizations fitted to graphs
- :class:`HistogramCollection` to group histograms by name
"""

from .axis import Axis, log_binning
from .collection import HistogramCollection
from .function import Function1D, ThresholdFunction
from .graph import Graph, GraphErrors
from .histogram import Histogram, SparseHistogram
