"""Graphs of (x, y) points, with or without errors."""

import numpy as np

__all__ = ["Graph", "GraphErrors"]


class Graph:
    """Ordered set of (x, y) points.

    Attributes
    ----------
    name : str
        Name of the graph
    title : str
        Title of the graph
    x : np.ndarray
        (N) abscissa of the points
    y : np.ndarray
        (N) ordinate of the points
    x_title : str
        Title of the x axis
    y_title : str
        Title of the y axis
    """

    def __init__(self, name="", n=0, title=""):
        """Initialize the graph with `n` points at the origin.

        Parameters
        ----------
        name : str, default ''
            Name of the graph
        n : int, default 0
            Initial number of points
        title : str, default ''
            Title of the graph
        """
        self.name = name
        self.title = title
        self.x = np.zeros(n, dtype=np.float64)
        self.y = np.zeros(n, dtype=np.float64)
        self.x_title = ""
        self.y_title = ""

    def __len__(self):
        return len(self.x)

    @property
    def n(self):
        """Number of points in the graph."""
        return len(self.x)

    def _grow(self, i):
        """Extends the point arrays to hold point `i`."""
        if i >= self.n:
            pad = i + 1 - self.n
            self.x = np.concatenate([self.x, np.zeros(pad)])
            self.y = np.concatenate([self.y, np.zeros(pad)])

    def set_point(self, i, x, y):
        """Sets point `i`, extending the graph if needed.

        Parameters
        ----------
        i : int
            Point index
        x : float
            Abscissa
        y : float
            Ordinate
        """
        assert i >= 0, "Point index must be positive."
        self._grow(i)
        self.x[i], self.y[i] = x, y

    def add_point(self, x, y):
        """Appends a point to the graph.

        Returns
        -------
        int
            Index of the new point
        """
        i = self.n
        self.set_point(i, x, y)

        return i

    def fit(self, function, low=None, high=None):
        """Fits a function to the graph points.

        Parameters
        ----------
        function : Function1D
            Function to fit. Its parameters are updated in place
        low : float, optional
            Lower bound of the fit range
        high : float, optional
            Upper bound of the fit range

        Returns
        -------
        bool
            `True` if the fit converged
        """
        return function.fit(self.x, self.y, low=low, high=high)

    def copy(self):
        """Returns an independent copy of the graph."""
        graph = type(self)(self.name, title=self.title)
        for key, val in self.__dict__.items():
            setattr(graph, key, val.copy() if isinstance(val, np.ndarray) else val)

        return graph


class GraphErrors(Graph):
    """Ordered set of (x, y) points with symmetric errors.

    Attributes
    ----------
    ex : np.ndarray
        (N) errors on the abscissa
    ey : np.ndarray
        (N) errors on the ordinate
    """

    def __init__(self, name="", n=0, title=""):
        super().__init__(name, n, title)
        self.ex = np.zeros(n, dtype=np.float64)
        self.ey = np.zeros(n, dtype=np.float64)

    def _grow(self, i):
        if i >= self.n:
            pad = i + 1 - self.n
            self.ex = np.concatenate([self.ex, np.zeros(pad)])
            self.ey = np.concatenate([self.ey, np.zeros(pad)])
        super()._grow(i)

    def set_point_error(self, i, ex, ey):
        """Sets the errors of point `i`, extending the graph if needed.

        Parameters
        ----------
        i : int
            Point index
        ex : float
            Error on the abscissa
        ey : float
            Error on the ordinate
        """
        assert i >= 0, "Point index must be positive."
        self._grow(i)
        self.ex[i], self.ey[i] = ex, ey

    def fit(self, function, low=None, high=None):
        return function.fit(self.x, self.y, sigma=self.ey, low=low, high=high)
