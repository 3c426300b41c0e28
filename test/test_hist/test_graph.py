"""Test the graphs and the fitted functions."""

import numpy as np
import pytest

from detqa.hist import Function1D, Graph, GraphErrors, ThresholdFunction


class TestGraph:
    """Test the point containers."""

    def test_add_point(self):
        """Points are appended in order."""
        graph = Graph("g", title="title")
        assert graph.n == 0
        assert graph.add_point(1.0, 2.0) == 0
        assert graph.add_point(3.0, 4.0) == 1
        assert len(graph) == 2
        assert np.all(graph.x == [1.0, 3.0])
        assert np.all(graph.y == [2.0, 4.0])

    def test_set_point_grows(self):
        """Setting a point beyond the end extends the graph with zeros."""
        graph = Graph("g", n=1)
        graph.set_point(3, 5.0, 6.0)
        assert graph.n == 4
        assert np.all(graph.x == [0.0, 0.0, 0.0, 5.0])

    def test_initial_points(self):
        """The number of initial points follows the name."""
        graph = Graph("g", 3)
        assert graph.n == 3
        assert graph.title == ""
        assert np.all(graph.y == 0.0)

        graph = GraphErrors("ge", 2, "Errors")
        assert graph.n == 2
        assert graph.title == "Errors"
        assert graph.ex.shape == graph.ey.shape == (2,)

        copy = graph.copy()
        assert copy.n == 2
        assert copy.title == "Errors"

    def test_errors(self):
        """Errors follow the points."""
        graph = GraphErrors("g")
        i = graph.add_point(1.0, 0.5)
        graph.set_point_error(i, 0.1, 0.05)
        graph.set_point_error(2, 0.2, 0.1)
        assert graph.n == 3
        assert np.all(graph.ex == [0.1, 0.0, 0.2])
        assert np.all(graph.ey == [0.05, 0.0, 0.1])

    def test_copy(self):
        """Copies are independent of the original."""
        graph = GraphErrors("g")
        graph.add_point(1.0, 2.0)
        copy = graph.copy()
        copy.set_point(0, 5.0, 5.0)
        assert isinstance(copy, GraphErrors)
        assert graph.x[0] == 1.0
        assert copy.x[0] == 5.0


class TestFunction:
    """Test the least-squares fits."""

    def test_linear_fit(self):
        """A linear function recovers the parameters of noiseless points."""
        function = Function1D("line", lambda x, a, b: a + b * x, 0.0, 10.0, (0.0, 0.0))
        x = np.linspace(0.0, 10.0, 11)
        assert function.fit(x, 2.0 + 3.0 * x)
        assert np.allclose(function.params, [2.0, 3.0])
        assert function.ndf == 9
        assert function.chi2 == pytest.approx(0.0, abs=1e-8)
        assert np.allclose(function(np.array([1.0])), [5.0])

    def test_fit_range(self):
        """Points outside of the fit range are ignored."""
        function = Function1D("line", lambda x, a, b: a + b * x, 0.0, 10.0, (0.0, 0.0))
        x = np.linspace(0.0, 10.0, 11)
        y = np.where(x > 5.0, 100.0, 1.0 + x)
        assert function.fit(x, y, low=0.0, high=5.0)
        assert np.allclose(function.params, [1.0, 1.0])

    def test_not_enough_points(self):
        """The fit is skipped when there are fewer points than parameters."""
        function = ThresholdFunction()
        params = function.params.copy()
        assert not function.fit([1.0, 2.0], [0.5, 0.6])
        assert np.all(function.params == params)
        assert function.chi2 == -1.0

    def test_threshold_fit(self):
        """The threshold parametrization is recovered from a graph."""
        truth = ThresholdFunction(params=(0.05, 0.02, 0.3, 1.5))
        graph = GraphErrors("thresh")
        for p in np.linspace(0.2, 8.0, 20):
            i = graph.add_point(p, float(truth(p)))
            graph.set_point_error(i, 0.0, 0.01)

        function = ThresholdFunction()
        assert graph.fit(function, 0.0, 10.0)
        assert np.allclose(function(graph.x), graph.y, atol=1e-4)
        assert function.ndf == 16

    def test_copy(self):
        """Copies keep the expression and are independent."""
        function = ThresholdFunction()
        copy = function.copy("other")
        copy.params[0] = 5.0
        assert copy.name == "other"
        assert copy.expression == function.expression
        assert function.params[0] == 0.1
