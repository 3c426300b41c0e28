"""Test the storage of the QA products."""

import h5py
import numpy as np
import pytest

from detqa.hist import (
    Axis,
    Graph,
    GraphErrors,
    Histogram,
    HistogramCollection,
    SparseHistogram,
    ThresholdFunction,
)
from detqa.io import read_results, write_results
from detqa.io.results import read_histogram


@pytest.fixture(name="hist_1d")
def fixture_hist_1d():
    """One-dimensional histogram with a few entries."""
    hist = Histogram("h1", "Signal; p (GeV/c)", [Axis(5, 0.0, 5.0, name="p")])
    for value in (0.5, 1.5, 1.5, 7.0):
        hist.fill(value)
    hist.set_stats(False)

    return hist


@pytest.fixture(name="sparse_hist")
def fixture_sparse_hist():
    """Three-dimensional sparse histogram filled with random points."""
    np.random.seed(seed=0)
    hist = SparseHistogram.uniform("s3", "Sparse", [4, 5, 6], [0, 0, 0], [1, 1, 1])
    hist.fill(np.random.uniform(-0.1, 1.1, size=(50, 3)))

    return hist


class TestWriteResults:
    """Test the storage of each type of product."""

    def test_histogram(self, hist_1d, tmp_path):
        """Dense histograms keep their contents, entries and axes."""
        path = str(tmp_path / "results.h5")
        write_results(path, {"hist": hist_1d})

        results = read_results(path)
        assert results["h1"]["type"] == "Histogram"
        assert results["h1"]["entries"] == 4
        assert np.allclose(results["h1"]["counts"], hist_1d.counts)
        assert np.allclose(results["h1"]["edges_0"], np.arange(6))

        with h5py.File(path, "r") as in_file:
            hist = read_histogram(in_file["h1"])
        assert hist.name == "h1"
        assert hist.entries == 4
        assert not hist.stats
        assert hist.x_axis.name == "p"
        assert hist.x_axis == hist_1d.x_axis
        assert np.allclose(hist.counts, hist_1d.counts)

    def test_sparse_histogram(self, sparse_hist, tmp_path):
        """Sparse histograms store their filled bins only."""
        path = str(tmp_path / "results.h5")
        write_results(path, {"hist": sparse_hist})

        with h5py.File(path, "r") as in_file:
            assert in_file["s3"].attrs["type"] == "SparseHistogram"
            hist = read_histogram(in_file["s3"])

        assert hist.ndim == 3
        assert hist.entries == 50
        bins, values = hist.filled_bins()
        ref_bins, ref_values = sparse_hist.filled_bins()
        assert np.all(bins == ref_bins)
        assert np.allclose(values, ref_values)

    def test_weighted_histograms(self, tmp_path):
        """Fill counts are stored, such that projections of weighted
        histograms read back from file count fills, not weights."""
        sparse = SparseHistogram.uniform("w", "Weighted", [4, 2], [0, 0], [4, 2])
        sparse.fill([[0.5, 0.5], [0.5, 1.5], [2.5, 1.5]], weight=2.5)
        dense = sparse.projection(0, 1, name="wd")

        path = str(tmp_path / "results.h5")
        write_results(path, {"sparse": sparse, "dense": dense})
        with h5py.File(path, "r") as in_file:
            sparse_read = read_histogram(in_file["w"])
            dense_read = read_histogram(in_file["wd"])

        assert sparse_read.entries == 3
        assert sparse_read.projection(0).entries == 3
        assert sparse_read.projection(0).bin_content(1) == 5.0
        assert dense_read.entries == 3
        assert dense_read.projection_y("py", 1).entries == 2

    def test_empty_sparse_histogram(self, tmp_path):
        """Empty sparse histograms can be stored."""
        path = str(tmp_path / "results.h5")
        hist = SparseHistogram.uniform("empty", "Empty", [2, 2], [0, 0], [1, 1])
        write_results(path, {"hist": hist})
        with h5py.File(path, "r") as in_file:
            assert read_histogram(in_file["empty"]).entries == 0

    def test_graphs(self, tmp_path):
        """Graphs store their points and, optionally, their errors."""
        graph = Graph("g", title="Graph")
        graph.add_point(1.0, 2.0)
        graph_err = GraphErrors("ge", title="Errors")
        i = graph_err.add_point(1.0, 0.5)
        graph_err.set_point_error(i, 0.1, 0.2)

        path = str(tmp_path / "results.h5")
        write_results(path, {"graphs": {"plain": graph, "errors": graph_err}})
        results = read_results(path, "graphs")
        assert set(results) == {"g", "ge"}
        assert results["g"]["type"] == "Graph"
        assert "ey" not in results["g"]
        assert results["ge"]["type"] == "GraphErrors"
        assert results["ge"]["ey"][0] == pytest.approx(0.2)

    def test_function(self, tmp_path):
        """Functions store their parameters and fit quality."""
        function = ThresholdFunction("thresh_6_90", params=(0.05, 0.02, 0.3, 1.5))
        path = str(tmp_path / "results.h5")
        write_results(path, {"functions": [function]})

        results = read_results(path, "functions/thresh_6_90")
        assert results["type"] == "Function1D"
        assert results["expression"] == ThresholdFunction.expression
        assert np.allclose(results["params"], [0.05, 0.02, 0.3, 1.5])
        assert results["ndf"] == -1

    def test_collection(self, hist_1d, sparse_hist, tmp_path):
        """Collections are stored as groups of histograms."""
        collection = HistogramCollection("histos", "QA histograms")
        collection.add(hist_1d)
        collection.add(sparse_hist)

        path = str(tmp_path / "results.h5")
        write_results(path, {"histos": collection})
        with h5py.File(path, "r") as in_file:
            assert in_file["histos"].attrs["title"] == "QA histograms"
            assert set(in_file["histos"].keys()) == {"h1", "s3"}

    def test_arrays(self, tmp_path):
        """Anything else is stored as a plain dataset, and replaced when
        written again."""
        path = str(tmp_path / "results.h5")
        write_results(path, {"counts": [1, 2, 3]})
        write_results(path, {"counts": [4, 5]})
        assert np.all(read_results(path)["counts"] == [4, 5])

    def test_open_group(self, hist_1d, tmp_path):
        """Products can be written into an open group."""
        path = str(tmp_path / "results.h5")
        with h5py.File(path, "w") as out_file:
            group = out_file.create_group("module")
            write_results(group, {"hist": hist_1d})

        assert "h1" in read_results(path, "module")
