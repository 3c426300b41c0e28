"""Test the named histogram collections."""

import numpy as np
import pytest

from detqa.hist import Histogram, HistogramCollection, SparseHistogram


@pytest.fixture(name="collection")
def fixture_collection():
    """Collection with one filled sparse histogram."""
    collection = HistogramCollection("qa", "QA histograms")
    hist = collection.create_sparse("h", "h; x; y", [4, 4], [0.0, 0.0], [4.0, 4.0])
    hist.fill(np.array([[0.5, 0.5], [1.5, 2.5]]))

    return collection


class TestHistogramCollection:
    """Test the collection bookkeeping and merging."""

    def test_access(self, collection):
        """Histograms are accessed by name."""
        assert len(collection) == 1
        assert "h" in collection
        assert list(collection.keys()) == ["h"]
        assert isinstance(collection["h"], SparseHistogram)
        assert collection.get("h") is collection["h"]
        assert [h.name for h in collection] == ["h"]

        with pytest.raises(KeyError):
            collection.get("missing")

    def test_duplicate(self, collection):
        """Names must be unique."""
        with pytest.raises(KeyError):
            collection.create_sparse("h", "h", [2], [0.0], [1.0])

    def test_merge(self, collection):
        """Histograms are added by name, unknown histograms are copied in."""
        other = collection.copy()
        other.create_sparse("new", "new", [2], [0.0], [1.0]).fill([0.5])

        count = collection.merge([other, None])
        assert count == 2
        assert collection["h"].integral() == 4
        assert collection["h"].entries == 4
        assert "new" in collection
        assert collection["new"] is not other["new"]

        # The other collection is left untouched
        assert other["h"].integral() == 2

    def test_copy(self, collection):
        """Copies are independent of the original."""
        copy = collection.copy()
        copy["h"].fill([0.5, 0.5])
        assert collection["h"].integral() == 2
        assert copy["h"].integral() == 3

    def test_build_axes(self):
        """Axes can mix uniform and variable binnings."""
        axes = HistogramCollection.build_axes(
            [2, 3], [0.0, 0.0], [1.0, 1.0], edges={1: [0.0, 0.1, 0.5, 1.0]}
        )
        assert len(axes) == 2
        assert np.allclose(axes[0].edges, [0.0, 0.5, 1.0])
        assert np.allclose(axes[1].edges, [0.0, 0.1, 0.5, 1.0])

    def test_dense(self):
        """Dense histograms can be stored alongside sparse ones."""
        collection = HistogramCollection("c")
        hist = Histogram("d", "dense", HistogramCollection.build_axes([2], [0.0], [1.0]))
        assert collection.add(hist) is hist
        assert collection["d"].ndim == 1
