"""Test the TRD truncated-mean signals."""

import numpy as np
import pytest

from detqa.pid import TRDSignal
from detqa.pid.trd import truncated_mean


@pytest.fixture(name="slices")
def fixture_slices():
    """Slice charges of a track with two charged layers and one layer
    below threshold. The last slice of each layer is never used."""
    slices = np.zeros((6, 8))
    slices[0] = [1.0] * 7 + [100.0]
    slices[1] = [2.0] * 7 + [100.0]
    slices[2] = [0.05] * 7 + [0.0]

    return slices


class TestTruncatedMean:
    """Test the compiled truncated mean."""

    def test_empty(self):
        """The mean of nothing is 0."""
        assert truncated_mean(np.empty(0), 0.7) == 0.0

    def test_lowest_values(self):
        """Only the lowest fraction of the values is averaged."""
        values = np.array([10.0, 1.0, 3.0, 2.0, 4.0])
        assert truncated_mean(values, 0.6) == pytest.approx(2.0)
        assert truncated_mean(values, 1.0) == pytest.approx(4.0)

    def test_keep_one(self):
        """At least one value is kept."""
        assert truncated_mean(np.array([5.0, 1.0]), 0.1) == pytest.approx(1.0)


class TestTRDSignal:
    """Test the two TRD signal estimators."""

    def test_charge_slices(self, make_track, slices):
        """The last slice is dropped and slices under threshold are zeroed."""
        charges = TRDSignal().charge_slices(make_track(trd_slices=slices))
        assert charges.shape == (6, 7)
        assert np.all(charges[0] == 1.0)
        assert np.all(charges[2] == 0.0)

    def test_signal_v1(self, make_track, slices):
        """Method 1 averages the lowest tracklet charges."""
        signal = TRDSignal(truncation=0.7)
        assert signal.signal_v1(make_track(trd_slices=slices)) == pytest.approx(7.0)

        signal = TRDSignal(truncation=1.0)
        assert signal.signal_v1(make_track(trd_slices=slices)) == pytest.approx(10.5)

    def test_signal_v2(self, make_track, slices):
        """Method 2 averages the lowest slices, scaled to a tracklet."""
        signal = TRDSignal(truncation=0.7)
        expected = 7 * (7 * 1.0 + 2 * 2.0) / 9
        assert signal.signal_v2(make_track(trd_slices=slices)) == pytest.approx(expected)

    def test_no_signal(self, make_track):
        """Tracks without TRD charge have no signal."""
        track = make_track(trd_slices=np.zeros((6, 8)))
        assert TRDSignal().signal_v1(track) == 0.0
        assert TRDSignal().signal_v2(track) == 0.0

    def test_truncation_bounds(self):
        """The truncation fraction must be in (0, 1]."""
        with pytest.raises(AssertionError):
            TRDSignal(truncation=0.0)
