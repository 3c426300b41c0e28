"""Test the TRD PID QA module and its efficiency studies."""

import h5py
import numpy as np
import pytest

from detqa.hist import Axis, Graph, GraphErrors, Histogram
from detqa.io.results import read_results
from detqa.qa import TRDPIDQA
from detqa.utils.globals import TRD_OUT


@pytest.fixture(name="trd_tracks")
def fixture_trd_tracks(make_track):
    """Tracks with six tracklets at p = 1.1 GeV/c.

    - 100 electrons, all with a likelihood of 0.905
    - 100 pions, one per likelihood bin
    - 100 protons, all with a likelihood of 0.005
    """
    tracks = []
    for i in range(100):
        tracks.append(make_track(pdg_code=11, trd_pid=[0.905, 0, 0, 0, 0]))
        tracks.append(make_track(pdg_code=211, trd_pid=[0.005 + 0.01 * i, 0, 0, 0, 0]))
        tracks.append(make_track(pdg_code=2212, trd_pid=[0.005, 0, 0, 0, 0]))

    return tracks


@pytest.fixture(name="trd_qa")
def fixture_trd_qa(trd_tracks):
    """TRD QA module filled with the reference tracks."""
    qa = TRDPIDQA()
    qa({"event": None, "tracks": trd_tracks})

    return qa


class TestTRDPIDQABooking:
    """Test the booking and filling of the TRD histograms."""

    def test_booking(self):
        """Four sparse histograms share the common axes."""
        qa = TRDPIDQA()
        assert set(qa.histos.keys()) == {"fLikeTRD", "fQAtrack", "fQAdEdx", "fTRDtruncMean"}
        assert [h.ndim for h in qa.histos] == [4, 5, 6, 6]
        for hist in qa.histos:
            assert hist.axis(TRDPIDQA.SPECIES).nbins == 6
            assert hist.axis(TRDPIDQA.NTRACKLETS).nbins == 7
            p_axis = hist.axis(TRDPIDQA.P)
            assert p_axis.nbins == 40
            assert np.isclose(p_axis.low, 0.1)
            assert np.isclose(p_axis.high, 10.0)
            assert np.allclose(np.diff(np.log10(p_axis.edges)), 0.05)

    def test_tracklet_range(self):
        """The analysed tracklet multiplicities must be valid."""
        with pytest.raises(AssertionError):
            TRDPIDQA(min_ntracklets=5, max_ntracklets=4)
        with pytest.raises(AssertionError):
            TRDPIDQA(max_ntracklets=7)

    def test_fill(self, trd_qa):
        """Every track fills the likelihood and the QA histograms."""
        assert trd_qa.histos["fLikeTRD"].entries == 300
        assert trd_qa.histos["fQAtrack"].entries == 300
        assert trd_qa.histos["fTRDtruncMean"].entries == 300
        assert trd_qa.histos["fQAdEdx"].entries == 300 * 6

    def test_skip_no_trd_out(self, make_track):
        """Tracks which did not reach the TRD are ignored."""
        qa = TRDPIDQA()
        track = make_track(status=0)
        qa({"event": None, "tracks": [track]})
        assert qa.histos["fLikeTRD"].entries == 0

        qa({"event": None, "tracks": [make_track(status=TRD_OUT)]})
        assert qa.histos["fLikeTRD"].entries == 1

    def test_outer_momentum(self, make_track):
        """The momentum at the outer wall is used when available."""
        qa = TRDPIDQA()
        qa({"event": None, "tracks": [make_track(p_outer=5.0, momentum=[1.0, 0.0, 0.0])]})
        qa({"event": None, "tracks": [make_track(p_outer=-1.0, momentum=[0.2, 0.0, 0.0])]})
        proj = qa.histos["fLikeTRD"].projection(TRDPIDQA.P)
        p_axis = proj.x_axis
        assert proj.bin_content(p_axis.find_bin(5.0)) == 1
        assert proj.bin_content(p_axis.find_bin(0.2)) == 1
        assert proj.bin_content(p_axis.find_bin(1.0)) == 0

    def test_unknown_species(self, make_track):
        """Tracks of unknown species land in the first species bin."""
        qa = TRDPIDQA()
        qa({"event": None, "tracks": [make_track(pdg_code=22)]})
        proj = qa.histos["fLikeTRD"].projection(TRDPIDQA.SPECIES)
        assert proj.bin_content(1) == 1

        qa = TRDPIDQA(use_mc_species=False)
        qa({"event": None, "tracks": [make_track(pdg_code=11)]})
        proj = qa.histos["fLikeTRD"].projection(TRDPIDQA.SPECIES)
        assert proj.bin_content(1) == 1


class TestTRDPIDQAEfficiency:
    """Test the threshold and efficiency computations."""

    def test_threshold_bin(self):
        """The threshold is found by integrating from the last bin down."""
        hist = Histogram("like", "like", [Axis(10, 0.0, 1.0)])
        hist.counts[1:11] = 0.1
        assert TRDPIDQA.threshold_bin(hist, 0.25) == 8
        assert TRDPIDQA.threshold_bin(hist, 0.05) == 10
        assert TRDPIDQA.threshold_bin(hist, 1.5) == 1

        hist.x_axis.set_range(3, 7)
        assert TRDPIDQA.threshold_bin(hist, 1.5) == 3

    def test_calculate_efficiency(self):
        """The efficiency is the content at or above the threshold, with a
        binomial uncertainty computed from the entries before normalisation."""
        counts = np.zeros(12)
        counts[1:11] = 0.1
        hist = Histogram("like", "like", [Axis(10, 0.0, 1.0)], counts=counts, entries=100)
        value, error = TRDPIDQA.calculate_efficiency(hist, 8)
        assert value == pytest.approx(0.3)
        assert error == pytest.approx(np.sqrt(0.3 * 0.7 / 100))

        hist.entries = 0
        assert TRDPIDQA.calculate_efficiency(hist, 8)[1] == 0.0

    def test_analyse_ntracklets(self, trd_qa):
        """The reference tracks give known efficiencies and thresholds."""
        trd_qa.analyse_ntracklets(6)
        assert set(trd_qa.thresholds) == {"6Tracklets"}
        assert set(trd_qa.thresholds["6Tracklets"]) == {
            "eff70",
            "eff75",
            "eff80",
            "eff85",
            "eff90",
            "eff95",
        }

        thresh = trd_qa.thresholds["6Tracklets"]["eff90"]
        pions = trd_qa.pion_efficiencies["6Tracklets"]["eff90"]
        protons = trd_qa.proton_efficiencies["6Tracklets"]["eff90"]
        assert isinstance(thresh, Graph)
        assert isinstance(pions, GraphErrors)

        # A single momentum bin is populated, around 1.1 GeV/c
        assert thresh.n == pions.n == protons.n == 1
        assert 1.0 < thresh.x[0] < 1.122
        assert thresh.y[0] == pytest.approx(0.905)

        assert pions.y[0] == pytest.approx(0.1)
        assert pions.ey[0] == pytest.approx(0.03)
        assert pions.ex[0] == pytest.approx(0.5 * (10**0.05 - 1.0))
        assert protons.y[0] == 0.0
        assert protons.ey[0] == 0.0

    def test_analyse_ranges_restored(self, trd_qa):
        """The analysis leaves the axis ranges untouched."""
        trd_qa.analyse_ntracklets(6)
        for axis in trd_qa.histos["fLikeTRD"].axes:
            assert not axis.range_set

    def test_empty_multiplicity(self, trd_qa):
        """Tracklet multiplicities without tracks give empty graphs."""
        trd_qa.analyse_ntracklets(4)
        assert trd_qa.thresholds["4Tracklets"]["eff90"].n == 0
        assert trd_qa.pion_efficiencies["4Tracklets"]["eff70"].n == 0

    def test_finish(self, trd_qa):
        """Every multiplicity in the analysed range is processed."""
        trd_qa.finish()
        assert set(trd_qa.thresholds) == {"4Tracklets", "5Tracklets", "6Tracklets"}
        results = trd_qa.results()
        assert set(results) == {"pion_efficiencies", "proton_efficiencies", "thresholds"}

    def test_fit_thresholds(self, trd_qa):
        """Thresholds must exist before they can be fitted."""
        assert trd_qa.fit_thresholds() is None
        assert trd_qa.results() == {}

        trd_qa.finish()
        functions = trd_qa.fit_thresholds()
        assert set(functions) == {"4Tracklets", "5Tracklets", "6Tracklets"}
        assert "thresh_6_90" in functions["6Tracklets"]
        assert len(functions["6Tracklets"]) == 6
        assert "thresholdTRD" in trd_qa.results()

    def test_save_and_store(self, trd_qa, tmp_path):
        """The parametrizations and graphs are stored to HDF5."""
        path = str(tmp_path / "thresholds.h5")
        trd_qa.save_threshold_parameters(path)
        assert not (tmp_path / "thresholds.h5").exists()

        trd_qa.finish()
        trd_qa.save_threshold_parameters(path)
        params = read_results(path, "thresholdTRD/6Tracklets/thresh_6_90")
        assert params["type"] == "Function1D"
        assert len(params["params"]) == 4

        path = str(tmp_path / "graphs.h5")
        trd_qa.store_results(path)
        with h5py.File(path, "r") as in_file:
            assert set(in_file.keys()) == {
                "pionEfficiencies",
                "protonEfficiencies",
                "thresholds",
            }
            graph = in_file["pionEfficiencies/6Tracklets/eff90"]
            assert graph.attrs["type"] == "GraphErrors"
            assert graph["y"][0] == pytest.approx(0.1)

    def test_draw_tracklet(self, trd_qa):
        """One figure per multiplicity, nothing without results."""
        assert trd_qa.draw_tracklet(6) is None
        trd_qa.finish()
        figure = trd_qa.draw_tracklet(6)
        assert figure is not None
        assert len(figure.data) == 3 * len(TRDPIDQA.ELECTRON_EFFICIENCIES)
        assert trd_qa.draw_tracklet(3) is None

    def test_merge(self, trd_qa, trd_tracks):
        """Merging adds the histograms and clears the derived graphs."""
        other = TRDPIDQA()
        other({"event": None, "tracks": trd_tracks})
        trd_qa.finish()

        assert trd_qa.merge([other]) == 2
        assert trd_qa.histos["fLikeTRD"].entries == 600
        assert trd_qa.thresholds is None

        # Efficiencies are unchanged by doubling the statistics
        trd_qa.analyse_ntracklets(6)
        assert trd_qa.pion_efficiencies["6Tracklets"]["eff90"].y[0] == pytest.approx(0.1)
