"""Monitoring of the TRD particle identification.

The TRD electron likelihood, tracklet charges and truncated-mean signals are
accumulated as a function of momentum, species and number of tracklets. Once
all entries are processed, the likelihood distributions are used to derive
the thresholds which achieve fixed electron efficiencies and the pion and
proton efficiencies (contamination) at these thresholds.
"""

import numpy as np

from detqa.hist import Graph, GraphErrors, ThresholdFunction, log_binning
from detqa.io.results import write_results
from detqa.pid import PIDObject, TRDSignal
from detqa.utils.globals import (
    ELEC_SPECIES,
    N_SPECIES,
    PION_SPECIES,
    PROT_SPECIES,
    TRD_N_PLANES,
)
from detqa.utils.logger import logger
from detqa.vis.qa import efficiency_figure

from .base import DetectorPIDQA

__all__ = ["TRDPIDQA"]


def efficiency_label(eff):
    """Integer percentage used to name the products of one efficiency."""
    return int(round(eff * 100))


class TRDPIDQA(DetectorPIDQA):
    """TRD PID QA module.

    Books four sparse histograms which share the (species, momentum,
    number of tracklets) axes:
    - `fLikeTRD`: electron likelihood
    - `fQAtrack`: number of tracklets with charge and number of clusters
    - `fQAdEdx`: charge, number of clusters and non-zero slices per tracklet
    - `fTRDtruncMean`: TPC dE/dx and both TRD truncated-mean signals

    .. code-block:: yaml

        qa:
          trd_pid:
            min_ntracklets: 4
            max_ntracklets: 6

    Attributes
    ----------
    pion_efficiencies : Dict[str, Dict[str, GraphErrors]]
        Pion efficiency graphs, per number of tracklets and electron efficiency
    proton_efficiencies : Dict[str, Dict[str, GraphErrors]]
        Proton efficiency graphs, per number of tracklets and electron efficiency
    thresholds : Dict[str, Dict[str, Graph]]
        Likelihood threshold graphs, per number of tracklets and electron
        efficiency
    threshold_functions : Dict[str, Dict[str, ThresholdFunction]]
        Parametrizations of the threshold graphs
    """

    name = "trd_pid"
    aliases = ("trd",)

    # Electron efficiencies at which the thresholds are evaluated
    ELECTRON_EFFICIENCIES = (0.7, 0.75, 0.8, 0.85, 0.9, 0.95)

    # Common axis indexes
    SPECIES, P, NTRACKLETS = range(3)

    # Indexes of the axes specific to each histogram
    ELECTRON_LIKE = 3
    NONZERO_TRACKLET_CHARGE, NCLUSTERS = 3, 4
    DEDX, NCLUSTERS_DEDX, NONZERO_SLICES = 3, 4, 5
    TPC_DEDX, TRD_DEDX_V1, TRD_DEDX_V2 = 3, 4, 5

    # Binning of the common axes
    NBINS_COMMON = (N_SPECIES + 1, 40, TRD_N_PLANES + 1)
    MIN_BIN_COMMON = (-1.0, 0.1, 0.0)
    MAX_BIN_COMMON = (float(N_SPECIES), 10.0, float(TRD_N_PLANES + 1))

    def __init__(
        self,
        min_ntracklets=4,
        max_ntracklets=6,
        min_charge=0.1,
        truncation=0.7,
        use_mc_species=True,
    ):
        """Initialize the module.

        Parameters
        ----------
        min_ntracklets : int, default 4
            Minimum number of tracklets analysed in :meth:`finish`
        max_ntracklets : int, default 6
            Maximum number of tracklets analysed in :meth:`finish`
        min_charge : float, default 0.1
            Minimum charge of a slice (or tracklet) to count as a signal
        truncation : float, default 0.7
            Fraction of the lowest charges used in the truncated means
        use_mc_species : bool, default True
            If `True`, use the Monte Carlo species of the tracks
        """
        super().__init__(use_mc_species)
        assert 0 < min_ntracklets <= max_ntracklets <= TRD_N_PLANES, (
            f"The range of tracklet multiplicities must be within 1 and {TRD_N_PLANES}."
        )
        self.min_ntracklets = min_ntracklets
        self.max_ntracklets = max_ntracklets
        self.min_charge = min_charge
        self.trd_signal = TRDSignal(truncation=truncation, min_charge=min_charge)

        self.pion_efficiencies = None
        self.proton_efficiencies = None
        self.thresholds = None
        self.threshold_functions = None

        self.initialize()

    def initialize(self):
        """Books the TRD QA histograms."""
        self.create_histogram("fLikeTRD", "TRD Likelihood Studies", [100], [0.0], [1.0])
        self.create_histogram(
            "fQAtrack",
            "TRD QA Histogram",
            [TRD_N_PLANES + 1, 200],
            [0.0, 0.0],
            [TRD_N_PLANES + 1.0, 200.0],
        )
        self.create_histogram(
            "fQAdEdx",
            "TRD summed dEdx",
            [100, 261, 9],
            [0.0, 0.0, 0.0],
            [100000.0, 260.0, 9.0],
        )
        self.create_histogram(
            "fTRDtruncMean",
            "TRD TruncatedMean studies",
            [600, 1000, 1000],
            [0.0, 0.0, 0.0],
            [600.0, 20000.0, 20000.0],
        )

    def create_histogram(self, name, title, nbins, low, high):
        """Books a sparse histogram with the common axes followed by the
        histogram specific axes. The momentum axis is logarithmic.

        Parameters
        ----------
        name : str
            Name of the histogram
        title : str
            Title of the histogram
        nbins : List[int]
            Number of bins of the specific axes
        low : List[float]
            Lower bounds of the specific axes
        high : List[float]
            Upper bounds of the specific axes

        Returns
        -------
        SparseHistogram
            Booked histogram
        """
        hist = self.histos.create_sparse(
            name,
            title,
            list(self.NBINS_COMMON) + list(nbins),
            list(self.MIN_BIN_COMMON) + list(low),
            list(self.MAX_BIN_COMMON) + list(high),
        )
        n_p = self.NBINS_COMMON[self.P]
        hist.axis(self.P).set_edges(
            log_binning(n_p, self.MIN_BIN_COMMON[self.P], self.MAX_BIN_COMMON[self.P])
        )

        return hist

    def process(self, data):
        """Groups the tracks of one entry by species and monitors them.

        Parameters
        ----------
        data : dict
            Filtered data dictionary for one entry
        """
        groups = {}
        for track in data["tracks"]:
            pid_obj = PIDObject.from_track(track, self.use_mc_species)
            groups.setdefault(pid_obj.abinitio_pid, []).append(track)

        for species, tracks in groups.items():
            self.process_tracks(tracks, species)

    def process_tracks(self, tracks, species):
        """Monitors a set of tracks of a known species.

        Parameters
        ----------
        tracks : List[Track]
            Reconstructed tracks
        species : int
            Species of the tracks (-1 if unknown)
        """
        if species < -1 or species >= N_SPECIES:
            return

        for track in tracks:
            self.process_track(track, species)

    def process_track(self, track, species):
        """Monitors one track, provided it was propagated through the TRD.

        Parameters
        ----------
        track : Track
            Reconstructed track
        species : int
            Species of the track (-1 if unknown)
        """
        if not track.has_trd_out:
            return

        self.fill_likelihoods(track, species)
        self.fill_qa_plots(track, species)

    def common_quantities(self, track, species, size):
        """Initializes an array of quantities with the common axes filled.

        Parameters
        ----------
        track : Track
            Reconstructed track
        species : int
            Species of the track
        size : int
            Number of axes of the histogram to fill

        Returns
        -------
        np.ndarray
            (size) quantities, zero beyond the common axes
        """
        quantities = np.zeros(size)
        quantities[self.SPECIES] = species
        quantities[self.P] = track.p_outer if track.has_outer_param else track.p
        quantities[self.NTRACKLETS] = track.trd_ntracklets_pid

        return quantities

    def fill_likelihoods(self, track, species):
        """Fills the electron likelihood histogram.

        Parameters
        ----------
        track : Track
            Reconstructed track
        species : int
            Species of the track
        """
        quantities = self.common_quantities(track, species, 4)
        quantities[self.ELECTRON_LIKE] = track.trd_pid[ELEC_SPECIES]
        self.histos.get("fLikeTRD").fill(quantities)

    def fill_qa_plots(self, track, species):
        """Fills the tracklet charge and truncated-mean histograms.

        The last time slice of each tracklet is not used. Slices (and
        tracklets) with a charge below threshold are considered empty.

        Parameters
        ----------
        track : Track
            Reconstructed track
        species : int
            Species of the track
        """
        qa = self.common_quantities(track, species, 5)
        dedx = self.common_quantities(track, species, 6)
        trunc_mean = self.common_quantities(track, species, 6)
        qa[self.NCLUSTERS] = dedx[self.NCLUSTERS_DEDX] = track.trd_ncls

        # Charge of each tracklet, from the slices above threshold
        n_slices = max(track.trd_nslices - 1, 0)
        slices = track.trd_slices[:, :n_slices]
        signal_mask = slices > self.min_charge
        charges = np.where(signal_mask, slices, 0.0).sum(axis=1)
        n_nonzero = signal_mask.sum(axis=1)

        dedx_hist = self.histos.get("fQAdEdx")
        for plane in range(TRD_N_PLANES):
            if charges[plane] > self.min_charge:
                dedx[self.DEDX] = charges[plane]
                dedx[self.NONZERO_SLICES] = n_nonzero[plane]
                dedx_hist.fill(dedx)

        qa[self.NONZERO_TRACKLET_CHARGE] = np.count_nonzero(charges)
        self.histos.get("fQAtrack").fill(qa)

        trunc_mean[self.TPC_DEDX] = track.tpc_signal
        trunc_mean[self.TRD_DEDX_V1] = self.trd_signal.signal_v1(track)
        trunc_mean[self.TRD_DEDX_V2] = self.trd_signal.signal_v2(track)
        self.histos.get("fTRDtruncMean").fill(trunc_mean)

    def finish(self):
        """Computes the efficiencies and thresholds for each number of
        tracklets in the analysed range."""
        if self.pion_efficiencies is None:
            self.pion_efficiencies = {}
            self.proton_efficiencies = {}
            self.thresholds = {}

        for ntracklets in range(self.min_ntracklets, self.max_ntracklets + 1):
            logger.info("Analysing %d tracklets", ntracklets)
            self.analyse_ntracklets(ntracklets)

    def analyse_ntracklets(self, ntracklets):
        """Computes the pion and proton efficiencies at fixed electron
        efficiencies, as a function of momentum, for tracks with a given
        number of tracklets.

        Parameters
        ----------
        ntracklets : int
            Number of tracklets
        """
        if self.pion_efficiencies is None:
            self.pion_efficiencies = {}
            self.proton_efficiencies = {}
            self.thresholds = {}

        # Project the (momentum, likelihood) distribution of each species
        like = self.histos.get("fLikeTRD")
        tracklet_axis = like.axis(self.NTRACKLETS)
        species_axis = like.axis(self.SPECIES)
        bin_tracklets = tracklet_axis.find_bin(ntracklets)
        tracklet_axis.set_range(bin_tracklets, bin_tracklets)

        projections = {}
        for species, label in (
            (ELEC_SPECIES, "likeElectron"),
            (PION_SPECIES, "likePion"),
            (PROT_SPECIES, "likeProton"),
        ):
            bin_species = species_axis.find_bin(species)
            logger.debug("Bin of species %d: %d", species, bin_species)
            species_axis.set_range(bin_species, bin_species)
            projections[species] = like.projection(self.P, self.ELECTRON_LIKE, name=label)

        species_axis.set_range(0, species_axis.nbins)
        tracklet_axis.set_range(0, tracklet_axis.nbins)

        # Prepare the output containers
        key = f"{ntracklets}Tracklets"
        pions = self.pion_efficiencies.setdefault(key, {})
        protons = self.proton_efficiencies.setdefault(key, {})
        thresholds = self.thresholds.setdefault(key, {})

        like_el = projections[ELEC_SPECIES]
        p_axis = like_el.x_axis
        for eff in self.ELECTRON_EFFICIENCIES:
            logger.debug("Doing electron efficiency %f", eff)
            name = f"eff{efficiency_label(eff)}"
            eff_pi = pions[name] = GraphErrors(name)
            eff_pr = protons[name] = GraphErrors(name)
            thresh = thresholds[name] = Graph(name)

            for imom in range(1, p_axis.last + 1):
                p = p_axis.bin_center(imom)
                dp = p_axis.bin_width(imom) / 2

                probs = {}
                for species, label in (
                    (ELEC_SPECIES, "el"),
                    (PION_SPECIES, "pi"),
                    (PROT_SPECIES, "pr"),
                ):
                    probs[species] = projections[species].projection_y(label, imom)
                    integral = probs[species].integral()
                    if not probs[species].entries or integral <= 0.0:
                        break
                    probs[species].scale(1.0 / integral)
                else:
                    logger.debug("Calculating values for p = %f", p)
                    threshbin = self.threshold_bin(probs[ELEC_SPECIES], eff)
                    thresh.add_point(p, probs[ELEC_SPECIES].x_axis.bin_center(threshbin))

                    for species, graph in ((PION_SPECIES, eff_pi), (PROT_SPECIES, eff_pr)):
                        value, error = self.calculate_efficiency(probs[species], threshbin)
                        i = graph.add_point(p, value)
                        graph.set_point_error(i, dp, error)

    @staticmethod
    def threshold_bin(hist, eff):
        """Finds the likelihood bin above which a fraction `eff` of the
        normalized distribution lies.

        Parameters
        ----------
        hist : Histogram
            Normalized one-dimensional likelihood distribution
        eff : float
            Target efficiency

        Returns
        -------
        int
            Threshold bin (the first active bin if the target is never reached)
        """
        axis = hist.x_axis
        integral = 0.0
        current = axis.last
        for ibin in range(axis.last, axis.first - 1, -1):
            current = ibin
            integral += hist.bin_content(ibin)
            if integral >= eff:
                break

        return current

    @staticmethod
    def calculate_efficiency(hist, threshbin):
        """Fraction of a normalized distribution at or above a threshold bin.

        The uncertainty is binomial, computed from the number of entries in
        the distribution before normalization.

        Parameters
        ----------
        hist : Histogram
            Normalized one-dimensional likelihood distribution
        threshbin : int
            Threshold bin

        Returns
        -------
        float
            Efficiency
        float
            Efficiency uncertainty
        """
        value = float(hist.counts[threshbin : hist.x_axis.last + 1].sum())
        error = 0.0
        if hist.entries > 0:
            error = float(np.sqrt(max(value * (1.0 - value), 0.0) / hist.entries))

        return value, error

    @staticmethod
    def make_thresholds(graph):
        """Fits the threshold parametrization to a threshold graph.

        Parameters
        ----------
        graph : Graph
            Likelihood thresholds as a function of momentum

        Returns
        -------
        ThresholdFunction
            Fitted parametrization
        """
        function = ThresholdFunction("thresh", 0.1, 10.0)
        graph.fit(function, 0.0, 10.0)

        return function

    def fit_thresholds(self):
        """Fits the parametrization to every threshold graph.

        Returns
        -------
        Dict[str, Dict[str, ThresholdFunction]]
            Fitted parametrizations, named `thresh_{n}_{eff}`, per number of
            tracklets. `None` if the thresholds are not available
        """
        if not self.thresholds:
            logger.error("Threshold histograms have to be created first")
            return None

        logger.info("Calculating threshold parameters")
        self.threshold_functions = {}
        for ntracklets in range(self.min_ntracklets, self.max_ntracklets + 1):
            key = f"{ntracklets}Tracklets"
            if key not in self.thresholds:
                logger.error("Threshold histograms for the case %d tracklets not found", ntracklets)
                continue

            logger.info("Processing %d tracklets", ntracklets)
            functions = self.threshold_functions[key] = {}
            for eff in self.ELECTRON_EFFICIENCIES:
                logger.debug("Processing electron efficiency %f", eff)
                label = efficiency_label(eff)
                function = self.make_thresholds(self.thresholds[key][f"eff{label}"])
                function.name = f"thresh_{ntracklets}_{label}"
                functions[function.name] = function

        return self.threshold_functions

    def save_threshold_parameters(self, path):
        """Fits the threshold graphs and stores the parametrizations.

        Parameters
        ----------
        path : str
            Path to the output HDF5 file (overwritten)
        """
        functions = self.fit_thresholds()
        if functions is None:
            return

        write_results(path, {"thresholdTRD": functions}, mode="w")

    def store_results(self, path):
        """Stores the efficiency and threshold graphs.

        Parameters
        ----------
        path : str
            Path to the output HDF5 file (overwritten)
        """
        if self.thresholds is None:
            logger.error("No results to store, run `finish` first")
            return

        write_results(
            path,
            {
                "pionEfficiencies": self.pion_efficiencies,
                "protonEfficiencies": self.proton_efficiencies,
                "thresholds": self.thresholds,
            },
            mode="w",
        )

    def draw_tracklet(self, ntracklets):
        """Draws the efficiencies and thresholds for one number of tracklets.

        Parameters
        ----------
        ntracklets : int
            Number of tracklets

        Returns
        -------
        plotly.graph_objects.Figure
            One panel per electron efficiency. `None` if nothing is available
        """
        if not (self.pion_efficiencies and self.proton_efficiencies and self.thresholds):
            logger.error("No graphs to draw available")
            return None

        key = f"{ntracklets}Tracklets"
        if key not in self.thresholds:
            logger.error("No graphs to draw available for %d tracklets", ntracklets)
            return None

        return efficiency_figure(
            self.pion_efficiencies[key],
            self.proton_efficiencies[key],
            self.thresholds[key],
            self.ELECTRON_EFFICIENCIES,
            title=f"Tracklet {ntracklets}",
        )

    def clear_lists(self):
        """Clears the efficiency and threshold graphs."""
        self.pion_efficiencies = None
        self.proton_efficiencies = None
        self.thresholds = None
        self.threshold_functions = None

    def results(self):
        """Returns the efficiency and threshold graphs, along with the
        threshold parametrizations if they were fitted."""
        if self.thresholds is None:
            return {}

        results = {
            "pion_efficiencies": self.pion_efficiencies,
            "proton_efficiencies": self.proton_efficiencies,
            "thresholds": self.thresholds,
        }
        if self.threshold_functions is not None:
            results["thresholdTRD"] = self.threshold_functions

        return results

    def merge(self, others):
        """Adds the histograms of other instances. The derived graphs are
        cleared, as they must be recomputed from the merged histograms."""
        count = super().merge(others)
        if count > 1:
            self.clear_lists()

        return count
