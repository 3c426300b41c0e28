"""Monitoring of the TPC particle identification.

The TPC energy loss and its deviation from the electron expectation (in
number of sigmas) are monitored as a function of momentum, particle species
and centrality, before and after the PID selection.
"""

import numpy as np

from detqa.pid import PIDObject, TPCResponse
from detqa.utils.globals import ELEC_SPECIES, N_SPECIES, SPECIES_NAMES
from detqa.utils.logger import logger

from .base import DetectorPIDQA

__all__ = ["TPCPIDQA"]


class TPCPIDQA(DetectorPIDQA):
    """TPC PID QA module.

    Books two sparse histograms, `tpcDedx` and `tpcnSigma`, with axes:
    species, momentum, signal, selection step and centrality.

    .. code-block:: yaml

        qa:
          tpc_pid:
            nsigma_cut: 3.
            pid_response:
              mip: 50.
    """

    name = "tpc_pid"
    aliases = ("tpc",)

    # Axis indexes
    SPECIES, P, SIGNAL, STEP, CENTRALITY = range(5)

    def __init__(self, nsigma_cut=3.0, pid_response=None, use_mc_species=True):
        """Initialize the module.

        Parameters
        ----------
        nsigma_cut : float, default 3.
            Maximum deviation from the electron expectation (in number of
            sigmas) for a track to pass the PID selection
        pid_response : Union[dict, bool], optional
            Configuration of the :class:`TPCResponse`. If `False`, no
            response is available and the monitoring is skipped
        use_mc_species : bool, default True
            If `True`, use the Monte Carlo species of the tracks
        """
        super().__init__(use_mc_species)
        self.nsigma_cut = nsigma_cut
        self.pid_response = None
        if pid_response is not False:
            self.pid_response = TPCResponse(**(pid_response or {}))
        else:
            logger.error("No TPC PID response available, the TPC QA is skipped")

        self.initialize()

    def initialize(self):
        """Books the TPC QA histograms."""
        n_pid, min_pid, max_pid = N_SPECIES + 1, -1.0, float(N_SPECIES)
        n_p, min_p, max_p = 1000, 0.0, 20.0
        n_steps, n_cent = 2, 20
        title = (
            "TPC signal; species; p [GeV/c]; TPC signal [a.u.]; "
            "Selection Step; Centrality"
        )

        self.histos.create_sparse(
            "tpcDedx",
            title,
            [n_pid, n_p, 600, n_steps, n_cent],
            [min_pid, min_p, 0.0, 0.0, 0.0],
            [max_pid, max_p, 300.0, 2.0, 100.0],
        )
        self.histos.create_sparse(
            "tpcnSigma",
            title,
            [n_pid, n_p, 1400, n_steps, n_cent],
            [min_pid, min_p, -12.0, 0.0, 0.0],
            [max_pid, max_p, 12.0, 2.0, 100.0],
        )

    def process(self, data):
        """Monitors every track of the event before the PID selection and
        the tracks which pass the electron selection after it.

        Parameters
        ----------
        data : dict
            Filtered data dictionary for one entry
        """
        if self.pid_response is None:
            return

        centrality = data["event"].centrality
        for track in data["tracks"]:
            pid_obj = PIDObject.from_track(track, self.use_mc_species, centrality)
            self.process_track(pid_obj, self.BEFORE_PID)
            nsigma = self.pid_response.number_of_sigmas(track, ELEC_SPECIES)
            if abs(nsigma) < self.nsigma_cut:
                self.process_track(pid_obj, self.AFTER_PID)

    def process_track(self, pid_obj, step):
        """Fills the TPC histograms with one track. Nothing is filled without
        a PID response.

        Parameters
        ----------
        pid_obj : PIDObject
            Track under study
        step : int
            Selection step
        """
        logger.debug("Monitoring particle of type %d for step %d", pid_obj.abinitio_pid, step)
        if self.pid_response is None:
            return

        species = pid_obj.abinitio_pid
        if species >= N_SPECIES:
            species = -1

        track = pid_obj.track
        content = np.empty(5)
        content[self.SPECIES] = species
        content[self.P] = track.p_inner if track.has_inner_param else track.p
        content[self.SIGNAL] = track.tpc_signal
        content[self.STEP] = step
        content[self.CENTRALITY] = pid_obj.centrality
        self.histos.get("tpcDedx").fill(content)

        content[self.SIGNAL] = self.pid_response.number_of_sigmas(track, ELEC_SPECIES)
        self.histos.get("tpcnSigma").fill(content)

    def make_spectrum(self, hist_name, step, species=-1):
        """Projects one of the sparse histograms onto (momentum, signal) for
        a selection step and, optionally, a species.

        The axis ranges are restored once the projection is done.

        Parameters
        ----------
        hist_name : str
            Name of the sparse histogram
        step : int
            Selection step
        species : int, default -1
            Species to select. If not a known species, all tracks are used

        Returns
        -------
        Histogram
            Two-dimensional (momentum, signal) spectrum
        """
        signal = self.histos.get(hist_name)
        signal.axis(self.STEP).set_range(step + 1, step + 1)
        if 0 <= species < N_SPECIES:
            signal.axis(self.SPECIES).set_range(species + 2, species + 2)

        spectrum = signal.projection(self.P, self.SIGNAL)

        for axis in (self.STEP, self.SPECIES):
            signal.axis(axis).set_range(0, signal.axis(axis).nbins)

        return spectrum

    def make_spectrum_dedx(self, step, species=-1):
        """Builds the TPC dE/dx spectrum.

        Parameters
        ----------
        step : int
            Selection step
        species : int, default -1
            Species to select

        Returns
        -------
        Histogram
            Two-dimensional (momentum, dE/dx) spectrum
        """
        spectrum = self.make_spectrum("tpcDedx", step, species)
        spectrum.name, spectrum.title = self.spectrum_name(
            "hTPCsignal", "TPC dE/dx Spectrum", step, species
        )
        spectrum.set_stats(False)
        spectrum.x_axis.title = "p [GeV/c]"
        spectrum.y_axis.title = "TPC signal [a.u.]"

        return spectrum

    def make_spectrum_nsigma(self, step, species=-1):
        """Builds the spectrum of the TPC number of sigmas from the electron
        expectation.

        Parameters
        ----------
        step : int
            Selection step
        species : int, default -1
            Species to select

        Returns
        -------
        Histogram
            Two-dimensional (momentum, number of sigmas) spectrum
        """
        spectrum = self.make_spectrum("tpcnSigma", step, species)
        spectrum.name, spectrum.title = self.spectrum_name(
            "hTPCsigma", "TPC dE/dx Spectrum[#sigma]", step, species
        )
        spectrum.set_stats(False)
        spectrum.x_axis.title = "p [GeV/c]"
        spectrum.y_axis.title = "TPC dE/dx - <dE/dx>|_{el} [#sigma]"

        return spectrum

    def spectrum_name(self, prefix, title, step, species):
        """Builds the name and the title of a spectrum.

        Parameters
        ----------
        prefix : str
            Histogram name prefix
        title : str
            Histogram title prefix
        step : int
            Selection step
        species : int
            Selected species

        Returns
        -------
        str
            Name of the spectrum
        str
            Title of the spectrum
        """
        step_name = self.step_name(step)
        name = f"{prefix}{step_name}"
        title = f"{title} {step_name} selection"
        if 0 <= species < N_SPECIES:
            name += SPECIES_NAMES[species]
            title += f" for {SPECIES_NAMES[species]}s"

        return name, title

    def results(self):
        """Returns the dE/dx and number of sigmas spectra of each step."""
        spectra = {}
        for step in (self.BEFORE_PID, self.AFTER_PID):
            for hist in (self.make_spectrum_dedx(step), self.make_spectrum_nsigma(step)):
                spectra[hist.name] = hist

        return {"spectra": spectra}
