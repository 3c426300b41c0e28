"""Expected TPC energy loss and number of standard deviations."""

import numba as nb
import numpy as np

from detqa.utils.globals import SPECIES_MASSES

__all__ = ["TPCResponse", "bethe_bloch_aleph"]


@nb.njit(cache=True)
def bethe_bloch_aleph(
    bg: nb.float64[:],
    p1: nb.float64,
    p2: nb.float64,
    p3: nb.float64,
    p4: nb.float64,
    p5: nb.float64,
) -> nb.float64[:]:
    """ALEPH parametrization of the Bethe-Bloch energy loss, in units of the
    minimum ionizing signal.

    Parameters
    ----------
    bg : np.ndarray
        (N) Values of beta * gamma
    p1, p2, p3, p4, p5 : float
        Parameters of the parametrization

    Returns
    -------
    np.ndarray
        (N) Relative energy loss
    """
    result = np.empty(len(bg), dtype=np.float64)
    for i in range(len(bg)):
        beta = bg[i] / np.sqrt(1.0 + bg[i] * bg[i])
        aa = beta**p4
        bb = np.log(p3 + (1.0 / bg[i]) ** p5)
        result[i] = (p2 - aa - bb) * p1 / aa

    return result


class TPCResponse:
    """Response of the TPC to a charged particle.

    The expected signal is the ALEPH Bethe-Bloch parametrization, scaled to
    the signal of a minimum ionizing particle. The resolution is taken to be
    a constant fraction of the expected signal.

    Attributes
    ----------
    mip : float
        Signal of a minimum ionizing particle
    params : np.ndarray
        (5) Parameters of the ALEPH parametrization
    resolution : float
        Relative resolution of the signal
    """

    name = "tpc"

    default_params = (0.0283086 / 0.97, 2.63394e01, 5.04114e-11, 2.12543, 4.88663)

    def __init__(self, mip=50.0, params=None, resolution=0.07):
        """Initialize the response parameters.

        Parameters
        ----------
        mip : float, default 50.
            Signal of a minimum ionizing particle
        params : List[float], optional
            Parameters of the ALEPH parametrization
        resolution : float, default 0.07
            Relative resolution of the signal
        """
        self.mip = mip
        self.params = np.asarray(
            params if params is not None else self.default_params, dtype=np.float64
        )
        assert len(self.params) == 5, "The ALEPH parametrization has 5 parameters."
        assert resolution > 0, "The resolution must be strictly positive."
        self.resolution = resolution

    def expected_signal(self, p, species):
        """Expected signal for a particle of a given momentum and species.

        Parameters
        ----------
        p : Union[float, np.ndarray]
            Momentum at the TPC inner wall, in GeV/c
        species : int
            Species hypothesis

        Returns
        -------
        Union[float, np.ndarray]
            Expected signal
        """
        if species not in SPECIES_MASSES:
            raise ValueError(f"No mass defined for species {species}.")

        scalar = np.isscalar(p)
        bg = np.atleast_1d(np.asarray(p, dtype=np.float64)) / SPECIES_MASSES[species]
        signal = self.mip * bethe_bloch_aleph(bg, *self.params)

        return float(signal[0]) if scalar else signal

    def number_of_sigmas(self, track, species):
        """Deviation of the track signal from the expectation of a species,
        in units of the expected resolution.

        Parameters
        ----------
        track : Track
            Reconstructed track
        species : int
            Species hypothesis

        Returns
        -------
        float
            Number of standard deviations
        """
        p = track.p_inner if track.has_inner_param else track.p
        if p <= 0:
            return -999.0

        expected = self.expected_signal(p, species)

        return (track.tpc_signal - expected) / (self.resolution * expected)
