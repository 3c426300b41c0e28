"""Truncated-mean energy loss estimators of the TRD."""

import numba as nb
import numpy as np

__all__ = ["TRDSignal", "truncated_mean"]


@nb.njit(cache=True)
def truncated_mean(values: nb.float64[:], fraction: nb.float64) -> nb.float64:
    """Mean of the lowest fraction of a set of values.

    At least one value is kept if the set is not empty.

    Parameters
    ----------
    values : np.ndarray
        (N) Values
    fraction : float
        Fraction of the lowest values to keep

    Returns
    -------
    float
        Truncated mean (0 if the set is empty)
    """
    if len(values) == 0:
        return 0.0

    n_keep = max(1, int(fraction * len(values)))

    return np.sort(values)[:n_keep].mean()


class TRDSignal:
    """Computes the TRD truncated-mean signals of a track.

    The last time slice of each tracklet is excluded from the charge
    estimates and only slices above a noise threshold are used.

    - Method 1 averages the tracklet charges (summed slices)
    - Method 2 averages the individual slice charges, scaled to the number
      of charge slices per tracklet

    Attributes
    ----------
    truncation : float
        Fraction of the lowest charges used in the means
    min_charge : float
        Minimum slice charge considered as a signal
    """

    name = "trd"

    def __init__(self, truncation=0.7, min_charge=0.1):
        """Initialize the estimator parameters.

        Parameters
        ----------
        truncation : float, default 0.7
            Fraction of the lowest charges used in the means
        min_charge : float, default 0.1
            Minimum slice charge considered as a signal
        """
        assert 0 < truncation <= 1, "The truncation fraction must be in (0, 1]."
        self.truncation = truncation
        self.min_charge = min_charge

    def charge_slices(self, track):
        """Slice charges of the track, without the last slice of each layer.

        Slices under threshold are set to 0.

        Parameters
        ----------
        track : Track
            Reconstructed track

        Returns
        -------
        np.ndarray
            (6, S - 1) slice charges
        """
        n_slices = max(track.trd_nslices - 1, 0)
        slices = np.asarray(track.trd_slices[:, :n_slices], dtype=np.float64)

        return np.where(slices > self.min_charge, slices, 0.0)

    def signal_v1(self, track):
        """Truncated mean of the tracklet charges.

        Parameters
        ----------
        track : Track
            Reconstructed track

        Returns
        -------
        float
            Method 1 signal
        """
        charges = self.charge_slices(track).sum(axis=1)

        return truncated_mean(charges[charges > 0], self.truncation)

    def signal_v2(self, track):
        """Truncated mean of the slice charges, scaled to a tracklet charge.

        Parameters
        ----------
        track : Track
            Reconstructed track

        Returns
        -------
        float
            Method 2 signal
        """
        slices = self.charge_slices(track)
        charges = slices[slices > 0]

        return slices.shape[1] * truncated_mean(charges, self.truncation)
