"""Module with a data class which represents a reconstructed charged track."""

from dataclasses import dataclass

import numpy as np

from detqa.utils.globals import (
    PDG_TO_SPECIES,
    TRD_N_PLANES,
    TRD_N_SLICES,
    TRD_OUT,
    INVAL_MOM,
)

from .base import DataBase

__all__ = ["Track"]


@dataclass(eq=False)
class Track(DataBase):
    """Reconstructed charged-particle track.

    Attributes
    ----------
    id : int
        Index of the track in the event track list
    charge : int
        Electric charge in units of the elementary charge
    momentum : np.ndarray
        (3) Momentum at the point of closest approach to the beam line, in GeV/c
    position : np.ndarray
        (3) Point of closest approach to the beam line, in cm
    p_inner : float
        Total momentum at the inner wall of the TPC (-1 if not available)
    p_outer : float
        Total momentum at the outer wall of the TRD (-1 if not available)
    status : int
        Reconstruction status bit flags
    tpc_signal : float
        Truncated mean of the TPC cluster charges (dE/dx)
    tpc_ncls : int
        Number of TPC clusters
    trd_pid : np.ndarray
        (5) TRD likelihoods of each species hypothesis
    trd_ntracklets_pid : int
        Number of TRD tracklets used for the PID
    trd_ncls : int
        Number of TRD clusters
    trd_nslices : int
        Number of charge slices per TRD tracklet
    trd_slices : np.ndarray
        (6, 8) Charge deposited in each time slice of each TRD layer
    mc_label : int
        Index of the matched Monte Carlo particle (negative if fake or absent)
    pdg_code : int
        PDG code of the matched Monte Carlo particle (0 if not available)
    """

    id: int = -1
    charge: int = 0
    momentum: np.ndarray = None
    position: np.ndarray = None
    p_inner: float = INVAL_MOM
    p_outer: float = INVAL_MOM
    status: int = 0
    tpc_signal: float = 0.0
    tpc_ncls: int = 0
    trd_pid: np.ndarray = None
    trd_ntracklets_pid: int = 0
    trd_ncls: int = 0
    trd_nslices: int = TRD_N_SLICES
    trd_slices: np.ndarray = None
    mc_label: int = -1
    pdg_code: int = 0

    # Fixed-length attributes
    _fixed_length_attrs = (
        ("momentum", 3),
        ("position", 3),
        ("trd_pid", 5),
        ("trd_slices", (TRD_N_PLANES, TRD_N_SLICES)),
    )

    # Attributes specifying coordinates
    _pos_attrs = ("position",)

    # Attributes specifying vector components
    _vec_attrs = ("momentum",)

    @property
    def p(self):
        """Total momentum at the vertex."""
        return float(np.linalg.norm(self.momentum))

    @property
    def pt(self):
        """Transverse momentum at the vertex."""
        return float(np.hypot(self.momentum[0], self.momentum[1]))

    @property
    def phi(self):
        """Azimuthal angle in [0, 2pi)."""
        return float(np.arctan2(self.momentum[1], self.momentum[0]) % (2 * np.pi))

    @property
    def theta(self):
        """Polar angle with respect to the beam axis."""
        return float(np.arctan2(self.pt, self.momentum[2]))

    @property
    def eta(self):
        """Pseudorapidity."""
        p, pz = self.p, self.momentum[2]
        if p == abs(pz):
            return float(np.sign(pz) * np.inf) if pz != 0 else 0.0

        return float(0.5 * np.log((p + pz) / (p - pz)))

    @property
    def has_inner_param(self):
        """Whether the momentum at the TPC inner wall is available."""
        return self.p_inner >= 0

    @property
    def has_outer_param(self):
        """Whether the momentum at the TRD outer wall is available."""
        return self.p_outer >= 0

    @property
    def has_trd_out(self):
        """Whether the track was propagated out through the TRD."""
        return bool(self.status & TRD_OUT)

    @property
    def species(self):
        """Species of the matched Monte Carlo particle (-1 if unknown)."""
        return PDG_TO_SPECIES.get(self.pdg_code, -1)

    def trd_slice(self, plane, slc):
        """Charge deposited in one slice of one TRD layer.

        Parameters
        ----------
        plane : int
            TRD layer index
        slc : int
            Time slice index

        Returns
        -------
        float
            Slice charge
        """
        return self.trd_slices[plane, slc]
