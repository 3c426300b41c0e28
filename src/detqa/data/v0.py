"""Module with a data class which represents a reconstructed v0 vertex."""

from dataclasses import dataclass

import numpy as np

from .base import DataBase

__all__ = ["V0"]


@dataclass(eq=False)
class V0(DataBase):
    """Secondary vertex formed by two oppositely charged tracks.

    The distances of closest approach are optional: the value -1 means that
    the quantity was not provided by the vertexer and must be computed from
    the daughter tracks.

    Attributes
    ----------
    id : int
        Index of the v0 in the event v0 list
    pos_index : int
        Index of the positive prong in the event track list
    neg_index : int
        Index of the negative prong in the event track list
    on_fly : bool
        Whether the v0 was found during tracking (on-the-fly) or offline
    n_prongs : int
        Number of prongs of the vertex
    n_daughters : int
        Number of daughter tracks of the vertex
    vertex : np.ndarray
        (3) Decay vertex position, in cm
    pos_momentum : np.ndarray
        (3) Momentum of the positive prong at the decay vertex, in GeV/c
    neg_momentum : np.ndarray
        (3) Momentum of the negative prong at the decay vertex, in GeV/c
    charge : int
        Total charge of the vertex
    dca_daughters : float
        Distance of closest approach between the two prongs
    dca_prim : float
        Distance of closest approach of the v0 to the primary vertex
    dca_pos_prim : float
        Distance of closest approach of the positive prong to the primary vertex
    dca_neg_prim : float
        Distance of closest approach of the negative prong to the primary vertex
    mc_label : int
        Index of the matched Monte Carlo particle
    """

    id: int = -1
    pos_index: int = -1
    neg_index: int = -1
    on_fly: bool = False
    n_prongs: int = 2
    n_daughters: int = 2
    vertex: np.ndarray = None
    pos_momentum: np.ndarray = None
    neg_momentum: np.ndarray = None
    charge: int = 0
    dca_daughters: float = -1.0
    dca_prim: float = -1.0
    dca_pos_prim: float = -1.0
    dca_neg_prim: float = -1.0
    mc_label: int = -1

    # Fixed-length attributes
    _fixed_length_attrs = (
        ("vertex", 3),
        ("pos_momentum", 3),
        ("neg_momentum", 3),
    )

    # Attributes specifying coordinates
    _pos_attrs = ("vertex",)

    # Attributes specifying vector components
    _vec_attrs = ("pos_momentum", "neg_momentum")

    @property
    def momentum(self):
        """(3) Total momentum of the vertex."""
        return self.pos_momentum + self.neg_momentum
