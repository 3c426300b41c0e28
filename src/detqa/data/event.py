"""Module with a data class which holds one reconstructed event."""

from dataclasses import dataclass

import numpy as np

from .base import DataBase

__all__ = ["Event"]


@dataclass(eq=False)
class Event(DataBase):
    """Reconstructed event and its global properties.

    The object lists are not part of the stored event summary: they are
    stored in their own datasets and attached to the event when it is read.

    Attributes
    ----------
    run : int
        Run number
    event : int
        Event number within the run
    centrality : float
        Event centrality percentile (-1 if not available)
    multiplicity : int
        Reference charged-particle multiplicity
    magnetic_field : float
        Solenoid magnetic field along the beam axis, in kG
    vertex : np.ndarray
        (3) Primary vertex position, in cm
    trigger_classes : str
        Space-separated list of fired trigger classes
    tracks : List[Track]
        Reconstructed tracks
    v0s : List[V0]
        Reconstructed v0 vertices
    mc_particles : List[MCParticle]
        Monte Carlo record (empty for real data)
    cells : List[CaloCell]
        Calorimeter cells
    clusters : List[CaloCluster]
        Calorimeter clusters
    """

    run: int = -1
    event: int = -1
    centrality: float = -1.0
    multiplicity: int = 0
    magnetic_field: float = 0.0
    vertex: np.ndarray = None
    trigger_classes: str = ""
    tracks: list = None
    v0s: list = None
    mc_particles: list = None
    cells: list = None
    clusters: list = None

    # Fixed-length attributes
    _fixed_length_attrs = (("vertex", 3),)

    # Attributes specifying coordinates
    _pos_attrs = ("vertex",)

    # String attributes
    _str_attrs = ("trigger_classes",)

    # Object lists, stored separately
    _list_attrs = ("tracks", "v0s", "mc_particles", "cells", "clusters")

    # Attributes that must never be stored to file
    _skip_attrs = _list_attrs

    def __post_init__(self):
        super().__post_init__()
        for attr in self._list_attrs:
            if getattr(self, attr) is None:
                setattr(self, attr, [])

    @property
    def is_mc(self):
        """Whether the event has a Monte Carlo record."""
        return len(self.mc_particles) > 0

    def has_trigger(self, pattern):
        """Checks whether a fired trigger class contains a pattern.

        Parameters
        ----------
        pattern : str
            Pattern to look for (e.g. 'EMC')

        Returns
        -------
        bool
            `True` if the pattern is found
        """
        return pattern in self.trigger_classes
