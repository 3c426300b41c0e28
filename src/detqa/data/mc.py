"""Module with a data class which represents a Monte Carlo particle."""

from dataclasses import dataclass

import numpy as np

from .base import DataBase

__all__ = ["MCParticle"]


@dataclass(eq=False)
class MCParticle(DataBase):
    """Generated particle, as stored in the Monte Carlo record of an event.

    Attributes
    ----------
    id : int
        Index of the particle in the Monte Carlo record
    pdg_code : int
        PDG code of the particle
    momentum : np.ndarray
        (3) Momentum of the particle, in GeV/c
    mother : int
        Index of the mother particle in the record (-1 for primaries)
    is_physical_primary : bool
        Whether the particle is a physical primary
    is_secondary_from_weak_decay : bool
        Whether the particle comes from the weak decay of another particle
    is_secondary_from_material : bool
        Whether the particle was produced in the detector material
    """

    id: int = -1
    pdg_code: int = 0
    momentum: np.ndarray = None
    mother: int = -1
    is_physical_primary: bool = False
    is_secondary_from_weak_decay: bool = False
    is_secondary_from_material: bool = False

    # Fixed-length attributes
    _fixed_length_attrs = (("momentum", 3),)

    # Attributes specifying vector components
    _vec_attrs = ("momentum",)

    @property
    def pt(self):
        """Transverse momentum."""
        return float(np.hypot(self.momentum[0], self.momentum[1]))

    @property
    def phi(self):
        """Azimuthal angle in [0, 2pi)."""
        return float(np.arctan2(self.momentum[1], self.momentum[0]) % (2 * np.pi))

    @property
    def theta(self):
        """Polar angle with respect to the beam axis."""
        return float(np.arctan2(self.pt, self.momentum[2]))
