"""Module with data classes which represent calorimeter information."""

from dataclasses import dataclass

import numpy as np

from detqa.utils.globals import EMCAL_CELLS_PER_SM

from .base import DataBase

__all__ = ["CaloCell", "CaloCluster"]


@dataclass(eq=False)
class CaloCell(DataBase):
    """Calorimeter cell (tower) with a recorded signal.

    Attributes
    ----------
    id : int
        Absolute cell number
    energy : float
        Calibrated cell energy, in GeV
    time : float
        Cell time, in s
    position : np.ndarray
        (3) Position of the cell center, in cm
    mc_label : int
        Index of the Monte Carlo particle which deposited most energy
    """

    id: int = -1
    energy: float = 0.0
    time: float = 0.0
    position: np.ndarray = None
    mc_label: int = -1

    # Fixed-length attributes
    _fixed_length_attrs = (("position", 3),)

    # Attributes specifying coordinates
    _pos_attrs = ("position",)

    @property
    def supermodule(self):
        """Index of the supermodule the cell belongs to."""
        return self.id // EMCAL_CELLS_PER_SM


@dataclass(eq=False)
class CaloCluster(DataBase):
    """Cluster of calorimeter cells.

    Attributes
    ----------
    id : int
        Index of the cluster in the event cluster list
    energy : float
        Cluster energy, in GeV
    position : np.ndarray
        (3) Cluster position, in cm
    cell_ids : np.ndarray
        (C) Absolute numbers of the cells in the cluster
    cell_fractions : np.ndarray
        (C) Fraction of the energy of each cell attributed to the cluster
    """

    id: int = -1
    energy: float = 0.0
    position: np.ndarray = None
    cell_ids: np.ndarray = None
    cell_fractions: np.ndarray = None

    # Fixed-length attributes
    _fixed_length_attrs = (("position", 3),)

    # Variable-length attributes
    _var_length_attrs = (("cell_ids", np.int64), ("cell_fractions", np.float64))

    # Attributes specifying coordinates
    _pos_attrs = ("position",)

    def __post_init__(self):
        super().__post_init__()
        assert len(self.cell_ids) == len(self.cell_fractions), (
            "Must provide one energy fraction per cluster cell."
        )

    @property
    def n_cells(self):
        """Number of cells in the cluster."""
        return len(self.cell_ids)
