"""Event and cell selection of the electromagnetic calorimeter."""

import numpy as np

from detqa.utils.globals import EMCAL_CELLS_PER_SM
from detqa.utils.logger import logger

__all__ = ["CaloSelector"]


class CaloSelector:
    """Rejects calorimeter events affected by detector artifacts and cleans
    the cluster cells.

    .. code-block:: yaml

        calo:
          name: calo_selection
          led_removal: true
          exotic_removal: true
          cell_selection: true
          min_cell_energy: 0.05
          min_cell_fraction: 0.001
          max_events: 10000
    """

    name = "calo_selection"
    aliases = ("calo",)

    # Runs with LED signals in supermodule 3
    LED_RUNS = (146858, 146859, 146860)
    LED_SUPERMODULE = 3
    LED_CELL_ENERGY = 0.1  # [GeV]
    LED_MAX_CELLS = 21
    LED_MAX_CELLS_EMC = 35

    def __init__(
        self,
        led_removal=False,
        exotic_removal=False,
        cell_selection=False,
        min_cell_energy=0.05,
        min_cell_fraction=0.001,
        exotic_energy=1.0,
        log_weight=4.5,
        max_events=None,
    ):
        """Initialize the selection parameters.

        Parameters
        ----------
        led_removal : bool, default False
            Reject the events of runs contaminated by LED signals
        exotic_removal : bool, default False
            Reject the events with a summed cell energy below `exotic_energy`
        cell_selection : bool, default False
            Remove the low-energy cells from the clusters
        min_cell_energy : float, default 0.05
            Minimum energy of a cell in a cluster, in GeV
        min_cell_fraction : float, default 0.001
            Minimum fraction of a cell energy attributed to a cluster
        exotic_energy : float, default 1.
            Summed cell energy below which an event is exotic, in GeV
        log_weight : float, default 4.5
            Cutoff of the logarithmic weights of the cluster position
        max_events : int, optional
            Maximum number of events to accept
        """
        self.led_removal = led_removal
        self.exotic_removal = exotic_removal
        self.cell_selection = cell_selection
        self.min_cell_energy = min_cell_energy
        self.min_cell_fraction = min_cell_fraction
        self.exotic_energy = exotic_energy
        self.log_weight = log_weight
        self.max_events = max_events
        self.num_accepted = 0

    def __call__(self, data):
        return self.process(data)

    def process(self, data):
        """Selects one event and cleans its clusters.

        Parameters
        ----------
        data : dict
            Dictionary of data products for one entry

        Returns
        -------
        dict
            `accepted`: whether the event passed the selection
        """
        event = data["event"]
        if self.max_events is not None and self.num_accepted >= self.max_events:
            logger.debug("Reached the maximum number of events: %d", self.max_events)
            return {"accepted": False}

        if self.led_removal and self.is_led_event(event):
            logger.debug("Reject LED event %d of run %d", event.event, event.run)
            return {"accepted": False}

        if self.exotic_removal and self.is_exotic_event(event):
            logger.debug("Reject exotic event %d of run %d", event.event, event.run)
            return {"accepted": False}

        if self.cell_selection:
            event.clusters = self.select_cells(event.clusters, event.cells)
            data["clusters"] = event.clusters

        self.num_accepted += 1

        return {"accepted": True}

    def is_led_event(self, event):
        """Checks whether an event is contaminated by LED signals.

        Only a known set of runs is affected. The event is rejected if too
        many cells of the affected supermodule carry a signal.

        Parameters
        ----------
        event : Event
            Event under study

        Returns
        -------
        bool
            `True` if the event must be rejected
        """
        if event.run not in self.LED_RUNS:
            return False

        n_cells = sum(
            1
            for cell in event.cells
            if cell.id // EMCAL_CELLS_PER_SM == self.LED_SUPERMODULE
            and cell.energy > self.LED_CELL_ENERGY
        )
        max_cells = self.LED_MAX_CELLS
        if event.has_trigger("EMC"):
            max_cells = self.LED_MAX_CELLS_EMC

        return n_cells >= max_cells

    def is_exotic_event(self, event):
        """Checks whether the total calorimeter energy of an event is too low.

        Parameters
        ----------
        event : Event
            Event under study

        Returns
        -------
        bool
            `True` if the event is exotic
        """
        total = sum(cell.energy for cell in event.cells)

        return total < self.exotic_energy

    def remove_led_events(self, events):
        """Filters out the LED-contaminated events of a list."""
        return [event for event in events if not self.is_led_event(event)]

    def remove_exotic_events(self, events):
        """Filters out the exotic events of a list."""
        return [event for event in events if not self.is_exotic_event(event)]

    def select_cells(self, clusters, cells):
        """Removes the low-energy cells of each cluster, recomputes the
        cluster energy and log-weighted position. Empty clusters are dropped.

        Parameters
        ----------
        clusters : List[CaloCluster]
            Calorimeter clusters
        cells : List[CaloCell]
            Calorimeter cells of the event

        Returns
        -------
        List[CaloCluster]
            Selected clusters
        """
        cell_map = {cell.id: cell for cell in cells}
        selected = []
        for cluster in clusters:
            keep, energies = [], []
            for i, (cell_id, frac) in enumerate(
                zip(cluster.cell_ids, cluster.cell_fractions)
            ):
                cell = cell_map.get(int(cell_id))
                if cell is None:
                    continue
                if cell.energy < self.min_cell_energy or frac < self.min_cell_fraction:
                    continue
                keep.append(i)
                energies.append(cell.energy * frac)

            if not keep:
                continue

            keep = np.asarray(keep, dtype=np.int64)
            energies = np.asarray(energies)
            positions = np.vstack(
                [cell_map[int(cluster.cell_ids[i])].position for i in keep]
            )
            cluster.cell_ids = cluster.cell_ids[keep]
            cluster.cell_fractions = cluster.cell_fractions[keep]
            cluster.energy = float(energies.sum())
            cluster.position = self.log_weighted_position(energies, positions)
            selected.append(cluster)

        return selected

    def log_weighted_position(self, energies, positions):
        """Position of a cluster, weighted by the logarithm of the cell
        energy fractions.

        Parameters
        ----------
        energies : np.ndarray
            (C) Cell energies attributed to the cluster
        positions : np.ndarray
            (C, 3) Cell positions

        Returns
        -------
        np.ndarray
            (3) Cluster position
        """
        total = energies.sum()
        weights = np.zeros(len(energies))
        if total > 0:
            ratios = np.clip(energies / total, 1e-12, None)
            weights = np.maximum(0.0, self.log_weight + np.log(ratios))
        if weights.sum() <= 0:
            weights = energies if total > 0 else np.ones(len(energies))

        return np.average(positions, axis=0, weights=weights)
