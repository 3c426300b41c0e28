"""Sets up fixtures general to the entire test suite of this package.

This file is read during the collection phase of pytest when running anything
inside this directory.
"""

import numpy as np
import pytest

from detqa.data import V0, CaloCell, CaloCluster, Event, MCParticle, Track
from detqa.io import HDF5Writer
from detqa.utils.globals import EMCAL_CELLS_PER_SM, TPC_IN, TRD_OUT


@pytest.fixture(name="make_track")
def fixture_make_track():
    """Returns a function which builds a track propagated through the TRD.

    Any attribute of the :class:`Track` can be overridden.
    """

    def make(**kwargs):
        np.random.seed(seed=0)
        attrs = {
            "charge": 1,
            "momentum": [1.0, 0.0, 0.0],
            "position": [0.0, 0.0, 0.0],
            "p_inner": 1.0,
            "p_outer": 1.1,
            "status": TPC_IN | TRD_OUT,
            "tpc_signal": 50.0,
            "tpc_ncls": 150,
            "trd_pid": [0.5, 0.1, 0.2, 0.1, 0.1],
            "trd_ntracklets_pid": 6,
            "trd_ncls": 120,
            "trd_slices": np.random.uniform(0.0, 100.0, size=(6, 8)),
            "pdg_code": 211,
        }
        attrs.update(kwargs)

        return Track(**attrs)

    return make


@pytest.fixture(name="lambda_event")
def fixture_lambda_event(make_track):
    """Simulated event with one Lambda decaying into a proton and a pion.

    There is no magnetic field: the tracks are straight lines. Both
    daughters start from the decay vertex at (10, 0, 0) cm.
    """
    tracks = [
        make_track(
            id=0,
            charge=1,
            momentum=[1.0, 0.1, 0.0],
            position=[10.0, 0.0, 0.0],
            pdg_code=2212,
            mc_label=1,
        ),
        make_track(
            id=1,
            charge=-1,
            momentum=[0.3, -0.1, 0.0],
            position=[10.0, 0.0, 0.0],
            pdg_code=-211,
            mc_label=2,
        ),
        make_track(
            id=2,
            charge=-1,
            momentum=[0.5, 0.5, 0.2],
            pdg_code=11,
            mc_label=3,
        ),
    ]

    v0s = [
        V0(
            id=0,
            pos_index=0,
            neg_index=1,
            vertex=[10.0, 0.0, 0.0],
            pos_momentum=[1.0, 0.1, 0.0],
            neg_momentum=[0.3, -0.1, 0.0],
        )
    ]

    mc_particles = [
        MCParticle(
            id=0,
            pdg_code=3122,
            momentum=[1.3, 0.0, 0.0],
            is_physical_primary=True,
        ),
        MCParticle(id=1, pdg_code=2212, momentum=[1.0, 0.1, 0.0], mother=0),
        MCParticle(id=2, pdg_code=-211, momentum=[0.3, -0.1, 0.0], mother=0),
        MCParticle(
            id=3,
            pdg_code=11,
            momentum=[0.5, 0.5, 0.2],
            is_physical_primary=True,
        ),
    ]

    cells = [
        CaloCell(id=10, energy=1.0, position=[440.0, 0.0, 0.0]),
        CaloCell(id=11, energy=0.5, position=[440.0, 6.0, 0.0]),
        CaloCell(id=12, energy=0.01, position=[440.0, 12.0, 0.0]),
        CaloCell(id=EMCAL_CELLS_PER_SM + 1, energy=0.8, position=[0.0, 440.0, 0.0]),
    ]

    clusters = [
        CaloCluster(
            id=0,
            energy=1.51,
            position=[440.0, 3.0, 0.0],
            cell_ids=[10, 11, 12],
            cell_fractions=[1.0, 1.0, 1.0],
        ),
        CaloCluster(
            id=1,
            energy=0.8,
            position=[0.0, 440.0, 0.0],
            cell_ids=[EMCAL_CELLS_PER_SM + 1],
            cell_fractions=[1.0],
        ),
    ]

    return Event(
        run=1000,
        event=7,
        centrality=15.0,
        multiplicity=3,
        magnetic_field=0.0,
        vertex=[0.0, 0.0, 0.0],
        trigger_classes="CINT7-B-NOPF-CENT,CEMC7-B-NOPF-CALO",
        tracks=tracks,
        v0s=v0s,
        mc_particles=mc_particles,
        cells=cells,
        clusters=clusters,
    )


@pytest.fixture(name="make_events")
def fixture_make_events(lambda_event):
    """Returns a function which builds a list of events, copies of the
    Lambda event with increasing event numbers."""

    def make(num_events, run=1000):
        events = []
        for i in range(num_events):
            event = Event.from_record(
                Event.to_array([lambda_event])[0],
                tracks=lambda_event.tracks,
                v0s=lambda_event.v0s,
                mc_particles=lambda_event.mc_particles,
                cells=lambda_event.cells,
                clusters=lambda_event.clusters,
            )
            event.run, event.event = run, i
            events.append(event)

        return events

    return make


@pytest.fixture(name="event_file")
def fixture_event_file(tmp_path, make_events):
    """Writes four events to an HDF5 file and returns its path."""
    path = str(tmp_path / "events_test.h5")
    writer = HDF5Writer(path)
    writer.write(make_events(4))

    return path
