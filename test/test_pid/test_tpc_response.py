"""Test the expected TPC energy loss."""

import numpy as np
import pytest

from detqa.pid import PIDObject, TPCResponse
from detqa.pid.tpc import bethe_bloch_aleph
from detqa.utils.globals import ELEC_SPECIES, N_SPECIES, PION_SPECIES


@pytest.fixture(name="response")
def fixture_response():
    """TPC response with the default parametrization."""
    return TPCResponse()


class TestTPCResponse:
    """Test the expected signals and the number of sigmas."""

    def test_minimum_ionizing(self, response):
        """A pion close to the minimum of ionization yields the MIP signal."""
        assert response.expected_signal(0.5, PION_SPECIES) == pytest.approx(50.0, rel=0.02)

    def test_relativistic_rise(self, response):
        """Electrons sit on the relativistic plateau, above the pions."""
        electron = response.expected_signal(1.0, ELEC_SPECIES)
        pion = response.expected_signal(1.0, PION_SPECIES)
        assert electron == pytest.approx(71.6, rel=0.01)
        assert electron > pion

    def test_vectorized(self, response):
        """Arrays of momenta give arrays of signals, scalars give floats."""
        p = np.array([0.5, 1.0, 2.0])
        signals = response.expected_signal(p, PION_SPECIES)
        assert signals.shape == (3,)
        assert signals[1] == pytest.approx(response.expected_signal(1.0, PION_SPECIES))
        assert isinstance(response.expected_signal(1.0, PION_SPECIES), float)

    def test_aleph(self):
        """The compiled parametrization matches its closed form."""
        params = TPCResponse.default_params
        bg = np.array([0.5, 4.0, 100.0])
        beta = bg / np.sqrt(1 + bg**2)
        aa = beta ** params[3]
        bb = np.log(params[2] + (1 / bg) ** params[4])
        expected = (params[1] - aa - bb) * params[0] / aa
        assert np.allclose(bethe_bloch_aleph(bg, *params), expected)

    def test_unknown_species(self, response):
        """Species without a mass hypothesis are rejected."""
        with pytest.raises(ValueError):
            response.expected_signal(1.0, N_SPECIES)

    def test_number_of_sigmas(self, response, make_track):
        """The deviation is expressed in units of the relative resolution."""
        expected = response.expected_signal(1.0, ELEC_SPECIES)
        track = make_track(p_inner=1.0, tpc_signal=expected)
        assert response.number_of_sigmas(track, ELEC_SPECIES) == pytest.approx(0.0)

        track = make_track(p_inner=1.0, tpc_signal=expected * 1.14)
        assert response.number_of_sigmas(track, ELEC_SPECIES) == pytest.approx(2.0)

        track = make_track(p_inner=1.0, tpc_signal=40.0)
        assert response.number_of_sigmas(track, ELEC_SPECIES) < -3.0

    def test_inner_momentum(self, response, make_track):
        """The vertex momentum is used when the inner parameters are missing,
        and tracks without momentum are flagged."""
        expected = response.expected_signal(2.0, ELEC_SPECIES)
        track = make_track(p_inner=-1.0, momentum=[2.0, 0.0, 0.0], tpc_signal=expected)
        assert response.number_of_sigmas(track, ELEC_SPECIES) == pytest.approx(0.0)

        track = make_track(p_inner=-1.0, momentum=[0.0, 0.0, 0.0])
        assert response.number_of_sigmas(track, ELEC_SPECIES) == -999.0

    def test_custom_response(self):
        """The MIP signal scales the expectation."""
        default, scaled = TPCResponse(), TPCResponse(mip=100.0)
        assert scaled.expected_signal(1.0, PION_SPECIES) == pytest.approx(
            2 * default.expected_signal(1.0, PION_SPECIES)
        )

        with pytest.raises(AssertionError):
            TPCResponse(params=[1.0, 2.0])


class TestPIDObject:
    """Test the track wrapper of the PID QA."""

    def test_from_track(self, make_track):
        """The species is only known when using the Monte Carlo truth."""
        track = make_track(pdg_code=11)
        assert PIDObject.from_track(track, True).abinitio_pid == ELEC_SPECIES
        assert PIDObject.from_track(track, False).abinitio_pid == -1
        assert PIDObject.from_track(track, True, 30.0).centrality == 30.0
