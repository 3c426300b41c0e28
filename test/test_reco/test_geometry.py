"""Test the compiled secondary vertex geometry routines."""

import numpy as np
import pytest

from detqa.reco import geometry


def vec(*values):
    """Builds a float64 vector, as expected by the compiled routines."""
    return np.array(values, dtype=np.float64)


class TestVertexGeometry:
    """Test the pointing angle and the decay lengths."""

    def test_cos_pointing_angle(self):
        """Aligned momenta point back, null vectors do not."""
        origin = vec(0.0, 0.0, 0.0)
        assert geometry.cos_pointing_angle(
            vec(2.0, 0.0, 0.0), vec(5.0, 0.0, 0.0), origin
        ) == pytest.approx(1.0)
        assert geometry.cos_pointing_angle(
            vec(-1.0, 0.0, 0.0), vec(5.0, 0.0, 0.0), origin
        ) == pytest.approx(-1.0)
        assert geometry.cos_pointing_angle(
            vec(1.0, 1.0, 0.0), vec(5.0, 0.0, 0.0), origin
        ) == pytest.approx(np.sqrt(0.5))

        assert geometry.cos_pointing_angle(vec(1.0, 0.0, 0.0), origin, origin) == 0.0
        assert geometry.cos_pointing_angle(origin, vec(5.0, 0.0, 0.0), origin) == 0.0

    def test_decay_length(self):
        """The transverse length ignores the beam axis."""
        decay_vtx, point = vec(3.0, 4.0, 12.0), vec(0.0, 0.0, 0.0)
        assert geometry.decay_length(decay_vtx, point) == pytest.approx(13.0)
        assert geometry.decay_length_xy(decay_vtx, point) == pytest.approx(5.0)


class TestLineDistances:
    """Test the distances of closest approach between lines and points."""

    def test_line_point_distance(self):
        """The direction needs not be normalized."""
        point, target = vec(0.0, 0.0, 0.0), vec(3.0, 2.0, 0.0)
        assert geometry.line_point_distance(
            point, vec(10.0, 0.0, 0.0), target
        ) == pytest.approx(2.0)

        # A null direction gives the distance between the points
        assert geometry.line_point_distance(
            point, vec(0.0, 0.0, 0.0), target
        ) == pytest.approx(np.sqrt(13.0))

    def test_skew_lines(self):
        """Skew lines are separated along their common normal."""
        dca = geometry.dca_between_lines(
            vec(0.0, 0.0, 0.0), vec(1.0, 0.0, 0.0), vec(0.0, 5.0, 2.0), vec(0.0, 1.0, 0.0)
        )
        assert dca == pytest.approx(2.0)

    def test_crossing_lines(self):
        """Lines which cross have no separation."""
        dca = geometry.dca_between_lines(
            vec(10.0, 0.0, 0.0), vec(1.0, 0.1, 0.0), vec(10.0, 0.0, 0.0), vec(0.3, -0.1, 0.0)
        )
        assert dca == pytest.approx(0.0)

    def test_parallel_lines(self):
        """Parallel lines fall back on the point to line distance."""
        dca = geometry.dca_between_lines(
            vec(0.0, 0.0, 0.0), vec(1.0, 0.0, 0.0), vec(7.0, 3.0, 4.0), vec(-2.0, 0.0, 0.0)
        )
        assert dca == pytest.approx(5.0)


class TestTrackExtrapolation:
    """Test the helix extrapolations of the tracks."""

    def test_straight_impact_parameter(self):
        """Without field, the impact parameter is signed by the side of the
        reference point with respect to the track."""
        position, momentum = vec(0.0, 0.0, 0.0), vec(2.0, 0.0, 1.0)
        left = geometry.transverse_impact_parameter(position, momentum, 1, 0.0, 0.0, 3.0)
        right = geometry.transverse_impact_parameter(position, momentum, 1, 0.0, 0.0, -3.0)
        assert left == pytest.approx(3.0)
        assert right == pytest.approx(-3.0)

        # Neutral tracks are straight, whatever the field
        neutral = geometry.transverse_impact_parameter(position, momentum, 0, 5.0, 0.0, 3.0)
        assert neutral == pytest.approx(3.0)

    def test_helix_impact_parameter(self):
        """Points on the line normal to the track are at their radial distance
        from the circle."""
        position, momentum = vec(0.0, 0.0, 0.0), vec(1.0, 0.0, 0.0)
        for charge in (-1, 1):
            left = geometry.transverse_impact_parameter(
                position, momentum, charge, 5.0, 0.0, 0.1
            )
            right = geometry.transverse_impact_parameter(
                position, momentum, charge, 5.0, 0.0, -0.1
            )
            assert left == pytest.approx(0.1, rel=1e-6)
            assert right == pytest.approx(-0.1, rel=1e-6)

    def test_no_transverse_momentum(self):
        """Tracks along the beam axis give the plain transverse distance."""
        dca = geometry.transverse_impact_parameter(
            vec(3.0, 0.0, 0.0), vec(0.0, 0.0, 1.0), 1, 5.0, 0.0, 4.0
        )
        assert dca == pytest.approx(5.0)

    def test_phi_at_radius(self):
        """The track bends away from its initial direction."""
        radii = vec(85.0, 100.0, 245.0)
        assert np.allclose(geometry.phi_at_radius(0.5, 1.0, 1, 0.0, radii), 0.5)

        phi = geometry.phi_at_radius(0.5, 1.0, 1, 5.0, radii)
        assert phi[1] == pytest.approx(0.5 - np.arcsin(0.075))
        assert np.all(np.diff(phi) < 0)

        # Opposite charges bend the other way
        phi_neg = geometry.phi_at_radius(0.5, 1.0, -1, 5.0, radii)
        assert np.allclose(phi_neg - 0.5, 0.5 - phi)

    def test_phi_not_reached(self):
        """Radii beyond the reach of the track are flagged."""
        phi = geometry.phi_at_radius(0.0, 0.1, 1, 5.0, vec(85.0, 245.0))
        assert not np.isnan(phi[0])
        assert np.isnan(phi[1])

        assert np.all(np.isnan(geometry.phi_at_radius(0.0, 0.0, 1, 5.0, vec(85.0))))
