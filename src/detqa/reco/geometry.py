"""Numba JIT compiled geometry routines used to characterize secondary vertices.

Positions are expressed in cm, momenta in GeV/c and magnetic fields in kG.
"""

import numba as nb
import numpy as np

__all__ = [
    "B2C",
    "cos_pointing_angle",
    "decay_length",
    "decay_length_xy",
    "line_point_distance",
    "dca_between_lines",
    "transverse_impact_parameter",
    "phi_at_radius",
]

# Conversion factor between pt [GeV/c], field [kG] and radius of curvature [cm]
B2C = 0.299792458e-3


@nb.njit(cache=True)
def cos_pointing_angle(
    momentum: nb.float64[:], decay_vtx: nb.float64[:], point: nb.float64[:]
) -> nb.float64:
    """Cosine of the angle between the momentum of a neutral particle and the
    line which joins its production point to its decay vertex.

    Parameters
    ----------
    momentum : np.ndarray
        (3) Momentum of the particle
    decay_vtx : np.ndarray
        (3) Decay vertex
    point : np.ndarray
        (3) Production point (e.g. primary vertex)

    Returns
    -------
    float
        Cosine of the pointing angle, in [-1, 1]. 0 if either vector is null
    """
    line = decay_vtx - point
    ptot2 = np.dot(momentum, momentum) * np.dot(line, line)
    if ptot2 <= 0.0:
        return 0.0

    cos = np.dot(momentum, line) / np.sqrt(ptot2)

    return min(max(cos, -1.0), 1.0)


@nb.njit(cache=True)
def decay_length(decay_vtx: nb.float64[:], point: nb.float64[:]) -> nb.float64:
    """Distance between a production point and a decay vertex.

    Parameters
    ----------
    decay_vtx : np.ndarray
        (3) Decay vertex
    point : np.ndarray
        (3) Production point

    Returns
    -------
    float
        Decay length
    """
    return np.sqrt(np.sum((decay_vtx - point) ** 2))


@nb.njit(cache=True)
def decay_length_xy(decay_vtx: nb.float64[:], point: nb.float64[:]) -> nb.float64:
    """Distance between a production point and a decay vertex in the
    transverse plane.

    Parameters
    ----------
    decay_vtx : np.ndarray
        (3) Decay vertex
    point : np.ndarray
        (3) Production point

    Returns
    -------
    float
        Transverse decay length
    """
    return np.sqrt((point[0] - decay_vtx[0]) ** 2 + (point[1] - decay_vtx[1]) ** 2)


@nb.njit(cache=True)
def line_point_distance(
    point: nb.float64[:], direction: nb.float64[:], target: nb.float64[:]
) -> nb.float64:
    """Distance between a target point and a line.

    Parameters
    ----------
    point : np.ndarray
        (3) Point of the line
    direction : np.ndarray
        (3) Direction of the line (need not be normalized)
    target : np.ndarray
        (3) Target point

    Returns
    -------
    float
        Distance of closest approach
    """
    norm = np.sqrt(np.dot(direction, direction))
    if norm == 0.0:
        return np.sqrt(np.sum((target - point) ** 2))

    return np.sqrt(np.sum(np.cross(target - point, direction / norm) ** 2))


@nb.njit(cache=True)
def dca_between_lines(
    p1: nb.float64[:], d1: nb.float64[:], p2: nb.float64[:], d2: nb.float64[:]
) -> nb.float64:
    """Distance of closest approach between two lines.

    Parameters
    ----------
    p1 : np.ndarray
        (3) Point of the first line
    d1 : np.ndarray
        (3) Direction of the first line
    p2 : np.ndarray
        (3) Point of the second line
    d2 : np.ndarray
        (3) Direction of the second line

    Returns
    -------
    float
        Distance of closest approach
    """
    normal = np.cross(d1, d2)
    norm = np.sqrt(np.dot(normal, normal))
    if norm < 1e-12 * np.sqrt(np.dot(d1, d1) * np.dot(d2, d2)):
        # Parallel lines
        return line_point_distance(p1, d1, p2)

    return abs(np.dot(p2 - p1, normal)) / norm


@nb.njit(cache=True)
def transverse_impact_parameter(
    position: nb.float64[:],
    momentum: nb.float64[:],
    charge: nb.int64,
    b_field: nb.float64,
    x: nb.float64,
    y: nb.float64,
) -> nb.float64:
    """Signed distance of closest approach of a helix to a point, in the
    transverse plane.

    The sign is that of the cross product of the track direction with the
    displacement to the point (positive when the point is on the left of the
    track). Neutral tracks or a null field give straight lines.

    Parameters
    ----------
    position : np.ndarray
        (3) Point of the track
    momentum : np.ndarray
        (3) Momentum of the track at that point
    charge : int
        Electric charge
    b_field : float
        Magnetic field along the beam axis, in kG
    x : float
        x coordinate of the reference point
    y : float
        y coordinate of the reference point

    Returns
    -------
    float
        Signed transverse impact parameter
    """
    pt = np.sqrt(momentum[0] ** 2 + momentum[1] ** 2)
    if pt == 0.0:
        return np.sqrt((x - position[0]) ** 2 + (y - position[1]) ** 2)

    ux, uy = momentum[0] / pt, momentum[1] / pt
    dx, dy = x - position[0], y - position[1]
    qb = charge * b_field
    if qb == 0.0:
        return ux * dy - uy * dx

    # Center of the track circle, on the side of the Lorentz force
    radius = pt / (B2C * abs(qb))
    sign = 1.0 if qb > 0 else -1.0
    cx = position[0] + sign * radius * uy
    cy = position[1] - sign * radius * ux

    return sign * (np.sqrt((x - cx) ** 2 + (y - cy) ** 2) - radius)


@nb.njit(cache=True)
def phi_at_radius(
    phi: nb.float64,
    pt: nb.float64,
    charge: nb.int64,
    b_field: nb.float64,
    radii: nb.float64[:],
) -> nb.float64[:]:
    """Azimuthal angle of a primary track at a set of transverse radii.

    Uses :math:`\\phi^* = \\phi - \\arcsin(0.3 q B R / 2 p_T)`, with the field
    in T and the radius in m.

    Parameters
    ----------
    phi : float
        Azimuthal angle of the track at the vertex
    pt : float
        Transverse momentum
    charge : int
        Electric charge
    b_field : float
        Magnetic field along the beam axis, in kG
    radii : np.ndarray
        (R) Transverse radii, in cm

    Returns
    -------
    np.ndarray
        (R) Azimuthal angles. NaN where the track does not reach the radius
    """
    result = np.full(len(radii), np.nan)
    if pt <= 0.0:
        return result

    for i in range(len(radii)):
        arg = 0.3 * charge * (0.1 * b_field) * (0.01 * radii[i]) / (2.0 * pt)
        if abs(arg) <= 1.0:
            result[i] = phi - np.arcsin(arg)

    return result
