"""Particle candidates used in femtoscopic analyses.

A candidate keeps the kinematics of the reconstructed object along with
per-constituent lists (angles, track ids, charges) and, in simulation, the
kinematics and origin of the matched Monte Carlo particle.
"""

from dataclasses import dataclass, field

import numpy as np

from detqa.utils.enums import OriginEnum

from . import geometry

__all__ = ["FemtoParticle", "FemtoTrack", "DEFAULT_RADII", "kinematics"]

# Transverse radii at which the azimuthal angle of tracks is evaluated [cm]
DEFAULT_RADII = (85.0, 105.0, 125.0, 145.0, 165.0, 185.0, 205.0, 225.0, 245.0)


def kinematics(momentum):
    """Pseudorapidity, polar and azimuthal angles of a momentum vector.

    Parameters
    ----------
    momentum : np.ndarray
        (3) Momentum vector

    Returns
    -------
    float
        Pseudorapidity
    float
        Polar angle, in [0, pi]
    float
        Azimuthal angle, in [-pi, pi]
    """
    px, py, pz = momentum
    pt = np.hypot(px, py)
    theta = float(np.arctan2(pt, pz))
    phi = float(np.arctan2(py, px))
    if pt == 0.0:
        eta = float(np.copysign(np.inf, pz)) if pz != 0.0 else 0.0
    else:
        eta = float(-np.log(np.tan(theta / 2.0)))

    return eta, theta, phi


@dataclass(eq=False)
class FemtoParticle:
    """Base class of the femtoscopy candidates.

    Attributes
    ----------
    momentum : np.ndarray
        (3) Reconstructed momentum
    mc_momentum : np.ndarray
        (3) Momentum of the matched Monte Carlo particle
    pt : float
        Reconstructed transverse momentum
    mc_pt : float
        Transverse momentum of the matched Monte Carlo particle
    eta : List[float]
        Pseudorapidities (the candidate first, then its constituents)
    theta : List[float]
        Polar angles (same ordering as `eta`)
    phi : List[float]
        Azimuthal angles (same ordering as `eta`)
    phi_at_radius : List[np.ndarray]
        Azimuthal angles of the constituent tracks at fixed radii
    id_tracks : List[int]
        Indexes of the constituent tracks
    charge : List[int]
        Charges (the candidate first, then its constituents)
    mc_theta : List[float]
        Polar angles of the matched Monte Carlo particles
    mc_phi : List[float]
        Azimuthal angles of the matched Monte Carlo particles
    pdg_code : int
        PDG code of the particle hypothesis (kept across resets)
    mc_pdg_code : int
        PDG code of the matched Monte Carlo particle
    pdg_mother_weak : int
        PDG code of the weakly decaying mother of the Monte Carlo particle
    mother_pdg : int
        PDG code of the first ancestor of the Monte Carlo particle
    origin : int
        Origin of the candidate (see :class:`OriginEnum`)
    use : bool
        Whether the candidate can be used
    is_set : bool
        Whether the candidate was successfully set
    is_mc : bool
        Whether the candidate comes from a simulated event (kept across resets)
    event_multiplicity : int
        Multiplicity of the event the candidate belongs to
    event_number : int
        Number of the event the candidate belongs to
    """

    momentum: np.ndarray = field(default_factory=lambda: np.zeros(3))
    mc_momentum: np.ndarray = field(default_factory=lambda: np.zeros(3))
    pt: float = 0.0
    mc_pt: float = 0.0
    eta: list = field(default_factory=list)
    theta: list = field(default_factory=list)
    phi: list = field(default_factory=list)
    phi_at_radius: list = field(default_factory=list)
    id_tracks: list = field(default_factory=list)
    charge: list = field(default_factory=list)
    mc_theta: list = field(default_factory=list)
    mc_phi: list = field(default_factory=list)
    pdg_code: int = 0
    mc_pdg_code: int = 0
    pdg_mother_weak: int = 0
    mother_pdg: int = 0
    origin: int = OriginEnum.UNKNOWN
    use: bool = True
    is_set: bool = False
    is_mc: bool = False
    event_multiplicity: int = 0
    event_number: int = -1

    def reset(self):
        """Restores the default kinematics. The particle hypothesis and the
        simulation flag are kept."""
        self.momentum = np.zeros(3)
        self.mc_momentum = np.zeros(3)
        self.pt = 0.0
        self.mc_pt = 0.0
        for attr in (
            "eta",
            "theta",
            "phi",
            "phi_at_radius",
            "id_tracks",
            "charge",
            "mc_theta",
            "mc_phi",
        ):
            setattr(self, attr, [])
        self.mc_pdg_code = 0
        self.pdg_mother_weak = 0
        self.mother_pdg = 0
        self.origin = OriginEnum.UNKNOWN
        self.use = False
        self.is_set = True

    def set_momentum(self, px, py, pz):
        """Sets the reconstructed momentum.

        Parameters
        ----------
        px : float
            Momentum along x
        py : float
            Momentum along y
        pz : float
            Momentum along z
        """
        self.momentum = np.array([px, py, pz], dtype=np.float64)
        self.pt = float(np.hypot(px, py))

    def set_mc_momentum(self, px, py, pz):
        """Sets the momentum of the matched Monte Carlo particle."""
        self.mc_momentum = np.array([px, py, pz], dtype=np.float64)
        self.mc_pt = float(np.hypot(px, py))

    @property
    def p(self):
        """Total reconstructed momentum."""
        return float(np.linalg.norm(self.momentum))


@dataclass(eq=False)
class FemtoTrack(FemtoParticle):
    """Track candidate, used as a v0 daughter.

    Attributes
    ----------
    mc_label : int
        Index of the matched Monte Carlo particle (-1 if none)
    radii : Tuple[float]
        Transverse radii at which the azimuthal angle is evaluated, in cm
    """

    mc_label: int = -1
    radii: tuple = DEFAULT_RADII

    def reset(self):
        super().reset()
        self.mc_label = -1

    def set_track(self, track, b_field=0.0, mc_particles=None):
        """Fills the candidate with the information of a reconstructed track.

        Parameters
        ----------
        track : Track
            Reconstructed track
        b_field : float, default 0.
            Magnetic field along the beam axis, in kG
        mc_particles : List[MCParticle], optional
            Monte Carlo record, used to fetch the matched particle kinematics
        """
        self.reset()
        self.set_momentum(*track.momentum)
        eta, theta, phi = kinematics(track.momentum)
        self.eta.append(eta)
        self.theta.append(theta)
        self.phi.append(phi)
        self.id_tracks.append(track.id)
        self.charge.append(track.charge)
        self.phi_at_radius.append(
            geometry.phi_at_radius(
                phi,
                self.pt,
                track.charge,
                float(b_field),
                np.asarray(self.radii, dtype=np.float64),
            )
        )

        self.mc_label = track.mc_label
        if mc_particles and 0 <= track.mc_label < len(mc_particles):
            particle = mc_particles[track.mc_label]
            self.mc_pdg_code = particle.pdg_code
            self.set_mc_momentum(*particle.momentum)
            _, mc_theta, mc_phi = kinematics(particle.momentum)
            self.mc_theta.append(mc_theta)
            self.mc_phi.append(mc_phi)

        self.use = True
        self.is_set = True
