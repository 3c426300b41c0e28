"""V0 candidate: neutral particle which decays into two opposite-charge tracks."""

from dataclasses import dataclass, field

import numpy as np

from detqa.utils.enums import OriginEnum
from detqa.utils.globals import INVAL_VTX, PDG_MASSES
from detqa.utils.logger import logger

from . import geometry
from .particle import DEFAULT_RADII, FemtoParticle, FemtoTrack, kinematics

__all__ = ["V0Candidate"]


@dataclass(eq=False)
class V0Candidate(FemtoParticle):
    """V0 candidate built from a reconstructed secondary vertex.

    The first entries of the `eta`, `theta`, `phi` and `charge` lists refer
    to the v0 itself, followed by the negative and the positive daughter.

    Attributes
    ----------
    pos_pdg_code : int
        PDG code of the positive daughter hypothesis
    neg_pdg_code : int
        PDG code of the negative daughter hypothesis
    on_fly : bool
        Whether the v0 was found during the tracking (as opposed to offline)
    has_daughter : bool
        Whether both daughter tracks were found with opposite charges
    pos_daughter : FemtoTrack
        Positive daughter
    neg_daughter : FemtoTrack
        Negative daughter
    v0_mass : float
        Invariant mass under the daughter hypotheses
    v0_vertex : np.ndarray
        (3) Decay vertex
    dca_v0_daughters : float
        Distance of closest approach between the daughters
    dca_prim : float
        Distance of closest approach of the v0 to the primary vertex
    dca_pos_prim : float
        Transverse distance of closest approach of the positive daughter
        to the primary vertex
    dca_neg_prim : float
        Transverse distance of closest approach of the negative daughter
        to the primary vertex
    decay_len : float
        Distance between the primary vertex and the decay vertex
    transverse_radius : float
        Transverse distance between the primary vertex and the decay vertex
    cpa : float
        Cosine of the pointing angle with respect to the primary vertex
    """

    pos_pdg_code: int = 2212
    neg_pdg_code: int = 211
    radii: tuple = DEFAULT_RADII
    on_fly: bool = False
    has_daughter: bool = False
    pos_daughter: FemtoTrack = None
    neg_daughter: FemtoTrack = None
    v0_mass: float = 0.0
    v0_vertex: np.ndarray = field(default_factory=lambda: np.full(3, INVAL_VTX))
    dca_v0_daughters: float = INVAL_VTX
    dca_prim: float = 0.0
    dca_pos_prim: float = 0.0
    dca_neg_prim: float = 0.0
    decay_len: float = 0.0
    transverse_radius: float = 0.0
    cpa: float = 0.0
    is_reset: bool = False

    def __post_init__(self):
        if self.pos_daughter is None:
            self.pos_daughter = FemtoTrack(pdg_code=self.pos_pdg_code, radii=self.radii)
        if self.neg_daughter is None:
            self.neg_daughter = FemtoTrack(pdg_code=self.neg_pdg_code, radii=self.radii)

    def reset(self):
        """Restores the default values, unless the candidate was just reset.

        The daughters are reset when a new track is assigned to them.
        """
        if self.is_reset:
            return

        super().reset()
        self.on_fly = False
        self.has_daughter = False
        self.v0_mass = 0.0
        self.v0_vertex = np.full(3, INVAL_VTX)
        self.dca_v0_daughters = INVAL_VTX
        self.dca_prim = 0.0
        self.dca_pos_prim = 0.0
        self.dca_neg_prim = 0.0
        self.decay_len = 0.0
        self.transverse_radius = 0.0
        self.cpa = 0.0
        self.is_reset = True

    def set_v0(self, event, v0, multiplicity=None):
        """Fills the candidate with a reconstructed v0.

        Only v0s with two prongs and two daughters are usable.

        Parameters
        ----------
        event : Event
            Event the v0 belongs to
        v0 : V0
            Reconstructed v0
        multiplicity : int, optional
            Event multiplicity. Defaults to the event reference multiplicity
        """
        self.event_multiplicity = (
            event.multiplicity if multiplicity is None else multiplicity
        )
        self.reset()
        if v0.n_prongs != 2 or v0.n_daughters != 2:
            self.use = False
            return

        self.is_reset = False
        self.use = True
        self.on_fly = bool(v0.on_fly)
        self.event_number = event.event
        self.set_mother_info(event, v0)
        self.set_daughter(event, v0)
        if self.is_mc and self.has_daughter:
            self.set_mc_mother_info(event)

        self.is_set = self.is_set and self.has_daughter

    def set_mother_info(self, event, v0):
        """Sets the kinematics and the topology of the v0.

        Precomputed distances of closest approach are used when available.

        Parameters
        ----------
        event : Event
            Event the v0 belongs to
        v0 : V0
            Reconstructed v0
        """
        self.charge.append(v0.charge)
        self.set_momentum(*v0.momentum)
        eta, theta, phi = kinematics(self.momentum)
        self.eta.append(eta)
        self.theta.append(theta)
        self.phi.append(phi)

        primary = np.asarray(event.vertex, dtype=np.float64)
        self.v0_vertex = np.asarray(v0.vertex, dtype=np.float64).copy()

        self.dca_v0_daughters = v0.dca_daughters
        if self.dca_v0_daughters < 0:
            self.dca_v0_daughters = self.compute_dca_daughters(event, v0)

        self.dca_prim = v0.dca_prim
        if self.dca_prim < 0:
            self.dca_prim = geometry.line_point_distance(
                self.v0_vertex, self.momentum, primary
            )

        self.decay_len = self.decay_length(self.v0_vertex, primary)
        self.cpa = geometry.cos_pointing_angle(self.momentum, self.v0_vertex, primary)
        self.transverse_radius = self.decay_length_xy(self.v0_vertex, primary)

    @staticmethod
    def compute_dca_daughters(event, v0):
        """Distance of closest approach between the straight-line extrapolations
        of the two daughters, from their points of closest approach to the beam
        line along the v0 prong momenta.

        Returns
        -------
        float
            Distance of closest approach (-1 if the daughters are unknown)
        """
        n_tracks = len(event.tracks)
        if not (0 <= v0.pos_index < n_tracks and 0 <= v0.neg_index < n_tracks):
            return -1.0

        pos, neg = event.tracks[v0.pos_index], event.tracks[v0.neg_index]

        return geometry.dca_between_lines(
            np.asarray(pos.position, dtype=np.float64),
            np.asarray(v0.pos_momentum, dtype=np.float64),
            np.asarray(neg.position, dtype=np.float64),
            np.asarray(v0.neg_momentum, dtype=np.float64),
        )

    def set_daughter(self, event, v0):
        """Assigns the daughter tracks, ordered by charge.

        Each prong momentum stays attached to the track it was measured
        with, even when the track indexes of the v0 are swapped.

        Parameters
        ----------
        event : Event
            Event the v0 belongs to
        v0 : V0
            Reconstructed v0
        """
        self.has_daughter = False
        n_tracks = len(event.tracks)
        if not (0 <= v0.pos_index < n_tracks and 0 <= v0.neg_index < n_tracks):
            logger.warning(
                "Track buffer too small (%d), no global tracks to work with, "
                "pos index: %d and neg index: %d",
                n_tracks,
                v0.pos_index,
                v0.neg_index,
            )
            return

        first, second = event.tracks[v0.pos_index], event.tracks[v0.neg_index]
        first_dca, second_dca = v0.dca_pos_prim, v0.dca_neg_prim
        first_mom, second_mom = v0.pos_momentum, v0.neg_momentum
        if first.charge > 0 and second.charge < 0:
            pos, neg = first, second
            pos_dca, neg_dca = first_dca, second_dca
            pos_mom, neg_mom = first_mom, second_mom
        elif first.charge < 0 and second.charge > 0:
            pos, neg = second, first
            pos_dca, neg_dca = second_dca, first_dca
            pos_mom, neg_mom = second_mom, first_mom
        else:
            return

        mc_particles = event.mc_particles if self.is_mc else None
        self.neg_daughter.set_track(neg, event.magnetic_field, mc_particles)
        self.pos_daughter.set_track(pos, event.magnetic_field, mc_particles)
        if not (self.neg_daughter.is_set and self.pos_daughter.is_set):
            return

        self.set_daughter_info(neg_mom, pos_mom)
        self.dca_pos_prim = self.daughter_dca(pos, pos_dca, event)
        self.dca_neg_prim = self.daughter_dca(neg, neg_dca, event)
        self.has_daughter = True

    @staticmethod
    def daughter_dca(track, dca, event):
        """Transverse distance of closest approach of a daughter to the
        primary vertex, computed when not provided."""
        if dca >= 0:
            return dca

        return abs(
            geometry.transverse_impact_parameter(
                np.asarray(track.position, dtype=np.float64),
                np.asarray(track.momentum, dtype=np.float64),
                track.charge,
                float(event.magnetic_field),
                float(event.vertex[0]),
                float(event.vertex[1]),
            )
        )

    def set_daughter_info(self, neg_momentum, pos_momentum):
        """Overrides the daughter momenta with the prong momenta at the decay
        vertex and appends the daughter information, negative first.

        Parameters
        ----------
        neg_momentum : np.ndarray
            (3) Momentum of the negative prong
        pos_momentum : np.ndarray
            (3) Momentum of the positive prong
        """
        self.neg_daughter.set_momentum(*neg_momentum)
        self.pos_daughter.set_momentum(*pos_momentum)

        for daughter in (self.neg_daughter, self.pos_daughter):
            eta, theta, phi = kinematics(daughter.momentum)
            self.eta.append(eta)
            self.theta.append(theta)
            self.phi.append(phi)

        for daughter in (self.neg_daughter, self.pos_daughter):
            self.id_tracks.append(daughter.id_tracks[0])
            self.charge.append(daughter.charge[0])
            self.phi_at_radius.append(daughter.phi_at_radius[0])

        if self.is_mc:
            for daughter in (self.neg_daughter, self.pos_daughter):
                if daughter.mc_theta:
                    self.mc_theta.append(daughter.mc_theta[0])
                    self.mc_phi.append(daughter.mc_phi[0])

    def match_to_mc(self, mc_particles):
        """Finds the Monte Carlo particle which decayed into both daughters.

        The daughters must share a mother with the v0 hypothesis PDG code and
        their own PDG codes must match the daughter hypotheses.

        Parameters
        ----------
        mc_particles : List[MCParticle]
            Monte Carlo record

        Returns
        -------
        int
            Index of the mother particle (-1 if there is no match)
        """
        labels = (self.pos_daughter.mc_label, self.neg_daughter.mc_label)
        if any(label < 0 or label >= len(mc_particles) for label in labels):
            return -1

        daughters = [mc_particles[label] for label in labels]
        mother = daughters[0].mother
        if mother < 0 or mother != daughters[1].mother or mother >= len(mc_particles):
            return -1
        if abs(mc_particles[mother].pdg_code) != abs(self.pdg_code):
            return -1

        expected = sorted((abs(self.pos_pdg_code), abs(self.neg_pdg_code)))
        if sorted(abs(d.pdg_code) for d in daughters) != expected:
            return -1

        return mother

    def set_mc_mother_info(self, event):
        """Sets the kinematics and origin of the matched Monte Carlo v0.

        Parameters
        ----------
        event : Event
            Event the v0 belongs to
        """
        mc_particles = event.mc_particles
        label = self.match_to_mc(mc_particles)
        if label < 0:
            self.origin = OriginEnum.FAKE
            return

        particle = mc_particles[label]
        self.mc_pdg_code = particle.pdg_code
        self.set_mc_momentum(*particle.momentum)
        self.mc_phi.append(particle.phi)
        self.mc_theta.append(particle.theta)

        if particle.is_physical_primary and not particle.is_secondary_from_weak_decay:
            self.origin = OriginEnum.PHYS_PRIMARY
        elif particle.is_secondary_from_weak_decay and not particle.is_secondary_from_material:
            self.origin = OriginEnum.WEAK
            if 0 <= particle.mother < len(mc_particles):
                self.pdg_mother_weak = mc_particles[particle.mother].pdg_code
        elif particle.is_secondary_from_material:
            self.origin = OriginEnum.MATERIAL
        else:
            self.origin = OriginEnum.UNKNOWN

        # Walk up the ancestry to the first ancestor
        mother_id = last_mother = particle.mother
        while 0 <= mother_id < len(mc_particles):
            last_mother = mother_id
            mother_id = mc_particles[mother_id].mother
        if 0 <= last_mother < len(mc_particles):
            self.mother_pdg = mc_particles[last_mother].pdg_code

    def cos_pointing_angle(self, decay_vtx, point):
        """Cosine of the pointing angle of the summed daughter momenta.

        Parameters
        ----------
        decay_vtx : np.ndarray
            (3) Decay vertex
        point : np.ndarray
            (3) Production point

        Returns
        -------
        float
            Cosine in [-1, 1], 0 if either vector is null
        """
        momentum = self.pos_daughter.momentum + self.neg_daughter.momentum

        return geometry.cos_pointing_angle(
            momentum,
            np.asarray(decay_vtx, dtype=np.float64),
            np.asarray(point, dtype=np.float64),
        )

    @staticmethod
    def decay_length(decay_vtx, point):
        """Decay length assuming the v0 is produced at `point` [cm]."""
        return geometry.decay_length(
            np.asarray(decay_vtx, dtype=np.float64), np.asarray(point, dtype=np.float64)
        )

    @staticmethod
    def decay_length_xy(decay_vtx, point):
        """Transverse decay length assuming the v0 is produced at `point` [cm]."""
        return geometry.decay_length_xy(
            np.asarray(decay_vtx, dtype=np.float64), np.asarray(point, dtype=np.float64)
        )

    def invariant_mass(self, pdg_pos=None, pdg_neg=None):
        """Invariant mass of the daughter pair under mass hypotheses.

        Parameters
        ----------
        pdg_pos : int, optional
            PDG code of the positive daughter. Defaults to its hypothesis
        pdg_neg : int, optional
            PDG code of the negative daughter. Defaults to its hypothesis

        Returns
        -------
        float
            Invariant mass, in GeV/c^2
        """
        pdg_pos = self.pos_pdg_code if pdg_pos is None else pdg_pos
        pdg_neg = self.neg_pdg_code if pdg_neg is None else pdg_neg
        assert abs(pdg_pos) in PDG_MASSES and abs(pdg_neg) in PDG_MASSES, (
            f"Unknown daughter mass hypothesis: {pdg_pos}, {pdg_neg}."
        )

        p_pos, p_neg = self.pos_daughter.momentum, self.neg_daughter.momentum
        e_pos = np.sqrt(np.dot(p_pos, p_pos) + PDG_MASSES[abs(pdg_pos)] ** 2)
        e_neg = np.sqrt(np.dot(p_neg, p_neg) + PDG_MASSES[abs(pdg_neg)] ** 2)
        p_tot = p_pos + p_neg
        mass2 = (e_pos + e_neg) ** 2 - np.dot(p_tot, p_tot)
        self.v0_mass = float(np.sqrt(max(mass2, 0.0)))

        return self.v0_mass

    def scalar_dict(self):
        """Flattens the candidate into a dictionary of scalars.

        Returns
        -------
        dict
            Dictionary of scalar values
        """
        result = {
            "pdg_code": self.pdg_code,
            "on_fly": self.on_fly,
            "use": self.use,
            "is_set": self.is_set,
            "p": self.p,
            "pt": self.pt,
            "eta": self.eta[0] if self.eta else -1,
            "phi": self.phi[0] if self.phi else -1,
            "mass": self.v0_mass,
        }
        for i, axis in enumerate(("x", "y", "z")):
            result[f"vertex_{axis}"] = self.v0_vertex[i]
        for i, axis in enumerate(("x", "y", "z")):
            result[f"momentum_{axis}"] = self.momentum[i]
        result.update(
            {
                "dca_v0_daughters": self.dca_v0_daughters,
                "dca_prim": self.dca_prim,
                "dca_pos_prim": self.dca_pos_prim,
                "dca_neg_prim": self.dca_neg_prim,
                "decay_length": self.decay_len,
                "transverse_radius": self.transverse_radius,
                "cpa": self.cpa,
                "pos_id": self.pos_daughter.id_tracks[0] if self.has_daughter else -1,
                "neg_id": self.neg_daughter.id_tracks[0] if self.has_daughter else -1,
                "pos_pt": self.pos_daughter.pt,
                "neg_pt": self.neg_daughter.pt,
                "origin": int(self.origin),
                "mc_pdg_code": self.mc_pdg_code,
                "mc_pt": self.mc_pt,
                "pdg_mother_weak": self.pdg_mother_weak,
                "mother_pdg": self.mother_pdg,
            }
        )

        return result
