"""Builds v0 candidates from the reconstructed secondary vertices."""

from detqa.utils.logger import logger

from .base import RecoBase
from .particle import DEFAULT_RADII
from .v0 import V0Candidate

__all__ = ["V0Builder"]


class V0Builder(RecoBase):
    """Converts the v0s of an event into :class:`V0Candidate` objects.

    Candidates which fail the topological selection are dropped.

    .. code-block:: yaml

        reco:
          v0:
            pdg_code: 3122
            pos_pdg_code: 2212
            neg_pdg_code: -211
            min_cpa: 0.99
            max_dca_daughters: 1.5
            min_transverse_radius: 0.2
            on_fly: false
    """

    name = "v0"
    aliases = ("v0_builder",)

    _keys = (("event", True),)

    def __init__(
        self,
        pdg_code=3122,
        pos_pdg_code=2212,
        neg_pdg_code=-211,
        min_cpa=None,
        max_dca_daughters=None,
        min_transverse_radius=None,
        on_fly=None,
        radii=DEFAULT_RADII,
    ):
        """Initialize the builder.

        Parameters
        ----------
        pdg_code : int, default 3122
            PDG code of the v0 hypothesis (Lambda by default)
        pos_pdg_code : int, default 2212
            PDG code of the positive daughter hypothesis
        neg_pdg_code : int, default -211
            PDG code of the negative daughter hypothesis
        min_cpa : float, optional
            Minimum cosine of the pointing angle
        max_dca_daughters : float, optional
            Maximum distance of closest approach between the daughters [cm]
        min_transverse_radius : float, optional
            Minimum transverse decay radius [cm]
        on_fly : bool, optional
            If specified, only keep v0s with this on-the-fly status
        radii : List[float], optional
            Radii at which to evaluate the daughter azimuthal angles [cm]
        """
        self.pdg_code = pdg_code
        self.pos_pdg_code = pos_pdg_code
        self.neg_pdg_code = neg_pdg_code
        self.min_cpa = min_cpa
        self.max_dca_daughters = max_dca_daughters
        self.min_transverse_radius = min_transverse_radius
        self.on_fly = on_fly
        self.radii = tuple(radii)

    def build(self, event, v0):
        """Builds one candidate.

        Parameters
        ----------
        event : Event
            Event the v0 belongs to
        v0 : V0
            Reconstructed v0

        Returns
        -------
        V0Candidate
            Candidate
        """
        candidate = V0Candidate(
            pdg_code=self.pdg_code,
            pos_pdg_code=self.pos_pdg_code,
            neg_pdg_code=self.neg_pdg_code,
            radii=self.radii,
            is_mc=event.is_mc,
        )
        candidate.set_v0(event, v0)
        if candidate.has_daughter:
            candidate.invariant_mass()

        return candidate

    def select(self, candidate):
        """Checks whether a candidate passes the topological selection.

        Parameters
        ----------
        candidate : V0Candidate
            Candidate

        Returns
        -------
        bool
            `True` if the candidate is selected
        """
        if not (candidate.use and candidate.is_set and candidate.has_daughter):
            return False
        if self.on_fly is not None and candidate.on_fly != self.on_fly:
            return False
        if self.min_cpa is not None and candidate.cpa < self.min_cpa:
            return False
        if (
            self.max_dca_daughters is not None
            and candidate.dca_v0_daughters > self.max_dca_daughters
        ):
            return False
        if (
            self.min_transverse_radius is not None
            and candidate.transverse_radius < self.min_transverse_radius
        ):
            return False

        return True

    def process(self, data):
        """Builds and selects the v0 candidates of one entry.

        Parameters
        ----------
        data : dict
            Filtered dictionary of data products for one entry

        Returns
        -------
        dict
            `v0_candidates`: list of selected candidates
        """
        event = data["event"]
        candidates = []
        for v0 in event.v0s:
            candidate = self.build(event, v0)
            if self.select(candidate):
                candidates.append(candidate)

        logger.debug("Selected %d/%d v0 candidates", len(candidates), len(event.v0s))

        return {"v0_candidates": candidates}
