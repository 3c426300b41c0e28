"""Analysis script which stores the reconstructed v0 candidates."""

from .base import AnaBase

__all__ = ["V0CandidateAna"]


class V0CandidateAna(AnaBase):
    """Stores one row per v0 candidate.

    Each row holds the run and event numbers followed by the scalar
    kinematics and topology of the candidate (DCAs, CPA, radius, mass) and
    its Monte Carlo origin.

    .. code-block:: yaml

        ana:
          v0_candidates:
            only_selected: true
    """

    name = "v0_candidates"
    aliases = ("v0_candidate",)

    _keys = (("event", True), ("v0_candidates", True))

    def __init__(self, only_selected=False, **kwargs):
        """Initialize the analysis script.

        Parameters
        ----------
        only_selected : bool, default False
            If `True`, only store the candidates flagged as usable
        **kwargs : dict, optional
            Keyword arguments passed to :class:`AnaBase`
        """
        super().__init__(**kwargs)

        self.only_selected = only_selected
        self.initialize_writer("candidates")

    def process(self, data):
        """Store the v0 candidates of one entry.

        Parameters
        ----------
        data : dict
            Dictionary of data products
        """
        event = data["event"]
        for candidate in data["v0_candidates"]:
            if self.only_selected and not candidate.use:
                continue

            row = {"run": event.run, "event": event.event}
            row.update(candidate.scalar_dict())
            self.append("candidates", **row)
