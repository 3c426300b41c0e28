"""Analysis script which stores the PID signals of every track."""

from detqa.utils.globals import ELEC_SPECIES

from .base import AnaBase

__all__ = ["TrackQAAna"]


class TrackQAAna(AnaBase):
    """Stores one row per track with its TPC and TRD PID signals.

    .. code-block:: yaml

        ana:
          track_qa:
            require_trd_out: true
    """

    name = "track_qa"

    def __init__(self, require_trd_out=False, **kwargs):
        """Initialize the analysis script.

        Parameters
        ----------
        require_trd_out : bool, default False
            If `True`, only store tracks which reached the TRD outer layer
        **kwargs : dict, optional
            Keyword arguments passed to :class:`AnaBase`
        """
        super().__init__(**kwargs)

        self.require_trd_out = require_trd_out
        self.initialize_writer("tracks")

    def process(self, data):
        """Store the tracks of one entry.

        Parameters
        ----------
        data : dict
            Dictionary of data products
        """
        event = data["event"]
        for track in event.tracks:
            if self.require_trd_out and not track.has_trd_out:
                continue

            self.append(
                "tracks",
                run=event.run,
                event=event.event,
                id=track.id,
                charge=track.charge,
                p=track.p,
                species=track.species,
                tpc_signal=track.tpc_signal,
                tpc_ncls=track.tpc_ncls,
                trd_ntracklets=track.trd_ntracklets_pid,
                electron_likelihood=track.trd_pid[ELEC_SPECIES],
            )
