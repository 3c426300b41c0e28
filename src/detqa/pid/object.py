"""Track wrapper passed to the detector PID QA modules."""

from dataclasses import dataclass

from detqa.data import Track

__all__ = ["PIDObject"]


@dataclass
class PIDObject:
    """Track under study, with the information needed to monitor its PID.

    Attributes
    ----------
    track : Track
        Reconstructed track
    abinitio_pid : int
        Known species of the track (Monte Carlo or clean sample), -1 if unknown
    centrality : float
        Centrality of the event the track belongs to (-1 if not available)
    """

    track: Track
    abinitio_pid: int = -1
    centrality: float = -1.0

    @classmethod
    def from_track(cls, track, use_mc_species=False, centrality=-1.0):
        """Builds the object from a track.

        Parameters
        ----------
        track : Track
            Reconstructed track
        use_mc_species : bool, default False
            If `True`, use the species of the matched Monte Carlo particle
        centrality : float, default -1.
            Event centrality

        Returns
        -------
        PIDObject
            Wrapped track
        """
        species = track.species if use_mc_species else -1

        return cls(track, species, centrality)
