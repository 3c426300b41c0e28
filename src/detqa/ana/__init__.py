"""Analysis scripts which store per-object rows to CSV files.

- :class:`V0CandidateAna`: one row per reconstructed v0 candidate
- :class:`TrackQAAna`: one row per track with its PID signals
- :class:`AnaManager`: instantiates and feeds the analysis scripts
"""

from .base import AnaBase
from .manager import AnaManager
from .track import *
from .v0 import *
