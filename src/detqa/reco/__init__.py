"""Reconstruction of v0 candidates.

- :mod:`geometry`: numba-compiled vertex and track geometry routines
- :class:`FemtoParticle`, :class:`FemtoTrack`: femtoscopy particle candidates
- :class:`V0Candidate`: v0 candidate with its daughters and Monte Carlo origin
- :class:`V0Builder`: reconstruction stage which builds the v0 candidates
"""

from .builder import *
from .manager import *
from .particle import *
from .v0 import *
