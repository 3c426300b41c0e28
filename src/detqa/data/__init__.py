"""Data structures which represent one reconstructed event.

- :class:`Event`: global event properties and the lists of objects below
- :class:`Track`: reconstructed charged track with its PID signals
- :class:`V0`: secondary vertex formed by two opposite-charge tracks
- :class:`MCParticle`: generated particle of the Monte Carlo record
- :class:`CaloCell`, :class:`CaloCluster`: calorimeter information
"""

from .calo import *
from .event import *
from .mc import *
from .track import *
from .v0 import *
