"""Detector PID responses.

- :class:`TPCResponse`: expected TPC energy loss and number of sigmas
- :class:`TRDSignal`: TRD truncated-mean charge estimators
- :class:`PIDObject`: track under study with its known species
"""

from .object import PIDObject
from .tpc import TPCResponse
from .trd import TRDSignal
