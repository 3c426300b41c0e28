"""Detector PID quality assurance modules.

- :class:`TPCPIDQA`: TPC dE/dx and number of sigmas spectra
- :class:`TRDPIDQA`: TRD likelihoods, charges and efficiency/threshold studies
- :class:`QAManager`: instantiates, feeds and stores the QA modules
"""

from .base import *
from .manager import *
from .tpc import *
from .trd import *
