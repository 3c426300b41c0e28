"""Detector PID quality assurance and v0 candidate reconstruction.

The package reads reconstructed events, monitors the particle identification
response of the TPC and TRD detectors, builds v0 candidates and selects
calorimeter events. The :class:`Driver` wires these steps together from a
YAML configuration.
"""

from .driver import Driver
from .version import __version__
