"""Visualization tools for the QA products.

- `efficiency_figure`: pion/proton efficiencies and TRD likelihood thresholds
  as a function of momentum, one panel per electron efficiency
- `spectrum_figure`: two-dimensional spectrum (e.g. TPC dE/dx vs momentum)
"""

from .qa import *
