"""Event file readers."""

from .hdf5 import *
