"""Event and table writers."""

from .csv import *
from .hdf5 import *
