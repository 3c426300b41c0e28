"""Electromagnetic calorimeter event and cell selection."""

from .selection import *
