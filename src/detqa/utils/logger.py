"""Simple module which defines the package logger style and returns it."""

import logging
import sys
import warnings

# Configure the formatting of the logger
logging.basicConfig(format="%(message)s", stream=sys.stdout)

# Capture warning messages and redirect them through the logger
logging.captureWarnings(True)

# Initialize logger
logger = logging.getLogger("detqa")

# Configure the warnings package to only issue each warning once
warnings.simplefilter("once")
