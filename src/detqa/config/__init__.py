"""Configuration file loading.

Configuration files are YAML files which may include other files and
override single parameters of the included blocks with dot-notation keys.
"""

from .errors import *
from .load import load_config, parse_value, set_nested_value
