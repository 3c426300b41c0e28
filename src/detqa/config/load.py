"""Module in charge of loading configuration files."""

import os
import re
from copy import deepcopy

import yaml

from .errors import ConfigCycleError, ConfigIncludeError, ConfigPathError

__all__ = ["load_config", "parse_value", "set_nested_value"]

# Keys of the form `block.sub_block.key` are parameter overrides
DOTTED_KEY = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*(?:\.[a-zA-Z_][a-zA-Z0-9_]*)+$")


class ConfigLoader(yaml.SafeLoader):
    """YAML loader which supports the `!include` tag.

    An included file is looked up relative to the directory of the file which
    includes it and is loaded in place of the tagged node.
    """

    def __init__(self, stream):
        """Initialize the loader.

        Parameters
        ----------
        stream : _io.TextIOWrapper
            Output of python's `open` function on a YAML file
        """
        self._root = os.path.dirname(os.path.abspath(stream.name))
        super().__init__(stream)

    def include(self, node):
        """Load a YAML file requested with the `!include` tag.

        Parameters
        ----------
        node : yaml.ScalarNode
            Node which holds the relative path to the file to include

        Returns
        -------
        object
            Content of the included file
        """
        path = os.path.join(self._root, self.construct_scalar(node))
        if not os.path.isfile(path):
            raise ConfigIncludeError(f"Included file not found: {path}")

        with open(path, "r", encoding="utf-8") as f:
            return yaml.load(f, Loader=ConfigLoader)


ConfigLoader.add_constructor("!include", ConfigLoader.include)


def deep_merge(base, override):
    """Recursively merge one dictionary into a copy of another.

    Parameters
    ----------
    base : dict
        Base dictionary
    override : dict
        Dictionary with values to override

    Returns
    -------
    dict
        Merged dictionary
    """
    result = deepcopy(base)
    for key, value in override.items():
        if isinstance(result.get(key), dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def set_nested_value(config, key_path, value):
    """Set a nested value in a dictionary using dot notation.

    Intermediate blocks which do not exist yet are created.

    Parameters
    ----------
    config : dict
        Configuration dictionary to modify in place
    key_path : str
        Dot-separated path to the key (e.g. "io.reader.file_keys")
    value : object
        Value to set

    Returns
    -------
    dict
        Modified configuration dictionary
    """
    keys = key_path.split(".")
    current = config
    for key in keys[:-1]:
        if key not in current or current[key] is None:
            current[key] = {}
        elif not isinstance(current[key], dict):
            raise ConfigPathError(
                f"Cannot set '{key_path}': '{key}' is not a dictionary"
            )
        current = current[key]

    current[keys[-1]] = value

    return config


def parse_value(value):
    """Parse a command-line string into the appropriate Python type.

    Parameters
    ----------
    value : str
        String representation of the value

    Returns
    -------
    object
        Parsed value (number, boolean, list, string, etc.)
    """
    if not isinstance(value, str):
        return value

    try:
        return yaml.safe_load(value)
    except yaml.YAMLError:
        return value


def load_config(cfg_path, _stack=None):
    """Load a configuration file to a dictionary.

    This function supports:
    - Including other files: "include: base.yaml" or "include: [a.yaml, b.yaml]"
    - Including files within blocks: "key: !include file.yaml"
    - Overriding nested parameters with dot notation: "qa.trd.priority: 2"

    Included files are merged in order, then the content of the main file,
    then the dot-notation overrides.

    Parameters
    ----------
    cfg_path : str
        Path to the configuration file

    Returns
    -------
    dict
        Loaded and merged configuration dictionary
    """
    # Check for include cycles
    cfg_path = os.path.abspath(cfg_path)
    stack = [] if _stack is None else _stack
    if cfg_path in stack:
        raise ConfigCycleError(stack[stack.index(cfg_path) :] + [cfg_path])
    stack = stack + [cfg_path]

    with open(cfg_path, "r", encoding="utf-8") as f:
        main_config = yaml.load(f, Loader=ConfigLoader)

    if main_config is None:
        return {}

    # Split the include directives and the overrides from the regular keys
    includes, overrides, cleaned = [], {}, {}
    for key, value in main_config.items():
        if key == "include":
            if isinstance(value, str):
                includes.append(value)
            elif isinstance(value, list):
                includes.extend(value)
            else:
                raise ValueError(
                    f"'include' must be a string or list of strings, got {type(value)}"
                )
        elif DOTTED_KEY.match(key):
            overrides[key] = value
        else:
            cleaned[key] = value

    # Load all included files first, in order
    config = {}
    root_dir = os.path.dirname(cfg_path)
    for include in includes:
        include_path = os.path.join(root_dir, include)
        if not os.path.isfile(include_path):
            raise ConfigIncludeError(f"Included file not found: {include_path}")
        config = deep_merge(config, load_config(include_path, stack))

    config = deep_merge(config, cleaned)
    for key_path, value in overrides.items():
        set_nested_value(config, key_path, parse_value(value))

    return config
