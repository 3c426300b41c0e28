"""Typed exceptions raised while loading configuration files."""

from typing import List

__all__ = ["ConfigError", "ConfigIncludeError", "ConfigCycleError", "ConfigPathError"]


class ConfigError(Exception):
    """Base exception for all configuration errors."""


class ConfigIncludeError(ConfigError):
    """Raised when an included file cannot be found or loaded."""


class ConfigCycleError(ConfigError):
    """Raised when a circular include dependency is detected."""

    def __init__(self, cycle_path: List[str]):
        """Initialize with the cycle path.

        Parameters
        ----------
        cycle_path : List[str]
            List of file paths showing the include cycle
        """
        self.cycle_path = cycle_path
        super().__init__(f"Circular include detected: {' -> '.join(cycle_path)}")


class ConfigPathError(ConfigError):
    """Raised when a dot-notation path cannot be set in a configuration."""
