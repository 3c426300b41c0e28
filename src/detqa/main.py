"""Main functions that call the Driver class.

This is the first module called when launching the `detqa` command-line
script. It takes care of setting up the environment and the `Driver` object
used to read events, select them, reconstruct candidates, fill the QA
modules and run the analysis scripts.
"""

from .driver import Driver
from .utils.logger import logger

__all__ = ["run"]


def run(cfg):
    """Execute the full QA process.

    Parameters
    ----------
    cfg : dict
        Full driver configuration
    """
    # Set the verbosity of the logger
    base = cfg.get("base", None) or {}
    verbosity = base.get("verbosity", "info")
    logger.setLevel(verbosity.upper())

    # Prepare the driver, run the event loop
    driver = Driver(cfg)
    driver.run()

    return driver
