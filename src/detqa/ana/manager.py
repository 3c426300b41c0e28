"""Manages the operation of analysis scripts."""

from collections import OrderedDict
from copy import deepcopy

import numpy as np

from detqa.utils.stopwatch import StopwatchManager

from .factories import ana_script_factory

__all__ = ["AnaManager"]


class AnaManager:
    """Manager class to initialize and execute analysis scripts.

    Analysis scripts use the reconstructed objects and produce simple CSV
    files, one row per object.

    .. code-block:: yaml

        ana:
          overwrite: true
          prefix_output: true
          v0_candidates:
            priority: 1
          track_qa:
            require_trd_out: true
    """

    def __init__(self, cfg, log_dir=None, prefix=None):
        """Initialize the analysis manager.

        Parameters
        ----------
        cfg : dict
            Analysis script configurations
        log_dir : str, optional
            Output CSV file directory (shared with driver log)
        prefix : str, optional
            Input file prefix. If requested, it is used to prefix all the
            output CSV files
        """
        self.parse_config(log_dir, prefix, **cfg)

    def parse_config(
        self, log_dir, prefix, overwrite=None, prefix_output=False, **modules
    ):
        """Parse the analysis script configuration.

        Parameters
        ----------
        log_dir : str
            Output CSV file directory (shared with driver log)
        prefix : str
            Input file prefix
        overwrite : bool, optional
            If `True`, overwrite the CSV files if they already exist
        prefix_output : bool, default False
            If `True`, prefix the output CSV names with the input file prefix
        **modules : dict
            Analysis script configurations
        """
        # Loop over the analysis scripts and get their priorities
        modules = deepcopy(modules)
        keys = np.array(list(modules.keys()))
        priorities = -np.ones(len(keys), dtype=np.int32)
        for i, k in enumerate(keys):
            if modules[k] is None:
                modules[k] = {}
            if "priority" in modules[k]:
                priorities[i] = modules[k].pop("priority")

        if not prefix_output:
            prefix = None

        # Add the scripts to a list in decreasing order of priority
        self.watch = StopwatchManager()
        self.modules = OrderedDict()
        keys = keys[np.argsort(-priorities, kind="stable")]
        for k in keys:
            self.watch.initialize(k)
            self.modules[k] = ana_script_factory(
                k, modules[k], overwrite, log_dir, prefix
            )

    def __call__(self, data):
        """Pass one entry through the analysis scripts.

        Parameters
        ----------
        data : dict
            Dictionary of data products
        """
        for key, module in self.modules.items():
            self.watch.start(key)
            result = module(data)
            self.watch.stop(key)

            if result is not None:
                data.update(result)
