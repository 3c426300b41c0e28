"""Manages the operation of the reconstruction stages."""

from collections import OrderedDict
from copy import deepcopy

import numpy as np

from detqa.utils.stopwatch import StopwatchManager

from .factories import reco_factory

__all__ = ["RecoManager"]


class RecoManager:
    """Manager in charge of the reconstruction stages.

    It loads all the stages once and feeds them data. The products returned
    by each stage are added to the data dictionary.
    """

    def __init__(self, cfg):
        """Initialize the reconstruction manager.

        Parameters
        ----------
        cfg : dict
            Reconstruction stage configurations
        """
        # Loop over the stages and get their priorities
        cfg = deepcopy(cfg)
        keys = np.array(list(cfg.keys()))
        priorities = -np.ones(len(keys), dtype=np.int32)
        for i, key in enumerate(keys):
            if cfg[key] is None:
                cfg[key] = {}
            if "priority" in cfg[key]:
                priorities[i] = cfg[key].pop("priority")

        # Add the stages to a list in decreasing order of priority
        self.watch = StopwatchManager()
        self.modules = OrderedDict()
        keys = keys[np.argsort(-priorities, kind="stable")]
        for key in keys:
            self.watch.initialize(key)
            self.modules[key] = reco_factory(key, cfg[key])

    def __call__(self, data):
        """Pass one entry through the reconstruction stages.

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
