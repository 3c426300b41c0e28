"""Manages the operation of the detector QA modules."""

from collections import OrderedDict
from copy import deepcopy

import h5py
import numpy as np

from detqa.utils.logger import logger
from detqa.utils.stopwatch import StopwatchManager
from detqa.version import __version__

from .factories import qa_factory

__all__ = ["QAManager"]


class QAManager:
    """Manager class to initialize and execute the QA modules.

    It loads all the QA modules, feeds them data and times them. Once all
    entries are processed, it triggers the post-processing of each module
    and stores their histograms and results to a single HDF5 file.

    .. code-block:: yaml

        qa:
          tpc_pid:
            priority: 1
            nsigma_cut: 3.
          trd_pid:
            min_ntracklets: 4
    """

    def __init__(self, cfg):
        """Initialize the QA manager.

        Parameters
        ----------
        cfg : dict
            QA module configurations
        """
        # Loop over the QA modules and get their priorities
        modules = deepcopy(cfg)
        keys = np.array(list(modules.keys()))
        priorities = -np.ones(len(keys), dtype=np.int32)
        for i, k in enumerate(keys):
            if modules[k] is None:
                modules[k] = {}
            if "priority" in modules[k]:
                priorities[i] = modules[k].pop("priority")

        # Add the modules to a list in decreasing order of priority
        self.watch = StopwatchManager()
        self.modules = OrderedDict()
        keys = keys[np.argsort(-priorities, kind="stable")]
        for k in keys:
            self.watch.initialize(k)
            self.modules[k] = qa_factory(k, modules[k])

    def __len__(self):
        return len(self.modules)

    def __getitem__(self, key):
        return self.modules[key]

    def __call__(self, data):
        """Pass one entry through the QA modules.

        Parameters
        ----------
        data : dict
            Dictionary of data products for one entry
        """
        for key, module in self.modules.items():
            self.watch.start(key)
            module(data)
            self.watch.stop(key)

    def finish(self):
        """Runs the post-processing of every QA module."""
        for key, module in self.modules.items():
            logger.info("Finishing QA module: %s", key)
            module.finish()

    def merge(self, others):
        """Merges the QA modules of other managers into this one, by key.

        Parameters
        ----------
        others : Union[QAManager, List[QAManager]]
            Other manager(s) with the same configuration

        Returns
        -------
        int
            Number of merged managers, this one included
        """
        if isinstance(others, QAManager):
            others = [others]

        for key, module in self.modules.items():
            module.merge([other.modules[key] for other in others if key in other.modules])

        return len(others) + 1

    def store(self, path, cfg=None):
        """Stores the histograms and results of every QA module.

        Each module gets its own group, named after its configuration key,
        which holds a `histos` group and a `results` group.

        Parameters
        ----------
        path : str
            Path to the output HDF5 file (overwritten)
        cfg : str, optional
            Configuration used to produce the output, stored as an attribute
        """
        logger.info("Writing QA output to: %s", path)
        with h5py.File(path, "w") as out_file:
            info = out_file.create_group("info")
            info.attrs["version"] = __version__
            if cfg is not None:
                info.attrs["cfg"] = cfg

            for key, module in self.modules.items():
                group = out_file.create_group(key)
                group.attrs["name"] = module.name
                module.store(group)
