"""Base class of all analysis scripts."""

import os
from abc import ABC, abstractmethod

from detqa.io.write.csv import CSVWriter

__all__ = ["AnaBase"]


class AnaBase(ABC):
    """Parent class of all analysis scripts.

    This base class performs the following functions:
    - Ensures that the necessary methods exist
    - Checks that the script is provided the necessary data products
    - Writes the output of the analysis to CSV

    Attributes
    ----------
    name : str
        Name of the analysis script (to call it from a configuration file)
    aliases : Tuple[str]
        Alternative allowed names of the analysis script
    writers : Dict[str, CSVWriter]
        CSV writers of the script, by name
    """

    # Name of the analysis script (as specified in the configuration)
    name = None

    # Alternative allowed names of the analysis script
    aliases = ()

    # Set of data keys needed for this analysis script to operate
    _keys = (("event", True),)

    def __init__(self, append=False, overwrite=False, log_dir=None, prefix=None):
        """Initialize default analysis script object properties.

        Parameters
        ----------
        append : bool, default False
            If `True`, appends existing CSV files instead of creating new ones
        overwrite : bool, default False
            If `True` and the output CSV file exists, overwrite it
        log_dir : str, optional
            Output CSV file directory (shared with driver log)
        prefix : str, optional
            Name to prefix every output CSV file with
        """
        self.append_file = append
        self.overwrite_file = overwrite
        self.log_dir = log_dir
        self.output_prefix = prefix
        self.writers = {}

    @property
    def keys(self):
        """Dictionary of (key, necessity) pairs needed by the script."""
        return dict(self._keys)

    def update_keys(self, update_dict):
        """Update the underlying set of keys and their necessity in place.

        Parameters
        ----------
        update_dict : Dict[str, bool]
            Dictionary of (key, necessity) pairs to update the keys with
        """
        keys = self.keys
        keys.update(update_dict)
        self._keys = tuple(keys.items())

    def initialize_writer(self, name):
        """Adds a CSV writer to the list of writers for this script.

        Parameters
        ----------
        name : str
            Name of the writer
        """
        assert len(name) > 0, "Must provide a non-empty name."
        file_name = f"{self.name}_{name}.csv"
        if self.output_prefix:
            file_name = f"{self.output_prefix}_{file_name}"
        if self.log_dir:
            os.makedirs(self.log_dir, exist_ok=True)
            file_name = os.path.join(self.log_dir, file_name)

        self.writers[name] = CSVWriter(
            file_name, overwrite=self.overwrite_file, append=self.append_file
        )

    def append(self, name, **kwargs):
        """Stores one row with the writer of a given name.

        Parameters
        ----------
        name : str
            Name of the writer
        **kwargs : dict
            Values to store, by column name
        """
        self.writers[name].append(kwargs)

    def __call__(self, data):
        """Runs the analysis script on one entry.

        Parameters
        ----------
        data : dict
            Data dictionary for one entry
        """
        data_filter = {}
        for key, req in self.keys.items():
            if key in data:
                data_filter[key] = data[key]
            elif req:
                raise KeyError(
                    f"Unable to find {key} in data dictionary while "
                    f"running analysis script {self.name}."
                )

        return self.process(data_filter)

    @abstractmethod
    def process(self, data):
        """Place-holder method to be defined in each analysis script.

        Parameters
        ----------
        data : dict
            Filtered data dictionary for one entry
        """
        raise NotImplementedError("Must define the `process` function")
