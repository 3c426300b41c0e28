"""Reconstruction stage base class."""

from abc import ABC, abstractmethod

__all__ = ["RecoBase"]


class RecoBase(ABC):
    """Base class of all reconstruction stages.

    A reconstruction stage takes the data products of one entry and either
    sets additional attributes or builds entirely new data products, which
    it returns as a dictionary to be merged into the entry.

    Attributes
    ----------
    name : str
        Name of the stage (to call it from a configuration file)
    aliases : Tuple[str]
        Alternative allowed names of the stage
    """

    # Name of the stage (as specified in the configuration)
    name = None

    # Alternative allowed names of the stage
    aliases = ()

    # Set of data keys needed for this stage to operate
    _keys = (("event", True),)

    @property
    def keys(self):
        """Dictionary of (key, necessity) pairs needed by the stage."""
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

    def __call__(self, data):
        """Runs the stage on one entry.

        Parameters
        ----------
        data : dict
            Dictionary of data products for one entry

        Returns
        -------
        dict
            New or updated data products
        """
        data_filter = {}
        for key, req in self.keys.items():
            assert not req or key in data, (
                f"Reconstruction stage `{self.name}` is missing an essential "
                f"input to be used: `{key}`."
            )
            if key in data:
                data_filter[key] = data[key]

        return self.process(data_filter)

    @abstractmethod
    def process(self, data):
        """Place-holder method to be defined in each stage.

        Parameters
        ----------
        data : dict
            Filtered dictionary of data products for one entry
        """
        raise NotImplementedError("Must define the `process` function")
