"""Base classes of all QA modules."""

from abc import ABC, abstractmethod
from copy import deepcopy

from detqa.hist import HistogramCollection
from detqa.io.results import write_results
from detqa.utils.enums import StepEnum

__all__ = ["QABase", "DetectorPIDQA"]


class QABase(ABC):
    """Parent class of all QA modules.

    This base class performs the following functions:
    - Ensures that the necessary methods exist
    - Checks that the module is provided the necessary data products
    - Owns the collection of histograms filled by the module
    - Provides the merging and copying of modules processed in parallel

    Attributes
    ----------
    name : str
        Name of the QA module (to call it from a configuration file)
    aliases : Tuple[str]
        Alternative allowed names of the QA module
    histos : HistogramCollection
        Histograms filled by the module
    """

    # Name of the QA module (as specified in the configuration)
    name = None

    # Alternative allowed names of the QA module
    aliases = ()

    # Set of data keys needed for this QA module to operate
    _keys = (("event", True), ("tracks", True))

    def __init__(self):
        """Initialize an empty histogram collection."""
        self.histos = HistogramCollection(f"{self.name}_histos", f"{self.name} QA histograms")

    @property
    def keys(self):
        """Dictionary of (key, necessity) pairs which determine which data keys
        are needed/optional for the QA module to run.

        Returns
        -------
        Dict[str, bool]
            Dictionary of (key, necessity) pairs to be used
        """
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
        """Runs the QA module on one entry.

        Parameters
        ----------
        data : dict
            Data dictionary for one entry
        """
        data_filter = {}
        for key, req in self.keys.items():
            assert not req or key in data, (
                f"QA module `{self.name}` is missing an essential "
                f"input to be used: `{key}`."
            )
            if key in data:
                data_filter[key] = data[key]

        self.process(data_filter)

    @abstractmethod
    def initialize(self):
        """Books the histograms of the module."""
        raise NotImplementedError("Must define the `initialize` function")

    @abstractmethod
    def process(self, data):
        """Fills the histograms of the module with one entry.

        Parameters
        ----------
        data : dict
            Filtered data dictionary for one entry
        """
        raise NotImplementedError("Must define the `process` function")

    def finish(self):
        """Derives the post-processed quantities, once all entries are read."""

    def results(self):
        """Returns the post-processed quantities to store.

        Returns
        -------
        dict
            Nested dictionary of graphs, functions, histograms
        """
        return {}

    def store(self, out):
        """Stores the histograms and post-processed quantities of the module.

        Parameters
        ----------
        out : Union[str, h5py.Group]
            Path to an HDF5 file or open HDF5 group
        """
        write_results(out, {"histos": self.histos, "results": self.results()})

    def merge(self, others):
        """Adds the histograms of other instances of the same module.

        Parameters
        ----------
        others : List[QABase]
            Other instances of the module. `None` means nothing to merge

        Returns
        -------
        int
            Number of merged objects, this one included (0 if nothing is given)
        """
        if others is None:
            return 0

        count = 0
        for other in others:
            if not isinstance(other, type(self)):
                continue
            self.histos.merge([other.histos])
            count += 1

        return count + 1

    def copy(self):
        """Returns an independent copy of the module.

        Returns
        -------
        QABase
            Copy of the module
        """
        return deepcopy(self)


class DetectorPIDQA(QABase):
    """Parent class of the QA modules which monitor the PID of one detector.

    Tracks are monitored before and after the PID selection, which defines
    the `step` of the monitored quantities.

    Attributes
    ----------
    BEFORE_PID : int
        Selection step of tracks before the PID selection
    AFTER_PID : int
        Selection step of tracks after the PID selection
    use_mc_species : bool
        Whether to use the Monte Carlo species of the tracks
    """

    BEFORE_PID = StepEnum.BEFORE_PID.value
    AFTER_PID = StepEnum.AFTER_PID.value

    def __init__(self, use_mc_species=True):
        """Initialize the detector PID QA.

        Parameters
        ----------
        use_mc_species : bool, default True
            If `True`, the species of the tracks is taken from their matched
            Monte Carlo particle. Otherwise it is unknown (-1)
        """
        super().__init__()
        self.use_mc_species = use_mc_species

    @staticmethod
    def step_name(step):
        """Name of a selection step, as used in the histogram names."""
        return "before" if step == StepEnum.BEFORE_PID else "after"
