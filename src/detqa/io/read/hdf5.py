"""Contains a reader class dedicated to loading events from HDF5 files."""

import h5py
import numpy as np
import yaml

from detqa.data import Event
from detqa.io.write.hdf5 import OBJECT_CLASSES
from detqa.utils.logger import logger

from .base import ReaderBase

__all__ = ["HDF5Reader"]


class HDF5Reader(ReaderBase):
    """Class which reads events stored in HDF5 files.

    The files must be structured as written by :class:`HDF5Writer`:
      - An `events` dataset with the event scalars and object ranges
      - One group per object type, with an `objects` dataset and one
        dataset per variable-length attribute

    .. code-block:: yaml

        io:
          reader:
            name: hdf5
            file_keys: events_*.h5
            n_entry: 1000
    """

    name = "hdf5"

    def __init__(
        self,
        file_keys,
        limit_num_files=None,
        max_print_files=10,
        n_entry=None,
        n_skip=None,
        entry_list=None,
        skip_entry_list=None,
        run_event_list=None,
        create_run_map=False,
        build_classes=True,
    ):
        """Initalize the HDF5 file reader.

        Parameters
        ----------
        file_keys : Union[str, List[str]]
            Path(s) or glob pattern(s) of the HDF5 files to be read, or the
            path to a text file which lists them
        limit_num_files : int, optional
            Integer limiting the number of files to load
        max_print_files : int, default 10
            Maximum number of loaded file names to be printed
        n_entry : int, optional
            Maximum number of entries to load
        n_skip : int, optional
            Number of entries to skip at the beginning
        entry_list : list, optional
            List of integer entry IDs to add to the index
        skip_entry_list : list, optional
            List of integer entry IDs to skip from the index
        run_event_list : List[Tuple[int]], optional
            List of (run, event) pairs to add to the index
        create_run_map : bool, default False
            Initialize a map between (run, event) pairs and entries
        build_classes : bool, default True
            If `False`, return the objects as dictionaries of attributes
        """
        self.process_file_paths(file_keys, limit_num_files, max_print_files)

        if run_event_list is not None:
            create_run_map = True

        # Loop over the input files, build a map from index to file ID
        self.num_entries = 0
        self.file_index = []
        self.file_offsets = np.empty(len(self.file_paths), dtype=np.int64)
        self.run_info = [] if create_run_map else None
        for i, path in enumerate(self.file_paths):
            with h5py.File(path, "r") as in_file:
                assert "events" in in_file, "File does not contain an event tree"
                events = in_file["events"]
                if create_run_map:
                    self.run_info.append(np.stack([events["run"], events["event"]], 1))

                num_entries = len(events)
                self.file_index.append(i * np.ones(num_entries, dtype=np.int64))
                self.file_offsets[i] = self.num_entries
                self.num_entries += num_entries

        logger.info("Total number of entries in the file(s): %d\n", self.num_entries)

        self.file_index = np.concatenate(self.file_index)
        if self.run_info is not None:
            self.run_info = np.vstack(self.run_info)

        self.process_run_info()
        self.process_entry_list(
            n_entry, n_skip, entry_list, skip_entry_list, run_event_list
        )

        self.build_classes = build_classes
        self.cfg = self.process_cfg()
        self.version = self.process_version()

    def process_cfg(self):
        """Fetches the configuration used to produce the HDF5 file.

        Returns
        -------
        dict
            Configuration dictionary (`None` if not stored)
        """
        with h5py.File(self.file_paths[0], "r") as in_file:
            if "info" not in in_file or "cfg" not in in_file["info"].attrs:
                return None
            cfg_str = in_file["info"].attrs["cfg"]

        try:
            return yaml.safe_load(cfg_str)
        except yaml.YAMLError:
            logger.warning("Could not parse the configuration stored in the file.")
            return None

    def process_version(self):
        """Returns the release version used to produce the HDF5 file.

        Returns
        -------
        str
            Release tag (`None` if not stored)
        """
        with h5py.File(self.file_paths[0], "r") as in_file:
            if "info" not in in_file:
                return None
            return in_file["info"].attrs.get("version", None)

    def get(self, idx):
        """Returns a specific entry in the file.

        Parameters
        ----------
        idx : int
            Integer entry ID to access

        Returns
        -------
        dict
            Dictionary of data products corresponding to one event
        """
        assert idx < len(self.entry_index)
        file_idx = self.get_file_index(idx)
        entry_idx = self.get_file_entry_index(idx)

        data = {"file_index": file_idx, "file_entry_index": entry_idx}
        with h5py.File(self.file_paths[file_idx], "r") as in_file:
            record = in_file["events"][entry_idx]
            objects = {}
            for key, cls in OBJECT_CLASSES.items():
                start, end = record[f"{key}_range"]
                objects[key] = self.load_objects(in_file[key], cls, start, end)

        names = [n for n in Event.dtype().names if n in record.dtype.names]
        if self.build_classes:
            data["event"] = Event.from_record(record, names, **objects)
        else:
            data["event"] = {n: record[n] for n in names}
        data.update(objects)

        # Use the global index, not the one read from file
        data["index"] = np.int64(idx)

        return data

    def load_objects(self, group, cls, start, end):
        """Loads the objects of one type which belong to one event.

        Parameters
        ----------
        group : h5py.Group
            Group of the object type
        cls : type
            Class of the objects
        start : int
            Index of the first object in the `objects` dataset
        end : int
            Index past the last object in the `objects` dataset

        Returns
        -------
        List[Union[DataBase, dict]]
            List of objects
        """
        array = group["objects"][start:end]
        var_values = {}
        for attr, _ in cls._var_length_attrs:
            ranges = group[f"{attr}_range"][start:end]
            if len(ranges):
                values = group[attr][ranges[0, 0] : ranges[-1, 1]]
                var_values[attr] = [
                    values[s - ranges[0, 0] : e - ranges[0, 0]] for s, e in ranges
                ]
            else:
                var_values[attr] = []

        objects = []
        for i, record in enumerate(array):
            extra = {attr: values[i] for attr, values in var_values.items()}
            if self.build_classes:
                objects.append(cls.from_record(record, **extra))
            else:
                obj_dict = dict(zip(array.dtype.names, record))
                obj_dict.update(extra)
                objects.append(obj_dict)

        return objects
