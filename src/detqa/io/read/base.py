"""Contains the event reader base class.

Readers are used to extract specific entries from files and store their
data products into dictionaries to be used downstream.
"""

import glob
import os

import numpy as np

from detqa.utils.logger import logger

__all__ = ["ReaderBase"]


class ReaderBase:
    """Parent reader class which provides common functions between all readers.

    This class provides these basic functions:
    1. Method to parse the requested file list or file list file into a list of
       paths to existing files (throws if nothing is found)
    2. Method to produce a list of entries in the file(s) as selected by the
       provided parameters, checks that they exist (throws if they do not)
    3. Essential `__len__` and `__getitem__` methods. Must define the
       `get` function in the inheriting class for both of them to work.

    Attributes
    ----------
    name : str
        Name of the reader, as requested in the configuration
    num_entries : int
        Total number of entries in the files provided
    entry_index : np.ndarray
        Global indexes to cycle through
    file_paths : List[str]
        List of files to read data from
    file_offsets : np.ndarray
        Offsets between the global index and each individual file start index
    file_index : np.ndarray
        Index of the file each entry lives in
    run_info : np.ndarray
        (run, event) pairs associated with each entry in the file list
    run_map : Dict[Tuple[int], int]
        Maps each available (run, event) pair onto an entry_index index
    """

    name = ""
    num_entries = None
    entry_index = None
    file_paths = None
    file_offsets = None
    file_index = None
    run_info = None
    run_map = None

    def __len__(self):
        """Returns the number of selected entries in the file(s)."""
        return len(self.entry_index)

    def __getitem__(self, idx):
        """Returns a specific entry in the file.

        Parameters
        ----------
        idx : int
            Integer entry ID to access

        Returns
        -------
        dict
            One entry-worth of data from the loaded files
        """
        return self.get(idx)

    def get(self, idx):
        """Placeholder to be defined by the daughter class."""
        raise NotImplementedError

    def process_file_paths(self, file_keys, limit_num_files=None, max_print_files=10):
        """Process the list of files.

        Parameters
        ----------
        file_keys : Union[str, List[str]]
            Path or list of paths (or glob patterns) to the files to be read.
            A single path to a `.txt` file is interpreted as a file list
        limit_num_files : int, optional
            Integer limiting the number of files to load
        max_print_files : int, default 10
            Maximum number of loaded file names to be printed
        """
        assert file_keys is not None, "No input `file_keys` provided, abort."
        assert (
            limit_num_files is None or limit_num_files > 0
        ), "If `limit_num_files` is provided, it must be larger than 0."

        # A text file holds a list of file paths, one per line
        if isinstance(file_keys, str) and os.path.splitext(file_keys)[-1] == ".txt":
            assert os.path.isfile(file_keys), (
                "If the `file_keys` are specified as a single string, "
                "it must be the path to a text file with a file list."
            )
            with open(file_keys, "r", encoding="utf-8") as f:
                file_keys = [l.strip() for l in f.read().splitlines() if l.strip()]

        # Convert the file keys to a list of file paths with glob
        self.file_paths = []
        if isinstance(file_keys, str):
            file_keys = [file_keys]
        for file_key in file_keys:
            file_paths = glob.glob(file_key)
            assert file_paths, f"File key {file_key} yielded no compatible path."
            for path in sorted(file_paths):
                if (
                    limit_num_files is not None
                    and len(self.file_paths) >= limit_num_files
                ):
                    break
                self.file_paths.append(path)

        self.file_paths = sorted(self.file_paths)

        num_files = len(self.file_paths)
        file_list = " - " + "\n - ".join(self.file_paths[:max_print_files])
        file_list += "\n ... \n" if num_files > max_print_files else "\n"
        logger.info("Will load %d file(s):\n%s", num_files, file_list)

    def process_run_info(self):
        """Checks the run information for duplicates and builds a dictionary
        which maps (run, event) pairs onto entry indexes."""
        self.run_map = None
        if self.run_info is None:
            return

        assert len(self.run_info) == self.num_entries
        num_unique = len(np.unique(self.run_info, axis=0))
        assert num_unique == len(self.run_info), (
            "Cannot create a run map if (run, event) pairs are not "
            "unique in the dataset. Abort."
        )

        self.run_map = {tuple(v): i for i, v in enumerate(self.run_info.tolist())}

    def process_entry_list(
        self,
        n_entry=None,
        n_skip=None,
        entry_list=None,
        skip_entry_list=None,
        run_event_list=None,
    ):
        """Create a list of entries that can be accessed by :meth:`__getitem__`.

        Parameters
        ----------
        n_entry : int, optional
            Maximum number of entries to load
        n_skip : int, optional
            Number of entries to skip at the beginning
        entry_list : Union[List[int], str], optional
            List of integer entry IDs to add to the index
        skip_entry_list : Union[List[int], str], optional
            List of integer entry IDs to skip from the index
        run_event_list : List[Tuple[int]], optional
            List of (run, event) pairs to add to the index
        """
        # Make sure the parameters are sensible
        use_count = n_entry is not None or n_skip is not None
        use_list = entry_list is not None or skip_entry_list is not None
        use_run = run_event_list is not None
        assert use_count + use_list + use_run < 2, (
            "Cannot specify `n_entry` or `n_skip` at the same time as "
            "`entry_list` or `skip_entry_list` or `run_event_list`."
        )
        assert not entry_list or not skip_entry_list, (
            "Cannot specify both `entry_list` and `skip_entry_list` at the same time."
        )

        entry_index = np.arange(self.num_entries, dtype=np.int64)
        if use_count:
            n_skip = n_skip if n_skip else 0
            n_entry = n_entry if n_entry and n_entry > 0 else self.num_entries - n_skip
            assert n_skip + n_entry <= self.num_entries, (
                f"Mismatch between `n_entry` ({n_entry}), `n_skip` ({n_skip}) "
                f"and the number of entries in the files ({self.num_entries})."
            )
            entry_index = entry_index[n_skip : n_skip + n_entry]

        elif entry_list:
            entry_list = self.parse_entry_list(entry_list)
            assert np.all(
                entry_list < self.num_entries
            ), "Values in entry_list outside of bounds."
            entry_index = entry_index[entry_list]

        elif skip_entry_list:
            skip_entry_list = self.parse_entry_list(skip_entry_list)
            assert np.all(
                skip_entry_list < self.num_entries
            ), "Values in skip_entry_list outside of bounds."
            entry_mask = np.ones(self.num_entries, dtype=bool)
            entry_mask[skip_entry_list] = False
            entry_index = entry_index[entry_mask]

        elif use_run:
            assert self.run_map is not None, (
                "Must build a run map to select entries by (run, event)."
            )
            entry_index = np.unique(
                [self.run_map[tuple(pair)] for pair in run_event_list]
            ).astype(np.int64)

        assert len(entry_index), "Must at least have one entry to load."
        logger.info("Total number of entries selected: %d\n", len(entry_index))

        self.entry_index = entry_index

    def get_run_event(self, run, event):
        """Returns the entry corresponding to a (run, event) pair.

        Parameters
        ----------
        run : int
            Run number
        event : int
            Event number

        Returns
        -------
        dict
            Dictionary of data products corresponding to one event
        """
        assert (
            self.run_map is not None
        ), "Must build a run map to get entries by (run, event)."
        assert (run, event) in self.run_map, f"Could not find (run={run}, event={event})."
        entry = self.run_map[(run, event)]
        matches = np.where(self.entry_index == entry)[0]
        assert len(matches), f"Entry of (run={run}, event={event}) is not selected."

        return self.get(int(matches[0]))

    def get_file_path(self, idx):
        """Returns the path to the file of a specific entry."""
        return self.file_paths[self.get_file_index(idx)]

    def get_file_index(self, idx):
        """Returns the index of the file of a specific entry."""
        return int(self.file_index[self.entry_index[idx]])

    def get_file_entry_index(self, idx):
        """Returns the index of an entry within the file it lives in,
        provided a global index over the list of files.

        Parameters
        ----------
        idx : int
            Integer entry ID to access

        Returns
        -------
        int
            Index of the entry in the file
        """
        file_idx = self.get_file_index(idx)

        return int(self.entry_index[idx] - self.file_offsets[file_idx])

    @staticmethod
    def parse_entry_list(list_source):
        """Parses a list into an np.ndarray.

        The list can be passed as a simple python list or a path to a file
        which contains space or comma separated numbers (can be on multiple
        lines or not).

        Parameters
        ----------
        list_source : Union[list, str]
            List as a python list or a text file path

        Returns
        -------
        np.ndarray
            List as a numpy array
        """
        if list_source is None:
            return np.empty(0, dtype=np.int64)

        if not np.isscalar(list_source):
            return np.asarray(list_source, dtype=np.int64)

        if isinstance(list_source, str):
            assert os.path.isfile(list_source), "The list source file does not exist."
            with open(list_source, "r", encoding="utf-8") as f:
                lines = f.read().splitlines()
                line_list = [l.replace(",", " ").split() for l in lines]
                list_source = [int(w) for l in line_list for w in l]

            return np.array(list_source, dtype=np.int64)

        raise ValueError("List format not recognized.")
