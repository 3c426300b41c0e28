"""Module to write reconstructed events to file."""

import os

import h5py
import numpy as np
import yaml

from detqa.data import CaloCell, CaloCluster, Event, MCParticle, Track, V0
from detqa.version import __version__

__all__ = ["HDF5Writer", "OBJECT_CLASSES"]

# Class of the objects stored in each list attribute of an event
OBJECT_CLASSES = {
    "tracks": Track,
    "v0s": V0,
    "mc_particles": MCParticle,
    "cells": CaloCell,
    "clusters": CaloCluster,
}


class HDF5Writer:
    """Writes events to an HDF5 file.

    Each object type goes into one structured dataset. The `events` dataset
    holds the event-level scalars along with the [start, end) range of the
    objects of each type which belong to the event.

    Typical configuration should look like:

    .. code-block:: yaml

        io:
          ...
          writer:
            name: hdf5
            file_name: events.h5
    """

    name = "hdf5"

    def __init__(self, file_name="events.h5", overwrite=False, append=False):
        """Initializes the basics of the output file.

        Parameters
        ----------
        file_name : str, default 'events.h5'
            Name of the output HDF5 file
        overwrite : bool, default False
            If `True`, overwrite the output file if it already exists
        append : bool, default False
            If `True`, add new events to the end of an existing file
        """
        if append:
            if not os.path.isfile(file_name):
                raise FileNotFoundError(
                    f"File not found at path: {file_name}. When using "
                    "`append=True` in HDF5Writer, the file must exist at "
                    "the prescribed path before data is written to it."
                )
        elif not overwrite and os.path.isfile(file_name):
            raise FileExistsError(f"File with name {file_name} already exists.")

        self.file_name = file_name
        self.append_file = append
        self.ready = append
        self.event_dtype = self.build_event_dtype()

    @staticmethod
    def build_event_dtype():
        """Structured type of the `events` dataset.

        Returns
        -------
        np.dtype
            Event scalars followed by one `{key}_range` field per object type
        """
        descr = Event.dtype().descr
        for key in OBJECT_CLASSES:
            descr.append((f"{key}_range", np.int64, (2,)))

        return np.dtype(descr)

    def create(self, cfg=None):
        """Creates the output file structure.

        Parameters
        ----------
        cfg : dict, optional
            Configuration used to produce the events
        """
        with h5py.File(self.file_name, "w") as out_file:
            info = out_file.create_group("info")
            info.attrs["version"] = __version__
            if cfg is not None:
                info.attrs["cfg"] = yaml.dump(cfg)

            out_file.create_dataset(
                "events", (0,), maxshape=(None,), dtype=self.event_dtype
            )
            for key, cls in OBJECT_CLASSES.items():
                group = out_file.create_group(key)
                group.attrs["class_name"] = cls.__name__
                group.create_dataset(
                    "objects", (0,), maxshape=(None,), dtype=cls.dtype()
                )
                for attr, dtype in cls._var_length_attrs:
                    group.create_dataset(attr, (0,), maxshape=(None,), dtype=dtype)
                    group.create_dataset(
                        f"{attr}_range", (0, 2), maxshape=(None, 2), dtype=np.int64
                    )

        self.ready = True

    def __call__(self, data, cfg=None):
        """Appends the event of one entry to the file.

        Parameters
        ----------
        data : dict
            Dictionary of data products, which must contain `event`
        cfg : dict, optional
            Configuration used to produce the events
        """
        self.append(data["event"], cfg)

    def write(self, events, cfg=None):
        """Writes a list of events to the file.

        Parameters
        ----------
        events : List[Event]
            Events to store
        cfg : dict, optional
            Configuration used to produce the events
        """
        for event in events:
            self.append(event, cfg)

    def append(self, event, cfg=None):
        """Appends one event to the file.

        Parameters
        ----------
        event : Event
            Event to store
        cfg : dict, optional
            Configuration used to produce the events
        """
        if not self.ready:
            self.create(cfg)

        with h5py.File(self.file_name, "a") as out_file:
            record = np.zeros(1, dtype=self.event_dtype)
            summary = Event.to_array([event])
            for name in summary.dtype.names:
                record[name] = summary[name]

            for key, cls in OBJECT_CLASSES.items():
                record[f"{key}_range"] = self.append_objects(
                    out_file[key], cls, getattr(event, key)
                )

            self.append_array(out_file["events"], record)

    def append_objects(self, group, cls, objects):
        """Appends a list of objects to the group of their type.

        Parameters
        ----------
        group : h5py.Group
            Group of the object type
        cls : type
            Class of the objects
        objects : List[DataBase]
            Objects to store

        Returns
        -------
        Tuple[int]
            [start, end) range of the objects in the `objects` dataset
        """
        start = self.append_array(group["objects"], cls.to_array(objects))
        for attr, _ in cls._var_length_attrs:
            values = [getattr(obj, attr) for obj in objects]
            lengths = np.array([len(v) for v in values], dtype=np.int64)
            first = len(group[attr])
            ends = first + np.cumsum(lengths)
            ranges = np.stack([ends - lengths, ends], axis=1).reshape(-1, 2)
            if len(values):
                self.append_array(group[attr], np.concatenate(values))
            self.append_array(group[f"{attr}_range"], ranges)

        return start, start + len(objects)

    @staticmethod
    def append_array(dataset, array):
        """Appends an array at the end of a resizable dataset.

        Parameters
        ----------
        dataset : h5py.Dataset
            Resizable dataset
        array : np.ndarray
            Array to append

        Returns
        -------
        int
            Index of the first appended element
        """
        current_id = len(dataset)
        if len(array):
            dataset.resize(current_id + len(array), axis=0)
            dataset[current_id:] = array

        return current_id
