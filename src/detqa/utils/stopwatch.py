"""Wall and CPU time measurements of the processing stages."""

import time
from dataclasses import dataclass

__all__ = ["Time", "Stopwatch", "StopwatchManager"]


@dataclass
class Time:
    """Pair of wall and CPU times, in seconds.

    Attributes
    ----------
    wall : float
         Wall time
    cpu : float
         CPU time
    """

    wall: float = 0.0
    cpu: float = 0.0

    def __add__(self, other):
        return Time(self.wall + other.wall, self.cpu + other.cpu)

    def __sub__(self, other):
        return Time(self.wall - other.wall, self.cpu - other.cpu)

    @classmethod
    def current(cls):
        """Returns the current wall and process times.

        Returns
        -------
        Time
           Current time
        """
        return cls(time.time(), time.process_time())


class Stopwatch:
    """Holds the timing information of one process.

    The watch accumulates the time of the last start/stop cycle (`time`)
    and the total time of all the cycles it went through (`time_sum`).
    """

    def __init__(self):
        """Initialize an idle watch."""
        self.reset()

    def reset(self):
        """Brings the watch back to its initial idle state."""
        self._start = None
        self._time = None
        self._total = Time()

    @property
    def running(self):
        """Whether the stopwatch is currently running."""
        return self._start is not None

    def start(self):
        """Starts the watch.

        Raises
        ------
        ValueError
            If the watch is already running
        """
        if self.running:
            raise ValueError("Cannot restart a watch that has not been stopped.")
        self._start = Time.current()

    def stop(self):
        """Stops the watch, records the elapsed time.

        Raises
        ------
        ValueError
            If the watch was never started
        """
        if not self.running:
            raise ValueError("Cannot stop a watch that has not been started.")
        self._time = Time.current() - self._start
        self._total = self._total + self._time
        self._start = None

    @property
    def has_time(self):
        """Whether the watch went through a start/stop cycle since it was
        last cleared."""
        return self._time is not None

    def clear(self):
        """Forgets the time of the last cycle, keeps the total time."""
        self._time = None

    @property
    def time(self):
        """Time between the last start and the last stop."""
        if self._time is None:
            raise ValueError("Cannot get time of watch that has not been stopped.")
        return self._time

    @property
    def time_sum(self):
        """Sum of times between all watch starts and stops."""
        return self._total


class StopwatchManager:
    """Organizes the stopwatches of several named processes."""

    def __init__(self):
        """Initalize an empty set of watches."""
        self._watch = {}

    def __contains__(self, key):
        return key in self._watch

    def keys(self):
        """Names of the initialized stopwatches."""
        return self._watch.keys()

    def values(self):
        """Initialized stopwatches."""
        return self._watch.values()

    def items(self):
        """(name, stopwatch) pairs."""
        return self._watch.items()

    def initialize(self, key):
        """Initialize one or more stopwatches.

        Parameters
        ----------
        key : Union[str, List[str]]
            Key or list of keys to initialize a :class:`Stopwatch` for
        """
        keys = [key] if isinstance(key, str) else key
        for k in keys:
            self._watch[k] = Stopwatch()

    def reset(self, key=None):
        """Reset one or all stopwatches to their initial state.

        Parameters
        ----------
        key : Union[str, List[str]], optional
            Key or list of keys to reset. If not specified, reset all
        """
        keys = list(self.keys()) if key is None else key
        keys = [keys] if isinstance(keys, str) else keys
        for k in keys:
            self._check(k)
            self._watch[k].reset()

    def clear(self):
        """Forgets the time of the last cycle of every stopwatch."""
        for watch in self._watch.values():
            watch.clear()

    def start(self, key):
        """Starts the stopwatch of a process.

        Parameters
        ----------
        key : str
            Name of the process
        """
        self._check(key)
        self._watch[key].start()

    def stop(self, key):
        """Stops the stopwatch of a process.

        Parameters
        ----------
        key : str
            Name of the process
        """
        self._check(key)
        self._watch[key].stop()

    def time(self, key):
        """Returns the last recorded time of a process.

        Parameters
        ----------
        key : str
            Name of the process

        Returns
        -------
        Time
            Execution time of one iteration of the process
        """
        self._check(key)
        return self._watch[key].time

    def time_sum(self, key):
        """Returns the summed time of all the iterations of a process.

        Parameters
        ----------
        key : str
            Name of the process

        Returns
        -------
        Time
            Execution time of all iterations of the process so far
        """
        self._check(key)
        return self._watch[key].time_sum

    def update(self, other, prefix=None):
        """Adds the stopwatches of another manager to this one.

        Parameters
        ----------
        other : StopwatchManager
             Other stopwatch manager
        prefix : str, optional
             String to prefix the stopwatch names with
        """
        for key, value in other.items():
            name = key if prefix is None else f"{prefix}_{key}"
            self._watch[name] = value

    def _check(self, key):
        if key not in self._watch:
            raise KeyError(f"No stopwatch initialized under the name: {key}")
