"""detqa driver class.

Takes care of everything in one centralized place:
- Event reading
- Calorimeter event selection
- Reconstruction of v0 candidates
- Detector PID QA
- Analysis script execution
- Writing output to file
"""

import os
import time
from datetime import datetime

import numpy as np
import psutil
import yaml

from . import calo as calo_module
from .ana import AnaManager
from .io import reader_factory, writer_factory
from .io.write.csv import CSVWriter
from .qa import QAManager
from .reco import RecoManager
from .utils.factory import instantiate, module_dict
from .utils.logger import logger
from .utils.seed import seed as numba_seed
from .utils.stopwatch import StopwatchManager
from .version import __version__

__all__ = ["Driver"]


class Driver:
    """Central detqa driver.

    Processes global configuration and runs the appropriate modules:
      1. Read one event
      2. Apply the calorimeter event selection
      3. Reconstruct candidates
      4. Fill the QA histograms
      5. Run analysis scripts
      6. Write to file

    It takes a configuration dictionary of the form:

    .. code-block:: yaml

        base:
          <Base driver configuration>
        io:
          <Input/output configuration>
        calo:
          <Calorimeter event selection>
        reco:
          <Reconstruction stages>
        qa:
          <Detector QA modules>
        ana:
          <Analysis scripts>
    """

    def __init__(self, cfg):
        """Initializes the class attributes.

        Parameters
        ----------
        cfg : dict
            Global configuration dictionary
        """
        # Initialize the timers and the configuration dictionary
        self.watch = StopwatchManager()
        self.watch.initialize("iteration")

        # Process the full configuration dictionary and store it
        base, io, calo, reco, qa, ana = self.process_config(**cfg)

        # Initialize the base driver configuration parameters
        self.initialize_base(**base)

        # Initialize the input/output
        self.initialize_io(**io)

        # Initialize the calorimeter event selection
        self.calo = None
        if calo is not None:
            self.watch.initialize("calo")
            calo = {"name": "calo_selection", **calo}
            self.calo = instantiate(module_dict(calo_module), calo)

        # Initialize the reconstruction stages
        self.reco = None
        if reco is not None:
            self.watch.initialize("reco")
            self.reco = RecoManager(reco)
            self.watch.update(self.reco.watch, "reco")

        # Initialize the QA modules
        self.qa = None
        if qa is not None:
            self.watch.initialize("qa")
            self.qa = QAManager(qa)
            self.watch.update(self.qa.watch, "qa")

        # Initialize the analysis scripts
        self.ana = None
        if ana is not None:
            self.watch.initialize("ana")
            self.ana = AnaManager(ana, log_dir=self.log_dir, prefix=self.log_prefix)
            self.watch.update(self.ana.watch, "ana")

        # Initialize the output log lazily, when the loop is run
        self.logger = None

    def process_config(self, io, base=None, calo=None, reco=None, qa=None, ana=None):
        """Reads the configuration and dumps it to the logger.

        Parameters
        ----------
        io : dict
            I/O configuration dictionary
        base : dict, optional
            Base driver configuration dictionary
        calo : dict, optional
            Calorimeter selection configuration dictionary
        reco : dict, optional
            Reconstruction stage configuration dictionary
        qa : dict, optional
            QA module configuration dictionary
        ana : dict, optional
            Analysis script configuration dictionary

        Returns
        -------
        dict
            Processed configuration
        """
        # If there is no base configuration, make it empty (will use defaults)
        if base is None:
            base = {}

        # Set the verbosity of the logger
        verbosity = base.get("verbosity", "info")
        logger.setLevel(verbosity.upper())

        # If the seed is not set, randomize it
        if "seed" not in base or base["seed"] < 0:
            base["seed"] = int(time.time())
        else:
            assert isinstance(
                base["seed"], int
            ), f"The driver seed must be an integer, got: {base['seed']}"

        # Rebuild global configuration dictionary
        self.cfg = {"base": base, "io": io}
        if calo is not None:
            self.cfg["calo"] = calo
        if reco is not None:
            self.cfg["reco"] = reco
        if qa is not None:
            self.cfg["qa"] = qa
        if ana is not None:
            self.cfg["ana"] = ana

        # Log environment information and configuration
        logger.info("Release version: %s\n", __version__)
        logger.info(yaml.dump(self.cfg, default_flow_style=None, sort_keys=False))

        return base, io, calo, reco, qa, ana

    def initialize_base(
        self,
        seed,
        log_dir="logs",
        prefix_log=False,
        overwrite_log=False,
        iterations=None,
        log_step=1,
        verbosity="info",
    ):
        """Initialize the base driver parameters.

        Parameters
        ----------
        seed : int
            Random number generator seed
        log_dir : str, default 'logs'
            Path to the directory where the logs will be written to
        prefix_log : bool, default False
            If True, use the input file name to prefix the log name
        overwrite_log : bool, default False
            If True, overwrite log even if it already exists
        iterations : int, optional
            Number of entries to process (-1 or `None` means all entries)
        log_step : int, default 1
            Number of iterations before the logging is called (1: every step)
        verbosity : str, default 'info'
            Verbosity level to pass to the `logging` module. Pick one of
            'debug', 'info', 'warning', 'error', 'critical'.
        """
        # Set up the seed
        np.random.seed(seed)
        numba_seed(seed)

        # Store general parameters
        self.seed = seed
        self.log_dir = log_dir
        self.prefix_log = prefix_log
        self.overwrite_log = overwrite_log
        self.iterations = iterations
        self.log_step = log_step

    def initialize_io(self, reader, writer=None, output=None):
        """Initializes the input/output scripts.

        Parameters
        ----------
        reader : dict
            Reader configuration dictionary
        writer : dict, optional
            Event writer configuration dictionary
        output : str, optional
            Path to the QA output file. Defaults to `<log_dir>/<prefix>_qa.h5`
        """
        # Initialize the reader
        self.watch.initialize("read")
        self.reader = reader_factory(reader)

        # Fetch an appropriate common prefix for all input files
        self.log_prefix = self.get_prefix(self.reader.file_paths)

        # Initialize the data writer, if provided
        self.writer = None
        if writer is not None:
            self.watch.initialize("write")
            self.writer = writer_factory(writer)

        # Define the QA output path
        if output is None:
            output = os.path.join(self.log_dir, f"{self.log_prefix}_qa.h5")
        self.output = output

        # Harmonize the iterations parameter
        if self.iterations is None or self.iterations < 0:
            self.iterations = len(self.reader)
        assert self.iterations <= len(self.reader), (
            f"Requested {self.iterations} iterations but there are only "
            f"{len(self.reader)} entries available."
        )

    @staticmethod
    def get_prefix(file_paths):
        """Builds an appropriate output prefix based on the list of input files.

        Parameters
        ----------
        file_paths : List[str]
            List of input file paths

        Returns
        -------
        str
            Shared input summary string to be used to prefix outputs
        """
        # Fetch file base names (ignore where they live)
        file_names = [os.path.splitext(os.path.basename(f))[0] for f in file_paths]

        # Get the shared prefix of all files in the list
        prefix = os.path.commonprefix(file_names)

        # If there is only one file, done
        if len(file_names) == 1:
            return prefix

        # Otherwise, assemble log name from input file names
        sep = "--"
        log_prefix = prefix

        # Get the shared suffix of all files in the list
        file_names_f = [f[::-1] for f in file_names]
        suffix = os.path.commonprefix(file_names_f)[::-1]
        if prefix == suffix:
            suffix = ""

        # Pad the center of the log name with components which are not shared
        first = file_names[0][len(prefix) : len(file_names[0]) - len(suffix)]
        if len(first):
            if len(log_prefix):
                log_prefix += sep
            log_prefix += first

        if len(file_names) > 2:
            if len(log_prefix):
                log_prefix += sep
            log_prefix += f"{len(file_names) - 2}"

        last = file_names[-1][len(prefix) : len(file_names[-1]) - len(suffix)]
        if len(last):
            if len(log_prefix):
                log_prefix += sep
            log_prefix += last

        # Add the shared suffix
        if len(suffix):
            log_prefix += f"{sep}{suffix}"

        # Truncate file names that are too long
        max_length = 150
        if len(log_prefix) > max_length:
            log_prefix = log_prefix[: max_length - 3] + "---"

        return log_prefix

    def initialize_log(self):
        """Initialize the output log for this driver process."""
        # Make a directory if it does not exist
        if self.log_dir and not os.path.exists(self.log_dir):
            os.makedirs(self.log_dir, exist_ok=True)

        # If requested, prefix the log name with the input file name
        log_name = "detqa_log.csv"
        if self.prefix_log:
            log_name = f"{self.log_prefix}_{log_name}"

        log_path = os.path.join(self.log_dir, log_name)
        self.logger = CSVWriter(log_path, overwrite=self.overwrite_log)

    def __len__(self):
        """Returns the number of events in the underlying reader object.

        Returns
        -------
        int
            Number of elements in the underlying reader
        """
        return len(self.reader)

    def __iter__(self):
        """Resets the counter and returns itself.

        Returns
        -------
        object
            The Driver itself
        """
        self.counter = 0

        return self

    def __next__(self):
        """Defines how to process the next entry in the iterator.

        Returns
        -------
        dict
            Data dictionary of the entry
        """
        if self.counter < len(self):
            data = self.process(self.counter)
            self.counter += 1

            return data

        raise StopIteration

    def run(self):
        """Loop over the requested number of iterations, process them, and
        store the QA output once done."""
        # Initialize the output log
        self.initialize_log()

        # Loop and process each iteration
        for iteration in range(self.iterations):
            tstamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
            data = self.process(entry=iteration)
            self.log(data, tstamp, iteration)

            # Release the memory for the next iteration
            data = None

        # Post-process the QA modules and store their output
        self.finish()

    def finish(self):
        """Runs the QA post-processing and stores the QA output."""
        if self.qa is None:
            return

        self.qa.finish()
        output_dir = os.path.dirname(self.output)
        if output_dir:
            os.makedirs(output_dir, exist_ok=True)
        self.qa.store(self.output, cfg=yaml.dump(self.cfg, sort_keys=False))

    def process(self, entry=None, run=None, event=None):
        """Process one entry.

        Runs a single step of the driver: reads one event, selects it, builds
        the reconstructed candidates, fills the QA modules, runs the analysis
        scripts and writes the event to file, if requested.

        Parameters
        ----------
        entry : int, optional
            Entry number to load
        run : int, optional
            Run number to load
        event : int, optional
            Event number to load

        Returns
        -------
        dict
            Data dictionary of the entry
        """
        # 0. Make sure there is no watch running, start the iteration timer
        for watch in self.watch.values():
            if watch.running:
                self.watch.reset()
                break

        self.watch.clear()
        self.watch.start("iteration")

        # 1. Read data
        data = self.load(entry, run, event)

        # 2. Apply the event selection, if requested
        data["accepted"] = True
        if self.calo is not None:
            self.watch.start("calo")
            data.update(self.calo(data))
            self.watch.stop("calo")

        if data["accepted"]:
            # 3. Reconstruct candidates
            if self.reco is not None:
                self.watch.start("reco")
                self.reco(data)
                self.watch.stop("reco")

            # 4. Fill the QA modules
            if self.qa is not None:
                self.watch.start("qa")
                self.qa(data)
                self.watch.stop("qa")

            # 5. Run scripts, if requested
            if self.ana is not None:
                self.watch.start("ana")
                self.ana(data)
                self.watch.stop("ana")

            # 6. Write output to file, if requested
            if self.writer is not None:
                self.watch.start("write")
                self.writer(data, self.cfg)
                self.watch.stop("write")

        # Stop the iteration timer
        self.watch.stop("iteration")

        return data

    def load(self, entry=None, run=None, event=None):
        """Reads one entry to process.

        Parameters
        ----------
        entry : int, optional
            Entry number
        run : int, optional
            Run number
        event : int, optional
            Event number

        Returns
        -------
        dict
            Data dictionary containing the input
        """
        # Must provide either entry number or both run and event numbers
        assert (entry is not None) or (
            run is not None and event is not None
        ), "Provide either the entry number or the run and event number to read."

        self.watch.start("read")
        if entry is not None:
            data = self.reader.get(entry)
        else:
            data = self.reader.get_run_event(run, event)
        self.watch.stop("read")

        return data

    def log(self, data, tstamp, iteration):
        """Log relevant information to CSV files and stdout.

        Parameters
        ----------
        data : dict
            Dictionary of data products to extract scalars from
        tstamp : str
            Time when this iteration was run
        iteration : int
            Iteration counter
        """
        log_dict = {"iter": iteration, "entry": data["index"]}

        # Fetch the memory usage (in GB)
        memory = psutil.virtual_memory()
        log_dict["cpu_mem"] = memory.used / 1.0e9
        log_dict["cpu_mem_perc"] = memory.percent

        # Fetch the times (stages skipped in this iteration get zero)
        suff = "_time"
        for key, watch in self.watch.items():
            log_dict[f"{key}{suff}"] = watch.time.wall if watch.has_time else 0.0
            log_dict[f"{key}{suff}_cpu"] = watch.time.cpu if watch.has_time else 0.0
            log_dict[f"{key}{suff}_sum"] = watch.time_sum.wall
            log_dict[f"{key}{suff}_sum_cpu"] = watch.time_sum.cpu

        # Fetch the event identifiers and the scalar outputs
        log_dict["run"] = data["event"].run
        log_dict["event"] = data["event"].event
        for key, value in data.items():
            if key not in log_dict and np.isscalar(value):
                log_dict[key] = value

        # Record
        self.logger.append(log_dict)

        # If requested, log out basics of the process
        if ((iteration + 1) % self.log_step) == 0:
            t_iter = self.watch.time("iteration").wall
            msg = (
                f"Iter. {iteration} @ {tstamp} | "
                f"Time: {t_iter:0.3f} s | "
                f"CPU memory: {log_dict['cpu_mem']:0.2f} GB "
                f"({log_dict['cpu_mem_perc']:0.2f} %)"
            )
            logger.info(msg)
