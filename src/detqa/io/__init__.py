"""Input/output tools.

- `read`: readers which load events from HDF5 files into data dictionaries
- `write`: writers which store events to HDF5 and analysis rows to CSV
- `results`: storage of the QA products (histograms, graphs, functions)

Event files are structured as follows:
- An `info` group with the release version and the configuration used
- An `events` dataset with the event-level scalars and, for each object
  type, the [start, end) range of the objects of each event
- One group per object type (`tracks`, `v0s`, ...) with a structured
  `objects` dataset and one flat dataset per variable-length attribute

.. code-block:: yaml

    io:
      reader:
        name: hdf5
        file_keys: events_*.h5
      output: qa_output.h5
"""

from .factories import *
from .read import *
from .results import *
from .write import *
