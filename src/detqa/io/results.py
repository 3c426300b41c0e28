"""Storage of the QA products (histograms, graphs, fitted functions) to HDF5.

Each object is stored as an HDF5 group named after the object. The group
carries a `type` attribute, which identifies the object class, and the
object metadata (title, axis titles, fit quality, ...) as attributes. The
numerical content is stored as datasets:

- :class:`Histogram`: `counts`, `fills` and one `edges_{i}` dataset per axis
- :class:`SparseHistogram`: `bins`, `values`, `fills` and one `edges_{i}`
  per axis
- :class:`Graph`/:class:`GraphErrors`: `x`, `y` (and `ex`, `ey`)
- :class:`Function1D`: `params` and `errors`

Nested dictionaries of objects are stored as nested groups.
"""

from contextlib import contextmanager

import h5py
import numpy as np

from detqa.hist import (
    Axis,
    Function1D,
    Graph,
    GraphErrors,
    Histogram,
    HistogramCollection,
    SparseHistogram,
)

__all__ = [
    "write_histogram",
    "write_graph",
    "write_function",
    "write_results",
    "read_results",
]


@contextmanager
def open_group(out, mode="a"):
    """Yields an HDF5 group from a file path or an existing group.

    Parameters
    ----------
    out : Union[str, h5py.Group]
        Path to an HDF5 file or open HDF5 group
    mode : str, default 'a'
        Mode used to open the file, if a path is provided
    """
    if isinstance(out, h5py.Group):
        yield out
    else:
        with h5py.File(out, mode) as out_file:
            yield out_file


def replace_group(group, name):
    """Creates a sub-group, replacing any existing object with the same name."""
    if name in group:
        del group[name]

    return group.create_group(name)


def write_axes(group, axes):
    """Stores the bin edges and titles of a list of axes."""
    for i, axis in enumerate(axes):
        dset = group.create_dataset(f"edges_{i}", data=axis.edges)
        dset.attrs["title"] = axis.title
        dset.attrs["name"] = axis.name


def read_axes(group):
    """Rebuilds the list of axes stored in a group."""
    axes = []
    i = 0
    while f"edges_{i}" in group:
        dset = group[f"edges_{i}"]
        edges = dset[:]
        axes.append(
            Axis(
                len(edges) - 1,
                edges=edges,
                name=dset.attrs["name"],
                title=dset.attrs["title"],
            )
        )
        i += 1

    return axes


def write_histogram(group, hist):
    """Stores a dense or sparse histogram.

    Parameters
    ----------
    group : h5py.Group
        Parent group
    hist : Union[Histogram, SparseHistogram]
        Histogram to store

    Returns
    -------
    h5py.Group
        Group holding the histogram
    """
    hist_group = replace_group(group, hist.name)
    hist_group.attrs["type"] = type(hist).__name__
    hist_group.attrs["title"] = hist.title
    hist_group.attrs["entries"] = hist.entries
    write_axes(hist_group, hist.axes)

    if isinstance(hist, SparseHistogram):
        bins, values = hist.filled_bins()
        compression = "gzip" if len(values) else None
        hist_group.create_dataset("bins", data=bins, compression=compression)
        hist_group.create_dataset("values", data=values, compression=compression)
        hist_group.create_dataset("fills", data=hist.bin_fills(), compression=compression)
    else:
        hist_group.attrs["stats"] = hist.stats
        hist_group.create_dataset("counts", data=hist.counts, compression="gzip")
        hist_group.create_dataset("fills", data=hist.fills, compression="gzip")

    return hist_group


def write_graph(group, graph):
    """Stores a graph, with or without errors.

    Parameters
    ----------
    group : h5py.Group
        Parent group
    graph : Union[Graph, GraphErrors]
        Graph to store

    Returns
    -------
    h5py.Group
        Group holding the graph
    """
    graph_group = replace_group(group, graph.name)
    graph_group.attrs["type"] = type(graph).__name__
    graph_group.attrs["title"] = graph.title
    graph_group.attrs["x_title"] = graph.x_title
    graph_group.attrs["y_title"] = graph.y_title
    graph_group.create_dataset("x", data=graph.x)
    graph_group.create_dataset("y", data=graph.y)
    if isinstance(graph, GraphErrors):
        graph_group.create_dataset("ex", data=graph.ex)
        graph_group.create_dataset("ey", data=graph.ey)

    return graph_group


def write_function(group, function):
    """Stores the parameters of a function.

    Parameters
    ----------
    group : h5py.Group
        Parent group
    function : Function1D
        Function to store

    Returns
    -------
    h5py.Group
        Group holding the function
    """
    func_group = replace_group(group, function.name)
    func_group.attrs["type"] = "Function1D"
    func_group.attrs["expression"] = function.expression
    func_group.attrs["low"] = function.low
    func_group.attrs["high"] = function.high
    func_group.attrs["chi2"] = function.chi2
    func_group.attrs["ndf"] = function.ndf
    func_group.create_dataset("params", data=function.params)
    func_group.create_dataset("errors", data=function.errors)

    return func_group


def write_object(group, name, obj):
    """Stores one object of any supported type under a name."""
    if isinstance(obj, (Histogram, SparseHistogram)):
        write_histogram(group, obj)
    elif isinstance(obj, Graph):
        write_graph(group, obj)
    elif isinstance(obj, Function1D):
        write_function(group, obj)
    elif isinstance(obj, HistogramCollection):
        sub_group = replace_group(group, name)
        sub_group.attrs["title"] = obj.title
        for hist in obj:
            write_histogram(sub_group, hist)
    elif isinstance(obj, dict):
        sub_group = replace_group(group, name)
        for key, value in obj.items():
            write_object(sub_group, key, value)
    elif isinstance(obj, (list, tuple)):
        sub_group = replace_group(group, name)
        for value in obj:
            write_object(sub_group, value.name, value)
    else:
        if name in group:
            del group[name]
        group.create_dataset(name, data=np.asarray(obj))


def write_results(out, results, mode="a"):
    """Stores a nested dictionary of QA products.

    Parameters
    ----------
    out : Union[str, h5py.Group]
        Path to an HDF5 file or open HDF5 group
    results : dict
        Nested dictionary of histograms, graphs, functions or arrays
    mode : str, default 'a'
        Mode used to open the file, if a path is provided
    """
    with open_group(out, mode) as group:
        for key, value in results.items():
            write_object(group, key, value)


def read_group(group):
    """Recursively converts a group into a dictionary of arrays."""
    result = dict(group.attrs)
    for key, item in group.items():
        if isinstance(item, h5py.Group):
            result[key] = read_group(item)
        else:
            result[key] = item[()]

    return result


def read_results(path, key=None):
    """Loads QA products from an HDF5 file as a nested dictionary.

    Groups which hold one object are loaded as a dictionary of their
    attributes (`type`, `title`, ...) and datasets (`counts`, `x`, ...).

    Parameters
    ----------
    path : str
        Path to the HDF5 file
    key : str, optional
        Path of the group to load within the file. Defaults to the root

    Returns
    -------
    dict
        Nested dictionary of attributes and arrays
    """
    with h5py.File(path, "r") as in_file:
        group = in_file if key is None else in_file[key]
        return read_group(group)


def read_histogram(group):
    """Rebuilds a histogram from its group.

    Parameters
    ----------
    group : h5py.Group
        Group holding the histogram

    Returns
    -------
    Union[Histogram, SparseHistogram]
        Rebuilt histogram
    """
    axes = read_axes(group)
    name = group.name.split("/")[-1]
    fills = group["fills"][:] if "fills" in group else None
    if group.attrs["type"] == "SparseHistogram":
        hist = SparseHistogram(name, group.attrs["title"], axes)
        hist.set_filled_bins(
            group["bins"][:], group["values"][:], group.attrs["entries"], fills
        )
        return hist

    hist = Histogram(
        name,
        group.attrs["title"],
        axes,
        group["counts"][:],
        group.attrs["entries"],
        fills,
    )
    hist.set_stats(bool(group.attrs["stats"]))

    return hist
