"""Tools to draw the QA products."""

import numpy as np
import plotly.graph_objs as go
from plotly import subplots as psubplots

__all__ = ["efficiency_figure", "spectrum_figure", "scatter_graph"]


def scatter_graph(graph, name, color, symbol, errors=True, showlegend=True):
    """Converts a graph into a plotly scatter trace.

    Parameters
    ----------
    graph : Union[Graph, GraphErrors]
        Graph to draw
    name : str
        Name of the trace in the legend
    color : str
        Marker color
    symbol : str
        Marker symbol
    errors : bool, default True
        If `True` and the graph has errors, draw error bars
    showlegend : bool, default True
        Whether to show the trace in the legend

    Returns
    -------
    go.Scatter
        Scatter trace
    """
    error_x = error_y = None
    if errors and hasattr(graph, "ey"):
        error_x = {"type": "data", "array": graph.ex, "visible": True}
        error_y = {"type": "data", "array": graph.ey, "visible": True}

    return go.Scatter(
        x=graph.x,
        y=graph.y,
        mode="markers",
        name=name,
        legendgroup=name,
        showlegend=showlegend,
        marker={"color": color, "symbol": symbol, "size": 8},
        error_x=error_x,
        error_y=error_y,
    )


def efficiency_figure(
    pions, protons, thresholds, efficiencies, title=None, width=1024, height=768
):
    """Draws the pion and proton efficiencies and the likelihood thresholds
    as a function of momentum, one panel per electron efficiency.

    Parameters
    ----------
    pions : Dict[str, GraphErrors]
        Pion efficiency graphs, keyed by `eff{percent}`
    protons : Dict[str, GraphErrors]
        Proton efficiency graphs, keyed by `eff{percent}`
    thresholds : Dict[str, Graph]
        Threshold graphs, keyed by `eff{percent}`
    efficiencies : List[float]
        Electron efficiencies, one panel each (at most 6)
    title : str, optional
        Title of the figure
    width : int, default 1024
        Width of the figure in pixels
    height : int, default 768
        Height of the figure in pixels

    Returns
    -------
    go.Figure
        3 x 2 grid of panels
    """
    assert len(efficiencies) <= 6, "Can draw at most 6 electron efficiencies."
    fig = psubplots.make_subplots(
        rows=2,
        cols=3,
        subplot_titles=[f"{eff:.2f} Electron Efficiency" for eff in efficiencies],
    )

    styles = (
        (pions, "Pion Efficiency", "red", "circle", True),
        (protons, "Proton Efficiency", "blue", "square", True),
        (thresholds, "Thresholds", "black", "triangle-up", False),
    )
    for i, eff in enumerate(efficiencies):
        row, col = i // 3 + 1, i % 3 + 1
        key = f"eff{int(round(eff * 100))}"
        for graphs, name, color, symbol, errors in styles:
            trace = scatter_graph(graphs[key], name, color, symbol, errors, showlegend=i == 0)
            fig.add_trace(trace, row=row, col=col)

        fig.update_xaxes(title_text="p / GeV/c", row=row, col=col)
        fig.update_yaxes(title_text="Efficiency", range=[0.0, 1.0], row=row, col=col)

    fig.update_layout(
        title=title,
        template="plotly_white",
        width=width,
        height=height,
        legend={"x": 0.6, "y": 0.89},
    )

    return fig


def spectrum_figure(hist, log_x=False, log_z=False, colorscale="Viridis"):
    """Draws a two-dimensional histogram as a heatmap.

    Parameters
    ----------
    hist : Histogram
        Two-dimensional histogram
    log_x : bool, default False
        If `True`, use a logarithmic x axis
    log_z : bool, default False
        If `True`, draw the logarithm of the bin contents
    colorscale : str, default 'Viridis'
        Plotly colorscale

    Returns
    -------
    go.Figure
        Heatmap figure
    """
    assert hist.ndim == 2, "Can only draw a two-dimensional histogram as a heatmap."
    z = hist.contents.T
    if log_z:
        with np.errstate(divide="ignore"):
            z = np.where(z > 0, np.log10(np.where(z > 0, z, 1.0)), np.nan)

    heatmap = go.Heatmap(
        x=hist.x_axis.centers,
        y=hist.y_axis.centers,
        z=z,
        colorscale=colorscale,
        colorbar={"title": "log10(counts)" if log_z else "counts"},
    )
    fig = go.Figure(data=[heatmap])
    fig.update_layout(title=hist.title, template="plotly_white")
    fig.update_xaxes(title_text=hist.x_axis.title, type="log" if log_x else "linear")
    fig.update_yaxes(title_text=hist.y_axis.title)

    return fig
