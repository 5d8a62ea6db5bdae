"""
Figures to inspect a Moran's I analysis. These are statistical plots, not
maps.
"""

import matplotlib.pyplot as plt
import numpy as np

from spatialcorr.moran import _deviations
from spatialcorr.weights import SpatialWeights, spatial_lag


def _get_ax(ax, figsize):
    if ax is None:
        fig, ax = plt.subplots(figsize=figsize)
    else:
        fig = ax.figure
    return fig, ax


def plot_null_distribution(result, ax=None, bins=50, figsize=None, kwargs_hist=None):
    """
    Histogram of the simulated statistics, with the observed value marked.

    Parameters
    ----------
    result: MoranResult or PermutationResult
    ax: matplotlib Axes, optional
        Axes to draw on. A new figure is created if None.
    bins: int
        Number of histogram bins.
    figsize: tuple of two floats, optional
    kwargs_hist: dict, optional
        Keyword arguments forwarded to ``ax.hist``.

    Returns
    -------
    fig: matplotlib.figure.Figure
    ax: matplotlib.axes.Axes
    """
    # Both result types carry the simulations; the observed value differs in name.
    observed = getattr(result, "I", None)
    if observed is None:
        observed = result.observed
    p_value = getattr(result, "p_sim", None)
    if p_value is None:
        p_value = result.p_value

    kwargs_hist = {} if kwargs_hist is None else dict(kwargs_hist)
    kwargs_hist.setdefault("color", "lightgray")
    kwargs_hist.setdefault("edgecolor", "gray")

    fig, ax = _get_ax(ax, figsize)
    ax.hist(result.simulations, bins=bins, **kwargs_hist)
    ax.axvline(observed, color="firebrick", label=f"observed I = {observed:.3f}")
    ax.set_xlabel("Moran's I")
    ax.set_ylabel("count")
    ax.set_title(f"{result.simulations.size} permutations, p = {p_value:.4f}")
    ax.legend()
    return fig, ax


def moran_scatterplot(values, weights: SpatialWeights, ax=None, figsize=None):
    """
    Moran scatterplot: standardized values against their spatial lag.

    With row-standardized weights the slope of the fitted line equals
    Moran's I.

    Parameters
    ----------
    values: array-like of float
    weights: SpatialWeights
    ax: matplotlib Axes, optional
    figsize: tuple of two floats, optional

    Returns
    -------
    fig: matplotlib.figure.Figure
    ax: matplotlib.axes.Axes
    """
    # Deviations are scaled and checked for zero variance; see moran_i.
    z = _deviations(values, weights)
    z = z / z.std()
    lag = spatial_lag(weights, z)
    slope, intercept = np.polyfit(z, lag, 1)

    fig, ax = _get_ax(ax, figsize)
    ax.scatter(z, lag, s=12, color="steelblue")
    line_x = np.array([z.min(), z.max()])
    ax.plot(line_x, intercept + slope * line_x, color="firebrick", label=f"slope = {slope:.3f}")
    ax.axhline(0.0, color="gray", linewidth=0.5)
    ax.axvline(0.0, color="gray", linewidth=0.5)
    ax.set_xlabel("standardized value")
    ax.set_ylabel("spatial lag")
    ax.legend()
    return fig, ax
