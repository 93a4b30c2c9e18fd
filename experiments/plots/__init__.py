"""Plotting utilities for experiment results."""

from .diagnostics import plot_densities, plot_intervals, plot_traces
from .growth_curves import plot_growth_curves
from .predictive import plot_ppc
from .save_config import PlotSaveConfig, PlotSaveDestinations, save_or_show

__all__ = [
    "plot_densities",
    "plot_growth_curves",
    "plot_intervals",
    "plot_ppc",
    "plot_traces",
    "PlotSaveConfig",
    "PlotSaveDestinations",
    "save_or_show",
]
