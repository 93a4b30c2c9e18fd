"""Posterior-predictive check overlay: observed response against replicated datasets."""

from __future__ import annotations

from typing import Optional

import numpy as np
import pandas as pd
import plotly.graph_objects as go

from .save_config import PlotSaveDestinations, save_or_show

REPLICATES_SHOWN = 50


def plot_ppc(
    observed: np.ndarray,
    replicated: pd.DataFrame,
    title: str,
    replicates: int = REPLICATES_SHOWN,
    bins: int = 30,
    random_seed: Optional[int] = None,
    save_to: Optional[PlotSaveDestinations] = None,
) -> None:
    """Overlay step histograms of a few replicated datasets on the observed one."""
    values = np.asarray(observed, dtype=float)
    if values.size == 0 or replicated.empty:
        return

    rng = np.random.default_rng(random_seed)
    draws = replicated.to_numpy(dtype=float)
    chosen = rng.choice(draws.shape[0], size=min(replicates, draws.shape[0]), replace=False)

    low = float(min(values.min(), draws[chosen].min()))
    high = float(max(values.max(), draws[chosen].max()))
    edges = np.linspace(low, high, bins + 1)
    centers = 0.5 * (edges[:-1] + edges[1:])

    fig = go.Figure()
    for position, row in enumerate(chosen):
        density, _ = np.histogram(draws[row], bins=edges, density=True)
        fig.add_trace(
            go.Scatter(
                x=centers,
                y=density,
                mode="lines",
                line=dict(shape="hvh", color="lightsteelblue", width=1),
                name="replicated",
                legendgroup="replicated",
                showlegend=position == 0,
            )
        )
    density, _ = np.histogram(values, bins=edges, density=True)
    fig.add_trace(
        go.Scatter(
            x=centers,
            y=density,
            mode="lines",
            line=dict(shape="hvh", color="black", width=3),
            name="observed",
        )
    )
    fig.update_layout(title=title, xaxis_title="Response", yaxis_title="Density")
    save_or_show(fig, save_to)


__all__ = ["plot_ppc"]
