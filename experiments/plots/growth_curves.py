"""Fitted von Bertalanffy curves drawn over the observed lengths-at-age."""

from __future__ import annotations

from typing import Mapping, Optional

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from .save_config import PlotSaveDestinations, save_or_show


def plot_growth_curves(
    specimens: pd.DataFrame,
    curves: Mapping[str, pd.DataFrame],
    title: str,
    save_to: Optional[PlotSaveDestinations] = None,
) -> None:
    """Scatter the data and overlay one mean curve plus credible band per error model."""
    if specimens.empty or not curves:
        return

    fig = px.scatter(
        specimens,
        x="age",
        y="length",
        opacity=0.5,
        title=title,
        labels={"age": "Age (years)", "length": "Length"},
    )
    fig.data[0].name = "observed"
    fig.data[0].showlegend = True

    palette = px.colors.qualitative.Plotly
    for idx, (name, curve) in enumerate(curves.items()):
        color = palette[(idx + 1) % len(palette)]
        band = pd.concat([curve["age"], curve["age"].iloc[::-1]], ignore_index=True)
        edges = pd.concat([curve["upper"], curve["lower"].iloc[::-1]], ignore_index=True)
        fig.add_trace(
            go.Scatter(
                x=band,
                y=edges,
                fill="toself",
                fillcolor=color,
                opacity=0.2,
                line=dict(width=0),
                hoverinfo="skip",
                name=f"{name} band",
                legendgroup=name,
                showlegend=False,
            )
        )
        fig.add_trace(
            go.Scatter(
                x=curve["age"],
                y=curve["mean"],
                mode="lines",
                line=dict(color=color, width=2),
                name=name,
                legendgroup=name,
            )
        )
    fig.update_layout(yaxis=dict(rangemode="tozero"), legend_title_text="Error model")
    save_or_show(fig, save_to)


__all__ = ["plot_growth_curves"]
