"""Trace, per-chain density and interval plots for posterior draws."""

from __future__ import annotations

from typing import Optional, Sequence

import pandas as pd
import plotly.express as px

from .save_config import PlotSaveDestinations, save_or_show

PARAMETERS_PER_FIG = 6


def _long_draws(draws: pd.DataFrame, columns: Optional[Sequence[str]]) -> pd.DataFrame:
    selected = draws[list(columns)] if columns is not None else draws
    long = selected.reset_index().melt(id_vars=["chain", "draw"], var_name="parameter", value_name="value")
    long["chain"] = long["chain"].astype(str)
    return long


def _chunks(columns: Sequence[str], size: int) -> list[list[str]]:
    return [list(columns[start : start + size]) for start in range(0, len(columns), size)]


def plot_traces(
    draws: pd.DataFrame,
    title: str,
    columns: Optional[Sequence[str]] = None,
    save_to: Optional[PlotSaveDestinations] = None,
) -> None:
    """Draw value against iteration, one line per chain and one row per parameter."""
    names = list(columns) if columns is not None else list(draws.columns)
    if draws.empty or not names:
        return

    chunks = _chunks(names, PARAMETERS_PER_FIG)
    for chunk_idx, chunk in enumerate(chunks, start=1):
        long = _long_draws(draws, chunk)
        fig = px.line(
            long,
            x="draw",
            y="value",
            color="chain",
            facet_row="parameter",
            title=title if len(chunks) == 1 else f"{title} ({chunk_idx}/{len(chunks)})",
            labels={"draw": "Iteration", "value": ""},
            height=max(300, 180 * len(chunk)),
        )
        fig.update_yaxes(matches=None)
        fig.for_each_annotation(lambda annotation: annotation.update(text=annotation.text.split("=", 1)[-1]))
        destination = save_to.child(f"part{chunk_idx}") if save_to and len(chunks) > 1 else save_to
        save_or_show(fig, destination)


def plot_densities(
    draws: pd.DataFrame,
    title: str,
    columns: Optional[Sequence[str]] = None,
    bins: int = 40,
    save_to: Optional[PlotSaveDestinations] = None,
) -> None:
    """Overlay per-chain posterior densities; chains that disagree signal poor mixing."""
    names = list(columns) if columns is not None else list(draws.columns)
    if draws.empty or not names:
        return

    chunks = _chunks(names, PARAMETERS_PER_FIG)
    for chunk_idx, chunk in enumerate(chunks, start=1):
        long = _long_draws(draws, chunk)
        fig = px.histogram(
            long,
            x="value",
            color="chain",
            facet_col="parameter",
            facet_col_wrap=3,
            histnorm="probability density",
            barmode="overlay",
            nbins=bins,
            opacity=0.5,
            title=title if len(chunks) == 1 else f"{title} ({chunk_idx}/{len(chunks)})",
        )
        fig.update_xaxes(matches=None)
        fig.update_yaxes(matches=None)
        fig.for_each_annotation(lambda annotation: annotation.update(text=annotation.text.split("=", 1)[-1]))
        destination = save_to.child(f"part{chunk_idx}") if save_to and len(chunks) > 1 else save_to
        save_or_show(fig, destination)


def plot_intervals(
    summary: pd.DataFrame,
    title: str,
    save_to: Optional[PlotSaveDestinations] = None,
) -> None:
    """Forest plot of posterior means with their HDI bounds from an ``az.summary`` table."""
    if summary.empty:
        return
    hdi_columns = [column for column in summary.columns if str(column).startswith("hdi_")]
    if len(hdi_columns) != 2:
        raise ValueError("Summary table must carry exactly two HDI columns.")
    lower_col, upper_col = sorted(hdi_columns, key=lambda column: float(str(column)[4:].rstrip("%")))

    df = pd.DataFrame(
        {
            "parameter": [str(label) for label in summary.index],
            "mean": summary["mean"].to_numpy(dtype=float),
            "lower": summary[lower_col].to_numpy(dtype=float),
            "upper": summary[upper_col].to_numpy(dtype=float),
        }
    ).iloc[::-1]

    fig = px.scatter(
        df,
        x="mean",
        y="parameter",
        error_x=df["upper"] - df["mean"],
        error_x_minus=df["mean"] - df["lower"],
        title=title,
        labels={"mean": f"Posterior mean ({lower_col[4:]}–{upper_col[4:]} HDI)", "parameter": "Parameter"},
    )
    fig.add_vline(x=0.0, line_dash="dot", line_color="grey")
    save_or_show(fig, save_to)


__all__ = ["plot_densities", "plot_intervals", "plot_traces"]
