"""Filtering, deduplication and rescaling applied before model fitting."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Literal, Mapping, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from .config import RESCALED_SUFFIX, SPECIMENS
from .helpers import drop_incomplete, normalize_label, require_columns

RescaleMethod = Literal["standardize", "center", "two_sd"]
RESCALE_METHODS: Tuple[RescaleMethod, ...] = ("standardize", "center", "two_sd")


def deduplicate(frame: pd.DataFrame, id_column: str) -> pd.DataFrame:
    """Keep the first record for every identifier so no unit is counted twice."""
    require_columns(frame, [id_column])
    deduped = frame.drop_duplicates(subset=id_column, keep="first")
    dropped = len(frame) - len(deduped)
    if dropped:
        print(f"[datahub] Dropped {dropped} duplicate record(s) by '{id_column}'.")
    return deduped


def filter_specimens(
    frame: pd.DataFrame,
    species: Optional[str] = None,
    area: Optional[str] = None,
) -> pd.DataFrame:
    """Select one species/area, drop unusable rows and deduplicate by specimen id."""
    require_columns(frame, SPECIMENS["required"], table="specimens")
    selected = frame
    if species is not None:
        wanted = normalize_label(species)
        selected = selected[selected["species"].map(normalize_label) == wanted]
    if area is not None:
        wanted = normalize_label(area)
        selected = selected[selected["area"].map(normalize_label) == wanted]

    selected = drop_incomplete(selected, SPECIMENS["numeric"])
    selected = selected[(selected["age"] >= 0) & (selected["length"] > 0)]
    selected = deduplicate(selected, SPECIMENS["id_column"])

    if selected.empty:
        raise ValueError(f"No specimens left after filtering (species={species!r}, area={area!r}).")
    return selected.reset_index(drop=True)


@dataclass(frozen=True)
class Rescaling:
    """Per-column center and scale so new data can be put on the fitted scale."""

    method: RescaleMethod
    centers: Dict[str, float] = field(default_factory=dict)
    scales: Dict[str, float] = field(default_factory=dict)

    @property
    def columns(self) -> Tuple[str, ...]:
        return tuple(self.centers)

    def apply(self, frame: pd.DataFrame) -> pd.DataFrame:
        """Return a copy of ``frame`` with a rescaled ``<column>_z`` for every stored column."""
        require_columns(frame, self.columns)
        result = frame.copy()
        for column in self.columns:
            result[f"{column}{RESCALED_SUFFIX}"] = (
                result[column].astype(float) - self.centers[column]
            ) / self.scales[column]
        return result

    def invert(self, column: str, values: np.ndarray) -> np.ndarray:
        """Map rescaled values of ``column`` back to the original units."""
        if column not in self.centers:
            raise ValueError(f"Column '{column}' was not rescaled.")
        return np.asarray(values, dtype=float) * self.scales[column] + self.centers[column]


def rescale(
    frame: pd.DataFrame,
    columns: Sequence[str],
    method: RescaleMethod = "standardize",
) -> Tuple[pd.DataFrame, Rescaling]:
    """Center and/or scale ``columns``; originals are kept alongside ``<column>_z``."""
    if method not in RESCALE_METHODS:
        raise ValueError(f"Unknown rescale method '{method}'. Available: {list(RESCALE_METHODS)}")
    require_columns(frame, columns)

    centers: Dict[str, float] = {}
    scales: Dict[str, float] = {}
    for column in columns:
        values = frame[column].to_numpy(dtype=float)
        if not np.all(np.isfinite(values)):
            raise ValueError(f"Column '{column}' contains non-finite entries.")
        centers[column] = float(values.mean())
        if method == "center":
            scales[column] = 1.0
            continue
        sd = float(values.std(ddof=1)) if values.size > 1 else 0.0
        if sd <= 0:
            raise ValueError(f"Column '{column}' has zero variance and cannot be scaled.")
        scales[column] = 2.0 * sd if method == "two_sd" else sd

    rescaling = Rescaling(method=method, centers=centers, scales=scales)
    return rescaling.apply(frame), rescaling


def make_grid(
    frame: pd.DataFrame,
    columns: Sequence[str],
    points: int = 25,
    fixed: Optional[Mapping[str, float]] = None,
) -> pd.DataFrame:
    """Build a Cartesian covariate grid spanning the observed range of ``columns``.

    Columns named in ``fixed`` are pinned to the supplied value instead of varying.
    """
    if points < 2:
        raise ValueError("A grid needs at least two points per column.")
    pinned = dict(fixed or {})
    varying = [column for column in columns if column not in pinned]
    require_columns(frame, varying)

    axes = []
    for column in varying:
        values = frame[column].to_numpy(dtype=float)
        axes.append(np.linspace(np.nanmin(values), np.nanmax(values), points))

    if axes:
        mesh = np.meshgrid(*axes, indexing="ij")
        grid = pd.DataFrame({column: axis.ravel() for column, axis in zip(varying, mesh)})
    else:
        grid = pd.DataFrame(index=[0])
    for column, value in pinned.items():
        grid[column] = float(value)
    return grid[[*varying, *pinned]]


__all__ = [
    "RESCALE_METHODS",
    "RescaleMethod",
    "Rescaling",
    "deduplicate",
    "filter_specimens",
    "make_grid",
    "rescale",
]
