"""Flattening posterior draws and turning them into probability statements."""

from __future__ import annotations

from dataclasses import dataclass
from itertools import product
from typing import Dict, Optional, Sequence, cast

import numpy as np
import pandas as pd
import xarray as xr
from arviz import InferenceData


@dataclass(frozen=True)
class IntervalSummary:
    """Point estimates and an equal-tailed credible interval for one quantity."""

    mean: float
    median: float
    lower: float
    upper: float


def posterior_group(idata: InferenceData, group: str = "posterior") -> xr.Dataset:
    """Return an InferenceData group, failing loudly when it is absent."""
    dataset = getattr(idata, group, None)
    if dataset is None:
        raise ValueError(f"InferenceData has no '{group}' group.")
    return cast(xr.Dataset, dataset)


def draws_frame(
    idata: InferenceData,
    var_names: Optional[Sequence[str]] = None,
    group: str = "posterior",
) -> pd.DataFrame:
    """Flatten draws into one row per (chain, draw) and one column per scalar parameter.

    Vector-valued variables expand to ``name[label]`` columns using the variable's
    coordinate labels.
    """
    dataset = posterior_group(idata, group)
    names = list(var_names) if var_names is not None else [str(name) for name in dataset.data_vars]

    columns: Dict[str, np.ndarray] = {}
    index: Optional[pd.MultiIndex] = None
    for name in names:
        if name not in dataset:
            raise ValueError(f"Variable '{name}' not found in the '{group}' group.")
        stacked = dataset[name].stack(sample=("chain", "draw"))
        extra_dims = [dim for dim in stacked.dims if dim != "sample"]
        stacked = stacked.transpose("sample", *extra_dims)
        values = np.asarray(stacked.values, dtype=float)

        if index is None:
            index = pd.MultiIndex.from_arrays(
                [np.asarray(stacked["chain"].values), np.asarray(stacked["draw"].values)],
                names=["chain", "draw"],
            )

        if not extra_dims:
            columns[name] = values
            continue
        flat = values.reshape(values.shape[0], -1)
        labels = product(*(stacked[dim].values for dim in extra_dims))
        for position, label in enumerate(labels):
            columns[f"{name}[{','.join(str(part) for part in label)}]"] = flat[:, position]

    return pd.DataFrame(columns, index=index)


def probability_positive(draws: pd.DataFrame, column: str) -> float:
    """Posterior probability that ``column`` is strictly greater than zero."""
    if column not in draws:
        raise ValueError(f"Column '{column}' not present in the draws.")
    return float((draws[column].to_numpy(dtype=float) > 0).mean())


def probability_greater(draws: pd.DataFrame, first: str, second: str) -> float:
    """Posterior probability that ``first`` exceeds ``second`` draw by draw."""
    for column in (first, second):
        if column not in draws:
            raise ValueError(f"Column '{column}' not present in the draws.")
    return float((draws[first].to_numpy(dtype=float) > draws[second].to_numpy(dtype=float)).mean())


def interval(values: np.ndarray, credible_interval: float = 0.90) -> IntervalSummary:
    """Summarise a vector of draws with mean, median and an equal-tailed interval."""
    if not 0 < credible_interval < 1:
        raise ValueError("credible_interval must fall within (0, 1).")
    array = np.asarray(values, dtype=float).ravel()
    if array.size == 0:
        raise ValueError("Cannot summarise an empty set of draws.")
    tail = (1.0 - credible_interval) / 2.0
    lower, upper = np.quantile(array, [tail, 1.0 - tail])
    return IntervalSummary(
        mean=float(array.mean()),
        median=float(np.median(array)),
        lower=float(lower),
        upper=float(upper),
    )


__all__ = [
    "IntervalSummary",
    "draws_frame",
    "interval",
    "posterior_group",
    "probability_greater",
    "probability_positive",
]
