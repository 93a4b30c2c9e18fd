"""Probability statements derived by arithmetic on posterior draws."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

import numpy as np
import pandas as pd

from src.posterior.samples import interval, probability_positive

from .fitter import RegressionFitter


@dataclass(frozen=True)
class RatioSummary:
    """Posterior summary of E[y | setting_a] / E[y | setting_b]."""

    mean: float
    median: float
    lower: float
    upper: float
    prob_greater_than_one: float


def coefficient_probabilities(fitter: RegressionFitter) -> pd.Series:
    """P(beta > 0) for every term, indexed by term label."""
    draws = fitter.samples(["beta"])
    probabilities = {
        label: probability_positive(draws, column) for label, column in fitter.coefficient_columns().items()
    }
    return pd.Series(probabilities, name="prob_positive")


def expected_ratio(
    fitter: RegressionFitter,
    setting_a: Mapping[str, float],
    setting_b: Mapping[str, float],
    credible_interval: float = 0.90,
) -> RatioSummary:
    """Compare expected responses at two covariate settings given in original units.

    Covariates omitted from a setting are held at their observed mean.
    """
    grid = pd.concat(
        [fitter.complete_setting(setting_a), fitter.complete_setting(setting_b)],
        ignore_index=True,
    )
    expected = fitter.expected(grid).to_numpy(dtype=float)
    denominator = expected[:, 1]
    if np.any(denominator == 0):
        raise ValueError("Expected response at setting_b is zero for some draws; the ratio is undefined.")
    ratio = expected[:, 0] / denominator

    summary = interval(ratio, credible_interval)
    return RatioSummary(
        mean=summary.mean,
        median=summary.median,
        lower=summary.lower,
        upper=summary.upper,
        prob_greater_than_one=float((ratio > 1.0).mean()),
    )


__all__ = ["RatioSummary", "coefficient_probabilities", "expected_ratio"]
