"""Out-of-sample model comparison with PSIS-LOO."""

from __future__ import annotations

from typing import Mapping

import arviz as az
import pandas as pd

from .fitter import BayesianFitter


def compare_models(fits: Mapping[str, BayesianFitter]) -> pd.DataFrame:
    """Rank fitted models by expected log predictive density (best first).

    Every model must have been fitted to the same observations; the returned table
    is ArviZ's comparison frame (``elpd_loo``, ``p_loo``, ``elpd_diff``, ``weight``...).
    """
    if len(fits) < 2:
        raise ValueError("At least two fitted models are required for a comparison.")
    sizes = {name: fitter.observed().size for name, fitter in fits.items()}
    if len(set(sizes.values())) != 1:
        raise ValueError(f"Models were fitted to different numbers of observations: {sizes}")
    comparison = az.compare({name: fitter.idata for name, fitter in fits.items()}, ic="loo")
    return pd.DataFrame(comparison)


def looic(fitter: BayesianFitter) -> float:
    """LOO information criterion on the deviance scale (-2 * elpd_loo)."""
    return float(-2.0 * fitter.loo().elpd_loo)


__all__ = ["compare_models", "looic"]
