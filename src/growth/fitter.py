"""Von Bertalanffy growth fits and the posterior views built on them."""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

import numpy as np
import pandas as pd

from src.posterior.fitter import BayesianFitter
from src.posterior.sampling import SamplerConfig

from .builders import (
    ERROR_MODELS,
    GROWTH_PARAMETERS,
    ErrorModel,
    GrowthDataset,
    GrowthPriors,
    build_growth_dataset,
    build_growth_model,
    von_bertalanffy,
)


class GrowthFitter(BayesianFitter):
    """Fits length-at-age under one observation-error assumption."""

    parameter_names = GROWTH_PARAMETERS
    observed_name = "length"

    def __init__(
        self,
        error_model: ErrorModel = "normal",
        priors: Optional[GrowthPriors] = None,
        sampler: Optional[SamplerConfig] = None,
        credible_interval: float = 0.90,
    ) -> None:
        if error_model not in ERROR_MODELS:
            raise ValueError(f"Unknown error model '{error_model}'. Available: {list(ERROR_MODELS)}")
        super().__init__(sampler=sampler, credible_interval=credible_interval)
        self.error_model = error_model
        self.priors = priors or GrowthPriors()
        self._dataset: Optional[GrowthDataset] = None

    def fit(self, frame: pd.DataFrame) -> "GrowthFitter":
        """Fit the growth model to a filtered, deduplicated specimen table."""
        dataset = build_growth_dataset(frame)
        model = build_growth_model(dataset, self.priors, self.error_model)
        self._sample(model)
        self._dataset = dataset
        return self

    @property
    def dataset(self) -> GrowthDataset:
        self._require_fit()
        if self._dataset is None:
            raise RuntimeError("GrowthFitter has a posterior but no fitted dataset.")
        return self._dataset

    def curve(self, ages: Optional[Sequence[float]] = None, points: int = 100) -> pd.DataFrame:
        """Posterior mean curve with an equal-tailed credible band.

        ``ages`` defaults to an evenly spaced grid from zero to the oldest specimen.
        """
        draws = self.samples(["L_inf", "k", "t0"])
        grid = self._age_grid(ages, points)
        curves = von_bertalanffy(
            grid[np.newaxis, :],
            draws["L_inf"].to_numpy()[:, np.newaxis],
            draws["k"].to_numpy()[:, np.newaxis],
            draws["t0"].to_numpy()[:, np.newaxis],
        )
        tail = (1.0 - self.credible_interval) / 2.0
        lower, upper = np.quantile(curves, [tail, 1.0 - tail], axis=0)
        return pd.DataFrame(
            {
                "age": grid,
                "mean": curves.mean(axis=0),
                "lower": lower,
                "upper": upper,
            }
        )

    def predict(self, ages: Sequence[float]) -> pd.DataFrame:
        """Posterior-predictive lengths, one column per requested age."""
        dataset = self.dataset
        grid = np.asarray(ages, dtype=float)
        if grid.ndim != 1 or grid.size == 0:
            raise ValueError("ages must be a non-empty one-dimensional sequence.")
        predictions = self._predict(
            {"age": grid, "observed_length": np.ones_like(grid)},
            {"age": dataset.ages, "observed_length": dataset.lengths},
        )
        predictions.columns = [f"length[age={age:g}]" for age in grid]
        return predictions

    def _age_grid(self, ages: Optional[Sequence[float]], points: int) -> np.ndarray:
        if ages is not None:
            grid = np.asarray(ages, dtype=float)
            if grid.ndim != 1 or grid.size == 0:
                raise ValueError("ages must be a non-empty one-dimensional sequence.")
            return grid
        if points < 2:
            raise ValueError("A curve needs at least two ages.")
        return np.linspace(0.0, float(self.dataset.ages.max()), points)


def fit_error_models(
    frame: pd.DataFrame,
    error_models: Iterable[ErrorModel] = ERROR_MODELS,
    priors: Optional[GrowthPriors] = None,
    sampler: Optional[SamplerConfig] = None,
    credible_interval: float = 0.90,
) -> dict[str, GrowthFitter]:
    """Fit the same specimens once per observation-error assumption."""
    fits: dict[str, GrowthFitter] = {}
    for error_model in error_models:
        print(f"[growth] Fitting von Bertalanffy curve with {error_model} errors on {len(frame)} specimens.")
        fitter = GrowthFitter(
            error_model=error_model,
            priors=priors,
            sampler=sampler,
            credible_interval=credible_interval,
        )
        fits[error_model] = fitter.fit(frame)
    return fits


__all__ = ["GrowthFitter", "fit_error_models"]
