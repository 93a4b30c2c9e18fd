"""Base class shared by the growth-curve and regression fitters.

Subclasses build a PyMC model in ``fit`` and hand it to ``_sample``; this class
keeps the resulting model and InferenceData and exposes the common read-only
views on them: flattened draws, summaries, convergence reports, posterior
predictive simulation and PSIS-LOO.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Mapping, Optional, Sequence

import arviz as az
import numpy as np
import pandas as pd
import pymc as pm
from arviz import InferenceData

from .diagnostics import ConvergenceReport, check_convergence, summarize
from .samples import draws_frame
from .sampling import SamplerConfig


class BayesianFitter:
    """Holds one fitted PyMC model and its posterior."""

    #: Free parameters reported by ``samples``/``summary``/``diagnostics``.
    parameter_names: Sequence[str] = ()
    #: Name of the observed variable in the model.
    observed_name: str = "y"

    def __init__(self, sampler: Optional[SamplerConfig] = None, credible_interval: float = 0.90) -> None:
        if not 0 < credible_interval < 1:
            raise ValueError("credible_interval must fall within (0, 1).")
        self.sampler = sampler or SamplerConfig()
        self.credible_interval = credible_interval
        self._model: Optional[pm.Model] = None
        self._idata: Optional[InferenceData] = None

    # ------------------------------------------------------------------
    # Lifecycle

    def _sample(self, model: pm.Model) -> None:
        self._model = model
        self._idata = self.sampler.sample(model, log_likelihood=True)

    def _require_fit(self) -> tuple[pm.Model, InferenceData]:
        if self._model is None or self._idata is None:
            raise RuntimeError(f"{type(self).__name__}.fit() must be called first.")
        return self._model, self._idata

    @property
    def is_fitted(self) -> bool:
        return self._idata is not None

    @property
    def model(self) -> pm.Model:
        return self._require_fit()[0]

    @property
    def idata(self) -> InferenceData:
        return self._require_fit()[1]

    # ------------------------------------------------------------------
    # Posterior views

    def samples(self, var_names: Optional[Sequence[str]] = None) -> pd.DataFrame:
        """Posterior draws, one row per draw and one column per parameter."""
        _, idata = self._require_fit()
        return draws_frame(idata, var_names or self._present(idata, self.parameter_names))

    def summary(self) -> pd.DataFrame:
        _, idata = self._require_fit()
        return summarize(idata, self._present(idata, self.parameter_names), self.credible_interval)

    def diagnostics(self) -> ConvergenceReport:
        _, idata = self._require_fit()
        return check_convergence(idata, self._present(idata, self.parameter_names))

    def loo(self) -> az.ELPDData:
        """PSIS-LOO estimate of out-of-sample predictive accuracy."""
        _, idata = self._require_fit()
        return az.loo(idata)

    def posterior_predictive(self) -> pd.DataFrame:
        """Replicated observations for the fitted rows, one column per row."""
        model, idata = self._require_fit()
        if getattr(idata, "posterior_predictive", None) is None:
            with model:
                pm.sample_posterior_predictive(
                    idata,
                    var_names=[self.observed_name],
                    extend_inferencedata=True,
                    random_seed=self.sampler.random_seed,
                    progressbar=False,
                )
        return draws_frame(idata, [self.observed_name], group="posterior_predictive")

    def observed(self) -> np.ndarray:
        _, idata = self._require_fit()
        observed = getattr(idata, "observed_data", None)
        if observed is None or self.observed_name not in observed:
            raise RuntimeError("InferenceData does not carry the observed response.")
        return np.asarray(observed[self.observed_name].values, dtype=float)

    # ------------------------------------------------------------------
    # Helpers for subclasses

    def _predict(self, values: Mapping[str, np.ndarray], restore: Mapping[str, np.ndarray]) -> pd.DataFrame:
        """Posterior-predictive draws for swapped-in data containers."""
        model, idata = self._require_fit()
        with self._swapped_data(model, values, restore):
            with model:
                predictions = pm.sample_posterior_predictive(
                    idata,
                    var_names=[self.observed_name],
                    predictions=True,
                    random_seed=self.sampler.random_seed,
                    progressbar=False,
                )
        return draws_frame(predictions, [self.observed_name], group="predictions")

    @staticmethod
    @contextmanager
    def _swapped_data(
        model: pm.Model,
        values: Mapping[str, np.ndarray],
        restore: Mapping[str, np.ndarray],
    ) -> Iterator[None]:
        # The observed containers must be restored so later checks see the fitted rows again.
        with model:
            pm.set_data(dict(values))
        try:
            yield
        finally:
            with model:
                pm.set_data(dict(restore))

    @staticmethod
    def _present(idata: InferenceData, names: Sequence[str]) -> list[str]:
        posterior = getattr(idata, "posterior", None)
        if posterior is None:
            return list(names)
        return [name for name in names if name in posterior]


__all__ = ["BayesianFitter"]
