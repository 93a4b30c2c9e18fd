"""Generalized linear regression fits with quadratic and interaction terms."""

from __future__ import annotations

from typing import Callable, Dict, Mapping, Optional, Sequence, Union

import numpy as np
import pandas as pd

from src.datahub.config import RESCALED_SUFFIX
from src.datahub.helpers import drop_incomplete, require_columns
from src.datahub.preprocess import RescaleMethod, Rescaling, rescale
from src.posterior.fitter import BayesianFitter
from src.posterior.sampling import SamplerConfig

from .builders import (
    FAMILIES,
    REGRESSION_PARAMETERS,
    Family,
    RegressionPriors,
    build_regression_model,
    inverse_link,
    validate_response,
)
from .terms import Terms

PPC_STATISTICS: Dict[str, Callable[[np.ndarray], np.ndarray]] = {
    "mean": lambda values: values.mean(axis=-1),
    "sd": lambda values: values.std(axis=-1, ddof=1),
    "min": lambda values: values.min(axis=-1),
    "max": lambda values: values.max(axis=-1),
}


class RegressionFitter(BayesianFitter):
    """Fits ``response ~ terms`` under the chosen family.

    Covariates are rescaled before fitting (``rescale_method=None`` keeps raw
    units); the stored ``Rescaling`` is reapplied to any new-data grid so the
    fitted coefficients see covariates on the scale they were estimated on.
    """

    parameter_names = REGRESSION_PARAMETERS
    observed_name = "response"

    def __init__(
        self,
        terms: Union[Terms, str],
        family: Family = "gaussian",
        response: str = "response",
        priors: Optional[RegressionPriors] = None,
        sampler: Optional[SamplerConfig] = None,
        rescale_method: Optional[RescaleMethod] = "standardize",
        credible_interval: float = 0.90,
    ) -> None:
        if family not in FAMILIES:
            raise ValueError(f"Unknown family '{family}'. Available: {list(FAMILIES)}")
        super().__init__(sampler=sampler, credible_interval=credible_interval)
        self.terms = Terms.parse(terms) if isinstance(terms, str) else terms
        self.family = family
        self.response = response
        self.priors = priors or RegressionPriors()
        self.rescale_method = rescale_method
        self._rescaling: Optional[Rescaling] = None
        self._reference: Dict[str, float] = {}
        self._design: Optional[pd.DataFrame] = None
        self._y: Optional[np.ndarray] = None

    # ------------------------------------------------------------------
    # Fitting

    def fit(self, frame: pd.DataFrame) -> "RegressionFitter":
        variables = self.terms.variables
        require_columns(frame, [*variables, self.response])
        clean = drop_incomplete(frame, [*variables, self.response])
        if clean.empty:
            raise ValueError("No complete rows available for the regression.")

        y = validate_response(clean[self.response].to_numpy(), self.family)
        self._reference = {name: float(clean[name].astype(float).mean()) for name in variables}
        if self.rescale_method is not None:
            _, self._rescaling = rescale(clean, variables, self.rescale_method)
        design = self.design_for(clean)

        model = build_regression_model(design, y, self.family, self.priors)
        self._sample(model)
        self._design = design
        self._y = y
        return self

    @property
    def rescaling(self) -> Optional[Rescaling]:
        return self._rescaling

    def design_for(self, grid: pd.DataFrame) -> pd.DataFrame:
        """Design matrix for covariates given in original units."""
        if self._rescaling is None:
            return self.terms.design(grid)
        return self.terms.design(self._rescaling.apply(grid), suffix=RESCALED_SUFFIX)

    def complete_setting(self, setting: Mapping[str, float]) -> pd.DataFrame:
        """One-row grid; covariates left out of ``setting`` sit at their observed mean."""
        self._require_fit()
        unknown = sorted(set(setting) - set(self._reference))
        if unknown:
            raise ValueError(f"Setting names covariates not in the model: {', '.join(unknown)}")
        row = {name: float(setting.get(name, mean)) for name, mean in self._reference.items()}
        return pd.DataFrame([row])

    # ------------------------------------------------------------------
    # Posterior quantities

    def coefficient_columns(self) -> Dict[str, str]:
        """Map each term label to its column in ``samples()``."""
        return {label: f"beta[{label}]" for label in self.terms.labels}

    def linear_predictor(self, grid: pd.DataFrame) -> np.ndarray:
        """Per-draw linear predictor on ``grid`` (draws x grid rows)."""
        draws = self.samples(["Intercept", "beta"])
        beta = draws[list(self.coefficient_columns().values())].to_numpy(dtype=float)
        X = self.design_for(grid).to_numpy(dtype=float)
        return draws["Intercept"].to_numpy(dtype=float)[:, np.newaxis] + beta @ X.T

    def expected(self, grid: pd.DataFrame) -> pd.DataFrame:
        """Per-draw expected response on ``grid``, one column per grid row."""
        mu = inverse_link(self.linear_predictor(grid), self.family)
        draws_index = self.samples(["Intercept"]).index
        return pd.DataFrame(mu, index=draws_index, columns=[f"mu[{idx}]" for idx in range(len(grid))])

    def predict(self, grid: pd.DataFrame) -> pd.DataFrame:
        """Posterior-predictive responses on ``grid``, one column per grid row."""
        self._require_fit()
        if self._design is None or self._y is None:
            raise RuntimeError("RegressionFitter has a posterior but no fitted design matrix.")
        X_new = self.design_for(grid).to_numpy(dtype=float)
        placeholder = np.zeros(X_new.shape[0], dtype=self._y.dtype)
        predictions = self._predict(
            {"X": X_new, "observed_response": placeholder},
            {"X": self._design.to_numpy(dtype=float), "observed_response": self._y},
        )
        predictions.columns = [f"response[{idx}]" for idx in range(X_new.shape[0])]
        return predictions

    def ppc_statistics(self, statistics: Sequence[str] = tuple(PPC_STATISTICS)) -> pd.DataFrame:
        """Posterior-predictive p-values P(T(y_rep) >= T(y)) for summary statistics."""
        unknown = [name for name in statistics if name not in PPC_STATISTICS]
        if unknown:
            raise ValueError(f"Unknown statistics {unknown}. Available: {list(PPC_STATISTICS)}")
        replicated = self.posterior_predictive().to_numpy(dtype=float)
        observed = self.observed()

        rows = []
        for name in statistics:
            statistic = PPC_STATISTICS[name]
            observed_value = float(statistic(observed))
            replicated_values = statistic(replicated)
            rows.append(
                {
                    "statistic": name,
                    "observed": observed_value,
                    "replicated_mean": float(np.mean(replicated_values)),
                    "p_value": float(np.mean(replicated_values >= observed_value)),
                }
            )
        return pd.DataFrame(rows).set_index("statistic")


__all__ = ["PPC_STATISTICS", "RegressionFitter"]
