"""Priors and PyMC model construction for generalized linear regression."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional, Tuple

import numpy as np
import pandas as pd
import pymc as pm

Family = Literal["gaussian", "poisson", "negative_binomial"]
FAMILIES: Tuple[Family, ...] = ("gaussian", "poisson", "negative_binomial")
LOG_LINK_FAMILIES: Tuple[Family, ...] = ("poisson", "negative_binomial")

REGRESSION_PARAMETERS: Tuple[str, ...] = ("Intercept", "beta", "sigma", "alpha")


@dataclass(frozen=True)
class ResolvedPriors:
    intercept_mu: float
    intercept_sigma: float
    coef_sigma: float
    noise_scale: float
    dispersion_scale: float


@dataclass(frozen=True)
class RegressionPriors:
    """Prior hyper-parameters for the regression.

    Any scale left as ``None`` is derived from the response, weakly informative in
    the spirit of auto-scaled defaults: on the identity link the intercept is
    centred on the mean response and scales are multiples of its SD; on the log
    link the intercept is centred on the log mean count.
    """

    intercept_mu: Optional[float] = None
    intercept_sigma: Optional[float] = None
    coef_sigma: Optional[float] = None
    noise_scale: Optional[float] = None
    dispersion_scale: float = 5.0

    def validate(self) -> None:
        scales = (self.intercept_sigma, self.coef_sigma, self.noise_scale, self.dispersion_scale)
        if any(scale is not None and scale <= 0 for scale in scales):
            raise ValueError("Prior scales must be strictly positive.")

    def resolve(self, family: Family, response: np.ndarray) -> ResolvedPriors:
        self.validate()
        y = np.asarray(response, dtype=float)
        if family in LOG_LINK_FAMILIES:
            default_mu = float(np.log(y.mean() + 0.5))
            default_intercept_sigma = 2.5
            default_coef_sigma = 1.0
        else:
            spread = float(y.std(ddof=1)) if y.size > 1 else 1.0
            spread = spread if spread > 0 else 1.0
            default_mu = float(y.mean())
            default_intercept_sigma = 2.5 * spread
            default_coef_sigma = 2.5 * spread
        noise_default = float(y.std(ddof=1)) if y.size > 1 else 1.0
        noise_default = noise_default if noise_default > 0 else 1.0
        return ResolvedPriors(
            intercept_mu=default_mu if self.intercept_mu is None else float(self.intercept_mu),
            intercept_sigma=default_intercept_sigma if self.intercept_sigma is None else float(self.intercept_sigma),
            coef_sigma=default_coef_sigma if self.coef_sigma is None else float(self.coef_sigma),
            noise_scale=noise_default if self.noise_scale is None else float(self.noise_scale),
            dispersion_scale=float(self.dispersion_scale),
        )


def validate_response(response: np.ndarray, family: Family) -> np.ndarray:
    """Check the response is usable for ``family``; counts come back as integers, the rest as floats."""
    if family not in FAMILIES:
        raise ValueError(f"Unknown family '{family}'. Available: {list(FAMILIES)}")
    y = np.asarray(response, dtype=float)
    if y.ndim != 1 or y.size == 0:
        raise ValueError("Response must be a non-empty one-dimensional array.")
    if not np.all(np.isfinite(y)):
        raise ValueError("Response contains non-finite entries.")
    if family in LOG_LINK_FAMILIES and (np.any(y < 0) or np.any(y != np.round(y))):
        raise ValueError(f"The {family} family requires non-negative integer counts.")
    if family in LOG_LINK_FAMILIES:
        return y.astype(np.int64)
    return y


def inverse_link(eta: np.ndarray, family: Family) -> np.ndarray:
    """Map the linear predictor to the expected response."""
    return np.exp(eta) if family in LOG_LINK_FAMILIES else np.asarray(eta, dtype=float)


def build_regression_model(
    design: pd.DataFrame,
    response: np.ndarray,
    family: Family = "gaussian",
    priors: Optional[RegressionPriors] = None,
) -> pm.Model:
    """Create the PyMC GLM; design and response live in swappable data containers."""
    y = validate_response(response, family)
    if design.shape[0] != y.shape[0]:
        raise ValueError("Design matrix and response must have the same number of rows.")
    if design.shape[1] == 0:
        raise ValueError("Design matrix needs at least one term column.")
    X = design.to_numpy(dtype=float)
    if not np.all(np.isfinite(X)):
        raise ValueError("Design matrix contains non-finite entries.")

    resolved = (priors or RegressionPriors()).resolve(family, y)
    coords = {"term": [str(column) for column in design.columns]}
    with pm.Model(coords=coords) as model:
        X_data = pm.Data("X", X)
        y_data = pm.Data("observed_response", y)

        intercept = pm.Normal("Intercept", mu=resolved.intercept_mu, sigma=resolved.intercept_sigma)
        beta = pm.Normal("beta", mu=0.0, sigma=resolved.coef_sigma, dims="term")
        eta = intercept + pm.math.dot(X_data, beta)

        if family == "gaussian":
            sigma = pm.HalfNormal("sigma", sigma=resolved.noise_scale)
            pm.Normal("response", mu=eta, sigma=sigma, observed=y_data, shape=X_data.shape[0])
        elif family == "poisson":
            pm.Poisson("response", mu=pm.math.exp(eta), observed=y_data, shape=X_data.shape[0])
        else:
            alpha = pm.HalfNormal("alpha", sigma=resolved.dispersion_scale)
            pm.NegativeBinomial(
                "response",
                mu=pm.math.exp(eta),
                alpha=alpha,
                observed=y_data,
                shape=X_data.shape[0],
            )
    return model


__all__ = [
    "FAMILIES",
    "Family",
    "LOG_LINK_FAMILIES",
    "REGRESSION_PARAMETERS",
    "RegressionPriors",
    "ResolvedPriors",
    "build_regression_model",
    "inverse_link",
    "validate_response",
]
