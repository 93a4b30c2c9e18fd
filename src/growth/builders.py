"""Dataset builders and PyMC model construction for von Bertalanffy growth."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
import pymc as pm

from src.datahub.config import SPECIMENS
from src.datahub.helpers import require_columns

ErrorModel = Literal["normal", "lognormal", "proportional"]
ERROR_MODELS: Tuple[ErrorModel, ...] = ("normal", "lognormal", "proportional")

GROWTH_PARAMETERS: Tuple[str, ...] = ("L_inf", "k", "t0", "sigma")

# Floor applied to the expected length before it enters a log or a scale.
MIN_EXPECTED_LENGTH = 1e-3


def von_bertalanffy(ages: np.ndarray, linf, k, t0) -> np.ndarray:
    """Expected length at age: ``L_inf * (1 - exp(-k * (age - t0)))`` with numpy broadcasting."""
    return linf * (1.0 - np.exp(-k * (np.asarray(ages, dtype=float) - t0)))


@dataclass(frozen=True)
class GrowthPriors:
    """Prior hyper-parameters for the growth curve.

    ``linf_mu`` defaults to 1.2 times the largest observed length when left unset.
    ``noise_scale`` is the half-normal scale of the additive SD (length units) and
    ``cv_scale`` the one used for the multiplicative and proportional error models.
    """

    linf_mu: Optional[float] = None
    linf_sigma: float = 0.5
    k_sigma: float = 1.0
    t0_mu: float = 0.0
    t0_sigma: float = 1.0
    noise_scale: float = 10.0
    cv_scale: float = 0.5

    def validate(self) -> None:
        scales = (self.linf_sigma, self.k_sigma, self.t0_sigma, self.noise_scale, self.cv_scale)
        if any(scale <= 0 for scale in scales):
            raise ValueError("Prior scales must be strictly positive.")
        if self.linf_mu is not None and self.linf_mu <= 0:
            raise ValueError("linf_mu must be strictly positive.")

    def resolve_linf_mu(self, lengths: np.ndarray) -> float:
        if self.linf_mu is not None:
            return float(self.linf_mu)
        return float(1.2 * np.max(lengths))


@dataclass(frozen=True)
class GrowthDataset:
    ages: np.ndarray
    lengths: np.ndarray
    ids: Sequence[str]


def build_growth_dataset(frame: pd.DataFrame) -> GrowthDataset:
    """Convert a filtered specimen table into arrays ready for PyMC."""
    require_columns(frame, SPECIMENS["required"], table="specimens")
    if frame.empty:
        raise ValueError("No specimens supplied for the growth model.")

    id_column = SPECIMENS["id_column"]
    if frame[id_column].duplicated().any():
        raise ValueError("Specimen identifiers must be unique; deduplicate before fitting.")

    ages = frame["age"].to_numpy(dtype=float)
    lengths = frame["length"].to_numpy(dtype=float)
    if not (np.all(np.isfinite(ages)) and np.all(np.isfinite(lengths))):
        raise ValueError("Ages and lengths must be finite.")
    if np.any(lengths <= 0):
        raise ValueError("Lengths must be strictly positive.")

    return GrowthDataset(ages=ages, lengths=lengths, ids=[str(value) for value in frame[id_column]])


def build_growth_model(
    dataset: GrowthDataset,
    priors: GrowthPriors,
    error_model: ErrorModel = "normal",
) -> pm.Model:
    """Create the PyMC model for one observation-error assumption."""
    priors.validate()
    if error_model not in ERROR_MODELS:
        raise ValueError(f"Unknown error model '{error_model}'. Available: {list(ERROR_MODELS)}")

    linf_mu = priors.resolve_linf_mu(dataset.lengths)
    with pm.Model() as model:
        age = pm.Data("age", dataset.ages)
        observed_length = pm.Data("observed_length", dataset.lengths)

        linf = pm.LogNormal("L_inf", mu=np.log(linf_mu), sigma=priors.linf_sigma)
        k = pm.HalfNormal("k", sigma=priors.k_sigma)
        t0 = pm.Normal("t0", mu=priors.t0_mu, sigma=priors.t0_sigma)
        expected = linf * (1.0 - pm.math.exp(-k * (age - t0)))

        if error_model == "normal":
            sigma = pm.HalfNormal("sigma", sigma=priors.noise_scale)
            pm.Normal("length", mu=expected, sigma=sigma, observed=observed_length, shape=age.shape[0])
        elif error_model == "lognormal":
            sigma = pm.HalfNormal("sigma", sigma=priors.cv_scale)
            floored = pm.math.maximum(expected, MIN_EXPECTED_LENGTH)
            pm.LogNormal(
                "length",
                mu=pm.math.log(floored),
                sigma=sigma,
                observed=observed_length,
                shape=age.shape[0],
            )
        else:
            sigma = pm.HalfNormal("sigma", sigma=priors.cv_scale)
            floored = pm.math.maximum(expected, MIN_EXPECTED_LENGTH)
            pm.Normal(
                "length",
                mu=expected,
                sigma=sigma * floored,
                observed=observed_length,
                shape=age.shape[0],
            )
    return model


__all__ = [
    "ERROR_MODELS",
    "ErrorModel",
    "GROWTH_PARAMETERS",
    "GrowthDataset",
    "GrowthPriors",
    "build_growth_dataset",
    "build_growth_model",
    "von_bertalanffy",
]
