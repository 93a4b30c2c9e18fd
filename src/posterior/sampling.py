"""Sampler settings shared by every model fit."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

import pymc as pm
from arviz import InferenceData


@dataclass(frozen=True)
class SamplerConfig:
    """NUTS settings forwarded to ``pm.sample``."""

    draws: int = 2000
    tune: int = 1000
    chains: int = 4
    cores: Optional[int] = None
    target_accept: float = 0.9
    random_seed: Optional[int] = None

    def validate(self) -> None:
        if self.draws <= 0 or self.tune < 0 or self.chains <= 0:
            raise ValueError("draws and chains must be positive and tune non-negative.")
        if self.cores is not None and self.cores <= 0:
            raise ValueError("cores must be positive when supplied.")
        if not 0 < self.target_accept < 1:
            raise ValueError("target_accept must fall within (0, 1).")

    def sample(self, model: pm.Model, log_likelihood: bool = False) -> InferenceData:
        """Run NUTS on ``model`` and return the posterior as InferenceData."""
        self.validate()
        idata_kwargs: Dict[str, Any] = {"log_likelihood": True} if log_likelihood else {}
        with model:
            return pm.sample(
                draws=self.draws,
                tune=self.tune,
                chains=self.chains,
                cores=self.cores,
                target_accept=self.target_accept,
                random_seed=self.random_seed,
                return_inferencedata=True,
                idata_kwargs=idata_kwargs,
                progressbar=False,
            )


__all__ = ["SamplerConfig"]
