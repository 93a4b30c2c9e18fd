"""Seeded synthetic datasets with known generating parameters."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np
import pandas as pd


@dataclass
class GrowthSimulationConfig:
    specimens: int = 120
    linf: float = 60.0  # cm
    k: float = 0.25  # 1/year
    t0: float = -0.5  # years
    cv: float = 0.08
    max_age: float = 15.0
    species: Sequence[str] = ("cod", "haddock")
    areas: Sequence[str] = ("north", "south")
    duplicate_fraction: float = 0.05


@dataclass
class RegressionSimulationConfig:
    units: int = 80
    intercept: float = 2.0
    beta_ph: float = 0.3
    beta_nutrient: float = 0.5
    beta_ph2: float = -0.4
    beta_interaction: float = 0.0
    ph_range: tuple[float, float] = (4.5, 8.5)
    nutrient_range: tuple[float, float] = (0.0, 10.0)


def simulate_specimens(
    config: Optional[GrowthSimulationConfig] = None,
    random_seed: Optional[int] = None,
) -> pd.DataFrame:
    """Specimens whose lengths follow a von Bertalanffy curve with constant CV noise.

    A small fraction of rows is duplicated to mimic repeated records of the same fish.
    """
    cfg = config or GrowthSimulationConfig()
    rng = np.random.default_rng(random_seed)

    ages = rng.uniform(0.0, cfg.max_age, size=cfg.specimens).round(1)
    expected = cfg.linf * (1.0 - np.exp(-cfg.k * (ages - cfg.t0)))
    lengths = expected * np.exp(rng.normal(0.0, cfg.cv, size=cfg.specimens))

    frame = pd.DataFrame(
        {
            "specimen_id": [f"S{idx:05d}" for idx in range(cfg.specimens)],
            "species": rng.choice(list(cfg.species), size=cfg.specimens),
            "area": rng.choice(list(cfg.areas), size=cfg.specimens),
            "age": ages,
            "length": lengths.round(2),
        }
    )

    n_duplicates = int(round(cfg.duplicate_fraction * cfg.specimens))
    if n_duplicates:
        duplicates = frame.sample(n=n_duplicates, random_state=int(rng.integers(0, 2**31 - 1)))
        frame = pd.concat([frame, duplicates], ignore_index=True)
    return frame


def simulate_measurements(
    config: Optional[RegressionSimulationConfig] = None,
    random_seed: Optional[int] = None,
) -> pd.DataFrame:
    """Poisson counts driven by a quadratic pH effect and a linear nutrient effect."""
    cfg = config or RegressionSimulationConfig()
    rng = np.random.default_rng(random_seed)

    ph = rng.uniform(*cfg.ph_range, size=cfg.units)
    nutrient = rng.uniform(*cfg.nutrient_range, size=cfg.units)

    # Effects act on the standardized covariates.
    ph_z = (ph - ph.mean()) / ph.std(ddof=1)
    nutrient_z = (nutrient - nutrient.mean()) / nutrient.std(ddof=1)
    eta = (
        cfg.intercept
        + cfg.beta_ph * ph_z
        + cfg.beta_nutrient * nutrient_z
        + cfg.beta_ph2 * ph_z**2
        + cfg.beta_interaction * ph_z * nutrient_z
    )
    response = rng.poisson(np.exp(eta))

    return pd.DataFrame(
        {
            "unit_id": [f"U{idx:04d}" for idx in range(cfg.units)],
            "ph": ph.round(2),
            "nutrient": nutrient.round(2),
            "response": response,
        }
    )


__all__ = [
    "GrowthSimulationConfig",
    "RegressionSimulationConfig",
    "simulate_measurements",
    "simulate_specimens",
]
