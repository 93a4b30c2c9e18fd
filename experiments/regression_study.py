from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Mapping, Optional, Tuple, Union

import pandas as pd

from src.datahub import deduplicate, load_measurements
from src.datahub.config import MEASUREMENTS
from src.datahub.preprocess import RescaleMethod
from src.posterior import ConvergenceReport, SamplerConfig, compare_models, looic, report_convergence
from src.regression import (
    Family,
    RatioSummary,
    RegressionFitter,
    RegressionPriors,
    Terms,
    coefficient_probabilities,
    expected_ratio,
)

DEFAULT_QUADRATIC_TERMS = "ph + nutrient + ph^2"
DEFAULT_INTERACTION_TERMS = "ph + nutrient + ph^2 + ph:nutrient"


@dataclass
class RegressionStudy:
    """Everything the regression walkthrough produces."""

    measurements: pd.DataFrame
    fits: Dict[str, RegressionFitter]
    summaries: Dict[str, pd.DataFrame]
    diagnostics: Dict[str, ConvergenceReport]
    ppc: pd.DataFrame
    coefficient_probabilities: pd.Series
    ratio: RatioSummary
    settings: Tuple[Dict[str, float], Dict[str, float]]
    looic: Dict[str, float]
    comparison: pd.DataFrame


def default_settings(frame: pd.DataFrame, terms: Terms) -> Tuple[Dict[str, float], Dict[str, float]]:
    """Upper versus lower quartile of the first covariate, others at their mean."""
    variable = terms.variables[0]
    values = frame[variable].astype(float)
    return {variable: float(values.quantile(0.75))}, {variable: float(values.quantile(0.25))}


def run_regression_pipeline(
    path: Optional[Path] = None,
    first_terms: Union[Terms, str] = DEFAULT_QUADRATIC_TERMS,
    second_terms: Union[Terms, str] = DEFAULT_INTERACTION_TERMS,
    family: Family = "poisson",
    response: str = "response",
    setting_a: Optional[Mapping[str, float]] = None,
    setting_b: Optional[Mapping[str, float]] = None,
    rescale_method: Optional[RescaleMethod] = "standardize",
    priors: Optional[RegressionPriors] = None,
    sampler: Optional[SamplerConfig] = None,
    credible_interval: float = 0.90,
    frame: Optional[pd.DataFrame] = None,
) -> RegressionStudy:
    """Fit the quadratic model, check it, derive probability statements, then compare
    it against the interaction model by LOO.

    ``frame`` bypasses the CSV loader when the measurements are already in memory.
    """
    print("[regression] Starting regression pipeline.")
    measurements = frame if frame is not None else (
        load_measurements(path) if path is not None else load_measurements()
    )
    if MEASUREMENTS["id_column"] in measurements.columns:
        measurements = deduplicate(measurements, MEASUREMENTS["id_column"])
    first = Terms.parse(first_terms) if isinstance(first_terms, str) else first_terms
    second = Terms.parse(second_terms) if isinstance(second_terms, str) else second_terms

    fits: Dict[str, RegressionFitter] = {}
    summaries: Dict[str, pd.DataFrame] = {}
    diagnostics: Dict[str, ConvergenceReport] = {}
    for label, terms in (("quadratic", first), ("interaction", second)):
        print(f"[regression] Fitting {family} model '{label}': {response} ~ {terms} ({len(measurements)} rows).")
        fitter = RegressionFitter(
            terms,
            family=family,
            response=response,
            priors=priors,
            sampler=sampler,
            rescale_method=rescale_method,
            credible_interval=credible_interval,
        ).fit(measurements)
        fits[label] = fitter
        summaries[label] = fitter.summary()
        diagnostics[label] = fitter.diagnostics()
        report_convergence(f"regression/{label}", diagnostics[label])
        print(f"[regression] {label} posterior summary:\n{summaries[label].to_string()}")

    primary = fits["quadratic"]
    ppc = primary.ppc_statistics()
    print(f"[regression] Posterior-predictive p-values:\n{ppc.to_string()}")

    probabilities = coefficient_probabilities(primary)
    print(f"[regression] P(beta > 0):\n{probabilities.to_string()}")

    defaults = default_settings(measurements, first)
    settings = (
        dict(setting_a) if setting_a is not None else defaults[0],
        dict(setting_b) if setting_b is not None else defaults[1],
    )
    ratio = expected_ratio(primary, settings[0], settings[1], credible_interval)
    print(
        f"[regression] E[y|{settings[0]}] / E[y|{settings[1]}]: mean={ratio.mean:.3f} "
        f"[{ratio.lower:.3f}, {ratio.upper:.3f}], P(ratio > 1)={ratio.prob_greater_than_one:.3f}"
    )

    criteria = {label: looic(fitter) for label, fitter in fits.items()}
    comparison = compare_models(fits)
    print(f"[regression] LOO comparison:\n{comparison.to_string()}")

    return RegressionStudy(
        measurements=measurements,
        fits=fits,
        summaries=summaries,
        diagnostics=diagnostics,
        ppc=ppc,
        coefficient_probabilities=probabilities,
        ratio=ratio,
        settings=settings,
        looic=criteria,
        comparison=comparison,
    )


__all__ = [
    "DEFAULT_INTERACTION_TERMS",
    "DEFAULT_QUADRATIC_TERMS",
    "RegressionStudy",
    "default_settings",
    "run_regression_pipeline",
]
