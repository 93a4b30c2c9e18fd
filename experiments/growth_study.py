from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, Optional

import pandas as pd

from src.datahub import filter_specimens, load_specimens
from src.growth import ERROR_MODELS, ErrorModel, GrowthFitter, GrowthPriors, fit_error_models
from src.posterior import ConvergenceReport, SamplerConfig, compare_models, report_convergence


@dataclass
class GrowthStudy:
    """Everything the growth-curve walkthrough produces for one species/area."""

    specimens: pd.DataFrame
    fits: Dict[str, GrowthFitter]
    summaries: Dict[str, pd.DataFrame]
    diagnostics: Dict[str, ConvergenceReport]
    curves: Dict[str, pd.DataFrame]
    comparison: Optional[pd.DataFrame]


def run_growth_pipeline(
    path: Optional[Path] = None,
    species: Optional[str] = None,
    area: Optional[str] = None,
    error_models: Iterable[ErrorModel] = ERROR_MODELS,
    priors: Optional[GrowthPriors] = None,
    sampler: Optional[SamplerConfig] = None,
    credible_interval: float = 0.90,
    frame: Optional[pd.DataFrame] = None,
) -> GrowthStudy:
    """Load, filter and deduplicate specimens, then fit and compare the growth models.

    ``frame`` bypasses the CSV loader when the specimen table is already in memory.
    """
    print("[growth] Starting growth-curve pipeline.")
    raw = frame if frame is not None else (load_specimens(path) if path is not None else load_specimens())
    specimens = filter_specimens(raw, species=species, area=area)
    print(f"[growth] {len(specimens)} of {len(raw)} records kept for species={species!r}, area={area!r}.")

    fits = fit_error_models(
        specimens,
        error_models=error_models,
        priors=priors,
        sampler=sampler,
        credible_interval=credible_interval,
    )

    summaries: Dict[str, pd.DataFrame] = {}
    diagnostics: Dict[str, ConvergenceReport] = {}
    curves: Dict[str, pd.DataFrame] = {}
    for name, fitter in fits.items():
        summaries[name] = fitter.summary()
        diagnostics[name] = fitter.diagnostics()
        report_convergence(f"growth/{name}", diagnostics[name])
        curves[name] = fitter.curve()
        print(f"[growth] {name} posterior summary:\n{summaries[name].to_string()}")

    comparison: Optional[pd.DataFrame] = None
    if len(fits) > 1:
        comparison = compare_models(fits)
        print(f"[growth] LOO comparison of error models:\n{comparison.to_string()}")

    return GrowthStudy(
        specimens=specimens,
        fits=fits,
        summaries=summaries,
        diagnostics=diagnostics,
        curves=curves,
        comparison=comparison,
    )


__all__ = ["GrowthStudy", "run_growth_pipeline"]
