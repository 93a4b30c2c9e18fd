"""Posterior summaries and convergence checks built on ArviZ."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

import arviz as az
import numpy as np
import pandas as pd
import xarray as xr
from arviz import InferenceData

from .samples import posterior_group

RHAT_THRESHOLD = 1.01
ESS_THRESHOLD = 400
ESS_PER_CHAIN_FLOOR = 100


@dataclass(frozen=True)
class ConvergenceReport:
    """Worst-case convergence statistics across the inspected variables."""

    max_r_hat: Optional[float]
    min_ess_bulk: float
    min_ess_tail: float
    divergences: int
    messages: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.messages


def summarize(
    idata: InferenceData,
    var_names: Optional[Sequence[str]] = None,
    credible_interval: float = 0.90,
) -> pd.DataFrame:
    """Mean, sd, HDI bounds, MCSE, ESS and R-hat per parameter."""
    if not 0 < credible_interval < 1:
        raise ValueError("credible_interval must fall within (0, 1).")
    summary = az.summary(
        idata,
        var_names=list(var_names) if var_names is not None else None,
        hdi_prob=credible_interval,
    )
    return pd.DataFrame(summary)


def _extreme(stats: xr.Dataset, reducer) -> float:
    values = [np.asarray(stats[name].values, dtype=float).ravel() for name in stats.data_vars]
    flat = np.concatenate(values) if values else np.asarray([], dtype=float)
    flat = flat[np.isfinite(flat)]
    if flat.size == 0:
        return float("nan")
    return float(reducer(flat))


def count_divergences(idata: InferenceData) -> int:
    sample_stats = getattr(idata, "sample_stats", None)
    if sample_stats is None or "diverging" not in sample_stats:
        return 0
    return int(np.asarray(sample_stats["diverging"].values).sum())


def check_convergence(
    idata: InferenceData,
    var_names: Optional[Sequence[str]] = None,
    r_hat_threshold: float = RHAT_THRESHOLD,
    ess_threshold: int = ESS_THRESHOLD,
) -> ConvergenceReport:
    """Collect R-hat, ESS and divergence counts and flag anything out of bounds.

    Short runs are held to ``ESS_PER_CHAIN_FLOOR`` effective draws per chain when that
    is lower than ``ess_threshold``. R-hat is only reported for multi-chain runs.
    """
    posterior = posterior_group(idata)
    names = list(var_names) if var_names is not None else None
    chains = int(posterior.sizes["chain"])

    max_r_hat: Optional[float] = None
    if chains > 1:
        max_r_hat = _extreme(az.rhat(idata, var_names=names), np.max)
    min_ess_bulk = _extreme(az.ess(idata, var_names=names, method="bulk"), np.min)
    min_ess_tail = _extreme(az.ess(idata, var_names=names, method="tail"), np.min)
    divergences = count_divergences(idata)

    required_ess = min(ess_threshold, ESS_PER_CHAIN_FLOOR * chains)
    messages: List[str] = []
    if max_r_hat is not None and not max_r_hat <= r_hat_threshold:
        messages.append(f"max R-hat {max_r_hat:.3f} exceeds {r_hat_threshold}")
    if not min_ess_bulk >= required_ess:
        messages.append(f"min bulk ESS {min_ess_bulk:.0f} below {required_ess}")
    if not min_ess_tail >= required_ess:
        messages.append(f"min tail ESS {min_ess_tail:.0f} below {required_ess}")
    if divergences:
        messages.append(f"{divergences} divergent transition(s) after tuning")

    return ConvergenceReport(
        max_r_hat=max_r_hat,
        min_ess_bulk=min_ess_bulk,
        min_ess_tail=min_ess_tail,
        divergences=divergences,
        messages=messages,
    )


def report_convergence(label: str, report: ConvergenceReport) -> None:
    """Print a one-line verdict followed by any flagged problems."""
    r_hat = "n/a" if report.max_r_hat is None else f"{report.max_r_hat:.3f}"
    status = "ok" if report.ok else "CHECK"
    print(
        f"[diagnostics] {label}: {status} (max R-hat={r_hat}, "
        f"min ESS bulk/tail={report.min_ess_bulk:.0f}/{report.min_ess_tail:.0f}, "
        f"divergences={report.divergences})"
    )
    for message in report.messages:
        print(f"[diagnostics]   - {message}")


__all__ = [
    "ConvergenceReport",
    "ESS_THRESHOLD",
    "RHAT_THRESHOLD",
    "check_convergence",
    "count_divergences",
    "report_convergence",
    "summarize",
]
