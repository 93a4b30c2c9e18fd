"""Tests for posterior draw handling and convergence diagnostics."""

from __future__ import annotations

from pathlib import Path
import sys

import arviz as az
import numpy as np
import pandas as pd
import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from src.posterior.diagnostics import check_convergence, count_divergences, summarize
from src.posterior.samples import (
    draws_frame,
    interval,
    probability_greater,
    probability_positive,
)
from src.posterior.sampling import SamplerConfig


# ---------------------------------------------------------------------------
# Helper fixtures and utilities


def _idata(shift_second_chain: float = 0.0, diverging: int = 0, seed: int = 0) -> az.InferenceData:
    rng = np.random.default_rng(seed)
    chains, draws = 4, 500
    mu = rng.normal(1.0, 1.0, size=(chains, draws))
    mu[1] += shift_second_chain
    beta = rng.normal(0.0, 1.0, size=(chains, draws, 2))
    flags = np.zeros((chains, draws), dtype=bool)
    flags.ravel()[:diverging] = True
    return az.from_dict(
        posterior={"mu": mu, "beta": beta},
        sample_stats={"diverging": flags},
        coords={"term": ["ph", "ph^2"]},
        dims={"beta": ["term"]},
    )


# ---------------------------------------------------------------------------
# Draw flattening


def test_draws_frame_flattens_scalars_and_vectors() -> None:
    frame = draws_frame(_idata())
    assert list(frame.columns) == ["mu", "beta[ph]", "beta[ph^2]"]
    assert len(frame) == 4 * 500
    assert frame.index.names == ["chain", "draw"]


def test_draws_frame_respects_var_names_and_unknowns() -> None:
    idata = _idata()
    frame = draws_frame(idata, ["beta"])
    assert list(frame.columns) == ["beta[ph]", "beta[ph^2]"]
    with pytest.raises(ValueError):
        draws_frame(idata, ["sigma"])
    with pytest.raises(ValueError):
        draws_frame(idata, group="posterior_predictive")


# ---------------------------------------------------------------------------
# Probability statements


def test_probability_positive_and_greater() -> None:
    draws = pd.DataFrame({"a": [1.0, -1.0, 2.0, 3.0], "b": [0.0, 0.0, 5.0, 1.0]})
    assert probability_positive(draws, "a") == pytest.approx(0.75)
    assert probability_greater(draws, "a", "b") == pytest.approx(0.5)
    with pytest.raises(ValueError):
        probability_positive(draws, "c")


def test_interval_summary() -> None:
    values = np.arange(101, dtype=float)
    summary = interval(values, credible_interval=0.90)
    assert summary.mean == pytest.approx(50.0)
    assert summary.median == pytest.approx(50.0)
    assert summary.lower == pytest.approx(5.0)
    assert summary.upper == pytest.approx(95.0)
    with pytest.raises(ValueError):
        interval(values, credible_interval=1.0)
    with pytest.raises(ValueError):
        interval(np.array([]))


# ---------------------------------------------------------------------------
# Summaries and diagnostics


def test_summarize_reports_hdi_and_rhat() -> None:
    summary = summarize(_idata(), ["mu"], credible_interval=0.90)
    assert "mu" in summary.index
    assert {"mean", "sd", "hdi_5%", "hdi_95%", "r_hat", "ess_bulk"}.issubset(summary.columns)


def test_check_convergence_passes_on_well_mixed_chains() -> None:
    report = check_convergence(_idata())
    assert report.ok
    assert report.max_r_hat is not None and report.max_r_hat < 1.01
    assert report.divergences == 0


def test_check_convergence_flags_disagreeing_chains_and_divergences() -> None:
    report = check_convergence(_idata(shift_second_chain=5.0, diverging=3))
    assert not report.ok
    assert report.divergences == 3
    assert any("R-hat" in message for message in report.messages)
    assert any("divergent" in message for message in report.messages)


def test_count_divergences_without_sample_stats() -> None:
    idata = az.from_dict(posterior={"mu": np.zeros((2, 10))})
    assert count_divergences(idata) == 0


# ---------------------------------------------------------------------------
# Sampler configuration


def test_sampler_config_validation() -> None:
    SamplerConfig().validate()
    with pytest.raises(ValueError):
        SamplerConfig(draws=0).validate()
    with pytest.raises(ValueError):
        SamplerConfig(target_accept=1.0).validate()
    with pytest.raises(ValueError):
        SamplerConfig(cores=0).validate()
