"""End-to-end runs of both walkthrough pipelines on small synthetic datasets."""

from __future__ import annotations

from pathlib import Path
import sys

import pandas as pd
import pytest
from typer.testing import CliRunner

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from experiments.growth_study import run_growth_pipeline
from experiments.regression_study import default_settings, run_regression_pipeline
from main import app
from src.datahub.synthetic import simulate_measurements, simulate_specimens
from src.posterior.sampling import SamplerConfig
from src.regression.terms import Terms

FAST_SAMPLER = SamplerConfig(draws=150, tune=150, chains=2, cores=1, random_seed=99)


@pytest.mark.filterwarnings("ignore::UserWarning")
def test_growth_pipeline_from_csv(tmp_path: Path) -> None:
    path = tmp_path / "specimens.csv"
    simulate_specimens(random_seed=4).to_csv(path, index=False)

    study = run_growth_pipeline(
        path,
        species="Cod",
        area="north",
        error_models=("normal", "lognormal"),
        sampler=FAST_SAMPLER,
    )

    assert study.specimens["specimen_id"].is_unique
    assert set(study.specimens["species"]) == {"cod"}
    assert set(study.fits) == {"normal", "lognormal"}
    assert set(study.curves) == {"normal", "lognormal"}
    assert study.comparison is not None and len(study.comparison) == 2
    assert all(summary.loc["L_inf", "mean"] > 0 for summary in study.summaries.values())


@pytest.mark.filterwarnings("ignore::UserWarning")
def test_growth_pipeline_single_model_skips_comparison() -> None:
    study = run_growth_pipeline(
        frame=simulate_specimens(random_seed=5),
        error_models=("proportional",),
        sampler=FAST_SAMPLER,
    )
    assert study.comparison is None


def test_default_settings_use_first_covariate_quartiles() -> None:
    frame = simulate_measurements(random_seed=2)
    high, low = default_settings(frame, Terms.parse("ph + nutrient"))
    assert list(high) == ["ph"] and list(low) == ["ph"]
    assert high["ph"] > low["ph"]


@pytest.mark.filterwarnings("ignore::UserWarning")
def test_regression_pipeline_counts_each_unit_once() -> None:
    frame = simulate_measurements(random_seed=8)
    doubled = pd.concat([frame, frame.head(20)], ignore_index=True)
    study = run_regression_pipeline(
        frame=doubled,
        family="poisson",
        setting_a={"nutrient": 8.0},
        setting_b={"nutrient": 2.0},
        sampler=FAST_SAMPLER,
    )

    assert set(study.fits) == {"quadratic", "interaction"}
    assert study.measurements["unit_id"].is_unique
    for fitter in study.fits.values():
        assert fitter.observed().size == frame["unit_id"].nunique()
    assert list(study.coefficient_probabilities.index) == ["ph", "nutrient", "ph^2"]
    assert study.ratio.prob_greater_than_one > 0.9
    assert study.settings == ({"nutrient": 8.0}, {"nutrient": 2.0})
    assert set(study.looic) == {"quadratic", "interaction"}
    assert set(study.comparison.index) == {"quadratic", "interaction"}
    assert list(study.ppc.index) == ["mean", "sd", "min", "max"]


def test_cli_simulate_writes_both_tables(tmp_path: Path) -> None:
    runner = CliRunner()
    specimens = tmp_path / "raw" / "specimens.csv"
    measurements = tmp_path / "raw" / "measurements.csv"
    result = runner.invoke(
        app,
        ["simulate", "--specimens", str(specimens), "--measurements", str(measurements), "--seed", "1"],
    )
    assert result.exit_code == 0, result.output
    assert specimens.exists() and measurements.exists()


def test_cli_rejects_unknown_family(tmp_path: Path) -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["regression", "--data", str(tmp_path / "m.csv"), "--family", "binomial"])
    assert result.exit_code != 0
