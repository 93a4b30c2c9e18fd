"""Tests for regression priors, model construction, fitting and derived comparisons."""

from __future__ import annotations

from pathlib import Path
import sys

import numpy as np
import pandas as pd
import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from src.datahub.preprocess import make_grid
from src.datahub.synthetic import RegressionSimulationConfig, simulate_measurements
from src.posterior.comparison import compare_models, looic
from src.posterior.sampling import SamplerConfig
from src.regression.builders import (
    RegressionPriors,
    build_regression_model,
    inverse_link,
    validate_response,
)
from src.regression.comparisons import RatioSummary, coefficient_probabilities, expected_ratio
from src.regression.fitter import RegressionFitter
from src.regression.terms import Terms

FAST_SAMPLER = SamplerConfig(draws=200, tune=200, chains=2, cores=1, random_seed=321)


# ---------------------------------------------------------------------------
# Helper fixtures and utilities


@pytest.fixture(scope="module")
def measurements() -> pd.DataFrame:
    config = RegressionSimulationConfig(units=120, beta_ph=0.3, beta_nutrient=0.5, beta_ph2=-0.4)
    return simulate_measurements(config, random_seed=5)


@pytest.fixture(scope="module")
def quadratic_fit(measurements: pd.DataFrame) -> RegressionFitter:
    return RegressionFitter("ph + nutrient + ph^2", family="poisson", sampler=FAST_SAMPLER).fit(measurements)


# ---------------------------------------------------------------------------
# Builder tests


def test_validate_response_by_family() -> None:
    counts = validate_response(np.array([0, 3, 5]), "poisson")
    assert counts.dtype == np.int64
    assert validate_response(np.array([0.5, -1.0]), "gaussian").dtype == float
    with pytest.raises(ValueError):
        validate_response(np.array([1.5, 2.0]), "poisson")
    with pytest.raises(ValueError):
        validate_response(np.array([-1, 2]), "negative_binomial")
    with pytest.raises(ValueError):
        validate_response(np.array([1.0]), "binomial")  # type: ignore[arg-type]
    with pytest.raises(ValueError):
        validate_response(np.array([np.nan]), "gaussian")


def test_priors_resolve_defaults_per_link() -> None:
    y = np.array([2.0, 4.0, 6.0])
    log_link = RegressionPriors().resolve("poisson", y)
    assert log_link.intercept_mu == pytest.approx(np.log(4.5))
    assert log_link.coef_sigma == pytest.approx(1.0)

    identity = RegressionPriors().resolve("gaussian", y)
    assert identity.intercept_mu == pytest.approx(4.0)
    assert identity.coef_sigma == pytest.approx(5.0)

    explicit = RegressionPriors(coef_sigma=0.5).resolve("gaussian", y)
    assert explicit.coef_sigma == pytest.approx(0.5)

    with pytest.raises(ValueError):
        RegressionPriors(noise_scale=-1.0).validate()


def test_inverse_link() -> None:
    eta = np.array([0.0, 1.0])
    assert np.allclose(inverse_link(eta, "poisson"), np.exp(eta))
    assert np.allclose(inverse_link(eta, "gaussian"), eta)


@pytest.mark.parametrize(
    "family, extra",
    [("gaussian", "sigma"), ("poisson", None), ("negative_binomial", "alpha")],
)
def test_build_regression_model_variables(family: str, extra: str | None) -> None:
    design = pd.DataFrame({"ph": [0.1, -0.2, 0.3], "ph^2": [0.01, 0.04, 0.09]})
    model = build_regression_model(design, np.array([1, 2, 3]), family)  # type: ignore[arg-type]
    assert {"Intercept", "beta", "response", "X"}.issubset(model.named_vars)
    assert list(model.coords["term"]) == ["ph", "ph^2"]
    if extra:
        assert extra in model.named_vars


def test_build_regression_model_shape_mismatch() -> None:
    design = pd.DataFrame({"ph": [0.1, 0.2]})
    with pytest.raises(ValueError):
        build_regression_model(design, np.array([1.0, 2.0, 3.0]))


# ---------------------------------------------------------------------------
# Fitter tests


def test_fitter_rejects_bad_configuration() -> None:
    with pytest.raises(ValueError):
        RegressionFitter("ph", family="binomial")  # type: ignore[arg-type]
    with pytest.raises(ValueError):
        RegressionFitter("ph +")
    with pytest.raises(RuntimeError):
        RegressionFitter("ph").samples()


def test_predict_without_fitted_design_raises() -> None:
    fitter = RegressionFitter("ph")
    fitter._model, fitter._idata = object(), object()  # type: ignore[assignment]
    with pytest.raises(RuntimeError, match="no fitted design"):
        fitter.predict(pd.DataFrame({"ph": [6.0]}))


def test_fitter_requires_response_column(measurements: pd.DataFrame) -> None:
    with pytest.raises(ValueError):
        RegressionFitter("ph", response="yield", sampler=FAST_SAMPLER).fit(measurements)


@pytest.mark.filterwarnings("ignore::UserWarning")
def test_quadratic_fit_recovers_signs(quadratic_fit: RegressionFitter) -> None:
    draws = quadratic_fit.samples()
    assert list(draws.columns) == ["Intercept", "beta[ph]", "beta[nutrient]", "beta[ph^2]"]
    assert quadratic_fit.rescaling is not None
    assert set(quadratic_fit.rescaling.columns) == {"ph", "nutrient"}

    probabilities = coefficient_probabilities(quadratic_fit)
    assert list(probabilities.index) == ["ph", "nutrient", "ph^2"]
    assert probabilities["nutrient"] > 0.95
    assert probabilities["ph^2"] < 0.05


@pytest.mark.filterwarnings("ignore::UserWarning")
def test_expected_ratio_between_settings(quadratic_fit: RegressionFitter, measurements: pd.DataFrame) -> None:
    high = float(measurements["nutrient"].quantile(0.9))
    low = float(measurements["nutrient"].quantile(0.1))
    ratio = expected_ratio(quadratic_fit, {"nutrient": high}, {"nutrient": low})
    assert isinstance(ratio, RatioSummary)
    assert ratio.lower < ratio.median < ratio.upper
    assert ratio.mean > 1.0
    assert ratio.prob_greater_than_one > 0.95

    with pytest.raises(ValueError):
        expected_ratio(quadratic_fit, {"temperature": 1.0}, {"nutrient": low})


@pytest.mark.filterwarnings("ignore::UserWarning")
def test_expected_and_predict_on_grid(quadratic_fit: RegressionFitter, measurements: pd.DataFrame) -> None:
    grid = make_grid(measurements, ["ph", "nutrient"], points=4)
    expected = quadratic_fit.expected(grid)
    assert expected.shape == (400, 16)
    assert (expected.to_numpy() > 0).all()

    predicted = quadratic_fit.predict(grid)
    assert predicted.shape == (400, 16)
    values = predicted.to_numpy()
    assert (values >= 0).all()
    assert np.allclose(values, np.round(values))


@pytest.mark.filterwarnings("ignore::UserWarning")
def test_ppc_statistics(quadratic_fit: RegressionFitter) -> None:
    ppc = quadratic_fit.ppc_statistics()
    assert list(ppc.index) == ["mean", "sd", "min", "max"]
    assert ppc["p_value"].between(0.0, 1.0).all()
    # A correctly specified model reproduces the mean count.
    assert 0.05 < ppc.loc["mean", "p_value"] < 0.95
    assert ppc.loc["mean", "observed"] == pytest.approx(quadratic_fit.observed().mean())

    with pytest.raises(ValueError):
        quadratic_fit.ppc_statistics(["skew"])


@pytest.mark.filterwarnings("ignore::UserWarning")
def test_interaction_model_comparison(quadratic_fit: RegressionFitter, measurements: pd.DataFrame) -> None:
    interaction = RegressionFitter(
        Terms.parse("ph + nutrient + ph^2 + ph:nutrient"),
        family="poisson",
        sampler=FAST_SAMPLER,
    ).fit(measurements)
    assert "beta[ph:nutrient]" in interaction.samples().columns

    comparison = compare_models({"quadratic": quadratic_fit, "interaction": interaction})
    assert set(comparison.index) == {"quadratic", "interaction"}
    assert np.isfinite(looic(quadratic_fit))
    assert looic(quadratic_fit) == pytest.approx(-2.0 * quadratic_fit.loo().elpd_loo)


@pytest.mark.filterwarnings("ignore::UserWarning")
def test_gaussian_fit_without_rescaling() -> None:
    rng = np.random.default_rng(0)
    x = rng.uniform(0.0, 1.0, size=60)
    frame = pd.DataFrame({"x": x, "response": 1.0 + 2.0 * x + rng.normal(0.0, 0.1, size=60)})
    fitter = RegressionFitter("x", family="gaussian", rescale_method=None, sampler=FAST_SAMPLER).fit(frame)
    draws = fitter.samples()
    assert "sigma" in draws.columns
    assert draws["beta[x]"].mean() == pytest.approx(2.0, abs=0.3)
    assert fitter.rescaling is None
