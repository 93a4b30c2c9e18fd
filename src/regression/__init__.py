"""Bayesian GLMs with quadratic and interaction terms."""

from .builders import FAMILIES, Family, RegressionPriors, build_regression_model
from .comparisons import RatioSummary, coefficient_probabilities, expected_ratio
from .fitter import RegressionFitter
from .terms import Term, Terms

__all__ = [
    "FAMILIES",
    "Family",
    "RatioSummary",
    "RegressionFitter",
    "RegressionPriors",
    "Term",
    "Terms",
    "build_regression_model",
    "coefficient_probabilities",
    "expected_ratio",
]
