"""Sampler settings, flattened draws and convergence diagnostics."""

from .comparison import compare_models, looic
from .diagnostics import ConvergenceReport, check_convergence, report_convergence, summarize
from .samples import IntervalSummary, draws_frame, interval, probability_greater, probability_positive
from .fitter import BayesianFitter
from .sampling import SamplerConfig

__all__ = [
    "BayesianFitter",
    "ConvergenceReport",
    "IntervalSummary",
    "SamplerConfig",
    "check_convergence",
    "compare_models",
    "draws_frame",
    "interval",
    "looic",
    "probability_greater",
    "probability_positive",
    "report_convergence",
    "summarize",
]
