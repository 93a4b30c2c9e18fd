"""Von Bertalanffy growth curves fitted under alternative error models."""

from .builders import ERROR_MODELS, ErrorModel, GrowthPriors, build_growth_dataset, build_growth_model, von_bertalanffy
from .fitter import GrowthFitter, fit_error_models

__all__ = [
    "ERROR_MODELS",
    "ErrorModel",
    "GrowthFitter",
    "GrowthPriors",
    "build_growth_dataset",
    "build_growth_model",
    "fit_error_models",
    "von_bertalanffy",
]
