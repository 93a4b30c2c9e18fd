from .loader import load_measurements, load_specimens, load_table
from .preprocess import Rescaling, deduplicate, filter_specimens, make_grid, rescale
from .synthetic import simulate_measurements, simulate_specimens

__all__ = [
    "Rescaling",
    "deduplicate",
    "filter_specimens",
    "load_measurements",
    "load_specimens",
    "load_table",
    "make_grid",
    "rescale",
    "simulate_measurements",
    "simulate_specimens",
]
