"""Static configuration for input data locations and table schemas."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Tuple, TypedDict


class TableSchema(TypedDict):
    id_column: str
    required: Tuple[str, ...]
    numeric: Tuple[str, ...]


# Default locations used by the Typer CLI; callers may override these.
DEFAULT_RAW_ROOT = Path("data/raw")
DEFAULT_SPECIMENS_PATH = DEFAULT_RAW_ROOT / "specimens.csv"
DEFAULT_MEASUREMENTS_PATH = DEFAULT_RAW_ROOT / "measurements.csv"

# ---------------------------------------------------------------------------
# Table-specific schemas.

SPECIMENS: TableSchema = {
    "id_column": "specimen_id",
    "required": ("specimen_id", "species", "area", "age", "length"),
    "numeric": ("age", "length"),
}

MEASUREMENTS: TableSchema = {
    "id_column": "unit_id",
    "required": ("ph", "nutrient", "response"),
    "numeric": ("ph", "nutrient", "response"),
}

SCHEMAS: Dict[str, TableSchema] = {
    "specimens": SPECIMENS,
    "measurements": MEASUREMENTS,
}

RESCALED_SUFFIX = "_z"


__all__ = [
    "DEFAULT_RAW_ROOT",
    "DEFAULT_SPECIMENS_PATH",
    "DEFAULT_MEASUREMENTS_PATH",
    "MEASUREMENTS",
    "RESCALED_SUFFIX",
    "SCHEMAS",
    "SPECIMENS",
    "TableSchema",
]
