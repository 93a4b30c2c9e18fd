from __future__ import annotations

from pathlib import Path
from typing import Literal

import pandas as pd

from .config import DEFAULT_MEASUREMENTS_PATH, DEFAULT_SPECIMENS_PATH, SCHEMAS
from .helpers import coerce_numeric, require_columns

TableName = Literal["specimens", "measurements"]


def load_table(path: Path, table: TableName) -> pd.DataFrame:
    """Read a CSV file and validate it against the schema registered for ``table``."""
    try:
        schema = SCHEMAS[table]
    except KeyError as exc:
        raise ValueError(f"Unknown table '{table}'. Available: {list(SCHEMAS)}") from exc

    if not path.exists():
        raise FileNotFoundError(f"No {table} file found at {path}")

    frame = pd.read_csv(path)
    frame.columns = [str(column).strip() for column in frame.columns]
    require_columns(frame, schema["required"], table=table)
    frame = coerce_numeric(frame, schema["numeric"])

    id_column = schema["id_column"]
    if id_column in frame.columns:
        frame[id_column] = frame[id_column].astype(str)
    return frame.reset_index(drop=True)


def load_specimens(path: Path = DEFAULT_SPECIMENS_PATH) -> pd.DataFrame:
    """Load specimen records (one row per aged and measured individual)."""
    return load_table(path, "specimens")


def load_measurements(path: Path = DEFAULT_MEASUREMENTS_PATH) -> pd.DataFrame:
    """Load experimental measurements (pH, nutrient level and response)."""
    return load_table(path, "measurements")
