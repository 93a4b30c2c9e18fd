from __future__ import annotations

from typing import Iterable, Sequence

import numpy as np
import pandas as pd


def require_columns(frame: pd.DataFrame, columns: Iterable[str], table: str = "table") -> None:
    """Raise if any of ``columns`` is absent from ``frame``."""
    missing = [column for column in columns if column not in frame.columns]
    if missing:
        raise ValueError(f"{table} is missing required columns: {', '.join(missing)}")


def coerce_numeric(frame: pd.DataFrame, columns: Sequence[str]) -> pd.DataFrame:
    """Convert columns to floats, turning unparseable entries into NaN."""
    result = frame.copy()
    for column in columns:
        result[column] = pd.to_numeric(result[column], errors="coerce").astype(float)
    return result


def drop_incomplete(frame: pd.DataFrame, columns: Sequence[str]) -> pd.DataFrame:
    """Drop rows whose model columns are missing or non-finite."""
    values = frame[list(columns)].to_numpy(dtype=float)
    mask = np.all(np.isfinite(values), axis=1)
    return frame.loc[mask]


def normalize_label(value: object) -> str:
    """Case-folded, stripped representation used when matching categorical labels."""
    return str(value).strip().casefold()


__all__ = ["coerce_numeric", "drop_incomplete", "normalize_label", "require_columns"]
