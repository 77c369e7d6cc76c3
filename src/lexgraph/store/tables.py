"""Parquet helpers shared by the stores' save/load methods."""

import math
from dataclasses import asdict, fields
from enum import Enum
from pathlib import Path

import numpy as np
import pandas as pd


def records_to_frame(records: list, cls) -> pd.DataFrame:
    """Flatten record dataclasses into a DataFrame, enums as their values."""
    rows = []
    for record in records:
        row = asdict(record)
        rows.append({k: (v.value if isinstance(v, Enum) else v) for k, v in row.items()})
    return pd.DataFrame(rows, columns=[f.name for f in fields(cls)])


def frame_to_records(df: pd.DataFrame, cls, enum_fields: dict[str, type] | None = None) -> list:
    """Rebuild record dataclasses from a DataFrame written by records_to_frame."""
    enum_fields = enum_fields or {}
    records = []
    for row in df.to_dict(orient="records"):
        values = {k: _clean(v) for k, v in row.items()}
        for name, enum_cls in enum_fields.items():
            if values.get(name) is not None:
                values[name] = enum_cls(values[name])
        records.append(cls(**values))
    return records


def save_table(df: pd.DataFrame, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    df.to_parquet(path, index=False)


def load_table(path: Path) -> pd.DataFrame | None:
    if not path.exists():
        return None
    return pd.read_parquet(path)


def _clean(value):
    """Convert numpy scalars and NaN back to plain Python values."""
    if value is None:
        return None
    if isinstance(value, float) and math.isnan(value):
        return None
    if isinstance(value, np.integer):
        return int(value)
    if isinstance(value, np.floating):
        return float(value)
    if isinstance(value, np.ndarray):
        return value.tolist()
    return value
