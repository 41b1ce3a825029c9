from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

import pandas as pd

from conversion_trends.features.aggregates import rate_field


def rows_to_frame(rows: Sequence[Mapping[str, Any]], variation_ids: Sequence[str]) -> pd.DataFrame:
    """Tabulate sparse rows; a variation without data in a bucket becomes NaN."""
    columns = ["date", *(rate_field(variation_id) for variation_id in variation_ids)]
    return pd.DataFrame([dict(row) for row in rows], columns=columns)


def write_table(df: pd.DataFrame, path: Path, fmt: str = "csv") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    if fmt == "parquet":
        df.to_parquet(path, index=False)
        return path
    if fmt == "csv":
        df.to_csv(path, index=False)
        return path
    raise ValueError(f"Unsupported table format: {fmt}")


def write_summary(data: dict[str, Any], path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2, sort_keys=True), encoding="utf-8")
    return path
