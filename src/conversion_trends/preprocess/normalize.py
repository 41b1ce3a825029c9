from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import asdict, dataclass
from typing import Any

import pandas as pd

from conversion_trends.io.schema import RawExperiment, validate_experiment

POINT_COLUMNS = ["date", "variation_id", "visits", "conversions"]


@dataclass(frozen=True)
class NormalizedPoint:
    date: str
    variation_id: str
    visits: float
    conversions: float


@dataclass(frozen=True)
class NormalizedData:
    variation_ids: tuple[str, ...]
    points: tuple[NormalizedPoint, ...]

    def to_frame(self) -> pd.DataFrame:
        if not self.points:
            return pd.DataFrame(
                {
                    "date": pd.Series(dtype="object"),
                    "variation_id": pd.Series(dtype="object"),
                    "visits": pd.Series(dtype="float64"),
                    "conversions": pd.Series(dtype="float64"),
                }
            )
        return pd.DataFrame([asdict(point) for point in self.points], columns=POINT_COLUMNS)


def normalize_variation_id(value: Any) -> str:
    return str(value) if value else "0"


def coerce_count(value: Any) -> float:
    """Return a usable non-negative count, or 0.0 for anything that is not one."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return 0.0
    if not math.isfinite(number) or number < 0:
        return 0.0
    return number


def _union_keys(visits: Mapping[str, Any], conversions: Mapping[str, Any]) -> list[str]:
    keys = dict.fromkeys(visits)
    keys.update(dict.fromkeys(conversions))
    return list(keys)


def normalize_experiment(experiment: RawExperiment | Mapping[str, Any]) -> NormalizedData:
    """Flatten sparse per-day counters into one point per (date, variation).

    A point exists for every variation present in either the visits or the
    conversions map of a day; the missing side counts as zero.
    """
    experiment = validate_experiment(experiment)
    variation_ids = tuple(
        normalize_variation_id(variation.id) for variation in experiment.variations
    )

    points: list[NormalizedPoint] = []
    for day in experiment.days:
        for variation_id in _union_keys(day.visits, day.conversions):
            points.append(
                NormalizedPoint(
                    date=day.date,
                    variation_id=variation_id,
                    visits=coerce_count(day.visits.get(variation_id)),
                    conversions=coerce_count(day.conversions.get(variation_id)),
                )
            )

    return NormalizedData(variation_ids=variation_ids, points=tuple(points))
