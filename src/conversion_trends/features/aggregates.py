from __future__ import annotations

from collections.abc import Callable
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

import pandas as pd

from conversion_trends.preprocess.normalize import NormalizedData
from conversion_trends.preprocess.time import week_key, week_start_for_key

RATE_FIELD_PREFIX = "conversionRate_"

AggregatedRow = dict[str, Any]


def rate_field(variation_id: str) -> str:
    return f"{RATE_FIELD_PREFIX}{variation_id}"


def conversion_rate(visits: float, conversions: float) -> float:
    """Percentage rounded half-up to two decimals; 0 when there are no visits."""
    if visits == 0:
        return 0.0
    rate = Decimal(float(conversions) / float(visits) * 100)
    return float(rate.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def _bucket_totals(points: pd.DataFrame, bucket_column: str) -> dict[str, dict[str, float]]:
    totals = (
        points.groupby([bucket_column, "variation_id"], sort=False)[["visits", "conversions"]]
        .sum()
    )
    rates: dict[str, dict[str, float]] = {}
    for (bucket, variation_id), record in totals.iterrows():
        rates.setdefault(bucket, {})[variation_id] = conversion_rate(
            visits=float(record["visits"]),
            conversions=float(record["conversions"]),
        )
    return rates


def _build_rows(
    data: NormalizedData,
    bucket_for_date: Callable[[str], str],
    date_for_bucket: Callable[[str], str],
) -> list[AggregatedRow]:
    points = data.to_frame()
    if points.empty:
        return []

    points["bucket"] = points["date"].map(bucket_for_date)
    rates = _bucket_totals(points, "bucket")

    labelled: list[tuple[str, str, AggregatedRow]] = []
    for bucket, variation_rates in rates.items():
        row_date = date_for_bucket(bucket)
        row: AggregatedRow = {"date": row_date}
        for variation_id in data.variation_ids:
            if variation_id in variation_rates:
                row[rate_field(variation_id)] = variation_rates[variation_id]
        labelled.append((row_date, bucket, row))

    labelled.sort(key=lambda item: (item[0], item[1]))
    return [row for _, _, row in labelled]


def build_daily_rows(data: NormalizedData) -> list[AggregatedRow]:
    """One row per distinct date, ascending, with a rate per variation seen that day."""
    return _build_rows(
        data,
        bucket_for_date=lambda value: value,
        date_for_bucket=lambda value: value,
    )


def build_weekly_rows(data: NormalizedData) -> list[AggregatedRow]:
    """One row per week key, dated by the Monday resolved for that key.

    Two keys can resolve to the same Monday around New Year; they stay
    separate rows, ordered by key.
    """
    return _build_rows(data, bucket_for_date=week_key, date_for_bucket=week_start_for_key)
