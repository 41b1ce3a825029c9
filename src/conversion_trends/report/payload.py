from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from conversion_trends.config import AxisConfig
from conversion_trends.features.aggregates import AggregatedRow
from conversion_trends.features.axis_range import compute_axis_range
from conversion_trends.io.read import variation_names
from conversion_trends.io.schema import RawExperiment, validate_experiment
from conversion_trends.preprocess.normalize import NormalizedData, normalize_experiment
from conversion_trends.selection import aggregate_rows, resolve_selection


@dataclass(frozen=True)
class ChartPayload:
    mode: str
    variation_ids: tuple[str, ...]
    variation_names: dict[str, str]
    selected: tuple[str, ...]
    rows: list[AggregatedRow]
    y_domain: list[int]

    def to_dict(self) -> dict[str, Any]:
        return {
            "mode": self.mode,
            "variation_ids": list(self.variation_ids),
            "variation_names": dict(self.variation_names),
            "selected": list(self.selected),
            "rows": [dict(row) for row in self.rows],
            "y_domain": list(self.y_domain),
        }


def build_chart_payload(
    experiment: RawExperiment | Mapping[str, Any],
    mode: str = "day",
    selected: Iterable[str] | None = None,
    *,
    axis: AxisConfig | None = None,
    normalized: NormalizedData | None = None,
) -> ChartPayload:
    """Everything a chart needs for one view mode and selection."""
    experiment = validate_experiment(experiment)
    axis = axis or AxisConfig()
    data = normalized if normalized is not None else normalize_experiment(experiment)

    rows = aggregate_rows(data, mode)
    resolved = resolve_selection(data.variation_ids, selected)
    y_domain = compute_axis_range(
        rows,
        resolved,
        pad_fraction=axis.pad_fraction,
        fallback_pad=axis.fallback_pad,
    )
    return ChartPayload(
        mode=mode,
        variation_ids=data.variation_ids,
        variation_names=variation_names(experiment),
        selected=resolved,
        rows=rows,
        y_domain=y_domain,
    )
