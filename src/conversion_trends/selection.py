from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Literal

from conversion_trends.features.aggregates import (
    AggregatedRow,
    build_daily_rows,
    build_weekly_rows,
)
from conversion_trends.preprocess.normalize import NormalizedData

ViewMode = Literal["day", "week"]
VIEW_MODES: tuple[ViewMode, ...] = ("day", "week")


def aggregate_rows(data: NormalizedData, mode: str) -> list[AggregatedRow]:
    if mode == "day":
        return build_daily_rows(data)
    if mode == "week":
        return build_weekly_rows(data)
    raise ValueError(f"Unsupported view mode: {mode!r} (expected one of {', '.join(VIEW_MODES)})")


def resolve_selection(
    variation_ids: Sequence[str],
    requested: Iterable[str] | None = None,
) -> tuple[str, ...]:
    """Keep requested ids that exist, in request order; nothing requested means all."""
    requested_ids = [str(variation_id) for variation_id in requested or ()]
    if not requested_ids:
        return tuple(variation_ids)

    known = set(variation_ids)
    resolved: list[str] = []
    for variation_id in requested_ids:
        if variation_id in known and variation_id not in resolved:
            resolved.append(variation_id)
    return tuple(resolved)


def toggle_selection(selected: Sequence[str], variation_id: str) -> tuple[str, ...]:
    """Add or remove one variation; the last selected variation cannot be removed."""
    if variation_id in selected:
        if len(selected) == 1:
            return tuple(selected)
        return tuple(value for value in selected if value != variation_id)
    return (*selected, variation_id)
