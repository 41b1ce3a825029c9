from __future__ import annotations

import math
from collections.abc import Iterable, Mapping, Sequence
from numbers import Real
from typing import Any

from conversion_trends.features.aggregates import rate_field

DEFAULT_PAD_FRACTION = 0.12
DEFAULT_FALLBACK_PAD = 1.0
EMPTY_AXIS_RANGE = (0, 1)


def _finite_number(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, Real):
        return None
    number = float(value)
    return number if math.isfinite(number) else None


def compute_axis_range(
    rows: Sequence[Mapping[str, Any]],
    selected: Iterable[str],
    *,
    pad_fraction: float = DEFAULT_PAD_FRACTION,
    fallback_pad: float = DEFAULT_FALLBACK_PAD,
) -> list[int]:
    """Padded ``[y_min, y_max]`` covering the selected variations' rates.

    Returns ``[0, 1]`` when no selected variation has a numeric rate.
    """
    fields = [rate_field(str(variation_id)) for variation_id in selected]
    low = math.inf
    high = -math.inf
    for row in rows:
        for field in fields:
            value = _finite_number(row.get(field))
            if value is None:
                continue
            low = min(low, value)
            high = max(high, value)

    if not math.isfinite(low) or not math.isfinite(high):
        return list(EMPTY_AXIS_RANGE)

    pad = (high - low) * pad_fraction or fallback_pad
    return [max(0, math.floor(low - pad)), math.ceil(high + pad)]
