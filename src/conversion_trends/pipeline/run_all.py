from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from conversion_trends.config import AppConfig
from conversion_trends.io.read import load_default_experiment
from conversion_trends.io.write import rows_to_frame, write_summary, write_table
from conversion_trends.paths import build_output_paths
from conversion_trends.preprocess.normalize import normalize_experiment
from conversion_trends.report.payload import build_chart_payload

LOGGER = logging.getLogger(__name__)


def run_all(
    data_path: Path,
    out_dir: Path,
    config: AppConfig,
    *,
    mode: str | None = None,
    selected: Iterable[str] | None = None,
) -> Path:
    """Normalize, aggregate and write tables plus the chart payload summary."""
    paths = build_output_paths(out_dir)
    effective_mode = mode or config.view.mode
    requested = list(selected) if selected is not None else list(config.view.selected)
    fmt = config.outputs.tables_format

    experiment = load_default_experiment(data_path)
    normalized = normalize_experiment(experiment)
    LOGGER.info(
        "Normalized %d points across %d variations from %s",
        len(normalized.points),
        len(normalized.variation_ids),
        data_path,
    )

    payload = build_chart_payload(
        experiment,
        effective_mode,
        requested,
        axis=config.axis,
        normalized=normalized,
    )
    LOGGER.info(
        "Aggregated %d %s rows; axis range %s for %s",
        len(payload.rows),
        effective_mode,
        payload.y_domain,
        ", ".join(payload.selected) or "no variations",
    )

    write_table(normalized.to_frame(), paths.tables / f"points.{fmt}", fmt=fmt)
    write_table(
        rows_to_frame(payload.rows, payload.variation_ids),
        paths.tables / f"rows_{effective_mode}.{fmt}",
        fmt=fmt,
    )
    return write_summary(payload.to_dict(), paths.summary / f"chart_payload_{effective_mode}.json")
