from __future__ import annotations

from enum import Enum
from pathlib import Path

import typer

from conversion_trends.config import AppConfig, load_config
from conversion_trends.features.axis_range import compute_axis_range
from conversion_trends.io.read import load_default_experiment
from conversion_trends.io.schema import RawExperiment
from conversion_trends.io.write import rows_to_frame, write_table
from conversion_trends.logging import configure_logging
from conversion_trends.paths import build_output_paths
from conversion_trends.pipeline.run_all import run_all
from conversion_trends.preprocess.normalize import normalize_experiment
from conversion_trends.selection import aggregate_rows, resolve_selection

app = typer.Typer(no_args_is_help=True, add_completion=False)


class ModeOption(str, Enum):
    day = "day"
    week = "week"


def _load_app_config(config_path: Path | None) -> AppConfig:
    if config_path is None:
        return AppConfig()
    return load_config(config_path)


def _require_data_path(data: Path | None, cfg: AppConfig) -> Path:
    if data is not None:
        return data
    if cfg.input.data_path:
        return Path(cfg.input.data_path)
    raise typer.BadParameter(
        "Missing --data. Pass an experiment JSON/YAML file or set input.data_path in config."
    )


def _load_experiment(data_path: Path) -> RawExperiment:
    try:
        return load_default_experiment(data_path)
    except (ValueError, OSError) as exc:
        raise typer.BadParameter(f"Could not load experiment from {data_path}: {exc}") from exc


@app.command()
def normalize(
    data: Path | None = typer.Option(None, exists=True, readable=True, resolve_path=True),
    out: Path = typer.Option(Path("out"), resolve_path=True),
    config: Path | None = typer.Option(None, exists=True, readable=True, resolve_path=True),
) -> None:
    """Flatten the experiment's per-day counters into a points table."""
    configure_logging()
    cfg = _load_app_config(config)
    experiment = _load_experiment(_require_data_path(data, cfg))
    normalized = normalize_experiment(experiment)
    paths = build_output_paths(out)
    fmt = cfg.outputs.tables_format
    output_path = write_table(normalized.to_frame(), paths.tables / f"points.{fmt}", fmt=fmt)
    typer.echo(f"Normalized {len(normalized.points)} points. Table: {output_path}")


@app.command()
def aggregate(
    data: Path | None = typer.Option(None, exists=True, readable=True, resolve_path=True),
    out: Path = typer.Option(Path("out"), resolve_path=True),
    config: Path | None = typer.Option(None, exists=True, readable=True, resolve_path=True),
    mode: ModeOption | None = typer.Option(
        None,
        help="Bucket by calendar day or by week. Falls back to view.mode in config.",
    ),
) -> None:
    """Write conversion-rate rows for one view mode."""
    configure_logging()
    cfg = _load_app_config(config)
    effective_mode = mode.value if mode else cfg.view.mode
    experiment = _load_experiment(_require_data_path(data, cfg))
    normalized = normalize_experiment(experiment)
    rows = aggregate_rows(normalized, effective_mode)
    paths = build_output_paths(out)
    fmt = cfg.outputs.tables_format
    output_path = write_table(
        rows_to_frame(rows, normalized.variation_ids),
        paths.tables / f"rows_{effective_mode}.{fmt}",
        fmt=fmt,
    )
    typer.echo(f"Aggregated {len(rows)} {effective_mode} rows. Table: {output_path}")


@app.command("axis-range")
def axis_range(
    data: Path | None = typer.Option(None, exists=True, readable=True, resolve_path=True),
    config: Path | None = typer.Option(None, exists=True, readable=True, resolve_path=True),
    mode: ModeOption | None = typer.Option(None),
    select: list[str] | None = typer.Option(
        None,
        "--select",
        help="Variation id to include; repeat for several. Defaults to all variations.",
    ),
) -> None:
    """Print the padded value-axis range for a mode and selection."""
    configure_logging()
    cfg = _load_app_config(config)
    effective_mode = mode.value if mode else cfg.view.mode
    experiment = _load_experiment(_require_data_path(data, cfg))
    normalized = normalize_experiment(experiment)
    rows = aggregate_rows(normalized, effective_mode)
    selected = resolve_selection(normalized.variation_ids, select or cfg.view.selected)
    y_min, y_max = compute_axis_range(
        rows,
        selected,
        pad_fraction=cfg.axis.pad_fraction,
        fallback_pad=cfg.axis.fallback_pad,
    )
    typer.echo(f"{y_min} {y_max}")


@app.command("run-all")
def run_all_command(
    data: Path | None = typer.Option(None, exists=True, readable=True, resolve_path=True),
    out: Path = typer.Option(Path("out"), resolve_path=True),
    config: Path | None = typer.Option(None, exists=True, readable=True, resolve_path=True),
    mode: ModeOption | None = typer.Option(None),
    select: list[str] | None = typer.Option(None, "--select"),
) -> None:
    """Normalize, aggregate and write the chart payload in one command."""
    configure_logging()
    cfg = _load_app_config(config)
    data_path = _require_data_path(data, cfg)
    try:
        summary_path = run_all(
            data_path=data_path,
            out_dir=out,
            config=cfg,
            mode=mode.value if mode else None,
            selected=select or None,
        )
    except (ValueError, OSError) as exc:
        raise typer.BadParameter(f"Could not load experiment from {data_path}: {exc}") from exc
    typer.echo(f"Run complete. Payload: {summary_path}")


if __name__ == "__main__":
    app()
