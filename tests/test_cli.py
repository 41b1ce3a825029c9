from __future__ import annotations

import json
from pathlib import Path

import pandas as pd
import yaml
from typer.testing import CliRunner

from conversion_trends.cli import app


def _write_experiment(tmp_path: Path) -> Path:
    path = tmp_path / "experiment.json"
    path.write_text(
        json.dumps(
            {
                "variations": [{"id": 1, "name": "A"}, {"id": 2, "name": "B"}],
                "days": [
                    {"date": "2024-01-02", "visits": {"1": 100}, "conversions": {"1": 50}},
                    {"date": "2024-01-03", "visits": {"1": 200}, "conversions": {"1": 100, "2": 4}},
                ],
            }
        ),
        encoding="utf-8",
    )
    return path


def test_cli_help() -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["--help"])

    assert result.exit_code == 0
    assert "normalize" in result.stdout
    assert "aggregate" in result.stdout
    assert "axis-range" in result.stdout
    assert "run-all" in result.stdout


def test_axis_range_command_prints_padded_range(tmp_path: Path) -> None:
    data_path = _write_experiment(tmp_path)

    runner = CliRunner()
    result = runner.invoke(app, ["axis-range", "--data", str(data_path), "--select", "1"])

    assert result.exit_code == 0, result.stdout
    assert "49 51" in result.stdout


def test_axis_range_command_uses_config_defaults(tmp_path: Path) -> None:
    data_path = _write_experiment(tmp_path)
    config_path = tmp_path / "config.yaml"
    config_path.write_text(
        yaml.safe_dump(
            {
                "input": {"data_path": data_path.name},
                "view": {"mode": "week", "selected": ["2"]},
            }
        ),
        encoding="utf-8",
    )

    runner = CliRunner()
    result = runner.invoke(app, ["axis-range", "--config", str(config_path)])

    assert result.exit_code == 0, result.stdout
    assert "0 1" in result.stdout


def test_aggregate_command_writes_rows_table(tmp_path: Path) -> None:
    data_path = _write_experiment(tmp_path)
    out_dir = tmp_path / "out"

    runner = CliRunner()
    result = runner.invoke(
        app,
        ["aggregate", "--data", str(data_path), "--out", str(out_dir), "--mode", "week"],
    )

    assert result.exit_code == 0, result.stdout
    assert "Aggregated 1 week rows" in result.stdout
    table = pd.read_csv(out_dir / "tables" / "rows_week.csv")
    assert list(table.columns) == ["date", "conversionRate_1", "conversionRate_2"]
    assert table.loc[0, "date"] == "2024-01-01"
    assert table.loc[0, "conversionRate_1"] == 50.0
    assert table.loc[0, "conversionRate_2"] == 0.0


def test_normalize_command_writes_points_table(tmp_path: Path) -> None:
    data_path = _write_experiment(tmp_path)
    out_dir = tmp_path / "out"

    runner = CliRunner()
    result = runner.invoke(app, ["normalize", "--data", str(data_path), "--out", str(out_dir)])

    assert result.exit_code == 0, result.stdout
    assert "Normalized 3 points" in result.stdout
    points = pd.read_csv(out_dir / "tables" / "points.csv", dtype={"variation_id": str})
    assert points["variation_id"].tolist() == ["1", "1", "2"]
    assert points["visits"].sum() == 300


def test_command_requires_data_path() -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["axis-range"])

    assert result.exit_code != 0
    combined_output = result.stdout
    if hasattr(result, "stderr") and result.stderr:
        combined_output += result.stderr
    assert "Missing --data" in combined_output or "Missing --data" in str(result.exception)


def test_command_rejects_structurally_invalid_document(tmp_path: Path) -> None:
    data_path = tmp_path / "broken.json"
    data_path.write_text(json.dumps({"variations": []}), encoding="utf-8")

    runner = CliRunner()
    result = runner.invoke(app, ["run-all", "--data", str(data_path), "--out", str(tmp_path)])

    assert result.exit_code != 0
    assert not (tmp_path / "summary" / "chart_payload_day.json").exists()


def test_run_all_reports_malformed_json_as_bad_parameter(tmp_path: Path) -> None:
    data_path = tmp_path / "broken.json"
    data_path.write_text('{"variations": [', encoding="utf-8")

    runner = CliRunner()
    result = runner.invoke(app, ["run-all", "--data", str(data_path), "--out", str(tmp_path)])

    assert result.exit_code == 2
    combined_output = result.stdout
    if hasattr(result, "stderr") and result.stderr:
        combined_output += result.stderr
    assert "Could not load experiment" in combined_output


def test_axis_range_reports_malformed_yaml_as_bad_parameter(tmp_path: Path) -> None:
    data_path = tmp_path / "broken.yaml"
    data_path.write_text("variations: [\n  - id: 1\ndays: {", encoding="utf-8")

    runner = CliRunner()
    result = runner.invoke(app, ["axis-range", "--data", str(data_path)])

    assert result.exit_code == 2
    combined_output = result.stdout
    if hasattr(result, "stderr") and result.stderr:
        combined_output += result.stderr
    assert "Could not load experiment" in combined_output
