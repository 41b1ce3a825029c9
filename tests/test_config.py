from __future__ import annotations

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from conversion_trends.config import DATA_PATH_ENV_VAR, load_config


def test_load_config_defaults(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.delenv(DATA_PATH_ENV_VAR, raising=False)
    config_path = tmp_path / "config.yaml"
    config_path.write_text("", encoding="utf-8")

    cfg = load_config(config_path)

    assert cfg.input.data_path is None
    assert cfg.view.mode == "day"
    assert cfg.view.selected == []
    assert cfg.axis.pad_fraction == 0.12
    assert cfg.axis.fallback_pad == 1.0
    assert cfg.outputs.tables_format == "csv"


def test_load_config_resolves_relative_data_path(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
) -> None:
    monkeypatch.delenv(DATA_PATH_ENV_VAR, raising=False)
    config_path = tmp_path / "configs" / "config.yaml"
    config_path.parent.mkdir()
    config_path.write_text(
        yaml.safe_dump(
            {
                "input": {"data_path": "../data/experiment.json"},
                "view": {"mode": "week", "selected": [0, "10001"]},
            }
        ),
        encoding="utf-8",
    )

    cfg = load_config(config_path)

    assert Path(cfg.input.data_path or "") == (tmp_path / "data" / "experiment.json").resolve()
    assert cfg.view.mode == "week"
    assert cfg.view.selected == ["0", "10001"]


def test_load_config_uses_env_data_path(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    config_path = tmp_path / "config.yaml"
    config_path.write_text(
        yaml.safe_dump({"input": {"data_path": "ignored.json"}}),
        encoding="utf-8",
    )
    env_path = tmp_path / "from_env.json"
    monkeypatch.setenv(DATA_PATH_ENV_VAR, str(env_path))

    cfg = load_config(config_path)

    assert cfg.input.data_path == str(env_path.resolve())


@pytest.mark.parametrize(
    "data",
    [
        {"unknown_section": {}},
        {"view": {"mode": "month"}},
        {"axis": {"fallback_pad": 0}},
        {"outputs": {"tables_format": "xlsx"}},
    ],
)
def test_load_config_rejects_invalid_values(tmp_path: Path, data: dict) -> None:
    config_path = tmp_path / "config.yaml"
    config_path.write_text(yaml.safe_dump(data), encoding="utf-8")

    with pytest.raises(ValidationError):
        load_config(config_path)
