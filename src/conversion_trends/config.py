from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field

DATA_PATH_ENV_VAR = "CONVERSION_TRENDS_DATA_PATH"


class InputConfig(BaseModel):
    data_path: str | None = None


class ViewConfig(BaseModel):
    mode: Literal["day", "week"] = "day"
    selected: list[str | int] = Field(default_factory=list)


class AxisConfig(BaseModel):
    pad_fraction: float = Field(default=0.12, ge=0.0)
    fallback_pad: float = Field(default=1.0, gt=0.0)


class OutputsConfig(BaseModel):
    tables_format: Literal["csv", "parquet"] = "csv"


class AppConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    input: InputConfig = Field(default_factory=InputConfig)
    view: ViewConfig = Field(default_factory=ViewConfig)
    axis: AxisConfig = Field(default_factory=AxisConfig)
    outputs: OutputsConfig = Field(default_factory=OutputsConfig)


def _resolve_optional_path(path_value: str | None, base_dir: Path) -> str | None:
    if not path_value:
        return None
    candidate = Path(path_value)
    if candidate.is_absolute():
        return str(candidate)
    return str((base_dir / candidate).resolve())


def load_config(path: Path) -> AppConfig:
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}

    config = AppConfig.model_validate(data)
    base_dir = path.resolve().parent

    env_data_path = os.getenv(DATA_PATH_ENV_VAR)
    if env_data_path:
        config.input.data_path = str(Path(env_data_path).resolve())
    else:
        config.input.data_path = _resolve_optional_path(config.input.data_path, base_dir)
    config.view.selected = [str(value) for value in config.view.selected]
    return config
