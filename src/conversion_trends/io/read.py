from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml

from conversion_trends.io.schema import InvalidExperimentError, RawExperiment, validate_experiment
from conversion_trends.preprocess.normalize import normalize_variation_id


def _read_document(path: Path) -> Any:
    suffix = path.suffix.lower()
    text = path.read_text(encoding="utf-8-sig")
    try:
        if suffix == ".json":
            return json.loads(text)
        if suffix in {".yaml", ".yml"}:
            return yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise InvalidExperimentError(f"Could not parse {path.name}: {exc}") from exc
    raise ValueError(f"Unsupported experiment file type: {path.suffix}")


def load_experiment(path: Path) -> RawExperiment:
    """Read and validate an experiment document from JSON or YAML."""
    return validate_experiment(_read_document(Path(path)))


@lru_cache(maxsize=None)
def _cached_experiment(resolved_path: str) -> RawExperiment:
    return load_experiment(Path(resolved_path))


def load_default_experiment(path: Path) -> RawExperiment:
    """Return the process-wide dataset, reading it on first use only."""
    return _cached_experiment(str(Path(path).resolve()))


def clear_experiment_cache() -> None:
    _cached_experiment.cache_clear()


def variation_names(experiment: RawExperiment) -> dict[str, str]:
    return {
        normalize_variation_id(variation.id): variation.name
        for variation in experiment.variations
    }
