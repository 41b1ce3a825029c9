from __future__ import annotations

from collections.abc import Mapping
from datetime import date, datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator


class InvalidExperimentError(ValueError):
    """Raised when an experiment document is structurally unusable."""


class Variation(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int | str | None = None
    name: str = ""


class DayRecord(BaseModel):
    """Counters for one calendar day; either map may omit a variation."""

    model_config = ConfigDict(frozen=True)

    date: str
    visits: dict[str, Any] = Field(default_factory=dict)
    conversions: dict[str, Any] = Field(default_factory=dict)

    @field_validator("date", mode="before")
    @classmethod
    def _iso_calendar_date(cls, value: Any) -> str:
        if isinstance(value, datetime):
            value = value.date()
        if isinstance(value, date):
            return value.isoformat()
        try:
            return date.fromisoformat(str(value).strip()).isoformat()
        except ValueError as exc:
            raise ValueError(f"date must be a YYYY-MM-DD calendar date, got {value!r}") from exc

    @field_validator("visits", "conversions", mode="before")
    @classmethod
    def _string_keyed_counters(cls, value: Any) -> dict[str, Any]:
        if value is None:
            return {}
        if not isinstance(value, Mapping):
            raise ValueError("counters must be a mapping of variation id to count")
        # YAML documents can carry integer keys.
        return {str(key): count for key, count in value.items()}


class RawExperiment(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    variations: list[Variation]
    days: list[DayRecord] = Field(validation_alias=AliasChoices("days", "data"))


def validate_experiment(payload: Any) -> RawExperiment:
    """Reject documents without the variations/days structure before normalization."""
    if isinstance(payload, RawExperiment):
        return payload
    if not isinstance(payload, Mapping):
        raise InvalidExperimentError("Experiment document must be a mapping")
    if "variations" not in payload:
        raise InvalidExperimentError("Experiment document missing 'variations'")
    if "days" not in payload and "data" not in payload:
        raise InvalidExperimentError("Experiment document missing 'days'")
    try:
        return RawExperiment.model_validate(dict(payload))
    except ValidationError as exc:
        raise InvalidExperimentError(f"Invalid experiment document: {exc}") from exc
