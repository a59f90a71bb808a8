from __future__ import annotations

import os
from pathlib import Path
from typing import Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

DateRange = Literal["7d", "30d", "90d", "all"]

SNAPSHOT_DIR_ENV = "CITATION_METRICS_SNAPSHOT_DIR"


class InputConfig(BaseModel):
    snapshot_dir: str | None = None
    records_path: str = "queries.json"
    intents_path: str = "intents.json"
    categories_path: str = "categories.json"


class FiltersConfig(BaseModel):
    date_range: DateRange = "all"
    categories: list[str] = Field(default_factory=list)
    subcategories: list[str] = Field(default_factory=list)
    prompts: list[str] = Field(default_factory=list)


class TimeConfig(BaseModel):
    # None buckets by the calendar date of the machine running the report.
    display_timezone: str | None = None

    @field_validator("display_timezone")
    @classmethod
    def _validate_timezone(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        try:
            ZoneInfo(value.strip())
        except ZoneInfoNotFoundError as exc:
            raise ValueError(f"invalid display timezone: {value}") from exc
        return value.strip()


class OutputsConfig(BaseModel):
    tables_format: Literal["parquet", "csv"] = "parquet"


class AppConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    input: InputConfig = Field(default_factory=InputConfig)
    filters: FiltersConfig = Field(default_factory=FiltersConfig)
    time: TimeConfig = Field(default_factory=TimeConfig)
    outputs: OutputsConfig = Field(default_factory=OutputsConfig)


DEFAULT_CONFIG_PATH = Path("configs/default.yaml")


def _resolve_path(path_value: str, base_dir: Path) -> str:
    candidate = Path(path_value)
    if candidate.is_absolute():
        return str(candidate)
    return str((base_dir / candidate).resolve())


def load_config(path: Path) -> AppConfig:
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}

    config = AppConfig.model_validate(data)
    config_dir = path.resolve().parent

    snapshot_dir = config.input.snapshot_dir or os.getenv(SNAPSHOT_DIR_ENV)
    base_dir = Path(_resolve_path(snapshot_dir, config_dir)) if snapshot_dir else config_dir
    config.input.snapshot_dir = str(base_dir)

    config.input.records_path = _resolve_path(config.input.records_path, base_dir)
    config.input.intents_path = _resolve_path(config.input.intents_path, base_dir)
    config.input.categories_path = _resolve_path(config.input.categories_path, base_dir)
    return config
