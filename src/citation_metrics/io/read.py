from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pandas as pd

from citation_metrics.config import InputConfig
from citation_metrics.io.schema import (
    CATEGORY_COLUMNS,
    embedded_category_rows,
    flatten_intent_rows,
    flatten_record_rows,
    normalize_categories,
    normalize_intents,
    normalize_records,
)

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class Snapshot:
    records: pd.DataFrame
    intents: pd.DataFrame
    categories: pd.DataFrame


def load_table(path: Path) -> pd.DataFrame:
    if path.suffix == ".parquet":
        return pd.read_parquet(path)
    if path.suffix == ".csv":
        return pd.read_csv(path)
    raise ValueError(f"Unsupported table file type: {path.suffix}")


def _load_json_rows(path: Path) -> list[dict[str, Any]]:
    with path.open("r", encoding="utf-8") as handle:
        payload = json.load(handle)
    if isinstance(payload, dict) and isinstance(payload.get("data"), list):
        payload = payload["data"]
    if not isinstance(payload, list):
        raise ValueError(f"JSON snapshot file must contain a list of rows: {path}")
    return payload


def load_record_table(path: Path) -> pd.DataFrame:
    if path.suffix == ".json":
        return normalize_records(flatten_record_rows(_load_json_rows(path)))
    return normalize_records(load_table(path))


def load_intent_table(path: Path) -> tuple[pd.DataFrame, pd.DataFrame]:
    """Return intents plus any category objects embedded in the intent rows."""
    if path.suffix == ".json":
        rows = _load_json_rows(path)
        return normalize_intents(flatten_intent_rows(rows)), embedded_category_rows(rows)
    return normalize_intents(load_table(path)), pd.DataFrame(columns=CATEGORY_COLUMNS)


def load_category_table(path: Path) -> pd.DataFrame:
    if path.suffix == ".json":
        return normalize_categories(pd.DataFrame(_load_json_rows(path)))
    return normalize_categories(load_table(path))


def load_snapshot(config: InputConfig) -> Snapshot:
    """Load the records/intents/categories snapshot from configured files."""
    records = load_record_table(Path(config.records_path))
    intents, embedded_categories = load_intent_table(Path(config.intents_path))
    categories = load_category_table(Path(config.categories_path))

    if not embedded_categories.empty:
        categories = (
            pd.concat([categories, embedded_categories], ignore_index=True)
            .drop_duplicates(subset=["id"], keep="first")
            .reset_index(drop=True)
        )

    LOGGER.info(
        "Loaded snapshot: %d records, %d intents, %d categories",
        len(records),
        len(intents),
        len(categories),
    )
    return Snapshot(records=records, intents=intents, categories=categories)
