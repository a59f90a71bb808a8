from __future__ import annotations

import math
from typing import Any, Iterable, Mapping

import pandas as pd


RECORD_COLUMNS = [
    "id",
    "prompt_text",
    "model_id",
    "model_name",
    "created_at",
    "response_length",
    "intent_id",
    "intent_label",
    "mentioned",
]
REQUIRED_RECORD_COLUMNS = ["id", "created_at"]
INTENT_COLUMNS = ["id", "label", "category_id"]
CATEGORY_COLUMNS = ["id", "name", "parent_id"]
TRUE_STRINGS = {"true", "t", "1", "yes"}


def _first(value: Any) -> Mapping[str, Any]:
    """Embedded relations arrive either as a one-element list or as an object."""
    if isinstance(value, list):
        return value[0] if value and isinstance(value[0], Mapping) else {}
    if isinstance(value, Mapping):
        return value
    return {}


def _coalesce(*values: Any) -> Any:
    for value in values:
        if value is not None:
            return value
    return None


def flatten_record_rows(rows: Iterable[Mapping[str, Any]]) -> pd.DataFrame:
    """Flatten exported query rows (with embedded model/intent/mention) to record columns."""
    flattened: list[dict[str, Any]] = []
    for row in rows:
        model = _first(row.get("models"))
        intent = _first(row.get("intents"))
        mention = _first(row.get("brand_mentions"))
        flattened.append(
            {
                "id": row.get("id"),
                "prompt_text": row.get("prompt_text"),
                "model_id": _coalesce(row.get("model_id"), model.get("id")),
                "model_name": _coalesce(row.get("model_name"), model.get("model_name")),
                "created_at": row.get("created_at"),
                "response_length": row.get("response_length"),
                "intent_id": _coalesce(row.get("intent_id"), intent.get("id")),
                "intent_label": _coalesce(row.get("intent_label"), intent.get("label")),
                "mentioned": _as_bool(_coalesce(row.get("mentioned"), mention.get("mentioned"))),
            }
        )
    return pd.DataFrame(flattened, columns=RECORD_COLUMNS)


def flatten_intent_rows(rows: Iterable[Mapping[str, Any]]) -> pd.DataFrame:
    flattened = [
        {
            "id": row.get("id"),
            "label": row.get("label"),
            "category_id": _coalesce(
                row.get("category_id"),
                _first(row.get("categories")).get("id"),
            ),
        }
        for row in rows
    ]
    return pd.DataFrame(flattened, columns=INTENT_COLUMNS)


def embedded_category_rows(rows: Iterable[Mapping[str, Any]]) -> pd.DataFrame:
    """Category objects embedded in exported intent rows."""
    embedded = []
    for row in rows:
        category = _first(row.get("categories"))
        if category.get("id") is None:
            continue
        embedded.append(
            {
                "id": category.get("id"),
                "name": category.get("name"),
                "parent_id": category.get("parent_id"),
            }
        )
    return pd.DataFrame(embedded, columns=CATEGORY_COLUMNS)


def normalize_records(df: pd.DataFrame) -> pd.DataFrame:
    """Validate a flat record table and fill optional canonical columns."""
    missing = [column for column in REQUIRED_RECORD_COLUMNS if column not in df.columns]
    if missing:
        raise ValueError(f"Missing required record columns: {', '.join(missing)}")

    working = df.copy()
    for column in RECORD_COLUMNS:
        if column not in working.columns:
            working[column] = None
    working["mentioned"] = working["mentioned"].map(_as_bool)
    working["response_length"] = pd.to_numeric(working["response_length"], errors="coerce")
    return working[RECORD_COLUMNS + [c for c in working.columns if c not in RECORD_COLUMNS]]


def normalize_intents(df: pd.DataFrame) -> pd.DataFrame:
    if "id" not in df.columns or "label" not in df.columns:
        raise ValueError("Intent table requires 'id' and 'label' columns")
    working = df.copy()
    if "category_id" not in working.columns:
        working["category_id"] = None
    return working[INTENT_COLUMNS]


def normalize_categories(df: pd.DataFrame) -> pd.DataFrame:
    if "id" not in df.columns or "name" not in df.columns:
        raise ValueError("Category table requires 'id' and 'name' columns")
    working = df.copy()
    if "parent_id" not in working.columns:
        working["parent_id"] = None
    return working[CATEGORY_COLUMNS]


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in TRUE_STRINGS
    if value is None or value is pd.NA:
        return False
    if isinstance(value, float) and math.isnan(value):
        return False
    return bool(value)
