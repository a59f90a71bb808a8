from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Mapping

import pandas as pd

UNCATEGORIZED_LABEL = "Uncategorized"
DANGLING_PARENT_LABEL = "Other"
UNKNOWN_LABEL = "Unknown"


def normalize_id(value: Any) -> str | None:
    """Canonical string form of an id read from JSON, CSV or parquet."""
    if value is None or value is pd.NA:
        return None
    if isinstance(value, float):
        if math.isnan(value):
            return None
        if value.is_integer():
            return str(int(value))
    text = str(value).strip()
    return text or None


@dataclass(frozen=True)
class Category:
    id: str
    name: str
    parent_id: str | None = None

    @property
    def is_subcategory(self) -> bool:
        return self.parent_id is not None


@dataclass(frozen=True)
class CategoryLookup:
    """Id-indexed category table. Parent resolution is limited to one hop."""

    by_id: Mapping[str, Category] = field(default_factory=dict)

    @classmethod
    def from_frame(cls, categories: pd.DataFrame) -> CategoryLookup:
        by_id: dict[str, Category] = {}
        for row in categories.itertuples(index=False):
            category_id = normalize_id(row.id)
            if category_id is None or category_id in by_id:
                continue
            by_id[category_id] = Category(
                id=category_id,
                name=str(row.name),
                parent_id=normalize_id(row.parent_id),
            )
        return cls(by_id=by_id)

    def get(self, category_id: Any) -> Category | None:
        key = normalize_id(category_id)
        if key is None:
            return None
        return self.by_id.get(key)

    def parent_of(self, category: Category) -> Category | None:
        if category.parent_id is None:
            return None
        return self.by_id.get(category.parent_id)

    def __len__(self) -> int:
        return len(self.by_id)


def resolve_root_name(category: Category | None, lookup: CategoryLookup) -> str:
    """Rollup name for a category: itself for roots, its parent for subcategories."""
    if category is None:
        return UNCATEGORIZED_LABEL
    if not category.is_subcategory:
        return category.name
    parent = lookup.parent_of(category)
    if parent is None:
        return UNCATEGORIZED_LABEL
    return parent.name


def find_deep_chains(lookup: CategoryLookup) -> list[str]:
    """Ids of subcategories whose parent is itself a subcategory."""
    deep: list[str] = []
    for category in lookup.by_id.values():
        parent = lookup.parent_of(category)
        if parent is not None and parent.is_subcategory:
            deep.append(category.id)
    return sorted(deep)


def _category_fields(category: Category | None, lookup: CategoryLookup) -> dict[str, Any]:
    if category is None:
        return {
            "category_id": None,
            "category_name": None,
            "is_subcategory": False,
            "root_category": UNCATEGORIZED_LABEL,
            "root_category_resolved": False,
            "parent_category": None,
        }

    if not category.is_subcategory:
        resolved = True
        parent_category = None
    else:
        parent = lookup.parent_of(category)
        resolved = parent is not None
        parent_category = parent.name if parent is not None else DANGLING_PARENT_LABEL
    return {
        "category_id": category.id,
        "category_name": category.name,
        "is_subcategory": category.is_subcategory,
        "root_category": resolve_root_name(category, lookup),
        "root_category_resolved": resolved,
        "parent_category": parent_category,
    }


def _non_blank(value: Any) -> str | None:
    if value is None or value is pd.NA:
        return None
    if isinstance(value, float) and math.isnan(value):
        return None
    text = str(value)
    return text if text else None


def attach_categories(
    records: pd.DataFrame,
    intents: pd.DataFrame,
    lookup: CategoryLookup,
) -> pd.DataFrame:
    """Add intent label and category rollup columns to each record."""
    intent_labels: dict[str, str | None] = {}
    intent_categories: dict[str, str | None] = {}
    for row in intents.itertuples(index=False):
        intent_id = normalize_id(row.id)
        if intent_id is None or intent_id in intent_labels:
            continue
        intent_labels[intent_id] = _non_blank(row.label)
        intent_categories[intent_id] = normalize_id(row.category_id)

    working = records.copy()
    intent_ids = [normalize_id(value) for value in working["intent_id"]]

    own_labels = (
        working["intent_label"].tolist()
        if "intent_label" in working.columns
        else [None] * len(working)
    )
    working["intent_label"] = [
        _non_blank(own) or intent_labels.get(intent_id or "")
        for own, intent_id in zip(own_labels, intent_ids)
    ]

    fields = [
        _category_fields(lookup.get(intent_categories.get(intent_id or "")), lookup)
        for intent_id in intent_ids
    ]
    category_frame = pd.DataFrame(
        fields,
        index=working.index,
        columns=[
            "category_id",
            "category_name",
            "is_subcategory",
            "root_category",
            "root_category_resolved",
            "parent_category",
        ],
    )
    for column in category_frame.columns:
        working[column] = category_frame[column]
    working["is_subcategory"] = working["is_subcategory"].astype(bool)
    working["root_category_resolved"] = working["root_category_resolved"].astype(bool)
    return working
