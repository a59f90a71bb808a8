from __future__ import annotations

import math

import pandas as pd

from citation_metrics.categories import UNKNOWN_LABEL
from citation_metrics.proportion_stats import (
    add_interval_columns,
    citation_rate_percent,
    classify_confidence,
    wilson_interval,
)

STAT_COLUMNS = [
    "total",
    "mentioned",
    "citation_rate",
    "ci_lower",
    "ci_upper",
    "ci_width",
    "confidence_level",
]


def _rank_groups(
    records: pd.DataFrame,
    key: str,
    label_column: str,
    **extra_aggs: tuple[str, str],
) -> pd.DataFrame:
    """Count records per group, attach interval stats, rank by total (stable)."""
    grouped = (
        records.groupby(key, sort=False, dropna=False)
        .agg(
            total=("mentioned", "size"),
            mentioned=("mentioned", "sum"),
            **extra_aggs,
        )
        .reset_index()
        .rename(columns={key: label_column})
    )
    grouped["total"] = grouped["total"].astype(int)
    grouped["mentioned"] = grouped["mentioned"].astype(int)
    grouped = grouped.loc[grouped["total"] > 0]
    grouped = add_interval_columns(grouped)
    grouped = grouped.sort_values("total", ascending=False, kind="mergesort")
    extra_columns = list(extra_aggs)
    return grouped[[label_column, *extra_columns, *STAT_COLUMNS]].reset_index(drop=True)


def build_category_table(records: pd.DataFrame) -> pd.DataFrame:
    working = records.assign(
        intent_label_or_unknown=records["intent_label"].fillna(UNKNOWN_LABEL),
    )
    return _rank_groups(
        working,
        key="root_category",
        label_column="category",
        intent_count=("intent_label_or_unknown", "nunique"),
    )


def build_subcategory_table(records: pd.DataFrame) -> pd.DataFrame:
    subcategory_records = records.loc[records["is_subcategory"].astype(bool)]
    return _rank_groups(
        subcategory_records,
        key="category_name",
        label_column="subcategory",
        category=("parent_category", "first"),
    )


def build_prompt_table(records: pd.DataFrame) -> pd.DataFrame:
    working = records.assign(
        intent_label_or_unknown=records["intent_label"].fillna(UNKNOWN_LABEL),
    )
    return _rank_groups(
        working,
        key="prompt_group",
        label_column="prompt",
        label=("intent_label_or_unknown", "first"),
    )


def build_model_table(records: pd.DataFrame) -> pd.DataFrame:
    return _rank_groups(records, key="model_label", label_column="model")


def build_overall_summary(records: pd.DataFrame, total_unfiltered: int | None = None) -> dict:
    total = int(len(records))
    mentioned = int(records["mentioned"].astype(bool).sum()) if total else 0
    interval = wilson_interval(mentioned, total)

    avg_response_length = 0
    if total:
        lengths = pd.to_numeric(records["response_length"], errors="coerce").fillna(0)
        avg_response_length = int(math.floor(float(lengths.sum()) / total + 0.5))

    return {
        "total_records": total,
        "total_unfiltered": int(total_unfiltered) if total_unfiltered is not None else total,
        "mentioned": mentioned,
        "citation_rate": citation_rate_percent(mentioned, total),
        "avg_response_length": avg_response_length,
        "ci_lower": interval.lower,
        "ci_upper": interval.upper,
        "ci_width": interval.width,
        "confidence_level": classify_confidence(interval.width, total),
    }
