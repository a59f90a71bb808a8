from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Iterable

import pandas as pd

from citation_metrics.config import DateRange, FiltersConfig

DATE_RANGE_DAYS: dict[str, int | None] = {
    "7d": 7,
    "30d": 30,
    "90d": 90,
    "all": None,
}


@dataclass(frozen=True)
class FilterParams:
    date_range: DateRange = "all"
    categories: frozenset[str] = field(default_factory=frozenset)
    subcategories: frozenset[str] = field(default_factory=frozenset)
    prompts: frozenset[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        if self.date_range not in DATE_RANGE_DAYS:
            raise ValueError(f"Unknown date range: {self.date_range}")
        object.__setattr__(self, "categories", frozenset(self.categories))
        object.__setattr__(self, "subcategories", frozenset(self.subcategories))
        object.__setattr__(self, "prompts", frozenset(self.prompts))

    @classmethod
    def from_config(cls, config: FiltersConfig) -> FilterParams:
        return cls(
            date_range=config.date_range,
            categories=frozenset(config.categories),
            subcategories=frozenset(config.subcategories),
            prompts=frozenset(config.prompts),
        )

    @property
    def has_active_filters(self) -> bool:
        return bool(self.categories or self.subcategories or self.prompts)

    def cleared(self) -> FilterParams:
        """Drop category, subcategory and prompt selections; keep the date range."""
        return replace(
            self,
            categories=frozenset(),
            subcategories=frozenset(),
            prompts=frozenset(),
        )


def date_cutoff(date_range: str, now: pd.Timestamp | None = None) -> pd.Timestamp | None:
    days = DATE_RANGE_DAYS[date_range]
    if days is None:
        return None
    reference = pd.Timestamp.now(tz="UTC") if now is None else pd.Timestamp(now)
    if reference.tzinfo is None:
        reference = reference.tz_localize("UTC")
    return reference - pd.Timedelta(days=days)


def date_mask(
    records: pd.DataFrame,
    date_range: str,
    now: pd.Timestamp | None = None,
) -> pd.Series:
    cutoff = date_cutoff(date_range, now=now)
    if cutoff is None:
        return pd.Series(True, index=records.index)
    return (records["timestamp"] >= cutoff).fillna(False).astype(bool)


def category_mask(records: pd.DataFrame, categories: Iterable[str]) -> pd.Series:
    # Subcategories match through their resolved parent; dangling parents never match.
    selected = set(categories)
    return records["root_category_resolved"].astype(bool) & records["root_category"].isin(selected)


def subcategory_mask(records: pd.DataFrame, subcategories: Iterable[str]) -> pd.Series:
    selected = set(subcategories)
    return records["is_subcategory"].astype(bool) & records["category_name"].isin(selected)


def prompt_mask(records: pd.DataFrame, prompts: Iterable[str]) -> pd.Series:
    return records["prompt_key"].isin(set(prompts))


def filter_records(
    records: pd.DataFrame,
    params: FilterParams,
    now: pd.Timestamp | None = None,
) -> pd.DataFrame:
    """Apply every active predicate conjunctively; row order is preserved."""
    mask = date_mask(records, params.date_range, now=now)
    if params.categories:
        mask &= category_mask(records, params.categories)
    if params.subcategories:
        mask &= subcategory_mask(records, params.subcategories)
    if params.prompts:
        mask &= prompt_mask(records, params.prompts)
    return records.loc[mask]


def build_filter_options(records: pd.DataFrame) -> dict[str, list[str]]:
    """Selectable values for each filter dimension over an unfiltered record set."""
    resolved = records.loc[records["root_category_resolved"].astype(bool)]
    subcategories = records.loc[records["is_subcategory"].astype(bool), "category_name"]
    prompts = records.loc[records["prompt_key"] != "", "prompt_key"]
    return {
        "categories": sorted(set(resolved["root_category"].dropna())),
        "subcategories": sorted(set(subcategories.dropna())),
        "prompts": sorted(set(prompts.dropna())),
    }
