from __future__ import annotations

import logging

import pandas as pd

from citation_metrics.proportion_stats import add_interval_columns

DAILY_SERIES_COLUMNS = [
    "date",
    "total",
    "mentioned",
    "citation_rate",
    "ci_lower",
    "ci_upper",
    "ci_width",
    "confidence_level",
]

LOGGER = logging.getLogger(__name__)


def build_daily_series(records: pd.DataFrame) -> pd.DataFrame:
    """Counts and citation rate per display calendar date, oldest first.

    Bucketing uses ``local_date`` (the date as shown in the display timezone),
    so bucket boundaries sit at local midnight rather than UTC midnight.
    Records without a parseable timestamp have no date; they stay in the
    grouped tables but are left out of the series.
    """
    if records.empty:
        return pd.DataFrame(columns=DAILY_SERIES_COLUMNS)

    undated = int(records["local_date"].isna().sum())
    if undated:
        LOGGER.warning("Daily series skips %d records without a valid created_at", undated)

    grouped = (
        records.groupby("local_date", dropna=True)
        .agg(
            total=("mentioned", "size"),
            mentioned=("mentioned", "sum"),
        )
        .sort_index()
        .reset_index()
        .rename(columns={"local_date": "date"})
    )
    grouped["total"] = grouped["total"].astype(int)
    grouped["mentioned"] = grouped["mentioned"].astype(int)
    grouped = grouped.loc[grouped["total"] > 0]
    grouped = add_interval_columns(grouped)
    return grouped[DAILY_SERIES_COLUMNS].reset_index(drop=True)
