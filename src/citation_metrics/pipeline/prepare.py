from __future__ import annotations

import logging

import pandas as pd

from citation_metrics.categories import CategoryLookup, attach_categories, find_deep_chains
from citation_metrics.config import TimeConfig
from citation_metrics.io.read import Snapshot
from citation_metrics.preprocess.labels import add_group_labels
from citation_metrics.preprocess.time import add_time_features

LOGGER = logging.getLogger(__name__)


def prepare_records(
    snapshot: Snapshot,
    config: TimeConfig,
    lookup: CategoryLookup | None = None,
) -> pd.DataFrame:
    """Resolve categories, grouping keys and display dates for every record."""
    if lookup is None:
        lookup = CategoryLookup.from_frame(snapshot.categories)
    deep_chains = find_deep_chains(lookup)
    if deep_chains:
        LOGGER.warning(
            "Categories nested deeper than two levels roll up one level only: %s",
            ", ".join(deep_chains),
        )

    df = attach_categories(records=snapshot.records, intents=snapshot.intents, lookup=lookup)
    df = add_group_labels(df)
    df = add_time_features(df, config=config)
    LOGGER.info(
        "Prepared %d records (%d without a resolvable category)",
        len(df),
        int((~df["root_category_resolved"]).sum()),
    )
    return df
