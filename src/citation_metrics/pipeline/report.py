from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pandas as pd

from citation_metrics.aggregates import (
    build_category_table,
    build_model_table,
    build_overall_summary,
    build_prompt_table,
    build_subcategory_table,
)
from citation_metrics.config import AppConfig, TimeConfig
from citation_metrics.filters import FilterParams, build_filter_options, filter_records
from citation_metrics.io.read import Snapshot, load_snapshot
from citation_metrics.io.write import write_summary, write_table
from citation_metrics.paths import build_output_paths
from citation_metrics.pipeline.prepare import prepare_records
from citation_metrics.time_series import build_daily_series

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class CitationReport:
    summary: dict[str, Any]
    tables: dict[str, pd.DataFrame] = field(default_factory=dict)
    filter_options: dict[str, list[str]] = field(default_factory=dict)


def build_citation_report(
    snapshot: Snapshot,
    params: FilterParams,
    time_config: TimeConfig | None = None,
    now: pd.Timestamp | None = None,
) -> CitationReport:
    prepared = prepare_records(snapshot, config=time_config or TimeConfig())
    filtered = filter_records(prepared, params, now=now)
    LOGGER.info(
        "Filtered %d of %d records (date_range=%s, active_filters=%s)",
        len(filtered),
        len(prepared),
        params.date_range,
        params.has_active_filters,
    )

    summary = build_overall_summary(filtered, total_unfiltered=len(prepared))
    summary["filters"] = {
        "date_range": params.date_range,
        "categories": sorted(params.categories),
        "subcategories": sorted(params.subcategories),
        "prompts": sorted(params.prompts),
    }
    tables = {
        "by_category": build_category_table(filtered),
        "by_subcategory": build_subcategory_table(filtered),
        "by_prompt": build_prompt_table(filtered),
        "by_model": build_model_table(filtered),
        "daily_series": build_daily_series(filtered),
    }
    return CitationReport(
        summary=summary,
        tables=tables,
        filter_options=build_filter_options(prepared),
    )


def write_report_artifacts(report: CitationReport, out_dir: Path, config: AppConfig) -> Path:
    paths = build_output_paths(out_dir)
    fmt = config.outputs.tables_format
    for name, table in report.tables.items():
        write_table(table, paths.tables / f"{name}.{fmt}", fmt=fmt)
    summary_path = write_summary(
        {**report.summary, "filter_options": report.filter_options},
        paths.summary / "summary.json",
    )
    LOGGER.info("Wrote %d tables to %s", len(report.tables), paths.tables)
    return summary_path


def run_report(
    config: AppConfig,
    out_dir: Path,
    params: FilterParams | None = None,
    now: pd.Timestamp | None = None,
) -> CitationReport:
    snapshot = load_snapshot(config.input)
    report = build_citation_report(
        snapshot,
        params=params or FilterParams.from_config(config.filters),
        time_config=config.time,
        now=now,
    )
    write_report_artifacts(report, out_dir=out_dir, config=config)
    return report
