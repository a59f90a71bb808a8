from __future__ import annotations

from enum import Enum
from pathlib import Path

import typer

from citation_metrics.config import DEFAULT_CONFIG_PATH, AppConfig, load_config
from citation_metrics.filters import FilterParams, build_filter_options
from citation_metrics.io.read import load_snapshot
from citation_metrics.logging import configure_logging
from citation_metrics.pipeline.prepare import prepare_records
from citation_metrics.pipeline.report import run_report

app = typer.Typer(no_args_is_help=True, add_completion=False)


class DateRangeOption(str, Enum):
    last_7_days = "7d"
    last_30_days = "30d"
    last_90_days = "90d"
    all_time = "all"


class LogLevelOption(str, Enum):
    debug = "debug"
    info = "info"
    warning = "warning"
    error = "error"


def _load_app_config(config_path: Path) -> AppConfig:
    return load_config(config_path)


def _resolve_filter_params(
    cfg: AppConfig,
    date_range: DateRangeOption | None,
    categories: list[str] | None,
    subcategories: list[str] | None,
    prompts: list[str] | None,
) -> FilterParams:
    defaults = FilterParams.from_config(cfg.filters)
    return FilterParams(
        date_range=date_range.value if date_range is not None else defaults.date_range,
        categories=frozenset(categories) if categories else defaults.categories,
        subcategories=frozenset(subcategories) if subcategories else defaults.subcategories,
        prompts=frozenset(prompts) if prompts else defaults.prompts,
    )


@app.command()
def report(
    out: Path = typer.Option(Path("out"), resolve_path=True),
    config: Path = typer.Option(DEFAULT_CONFIG_PATH, exists=True, readable=True, resolve_path=True),
    date_range: DateRangeOption | None = typer.Option(
        None,
        help="Override the configured date range.",
    ),
    category: list[str] | None = typer.Option(
        None,
        help="Root category to keep. Repeat for several.",
    ),
    subcategory: list[str] | None = typer.Option(
        None,
        help="Subcategory to keep. Repeat for several.",
    ),
    prompt: list[str] | None = typer.Option(
        None,
        help="Truncated prompt key (first 100 characters) to keep. Repeat for several.",
    ),
    log_level: LogLevelOption = typer.Option(LogLevelOption.info, help="Logging verbosity."),
) -> None:
    """Compute citation-rate tables and time series for the configured snapshot."""
    configure_logging(log_level.value)
    cfg = _load_app_config(config)
    params = _resolve_filter_params(cfg, date_range, category, subcategory, prompt)
    result = run_report(config=cfg, out_dir=out, params=params)
    summary = result.summary
    typer.echo(
        "Report complete. "
        f"records={summary['total_records']}/{summary['total_unfiltered']} "
        f"citation_rate={summary['citation_rate']:.1f}% "
        f"ci=({summary['ci_lower']:.1f}%, {summary['ci_upper']:.1f}%) "
        f"confidence={summary['confidence_level']}"
    )
    typer.echo(f"Tables written to: {out / 'tables'}")


@app.command("filter-options")
def filter_options(
    config: Path = typer.Option(DEFAULT_CONFIG_PATH, exists=True, readable=True, resolve_path=True),
    log_level: LogLevelOption = typer.Option(LogLevelOption.info, help="Logging verbosity."),
) -> None:
    """List the category, subcategory and prompt values available for filtering."""
    configure_logging(log_level.value)
    cfg = _load_app_config(config)
    prepared = prepare_records(load_snapshot(cfg.input), config=cfg.time)
    options = build_filter_options(prepared)
    for dimension in ("categories", "subcategories", "prompts"):
        typer.echo(f"{dimension}:")
        for value in options[dimension]:
            typer.echo(f"- {value}")


if __name__ == "__main__":
    app()
