from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

from citation_metrics.cli import app
from citation_metrics.filters import FilterParams
from citation_metrics.logging import configure_logging
from citation_metrics.pipeline.report import CitationReport


def _fake_summary() -> dict:
    return {
        "total_records": 30,
        "total_unfiltered": 40,
        "citation_rate": 40.0,
        "ci_lower": 24.59,
        "ci_upper": 57.68,
        "confidence_level": "low",
    }


def test_cli_help() -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["--help"])

    assert result.exit_code == 0
    assert "report" in result.stdout
    assert "filter-options" in result.stdout


def test_report_command_overrides_config_filters(monkeypatch, tmp_path: Path) -> None:
    config_path = tmp_path / "config.yaml"
    config_path.write_text(
        "filters:\n  date_range: 90d\n  prompts: [from-config]\n",
        encoding="utf-8",
    )
    captured: dict[str, object] = {}

    def _fake_run_report(config, out_dir: Path, params: FilterParams) -> CitationReport:
        captured["params"] = params
        captured["out_dir"] = out_dir
        return CitationReport(summary=_fake_summary())

    monkeypatch.setattr("citation_metrics.cli.run_report", _fake_run_report)

    runner = CliRunner()
    result = runner.invoke(
        app,
        [
            "report",
            "--config",
            str(config_path),
            "--out",
            str(tmp_path / "out"),
            "--date-range",
            "7d",
            "--category",
            "Databases",
            "--category",
            "Frontend",
        ],
    )

    assert result.exit_code == 0, result.stdout
    params = captured["params"]
    assert isinstance(params, FilterParams)
    assert params.date_range == "7d"
    assert params.categories == frozenset({"Databases", "Frontend"})
    assert params.subcategories == frozenset()
    assert params.prompts == frozenset({"from-config"})
    assert "records=30/40" in result.stdout
    assert "confidence=low" in result.stdout


def test_report_command_rejects_unknown_date_range(tmp_path: Path) -> None:
    config_path = tmp_path / "config.yaml"
    config_path.write_text("{}", encoding="utf-8")

    runner = CliRunner()
    result = runner.invoke(
        app,
        ["report", "--config", str(config_path), "--date-range", "14d"],
    )

    assert result.exit_code != 0


def test_filter_options_command_lists_values(tmp_path: Path) -> None:
    (tmp_path / "records.csv").write_text(
        "id,prompt_text,model_name,created_at,intent_id,mentioned\n"
        "1,which db,gpt-4o,2026-03-01T10:00:00Z,i1,true\n",
        encoding="utf-8",
    )
    (tmp_path / "intents.csv").write_text(
        "id,label,category_id\ni1,Postgres hosting,c2\n",
        encoding="utf-8",
    )
    (tmp_path / "categories.csv").write_text(
        "id,name,parent_id\nc1,Databases,\nc2,Postgres,c1\n",
        encoding="utf-8",
    )
    config_path = tmp_path / "config.yaml"
    config_path.write_text(
        "input:\n"
        "  records_path: records.csv\n"
        "  intents_path: intents.csv\n"
        "  categories_path: categories.csv\n",
        encoding="utf-8",
    )

    runner = CliRunner()
    result = runner.invoke(app, ["filter-options", "--config", str(config_path)])

    assert result.exit_code == 0, result.stdout
    assert "- Databases" in result.stdout
    assert "- Postgres" in result.stdout
    assert "- which db" in result.stdout


def test_report_command_passes_log_level(monkeypatch, tmp_path: Path) -> None:
    config_path = tmp_path / "config.yaml"
    config_path.write_text("{}", encoding="utf-8")
    levels: list[str] = []

    monkeypatch.setattr("citation_metrics.cli.configure_logging", levels.append)
    monkeypatch.setattr(
        "citation_metrics.cli.run_report",
        lambda config, out_dir, params: CitationReport(summary=_fake_summary()),
    )

    runner = CliRunner()
    result = runner.invoke(
        app,
        [
            "report",
            "--config",
            str(config_path),
            "--out",
            str(tmp_path / "out"),
            "--log-level",
            "warning",
        ],
    )

    assert result.exit_code == 0, result.stdout
    assert levels == ["warning"]


def test_report_command_rejects_unknown_log_level(tmp_path: Path) -> None:
    config_path = tmp_path / "config.yaml"
    config_path.write_text("{}", encoding="utf-8")

    runner = CliRunner()
    result = runner.invoke(
        app,
        ["report", "--config", str(config_path), "--log-level", "chatty"],
    )

    assert result.exit_code != 0


def test_configure_logging_rejects_unknown_level() -> None:
    with pytest.raises(ValueError, match="Unknown log level"):
        configure_logging("chatty")
