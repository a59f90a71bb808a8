from __future__ import annotations

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from citation_metrics.config import AppConfig, load_config


def test_load_config_defaults(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.delenv("CITATION_METRICS_SNAPSHOT_DIR", raising=False)
    config_path = tmp_path / "config.yaml"
    config_path.write_text("{}", encoding="utf-8")

    cfg = load_config(config_path)

    assert cfg.filters.date_range == "all"
    assert cfg.filters.categories == []
    assert cfg.time.display_timezone is None
    assert cfg.outputs.tables_format == "parquet"
    assert cfg.input.records_path == str((tmp_path / "queries.json").resolve())


def test_load_config_resolves_paths_against_snapshot_dir(tmp_path: Path) -> None:
    config_data = {
        "input": {
            "snapshot_dir": "exports",
            "records_path": "records.csv",
            "intents_path": "/abs/intents.csv",
        },
        "filters": {"date_range": "30d", "categories": ["Databases"]},
        "time": {"display_timezone": "Europe/Helsinki"},
    }
    config_path = tmp_path / "config.yaml"
    config_path.write_text(yaml.safe_dump(config_data), encoding="utf-8")

    cfg = load_config(config_path)

    assert cfg.input.records_path == str((tmp_path / "exports" / "records.csv").resolve())
    assert cfg.input.intents_path == "/abs/intents.csv"
    assert cfg.filters.date_range == "30d"
    assert cfg.filters.categories == ["Databases"]
    assert cfg.time.display_timezone == "Europe/Helsinki"


def test_load_config_uses_env_snapshot_dir(monkeypatch, tmp_path: Path) -> None:
    config_path = tmp_path / "config.yaml"
    config_path.write_text("{}", encoding="utf-8")
    snapshot_dir = tmp_path / "snapshots"
    monkeypatch.setenv("CITATION_METRICS_SNAPSHOT_DIR", str(snapshot_dir))

    cfg = load_config(config_path)

    assert cfg.input.categories_path == str((snapshot_dir / "categories.json").resolve())


def test_config_rejects_unknown_sections_and_bad_values() -> None:
    with pytest.raises(ValidationError):
        AppConfig.model_validate({"report": {}})
    with pytest.raises(ValidationError):
        AppConfig.model_validate({"filters": {"date_range": "14d"}})
    with pytest.raises(ValidationError, match="invalid display timezone"):
        AppConfig.model_validate({"time": {"display_timezone": "Mars/Olympus"}})
