from __future__ import annotations

import pandas as pd

from citation_metrics.config import TimeConfig


def parse_timestamps(values: pd.Series) -> pd.Series:
    """Parse creation timestamps to UTC; naive values are taken as UTC."""
    if pd.api.types.is_datetime64_any_dtype(values):
        return pd.to_datetime(values, utc=True)
    timestamps = pd.to_datetime(values, errors="coerce", utc=True, format="mixed")
    if len(values) and timestamps.isna().all():
        raise ValueError("No valid timestamps found in created_at column")
    return timestamps


def _display_dates(timestamps: pd.Series, timezone_name: str | None) -> pd.Series:
    if timezone_name:
        return timestamps.dt.tz_convert(timezone_name).dt.date
    # Resolve the local offset per instant so DST transitions land on the right day.
    return timestamps.map(
        lambda value: value.to_pydatetime().astimezone().date() if pd.notna(value) else None
    )


def add_time_features(df: pd.DataFrame, config: TimeConfig) -> pd.DataFrame:
    working = df.copy()
    timestamps = parse_timestamps(working["created_at"])
    working["timestamp"] = timestamps
    working["local_date"] = _display_dates(timestamps, config.display_timezone)
    return working
