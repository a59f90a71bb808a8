from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Literal

import numpy as np
import pandas as pd

# Two-sided 95% critical value of the standard normal.
WILSON_Z = 1.959963985

INSUFFICIENT_MAX_TOTAL = 3
HIGH_MIN_TOTAL = 30
HIGH_MAX_WIDTH = 10.0
MEDIUM_MIN_TOTAL = 10
MEDIUM_MAX_WIDTH = 20.0

ConfidenceLevel = Literal["insufficient", "low", "medium", "high"]


@dataclass(frozen=True)
class WilsonInterval:
    """Wilson score interval expressed in percentage points."""

    lower: float
    upper: float
    width: float


def _to_float_array(values: pd.Series | np.ndarray | list[float]) -> np.ndarray:
    if isinstance(values, pd.Series):
        return pd.to_numeric(values, errors="coerce").to_numpy(dtype=float)
    return np.asarray(values, dtype=float)


def wilson_interval_percent(
    successes: pd.Series | np.ndarray | list[float],
    totals: pd.Series | np.ndarray | list[float],
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Vectorized Wilson interval; returns (lower, upper, width) in percent.

    Rows with a zero (or missing) total get the maximal interval 0-100.
    """
    n = _to_float_array(totals)
    k = _to_float_array(successes)

    lower = np.zeros(n.shape, dtype=float)
    upper = np.ones(n.shape, dtype=float)

    valid = np.isfinite(n) & np.isfinite(k) & (n > 0.0)
    if np.any(valid):
        n_valid = n[valid]
        k_valid = k[valid]
        p_valid = k_valid / n_valid
        z2 = WILSON_Z * WILSON_Z
        denom = 1.0 + (z2 / n_valid)
        center = (p_valid + (z2 / (2.0 * n_valid))) / denom
        margin = (
            WILSON_Z
            * np.sqrt((p_valid * (1.0 - p_valid)) / n_valid + z2 / (4.0 * n_valid * n_valid))
            / denom
        )
        low_valid = np.clip(center - margin, 0.0, 1.0)
        high_valid = np.clip(center + margin, 0.0, 1.0)
        # p == 0 and p == 1 touch the bounds exactly; keep float rounding out of them.
        low_valid = np.where(k_valid <= 0.0, 0.0, low_valid)
        high_valid = np.where(k_valid >= n_valid, 1.0, high_valid)
        lower[valid] = low_valid
        upper[valid] = high_valid

    lower = lower * 100.0
    upper = upper * 100.0
    return lower, upper, upper - lower


def wilson_interval(successes: int, total: int) -> WilsonInterval:
    if total == 0:
        return WilsonInterval(lower=0.0, upper=100.0, width=100.0)
    lower, upper, width = wilson_interval_percent([successes], [total])
    return WilsonInterval(lower=float(lower[0]), upper=float(upper[0]), width=float(width[0]))


def classify_confidence(width: float, sample_size: int) -> ConfidenceLevel:
    """Reliability label for a rate; rules are checked in order, first match wins."""
    if sample_size < INSUFFICIENT_MAX_TOTAL:
        return "insufficient"
    if sample_size >= HIGH_MIN_TOTAL and width < HIGH_MAX_WIDTH:
        return "high"
    if sample_size >= MEDIUM_MIN_TOTAL and width <= MEDIUM_MAX_WIDTH:
        return "medium"
    return "low"


def confidence_levels(
    widths: pd.Series | np.ndarray | list[float],
    totals: pd.Series | np.ndarray | list[float],
) -> np.ndarray:
    width = _to_float_array(widths)
    n = _to_float_array(totals)
    conditions = [
        ~np.isfinite(n) | (n < INSUFFICIENT_MAX_TOTAL),
        (n >= HIGH_MIN_TOTAL) & (width < HIGH_MAX_WIDTH),
        (n >= MEDIUM_MIN_TOTAL) & (width <= MEDIUM_MAX_WIDTH),
    ]
    return np.select(conditions, ["insufficient", "high", "medium"], default="low").astype(object)


def citation_rate_percent(mentioned: int, total: int) -> float:
    if total <= 0:
        return 0.0
    rate = (mentioned / total) * 100.0
    return rate if math.isfinite(rate) else 0.0


def add_interval_columns(
    table: pd.DataFrame,
    *,
    successes_column: str = "mentioned",
    total_column: str = "total",
) -> pd.DataFrame:
    """Attach rate, Wilson bounds and confidence label columns to a counts table."""
    working = table.copy()
    totals = working[total_column]
    successes = working[successes_column]
    nonzero_total = totals > 0
    working["citation_rate"] = ((successes / totals) * 100.0).where(nonzero_total, 0.0)
    lower, upper, width = wilson_interval_percent(successes=successes, totals=totals)
    working["ci_lower"] = lower
    working["ci_upper"] = upper
    working["ci_width"] = width
    working["confidence_level"] = confidence_levels(widths=width, totals=totals)
    return working
