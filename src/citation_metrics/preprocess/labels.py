from __future__ import annotations

from typing import Any

import pandas as pd

from citation_metrics.categories import UNKNOWN_LABEL

PROMPT_KEY_LENGTH = 100


def truncate_prompt(value: Any) -> str:
    """First 100 UTF-16 code units of the prompt text.

    Length is measured the way JavaScript string indices count it, so keys
    agree with ones built by web clients. A surrogate pair cut in half at the
    boundary is dropped.
    """
    if value is None or value is pd.NA or (isinstance(value, float) and pd.isna(value)):
        return ""
    text = str(value)
    if len(text) <= PROMPT_KEY_LENGTH // 2:
        return text
    encoded = text.encode("utf-16-le", errors="surrogatepass")
    if len(encoded) <= PROMPT_KEY_LENGTH * 2:
        return text
    return encoded[: PROMPT_KEY_LENGTH * 2].decode("utf-16-le", errors="ignore")


def add_group_labels(df: pd.DataFrame) -> pd.DataFrame:
    """Add prompt and model grouping keys.

    ``prompt_key`` is the filter key (empty when there is no prompt text);
    ``prompt_group`` falls back to the intent label for the per-prompt table.
    """
    working = df.copy()
    prompt_key = working["prompt_text"].map(truncate_prompt)
    intent_label = working["intent_label"].map(truncate_prompt)

    working["prompt_key"] = prompt_key
    working["prompt_group"] = (
        prompt_key.where(prompt_key != "", intent_label)
        .where(lambda s: s != "", UNKNOWN_LABEL)
    )
    model_name = working["model_name"].map(
        lambda value: "" if value is None or pd.isna(value) else str(value)
    )
    working["model_label"] = model_name.where(model_name != "", UNKNOWN_LABEL)
    working["mentioned"] = working["mentioned"].astype(bool)
    return working
